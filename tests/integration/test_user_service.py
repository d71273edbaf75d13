"""Tests for UserService listing, lookup and mutation."""

import uuid
from datetime import date

import pytest
import pytest_asyncio

from src.kernel.errors import ValidationError
from src.kernel.users.directory import cache_key
from src.schemas.user import UpdateUserRequest


@pytest.fixture
def alicia() -> UpdateUserRequest:
    return UpdateUserRequest(
        first_name="Alicia",
        last_name="Smith",
        date_of_birth=date(1990, 5, 17),
    )


@pytest_asyncio.fixture
async def population(auth_service, register_request):
    """Register a small directory: alice, bob and carol."""
    await auth_service.register(register_request())
    await auth_service.register(
        register_request(
            username="bob",
            email="bob@x.com",
            first_name="Bob",
            last_name="Jones",
            date_of_birth=date(1985, 1, 2),
        )
    )
    await auth_service.register(
        register_request(
            username="carol",
            email="carol@x.com",
            first_name="Carol",
            last_name="Alison",
            date_of_birth=date(2000, 12, 31),
        )
    )


class TestListUsers:
    @pytest.mark.asyncio
    async def test_no_filter_lists_everyone(self, population, user_service):
        users = await user_service.list_users()

        assert {u.username for u in users} == {"alice", "bob", "carol"}

    @pytest.mark.asyncio
    async def test_blank_name_is_no_filter(self, population, user_service):
        users = await user_service.list_users(name="   ")

        assert len(users) == 3

    @pytest.mark.asyncio
    async def test_name_matches_first_or_last_name_case_insensitively(
        self, population, user_service
    ):
        users = await user_service.list_users(name="ALI")

        # Alice by first name, Carol by last name
        assert {u.username for u in users} == {"alice", "carol"}

    @pytest.mark.asyncio
    async def test_name_without_match(self, population, user_service):
        assert await user_service.list_users(name="zed") == []

    @pytest.mark.asyncio
    async def test_date_range_is_inclusive(self, population, user_service):
        users = await user_service.list_users(
            from_date=date(1985, 1, 2),
            to_date=date(1990, 5, 17),
        )

        assert {u.username for u in users} == {"alice", "bob"}

    @pytest.mark.asyncio
    async def test_open_ended_ranges(self, population, user_service):
        after = await user_service.list_users(from_date=date(1990, 1, 1))
        before = await user_service.list_users(to_date=date(1990, 1, 1))

        assert {u.username for u in after} == {"alice", "carol"}
        assert {u.username for u in before} == {"bob"}

    @pytest.mark.asyncio
    async def test_name_and_dates_combined(self, population, user_service):
        users = await user_service.list_users(name="ali", to_date=date(1995, 1, 1))

        assert [u.username for u in users] == ["alice"]

    @pytest.mark.asyncio
    async def test_equal_bounds_allowed(self, population, user_service):
        users = await user_service.list_users(
            from_date=date(1990, 5, 17),
            to_date=date(1990, 5, 17),
        )

        assert [u.username for u in users] == ["alice"]

    @pytest.mark.asyncio
    async def test_inverted_range_rejected(self, user_service):
        with pytest.raises(ValidationError) as exc_info:
            await user_service.list_users(
                from_date=date(2000, 1, 1),
                to_date=date(1990, 1, 1),
            )

        assert exc_info.value.message == "fromDate cannot be greater than toDate"
        assert exc_info.value.status_code == 400

    @pytest.mark.asyncio
    async def test_listing_bypasses_cache(self, population, user_service, cache):
        await user_service.list_users()

        assert cache.writes == 0


class TestGetUser:
    @pytest.mark.asyncio
    async def test_direct_read(self, alice, user_service, cache):
        view = await user_service.get_user_by_id(alice.user.id)

        assert view == alice.user
        assert cache.entries == {}

    @pytest.mark.asyncio
    async def test_cached_read_matches_direct_read(self, alice, user_service):
        direct = await user_service.get_user_by_id(alice.user.id)
        cached = await user_service.get_user_by_id_cached(alice.user.id)

        assert cached == direct

    @pytest.mark.asyncio
    async def test_unknown_id(self, user_service):
        missing = uuid.uuid4()

        assert await user_service.get_user_by_id(missing) is None
        assert await user_service.get_user_by_id_cached(missing) is None


class TestUpdateUser:
    @pytest.mark.asyncio
    async def test_update_changes_fields(self, alice, user_service, alicia):
        view = await user_service.update_user(alice.user.id, alicia)

        assert view.first_name == "Alicia"
        assert view.username == "alice"
        assert view.email == "alice@x.com"
        assert view.id == alice.user.id

    @pytest.mark.asyncio
    async def test_update_invalidates_cached_entry(self, alice, user_service, cache, alicia):
        await user_service.get_user_by_id_cached(alice.user.id)
        assert cache_key(alice.user.id) in cache.entries

        await user_service.update_user(alice.user.id, alicia)

        assert cache_key(alice.user.id) not in cache.entries
        cached = await user_service.get_user_by_id_cached(alice.user.id)
        assert cached.first_name == "Alicia"

    @pytest.mark.asyncio
    async def test_update_does_not_write_cache(self, alice, user_service, cache, alicia):
        await user_service.update_user(alice.user.id, alicia)

        assert cache.writes == 0

    @pytest.mark.asyncio
    async def test_update_succeeds_with_cache_down(self, alice, user_service, cache, alicia):
        cache.fail = True

        view = await user_service.update_user(alice.user.id, alicia)

        assert view.first_name == "Alicia"

    @pytest.mark.asyncio
    async def test_update_unknown_user(self, user_service, alicia):
        assert await user_service.update_user(uuid.uuid4(), alicia) is None


class TestDeleteUser:
    @pytest.mark.asyncio
    async def test_delete_removes_from_store_and_cache(self, alice, user_service, cache):
        await user_service.get_user_by_id_cached(alice.user.id)

        assert await user_service.delete_user(alice.user.id) is True

        assert cache.entries == {}
        assert await user_service.get_user_by_id(alice.user.id) is None
        assert await user_service.get_user_by_id_cached(alice.user.id) is None

    @pytest.mark.asyncio
    async def test_delete_unknown_user(self, user_service):
        assert await user_service.delete_user(uuid.uuid4()) is False

    @pytest.mark.asyncio
    async def test_deleted_user_drops_out_of_listing(self, alice, user_service):
        await user_service.delete_user(alice.user.id)

        assert await user_service.list_users() == []

    @pytest.mark.asyncio
    async def test_freed_username_can_register_again(
        self, alice, user_service, auth_service, register_request
    ):
        await user_service.delete_user(alice.user.id)

        result = await auth_service.register(register_request())

        assert result.success is True
        assert result.user.id != alice.user.id
