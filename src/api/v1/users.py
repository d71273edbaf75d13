"""
User directory endpoints. All routes require a valid bearer token.
"""

import uuid
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from src.api.deps import UserServiceDep, get_current_claims
from src.kernel.errors import NotFound
from src.logging_config import get_logger
from src.schemas.common import ApiResponse
from src.schemas.user import UpdateUserRequest, UserView

router = APIRouter(dependencies=[Depends(get_current_claims)])
logger = get_logger(__name__)


@router.get("", response_model=ApiResponse[List[UserView]])
async def list_users(
    user_service: UserServiceDep,
    name: Optional[str] = Query(None, max_length=100),
    from_date: Optional[date] = Query(None, alias="fromDate"),
    to_date: Optional[date] = Query(None, alias="toDate"),
):
    """
    List users, optionally filtered by name and date-of-birth range.

    Never served from cache.
    """
    logger.info(
        "List users",
        extra={"name_filter": name, "from_date": str(from_date), "to_date": str(to_date)},
    )
    users = await user_service.list_users(name, from_date, to_date)
    return ApiResponse[List[UserView]](data=users)


@router.get("/{user_id}", response_model=ApiResponse[UserView])
async def get_user(user_id: uuid.UUID, user_service: UserServiceDep):
    """Get a user directly from the store."""
    logger.info("Get user", extra={"user_id": str(user_id)})
    user = await user_service.get_user_by_id(user_id)
    if user is None:
        raise NotFound()
    return ApiResponse[UserView](data=user)


@router.get("/{user_id}/cached", response_model=ApiResponse[UserView])
async def get_user_cached(user_id: uuid.UUID, user_service: UserServiceDep):
    """Get a user through the cache."""
    logger.info("Get user (cached)", extra={"user_id": str(user_id)})
    user = await user_service.get_user_by_id_cached(user_id)
    if user is None:
        raise NotFound()
    return ApiResponse[UserView](data=user)


@router.put("/{user_id}", response_model=ApiResponse[UserView])
async def update_user(
    user_id: uuid.UUID,
    data: UpdateUserRequest,
    user_service: UserServiceDep,
):
    """Update a user's names and date of birth."""
    logger.info("Update user", extra={"user_id": str(user_id)})
    user = await user_service.update_user(user_id, data)
    if user is None:
        raise NotFound()
    return ApiResponse[UserView](message="User updated successfully", data=user)


@router.delete("/{user_id}", response_model=ApiResponse[None])
async def delete_user(user_id: uuid.UUID, user_service: UserServiceDep):
    """Delete a user."""
    logger.info("Delete user", extra={"user_id": str(user_id)})
    if not await user_service.delete_user(user_id):
        raise NotFound()
    return ApiResponse[None](message="User deleted successfully")
