"""
Authentication endpoints.
"""

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from src.api.deps import AuthServiceDep
from src.logging_config import get_logger
from src.schemas.auth import AuthResult, LoginRequest, RegisterRequest

router = APIRouter()
logger = get_logger(__name__)


@router.post(
    "/register",
    response_model=AuthResult,
    responses={400: {"model": AuthResult}},
)
async def register(data: RegisterRequest, auth_service: AuthServiceDep):
    """
    Register a new user account.

    Returns a signed access token and the new user's profile.
    """
    logger.info("Register request", extra={"username": data.username})

    result = await auth_service.register(data)
    if not result.success:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=result.model_dump(mode="json"),
        )
    return result


@router.post(
    "/login",
    response_model=AuthResult,
    responses={401: {"model": AuthResult}},
)
async def login(data: LoginRequest, auth_service: AuthServiceDep):
    """
    Authenticate by username and password.
    """
    logger.info("Login request", extra={"username": data.username})

    result = await auth_service.login(data)
    if not result.success:
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content=result.model_dump(mode="json"),
        )
    return result
