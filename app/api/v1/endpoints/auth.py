"""Authentication endpoints."""

from fastapi import APIRouter, status

from app.dependencies import CurrentUser, DatabaseSession
from app.schemas.auth import LoginRequest, LoginResponse, RegisterRequest
from app.schemas.users import UserResponse
from app.services.auth_service import AuthService

router = APIRouter()


@router.post(
    "/register",
    response_model=LoginResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["Authentication"],
    summary="Register a patient account",
)
async def register(request: RegisterRequest, db: DatabaseSession) -> LoginResponse:
    """
    Create a patient account and return an access token for it.

    Args:
        request: Name, email, mobile and password (entered twice)
        db: Database session

    Returns:
        Access token and the new user

    Raises:
        BadRequestException: Passwords differ or the email is already registered
    """
    return await AuthService(db).register(request)


@router.post(
    "/login",
    response_model=LoginResponse,
    status_code=status.HTTP_200_OK,
    tags=["Authentication"],
    summary="Login with email and password",
)
async def login(request: LoginRequest, db: DatabaseSession) -> LoginResponse:
    """Exchange credentials for a bearer token."""
    return await AuthService(db).login(request)


@router.get(
    "/me",
    response_model=UserResponse,
    tags=["Authentication"],
    summary="Current user",
)
async def me(current_user: CurrentUser) -> UserResponse:
    return UserResponse.model_validate(current_user)
