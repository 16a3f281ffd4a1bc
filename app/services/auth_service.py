"""Authentication service for password login and JWT issuance."""

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import BadRequestException, ForbiddenException, UnauthorizedException
from app.core.security import create_access_token, verify_password
from app.schemas.auth import LoginRequest, LoginResponse, RegisterRequest
from app.schemas.users import UserResponse
from app.services.user_service import UserService

logger = structlog.get_logger(__name__)


class AuthService:
    """Registers patients and exchanges credentials for access tokens."""

    def __init__(self, db: AsyncSession):
        """Initialize service with database session."""
        self.db = db

    @staticmethod
    def _issue(user: dict) -> LoginResponse:
        token = create_access_token(data={"sub": str(user["id"]), "role": user["role"]})
        return LoginResponse(access_token=token, user=UserResponse.model_validate(user))

    async def register(self, data: RegisterRequest) -> LoginResponse:
        """
        Register a patient account and log it in.

        Raises:
            BadRequestException: Passwords differ or the email is taken
        """
        if data.password.strip() != data.confirm_password.strip():
            raise BadRequestException("Passwords do not match")

        if await UserService.get_user_by_email(self.db, data.email):
            raise BadRequestException("User already exists with this email")

        user = await UserService.create_user(
            self.db,
            full_name=data.name.strip(),
            email=data.email,
            password=data.password.strip(),
            phone=data.mobile,
        )
        logger.info("user_registered", user_id=str(user["id"]))
        return self._issue(user)

    async def login(self, data: LoginRequest) -> LoginResponse:
        """
        Verify credentials and issue an access token.

        Raises:
            UnauthorizedException: Unknown email or wrong password
            ForbiddenException: Account deactivated
        """
        user = await UserService.get_user_by_email(self.db, data.email)
        if not user or not verify_password(data.password.strip(), user["password_hash"]):
            raise UnauthorizedException("Invalid email or password")

        if not user["is_active"]:
            raise ForbiddenException("User account is deactivated")

        return self._issue(user)
