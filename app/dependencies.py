"""FastAPI dependencies."""

from typing import Annotated
from uuid import UUID

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.config import settings
from app.core.exceptions import RateLimitException
from app.core.redis_client import RateLimiter, get_redis_client
from app.core.security import decode_access_token
from app.database import get_db, get_session_factory
from app.services.confirmation_service import ConfirmationDelivery
from app.services.notification_service import AppointmentNotifier, EmailDispatcher
from app.services.pdf_service import DocumentRenderer
from app.services.user_service import UserService

# Security
security = HTTPBearer(auto_error=False)


async def get_current_user_id(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> UUID:
    """
    Extract and validate user ID from JWT token.

    Args:
        credentials: Bearer token credentials

    Returns:
        User ID from token

    Raises:
        HTTPException: If token is invalid or expired
    """
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    token = credentials.credentials
    payload = decode_access_token(token)

    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user_id_str = payload.get("sub")
    if user_id_str is None or not isinstance(user_id_str, str):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        return UUID(user_id_str)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid user ID format",
            headers={"WWW-Authenticate": "Bearer"},
        )


async def get_current_user(
    user_id: Annotated[UUID, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict:
    """
    Get current user from database.

    Args:
        user_id: User ID from JWT token
        db: Database session

    Returns:
        User data from database

    Raises:
        HTTPException: If user not found or inactive
    """
    user = await UserService.get_user_by_id(db, user_id)

    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not user["is_active"]:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is deactivated",
        )

    return user


async def require_admin(user: Annotated[dict, Depends(get_current_user)]) -> dict:
    """
    Allow only admin accounts through.

    Raises:
        HTTPException: 403 if the caller is not an admin
    """
    if user["role"] != "admin":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return user


def enforce_public_rate_limit(request: Request) -> None:
    """Throttle the unauthenticated endpoints per client IP."""
    client_ip = request.client.host if request.client else "unknown"
    limiter = RateLimiter(get_redis_client())

    if not limiter.check_rate_limit(
        f"rate_limit:public:{client_ip}",
        limit=settings.rate_limit_per_minute,
    ):
        raise RateLimitException("Too many requests, please try again later")


def get_pdf_renderer() -> DocumentRenderer:
    """PDF renderer used by the confirmation pipeline."""
    return DocumentRenderer()


def get_email_dispatcher() -> EmailDispatcher:
    """Brevo email client built from settings."""
    return EmailDispatcher.from_settings()


def get_appointment_notifier(
    dispatcher: Annotated[EmailDispatcher, Depends(get_email_dispatcher)],
) -> AppointmentNotifier:
    """Appointment email composer."""
    return AppointmentNotifier(dispatcher)


def get_confirmation_delivery(
    session_factory: Annotated[async_sessionmaker[AsyncSession], Depends(get_session_factory)],
    renderer: Annotated[DocumentRenderer, Depends(get_pdf_renderer)],
    notifier: Annotated[AppointmentNotifier, Depends(get_appointment_notifier)],
) -> ConfirmationDelivery:
    """Detached slip delivery, bound to its own session factory."""
    return ConfirmationDelivery(session_factory, renderer, notifier)


# Type aliases for dependency injection
DatabaseSession = Annotated[AsyncSession, Depends(get_db)]
CurrentUserId = Annotated[UUID, Depends(get_current_user_id)]
CurrentUser = Annotated[dict, Depends(get_current_user)]
AdminUser = Annotated[dict, Depends(require_admin)]
Notifier = Annotated[AppointmentNotifier, Depends(get_appointment_notifier)]
Delivery = Annotated[ConfirmationDelivery, Depends(get_confirmation_delivery)]
PublicRateLimit = Depends(enforce_public_rate_limit)
