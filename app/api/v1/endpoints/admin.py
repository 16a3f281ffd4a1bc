"""Admin-only account management endpoints."""

from uuid import UUID

import structlog
from fastapi import APIRouter, Response, status

from app.core.exceptions import NotFoundException
from app.dependencies import AdminUser, DatabaseSession
from app.schemas.users import UserResponse
from app.services.user_service import UserService

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.get(
    "/users",
    response_model=list[UserResponse],
    summary="List all users (admin only)",
)
async def list_all_users(
    _admin: AdminUser,
    db: DatabaseSession,
) -> list[UserResponse]:
    """List every registered account, newest first."""
    return [UserResponse.model_validate(user) for user in await UserService.list_users(db)]


@router.delete(
    "/users/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete user (admin only)",
)
async def delete_user(
    user_id: UUID,
    admin: AdminUser,
    db: DatabaseSession,
) -> Response:
    """
    Permanently delete an account.

    Args:
        user_id: Account to remove
        admin: Authenticated admin
        db: Database session

    Raises:
        NotFoundException: If no account has this ID
    """
    if not await UserService.delete_user(db, user_id):
        raise NotFoundException("User not found")

    logger.info("user_deleted", user_id=str(user_id), admin_id=str(admin["id"]))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
