"""User administration routes (admin only)."""

from typing import List

from fastapi import APIRouter

from pickup_tracker.core.dependencies import AdminDep, UserManagerDep
from pickup_tracker.schemas.user import MessageResponse, PublicUser, UpdateUserRequest

router = APIRouter(prefix="/api/users", tags=["Users"])


@router.get("", response_model=List[PublicUser], summary="List users")
def list_users(user_manager: UserManagerDep, admin: AdminDep) -> List[PublicUser]:
    return user_manager.list_users()


@router.put("/{user_id}", response_model=PublicUser, summary="Update a user")
def update_user(
    user_id: str,
    req: UpdateUserRequest,
    user_manager: UserManagerDep,
    admin: AdminDep,
) -> PublicUser:
    """Update a user's name, email or role. Omitted fields are kept."""
    return user_manager.update_user(
        user_id, name=req.name, email=req.email, role=req.role
    )


@router.delete("/{user_id}", response_model=MessageResponse, summary="Delete a user")
def delete_user(
    user_id: str,
    user_manager: UserManagerDep,
    admin: AdminDep,
) -> MessageResponse:
    """Delete a user. Their pickup requests are left in place."""
    user_manager.delete_user(user_id)
    return MessageResponse(message="User deleted")
