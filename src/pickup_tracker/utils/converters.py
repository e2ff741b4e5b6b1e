"""Conversions between ORM models and pydantic schemas."""

from typing import Optional

from pickup_tracker.models.pickup_request import PickupRequestModel
from pickup_tracker.models.user import UserModel
from pickup_tracker.schemas.pickup_request import PickupRequest
from pickup_tracker.schemas.user import User


def user_to_model(user: User) -> UserModel:
    return UserModel(
        user_id=user.user_id,
        name=user.name,
        email=user.email,
        password_hash=user.password_hash,
        role=user.role,
        created_at=user.created_at,
    )


def model_to_user(model: UserModel) -> User:
    return User(
        user_id=model.user_id,
        name=model.name,
        email=model.email,
        password_hash=model.password_hash,
        role=model.role,
        created_at=model.created_at,
    )


def model_to_pickup_request(
    model: PickupRequestModel,
    user_name: Optional[str] = None,
    updated_by_name: Optional[str] = None,
) -> PickupRequest:
    return PickupRequest(
        id=model.request_id,
        user_id=model.user_id,
        material_type=model.material_type,
        quantity=model.quantity,
        pickup_address=model.pickup_address,
        status=model.status,
        updated_by=model.updated_by,
        created_at=model.created_at,
        updated_at=model.updated_at,
        user_name=user_name,
        updated_by_name=updated_by_name,
    )
