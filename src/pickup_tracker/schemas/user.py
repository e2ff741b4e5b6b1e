"""User schema definitions.

This module defines the stored User record, its public projection and the
request/response bodies of the user endpoints.
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import List, Optional

import pytz
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Role(str, Enum):
    USER = "user"
    ADMIN = "admin"


ROLES: List[str] = [r.value for r in Role]


class User(BaseModel):
    """A stored user, including the password hash. Never serialized to callers."""

    user_id: str = Field(
        description="The unique identifier for the user.",
        default_factory=lambda: uuid.uuid4().hex,
        frozen=True,
    )
    name: str
    email: str
    password_hash: str
    role: str = Field(default=Role.USER.value)
    created_at: str = Field(
        default_factory=lambda: datetime.now(pytz.utc).isoformat(timespec="microseconds")
    )

    def to_public(self) -> "PublicUser":
        return PublicUser(id=self.user_id, name=self.name, email=self.email, role=self.role)


class PublicUser(BaseModel):
    """User projection returned by the API."""

    id: str
    name: str
    email: str
    role: str


class CallerIdentity(BaseModel):
    """The id and role carried by a verified token."""

    id: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN.value


class RegisterRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: str
    email: str
    password: str
    role: Optional[str] = None
    admin_token: Optional[str] = None


class LoginRequest(BaseModel):
    email: str
    password: str


class LoginResponse(BaseModel):
    token: str
    user: PublicUser


class UpdateUserRequest(BaseModel):
    """Partial update; omitted fields are left unchanged."""

    name: Optional[str] = None
    email: Optional[str] = None
    role: Optional[str] = None


class MessageResponse(BaseModel):
    message: str
