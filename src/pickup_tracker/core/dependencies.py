"""Dependency injection module for FastAPI.

This module provides dependency injection functions for FastAPI routes:
request-scoped managers and the caller identity taken from the bearer token.
"""

from typing import Annotated, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from pickup_tracker.config import ServiceSettings
from pickup_tracker.core.database import get_db
from pickup_tracker.core.security import require_role, verify_token
from pickup_tracker.schemas.user import CallerIdentity, Role
from pickup_tracker.utils.request_manager import LifecyclePolicy, RequestManager
from pickup_tracker.utils.user_manager import UserManager

# Missing headers are reported as "No token" by verify_token, not by FastAPI
security = HTTPBearer(auto_error=False)


def get_settings(request: Request) -> ServiceSettings:
    return request.app.state.settings


def get_user_manager(db: Session = Depends(get_db)) -> UserManager:
    """Get UserManager instance with request-scoped DB session.

    Args:
        db: Database session.

    Returns:
        UserManager instance.
    """
    return UserManager(db)


def get_request_manager(
    db: Session = Depends(get_db),
    settings: ServiceSettings = Depends(get_settings),
) -> RequestManager:
    """Get RequestManager instance with request-scoped DB session.

    Args:
        db: Database session.
        settings: Application settings carrying the lifecycle switches.

    Returns:
        RequestManager instance.
    """
    policy = LifecyclePolicy(
        require_auth=settings.require_auth,
        enforce_status_order=settings.enforce_status_order,
        delete_requires_ownership=settings.delete_requires_ownership,
    )
    return RequestManager(db, policy)


def get_caller(
    settings: ServiceSettings = Depends(get_settings),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Optional[CallerIdentity]:
    """Verify the bearer token.

    Returns None without looking at the header when identities are disabled.

    Raises:
        AuthError: If identities are enabled and the token is missing or invalid.
    """
    if not settings.require_auth:
        return None
    return verify_token(credentials.credentials if credentials else None)


def get_admin(
    caller: Optional[CallerIdentity] = Depends(get_caller),
) -> Optional[CallerIdentity]:
    """Like get_caller, but also requires the admin role."""
    if caller is not None:
        require_role(caller, Role.ADMIN.value)
    return caller


# Type aliases for dependency injection
UserManagerDep = Annotated[UserManager, Depends(get_user_manager)]
RequestManagerDep = Annotated[RequestManager, Depends(get_request_manager)]
SettingsDep = Annotated[ServiceSettings, Depends(get_settings)]
CallerDep = Annotated[Optional[CallerIdentity], Depends(get_caller)]
AdminDep = Annotated[Optional[CallerIdentity], Depends(get_admin)]
