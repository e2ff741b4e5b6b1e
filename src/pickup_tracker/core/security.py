"""Token issuing and verification.

Tokens are HS256 JWTs carrying the user's id and role. Verification never
touches the store, so a role change only takes effect once the user logs in
again.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional

import pytz
from jose import JWTError, jwt

from pickup_tracker.config import (
    ACCESS_TOKEN_EXPIRE_MINUTES,
    DEFAULT_JWT_SECRET_KEY,
    JWT_ALGORITHM,
    JWT_SECRET_KEY,
)
from pickup_tracker.core.exceptions import AuthError, AuthzError
from pickup_tracker.schemas.user import CallerIdentity, Role, User

logger = logging.getLogger(__name__)

if JWT_SECRET_KEY == DEFAULT_JWT_SECRET_KEY:
    logger.warning("JWT_SECRET_KEY is not set; using the development placeholder")


def create_access_token(
    user: User,
    expires_delta: Optional[timedelta] = None,
    secret_key: str = JWT_SECRET_KEY,
) -> str:
    """Create a JWT access token for a user.

    Args:
        user: The user the token identifies.
        expires_delta: Optional expiration time delta.
        secret_key: Signing secret.

    Returns:
        Encoded JWT token string.
    """
    if expires_delta is None:
        expires_delta = timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode = {
        "id": user.user_id,
        "role": user.role,
        "exp": datetime.now(pytz.utc) + expires_delta,
    }
    return jwt.encode(to_encode, secret_key, algorithm=JWT_ALGORITHM)


def verify_token(token: Optional[str], secret_key: str = JWT_SECRET_KEY) -> CallerIdentity:
    """Verify a token and extract the caller identity.

    Args:
        token: Raw bearer token, or None when the header was absent.
        secret_key: Signing secret.

    Returns:
        CallerIdentity with the id and role embedded at login.

    Raises:
        AuthError: If the token is missing, malformed, tampered or expired.
    """
    if not token:
        raise AuthError("No token")
    try:
        payload = jwt.decode(token, secret_key, algorithms=[JWT_ALGORITHM])
    except JWTError as e:
        logger.debug("Token rejected: %s", e)
        raise AuthError("Invalid token") from e

    user_id = payload.get("id")
    role = payload.get("role")
    if not user_id or not role:
        raise AuthError("Invalid token")
    return CallerIdentity(id=user_id, role=role)


def require_role(identity: CallerIdentity, role: str = Role.ADMIN.value) -> None:
    """Raise AuthzError unless the caller holds ``role``."""
    if identity.role != role:
        raise AuthzError(f"{role.capitalize()} only")
