"""Authentication routes.

This module handles HTTP endpoints for user registration and login.
"""

import logging

from fastapi import APIRouter, status

from pickup_tracker.core.dependencies import SettingsDep, UserManagerDep
from pickup_tracker.core.exceptions import AuthzError
from pickup_tracker.core.security import create_access_token
from pickup_tracker.schemas.user import (
    LoginRequest,
    LoginResponse,
    PublicUser,
    RegisterRequest,
    Role,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users", tags=["Auth"])


@router.post(
    "/register",
    response_model=PublicUser,
    status_code=status.HTTP_201_CREATED,
    summary="Register a user",
)
def register(
    req: RegisterRequest,
    user_manager: UserManagerDep,
    settings: SettingsDep,
) -> PublicUser:
    """Register a new user.

    Registering as admin requires ``adminToken`` when the service has an
    admin registration token configured.

    Args:
        req: Registration request with name, email, password and role.
        user_manager: Injected UserManager instance.
        settings: Application settings.

    Returns:
        The new user without the password hash.

    Raises:
        ValidationError: If a field is missing, malformed or the email is taken.
        AuthzError: If the admin registration token does not match.
    """
    expected = settings.admin_registration_token
    if req.role == Role.ADMIN.value and expected and req.admin_token != expected:
        logger.warning("Admin registration rejected: token mismatch")
        raise AuthzError("Invalid admin token")

    user = user_manager.create_user(
        name=req.name,
        email=req.email,
        password=req.password,
        role=req.role,
    )
    return user.to_public()


@router.post("/login", response_model=LoginResponse, summary="Log in")
def login(req: LoginRequest, user_manager: UserManagerDep) -> LoginResponse:
    """Login with email and password.

    Returns:
        LoginResponse with the bearer token and public user.

    Raises:
        InvalidCredentialsError: If the email is unknown or the password is wrong.
    """
    user = user_manager.authenticate(req.email, req.password)
    token = create_access_token(user)
    return LoginResponse(token=token, user=user.to_public())
