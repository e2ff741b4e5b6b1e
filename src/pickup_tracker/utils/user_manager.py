"""User management utilities.

This module provides user management functionality including user storage,
password hashing, credential checks and admin-side user edits.
"""

import logging
import re
from typing import List, Optional

import bcrypt
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from pickup_tracker.config import BCRYPT_ROUNDS
from pickup_tracker.core.exceptions import (
    InternalError,
    InvalidCredentialsError,
    UserAlreadyExistsError,
    UserNotFoundError,
    ValidationError,
)
from pickup_tracker.models.user import UserModel
from pickup_tracker.schemas.user import ROLES, PublicUser, Role, User
from pickup_tracker.utils.converters import model_to_user, user_to_model

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

# bcrypt only looks at the first 72 bytes
BCRYPT_MAX_BYTES = 72


def _require_text(field: str, value: Optional[str]) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(f"{field} is required")
    return str(value).strip()


def _check_email(email: str) -> str:
    email = _require_text("email", email)
    if not EMAIL_PATTERN.match(email):
        raise ValidationError(f"Invalid email: {email}")
    return email


def _check_role(role: str) -> str:
    if role not in ROLES:
        raise ValidationError(
            f"Invalid role: {role}. Must be one of: {', '.join(ROLES)}."
        )
    return role


class UserManager:
    """Manages user data persistence and operations using SQLAlchemy."""

    def __init__(self, db: Session, bcrypt_rounds: int = BCRYPT_ROUNDS):
        """Initialize UserManager.

        Args:
            db: SQLAlchemy Session.
            bcrypt_rounds: Work factor for new password hashes.
        """
        self.db = db
        self.bcrypt_rounds = bcrypt_rounds

    def hash_password(self, password: str) -> str:
        """Hash a password using bcrypt.

        Args:
            password: Plain text password.

        Returns:
            Hashed password (bcrypt hash string).
        """
        password_bytes = password.encode("utf-8")[:BCRYPT_MAX_BYTES]
        salt = bcrypt.gensalt(rounds=self.bcrypt_rounds)
        return bcrypt.hashpw(password_bytes, salt).decode("utf-8")

    def verify_password(self, plain_password: str, hashed_password: str) -> bool:
        """Verify a password against a bcrypt hash.

        Args:
            plain_password: Plain text password to verify.
            hashed_password: Bcrypt hash string to verify against.

        Returns:
            True if password matches, False otherwise.
        """
        password_bytes = plain_password.encode("utf-8")[:BCRYPT_MAX_BYTES]
        try:
            return bcrypt.checkpw(password_bytes, hashed_password.encode("utf-8"))
        except ValueError as e:
            # Malformed stored hash
            logger.error("Password verification error: %s", e)
            return False

    def _commit(self, email: Optional[str] = None) -> None:
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            if email is not None:
                raise UserAlreadyExistsError(email) from e
            logger.error("User commit failed: %s", e)
            raise InternalError() from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("User commit failed: %s", e)
            raise InternalError() from e

    def _get_model(self, user_id: str) -> UserModel:
        model = self.db.query(UserModel).filter(UserModel.user_id == user_id).first()
        if not model:
            raise UserNotFoundError(user_id)
        return model

    def create_user(
        self,
        name: str,
        email: str,
        password: str,
        role: Optional[str] = None,
    ) -> User:
        """Create a new user.

        Args:
            name: Display name.
            email: Email address, unique across users.
            password: Plain text password.
            role: 'user' or 'admin'; defaults to 'user'.

        Returns:
            Created User object.

        Raises:
            ValidationError: If a field is missing or malformed.
            UserAlreadyExistsError: If the email is already registered.
        """
        name = _require_text("name", name)
        email = _check_email(email)
        if password is None or password == "":
            raise ValidationError("password is required")
        role = _check_role(role or Role.USER.value)

        if self.get_user_by_email(email) is not None:
            raise UserAlreadyExistsError(email)

        user = User(
            name=name,
            email=email,
            password_hash=self.hash_password(password),
            role=role,
        )
        # The unique index still catches a concurrent registration
        self.db.add(user_to_model(user))
        self._commit(email=email)

        logger.info("Created user %s with role %s", user.user_id, role)
        return user

    def authenticate(self, email: str, password: str) -> User:
        """Check a login attempt.

        Args:
            email: Email the user registered with.
            password: Plain text password.

        Returns:
            The matching User.

        Raises:
            InvalidCredentialsError: If the email is unknown or the password
                does not match.
        """
        user = self.get_user_by_email(email)
        if user is None or not self.verify_password(password, user.password_hash):
            logger.warning("Rejected login attempt")
            raise InvalidCredentialsError()
        return user

    def get_user_by_email(self, email: str) -> Optional[User]:
        model = self.db.query(UserModel).filter(UserModel.email == email).first()
        if model:
            return model_to_user(model)
        return None

    def get_user_by_id(self, user_id: str) -> User:
        """Get a user by user ID.

        Raises:
            UserNotFoundError: If no user has this ID.
        """
        return model_to_user(self._get_model(user_id))

    def list_users(self) -> List[PublicUser]:
        """List all users, newest first, without password hashes."""
        models = self.db.query(UserModel).order_by(UserModel.created_at.desc()).all()
        return [model_to_user(m).to_public() for m in models]

    def update_user(
        self,
        user_id: str,
        name: Optional[str] = None,
        email: Optional[str] = None,
        role: Optional[str] = None,
    ) -> PublicUser:
        """Apply an admin edit. Fields left as None are unchanged.

        Raises:
            UserNotFoundError: If no user has this ID.
            ValidationError: If a provided field is blank or malformed.
            UserAlreadyExistsError: If the new email belongs to another user.
        """
        model = self._get_model(user_id)

        # Check every field before touching the model
        if name is not None:
            name = _require_text("name", name)
        if role is not None:
            role = _check_role(role)
        if email is not None:
            email = _check_email(email)
            if email != model.email and self.get_user_by_email(email) is not None:
                raise UserAlreadyExistsError(email)

        if name is not None:
            model.name = name
        if role is not None:
            model.role = role
        if email is not None:
            model.email = email

        self._commit(email=email)
        self.db.refresh(model)
        logger.info("Updated user %s", user_id)
        return model_to_user(model).to_public()

    def delete_user(self, user_id: str) -> None:
        """Delete a user. Their pickup requests keep the stale reference.

        Raises:
            UserNotFoundError: If no user has this ID.
        """
        model = self._get_model(user_id)
        self.db.delete(model)
        self._commit()
        logger.info("Deleted user %s", user_id)
