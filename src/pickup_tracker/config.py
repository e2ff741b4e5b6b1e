"""Configuration module for the pickup request tracker.

This module provides centralized configuration management, including the
database location, API server settings, token signing and lifecycle policies.
All configuration values can be overridden via environment variables.
"""

import os
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from pickup_tracker.core.exceptions import ConfigurationError

# Load environment variables from .env file
load_dotenv()

DATA_DIR_NAME = "data"


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: int, minimum: int, maximum: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from e
    if not minimum <= value <= maximum:
        raise ConfigurationError(f"{name} must be between {minimum} and {maximum}, got {value}")
    return value


def _default_database_url() -> str:
    """SQLite file under DATA_DIR, or ./data relative to the working directory."""
    data_dir = Path(os.getenv("DATA_DIR") or Path.cwd() / DATA_DIR_NAME)
    return f"sqlite:///{data_dir.resolve() / 'pickup_tracker.db'}"


# --- Database Configuration ---

DATABASE_URL: str = os.getenv("DATABASE_URL") or _default_database_url()

# --- API Server Configuration ---

API_HOST: str = os.getenv("API_HOST", "0.0.0.0")
API_PORT: int = _env_int("API_PORT", 5000, 1, 65535)

# CORS allowed origins (comma-separated list, "*" allows any origin)
_CORS_ALLOWED_ORIGINS_STR: str = os.getenv("CORS_ALLOWED_ORIGINS", "*")
CORS_ALLOWED_ORIGINS: List[str] = [
    origin.strip()
    for origin in _CORS_ALLOWED_ORIGINS_STR.split(",")
    if origin.strip()
]

# --- Authentication Configuration ---

DEFAULT_JWT_SECRET_KEY = "your-secret-key-change-in-production"
JWT_SECRET_KEY: str = os.getenv("JWT_SECRET_KEY", DEFAULT_JWT_SECRET_KEY)
JWT_ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES: int = _env_int(
    "ACCESS_TOKEN_EXPIRE_MINUTES", 60 * 24, 1, 60 * 24 * 365  # default 1 day
)

# Bcrypt rounds for password hashing (higher = more secure but slower)
BCRYPT_ROUNDS: int = _env_int("BCRYPT_ROUNDS", 12, 4, 31)

# When set, self-registration as admin requires this token
ADMIN_REGISTRATION_TOKEN: Optional[str] = os.getenv("ADMIN_REGISTRATION_TOKEN") or None

# --- Lifecycle Policy Configuration ---

# Whether identity checks gate the request endpoints at all
REQUIRE_AUTH: bool = _env_flag("REQUIRE_AUTH", "true")

# Restrict status changes to pending -> scheduled -> completed, one step at a time
ENFORCE_STATUS_ORDER: bool = _env_flag("ENFORCE_STATUS_ORDER", "false")

# Only the owner or an admin may delete a request
DELETE_REQUIRES_OWNERSHIP: bool = _env_flag("DELETE_REQUIRES_OWNERSHIP", "false")

# --- Logging Configuration ---

LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()


class ServiceSettings(BaseModel):
    """Per-application settings handed to the app factory.

    Defaults come from the environment; tests build their own instances.
    """

    database_url: str = Field(default=DATABASE_URL)
    require_auth: bool = Field(default=REQUIRE_AUTH)
    enforce_status_order: bool = Field(default=ENFORCE_STATUS_ORDER)
    delete_requires_ownership: bool = Field(default=DELETE_REQUIRES_OWNERSHIP)
    admin_registration_token: Optional[str] = Field(default=ADMIN_REGISTRATION_TOKEN)
    cors_allowed_origins: List[str] = Field(
        default_factory=lambda: list(CORS_ALLOWED_ORIGINS)
    )
