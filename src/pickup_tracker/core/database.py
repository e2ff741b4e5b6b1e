"""Database connection and session management.

The engine is owned by a ``Database`` object that the application builds at
startup and disposes on shutdown. Request handlers get short-lived sessions
from it through ``get_db``.
"""

import logging
from pathlib import Path
from typing import Iterator

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import Session, sessionmaker

from pickup_tracker.models.base import Base

# Import models to ensure they are registered with Base.metadata
import pickup_tracker.models  # noqa: F401

logger = logging.getLogger(__name__)


class Database:
    """Process-scoped handle on the store."""

    def __init__(self, url: str):
        """Create the engine and session factory.

        Args:
            url: SQLAlchemy database URL.
        """
        self.url = url
        connect_args = {}
        parsed = make_url(url)
        if parsed.get_backend_name() == "sqlite":
            connect_args["check_same_thread"] = False
            if parsed.database and parsed.database != ":memory:":
                # Ensure data directory exists
                Path(parsed.database).parent.mkdir(parents=True, exist_ok=True)

        self.engine = create_engine(url, connect_args=connect_args)
        self.SessionLocal = sessionmaker(
            autocommit=False, autoflush=False, bind=self.engine
        )

    def init_db(self) -> None:
        """Create tables if they do not exist."""
        Base.metadata.create_all(bind=self.engine)
        logger.info("Database ready at %s", self.engine.url.render_as_string(hide_password=True))

    def session(self) -> Session:
        return self.SessionLocal()

    def dispose(self) -> None:
        self.engine.dispose()
        logger.info("Database connections released")


def get_db(request: Request) -> Iterator[Session]:
    """Dependency for getting a database session."""
    db = request.app.state.database.session()
    try:
        yield db
    finally:
        db.close()
