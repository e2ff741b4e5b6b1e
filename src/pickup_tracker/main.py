"""Command-line entry point.

Usage:
    python -m pickup_tracker.main serve
    python -m pickup_tracker.main create-admin <name> <email>

``create-admin`` prompts for a password and stores an admin user directly,
which is how the first admin is created when admin self-registration is
locked behind ADMIN_REGISTRATION_TOKEN.
"""

import getpass
import logging
import sys
from typing import List, Optional

from pickup_tracker.config import API_HOST, API_PORT, DATABASE_URL
from pickup_tracker.core.database import Database
from pickup_tracker.core.exceptions import PickupTrackerError
from pickup_tracker.core.logging_config import setup_logging
from pickup_tracker.schemas.user import Role
from pickup_tracker.utils.user_manager import UserManager

logger = logging.getLogger(__name__)

USAGE = (
    "usage:\n"
    "  python -m pickup_tracker.main serve\n"
    "  python -m pickup_tracker.main create-admin <name> <email>"
)


def create_admin(name: str, email: str, password: str, database_url: str = DATABASE_URL) -> str:
    """Store an admin user and return its id."""
    database = Database(database_url)
    try:
        database.init_db()
        with database.session() as db:
            user = UserManager(db).create_user(
                name=name, email=email, password=password, role=Role.ADMIN.value
            )
        return user.user_id
    finally:
        database.dispose()


def serve() -> None:
    import uvicorn

    print(f"Backend running at http://{API_HOST}:{API_PORT}")
    uvicorn.run("pickup_tracker.app:app", host=API_HOST, port=API_PORT)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = sys.argv[1:] if argv is None else argv
    setup_logging()

    if not args:
        print(USAGE)
        return 2

    command = args[0]
    if command == "serve":
        serve()
        return 0

    if command == "create-admin":
        if len(args) != 3:
            print(USAGE)
            return 2
        password = getpass.getpass("Password: ")
        if password != getpass.getpass("Repeat password: "):
            print("Passwords do not match.")
            return 1
        try:
            user_id = create_admin(args[1], args[2], password)
        except PickupTrackerError as e:
            logger.error("Could not create admin: %s", e)
            print(f"Error: {e}")
            return 1
        print(f"Created admin {args[2]} (id {user_id})")
        return 0

    print(f"Unknown command: {command}\n{USAGE}")
    return 2


if __name__ == "__main__":
    sys.exit(main())
