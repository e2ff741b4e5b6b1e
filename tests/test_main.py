"""Tests for the command-line entry point and logging setup."""

from __future__ import annotations

import logging
from unittest.mock import patch

from pickup_tracker import main as cli
from pickup_tracker.core.database import Database
from pickup_tracker.core.logging_config import HealthCheckFilter, setup_logging
from pickup_tracker.utils.user_manager import UserManager


class TestCreateAdmin:
    def test_creates_admin_user(self, database_url):
        user_id = cli.create_admin("Root", "root@x.com", "pw", database_url=database_url)

        database = Database(database_url)
        try:
            with database.session() as db:
                user = UserManager(db).get_user_by_id(user_id)
        finally:
            database.dispose()
        assert user.role == "admin"
        assert user.email == "root@x.com"

    def test_command_prompts_for_password(self, database_url):
        with patch.object(cli, "getpass") as mock_getpass, patch.object(
            cli, "create_admin", return_value="abc"
        ) as mock_create:
            mock_getpass.getpass.side_effect = ["pw", "pw"]
            assert cli.main(["create-admin", "Root", "root@x.com"]) == 0
        mock_create.assert_called_once_with("Root", "root@x.com", "pw")

    def test_mismatched_passwords(self):
        with patch.object(cli, "getpass") as mock_getpass, patch.object(
            cli, "create_admin"
        ) as mock_create:
            mock_getpass.getpass.side_effect = ["pw", "other"]
            assert cli.main(["create-admin", "Root", "root@x.com"]) == 1
        mock_create.assert_not_called()

    def test_usage(self):
        assert cli.main([]) == 2
        assert cli.main(["frobnicate"]) == 2
        assert cli.main(["create-admin", "only-name"]) == 2


class TestLogging:
    def test_health_checks_hidden_at_info(self):
        setup_logging("INFO")
        record = logging.LogRecord(
            "uvicorn.access", logging.INFO, __file__, 0,
            '127.0.0.1:5000 - "GET /health HTTP/1.1" 200', None, None,
        )
        assert HealthCheckFilter().filter(record) is False

    def test_other_paths_kept(self):
        setup_logging("INFO")
        record = logging.LogRecord(
            "uvicorn.access", logging.INFO, __file__, 0,
            '127.0.0.1:5000 - "GET /api/requests HTTP/1.1" 200', None, None,
        )
        assert HealthCheckFilter().filter(record) is True

    def test_setup_is_idempotent(self):
        setup_logging("INFO")
        setup_logging("INFO")
        assert len(logging.getLogger().handlers) == 1
