"""Tests for RequestManager lifecycle rules."""

from __future__ import annotations

from unittest.mock import patch

import pytest
from sqlalchemy.exc import SQLAlchemyError

from pickup_tracker.core.exceptions import (
    AuthError,
    AuthzError,
    InternalError,
    RequestNotFoundError,
    ValidationError,
)
from pickup_tracker.models.pickup_request import PickupRequestModel
from pickup_tracker.schemas.pickup_request import MATERIAL_TYPES, RequestFilter
from pickup_tracker.schemas.user import CallerIdentity
from pickup_tracker.utils.request_manager import LifecyclePolicy, RequestManager
from pickup_tracker.utils.user_manager import UserManager


@pytest.fixture
def users(db_session):
    manager = UserManager(db_session, bcrypt_rounds=4)
    al = manager.create_user("Al", "al@x.com", "pw1")
    bea = manager.create_user("Bea", "bea@x.com", "pw2")
    root = manager.create_user("Root", "root@x.com", "pw3", role="admin")
    return {
        "al": CallerIdentity(id=al.user_id, role=al.role),
        "bea": CallerIdentity(id=bea.user_id, role=bea.role),
        "admin": CallerIdentity(id=root.user_id, role=root.role),
    }


@pytest.fixture
def manager(db_session):
    return RequestManager(db_session)


def _submit(manager, caller, material="plastic"):
    return manager.create_request(caller, material, "2 bags", "1 Main St")


class TestCreateRequest:
    def test_new_request_is_pending(self, manager, users):
        req = _submit(manager, users["al"])
        assert req.status == "pending"
        assert req.user_id == users["al"].id
        assert req.updated_by is None
        assert req.created_at == req.updated_at
        assert req.user_name == "Al"

    @pytest.mark.parametrize("material", MATERIAL_TYPES)
    def test_every_material_type_is_accepted(self, manager, users, material):
        assert _submit(manager, users["al"], material).material_type == material

    def test_unknown_material_is_rejected(self, manager, users, db_session):
        with pytest.raises(ValidationError, match="Invalid materialType"):
            _submit(manager, users["al"], "uranium")
        assert db_session.query(PickupRequestModel).count() == 0

    def test_blank_address_is_rejected(self, manager, users):
        with pytest.raises(ValidationError, match="pickupAddress"):
            manager.create_request(users["al"], "paper", "1 box", "   ")

    def test_duplicates_are_allowed(self, manager, users):
        first = _submit(manager, users["al"])
        second = _submit(manager, users["al"])
        assert first.id != second.id

    def test_caller_required_when_auth_enabled(self, manager):
        with pytest.raises(AuthError):
            _submit(manager, None)

    def test_anonymous_when_auth_disabled(self, db_session):
        manager = RequestManager(db_session, LifecyclePolicy(require_auth=False))
        req = _submit(manager, None)
        assert req.user_id is None
        assert req.user_name is None


class TestListRequests:
    def test_newest_first(self, manager, users):
        ids = [_submit(manager, users["al"]).id for _ in range(3)]
        listed = manager.list_requests(users["al"])
        assert [r.id for r in listed] == list(reversed(ids))

    def test_filters(self, manager, users):
        mine = _submit(manager, users["al"])
        theirs = _submit(manager, users["bea"])
        manager.update_status(users["admin"], theirs.id, "scheduled")

        by_user = manager.list_requests(users["al"], RequestFilter(user_id=users["bea"].id))
        assert [r.id for r in by_user] == [theirs.id]

        pending = manager.list_requests(users["al"], RequestFilter(status="pending"))
        assert [r.id for r in pending] == [mine.id]

        both = manager.list_requests(
            users["al"], RequestFilter(user_id=users["bea"].id, status="pending")
        )
        assert both == []

    def test_no_completed_requests(self, manager, users):
        _submit(manager, users["al"])
        assert manager.list_requests(users["al"], RequestFilter(status="completed")) == []

    def test_names_are_joined(self, manager, users):
        req = _submit(manager, users["al"])
        manager.update_status(users["admin"], req.id, "scheduled")
        [listed] = manager.list_requests(users["bea"])
        assert listed.user_name == "Al"
        assert listed.updated_by_name == "Root"

    def test_dangling_owner_keeps_request(self, manager, users, db_session):
        req = _submit(manager, users["al"])
        UserManager(db_session).delete_user(users["al"].id)
        [listed] = manager.list_requests(users["bea"])
        assert listed.id == req.id
        assert listed.user_id == users["al"].id
        assert listed.user_name is None


class TestUpdateStatus:
    def test_admin_sets_status(self, manager, users):
        req = _submit(manager, users["al"])
        updated = manager.update_status(users["admin"], req.id, "scheduled")
        assert updated.status == "scheduled"
        assert updated.updated_by == users["admin"].id
        assert updated.updated_at >= updated.created_at

    def test_any_transition_by_default(self, manager, users):
        req = _submit(manager, users["al"])
        manager.update_status(users["admin"], req.id, "completed")
        assert manager.update_status(users["admin"], req.id, "pending").status == "pending"
        assert manager.update_status(users["admin"], req.id, "pending").status == "pending"

    def test_non_admin_is_rejected(self, manager, users, db_session):
        req = _submit(manager, users["al"])
        with pytest.raises(AuthzError, match="Admin only"):
            manager.update_status(users["al"], req.id, "scheduled")
        stored = db_session.get(PickupRequestModel, req.id)
        assert stored.status == "pending"
        assert stored.updated_by is None

    def test_unknown_id(self, manager, users, db_session):
        _submit(manager, users["al"])
        with pytest.raises(RequestNotFoundError, match="Request not found"):
            manager.update_status(users["admin"], "missing", "scheduled")
        assert [m.status for m in db_session.query(PickupRequestModel).all()] == ["pending"]

    def test_unknown_status(self, manager, users):
        req = _submit(manager, users["al"])
        with pytest.raises(ValidationError, match="Invalid status"):
            manager.update_status(users["admin"], req.id, "lost")

    def test_forward_order_enforced(self, db_session, users):
        manager = RequestManager(db_session, LifecyclePolicy(enforce_status_order=True))
        req = _submit(manager, users["al"])

        with pytest.raises(ValidationError, match="Illegal status transition"):
            manager.update_status(users["admin"], req.id, "completed")
        with pytest.raises(ValidationError):
            manager.update_status(users["admin"], req.id, "pending")

        assert manager.update_status(users["admin"], req.id, "scheduled").status == "scheduled"
        assert manager.update_status(users["admin"], req.id, "completed").status == "completed"
        with pytest.raises(ValidationError):
            manager.update_status(users["admin"], req.id, "scheduled")

    def test_anyone_when_auth_disabled(self, db_session):
        manager = RequestManager(db_session, LifecyclePolicy(require_auth=False))
        req = _submit(manager, None)
        updated = manager.update_status(None, req.id, "scheduled")
        assert updated.status == "scheduled"
        assert updated.updated_by is None


class TestDeleteRequest:
    def test_any_caller_by_default(self, manager, users):
        req = _submit(manager, users["al"])
        manager.delete_request(users["bea"], req.id)
        assert manager.list_requests(users["al"]) == []

    def test_unknown_id(self, manager, users):
        with pytest.raises(RequestNotFoundError):
            manager.delete_request(users["al"], "missing")

    def test_ownership_required(self, db_session, users):
        manager = RequestManager(db_session, LifecyclePolicy(delete_requires_ownership=True))
        req = _submit(manager, users["al"])

        with pytest.raises(AuthzError):
            manager.delete_request(users["bea"], req.id)
        manager.delete_request(users["al"], req.id)

        other = _submit(manager, users["al"])
        manager.delete_request(users["admin"], other.id)
        assert manager.list_requests(users["al"]) == []


class TestStoreFailures:
    def test_failed_commit_persists_nothing(self, manager, users, db_session):
        with patch.object(db_session, "commit", side_effect=SQLAlchemyError("disk I/O error")):
            with pytest.raises(InternalError, match="^Internal error$"):
                _submit(manager, users["al"])
        assert db_session.query(PickupRequestModel).count() == 0

    def test_listing_without_table(self, manager, users, db_session):
        PickupRequestModel.__table__.drop(db_session.get_bind())
        with pytest.raises(InternalError):
            manager.list_requests(users["admin"], RequestFilter())
