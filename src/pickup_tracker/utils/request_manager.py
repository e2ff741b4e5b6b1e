"""Pickup request management module.

This module owns the pickup request lifecycle: submission, listing, status
changes and deletion, together with the rules on who may do each.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

import pytz
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, aliased

from pickup_tracker.core.exceptions import (
    AuthError,
    AuthzError,
    InternalError,
    RequestNotFoundError,
    ValidationError,
)
from pickup_tracker.core.security import require_role
from pickup_tracker.models.pickup_request import PickupRequestModel
from pickup_tracker.models.user import UserModel
from pickup_tracker.schemas.pickup_request import (
    MATERIAL_TYPES,
    NEXT_STATUS,
    REQUEST_STATUSES,
    PickupRequest,
    RequestFilter,
    RequestStatus,
)
from pickup_tracker.schemas.user import CallerIdentity, Role
from pickup_tracker.utils.converters import model_to_pickup_request

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LifecyclePolicy:
    """Switches for the request lifecycle rules."""

    require_auth: bool = True
    enforce_status_order: bool = False
    delete_requires_ownership: bool = False


def _now() -> str:
    return datetime.now(pytz.utc).isoformat(timespec="microseconds")


def _require_text(field: str, value: Optional[str]) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(f"{field} is required")
    return str(value).strip()


def validate_material_type(material_type: Optional[str]) -> str:
    material_type = _require_text("materialType", material_type)
    if material_type not in MATERIAL_TYPES:
        raise ValidationError(
            f"Invalid materialType: {material_type}. "
            f"Must be one of: {', '.join(MATERIAL_TYPES)}."
        )
    return material_type


def validate_status(status: Optional[str]) -> str:
    status = _require_text("status", status)
    if status not in REQUEST_STATUSES:
        raise ValidationError(
            f"Invalid status: {status}. Must be one of: {', '.join(REQUEST_STATUSES)}."
        )
    return status


class RequestManager:
    """Manages pickup request operations using SQLAlchemy."""

    def __init__(self, db: Session, policy: Optional[LifecyclePolicy] = None):
        """Initialize RequestManager.

        Args:
            db: SQLAlchemy Session.
            policy: Lifecycle rules; defaults to the permissive source behavior.
        """
        self.db = db
        self.policy = policy or LifecyclePolicy()

    def _authenticated(self, caller: Optional[CallerIdentity]) -> Optional[CallerIdentity]:
        if self.policy.require_auth and caller is None:
            raise AuthError("No token")
        return caller if self.policy.require_auth else None

    def _commit(self) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Request commit failed: %s", e)
            raise InternalError() from e

    def _get_model(self, request_id: str) -> PickupRequestModel:
        model = (
            self.db.query(PickupRequestModel)
            .filter(PickupRequestModel.request_id == request_id)
            .first()
        )
        if not model:
            raise RequestNotFoundError(request_id)
        return model

    def _with_names(self, query):
        owner = aliased(UserModel)
        updater = aliased(UserModel)
        return (
            query.add_columns(owner.name, updater.name)
            .outerjoin(owner, owner.user_id == PickupRequestModel.user_id)
            .outerjoin(updater, updater.user_id == PickupRequestModel.updated_by)
        )

    def _to_schema(self, model: PickupRequestModel) -> PickupRequest:
        if not self.policy.require_auth:
            return model_to_pickup_request(model)
        row = self._with_names(
            self.db.query(PickupRequestModel).filter(
                PickupRequestModel.request_id == model.request_id
            )
        ).first()
        _, user_name, updated_by_name = row
        return model_to_pickup_request(model, user_name, updated_by_name)

    def create_request(
        self,
        caller: Optional[CallerIdentity],
        material_type: str,
        quantity: str,
        pickup_address: str,
    ) -> PickupRequest:
        """Submit a new pickup request.

        Args:
            caller: Verified identity, or None when identities are disabled.
            material_type: One of the closed material types.
            quantity: Free-text quantity.
            pickup_address: Free-text address.

        Returns:
            The stored request, status 'pending'.

        Raises:
            ValidationError: If a field is missing or the material type is
                not in the closed set. Nothing is stored.
        """
        caller = self._authenticated(caller)
        material_type = validate_material_type(material_type)
        quantity = _require_text("quantity", quantity)
        pickup_address = _require_text("pickupAddress", pickup_address)

        now = _now()
        model = PickupRequestModel(
            request_id=uuid.uuid4().hex,
            user_id=caller.id if caller else None,
            material_type=material_type,
            quantity=quantity,
            pickup_address=pickup_address,
            status=RequestStatus.PENDING.value,
            created_at=now,
            updated_at=now,
        )
        self.db.add(model)
        self._commit()
        self.db.refresh(model)

        logger.info(
            "Created pickup request %s (%s) for %s",
            model.request_id,
            material_type,
            model.user_id or "anonymous caller",
        )
        return self._to_schema(model)

    def list_requests(
        self,
        caller: Optional[CallerIdentity],
        request_filter: Optional[RequestFilter] = None,
    ) -> List[PickupRequest]:
        """List requests matching the filter, newest first.

        Any authenticated caller may list any user's requests.

        Raises:
            InternalError: If the store query fails.
        """
        self._authenticated(caller)
        request_filter = request_filter or RequestFilter()

        query = self.db.query(PickupRequestModel)
        if request_filter.user_id:
            query = query.filter(PickupRequestModel.user_id == request_filter.user_id)
        if request_filter.status:
            query = query.filter(PickupRequestModel.status == request_filter.status)
        query = query.order_by(PickupRequestModel.created_at.desc())

        try:
            if not self.policy.require_auth:
                return [model_to_pickup_request(m) for m in query.all()]
            return [
                model_to_pickup_request(m, user_name, updated_by_name)
                for m, user_name, updated_by_name in self._with_names(query).all()
            ]
        except SQLAlchemyError as e:
            logger.error("Request listing failed: %s", e)
            raise InternalError() from e

    def update_status(
        self,
        caller: Optional[CallerIdentity],
        request_id: str,
        new_status: str,
    ) -> PickupRequest:
        """Change the status of a request.

        Raises:
            AuthzError: If identities are enabled and the caller is not an admin.
            ValidationError: If the status is not in the closed set, or the
                transition is not one step forward while ordering is enforced.
            RequestNotFoundError: If the id does not resolve.
        """
        caller = self._authenticated(caller)
        if caller is not None:
            require_role(caller, Role.ADMIN.value)
        new_status = validate_status(new_status)

        model = self._get_model(request_id)
        if self.policy.enforce_status_order and NEXT_STATUS.get(model.status) != new_status:
            raise ValidationError(
                f"Illegal status transition: {model.status} -> {new_status}"
            )

        previous = model.status
        model.status = new_status
        model.updated_at = max(_now(), model.created_at)
        if caller is not None:
            model.updated_by = caller.id
        self._commit()
        self.db.refresh(model)

        logger.info("Request %s status %s -> %s", request_id, previous, new_status)
        return self._to_schema(model)

    def delete_request(self, caller: Optional[CallerIdentity], request_id: str) -> None:
        """Delete a request.

        Raises:
            AuthzError: If ownership is required and the caller is neither
                the owner nor an admin.
            RequestNotFoundError: If the id does not resolve.
        """
        caller = self._authenticated(caller)
        model = self._get_model(request_id)

        if (
            caller is not None
            and self.policy.delete_requires_ownership
            and not caller.is_admin
            and model.user_id != caller.id
        ):
            raise AuthzError("Not allowed to delete this request")

        self.db.delete(model)
        self._commit()
        logger.info("Deleted pickup request %s", request_id)
