"""Pickup request routes."""

from typing import List, Optional

from fastapi import APIRouter, status

from pickup_tracker.core.dependencies import CallerDep, RequestManagerDep
from pickup_tracker.schemas.pickup_request import (
    CreatePickupRequest,
    PickupRequest,
    RequestFilter,
    UpdateStatusRequest,
)
from pickup_tracker.schemas.user import MessageResponse

router = APIRouter(prefix="/api/requests", tags=["Requests"])


@router.post(
    "",
    response_model=PickupRequest,
    status_code=status.HTTP_201_CREATED,
    summary="Submit a pickup request",
)
def create_request(
    req: CreatePickupRequest,
    request_manager: RequestManagerDep,
    caller: CallerDep,
) -> PickupRequest:
    return request_manager.create_request(
        caller,
        material_type=req.material_type,
        quantity=req.quantity,
        pickup_address=req.pickup_address,
    )


@router.get("", response_model=List[PickupRequest], summary="List pickup requests")
def list_requests(
    request_manager: RequestManagerDep,
    caller: CallerDep,
    userId: Optional[str] = None,
    status: Optional[str] = None,
) -> List[PickupRequest]:
    """List requests, newest first, optionally filtered by owner and status.

    Args:
        request_manager: Injected RequestManager instance.
        caller: Verified caller, or None when identities are disabled.
        userId: Only requests owned by this user.
        status: Only requests in this status.

    Returns:
        Matching requests. Empty when nothing matches.
    """
    return request_manager.list_requests(
        caller, RequestFilter(user_id=userId, status=status)
    )


@router.patch("/{request_id}", response_model=PickupRequest, summary="Update request status")
def update_status(
    request_id: str,
    req: UpdateStatusRequest,
    request_manager: RequestManagerDep,
    caller: CallerDep,
) -> PickupRequest:
    """Set a new status. Admin only when identities are enabled."""
    return request_manager.update_status(caller, request_id, req.status)


@router.delete("/{request_id}", response_model=MessageResponse, summary="Delete a request")
def delete_request(
    request_id: str,
    request_manager: RequestManagerDep,
    caller: CallerDep,
) -> MessageResponse:
    request_manager.delete_request(caller, request_id)
    return MessageResponse(message="Request deleted")
