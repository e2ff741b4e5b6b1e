"""Pickup request schema definitions.

Field names are snake_case in Python and camelCase on the wire.
"""

from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class MaterialType(str, Enum):
    PLASTIC = "plastic"
    PAPER = "paper"
    GLASS = "glass"
    METAL = "metal"
    E_WASTE = "e-waste"
    TEXTILE = "textile"
    ORGANIC = "organic"
    OTHER = "other"


class RequestStatus(str, Enum):
    PENDING = "pending"
    SCHEDULED = "scheduled"
    COMPLETED = "completed"


MATERIAL_TYPES: List[str] = [m.value for m in MaterialType]
REQUEST_STATUSES: List[str] = [s.value for s in RequestStatus]

# Forward order used when status transitions are enforced
NEXT_STATUS: Dict[str, str] = {
    RequestStatus.PENDING.value: RequestStatus.SCHEDULED.value,
    RequestStatus.SCHEDULED.value: RequestStatus.COMPLETED.value,
}


class _CamelModel(BaseModel):
    # Free-text fields accept JSON numbers, e.g. {"quantity": 3} -> "3"
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        coerce_numbers_to_str=True,
    )


class CreatePickupRequest(_CamelModel):
    # Kept as plain strings; the manager checks the closed sets itself
    material_type: str
    quantity: str
    pickup_address: str


class UpdateStatusRequest(_CamelModel):
    status: str


class RequestFilter(_CamelModel):
    user_id: Optional[str] = None
    status: Optional[str] = None


class PickupRequest(_CamelModel):
    """A pickup request as returned by the API."""

    id: str = Field(description="The unique identifier for the request.")
    user_id: Optional[str] = Field(
        default=None,
        description="The user_id of the request owner. Unset for anonymous requests.",
    )
    material_type: str
    quantity: str
    pickup_address: str
    status: str = Field(default=RequestStatus.PENDING.value)
    updated_by: Optional[str] = Field(
        default=None,
        description="The user_id of the last caller that changed the status.",
    )
    created_at: str
    updated_at: str

    # Display names joined in when identities are enabled
    user_name: Optional[str] = None
    updated_by_name: Optional[str] = None
