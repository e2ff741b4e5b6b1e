"""Pickup request database model.

Owner and updater references are plain indexed columns. Deleting a user
leaves them dangling.
"""

from sqlalchemy import Column, String
from .base import Base


class PickupRequestModel(Base):
    """Pickup request database model."""

    __tablename__ = "pickup_requests"

    request_id = Column(String, primary_key=True, index=True)
    user_id = Column(String, index=True, nullable=True)
    material_type = Column(String, nullable=False)
    quantity = Column(String, nullable=False)
    pickup_address = Column(String, nullable=False)
    status = Column(String, index=True, nullable=False, default="pending")
    updated_by = Column(String, nullable=True)
    created_at = Column(String, index=True, nullable=False)  # ISO format string
    updated_at = Column(String, nullable=False)  # ISO format string
