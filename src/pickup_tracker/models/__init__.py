from .base import Base
from .user import UserModel
from .pickup_request import PickupRequestModel

__all__ = ["Base", "UserModel", "PickupRequestModel"]
