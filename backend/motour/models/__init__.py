from .base import BaseModel
from .user import User, AdminUser, ADMIN_ROLES
from .destination import Destination, CATEGORIES
from .rating import Rating
from .saved_destination import SavedDestination
from .vehicle import Vehicle, VEHICLE_TYPES

__all__ = [
    "BaseModel",
    "User",
    "AdminUser",
    "ADMIN_ROLES",
    "Destination",
    "CATEGORIES",
    "Rating",
    "SavedDestination",
    "Vehicle",
    "VEHICLE_TYPES",
]
