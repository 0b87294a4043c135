from datetime import datetime
from typing import List, Optional

from pydantic import Field

from .common import CamelModel, Pagination
from .destination import DestinationSummary


class UserResponse(CamelModel):
    id: int
    name: str
    email: str
    phone: Optional[str] = None
    profile_image: Optional[str] = None
    location: Optional[str] = None
    trips_completed: Optional[int] = 0
    favorite_destinations: Optional[int] = 0
    total_distance: Optional[str] = None
    is_verified: bool = False
    status: str = "active"
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class UserPage(CamelModel):
    items: List[UserResponse]
    pagination: Pagination


class UserAdminUpdate(CamelModel):
    is_verified: Optional[bool] = None
    phone: Optional[str] = Field(None, max_length=30)
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    location: Optional[str] = Field(None, max_length=100)
    trips_completed: Optional[int] = Field(None, ge=0)
    favorite_destinations: Optional[int] = Field(None, ge=0)
    total_distance: Optional[str] = Field(None, max_length=50)


class SavedDestinationEntry(CamelModel):
    id: int
    created_at: Optional[datetime] = None
    destination: DestinationSummary


class SavedDestinationPage(CamelModel):
    items: List[SavedDestinationEntry]
    pagination: Pagination


class ProfileResponse(CamelModel):
    id: int
    name: str
    email: str
    phone: str
    profile_image: str
    location: str
    trips_completed: int
    favorite_destinations: int
    total_distance: str
    member_since: str
