from datetime import datetime
from typing import List, Optional

from pydantic import Field, field_validator

from motour.models.destination import CATEGORIES
from .common import CamelModel, Pagination


class PhotoSet(CamelModel):
    main: str = Field(..., min_length=1, description="Main photo URL")
    others: List[str] = Field(default_factory=list, max_length=3, description="Up to 3 additional photo URLs")


class GeoPoint(CamelModel):
    lat: float = Field(..., ge=-90, le=90, description="Latitude")
    lng: float = Field(..., ge=-180, le=180, description="Longitude")


def _check_category(value: Optional[str]) -> Optional[str]:
    if value is not None and value not in CATEGORIES:
        raise ValueError(f"Category must be one of: {', '.join(CATEGORIES)}")
    return value


class DestinationCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=100, description="Destination name")
    photos: PhotoSet
    geo: GeoPoint
    category: str
    description: Optional[str] = Field(None, max_length=500)
    address: Optional[str] = Field(None, max_length=200)
    tags: List[str] = Field(default_factory=list, max_length=10)

    @field_validator("category")
    @classmethod
    def validate_category(cls, value):
        return _check_category(value)


class DestinationUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    photos: Optional[PhotoSet] = None
    geo: Optional[GeoPoint] = None
    category: Optional[str] = None
    description: Optional[str] = Field(None, max_length=500)
    address: Optional[str] = Field(None, max_length=200)
    tags: Optional[List[str]] = Field(None, max_length=10)

    @field_validator("category")
    @classmethod
    def validate_category(cls, value):
        return _check_category(value)


class DestinationResponse(CamelModel):
    id: int
    name: str
    photos: PhotoSet
    geo: GeoPoint
    category: str
    average_rating: float
    description: Optional[str] = None
    address: Optional[str] = None
    tags: List[str] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class DestinationSummary(CamelModel):
    id: int
    name: str
    category: str
    average_rating: float
    photos: PhotoSet


class DestinationPage(CamelModel):
    items: List[DestinationResponse]
    pagination: Pagination
