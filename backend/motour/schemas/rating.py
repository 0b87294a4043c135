from datetime import datetime
from typing import List, Literal, Optional

from pydantic import Field, field_validator

from .common import CamelModel, Pagination
from .destination import DestinationResponse, DestinationSummary


class MediaItem(CamelModel):
    url: str = Field(..., min_length=1)
    public_id: str = Field(..., min_length=1)
    type: Literal["image", "video"]
    thumbnail: Optional[str] = None


def _reject_non_numeric(value):
    # Integral floats such as 3.0 pass; fractional ones fail the int check
    if isinstance(value, (bool, str)):
        raise ValueError("Rating must be a whole number")
    return value


class RatingUpsert(CamelModel):
    rating: int = Field(..., ge=1, le=5, description="Whole number from 1 to 5")
    comment: Optional[str] = Field(None, max_length=500)
    media: Optional[List[MediaItem]] = Field(None, max_length=3)

    @field_validator("rating", mode="before")
    @classmethod
    def validate_rating(cls, value):
        return _reject_non_numeric(value)


class RatingAdminUpdate(CamelModel):
    rating: Optional[int] = Field(None, ge=1, le=5)
    comment: Optional[str] = Field(None, max_length=500)

    @field_validator("rating", mode="before")
    @classmethod
    def validate_rating(cls, value):
        return _reject_non_numeric(value)


class RatingAuthor(CamelModel):
    id: int
    name: str
    email: str
    profile_image: Optional[str] = None


class RatingResponse(CamelModel):
    id: int
    destination_id: int
    user_id: int
    rating: int
    comment: Optional[str] = ""
    media: List[MediaItem] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    user: Optional[RatingAuthor] = None


class AdminRatingResponse(RatingResponse):
    destination: Optional[DestinationSummary] = None


class RatingPage(CamelModel):
    items: List[AdminRatingResponse]
    pagination: Pagination


class DestinationDetail(CamelModel):
    destination: DestinationResponse
    ratings: List[RatingResponse]
