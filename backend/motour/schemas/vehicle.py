from datetime import date, datetime
from typing import Optional

from pydantic import Field, field_validator

from motour.models.vehicle import VEHICLE_TYPES
from .common import CamelModel


def _check_type(value: Optional[str]) -> Optional[str]:
    if value is not None and value not in VEHICLE_TYPES:
        raise ValueError("Invalid vehicle type")
    return value


def _check_year(value: Optional[int]) -> Optional[int]:
    if value is not None and not 1900 <= value <= date.today().year + 1:
        raise ValueError("Invalid year")
    return value


class VehicleCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=100, description="Vehicle name")
    brand: str = Field(..., min_length=1, max_length=50)
    model: Optional[str] = Field(None, max_length=50)
    type: str = "Standard"
    year: Optional[int] = None
    engine_capacity: Optional[str] = Field(None, max_length=20)
    plate_number: Optional[str] = Field(None, max_length=20)
    color: Optional[str] = Field(None, max_length=30)
    image: Optional[str] = None

    @field_validator("type")
    @classmethod
    def validate_type(cls, value):
        return _check_type(value)

    @field_validator("year")
    @classmethod
    def validate_year(cls, value):
        return _check_year(value)


class VehicleUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    brand: Optional[str] = Field(None, min_length=1, max_length=50)
    model: Optional[str] = Field(None, max_length=50)
    type: Optional[str] = None
    year: Optional[int] = None
    engine_capacity: Optional[str] = Field(None, max_length=20)
    plate_number: Optional[str] = Field(None, max_length=20)
    color: Optional[str] = Field(None, max_length=30)
    image: Optional[str] = None

    @field_validator("type")
    @classmethod
    def validate_type(cls, value):
        return _check_type(value)

    @field_validator("year")
    @classmethod
    def validate_year(cls, value):
        return _check_year(value)


class VehicleResponse(CamelModel):
    id: int
    name: str
    brand: str
    model: Optional[str] = None
    type: Optional[str] = "Standard"
    year: Optional[int] = None
    engine_capacity: Optional[str] = None
    plate_number: Optional[str] = None
    color: Optional[str] = None
    image: Optional[str] = ""
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
