from sqlalchemy import Column, String, Boolean, Integer, ForeignKey, Index
from sqlalchemy.orm import relationship
from .base import BaseModel, IdType

VEHICLE_TYPES = (
    "Sport",
    "Cruiser",
    "Touring",
    "Standard",
    "Dual-Sport",
    "Adventure",
    "Scooter",
    "Off-Road",
    "Other",
)


class Vehicle(BaseModel):
    __tablename__ = "vehicle"
    __table_args__ = (
        Index("ix_vehicle_user_active", "user_id", "is_active"),
    )
    
    name = Column(String(100), nullable=False)
    brand = Column(String(50), nullable=False)
    model = Column(String(50))
    type = Column(String(20), default="Standard")
    year = Column(Integer)
    engine_capacity = Column(String(20))
    plate_number = Column(String(20))
    color = Column(String(30))
    image = Column(String(500), default="")
    is_active = Column(Boolean, default=True)  # Soft delete
    
    # Foreign keys
    user_id = Column(IdType, ForeignKey("user.id"), nullable=False)
    
    # Relationships
    user = relationship("User", back_populates="vehicles")
