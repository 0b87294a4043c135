from sqlalchemy import Column, String, Boolean, Integer
from sqlalchemy.orm import relationship
from .base import BaseModel

ADMIN_ROLES = ("admin", "superadmin")


class User(BaseModel):
    __tablename__ = "user"
    
    name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    phone = Column(String(30))
    profile_image = Column(String(500))
    location = Column(String(100))
    trips_completed = Column(Integer, default=0)
    favorite_destinations = Column(Integer, default=0)
    total_distance = Column(String(50))
    is_verified = Column(Boolean, default=False)
    status = Column(String(20), default="active")  # "active" or "blocked"
    
    # Relationships
    ratings = relationship("Rating", back_populates="user")
    saved_destinations = relationship("SavedDestination", back_populates="user")
    vehicles = relationship("Vehicle", back_populates="user")


class AdminUser(BaseModel):
    __tablename__ = "admin_user"
    
    username = Column(String(30), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(20), default="admin")  # "admin" or "superadmin"
