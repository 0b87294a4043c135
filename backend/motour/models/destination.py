from sqlalchemy import Column, String, Float, Text, JSON
from sqlalchemy.orm import relationship
from .base import BaseModel

CATEGORIES = (
    "Nature",
    "Historical",
    "Cultural",
    "Adventure",
    "Beach",
    "Urban",
    "Religious",
    "Entertainment",
)


class Destination(BaseModel):
    __tablename__ = "destination"
    
    name = Column(String(100), nullable=False)
    photos = Column(JSON, nullable=False)  # {"main": url, "others": [url, ...]}
    lat = Column(Float, nullable=False)
    lng = Column(Float, nullable=False)
    category = Column(String(50), nullable=False, index=True)
    average_rating = Column(Float, nullable=False, default=0, index=True)  # Maintained by services.ratings
    description = Column(Text)
    address = Column(String(200))
    tags = Column(JSON, default=list)
    
    # Relationships
    ratings = relationship("Rating", back_populates="destination")
    saved_by = relationship("SavedDestination", back_populates="destination")

    @property
    def geo(self):
        return {"lat": self.lat, "lng": self.lng}
