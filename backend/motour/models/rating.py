from sqlalchemy import Column, Integer, ForeignKey, String, JSON, UniqueConstraint, Index
from sqlalchemy.orm import relationship
from .base import BaseModel, IdType


class Rating(BaseModel):
    __tablename__ = "rating"
    __table_args__ = (
        # One rating per user per destination
        UniqueConstraint("user_id", "destination_id", name="uq_rating_user_destination"),
        Index("ix_rating_destination_rating", "destination_id", "rating"),
    )
    
    rating = Column(Integer, nullable=False)
    comment = Column(String(500), default="")
    media = Column(JSON, default=list)  # [{"url", "publicId", "type", "thumbnail"}]
    
    # Foreign keys
    destination_id = Column(IdType, ForeignKey("destination.id"), nullable=False)
    user_id = Column(IdType, ForeignKey("user.id"), nullable=False, index=True)
    
    # Relationships
    destination = relationship("Destination", back_populates="ratings")
    user = relationship("User", back_populates="ratings")
