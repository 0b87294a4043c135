from sqlalchemy import Column, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from .base import BaseModel, IdType


class SavedDestination(BaseModel):
    __tablename__ = "saved_destination"
    __table_args__ = (
        UniqueConstraint("user_id", "destination_id", name="uq_saved_user_destination"),
    )
    
    # Foreign keys
    user_id = Column(IdType, ForeignKey("user.id"), nullable=False, index=True)
    destination_id = Column(IdType, ForeignKey("destination.id"), nullable=False, index=True)
    
    # Relationships
    user = relationship("User", back_populates="saved_destinations")
    destination = relationship("Destination", back_populates="saved_by")
