import logging

from sqlalchemy.orm import Session

from motour.models import Destination, Rating, SavedDestination
from motour.schemas.destination import DestinationCreate, DestinationUpdate

logger = logging.getLogger(__name__)


def create_destination(db: Session, data: DestinationCreate) -> Destination:
    """Create a destination. The average rating always starts at 0."""
    destination = Destination(
        name=data.name,
        photos=data.photos.model_dump(),
        lat=data.geo.lat,
        lng=data.geo.lng,
        category=data.category,
        description=data.description,
        address=data.address,
        tags=list(data.tags),
        average_rating=0
    )

    db.add(destination)
    db.commit()
    db.refresh(destination)

    logger.info("Destination created", extra={"destination_id": destination.id})
    return destination


def update_destination(db: Session, destination: Destination, data: DestinationUpdate) -> Destination:
    """Apply the fields present in the request; average rating is not writable here."""
    update_data = data.model_dump(exclude_unset=True)

    for field, value in update_data.items():
        if field == "geo":
            if value is not None:
                destination.lat = value["lat"]
                destination.lng = value["lng"]
        elif field == "photos":
            if value is not None:
                destination.photos = value
        elif field == "tags":
            destination.tags = value or []
        elif field in ("name", "category") and value is None:
            # Required columns; an explicit null leaves them unchanged
            continue
        else:
            setattr(destination, field, value)

    db.commit()
    db.refresh(destination)
    return destination


def delete_destination(db: Session, destination: Destination) -> int:
    """
    Delete a destination together with its ratings and saves in one transaction.
    Returns the number of ratings removed.
    """
    destination_id = destination.id

    removed_ratings = db.query(Rating).filter(
        Rating.destination_id == destination_id
    ).delete(synchronize_session=False)
    removed_saves = db.query(SavedDestination).filter(
        SavedDestination.destination_id == destination_id
    ).delete(synchronize_session=False)
    db.query(Destination).filter(Destination.id == destination_id).delete(synchronize_session=False)

    try:
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info(
        "Destination deleted",
        extra={
            "destination_id": destination_id,
            "ratings_removed": removed_ratings,
            "saves_removed": removed_saves
        }
    )
    return removed_ratings
