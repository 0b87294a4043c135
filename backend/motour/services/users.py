import logging

from sqlalchemy.orm import Session

from motour.models import User, Rating, SavedDestination, Vehicle
from motour.services.ratings import refresh_average_ratings

logger = logging.getLogger(__name__)


def delete_user(db: Session, user: User) -> dict:
    """
    Delete a user and everything they own: ratings, saved destinations and
    vehicles. Averages of the destinations they had rated are recomputed after
    the delete commits.
    """
    user_id = user.id
    rated_destination_ids = [
        destination_id for (destination_id,) in
        db.query(Rating.destination_id).filter(Rating.user_id == user_id).all()
    ]

    removed = {
        "ratings": db.query(Rating).filter(Rating.user_id == user_id).delete(synchronize_session=False),
        "savedDestinations": db.query(SavedDestination).filter(
            SavedDestination.user_id == user_id
        ).delete(synchronize_session=False),
        "vehicles": db.query(Vehicle).filter(Vehicle.user_id == user_id).delete(synchronize_session=False),
    }
    db.query(User).filter(User.id == user_id).delete(synchronize_session=False)

    try:
        db.commit()
    except Exception:
        db.rollback()
        raise

    refresh_average_ratings(db, rated_destination_ids)

    logger.info("User deleted", extra={"user_id": user_id, **{f"removed_{k}": v for k, v in removed.items()}})
    return removed
