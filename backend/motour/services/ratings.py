"""
Rating aggregate maintenance.

``Destination.average_rating`` is derived data: the mean of every rating that
references the destination, rounded to one decimal place, or 0 when there are
none. Every path that creates, changes or removes ratings goes through this
module so the derived value is recomputed from the full rating set after each
write. There is no running sum/count to drift.

Recompute is best-effort: the rating write is committed first, and a failed
recompute is rolled back and logged without failing the caller. Values left
stale that way are repaired by the next write to the same destination or by
``reconcile_average_ratings``.
"""

import logging
import math
from typing import Any, Dict, Iterable, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from motour.models import Destination, Rating

logger = logging.getLogger(__name__)

MIN_RATING = 1
MAX_RATING = 5
MAX_MEDIA_ITEMS = 3


def round_rating(value) -> float:
    """Round half up to one decimal place (4.65 -> 4.7, 4.666 -> 4.7)."""
    return math.floor(float(value) * 10 + 0.5) / 10


def validate_rating_value(value: Any) -> int:
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError("Rating must be a whole number")
    if not MIN_RATING <= value <= MAX_RATING:
        raise ValueError(f"Rating must be between {MIN_RATING} and {MAX_RATING}")
    return value


def compute_average_rating(db: Session, destination_id: int) -> float:
    """Mean of the destination's current ratings, rounded; 0 for an empty set."""
    mean = db.query(func.avg(Rating.rating)).filter(
        Rating.destination_id == destination_id
    ).scalar()

    if mean is None:
        return 0.0
    return round_rating(mean)


def recompute_average_rating(db: Session, destination_id: int) -> float:
    """Write the recomputed average onto the destination (flushed, not committed)."""
    average = compute_average_rating(db, destination_id)

    db.query(Destination).filter(Destination.id == destination_id).update(
        {Destination.average_rating: average},
        synchronize_session=False
    )
    db.flush()

    return average


def refresh_average_rating(db: Session, destination_id: int) -> Optional[float]:
    """Recompute and commit; on failure roll back, log, and return None."""
    try:
        average = recompute_average_rating(db, destination_id)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.error(
            "Average rating recompute failed",
            extra={"destination_id": destination_id},
            exc_info=True
        )
        return None

    return average


def refresh_average_ratings(db: Session, destination_ids: Iterable[int]) -> Dict[int, Optional[float]]:
    return {destination_id: refresh_average_rating(db, destination_id) for destination_id in set(destination_ids)}


def _find_rating(db: Session, user_id: int, destination_id: int) -> Optional[Rating]:
    return db.query(Rating).filter(
        Rating.user_id == user_id,
        Rating.destination_id == destination_id
    ).first()


def _apply(rating: Rating, value: int, comment: Optional[str], media: Optional[List[Dict[str, Any]]]):
    rating.rating = value
    rating.comment = comment or ""
    if media is not None:
        rating.media = media


def upsert_rating(
    db: Session,
    destination_id: int,
    user_id: int,
    value: int,
    comment: Optional[str] = None,
    media: Optional[List[Dict[str, Any]]] = None
) -> Tuple[Rating, bool]:
    """
    Create the user's rating for a destination, or overwrite the existing one.

    ``media`` replaces the stored list only when it is not None. Returns the
    rating and whether it was newly created. The destination's average is
    recomputed afterwards.
    """
    value = validate_rating_value(value)
    if media is not None and len(media) > MAX_MEDIA_ITEMS:
        raise ValueError(f"Cannot attach more than {MAX_MEDIA_ITEMS} media items")

    rating = _find_rating(db, user_id, destination_id)
    created = rating is None

    if created:
        rating = Rating(destination_id=destination_id, user_id=user_id, media=[])
        db.add(rating)
    _apply(rating, value, comment, media)

    try:
        db.commit()
    except IntegrityError:
        # Lost an insert race on (user_id, destination_id); update the winner instead
        db.rollback()
        rating = _find_rating(db, user_id, destination_id)
        if rating is None:
            raise
        created = False
        _apply(rating, value, comment, media)
        db.commit()

    db.refresh(rating)
    logger.info(
        "Rating %s",
        "created" if created else "updated",
        extra={"rating_id": rating.id, "destination_id": destination_id, "user_id": user_id}
    )

    refresh_average_rating(db, destination_id)
    return rating, created


def update_rating(db: Session, rating: Rating, value: Optional[int] = None, comment: Optional[str] = None) -> Rating:
    """Partial update of an existing rating (admin moderation path)."""
    if value is not None:
        rating.rating = validate_rating_value(value)
    if comment is not None:
        rating.comment = comment

    db.commit()
    db.refresh(rating)

    refresh_average_rating(db, rating.destination_id)
    return rating


def delete_rating(db: Session, rating_id: int) -> Optional[int]:
    """Delete a rating and recompute its destination. Returns the destination id, or None if absent."""
    rating = db.query(Rating).filter(Rating.id == rating_id).first()
    if not rating:
        return None

    destination_id = rating.destination_id
    db.delete(rating)
    db.commit()

    logger.info("Rating deleted", extra={"rating_id": rating_id, "destination_id": destination_id})

    refresh_average_rating(db, destination_id)
    return destination_id


def reconcile_average_ratings(db: Session) -> Dict[str, int]:
    """Recompute every destination's average in one pass and fix the stale ones."""
    means = dict(
        db.query(Rating.destination_id, func.avg(Rating.rating))
        .group_by(Rating.destination_id)
        .all()
    )

    checked = 0
    updated = 0
    for destination in db.query(Destination).all():
        checked += 1
        expected = round_rating(means[destination.id]) if destination.id in means else 0.0
        if destination.average_rating != expected:
            destination.average_rating = expected
            updated += 1

    db.commit()

    logger.info("Average ratings reconciled", extra={"checked": checked, "updated": updated})
    return {"checked": checked, "updated": updated}
