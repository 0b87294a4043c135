from fastapi import APIRouter, HTTPException, Depends, Query, Response, status
from sqlalchemy.orm import Session, joinedload
from typing import List, Optional

from motour.core.database import get_db
from motour.models import Destination, Rating
from motour.auth.middleware import get_current_user, CurrentUser
from motour.schemas.common import MessageResponse
from motour.schemas.destination import DestinationCreate, DestinationResponse
from motour.schemas.rating import DestinationDetail, RatingResponse, RatingUpsert
from motour.services import destinations as destination_service
from motour.services import ratings as rating_service

router = APIRouter(prefix="/api/destinations", tags=["destinations"])


def get_destination_or_404(db: Session, destination_id: int) -> Destination:
    destination = db.query(Destination).filter(Destination.id == destination_id).first()
    if not destination:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Destination not found"
        )
    return destination


def _ratings_for(db: Session, destination_id: int) -> List[Rating]:
    return (
        db.query(Rating)
        .options(joinedload(Rating.user))
        .filter(Rating.destination_id == destination_id)
        .order_by(Rating.created_at.desc(), Rating.id.desc())
        .all()
    )


@router.get("", response_model=List[DestinationResponse])
async def get_destinations(
    category: Optional[str] = Query(None, description="Filter by category"),
    db: Session = Depends(get_db)
):
    """Get all destinations."""
    query = db.query(Destination)
    if category:
        query = query.filter(Destination.category == category)
    return query.order_by(Destination.created_at.desc(), Destination.id.desc()).all()


@router.post("", response_model=DestinationResponse, status_code=status.HTTP_201_CREATED)
async def create_destination(
    destination_data: DestinationCreate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    """Create a new destination. Any submitted averageRating is ignored."""
    return destination_service.create_destination(db, destination_data)


@router.get("/{destination_id}", response_model=DestinationDetail)
async def get_destination(destination_id: int, db: Session = Depends(get_db)):
    """Get a destination together with its ratings, newest first."""
    destination = get_destination_or_404(db, destination_id)
    return DestinationDetail(
        destination=DestinationResponse.model_validate(destination),
        ratings=[RatingResponse.model_validate(rating) for rating in _ratings_for(db, destination_id)]
    )


@router.post("/{destination_id}/ratings", response_model=RatingResponse)
async def rate_destination(
    destination_id: int,
    rating_data: RatingUpsert,
    response: Response,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    """
    Create or update the caller's rating for a destination.
    Returns 201 when a rating was created and 200 when an existing one was updated.
    """
    get_destination_or_404(db, destination_id)

    media = None
    if rating_data.media is not None:
        media = [item.model_dump(by_alias=True, exclude_none=True) for item in rating_data.media]

    rating, created = rating_service.upsert_rating(
        db,
        destination_id=destination_id,
        user_id=current_user.user_id,
        value=rating_data.rating,
        comment=rating_data.comment,
        media=media
    )

    response.status_code = status.HTTP_201_CREATED if created else status.HTTP_200_OK
    return rating


@router.get("/{destination_id}/ratings", response_model=List[RatingResponse])
async def get_destination_ratings(destination_id: int, db: Session = Depends(get_db)):
    """Get ratings for a destination, newest first."""
    get_destination_or_404(db, destination_id)
    return _ratings_for(db, destination_id)


@router.delete("/{destination_id}/ratings", response_model=MessageResponse)
async def delete_own_rating(
    destination_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    """Remove the caller's rating for a destination."""
    rating = db.query(Rating).filter(
        Rating.destination_id == destination_id,
        Rating.user_id == current_user.user_id
    ).first()

    if not rating:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Rating not found"
        )

    rating_service.delete_rating(db, rating.id)
    return MessageResponse(message="Rating deleted successfully")
