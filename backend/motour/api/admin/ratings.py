from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel
from sqlalchemy.orm import Session, joinedload
from typing import Optional

from motour.core.database import get_db
from motour.core.database_utils import paginate
from motour.models import Rating
from motour.auth.middleware import require_admin_role, CurrentAdmin
from motour.schemas.common import MessageResponse
from motour.schemas.rating import AdminRatingResponse, RatingAdminUpdate, RatingPage
from motour.services import ratings as rating_service

router = APIRouter(prefix="/admin/ratings", tags=["admin"])


class ReconcileResponse(BaseModel):
    checked: int
    updated: int


@router.get("", response_model=RatingPage)
async def list_ratings(
    destination_id: Optional[int] = Query(None, alias="destinationId"),
    user_id: Optional[int] = Query(None, alias="userId"),
    min_rating: Optional[int] = Query(None, alias="min", ge=1, le=5),
    max_rating: Optional[int] = Query(None, alias="max", ge=1, le=5),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
    current_admin: CurrentAdmin = Depends(require_admin_role())
):
    """List ratings with filters and pagination, newest first."""
    query = db.query(Rating).options(joinedload(Rating.user), joinedload(Rating.destination))

    if destination_id is not None:
        query = query.filter(Rating.destination_id == destination_id)
    if user_id is not None:
        query = query.filter(Rating.user_id == user_id)
    if min_rating is not None:
        query = query.filter(Rating.rating >= min_rating)
    if max_rating is not None:
        query = query.filter(Rating.rating <= max_rating)

    items, pagination = paginate(query.order_by(Rating.created_at.desc(), Rating.id.desc()), page, limit)
    return RatingPage(
        items=[AdminRatingResponse.model_validate(item) for item in items],
        pagination=pagination
    )


@router.post("/reconcile", response_model=ReconcileResponse)
async def reconcile_ratings(
    db: Session = Depends(get_db),
    current_admin: CurrentAdmin = Depends(require_admin_role())
):
    """Recompute every destination's average rating and repair stale values."""
    return rating_service.reconcile_average_ratings(db)


@router.patch("/{rating_id}", response_model=AdminRatingResponse)
async def update_rating(
    rating_id: int,
    rating_data: RatingAdminUpdate,
    db: Session = Depends(get_db),
    current_admin: CurrentAdmin = Depends(require_admin_role())
):
    """Moderate a rating's value or comment; the destination average is recomputed."""
    rating = db.query(Rating).filter(Rating.id == rating_id).first()
    if not rating:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Rating not found")

    return rating_service.update_rating(db, rating, value=rating_data.rating, comment=rating_data.comment)


@router.delete("/{rating_id}", response_model=MessageResponse)
async def delete_rating(
    rating_id: int,
    db: Session = Depends(get_db),
    current_admin: CurrentAdmin = Depends(require_admin_role())
):
    """Delete a rating; the destination average is recomputed."""
    if rating_service.delete_rating(db, rating_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Rating not found")
    return MessageResponse(message="Rating deleted successfully")
