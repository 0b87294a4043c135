from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import String, cast, or_
from sqlalchemy.orm import Session
from typing import Optional

from motour.core.database import get_db
from motour.core.database_utils import paginate, like_pattern
from motour.models import Destination
from motour.auth.middleware import require_admin_role, CurrentAdmin
from motour.api.destinations import get_destination_or_404
from motour.schemas.common import MessageResponse
from motour.schemas.destination import DestinationCreate, DestinationUpdate, DestinationResponse, DestinationPage
from motour.services import destinations as destination_service

router = APIRouter(prefix="/admin/destinations", tags=["admin"])


@router.get("", response_model=DestinationPage)
async def list_destinations(
    q: Optional[str] = Query(None, description="Search name, description, address and tags"),
    category: Optional[str] = None,
    tag: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
    current_admin: CurrentAdmin = Depends(require_admin_role())
):
    """List destinations with search, filters and pagination, newest first."""
    query = db.query(Destination)

    if q:
        pattern = like_pattern(q)
        query = query.filter(or_(
            Destination.name.ilike(pattern, escape="\\"),
            Destination.description.ilike(pattern, escape="\\"),
            Destination.address.ilike(pattern, escape="\\"),
            cast(Destination.tags, String).ilike(pattern, escape="\\")
        ))
    if category:
        query = query.filter(Destination.category == category)
    if tag:
        query = query.filter(cast(Destination.tags, String).like(like_pattern(f'"{tag}"'), escape="\\"))

    items, pagination = paginate(
        query.order_by(Destination.created_at.desc(), Destination.id.desc()), page, limit
    )
    return DestinationPage(
        items=[DestinationResponse.model_validate(item) for item in items],
        pagination=pagination
    )


@router.get("/{destination_id}", response_model=DestinationResponse)
async def get_destination(
    destination_id: int,
    db: Session = Depends(get_db),
    current_admin: CurrentAdmin = Depends(require_admin_role())
):
    """Get a single destination."""
    return get_destination_or_404(db, destination_id)


@router.post("", response_model=DestinationResponse, status_code=status.HTTP_201_CREATED)
async def create_destination(
    destination_data: DestinationCreate,
    db: Session = Depends(get_db),
    current_admin: CurrentAdmin = Depends(require_admin_role())
):
    """Create a destination."""
    return destination_service.create_destination(db, destination_data)


@router.patch("/{destination_id}", response_model=DestinationResponse)
async def update_destination(
    destination_id: int,
    destination_data: DestinationUpdate,
    db: Session = Depends(get_db),
    current_admin: CurrentAdmin = Depends(require_admin_role())
):
    """Update a destination. averageRating is not writable."""
    destination = get_destination_or_404(db, destination_id)
    return destination_service.update_destination(db, destination, destination_data)


@router.delete("/{destination_id}", response_model=MessageResponse)
async def delete_destination(
    destination_id: int,
    db: Session = Depends(get_db),
    current_admin: CurrentAdmin = Depends(require_admin_role())
):
    """Delete a destination and every rating and save that references it."""
    destination = get_destination_or_404(db, destination_id)
    destination_service.delete_destination(db, destination)
    return MessageResponse(message="Destination deleted successfully")
