import logging
from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from typing import List

from motour.core.database import get_db
from motour.models import Destination, SavedDestination
from motour.auth.middleware import get_current_user, CurrentUser
from motour.api.destinations import get_destination_or_404
from motour.schemas.destination import DestinationResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/saved-destinations", tags=["saved-destinations"])


class ToggleResponse(BaseModel):
    message: str
    isSaved: bool


class SavedStatus(BaseModel):
    isSaved: bool


class CountResponse(BaseModel):
    count: int


def _find_save(db: Session, user_id: int, destination_id: int):
    return db.query(SavedDestination).filter(
        SavedDestination.user_id == user_id,
        SavedDestination.destination_id == destination_id
    ).first()


@router.get("", response_model=List[DestinationResponse])
async def get_saved_destinations(
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    """Get the caller's saved destinations, most recently saved first."""
    return (
        db.query(Destination)
        .join(SavedDestination, SavedDestination.destination_id == Destination.id)
        .filter(SavedDestination.user_id == current_user.user_id)
        .order_by(SavedDestination.created_at.desc(), SavedDestination.id.desc())
        .all()
    )


@router.post("/{destination_id}", response_model=ToggleResponse)
async def toggle_saved_destination(
    destination_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    """Save the destination if it is not saved yet, otherwise remove it."""
    get_destination_or_404(db, destination_id)

    existing = _find_save(db, current_user.user_id, destination_id)
    if existing:
        db.delete(existing)
        db.commit()
        return ToggleResponse(message="Destination removed from saved list", isSaved=False)

    db.add(SavedDestination(user_id=current_user.user_id, destination_id=destination_id))
    try:
        db.commit()
    except IntegrityError:
        # A concurrent request saved the same pair first; the end state is "saved"
        db.rollback()
        logger.info(
            "Concurrent save absorbed",
            extra={"user_id": current_user.user_id, "destination_id": destination_id}
        )

    return ToggleResponse(message="Destination saved successfully", isSaved=True)


@router.get("/check/{destination_id}", response_model=SavedStatus)
async def check_saved_destination(
    destination_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    """Check whether the caller has saved a destination."""
    return SavedStatus(isSaved=_find_save(db, current_user.user_id, destination_id) is not None)


@router.get("/count/{destination_id}", response_model=CountResponse)
async def get_saved_count(destination_id: int, db: Session = Depends(get_db)):
    """How many users saved a destination."""
    count = db.query(SavedDestination).filter(SavedDestination.destination_id == destination_id).count()
    return CountResponse(count=count)


@router.get("/user/count", response_model=CountResponse)
async def get_user_saved_count(
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    """How many destinations the caller has saved."""
    count = db.query(SavedDestination).filter(SavedDestination.user_id == current_user.user_id).count()
    return CountResponse(count=count)
