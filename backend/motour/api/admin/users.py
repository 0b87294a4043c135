from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload
from typing import Dict, Literal, Optional

from motour.core.database import get_db
from motour.core.database_utils import paginate, like_pattern
from motour.models import User, SavedDestination
from motour.auth.middleware import require_admin_role, CurrentAdmin
from motour.schemas.user import (
    UserResponse,
    UserPage,
    UserAdminUpdate,
    SavedDestinationEntry,
    SavedDestinationPage,
)
from motour.services import users as user_service

router = APIRouter(prefix="/admin/users", tags=["admin"])


def get_user_or_404(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


def _set_status(db: Session, user_id: int, new_status: str) -> User:
    user = get_user_or_404(db, user_id)
    user.status = new_status
    db.commit()
    db.refresh(user)
    return user


@router.get("", response_model=UserPage)
async def list_users(
    q: Optional[str] = Query(None, description="Search name, email and phone"),
    verified: Optional[bool] = None,
    user_status: Optional[Literal["active", "blocked"]] = Query(None, alias="status"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
    current_admin: CurrentAdmin = Depends(require_admin_role())
):
    """List users with search, filters and pagination, newest first."""
    query = db.query(User)

    if q:
        pattern = like_pattern(q)
        query = query.filter(or_(
            User.name.ilike(pattern, escape="\\"),
            User.email.ilike(pattern, escape="\\"),
            User.phone.ilike(pattern, escape="\\")
        ))
    if verified is not None:
        query = query.filter(User.is_verified.is_(verified))
    if user_status:
        query = query.filter(User.status == user_status)

    items, pagination = paginate(query.order_by(User.created_at.desc(), User.id.desc()), page, limit)
    return UserPage(items=[UserResponse.model_validate(item) for item in items], pagination=pagination)


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: int,
    db: Session = Depends(get_db),
    current_admin: CurrentAdmin = Depends(require_admin_role())
):
    """Get a single user."""
    return get_user_or_404(db, user_id)


@router.patch("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: int,
    user_data: UserAdminUpdate,
    db: Session = Depends(get_db),
    current_admin: CurrentAdmin = Depends(require_admin_role())
):
    """Update profile fields and verification status."""
    user = get_user_or_404(db, user_id)

    for field, value in user_data.model_dump(exclude_unset=True).items():
        if field in ("name", "is_verified") and value is None:
            continue
        setattr(user, field, value)

    db.commit()
    db.refresh(user)
    return user


@router.post("/{user_id}/block", response_model=UserResponse)
async def block_user(
    user_id: int,
    db: Session = Depends(get_db),
    current_admin: CurrentAdmin = Depends(require_admin_role())
):
    """Block a user; blocked users are rejected by every authenticated endpoint."""
    return _set_status(db, user_id, "blocked")


@router.post("/{user_id}/unblock", response_model=UserResponse)
async def unblock_user(
    user_id: int,
    db: Session = Depends(get_db),
    current_admin: CurrentAdmin = Depends(require_admin_role())
):
    """Unblock a user."""
    return _set_status(db, user_id, "active")


@router.get("/{user_id}/saved-destinations", response_model=SavedDestinationPage)
async def get_user_saved_destinations(
    user_id: int,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
    current_admin: CurrentAdmin = Depends(require_admin_role())
):
    """A user's saved destinations, most recent first."""
    get_user_or_404(db, user_id)

    query = (
        db.query(SavedDestination)
        .options(joinedload(SavedDestination.destination))
        .filter(SavedDestination.user_id == user_id)
        .order_by(SavedDestination.created_at.desc(), SavedDestination.id.desc())
    )
    items, pagination = paginate(query, page, limit)
    return SavedDestinationPage(
        items=[SavedDestinationEntry.model_validate(item) for item in items],
        pagination=pagination
    )


@router.delete("/{user_id}")
async def delete_user(
    user_id: int,
    db: Session = Depends(get_db),
    current_admin: CurrentAdmin = Depends(require_admin_role())
) -> Dict[str, object]:
    """Delete a user with their ratings, saved destinations and vehicles."""
    user = get_user_or_404(db, user_id)
    removed = user_service.delete_user(db, user)
    return {"message": "User deleted successfully", "removed": removed}
