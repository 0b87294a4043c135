from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from pydantic import BaseModel, EmailStr, Field
from sqlalchemy.orm import Session
from typing import Optional
import re

from motour.core.database import get_db
from motour.models import User
from motour.auth.middleware import get_current_user, CurrentUser
from motour.schemas.user import ProfileResponse
from motour.services.media import MediaHostClient, get_media_client, PROFILES_FOLDER
from motour.api.uploads import read_upload

router = APIRouter(prefix="/api/profile", tags=["profile"])

PHONE_PATTERN = re.compile(r"^\+?[0-9][0-9 \-]{6,18}[0-9]$")


class ImageUpdate(BaseModel):
    profileImage: str = Field(..., min_length=1, description="Profile image URL")


class EmailUpdate(BaseModel):
    email: EmailStr


class PhoneUpdate(BaseModel):
    phone: str = Field(..., pattern=PHONE_PATTERN.pattern, description="Mobile phone number")


class StatsUpdate(BaseModel):
    tripsCompleted: Optional[int] = Field(None, ge=0)
    favoriteDestinations: Optional[int] = Field(None, ge=0)
    totalDistance: Optional[str] = Field(None, max_length=50)


def _load_user(db: Session, current_user: CurrentUser) -> User:
    user = db.query(User).filter(User.id == current_user.user_id).first()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


def build_profile(user: User) -> ProfileResponse:
    return ProfileResponse(
        id=user.id,
        name=user.name,
        email=user.email,
        phone=user.phone or "",
        profile_image=user.profile_image or "",
        location=user.location or "Philippines",
        trips_completed=user.trips_completed or 0,
        favorite_destinations=user.favorite_destinations or 0,
        total_distance=user.total_distance or "0 km",
        member_since=user.created_at.strftime("%B %Y") if user.created_at else ""
    )


@router.get("", response_model=ProfileResponse)
async def get_profile(db: Session = Depends(get_db), current_user: CurrentUser = Depends(get_current_user)):
    """Get the caller's profile."""
    return build_profile(_load_user(db, current_user))


@router.post("/upload-image")
async def upload_profile_image(
    image: UploadFile = File(...),
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
    media_client: MediaHostClient = Depends(get_media_client)
):
    """Upload a profile picture to the media host and store its URL."""
    user = _load_user(db, current_user)
    data = await read_upload(image)

    result = await media_client.upload(
        data,
        filename=image.filename or "profile",
        content_type=image.content_type,
        folder=PROFILES_FOLDER,
        resource_type="image",
        transformation="c_fill,h_400,w_400/q_auto"
    )

    user.profile_image = result.url
    db.commit()

    return {"message": "Profile image uploaded successfully", "profileImage": result.url}


@router.put("/image")
async def update_profile_image(
    request: ImageUpdate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    """Point the profile image at an already hosted URL."""
    user = _load_user(db, current_user)
    user.profile_image = request.profileImage
    db.commit()
    return {"message": "Profile image updated successfully", "profileImage": user.profile_image}


@router.put("/email")
async def update_email(
    request: EmailUpdate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    """Change the caller's email address."""
    email = request.email.lower()
    user = _load_user(db, current_user)

    taken = db.query(User).filter(User.email == email, User.id != user.id).first()
    if taken:
        raise HTTPException(status_code=409, detail="Email is already taken by another user")

    user.email = email
    db.commit()
    return {"message": "Email updated successfully", "email": user.email}


@router.put("/phone")
async def update_phone(
    request: PhoneUpdate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    """Change the caller's phone number."""
    user = _load_user(db, current_user)
    user.phone = request.phone
    db.commit()
    return {"message": "Phone number updated successfully", "phone": user.phone}


@router.put("/stats")
async def update_stats(
    request: StatsUpdate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    """Update trip statistics shown on the profile."""
    user = _load_user(db, current_user)

    if request.tripsCompleted is not None:
        user.trips_completed = request.tripsCompleted
    if request.favoriteDestinations is not None:
        user.favorite_destinations = request.favoriteDestinations
    if request.totalDistance is not None:
        user.total_distance = request.totalDistance
    db.commit()

    return {
        "message": "User statistics updated successfully",
        "stats": {
            "tripsCompleted": user.trips_completed,
            "favoriteDestinations": user.favorite_destinations,
            "totalDistance": user.total_distance
        }
    }
