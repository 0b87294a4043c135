from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from pydantic import BaseModel
from sqlalchemy.orm import Session
from typing import List

from motour.core.database import get_db
from motour.models import Vehicle
from motour.auth.middleware import get_current_user, CurrentUser
from motour.schemas.common import MessageResponse
from motour.schemas.vehicle import VehicleCreate, VehicleUpdate, VehicleResponse
from motour.services.media import MediaHostClient, get_media_client, VEHICLES_FOLDER
from motour.api.uploads import read_upload

router = APIRouter(prefix="/api/vehicles", tags=["vehicles"])


class VehicleImageResponse(BaseModel):
    message: str
    image: str
    vehicle: VehicleResponse


def get_vehicle_or_404(db: Session, vehicle_id: int, user_id: int) -> Vehicle:
    """Look up one of the caller's active vehicles."""
    vehicle = db.query(Vehicle).filter(
        Vehicle.id == vehicle_id,
        Vehicle.user_id == user_id,
        Vehicle.is_active == True
    ).first()

    if not vehicle:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Vehicle not found")
    return vehicle


@router.get("", response_model=List[VehicleResponse])
async def get_vehicles(db: Session = Depends(get_db), current_user: CurrentUser = Depends(get_current_user)):
    """Get the caller's active vehicles, newest first."""
    return db.query(Vehicle).filter(
        Vehicle.user_id == current_user.user_id,
        Vehicle.is_active == True
    ).order_by(Vehicle.created_at.desc(), Vehicle.id.desc()).all()


@router.get("/{vehicle_id}", response_model=VehicleResponse)
async def get_vehicle(
    vehicle_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    """Get a single vehicle."""
    return get_vehicle_or_404(db, vehicle_id, current_user.user_id)


@router.post("", response_model=VehicleResponse, status_code=status.HTTP_201_CREATED)
async def create_vehicle(
    vehicle_data: VehicleCreate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    """Add a vehicle to the caller's garage."""
    vehicle = Vehicle(
        user_id=current_user.user_id,
        **vehicle_data.model_dump(exclude_none=True)
    )
    db.add(vehicle)
    db.commit()
    db.refresh(vehicle)
    return vehicle


@router.put("/{vehicle_id}", response_model=VehicleResponse)
async def update_vehicle(
    vehicle_id: int,
    vehicle_data: VehicleUpdate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    """Update the fields present in the request."""
    vehicle = get_vehicle_or_404(db, vehicle_id, current_user.user_id)

    update_data = vehicle_data.model_dump(exclude_unset=True)
    for field, value in update_data.items():
        if field in ("name", "brand", "type") and value is None:
            continue
        setattr(vehicle, field, value)

    db.commit()
    db.refresh(vehicle)
    return vehicle


@router.delete("/{vehicle_id}", response_model=MessageResponse)
async def delete_vehicle(
    vehicle_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    """Soft delete a vehicle."""
    vehicle = get_vehicle_or_404(db, vehicle_id, current_user.user_id)
    vehicle.is_active = False
    db.commit()
    return MessageResponse(message="Vehicle deleted successfully")


@router.post("/{vehicle_id}/upload-image", response_model=VehicleImageResponse)
async def upload_vehicle_image(
    vehicle_id: int,
    image: UploadFile = File(...),
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
    media_client: MediaHostClient = Depends(get_media_client)
):
    """Upload a vehicle photo to the media host and attach it to the vehicle."""
    vehicle = get_vehicle_or_404(db, vehicle_id, current_user.user_id)
    data = await read_upload(image)

    result = await media_client.upload(
        data,
        filename=image.filename or "vehicle",
        content_type=image.content_type,
        folder=VEHICLES_FOLDER,
        resource_type="image",
        transformation="c_fill,h_600,w_800/q_auto"
    )

    vehicle.image = result.url
    db.commit()
    db.refresh(vehicle)

    return VehicleImageResponse(
        message="Vehicle image uploaded successfully",
        image=result.url,
        vehicle=VehicleResponse.model_validate(vehicle)
    )
