from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from typing import Sequence

from motour.core.config import settings
from motour.auth.middleware import get_current_user, CurrentUser
from motour.schemas.rating import MediaItem
from motour.services.media import MediaHostClient, get_media_client, RATINGS_FOLDER

router = APIRouter(prefix="/api/uploads", tags=["uploads"])


async def read_upload(file: UploadFile, allowed_types: Sequence[str] = ("image/",)) -> bytes:
    """Read an uploaded file, enforcing the content-type prefix and size limit."""
    content_type = file.content_type or ""
    if not any(content_type.startswith(prefix) for prefix in allowed_types):
        kinds = " or ".join(prefix.rstrip("/") for prefix in allowed_types)
        raise HTTPException(status_code=400, detail=f"Only {kinds} files are allowed")

    data = await file.read(settings.upload_max_bytes + 1)
    if not data:
        raise HTTPException(status_code=400, detail="Uploaded file is empty")
    if len(data) > settings.upload_max_bytes:
        raise HTTPException(status_code=413, detail="File exceeds the upload size limit")

    return data


@router.post("/media", response_model=MediaItem)
async def upload_rating_media(
    file: UploadFile = File(...),
    current_user: CurrentUser = Depends(get_current_user),
    media_client: MediaHostClient = Depends(get_media_client)
):
    """
    Upload an image or video for a rating and return its media descriptor.
    The descriptor is attached to a rating by including it in the rating's media list.
    """
    data = await read_upload(file, allowed_types=("image/", "video/"))
    kind = "video" if file.content_type.startswith("video/") else "image"

    result = await media_client.upload(
        data,
        filename=file.filename or "upload",
        content_type=file.content_type,
        folder=RATINGS_FOLDER,
        resource_type=kind
    )

    return MediaItem(
        url=result.url,
        public_id=result.public_id,
        type=kind,
        thumbnail=media_client.thumbnail_url(result.public_id) if kind == "video" else None
    )
