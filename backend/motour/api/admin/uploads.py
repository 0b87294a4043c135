from fastapi import APIRouter, Depends, File, UploadFile
from pydantic import BaseModel

from motour.auth.middleware import require_admin_role, CurrentAdmin
from motour.services.media import MediaHostClient, get_media_client, DESTINATIONS_FOLDER
from motour.api.uploads import read_upload

router = APIRouter(prefix="/admin/uploads", tags=["admin"])


class ImageUploadResponse(BaseModel):
    url: str
    publicId: str


@router.post("/image", response_model=ImageUploadResponse)
async def upload_image(
    image: UploadFile = File(...),
    current_admin: CurrentAdmin = Depends(require_admin_role()),
    media_client: MediaHostClient = Depends(get_media_client)
):
    """Upload a destination photo; the returned URL goes into a destination's photos."""
    data = await read_upload(image, allowed_types=("image/",))

    result = await media_client.upload(
        data,
        filename=image.filename or "destination",
        content_type=image.content_type,
        folder=DESTINATIONS_FOLDER,
        resource_type="image",
        transformation="q_auto,f_auto"
    )

    return ImageUploadResponse(url=result.url, publicId=result.public_id)
