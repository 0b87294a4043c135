import asyncio
import hashlib
import logging
import time
from functools import lru_cache
from typing import Any, Dict, Optional

import aiohttp
from pydantic import BaseModel

from motour.core.config import settings

logger = logging.getLogger(__name__)

DESTINATIONS_FOLDER = "motour/destinations"
PROFILES_FOLDER = "motour/profiles"
VEHICLES_FOLDER = "motour/vehicles"
RATINGS_FOLDER = "motour/ratings"


class MediaUploadError(Exception):
    """Raised when the media host rejects or fails an upload."""


class UploadResult(BaseModel):
    url: str
    public_id: str
    resource_type: str = "image"


def parse_upload_response(status: int, payload: Any) -> UploadResult:
    """Turn the media host's JSON answer into an UploadResult or a MediaUploadError."""
    if not isinstance(payload, dict):
        raise MediaUploadError(f"Media host returned {status} with an unexpected body")

    if status != 200:
        error = payload.get("error")
        if isinstance(error, dict):
            message = error.get("message") or "upload rejected"
        else:
            message = error or "upload rejected"
        raise MediaUploadError(f"Media host returned {status}: {message}")

    url = payload.get("secure_url")
    public_id = payload.get("public_id")
    if not isinstance(url, str) or not isinstance(public_id, str):
        raise MediaUploadError("Media host response is missing the asset url or id")

    return UploadResult(url=url, public_id=public_id, resource_type=str(payload.get("resource_type") or "image"))


class MediaHostClient:
    """Signed-upload client for a Cloudinary-compatible media host."""

    def __init__(
        self,
        cloud_name: Optional[str],
        api_key: Optional[str],
        api_secret: Optional[str],
        upload_base_url: str = "https://api.cloudinary.com/v1_1",
        delivery_base_url: str = "https://res.cloudinary.com",
        timeout_seconds: int = 30
    ):
        self.cloud_name = cloud_name
        self.api_key = api_key
        self.api_secret = api_secret
        self.upload_base_url = upload_base_url.rstrip("/")
        self.delivery_base_url = delivery_base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds

    @property
    def configured(self) -> bool:
        return bool(self.cloud_name and self.api_key and self.api_secret)

    def _sign(self, params: Dict[str, Any]) -> str:
        """SHA-1 over the sorted parameters followed by the API secret."""
        to_sign = "&".join(f"{key}={params[key]}" for key in sorted(params) if params[key] not in (None, ""))
        return hashlib.sha1(f"{to_sign}{self.api_secret}".encode()).hexdigest()

    async def upload(
        self,
        data: bytes,
        filename: str,
        content_type: str,
        folder: str,
        resource_type: str = "auto",
        transformation: Optional[str] = None
    ) -> UploadResult:
        """Upload raw bytes and return the hosted URL and asset id."""
        if not self.configured:
            raise MediaUploadError("Media host credentials are not configured")

        params = {
            "folder": folder,
            "timestamp": int(time.time()),
            "transformation": transformation,
        }
        form = aiohttp.FormData()
        for key, value in params.items():
            if value not in (None, ""):
                form.add_field(key, str(value))
        form.add_field("api_key", self.api_key)
        form.add_field("signature", self._sign(params))
        form.add_field("file", data, filename=filename, content_type=content_type)

        url = f"{self.upload_base_url}/{self.cloud_name}/{resource_type}/upload"
        timeout = aiohttp.ClientTimeout(total=self.timeout_seconds)

        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.post(url, data=form) as response:
                    status = response.status
                    payload = await response.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            raise MediaUploadError(f"Media host unreachable: {e}") from e

        result = parse_upload_response(status, payload)
        logger.info("Media uploaded", extra={"public_id": result.public_id, "folder": folder})
        return result

    def thumbnail_url(self, public_id: str) -> str:
        """Poster frame URL for an uploaded video."""
        return f"{self.delivery_base_url}/{self.cloud_name}/video/upload/so_0/{public_id}.jpg"


@lru_cache()
def get_media_client() -> MediaHostClient:
    """FastAPI dependency providing the configured media host client."""
    return MediaHostClient(
        cloud_name=settings.media_cloud_name,
        api_key=settings.media_api_key,
        api_secret=settings.media_api_secret,
        upload_base_url=settings.media_upload_base_url,
        delivery_base_url=settings.media_delivery_base_url,
        timeout_seconds=settings.media_upload_timeout_seconds
    )
