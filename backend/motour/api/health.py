from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from motour.core.database import SessionLocal
from motour.models import Destination, Rating
from motour.services.media import MediaHostClient, get_media_client
import asyncio
from datetime import datetime
from typing import Dict, Any

router = APIRouter()


async def check_database() -> Dict[str, Any]:
    """Check database connectivity and that the core tables answer."""
    try:
        db = SessionLocal()
        try:
            db.execute(text("SELECT 1")).fetchone()

            return {
                "status": "healthy",
                "destination_count": db.query(Destination).count(),
                "rating_count": db.query(Rating).count(),
                "timestamp": datetime.now().isoformat()
            }
        finally:
            db.close()
    except SQLAlchemyError as e:
        return {
            "status": "unhealthy",
            "error": str(e),
            "timestamp": datetime.now().isoformat()
        }


async def check_media_host(client: MediaHostClient) -> Dict[str, Any]:
    """Uploads need media host credentials; without them the API runs degraded."""
    return {
        "status": "healthy" if client.configured else "degraded",
        "cloud_name": client.cloud_name,
        "timestamp": datetime.now().isoformat()
    }


@router.get("/healthz")
async def health_check(media_client: MediaHostClient = Depends(get_media_client)):
    """
    Health check with a database round-trip and a media host configuration check.
    Returns 503 only when the database is down; missing media credentials report "degraded".
    """
    db_check, media_check = await asyncio.gather(
        check_database(),
        check_media_host(media_client),
        return_exceptions=True
    )

    if isinstance(db_check, Exception):
        db_check = {"status": "unhealthy", "error": str(db_check)}
    if isinstance(media_check, Exception):
        media_check = {"status": "unhealthy", "error": str(media_check)}

    if db_check.get("status") != "healthy":
        overall_status = "unhealthy"
    elif media_check.get("status") != "healthy":
        overall_status = "degraded"
    else:
        overall_status = "healthy"

    response = {
        "status": overall_status,
        "timestamp": datetime.now().isoformat(),
        "checks": {
            "database": db_check,
            "media_host": media_check
        },
        "version": "1.0.0"
    }

    if overall_status == "unhealthy":
        raise HTTPException(status_code=503, detail=response)

    return response


@router.get("/api/health")
async def simple_health_check():
    """Simple health check for load balancers."""
    return {"status": "ok", "message": "Motour API is running", "timestamp": datetime.now().isoformat()}
