from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Any, Dict, Literal

from motour.core.database import get_db
from motour.auth.middleware import require_admin_role, CurrentAdmin
from motour.services.metrics import DashboardMetrics

router = APIRouter(prefix="/admin/metrics", tags=["admin"])


@router.get("/overview")
async def get_overview(
    range_key: Literal["7d", "30d", "90d", "all"] = Query("30d", alias="range", description="Window for the \"new\" counters"),
    db: Session = Depends(get_db),
    current_admin: CurrentAdmin = Depends(require_admin_role())
) -> Dict[str, Any]:
    """
    Dashboard metrics: entity totals and new-in-range counts, category breakdown,
    top rated destinations, per-destination rating counts and 30-day trends.
    """
    return {"metrics": DashboardMetrics(db).overview(range_key)}
