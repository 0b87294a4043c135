import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from motour.models import Destination, Rating, SavedDestination, User
from motour.services.ratings import round_rating

logger = logging.getLogger(__name__)

# Lower bound (in days) applied to the "new" counters for each range
RANGES: Dict[str, Optional[int]] = {
    "7d": 7,
    "30d": 30,
    "90d": 90,
    "all": None,
}

TREND_WINDOW_DAYS = 30
TOP_N = 5


class DashboardMetrics:
    """
    Read-only aggregate queries for the admin dashboard.

    Every metric runs independently: a failing query is logged, reported as
    None and named in ``errors`` while the remaining metrics still compute.
    """

    def __init__(self, db: Session, now: Optional[datetime] = None):
        self.db = db
        self.now = now or datetime.now(timezone.utc)
        self.errors: List[str] = []

    def _since(self, days: Optional[int]) -> Optional[datetime]:
        return self.now - timedelta(days=days) if days is not None else None

    def _safe(self, name: str, compute: Callable[[], Any]) -> Any:
        try:
            return compute()
        except Exception:
            self.db.rollback()
            self.errors.append(name)
            logger.error("Metric computation failed", extra={"metric": name}, exc_info=True)
            return None

    def _count(self, model, *criteria) -> int:
        return self.db.query(func.count(model.id)).filter(*criteria).scalar() or 0

    def _count_since(self, model, since: Optional[datetime]) -> int:
        if since is None:
            return self._count(model)
        return self._count(model, model.created_at >= since)

    def _daily_trend(self, model) -> List[Dict[str, Any]]:
        """Per-day creation counts over the trend window, oldest first."""
        day = func.date(model.created_at)
        rows = (
            self.db.query(day.label("day"), func.count(model.id))
            .filter(model.created_at >= self._since(TREND_WINDOW_DAYS))
            .group_by(day)
            .order_by(day)
            .all()
        )
        return [{"date": str(bucket), "count": count} for bucket, count in rows]

    def _destinations_by_category(self) -> List[Dict[str, Any]]:
        count = func.count(Destination.id)
        rows = (
            self.db.query(Destination.category, count)
            .group_by(Destination.category)
            .order_by(count.desc(), Destination.category)
            .all()
        )
        return [{"category": category, "count": total} for category, total in rows]

    def _top_rated_destinations(self) -> List[Dict[str, Any]]:
        destinations = (
            self.db.query(Destination)
            .order_by(Destination.average_rating.desc(), Destination.id)
            .limit(TOP_N)
            .all()
        )
        return [
            {
                "id": destination.id,
                "name": destination.name,
                "averageRating": destination.average_rating,
                "category": destination.category,
                "mainPhoto": (destination.photos or {}).get("main"),
            }
            for destination in destinations
        ]

    def _overall_average_rating(self) -> float:
        mean = self.db.query(func.avg(Rating.rating)).scalar()
        return round_rating(mean) if mean is not None else 0

    def _ratings_per_destination(self) -> List[Dict[str, Any]]:
        count = func.count(Rating.id)
        rows = (
            self.db.query(Rating.destination_id, Destination.name, count, func.avg(Rating.rating))
            .outerjoin(Destination, Destination.id == Rating.destination_id)
            .group_by(Rating.destination_id, Destination.name)
            .order_by(count.desc(), Rating.destination_id)
            .limit(TOP_N)
            .all()
        )
        return [
            {
                "destinationId": destination_id,
                "destinationName": name,
                "count": total,
                "averageRating": round_rating(mean),
            }
            for destination_id, name, total, mean in rows
        ]

    def overview(self, range_key: str = "30d") -> Dict[str, Any]:
        """Build the dashboard summary; ``range_key`` only affects the "new" counters."""
        if range_key not in RANGES:
            raise ValueError(f"Unsupported range: {range_key}")

        since = self._since(RANGES[range_key])
        self.errors = []

        metrics = {
            "range": range_key,
            "generatedAt": self.now.isoformat(),
            "users": {
                "total": self._safe("users.total", lambda: self._count(User)),
                "new": self._safe("users.new", lambda: self._count_since(User, since)),
                "verified": self._safe("users.verified", lambda: self._count(User, User.is_verified.is_(True))),
                "blocked": self._safe("users.blocked", lambda: self._count(User, User.status == "blocked")),
                "registrationTrend": self._safe("users.registrationTrend", lambda: self._daily_trend(User)),
            },
            "destinations": {
                "total": self._safe("destinations.total", lambda: self._count(Destination)),
                "new": self._safe("destinations.new", lambda: self._count_since(Destination, since)),
                "byCategory": self._safe("destinations.byCategory", self._destinations_by_category),
                "topRated": self._safe("destinations.topRated", self._top_rated_destinations),
            },
            "ratings": {
                "total": self._safe("ratings.total", lambda: self._count(Rating)),
                "new": self._safe("ratings.new", lambda: self._count_since(Rating, since)),
                "overallAverage": self._safe("ratings.overallAverage", self._overall_average_rating),
                "perDestination": self._safe("ratings.perDestination", self._ratings_per_destination),
            },
            "savedDestinations": {
                "total": self._safe("savedDestinations.total", lambda: self._count(SavedDestination)),
                "new": self._safe("savedDestinations.new", lambda: self._count_since(SavedDestination, since)),
                "trend": self._safe("savedDestinations.trend", lambda: self._daily_trend(SavedDestination)),
            },
        }
        metrics["errors"] = list(self.errors)

        if self.errors:
            logger.warning("Dashboard metrics partially computed", extra={"failed": self.errors})
        return metrics
