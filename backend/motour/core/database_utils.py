import math
from typing import Any, Dict, List, Tuple

from sqlalchemy.orm import Query


def paginate(query: Query, page: int, limit: int) -> Tuple[List[Any], Dict[str, int]]:
    """Apply skip/limit to a query and build the pagination block for the response."""
    page = max(page, 1)
    limit = max(limit, 1)

    total = query.order_by(None).count()
    items = query.offset((page - 1) * limit).limit(limit).all()

    return items, {
        "current": page,
        "pages": math.ceil(total / limit),
        "total": total,
        "limit": limit
    }


def like_pattern(term: str) -> str:
    """Build a case-insensitive substring pattern with LIKE wildcards escaped."""
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"
