"""Recommendation inserts (append-only)."""

from typing import Any

from readiness_engine.core.logging import get_logger
from readiness_engine.db.supabase_client import get_supabase

logger = get_logger(__name__)


def insert_recommendations(
    venture_id: str,
    dimension: str,
    items: list[dict[str, Any]],
) -> int:
    """
    Append recommendations for a venture dimension with status 'open'.

    Rows are never deduplicated; re-running an assessment adds a new set.

    Args:
        venture_id: Venture UUID
        dimension: Dimension name
        items: Dicts with action, impact and optional eta_weeks/dependency

    Returns:
        Number of rows inserted

    Raises:
        Exception: If database operation fails
    """
    if not items:
        return 0

    rows = [
        {
            "venture_id": str(venture_id),
            "dimension": dimension,
            "action": item["action"],
            "impact": item["impact"],
            "eta_weeks": item.get("eta_weeks"),
            "dependency": item.get("dependency"),
            "status": "open",
        }
        for item in items
    ]

    supabase = get_supabase()

    try:
        response = supabase.table("recommendations").insert(rows).execute()
        return len(response.data or rows)

    except Exception as e:
        logger.error(
            f"Failed to insert {dimension} recommendations: {e}",
            extra={"venture_id": str(venture_id)},
        )
        raise

