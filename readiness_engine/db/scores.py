"""Score upserts: one row per (venture, dimension)."""

from datetime import datetime, timezone
from typing import Any

from readiness_engine.core.logging import get_logger
from readiness_engine.db.supabase_client import get_supabase

logger = get_logger(__name__)


def _utc_now_iso() -> str:
    """Get current UTC time as ISO string."""
    return datetime.now(timezone.utc).isoformat()


def upsert_score(venture_id: str, dimension: str, level: int, confidence: float) -> dict[str, Any]:
    """
    Insert or overwrite the score for a venture dimension.

    The (venture_id, dimension) unique constraint is the conflict target,
    so concurrent writers resolve last-write-wins.

    Raises:
        Exception: If database operation fails
    """
    supabase = get_supabase()

    try:
        response = (
            supabase.table("scores")
            .upsert(
                {
                    "venture_id": str(venture_id),
                    "dimension": dimension,
                    "level": level,
                    "confidence": confidence,
                    "updated_at": _utc_now_iso(),
                },
                on_conflict="venture_id,dimension",
            )
            .execute()
        )

        if not response.data:
            raise ValueError(f"No data returned when upserting {dimension} score")

        return response.data[0]

    except Exception as e:
        logger.error(f"Failed to upsert {dimension} score: {e}", extra={"venture_id": str(venture_id)})
        raise

