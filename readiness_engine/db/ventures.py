"""Venture database operations."""

from typing import Any

from readiness_engine.core.logging import get_logger
from readiness_engine.db.supabase_client import get_supabase

logger = get_logger(__name__)


def get_venture(venture_id: str) -> dict[str, Any] | None:
    """
    Get a venture with its intake fields.

    Args:
        venture_id: Venture UUID

    Returns:
        Venture dict or None if not found

    Raises:
        Exception: If database operation fails
    """
    supabase = get_supabase()

    try:
        response = supabase.table("ventures").select("*").eq("id", str(venture_id)).limit(1).execute()
        return response.data[0] if response.data else None

    except Exception as e:
        logger.error(f"Failed to get venture {venture_id}: {e}")
        raise
