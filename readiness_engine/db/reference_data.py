"""Rubric and stage reference tables."""

from typing import Any

from readiness_engine.core.logging import get_logger
from readiness_engine.db.supabase_client import get_supabase

logger = get_logger(__name__)


def list_rubric_rows() -> list[dict[str, Any]]:
    """All rubric rows: dimension + level_descriptions jsonb."""
    supabase = get_supabase()

    try:
        response = supabase.table("rubric").select("dimension, level_descriptions").execute()
        return response.data or []

    except Exception as e:
        logger.error(f"Failed to load rubric: {e}")
        raise


def list_stages() -> list[dict[str, Any]]:
    """All funding stages in display order."""
    supabase = get_supabase()

    try:
        response = supabase.table("stages").select("*").order("display_order").execute()
        return response.data or []

    except Exception as e:
        logger.error(f"Failed to load stages: {e}")
        raise
