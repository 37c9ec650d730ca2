"""Submission lifecycle database operations."""

from datetime import datetime, timezone
from typing import Any

from readiness_engine.core.logging import get_logger
from readiness_engine.db.supabase_client import get_supabase

logger = get_logger(__name__)

SUBMISSION_STATUSES = ("pending", "processing", "completed")


def _utc_now_iso() -> str:
    """Get current UTC time as ISO string."""
    return datetime.now(timezone.utc).isoformat()


def create_submission(venture_id: str, status: str = "pending") -> dict[str, Any]:
    """
    Create a submission (one upload batch) for a venture.

    Args:
        venture_id: Venture UUID
        status: Initial status

    Returns:
        Created submission row

    Raises:
        Exception: If database operation fails
    """
    supabase = get_supabase()

    try:
        response = (
            supabase.table("submissions")
            .insert({"venture_id": str(venture_id), "status": status})
            .execute()
        )

        if not response.data:
            raise ValueError("No data returned from create_submission")

        submission = response.data[0]
        logger.info(
            f"Created submission {submission['id']}",
            extra={"venture_id": str(venture_id), "submission_id": submission["id"]},
        )
        return submission

    except Exception as e:
        logger.error(f"Failed to create submission for venture {venture_id}: {e}")
        raise


def get_latest_submission(venture_id: str) -> dict[str, Any] | None:
    """
    Get the most recent submission for a venture.

    Args:
        venture_id: Venture UUID

    Returns:
        Latest submission by created_at, or None when the venture has none
    """
    supabase = get_supabase()

    try:
        response = (
            supabase.table("submissions")
            .select("*")
            .eq("venture_id", str(venture_id))
            .order("created_at", desc=True)
            .limit(1)
            .execute()
        )
        return response.data[0] if response.data else None

    except Exception as e:
        logger.error(f"Failed to get latest submission for venture {venture_id}: {e}")
        raise


def update_submission_status(submission_id: str, status: str) -> None:
    """
    Move a submission to a new status.

    Raises:
        ValueError: If the status is unknown or the submission does not exist
    """
    if status not in SUBMISSION_STATUSES:
        raise ValueError(f"Invalid submission status: {status}")

    supabase = get_supabase()

    try:
        response = (
            supabase.table("submissions")
            .update({"status": status, "updated_at": _utc_now_iso()})
            .eq("id", str(submission_id))
            .execute()
        )

        if not response.data:
            raise ValueError(f"Submission not found: {submission_id}")

        logger.info(f"Submission {submission_id} -> {status}", extra={"submission_id": str(submission_id)})

    except Exception as e:
        logger.error(f"Failed to update submission {submission_id}: {e}")
        raise


def delete_submission(submission_id: str) -> None:
    """Delete a submission; files and chunks cascade in the database."""
    supabase = get_supabase()

    try:
        supabase.table("submissions").delete().eq("id", str(submission_id)).execute()
        logger.info(f"Deleted submission {submission_id}")

    except Exception as e:
        logger.error(f"Failed to delete submission {submission_id}: {e}")
        raise


def list_stale_submissions(created_before: str) -> list[dict[str, Any]]:
    """
    List submissions still pending or processing that were created before a cutoff.

    Args:
        created_before: ISO timestamp cutoff

    Returns:
        Submission rows, oldest first
    """
    supabase = get_supabase()

    try:
        response = (
            supabase.table("submissions")
            .select("*")
            .in_("status", ["pending", "processing"])
            .lt("created_at", created_before)
            .order("created_at")
            .execute()
        )
        return response.data or []

    except Exception as e:
        logger.error(f"Failed to list stale submissions: {e}")
        raise
