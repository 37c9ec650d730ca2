"""Uploaded file records."""

from typing import Any

from readiness_engine.core.logging import get_logger
from readiness_engine.db.supabase_client import get_supabase

logger = get_logger(__name__)


def create_file(
    submission_id: str,
    path: str,
    mime: str,
    size: int,
    virus_ok: bool = True,
) -> dict[str, Any]:
    """
    Record an uploaded file.

    Args:
        submission_id: Owning submission UUID
        path: Storage path of the blob
        mime: Declared MIME type
        size: Declared size in bytes
        virus_ok: Virus scan flag (scanning is stubbed, so True)

    Returns:
        Created file row

    Raises:
        Exception: If database operation fails
    """
    supabase = get_supabase()

    try:
        response = (
            supabase.table("files")
            .insert(
                {
                    "submission_id": str(submission_id),
                    "path": path,
                    "mime": mime,
                    "size": size,
                    "virus_ok": virus_ok,
                }
            )
            .execute()
        )

        if not response.data:
            raise ValueError("No data returned from create_file")

        return response.data[0]

    except Exception as e:
        logger.error(f"Failed to record file {path}: {e}", extra={"submission_id": str(submission_id)})
        raise


def get_file(file_id: str) -> dict[str, Any] | None:
    supabase = get_supabase()

    try:
        response = supabase.table("files").select("*").eq("id", str(file_id)).limit(1).execute()
        return response.data[0] if response.data else None

    except Exception as e:
        logger.error(f"Failed to get file {file_id}: {e}")
        raise


def list_submission_files(submission_id: str) -> list[dict[str, Any]]:
    """List the files of a submission in upload order."""
    supabase = get_supabase()

    try:
        response = (
            supabase.table("files")
            .select("*")
            .eq("submission_id", str(submission_id))
            .order("created_at")
            .execute()
        )
        return response.data or []

    except Exception as e:
        logger.error(f"Failed to list files for submission {submission_id}: {e}")
        raise


def delete_file(file_id: str) -> None:
    """Delete a file row; its chunks cascade in the database."""
    supabase = get_supabase()

    try:
        supabase.table("files").delete().eq("id", str(file_id)).execute()
        logger.info(f"Deleted file {file_id}", extra={"file_id": str(file_id)})

    except Exception as e:
        logger.error(f"Failed to delete file {file_id}: {e}")
        raise


def list_venture_files(venture_id: str) -> list[dict[str, Any]]:
    """
    List a venture's files across all of its submissions, newest first.

    Each row carries its parent submission under the ``submissions`` key.
    """
    supabase = get_supabase()

    try:
        response = (
            supabase.table("files")
            .select("id, path, mime, size, created_at, submissions!inner(id, venture_id, status)")
            .eq("submissions.venture_id", str(venture_id))
            .order("created_at", desc=True)
            .execute()
        )
        return response.data or []

    except Exception as e:
        logger.error(f"Failed to list files for venture {venture_id}: {e}", extra={"venture_id": str(venture_id)})
        raise
