"""Chunk store: text segments with dimension tags and embeddings."""

from typing import Any

from readiness_engine.core.logging import get_logger
from readiness_engine.db.supabase_client import get_supabase

logger = get_logger(__name__)


def insert_chunk(
    file_id: str,
    content: str,
    source_ref: str,
    dimensions: list[str],
    embedding: list[float] | None,
) -> dict[str, Any]:
    """
    Persist one chunk.

    Args:
        file_id: Owning file UUID
        content: Chunk text
        source_ref: "<path>#chunk_<index>"
        dimensions: Dimension tags
        embedding: Vector, or None when stored without one

    Returns:
        Inserted chunk row

    Raises:
        Exception: If database operation fails
    """
    supabase = get_supabase()

    try:
        response = (
            supabase.table("chunks")
            .insert(
                {
                    "file_id": str(file_id),
                    "content": content,
                    "source_ref": source_ref,
                    "dimensions": dimensions,
                    "embedding": embedding,
                }
            )
            .execute()
        )

        if not response.data:
            raise ValueError(f"No data returned when inserting chunk {source_ref}")

        return response.data[0]

    except Exception as e:
        logger.error(f"Failed to insert chunk {source_ref}: {e}", extra={"file_id": str(file_id)})
        raise


def delete_file_chunks(file_id: str) -> int:
    """Delete all chunks of a file, returning how many were removed."""
    supabase = get_supabase()

    try:
        response = supabase.table("chunks").delete().eq("file_id", str(file_id)).execute()
        removed = len(response.data or [])
        logger.info(f"Deleted {removed} prior chunks", extra={"file_id": str(file_id)})
        return removed

    except Exception as e:
        logger.error(f"Failed to delete chunks for file {file_id}: {e}")
        raise


def list_dimension_chunks(
    file_ids: list[str],
    dimension: str,
    limit: int = 5,
) -> list[dict[str, Any]]:
    """
    List chunks of the given files tagged with a dimension.

    Args:
        file_ids: File UUIDs to search
        dimension: Dimension tag to filter on
        limit: Max chunks to return

    Returns:
        Chunk rows (id, file_id, content, source_ref, dimensions)
    """
    if not file_ids:
        return []

    supabase = get_supabase()

    try:
        response = (
            supabase.table("chunks")
            .select("id, file_id, content, source_ref, dimensions")
            .in_("file_id", [str(f) for f in file_ids])
            .contains("dimensions", [dimension])
            .limit(limit)
            .execute()
        )
        return response.data or []

    except Exception as e:
        logger.error(f"Failed to list {dimension} chunks: {e}")
        raise
