"""Blob storage helpers over Supabase Storage."""

from readiness_engine.core.config import get_settings
from readiness_engine.core.logging import get_logger
from readiness_engine.db.supabase_client import get_supabase

logger = get_logger(__name__)


def _bucket():
    return get_supabase().storage.from_(get_settings().STORAGE_BUCKET)


def download_file(path: str) -> bytes:
    """
    Download a stored blob.

    Args:
        path: Object path inside the uploads bucket

    Returns:
        Raw file bytes

    Raises:
        ValueError: If storage returned nothing
        Exception: If the storage call fails
    """
    try:
        data = _bucket().download(path)
        if not data:
            raise ValueError(f"Empty download for {path}")
        return data

    except Exception as e:
        logger.error(f"Failed to download {path}: {e}")
        raise


def upload_file(path: str, content: bytes, content_type: str) -> None:
    """Upload a blob without overwriting an existing object."""
    try:
        _bucket().upload(
            path=path,
            file=content,
            file_options={"content-type": content_type, "upsert": "false"},
        )
        logger.info(f"Uploaded {path} ({len(content)} bytes)")

    except Exception as e:
        logger.error(f"Failed to upload {path}: {e}")
        raise


def remove_files(paths: list[str]) -> None:
    """Remove blobs; an empty list is a no-op."""
    if not paths:
        return

    try:
        _bucket().remove(paths)
        logger.info(f"Removed {len(paths)} object(s) from storage")

    except Exception as e:
        logger.error(f"Failed to remove {paths}: {e}")
        raise
