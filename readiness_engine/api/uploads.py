"""API endpoints for venture document uploads."""

import base64
import binascii
import os
import re
import time

from fastapi import APIRouter, BackgroundTasks, HTTPException, Query
from pydantic import BaseModel, ConfigDict, Field

from readiness_engine.core.config import get_settings
from readiness_engine.core.document_processing import validate_upload
from readiness_engine.core.logging import get_logger
from readiness_engine.db.files import (
    create_file,
    delete_file,
    get_file,
    list_submission_files,
    list_venture_files,
)
from readiness_engine.db.storage import remove_files, upload_file
from readiness_engine.db.submissions import create_submission, delete_submission
from readiness_engine.db.ventures import get_venture
from readiness_engine.services.ingestion import ingest_submission

logger = get_logger(__name__)

router = APIRouter()


class UploadRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    venture_id: str | None = Field(default=None, alias="ventureId")
    filename: str | None = None
    mime_type: str | None = Field(default=None, alias="mimeType")
    content_base64: str | None = Field(default=None, alias="contentBase64")


def sanitize_filename(filename: str) -> str:
    """Replace everything except letters, digits, dots and dashes with '_'."""
    return re.sub(r"[^a-zA-Z0-9.-]", "_", filename)


def display_filename(path: str) -> str:
    """Last path segment without its '<timestamp>_' prefix."""
    return re.sub(r"^\d+_", "", path.split("/")[-1])


async def _run_ingestion(submission_id: str) -> None:
    try:
        await ingest_submission(submission_id)
    except Exception as e:
        logger.error(f"Background ingestion failed: {e}", extra={"submission_id": submission_id})


@router.post("/uploads")
async def upload_document(request: UploadRequest, background_tasks: BackgroundTasks) -> dict:
    """
    Store a venture document and schedule its ingestion.

    Creates a pending submission, stores the blob, records the file and
    indexes it in the background.

    Raises:
        HTTPException 400: If fields are missing, content is not base64, or the file is not allowed
        HTTPException 404: If the venture does not exist
        HTTPException 500: If storage or database writes fail (partial writes are removed)
    """
    if not (request.venture_id and request.filename and request.mime_type and request.content_base64):
        raise HTTPException(
            status_code=400,
            detail="ventureId, filename, mimeType and contentBase64 are required",
        )

    try:
        file_bytes = base64.b64decode(request.content_base64, validate=True)
    except (binascii.Error, ValueError) as e:
        raise HTTPException(status_code=400, detail="contentBase64 is not valid base64") from e

    settings = get_settings()
    _, extension = os.path.splitext(request.filename)
    is_valid, error_msg = validate_upload(
        size=len(file_bytes),
        mime_type=request.mime_type,
        file_extension=extension,
        max_bytes=settings.MAX_UPLOAD_BYTES,
    )
    if not is_valid:
        raise HTTPException(status_code=400, detail=error_msg)

    venture = get_venture(request.venture_id)
    if not venture:
        raise HTTPException(status_code=404, detail="Venture not found")

    ctx = {"venture_id": request.venture_id}

    try:
        submission = create_submission(request.venture_id, status="pending")
    except Exception as e:
        raise HTTPException(status_code=500, detail="Failed to create submission") from e

    path = f"{request.venture_id}/{int(time.time() * 1000)}_{sanitize_filename(request.filename)}"

    try:
        upload_file(path, file_bytes, request.mime_type)
    except Exception as e:
        logger.error(f"Storage upload failed, removing submission: {e}", extra=ctx)
        delete_submission(submission["id"])
        raise HTTPException(status_code=500, detail="File upload failed") from e

    try:
        file_row = create_file(submission["id"], path, request.mime_type, len(file_bytes), virus_ok=True)
    except Exception as e:
        logger.error(f"File record failed, removing blob and submission: {e}", extra=ctx)
        remove_files([path])
        delete_submission(submission["id"])
        raise HTTPException(status_code=500, detail="Failed to record file") from e

    background_tasks.add_task(_run_ingestion, submission["id"])

    logger.info(
        f"Uploaded {request.filename} for {venture.get('name', request.venture_id)}",
        extra={**ctx, "submission_id": submission["id"], "file_id": file_row["id"]},
    )

    return {
        "success": True,
        "submissionId": submission["id"],
        "fileId": file_row["id"],
        "fileName": request.filename,
        "message": f"Successfully uploaded {request.filename}",
    }


@router.get("/uploads")
async def list_uploads(venture_id: str | None = Query(default=None, alias="ventureId")) -> dict:
    """
    List a venture's uploaded files, newest first.

    Raises:
        HTTPException 400: If ventureId is missing
        HTTPException 500: If the query fails
    """
    if not venture_id:
        raise HTTPException(status_code=400, detail="ventureId is required")

    try:
        rows = list_venture_files(venture_id)
    except Exception as e:
        raise HTTPException(status_code=500, detail="Failed to fetch files") from e

    files = []
    for row in rows:
        submission = row.get("submissions") or {}
        if not submission.get("id"):
            continue
        files.append(
            {
                "id": row["id"],
                "fileName": display_filename(row["path"]),
                "mimeType": row.get("mime"),
                "size": row.get("size"),
                "uploadedAt": row.get("created_at"),
                "submissionId": submission["id"],
                "submissionStatus": submission.get("status", "unknown"),
            }
        )

    return {"success": True, "files": files}


@router.delete("/uploads/{file_id}")
async def delete_upload(file_id: str) -> dict:
    """
    Delete an uploaded file and its chunks.

    The owning submission is deleted too once it has no files left.

    Raises:
        HTTPException 404: If the file does not exist
        HTTPException 500: If deletion fails
    """
    file_row = get_file(file_id)
    if not file_row:
        raise HTTPException(status_code=404, detail="File not found")

    submission_id = file_row["submission_id"]

    try:
        remove_files([file_row["path"]])
        delete_file(file_id)

        submission_deleted = False
        if not list_submission_files(submission_id):
            delete_submission(submission_id)
            submission_deleted = True

    except Exception as e:
        logger.error(f"Failed to delete upload: {e}", extra={"file_id": file_id})
        raise HTTPException(status_code=500, detail="Failed to delete file") from e

    return {"success": True, "fileId": file_id, "submissionDeleted": submission_deleted}
