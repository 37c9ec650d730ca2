"""API endpoint for indexing a submission's uploaded files."""

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, ConfigDict, Field

from readiness_engine.core.logging import get_logger
from readiness_engine.db.files import list_submission_files
from readiness_engine.services.ingestion import ingest_submission

logger = get_logger(__name__)

router = APIRouter()


class ProcessFilesRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    submission_id: str | None = Field(default=None, alias="submissionId")
    venture_id: str | None = Field(default=None, alias="ventureId")


@router.post("/process-files")
async def process_files(request: ProcessFilesRequest) -> dict:
    """
    Extract, chunk, tag and embed every file of a submission.

    Returns:
        Per-file outcomes plus totals

    Raises:
        HTTPException 400: If submissionId or ventureId is missing
        HTTPException 404: If the submission has no files
        HTTPException 500: If the file list cannot be loaded
    """
    if not request.submission_id or not request.venture_id:
        raise HTTPException(status_code=400, detail="submissionId and ventureId are required")

    ctx = {"submission_id": request.submission_id, "venture_id": request.venture_id}

    try:
        files = list_submission_files(request.submission_id)
    except Exception as e:
        logger.error(f"Failed to list submission files: {e}", extra=ctx)
        raise HTTPException(status_code=500, detail="Failed to load submission files") from e

    if not files:
        raise HTTPException(status_code=404, detail="No files found for submission")

    summary = await ingest_submission(request.submission_id, files=files)

    return {
        "success": True,
        "submissionId": summary.submission_id,
        "filesProcessed": len(summary.files),
        "chunksStored": summary.chunks_stored,
        "counts": summary.counts(),
        "files": [f.model_dump() for f in summary.files],
    }
