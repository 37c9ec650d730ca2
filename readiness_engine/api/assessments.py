"""API endpoints for queueing and re-running assessments."""

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, ConfigDict, Field

from readiness_engine.core.dimensions import is_dimension
from readiness_engine.core.logging import get_logger
from readiness_engine.services.assessment_queue import QueueConnectionError, enqueue_assessment
from readiness_engine.services.assessment_worker import AssessmentWorker, VentureNotFoundError
from readiness_engine.services.reference_data import get_rubric_service

logger = get_logger(__name__)

router = APIRouter()


class AssessRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    venture_id: str | None = Field(default=None, alias="ventureId")


class AssessResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool
    job_id: str = Field(..., alias="jobId")


class RerunRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    venture_id: str | None = Field(default=None, alias="ventureId")
    dimension: str | None = None


@router.post("/assess")
async def assess_venture(request: AssessRequest) -> AssessResponse:
    """
    Queue an assessment of all dimensions for a venture.

    Raises:
        HTTPException 400: If ventureId is missing
        HTTPException 503: If the queue is unavailable
    """
    if not request.venture_id:
        raise HTTPException(status_code=400, detail="ventureId is required")

    try:
        job_id = enqueue_assessment(request.venture_id)
    except QueueConnectionError as e:
        raise HTTPException(status_code=503, detail="Assessment queue unavailable") from e

    return AssessResponse(success=True, job_id=job_id)


@router.post("/rerun-analysis")
async def rerun_analysis(request: RerunRequest) -> dict:
    """
    Re-score one dimension immediately, outside the queue.

    Raises:
        HTTPException 400: If ventureId or dimension is missing or unknown
        HTTPException 404: If the venture does not exist
        HTTPException 500: If scoring or persistence fails
    """
    if not request.venture_id or not request.dimension:
        raise HTTPException(status_code=400, detail="ventureId and dimension are required")

    if not is_dimension(request.dimension):
        raise HTTPException(status_code=400, detail=f"Unknown dimension: {request.dimension}")

    try:
        result = await AssessmentWorker().rerun_dimension(request.venture_id, request.dimension)
    except VentureNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except Exception as e:
        logger.exception(f"Re-run failed: {e}", extra={"venture_id": request.venture_id})
        raise HTTPException(status_code=500, detail="Failed to re-run analysis") from e

    try:
        description = get_rubric_service().get_level_description(request.dimension, result["level"])
    except Exception as e:
        logger.warning(f"Rubric unavailable for level description: {e}")
        description = None

    return {"success": True, "levelDescription": description, **result}
