"""API endpoints for rubric and stage reference data."""

from fastapi import APIRouter, HTTPException

from readiness_engine.core.logging import get_logger
from readiness_engine.services.reference_data import get_rubric_service, get_stage_service

logger = get_logger(__name__)

router = APIRouter()


@router.get("/rubric")
async def get_rubric() -> dict:
    """Level descriptions (1-9) for every dimension."""
    try:
        rubric = get_rubric_service().get_rubric()
    except Exception as e:
        logger.error(f"Failed to load rubric: {e}")
        raise HTTPException(status_code=500, detail="Failed to load rubric") from e

    # JSON object keys are strings
    return {dimension: {str(k): v for k, v in levels.items()} for dimension, levels in rubric.items()}


@router.get("/stages")
async def get_stages() -> list[dict]:
    """Funding stages in display order."""
    return get_stage_service().get_stages()


@router.post("/rubric/invalidate")
async def invalidate_rubric() -> dict:
    get_rubric_service().invalidate()
    logger.info("Rubric cache invalidated")
    return {"success": True}


@router.post("/stages/invalidate")
async def invalidate_stages() -> dict:
    get_stage_service().invalidate()
    logger.info("Stage cache invalidated")
    return {"success": True}


@router.get("/stages/{stage_id}")
async def get_stage(stage_id: str) -> dict:
    stage = get_stage_service().get_stage(stage_id)
    if not stage:
        raise HTTPException(status_code=404, detail=f"Unknown stage: {stage_id}")
    return stage
