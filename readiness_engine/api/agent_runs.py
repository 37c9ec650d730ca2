"""API endpoint for reading agent run audit records."""

from fastapi import APIRouter, HTTPException

from readiness_engine.core.dimensions import ALL_DIMENSIONS, dimension_slug
from readiness_engine.core.logging import get_logger
from readiness_engine.db.agent_runs import get_latest_agent_run, list_venture_agent_runs
from readiness_engine.db.submissions import get_latest_submission

logger = get_logger(__name__)

router = APIRouter()


def _resolve_dimension(value: str) -> str | None:
    """Accept a dimension name or its slug ('customer_market')."""
    if value in ALL_DIMENSIONS:
        return value
    return next((d for d in ALL_DIMENSIONS if dimension_slug(d) == value.lower()), None)


@router.get("/agent-runs/{venture_id}/{dimension:path}/all")
async def list_agent_runs(venture_id: str, dimension: str) -> list[dict]:
    """
    Run history for a dimension across all of the venture's submissions, newest first.

    Raises:
        HTTPException 400: If the dimension is unknown
        HTTPException 500: If the query fails
    """
    resolved = _resolve_dimension(dimension)
    if not resolved:
        raise HTTPException(status_code=400, detail=f"Unknown dimension: {dimension}")

    try:
        return list_venture_agent_runs(venture_id, resolved)
    except Exception as e:
        logger.error(f"Failed to list agent runs: {e}", extra={"venture_id": venture_id})
        raise HTTPException(status_code=500, detail="Failed to fetch agent runs") from e


@router.get("/agent-runs/{venture_id}/{dimension:path}")
async def get_agent_run(venture_id: str, dimension: str) -> dict:
    """
    Latest agent run for a dimension of the venture's latest submission.

    Raises:
        HTTPException 400: If the dimension is unknown
        HTTPException 404: If the venture has no submission or no run for the dimension
    """
    resolved = _resolve_dimension(dimension)
    if not resolved:
        raise HTTPException(status_code=400, detail=f"Unknown dimension: {dimension}")

    try:
        submission = get_latest_submission(venture_id)
        run = get_latest_agent_run(submission["id"], resolved) if submission else None
    except Exception as e:
        logger.error(f"Failed to load agent run: {e}", extra={"venture_id": venture_id})
        raise HTTPException(status_code=500, detail="Failed to load agent run") from e

    if not run:
        raise HTTPException(status_code=404, detail=f"No agent run found for {resolved}")

    return run
