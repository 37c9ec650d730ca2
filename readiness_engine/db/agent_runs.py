"""Agent run audit records."""

from typing import Any

from readiness_engine.core.logging import get_logger
from readiness_engine.db.supabase_client import get_supabase

logger = get_logger(__name__)


def create_agent_run(
    submission_id: str | None,
    dimension: str,
    model: str,
    output_json: dict[str, Any],
    confidence: float,
    duration_ms: int,
    evidence_refs: list[str],
    flags: list[str],
    job_id: str | None = None,
) -> dict[str, Any]:
    """
    Append an audit record of one dimension-scoring invocation.

    Args:
        submission_id: Latest submission of the venture, if any
        dimension: Dimension scored
        model: Scorer/model name
        output_json: level, confidence, justification, evidence, nextSteps, recommendations
        confidence: Denormalized copy of output confidence
        duration_ms: Measured scoring time
        evidence_refs: References to the evidence sources
        flags: e.g. ["low_confidence"]
        job_id: Queue job that produced the run, if any

    Returns:
        Created agent_run row

    Raises:
        Exception: If database operation fails
    """
    supabase = get_supabase()

    try:
        response = (
            supabase.table("agent_runs")
            .insert(
                {
                    "submission_id": str(submission_id) if submission_id else None,
                    "dimension": dimension,
                    "model": model,
                    "output_json": output_json,
                    "confidence": confidence,
                    "duration_ms": duration_ms,
                    "evidence_refs": evidence_refs,
                    "flags": flags,
                    "job_id": job_id,
                }
            )
            .execute()
        )

        if not response.data:
            raise ValueError("No data returned from create_agent_run")

        return response.data[0]

    except Exception as e:
        logger.error(
            f"Failed to create {dimension} agent_run: {e}",
            extra={"submission_id": submission_id, "job_id": job_id},
        )
        raise


def get_latest_agent_run(submission_id: str, dimension: str) -> dict[str, Any] | None:
    """Latest agent run by created_at for a submission and dimension."""
    supabase = get_supabase()

    try:
        response = (
            supabase.table("agent_runs")
            .select("*")
            .eq("submission_id", str(submission_id))
            .eq("dimension", dimension)
            .order("created_at", desc=True)
            .limit(1)
            .execute()
        )
        return response.data[0] if response.data else None

    except Exception as e:
        logger.error(f"Failed to get latest {dimension} agent_run: {e}")
        raise


def list_job_dimensions(job_id: str) -> set[str]:
    """Dimensions that already have an agent run written by this queue job."""
    supabase = get_supabase()

    try:
        response = supabase.table("agent_runs").select("dimension").eq("job_id", str(job_id)).execute()
        return {row["dimension"] for row in response.data or []}

    except Exception as e:
        logger.error(f"Failed to check agent_runs for job {job_id}: {e}")
        raise


def list_venture_agent_runs(venture_id: str, dimension: str) -> list[dict[str, Any]]:
    """
    Every agent run for a dimension across a venture's submissions.

    Args:
        venture_id: Venture UUID
        dimension: Dimension name

    Returns:
        Agent run rows, newest first
    """
    supabase = get_supabase()

    try:
        response = (
            supabase.table("agent_runs")
            .select("*, submissions!inner(venture_id)")
            .eq("submissions.venture_id", str(venture_id))
            .eq("dimension", dimension)
            .order("created_at", desc=True)
            .execute()
        )
        # Drop the joined submission stub
        return [{k: v for k, v in row.items() if k != "submissions"} for row in response.data or []]

    except Exception as e:
        logger.error(f"Failed to list {dimension} agent_runs for venture {venture_id}: {e}")
        raise
