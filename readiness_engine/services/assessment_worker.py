"""Assessment worker: scores every dimension for a venture and persists results.

Per job:
1. Load the venture (missing venture aborts the job)
2. Load the latest submission (optional) and mark it processing
3. Retrieve dimension-tagged document chunks as evidence
4. Run the eight scorers concurrently
5. Per result: agent run, score upsert, recommendations
6. Mark the submission completed

Writes are sequential and not atomic. Two jobs for the same venture can
interleave; scores resolve last-write-wins and runs/recommendations from both
jobs are kept.
"""

import asyncio
import time
from typing import Any, Callable

from readiness_engine.agents.scoring_agents import score_dimension
from readiness_engine.agents.scoring_types import AgentOutput, ScoringContext
from readiness_engine.core.config import get_settings
from readiness_engine.core.dimensions import ALL_DIMENSIONS, dimension_slug
from readiness_engine.core.logging import get_logger
from readiness_engine.db.agent_runs import create_agent_run, list_job_dimensions
from readiness_engine.db.chunks import list_dimension_chunks
from readiness_engine.db.files import list_submission_files
from readiness_engine.db.recommendations import insert_recommendations
from readiness_engine.db.scores import upsert_score
from readiness_engine.db.submissions import (
    create_submission,
    get_latest_submission,
    update_submission_status,
)
from readiness_engine.db.ventures import get_venture

logger = get_logger(__name__)

LOW_CONFIDENCE_THRESHOLD = 0.6
EVIDENCE_CHUNKS_PER_DIMENSION = 5


class VentureNotFoundError(Exception):
    """The venture named by a job does not exist."""


class JobProcessingError(Exception):
    """Unexpected failure while handling an assessment job."""


def _load_document_chunks(submission: dict[str, Any] | None) -> dict[str, list[dict[str, Any]]]:
    if not submission:
        return {}

    file_ids = [f["id"] for f in list_submission_files(submission["id"])]
    if not file_ids:
        return {}

    return {
        dimension: list_dimension_chunks(file_ids, dimension, limit=EVIDENCE_CHUNKS_PER_DIMENSION)
        for dimension in ALL_DIMENSIONS
    }


class AssessmentWorker:
    """Runs one assessment job.

    ``scorer`` is any callable with the score_dimension signature; the
    templated agents are the default.
    """

    def __init__(
        self,
        scorer: Callable[[str, ScoringContext], AgentOutput] = score_dimension,
        model_name: str | None = None,
    ):
        self.scorer = scorer
        self.model_name = model_name or get_settings().SCORING_MODEL_NAME

    async def _score(self, dimension: str, context: ScoringContext) -> tuple[AgentOutput, int]:
        started = time.perf_counter()
        output = await asyncio.to_thread(self.scorer, dimension, context)
        return output, int((time.perf_counter() - started) * 1000)

    async def build_context(self, venture_id: str) -> ScoringContext:
        """
        Load everything the scorers need.

        Raises:
            VentureNotFoundError: If the venture does not exist
        """
        venture = await asyncio.to_thread(get_venture, venture_id)
        if not venture:
            raise VentureNotFoundError(f"Venture not found: {venture_id}")

        # Older ventures may have no submission; score from intake fields only
        submission = await asyncio.to_thread(get_latest_submission, venture_id)

        try:
            chunks = await asyncio.to_thread(_load_document_chunks, submission)
        except Exception as e:
            logger.warning(f"Document evidence unavailable: {e}", extra={"venture_id": venture_id})
            chunks = {}

        return ScoringContext(
            venture_id=venture_id,
            venture=venture,
            submission=submission,
            document_chunks=chunks,
        )

    def persist_result(
        self,
        context: ScoringContext,
        output: AgentOutput,
        duration_ms: int,
        job_id: str | None,
        write_audit: bool = True,
        with_recommendations: bool = True,
    ) -> int:
        """Write one dimension's agent run, score and recommendations.

        ``write_audit`` False (a redelivered dimension) writes the score only.
        ``with_recommendations`` False keeps the agent run but skips recommendations.

        Returns:
            Number of recommendations inserted
        """
        submission_id = context.submission["id"] if context.submission else None

        if write_audit:
            create_agent_run(
                submission_id=submission_id,
                dimension=output.dimension,
                model=self.model_name,
                output_json=output.to_output_json(),
                confidence=output.confidence,
                duration_ms=duration_ms,
                evidence_refs=[f"file_{submission_id}_{dimension_slug(output.dimension)}"]
                if submission_id
                else [],
                flags=["low_confidence"] if output.confidence < LOW_CONFIDENCE_THRESHOLD else [],
                job_id=job_id,
            )

        upsert_score(context.venture_id, output.dimension, output.level, output.confidence)

        if not (write_audit and with_recommendations):
            return 0

        return insert_recommendations(
            context.venture_id,
            output.dimension,
            [r.model_dump() for r in output.recommendations],
        )

    async def process(self, venture_id: str, job_id: str | None = None) -> dict[str, Any]:
        """
        Assess a venture across all dimensions.

        Args:
            venture_id: Venture UUID
            job_id: Queue job id, used to recognize redelivered jobs

        Returns:
            Summary dict (venture_id, submission_id, dimensions, recommendations, skipped)

        Raises:
            VentureNotFoundError: If the venture does not exist
            JobProcessingError: On any other failure; the submission keeps its prior status
        """
        venture_id = str(venture_id)
        ctx = {"venture_id": venture_id, "job_id": job_id}

        try:
            context = await self.build_context(venture_id)
            submission = context.submission

            if submission and submission.get("status") != "completed":
                await asyncio.to_thread(update_submission_status, submission["id"], "processing")

            already_written = await asyncio.to_thread(list_job_dimensions, job_id) if job_id else set()
            if already_written:
                logger.warning(
                    f"Redelivered job; skipping audit rows for {sorted(already_written)}",
                    extra=ctx,
                )

            results = await asyncio.gather(*(self._score(d, context) for d in ALL_DIMENSIONS))

            recommendation_count = 0
            for output, duration_ms in results:
                recommendation_count += await asyncio.to_thread(
                    self.persist_result,
                    context,
                    output,
                    duration_ms,
                    job_id,
                    output.dimension not in already_written,
                )

            if submission:
                await asyncio.to_thread(update_submission_status, submission["id"], "completed")

        except VentureNotFoundError:
            logger.error(f"Venture {venture_id} not found; aborting job", extra=ctx)
            raise
        except Exception as e:
            logger.exception(f"Assessment job failed: {e}", extra=ctx)
            raise JobProcessingError(f"Assessment failed for venture {venture_id}: {e}") from e

        logger.info(
            f"Assessment complete: {len(results)} dimensions, {recommendation_count} recommendations",
            extra=ctx,
        )
        return {
            "venture_id": venture_id,
            "submission_id": submission["id"] if submission else None,
            "dimensions": len(results),
            "recommendations": recommendation_count,
            "skipped_dimensions": sorted(already_written),
        }

    async def rerun_dimension(self, venture_id: str, dimension: str) -> dict[str, Any]:
        """
        Re-score a single dimension outside the queue.

        Appends an agent run and upserts the score; recommendations are not
        written. A venture without a submission gets a completed one so the
        run is attached to it.

        Raises:
            VentureNotFoundError: If the venture does not exist
            ValueError: If the dimension is unknown
        """
        if dimension not in ALL_DIMENSIONS:
            raise ValueError(f"Unknown dimension: {dimension}")

        context = await self.build_context(str(venture_id))
        if context.submission is None:
            submission = await asyncio.to_thread(create_submission, str(venture_id), "completed")
            context = context.model_copy(update={"submission": submission})

        output, duration_ms = await self._score(dimension, context)
        await asyncio.to_thread(
            self.persist_result, context, output, duration_ms, None, with_recommendations=False
        )

        return {
            "venture_id": str(venture_id),
            "dimension": dimension,
            "level": output.level,
            "confidence": output.confidence,
            "output_json": output.to_output_json(),
        }


def run_assessment_job(venture_id: str) -> dict[str, Any]:
    """rq entrypoint for an assessment job."""
    from rq import get_current_job

    job = get_current_job()
    job_id = job.id if job else None

    return asyncio.run(AssessmentWorker().process(venture_id, job_id=job_id))
