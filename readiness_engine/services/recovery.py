"""Re-queue assessments for submissions that never finished."""

from datetime import datetime, timedelta, timezone

from readiness_engine.core.config import get_settings
from readiness_engine.core.logging import get_logger
from readiness_engine.db.submissions import get_latest_submission, list_stale_submissions
from readiness_engine.services.assessment_queue import enqueue_assessment

logger = get_logger(__name__)


def requeue_stale_submissions(older_than_minutes: int | None = None) -> list[str]:
    """
    Enqueue a fresh assessment for every venture whose latest submission is stuck.

    A submission is stuck when it is still pending or processing and was
    created more than ``older_than_minutes`` ago. Older submissions of a
    venture are superseded and ignored; the worker only advances the latest.
    Each venture is enqueued at most once per call.

    Args:
        older_than_minutes: Threshold; defaults to STALE_SUBMISSION_MINUTES

    Returns:
        Job ids of the enqueued assessments
    """
    if older_than_minutes is None:
        older_than_minutes = get_settings().STALE_SUBMISSION_MINUTES

    cutoff = datetime.now(timezone.utc) - timedelta(minutes=older_than_minutes)
    stale = list_stale_submissions(cutoff.isoformat())

    job_ids = []
    seen: set[str] = set()
    for submission in stale:
        venture_id = str(submission["venture_id"])
        if venture_id in seen:
            continue

        latest = get_latest_submission(venture_id)
        if latest and str(latest["id"]) != str(submission["id"]):
            logger.debug(
                f"Submission {submission['id']} superseded by {latest['id']}; not re-queued",
                extra={"venture_id": venture_id},
            )
            continue

        seen.add(venture_id)
        job_ids.append(enqueue_assessment(venture_id))

    if job_ids:
        logger.warning(f"Re-queued {len(job_ids)} stale assessment(s) older than {older_than_minutes}m")
    return job_ids
