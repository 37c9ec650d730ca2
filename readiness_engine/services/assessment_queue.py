"""Assessment job queue on redis + rq.

The broker connection retries transient connection/timeout errors with
bounded exponential backoff before surfacing QueueConnectionError.
"""

from functools import lru_cache

from redis import Redis
from redis.backoff import ExponentialBackoff
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError
from redis.retry import Retry
from rq import Queue
from rq import Retry as JobRetry

from readiness_engine.core.config import get_settings
from readiness_engine.core.logging import get_logger

logger = get_logger(__name__)

# Dotted path so producers never import the worker's dependencies
ASSESSMENT_JOB = "readiness_engine.services.assessment_worker.run_assessment_job"

# Delay before each queue-level retry of a failed job, in seconds
JOB_RETRY_INTERVALS = [10, 30, 60]


class QueueConnectionError(Exception):
    """Raised when the queue broker cannot be reached."""


@lru_cache(maxsize=1)
def get_redis() -> Redis:
    """
    Get the broker connection (cached singleton).

    Returns:
        Redis client with bounded exponential-backoff retries
    """
    settings = get_settings()
    retry = Retry(
        ExponentialBackoff(
            cap=settings.QUEUE_BACKOFF_CAP_SECONDS,
            base=settings.QUEUE_BACKOFF_BASE_SECONDS,
        ),
        settings.QUEUE_RETRY_ATTEMPTS,
    )
    return Redis.from_url(
        settings.REDIS_URL,
        retry=retry,
        retry_on_error=[RedisConnectionError, RedisTimeoutError],
        health_check_interval=30,
    )


def get_assessment_queue(connection: Redis | None = None) -> Queue:
    settings = get_settings()
    return Queue(
        settings.ASSESSMENT_QUEUE,
        connection=connection or get_redis(),
        default_timeout=settings.JOB_TIMEOUT_SECONDS,
    )


def enqueue_assessment(venture_id: str, queue: Queue | None = None) -> str:
    """
    Queue an assessment run for a venture.

    Args:
        venture_id: Venture UUID
        queue: Queue to use (defaults to the assessments queue)

    Returns:
        rq job id

    Raises:
        QueueConnectionError: If the broker is unreachable after retries
    """
    settings = get_settings()
    retries = settings.JOB_MAX_RETRIES

    try:
        queue = queue or get_assessment_queue()
        job = queue.enqueue(
            ASSESSMENT_JOB,
            str(venture_id),
            retry=JobRetry(max=retries, interval=JOB_RETRY_INTERVALS[:retries]) if retries else None,
            description=f"assessment venture={venture_id}",
        )

    except (RedisConnectionError, RedisTimeoutError) as e:
        logger.error(f"Queue unavailable, could not enqueue assessment: {e}", extra={"venture_id": str(venture_id)})
        raise QueueConnectionError(f"Queue unavailable: {e}") from e

    logger.info(f"Enqueued assessment job {job.id}", extra={"venture_id": str(venture_id), "job_id": job.id})
    return job.id
