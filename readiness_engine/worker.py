"""Run the assessment worker.

Usage:
    python -m readiness_engine.worker [--burst] [--no-recover]

Consumes the assessments queue. The rq scheduler is enabled so that job
retries with delays are re-queued. A job that raises is recorded in rq's
failed registry and the worker moves on to the next one.
"""

import argparse
import os

from rq import Worker

from readiness_engine.core.config import get_settings
from readiness_engine.core.logging import get_logger
from readiness_engine.services.assessment_queue import get_assessment_queue, get_redis
from readiness_engine.services.recovery import requeue_stale_submissions

logger = get_logger(__name__)


def build_worker() -> Worker:
    connection = get_redis()
    queue = get_assessment_queue(connection)
    return Worker([queue], connection=connection)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Readiness assessment worker")
    parser.add_argument("--burst", action="store_true", help="Exit once the queue is empty")
    parser.add_argument(
        "--no-recover",
        action="store_true",
        help="Skip re-queueing stale submissions at startup",
    )
    args = parser.parse_args(argv)

    settings = get_settings()

    if not args.no_recover:
        try:
            requeue_stale_submissions()
        except Exception as e:
            logger.error(f"Stale submission recovery failed: {e}")

    worker = build_worker()
    logger.info(f"Assessment worker starting on '{settings.ASSESSMENT_QUEUE}' (pid {os.getpid()})")
    try:
        worker.work(
            burst=args.burst,
            with_scheduler=True,
            logging_level="DEBUG" if settings.READINESS_ENV == "dev" else "INFO",
        )
    finally:
        logger.info(f"Assessment worker exiting (pid {os.getpid()})")


if __name__ == "__main__":
    main()
