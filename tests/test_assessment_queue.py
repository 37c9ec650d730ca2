"""Tests for the assessment queue producer and stale-submission recovery."""

from unittest.mock import MagicMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.retry import Retry

from readiness_engine.services.assessment_queue import (
    ASSESSMENT_JOB,
    QueueConnectionError,
    enqueue_assessment,
    get_redis,
)
from readiness_engine.services.assessment_worker import AssessmentWorker
from readiness_engine.services.recovery import requeue_stale_submissions
from tests.fakes.fake_db import VENTURE_ID, fake_db

RECOVERY = "readiness_engine.services.recovery"
WORKER = "readiness_engine.services.assessment_worker"

WORKER_DB_CALLS = [
    "get_venture",
    "get_latest_submission",
    "update_submission_status",
    "list_submission_files",
    "list_dimension_chunks",
    "list_job_dimensions",
    "create_agent_run",
    "upsert_score",
    "insert_recommendations",
]


def _mock_queue(job_id: str = "job-123") -> MagicMock:
    queue = MagicMock()
    queue.enqueue.return_value.id = job_id
    return queue


def test_enqueue_assessment_returns_job_id():
    queue = _mock_queue()

    job_id = enqueue_assessment("venture-1", queue=queue)

    assert job_id == "job-123"
    args, kwargs = queue.enqueue.call_args
    assert args == (ASSESSMENT_JOB, "venture-1")
    assert kwargs["retry"].max == 2
    assert kwargs["retry"].intervals == [10, 30]


def test_enqueue_without_retries(monkeypatch):
    monkeypatch.setenv("JOB_MAX_RETRIES", "0")
    queue = _mock_queue()

    enqueue_assessment("venture-1", queue=queue)

    assert queue.enqueue.call_args.kwargs["retry"] is None


def test_broker_failure_raises_queue_connection_error():
    queue = MagicMock()
    queue.enqueue.side_effect = RedisConnectionError("connection refused")

    with pytest.raises(QueueConnectionError, match="connection refused"):
        enqueue_assessment("venture-1", queue=queue)


def test_job_path_points_at_worker_entrypoint():
    from readiness_engine.services import assessment_worker

    module_path, func_name = ASSESSMENT_JOB.rsplit(".", 1)
    assert module_path == assessment_worker.__name__
    assert callable(getattr(assessment_worker, func_name))


def test_get_redis_retries_with_backoff(monkeypatch):
    from_url = MagicMock()
    monkeypatch.setattr("readiness_engine.services.assessment_queue.Redis.from_url", from_url)
    get_redis.cache_clear()

    try:
        get_redis()
    finally:
        get_redis.cache_clear()

    args, kwargs = from_url.call_args
    assert args == ("redis://localhost:6379/0",)
    assert isinstance(kwargs["retry"], Retry)
    assert RedisConnectionError in kwargs["retry_on_error"]


def test_requeue_stale_submissions_once_per_venture(monkeypatch):
    stale = [
        {"id": "s-1", "venture_id": "v-1", "status": "pending"},
        {"id": "s-2", "venture_id": "v-2", "status": "processing"},
        {"id": "s-3", "venture_id": "v-1", "status": "processing"},
    ]
    latest = {"v-1": stale[2], "v-2": stale[1]}
    list_stale = MagicMock(return_value=stale)
    enqueue = MagicMock(side_effect=lambda venture_id: f"job-{venture_id}")
    monkeypatch.setattr(f"{RECOVERY}.list_stale_submissions", list_stale)
    monkeypatch.setattr(f"{RECOVERY}.get_latest_submission", latest.get)
    monkeypatch.setattr(f"{RECOVERY}.enqueue_assessment", enqueue)

    job_ids = requeue_stale_submissions(older_than_minutes=15)

    assert job_ids == ["job-v-2", "job-v-1"]
    cutoff = list_stale.call_args[0][0]
    assert "T" in cutoff


def test_requeue_with_nothing_stale(monkeypatch):
    monkeypatch.setattr(f"{RECOVERY}.list_stale_submissions", lambda cutoff: [])
    enqueue = MagicMock()
    monkeypatch.setattr(f"{RECOVERY}.enqueue_assessment", enqueue)

    assert requeue_stale_submissions() == []
    enqueue.assert_not_called()


@pytest.mark.asyncio
async def test_superseded_submission_is_not_requeued_forever(monkeypatch):
    fake_db.reset()
    for name in WORKER_DB_CALLS:
        monkeypatch.setattr(f"{WORKER}.{name}", getattr(fake_db, name))
    monkeypatch.setattr(f"{RECOVERY}.list_stale_submissions", fake_db.list_stale_submissions)
    monkeypatch.setattr(f"{RECOVERY}.get_latest_submission", fake_db.get_latest_submission)
    enqueued: list[str] = []

    def enqueue(venture_id):
        enqueued.append(venture_id)
        return f"job-{len(enqueued)}"

    monkeypatch.setattr(f"{RECOVERY}.enqueue_assessment", enqueue)
    older = fake_db.add_submission(status="pending", created_at="2020-01-01T00:00:00+00:00")
    latest = fake_db.add_submission(status="pending", created_at="2020-01-02T00:00:00+00:00")

    # Each worker restart recovers, then drains what was enqueued
    for _ in range(3):
        for job_id in requeue_stale_submissions(older_than_minutes=30):
            await AssessmentWorker().process(VENTURE_ID, job_id=job_id)

    assert enqueued == [VENTURE_ID]
    assert len(fake_db.agent_runs) == 8
    assert latest["status"] == "completed"
    assert older["status"] == "pending"


def test_worker_entrypoint_runs_with_scheduler(monkeypatch):
    from readiness_engine import worker as worker_main

    rq_worker = MagicMock()
    recover = MagicMock()
    monkeypatch.setattr(worker_main, "build_worker", lambda: rq_worker)
    monkeypatch.setattr(worker_main, "requeue_stale_submissions", recover)

    worker_main.main(["--burst"])

    recover.assert_called_once_with()
    kwargs = rq_worker.work.call_args.kwargs
    assert kwargs["burst"] is True
    assert kwargs["with_scheduler"] is True


def test_worker_entrypoint_survives_recovery_failure(monkeypatch):
    from readiness_engine import worker as worker_main

    rq_worker = MagicMock()
    monkeypatch.setattr(worker_main, "build_worker", lambda: rq_worker)
    monkeypatch.setattr(
        worker_main, "requeue_stale_submissions", MagicMock(side_effect=QueueConnectionError("down"))
    )

    worker_main.main(["--burst"])

    rq_worker.work.assert_called_once()


def test_worker_entrypoint_can_skip_recovery(monkeypatch):
    from readiness_engine import worker as worker_main

    recover = MagicMock()
    monkeypatch.setattr(worker_main, "build_worker", MagicMock)
    monkeypatch.setattr(worker_main, "requeue_stale_submissions", recover)

    worker_main.main(["--burst", "--no-recover"])

    recover.assert_not_called()
