"""Tests for structured log formatting."""

import logging

from readiness_engine.core.logging import StructuredFormatter, get_logger, log_with_context


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord("readiness", logging.INFO, __file__, 10, "Indexed file", None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_context_ids_are_promoted():
    line = StructuredFormatter().format(_record(job_id="job-1", venture_id="v-1"))

    assert "level=INFO" in line
    assert "message=Indexed file" in line
    assert "job_id=job-1" in line
    assert "venture_id=v-1" in line
    assert "submission_id" not in line


def test_extra_data_is_merged():
    line = StructuredFormatter().format(_record(extra_data={"chunks": 3}))

    assert "chunks=3" in line


def test_log_with_context_splits_fields(caplog):
    logger = get_logger("readiness_engine.tests.logging")
    logger.propagate = True

    with caplog.at_level(logging.INFO, logger="readiness_engine.tests.logging"):
        log_with_context(logger, logging.INFO, "Stored chunks", file_id="f-1", chunks=2)

    record = caplog.records[-1]
    assert record.file_id == "f-1"
    assert record.extra_data == {"chunks": 2}
