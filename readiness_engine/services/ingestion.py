"""Submission ingestion orchestrator.

Runs every file of a submission through the ingestion graph, one file at a
time. Files are isolated: a failure on one is recorded in the summary and
the next file is still processed.
"""

import logging
from typing import Any

from pydantic import BaseModel, Field

from readiness_engine.core.logging import get_logger, log_with_context
from readiness_engine.db.files import list_submission_files
from readiness_engine.graphs.ingestion_graph import ingest_file

logger = get_logger(__name__)


class FileOutcome(BaseModel):
    file_id: str
    path: str
    status: str = Field(..., description="indexed | skipped | failed")
    chunks_created: int = 0
    chunks_stored: int = 0
    chunks_without_vector: int = 0
    chunks_failed: int = 0
    reason: str | None = None


class IngestionSummary(BaseModel):
    submission_id: str
    files: list[FileOutcome] = Field(default_factory=list)

    @property
    def chunks_stored(self) -> int:
        return sum(f.chunks_stored for f in self.files)

    def counts(self) -> dict[str, int]:
        result = {"indexed": 0, "skipped": 0, "failed": 0}
        for f in self.files:
            result[f.status] = result.get(f.status, 0) + 1
        return result


async def ingest_submission(
    submission_id: str,
    files: list[dict[str, Any]] | None = None,
) -> IngestionSummary:
    """
    Index all files of a submission.

    Args:
        submission_id: Submission UUID
        files: Pre-fetched file rows; loaded from the database when omitted

    Returns:
        IngestionSummary with one outcome per file

    Raises:
        Exception: Only if the file list itself cannot be loaded
    """
    if files is None:
        files = list_submission_files(submission_id)

    summary = IngestionSummary(submission_id=str(submission_id))

    for file_row in files:
        outcome = await ingest_file(file_row, str(submission_id))
        summary.files.append(FileOutcome(**outcome))

    log_with_context(
        logger,
        logging.INFO,
        f"Ingested submission {submission_id}",
        submission_id=str(submission_id),
        chunks_stored=summary.chunks_stored,
        **summary.counts(),
    )
    return summary
