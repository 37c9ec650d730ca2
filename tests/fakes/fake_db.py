"""Fake in-memory database layer for ingestion and assessment tests.

Methods mirror the signatures of the readiness_engine.db functions so they
can be patched in with ``side_effect=fake_db.<method>``.
"""

from typing import Any
from uuid import uuid4

VENTURE_ID = "11111111-1111-1111-1111-111111111111"
SUBMISSION_ID = "22222222-2222-2222-2222-222222222222"
FILE_ID = "33333333-3333-3333-3333-333333333333"

SAMPLE_VENTURE: dict[str, Any] = {
    "id": VENTURE_ID,
    "name": "Orbital Forge",
    "stage": "seed",
    "technology_readiness_level": 6,
    "has_prototype": True,
    "has_patents": True,
    "patent_count": 2,
    "letters_of_intent": 2,
    "pilot_customers": 1,
    "team_size": 6,
    "has_technical_cofounder": True,
    "funding_raised": 1_500_000,
    "months_to_runway": 14,
    "product_type": "satellite",
}


class FakeDB:
    """In-memory database implementation for testing."""

    def __init__(self):
        self.reset()

    def reset(self):
        """Reset all stores to initial state."""
        self.ventures: dict[str, dict[str, Any]] = {VENTURE_ID: dict(SAMPLE_VENTURE)}
        self.submissions: list[dict[str, Any]] = []
        self.files: list[dict[str, Any]] = []
        self.blobs: dict[str, bytes] = {}
        self.chunks: list[dict[str, Any]] = []
        self.scores: dict[tuple[str, str], dict[str, Any]] = {}
        self.recommendations: list[dict[str, Any]] = []
        self.agent_runs: list[dict[str, Any]] = []
        self.status_history: list[tuple[str, str]] = []

    # Seeding helpers
    def add_submission(self, venture_id: str = VENTURE_ID, status: str = "pending", **extra) -> dict[str, Any]:
        submission = {
            "id": extra.pop("id", str(uuid4())),
            "venture_id": venture_id,
            "status": status,
            "created_at": extra.pop("created_at", f"2026-01-01T00:00:{len(self.submissions):02d}+00:00"),
            **extra,
        }
        self.submissions.append(submission)
        return submission

    def add_file(self, submission_id: str, path: str, mime: str, content: bytes | None = None) -> dict[str, Any]:
        file_row = {"id": str(uuid4()), "submission_id": submission_id, "path": path, "mime": mime}
        self.files.append(file_row)
        if content is not None:
            self.blobs[path] = content
        return file_row

    # Ventures
    def get_venture(self, venture_id: str) -> dict[str, Any] | None:
        return self.ventures.get(str(venture_id))

    # Submissions
    def get_latest_submission(self, venture_id: str) -> dict[str, Any] | None:
        rows = [s for s in self.submissions if s["venture_id"] == str(venture_id)]
        rows.sort(key=lambda s: s["created_at"], reverse=True)
        return rows[0] if rows else None

    def update_submission_status(self, submission_id: str, status: str) -> None:
        for submission in self.submissions:
            if submission["id"] == str(submission_id):
                submission["status"] = status
                self.status_history.append((submission["id"], status))
                return
        raise ValueError(f"Submission not found: {submission_id}")

    def create_submission(self, venture_id: str, status: str = "pending") -> dict[str, Any]:
        return self.add_submission(str(venture_id), status=status)

    def list_stale_submissions(self, created_before: str) -> list[dict[str, Any]]:
        rows = [
            s
            for s in self.submissions
            if s["status"] in ("pending", "processing") and s["created_at"] < created_before
        ]
        return sorted(rows, key=lambda s: s["created_at"])

    # Files and storage
    def list_submission_files(self, submission_id: str) -> list[dict[str, Any]]:
        return [f for f in self.files if f["submission_id"] == str(submission_id)]

    def download_file(self, path: str) -> bytes:
        if path not in self.blobs:
            raise ValueError(f"Object not found: {path}")
        return self.blobs[path]

    # Chunks
    def insert_chunk(
        self,
        file_id: str,
        content: str,
        source_ref: str,
        dimensions: list[str],
        embedding: list[float] | None,
    ) -> dict[str, Any]:
        row = {
            "id": str(uuid4()),
            "file_id": file_id,
            "content": content,
            "source_ref": source_ref,
            "dimensions": dimensions,
            "embedding": embedding,
        }
        self.chunks.append(row)
        return row

    def delete_file_chunks(self, file_id: str) -> int:
        before = len(self.chunks)
        self.chunks = [c for c in self.chunks if c["file_id"] != str(file_id)]
        return before - len(self.chunks)

    def list_dimension_chunks(self, file_ids: list[str], dimension: str, limit: int = 5) -> list[dict[str, Any]]:
        rows = [c for c in self.chunks if c["file_id"] in file_ids and dimension in c["dimensions"]]
        return rows[:limit]

    # Agent runs
    def create_agent_run(self, **kwargs) -> dict[str, Any]:
        row = {"id": str(uuid4()), **kwargs}
        self.agent_runs.append(row)
        return row

    def list_job_dimensions(self, job_id: str) -> set[str]:
        return {r["dimension"] for r in self.agent_runs if r.get("job_id") == str(job_id)}

    # Scores and recommendations
    def upsert_score(self, venture_id: str, dimension: str, level: int, confidence: float) -> dict[str, Any]:
        row = {"venture_id": str(venture_id), "dimension": dimension, "level": level, "confidence": confidence}
        self.scores[(str(venture_id), dimension)] = row
        return row

    def insert_recommendations(self, venture_id: str, dimension: str, items: list[dict[str, Any]]) -> int:
        for item in items:
            self.recommendations.append(
                {"venture_id": str(venture_id), "dimension": dimension, "status": "open", **item}
            )
        return len(items)


# Module-level instance shared by tests; reset per test by fixtures
fake_db = FakeDB()
