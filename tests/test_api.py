"""Tests for the v1 HTTP endpoints with mocked collaborators."""

import base64
import re
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from readiness_engine.main import app
from readiness_engine.services.assessment_queue import QueueConnectionError
from readiness_engine.services.assessment_worker import VentureNotFoundError
from readiness_engine.services.ingestion import FileOutcome, IngestionSummary

client = TestClient(app)

PDF_MIME = "application/pdf"


# =============================================================================
# Assessments
# =============================================================================


def test_assess_enqueues_job(monkeypatch):
    enqueue = MagicMock(return_value="job-1")
    monkeypatch.setattr("readiness_engine.api.assessments.enqueue_assessment", enqueue)

    response = client.post("/v1/assess", json={"ventureId": "v-1"})

    assert response.status_code == 200
    assert response.json() == {"success": True, "jobId": "job-1"}
    enqueue.assert_called_once_with("v-1")


def test_assess_requires_venture_id():
    response = client.post("/v1/assess", json={})
    assert response.status_code == 400


def test_assess_queue_unavailable(monkeypatch):
    monkeypatch.setattr(
        "readiness_engine.api.assessments.enqueue_assessment",
        MagicMock(side_effect=QueueConnectionError("down")),
    )

    response = client.post("/v1/assess", json={"ventureId": "v-1"})

    assert response.status_code == 503


def test_rerun_analysis(monkeypatch):
    worker = MagicMock()
    worker.rerun_dimension = AsyncMock(return_value={"venture_id": "v-1", "dimension": "IP", "level": 3})
    rubric = MagicMock()
    rubric.get_level_description.return_value = "Provisional patents filed"
    monkeypatch.setattr("readiness_engine.api.assessments.AssessmentWorker", lambda: worker)
    monkeypatch.setattr("readiness_engine.api.assessments.get_rubric_service", lambda: rubric)

    response = client.post("/v1/rerun-analysis", json={"ventureId": "v-1", "dimension": "IP"})

    assert response.status_code == 200
    assert response.json()["level"] == 3
    assert response.json()["levelDescription"] == "Provisional patents filed"
    rubric.get_level_description.assert_called_once_with("IP", 3)
    worker.rerun_dimension.assert_awaited_once_with("v-1", "IP")


def test_rerun_analysis_unknown_dimension():
    response = client.post("/v1/rerun-analysis", json={"ventureId": "v-1", "dimension": "Marketing"})
    assert response.status_code == 400


def test_rerun_analysis_missing_venture(monkeypatch):
    worker = MagicMock()
    worker.rerun_dimension = AsyncMock(side_effect=VentureNotFoundError("Venture not found: v-9"))
    monkeypatch.setattr("readiness_engine.api.assessments.AssessmentWorker", lambda: worker)

    response = client.post("/v1/rerun-analysis", json={"ventureId": "v-9", "dimension": "IP"})

    assert response.status_code == 404


# =============================================================================
# Ingestion
# =============================================================================


def test_process_files(monkeypatch):
    files = [{"id": "f-1", "path": "v-1/1_deck.pdf", "mime": PDF_MIME}]
    summary = IngestionSummary(
        submission_id="s-1",
        files=[FileOutcome(file_id="f-1", path="v-1/1_deck.pdf", status="indexed", chunks_created=2, chunks_stored=2)],
    )
    ingest = AsyncMock(return_value=summary)
    monkeypatch.setattr("readiness_engine.api.process_files.list_submission_files", lambda sid: files)
    monkeypatch.setattr("readiness_engine.api.process_files.ingest_submission", ingest)

    response = client.post("/v1/process-files", json={"submissionId": "s-1", "ventureId": "v-1"})

    assert response.status_code == 200
    data = response.json()
    assert data["chunksStored"] == 2
    assert data["counts"] == {"indexed": 1, "skipped": 0, "failed": 0}
    ingest.assert_awaited_once_with("s-1", files=files)


def test_process_files_requires_ids():
    response = client.post("/v1/process-files", json={"submissionId": "s-1"})
    assert response.status_code == 400


def test_process_files_without_files(monkeypatch):
    monkeypatch.setattr("readiness_engine.api.process_files.list_submission_files", lambda sid: [])

    response = client.post("/v1/process-files", json={"submissionId": "s-1", "ventureId": "v-1"})

    assert response.status_code == 404


# =============================================================================
# Uploads
# =============================================================================


@pytest.fixture
def upload_mocks(monkeypatch):
    mocks = {
        "get_venture": MagicMock(return_value={"id": "v-1", "name": "Orbital Forge"}),
        "create_submission": MagicMock(return_value={"id": "s-1"}),
        "upload_file": MagicMock(),
        "create_file": MagicMock(return_value={"id": "f-1"}),
        "remove_files": MagicMock(),
        "delete_submission": MagicMock(),
        "ingest_submission": AsyncMock(),
    }
    for name, mock in mocks.items():
        monkeypatch.setattr(f"readiness_engine.api.uploads.{name}", mock)
    return mocks


def _upload_body(filename="my deck.pdf", mime=PDF_MIME, content=b"%PDF-1.7 fake"):
    return {
        "ventureId": "v-1",
        "filename": filename,
        "mimeType": mime,
        "contentBase64": base64.b64encode(content).decode(),
    }


def test_upload_stores_file_and_schedules_ingestion(upload_mocks):
    response = client.post("/v1/uploads", json=_upload_body())

    assert response.status_code == 200
    assert response.json()["fileId"] == "f-1"
    upload_mocks["create_submission"].assert_called_once_with("v-1", status="pending")
    path = upload_mocks["upload_file"].call_args[0][0]
    assert re.fullmatch(r"v-1/\d+_my_deck\.pdf", path)
    upload_mocks["create_file"].assert_called_once_with("s-1", path, PDF_MIME, 13, virus_ok=True)
    upload_mocks["ingest_submission"].assert_awaited_once_with("s-1")


def test_upload_rejects_disallowed_type(upload_mocks):
    response = client.post("/v1/uploads", json=_upload_body(filename="photo.png", mime="image/png"))

    assert response.status_code == 400
    assert "File type not allowed" in response.json()["detail"]
    upload_mocks["create_submission"].assert_not_called()


def test_upload_rejects_bad_base64(upload_mocks):
    body = _upload_body()
    body["contentBase64"] = "not base64!!"

    response = client.post("/v1/uploads", json=body)

    assert response.status_code == 400


def test_upload_unknown_venture(upload_mocks):
    upload_mocks["get_venture"].return_value = None

    response = client.post("/v1/uploads", json=_upload_body())

    assert response.status_code == 404


def test_upload_storage_failure_removes_submission(upload_mocks):
    upload_mocks["upload_file"].side_effect = RuntimeError("bucket full")

    response = client.post("/v1/uploads", json=_upload_body())

    assert response.status_code == 500
    upload_mocks["delete_submission"].assert_called_once_with("s-1")
    upload_mocks["create_file"].assert_not_called()


def test_upload_record_failure_removes_blob_and_submission(upload_mocks):
    upload_mocks["create_file"].side_effect = RuntimeError("insert failed")

    response = client.post("/v1/uploads", json=_upload_body())

    assert response.status_code == 500
    path = upload_mocks["upload_file"].call_args[0][0]
    upload_mocks["remove_files"].assert_called_once_with([path])
    upload_mocks["delete_submission"].assert_called_once_with("s-1")


def test_list_uploads(monkeypatch):
    rows = [
        {
            "id": "f-1",
            "path": "v-1/1700000000000_deck.pdf",
            "mime": PDF_MIME,
            "size": 10,
            "created_at": "2026-01-01T00:00:00+00:00",
            "submissions": {"id": "s-1", "venture_id": "v-1", "status": "completed"},
        }
    ]
    monkeypatch.setattr("readiness_engine.api.uploads.list_venture_files", lambda venture_id: rows)

    response = client.get("/v1/uploads", params={"ventureId": "v-1"})

    assert response.status_code == 200
    files = response.json()["files"]
    assert files[0]["fileName"] == "deck.pdf"
    assert files[0]["submissionStatus"] == "completed"


def test_delete_last_upload_removes_submission(monkeypatch):
    file_row = {"id": "f-1", "submission_id": "s-1", "path": "v-1/1_deck.pdf"}
    remove = MagicMock()
    delete_sub = MagicMock()
    monkeypatch.setattr("readiness_engine.api.uploads.get_file", lambda fid: file_row)
    monkeypatch.setattr("readiness_engine.api.uploads.remove_files", remove)
    monkeypatch.setattr("readiness_engine.api.uploads.delete_file", MagicMock())
    monkeypatch.setattr("readiness_engine.api.uploads.list_submission_files", lambda sid: [])
    monkeypatch.setattr("readiness_engine.api.uploads.delete_submission", delete_sub)

    response = client.delete("/v1/uploads/f-1")

    assert response.status_code == 200
    assert response.json()["submissionDeleted"] is True
    remove.assert_called_once_with(["v-1/1_deck.pdf"])
    delete_sub.assert_called_once_with("s-1")


def test_delete_missing_upload(monkeypatch):
    monkeypatch.setattr("readiness_engine.api.uploads.get_file", lambda fid: None)

    response = client.delete("/v1/uploads/f-404")

    assert response.status_code == 404


# =============================================================================
# Agent runs and reference data
# =============================================================================


def test_get_agent_run_by_name_and_slug(monkeypatch):
    run = {"id": "r-1", "dimension": "Customer/Market"}
    lookup = MagicMock(return_value=run)
    monkeypatch.setattr("readiness_engine.api.agent_runs.get_latest_submission", lambda vid: {"id": "s-1"})
    monkeypatch.setattr("readiness_engine.api.agent_runs.get_latest_agent_run", lookup)

    assert client.get("/v1/agent-runs/v-1/Customer/Market").json() == run
    assert client.get("/v1/agent-runs/v-1/customer_market").json() == run
    lookup.assert_called_with("s-1", "Customer/Market")


def test_get_agent_run_without_submission(monkeypatch):
    monkeypatch.setattr("readiness_engine.api.agent_runs.get_latest_submission", lambda vid: None)

    response = client.get("/v1/agent-runs/v-1/IP")

    assert response.status_code == 404


def test_list_agent_run_history(monkeypatch):
    runs = [{"id": "r-2", "dimension": "Customer/Market"}, {"id": "r-1", "dimension": "Customer/Market"}]
    history = MagicMock(return_value=runs)
    monkeypatch.setattr("readiness_engine.api.agent_runs.list_venture_agent_runs", history)

    response = client.get("/v1/agent-runs/v-1/Customer/Market/all")

    assert response.status_code == 200
    assert response.json() == runs
    history.assert_called_once_with("v-1", "Customer/Market")


def test_list_agent_run_history_empty_and_unknown(monkeypatch):
    monkeypatch.setattr("readiness_engine.api.agent_runs.list_venture_agent_runs", lambda vid, dim: [])

    assert client.get("/v1/agent-runs/v-1/ip/all").json() == []
    assert client.get("/v1/agent-runs/v-1/Marketing/all").status_code == 400


def test_list_agent_run_history_database_error(monkeypatch):
    monkeypatch.setattr(
        "readiness_engine.api.agent_runs.list_venture_agent_runs",
        MagicMock(side_effect=RuntimeError("db down")),
    )

    assert client.get("/v1/agent-runs/v-1/IP/all").status_code == 500


def test_rubric_and_invalidate(monkeypatch):
    service = MagicMock()
    service.get_rubric.return_value = {"Team": {1: "Solo founder"}}
    monkeypatch.setattr("readiness_engine.api.reference.get_rubric_service", lambda: service)

    assert client.get("/v1/rubric").json() == {"Team": {"1": "Solo founder"}}
    assert client.post("/v1/rubric/invalidate").json() == {"success": True}
    service.invalidate.assert_called_once()


def test_stages_and_invalidate(monkeypatch):
    service = MagicMock()
    service.get_stages.return_value = [{"id": "seed", "name": "Seed", "display_order": 2}]
    monkeypatch.setattr("readiness_engine.api.reference.get_stage_service", lambda: service)

    assert client.get("/v1/stages").json()[0]["id"] == "seed"
    assert client.post("/v1/stages/invalidate").status_code == 200
    service.invalidate.assert_called_once()


def test_stage_by_id(monkeypatch):
    service = MagicMock()
    service.get_stage.side_effect = lambda stage_id: {"id": "seed"} if stage_id == "seed" else None
    monkeypatch.setattr("readiness_engine.api.reference.get_stage_service", lambda: service)

    assert client.get("/v1/stages/seed").json() == {"id": "seed"}
    assert client.get("/v1/stages/series_z").status_code == 404
