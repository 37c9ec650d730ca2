"""API router for v1 endpoints."""

from fastapi import APIRouter

from readiness_engine.api import agent_runs, assessments, process_files, reference, uploads

router = APIRouter()

# Assessment queueing and single-dimension re-runs
router.include_router(assessments.router, tags=["assessments"])

# Document upload and ingestion
router.include_router(uploads.router, tags=["uploads"])
router.include_router(process_files.router, tags=["ingestion"])

# Audit trail
router.include_router(agent_runs.router, tags=["agent_runs"])

# Rubric and stage reference data
router.include_router(reference.router, tags=["reference"])
