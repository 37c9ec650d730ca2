"""File Ingestion Graph.

LangGraph workflow for indexing one uploaded file:
1. Download the blob from storage (bounded by a timeout)
2. Extract text by declared MIME type (bounded by a timeout)
3. Chunk with overlap and sentence snapping
4. Tag, embed and persist each chunk
5. Finalize and report the file outcome

A file that cannot be downloaded, has an unsupported type, yields no text
or times out is reported as skipped/failed; it never raises out of the graph.
"""

import asyncio
import time
from dataclasses import dataclass, field
from typing import Any

from langgraph.graph import END, StateGraph

from readiness_engine.core.chunking import chunk_text
from readiness_engine.core.config import get_settings
from readiness_engine.core.document_processing import (
    EmptyExtractionError,
    ExtractionError,
    UnsupportedFormatError,
    extract_text,
)
from readiness_engine.core.embeddings import EmbeddingServiceError, embed_text_async
from readiness_engine.core.logging import get_logger
from readiness_engine.core.tagging import tag_dimensions
from readiness_engine.db.chunks import delete_file_chunks, insert_chunk
from readiness_engine.db.storage import download_file

logger = get_logger(__name__)


@dataclass
class FileIngestionState:
    """State for the file ingestion graph."""

    # Input
    file_id: str
    submission_id: str
    path: str
    mime: str

    start_time_ms: int = 0

    file_bytes: bytes = b""
    text: str = ""
    chunks: list[dict[str, Any]] = field(default_factory=list)

    # Output
    chunks_stored: int = 0
    chunks_without_vector: int = 0
    chunks_failed: int = 0
    status: str = "pending"
    duration_ms: int = 0

    # Non-fatal skip (unsupported, empty, timeout) vs hard error
    skip_reason: str | None = None
    error: str | None = None


def _ctx(state: FileIngestionState) -> dict[str, str]:
    return {"file_id": state.file_id, "submission_id": state.submission_id}


async def download(state: FileIngestionState) -> dict[str, Any]:
    """Download the file from storage."""
    settings = get_settings()

    logger.info(f"Downloading {state.path}", extra=_ctx(state))

    try:
        file_bytes = await asyncio.wait_for(
            asyncio.to_thread(download_file, state.path),
            timeout=settings.DOWNLOAD_TIMEOUT_SECONDS,
        )
        return {"file_bytes": file_bytes}

    except asyncio.TimeoutError:
        return {"skip_reason": f"Download timed out after {settings.DOWNLOAD_TIMEOUT_SECONDS}s"}
    except Exception as e:
        return {"error": f"Download failed: {e}"}


async def extract(state: FileIngestionState) -> dict[str, Any]:
    """Extract raw text from the downloaded bytes."""
    settings = get_settings()

    try:
        # Extractors are CPU-bound; a worker thread keeps the event loop free.
        # The timeout abandons the thread rather than stopping it: a timed-out
        # extraction runs to completion in the background and its text is discarded.
        text = await asyncio.wait_for(
            asyncio.to_thread(asyncio.run, extract_text(state.file_bytes, state.mime, state.path)),
            timeout=settings.EXTRACT_TIMEOUT_SECONDS,
        )
        return {"text": text, "file_bytes": b""}

    except UnsupportedFormatError:
        return {"skip_reason": f"Unsupported file type: {state.mime}"}
    except EmptyExtractionError:
        return {"skip_reason": "No extractable text"}
    except asyncio.TimeoutError:
        return {"skip_reason": f"Extraction timed out after {settings.EXTRACT_TIMEOUT_SECONDS}s"}
    except ExtractionError as e:
        return {"skip_reason": f"Extraction failed: {e}"}
    except Exception as e:
        return {"error": f"Extraction failed: {e}"}


async def chunk(state: FileIngestionState) -> dict[str, Any]:
    """Split extracted text into chunks."""
    settings = get_settings()

    try:
        chunks = chunk_text(
            state.text,
            source_label=state.path,
            max_chars=settings.CHUNK_SIZE,
            overlap=settings.CHUNK_OVERLAP,
        )
        logger.info(f"Created {len(chunks)} chunks from {state.path}", extra=_ctx(state))
        return {"chunks": chunks}

    except Exception as e:
        return {"error": f"Chunking failed: {e}"}


async def _index_one(
    state: FileIngestionState,
    chunk_row: dict[str, Any],
    semaphore: asyncio.Semaphore,
    store_without_vector: bool,
) -> str:
    """Tag, embed and persist one chunk. Returns 'stored', 'no_vector' or 'failed'."""
    dimensions = tag_dimensions(chunk_row["content"])
    embedding = None
    outcome = "stored"

    try:
        async with semaphore:
            embedding = await embed_text_async(chunk_row["content"])
    except EmbeddingServiceError as e:
        if not store_without_vector:
            logger.warning(
                f"Dropping {chunk_row['source_ref']}: {e}",
                extra=_ctx(state),
            )
            return "failed"
        logger.warning(
            f"Storing {chunk_row['source_ref']} without vector: {e}",
            extra=_ctx(state),
        )
        outcome = "no_vector"

    try:
        await asyncio.to_thread(
            insert_chunk,
            state.file_id,
            chunk_row["content"],
            chunk_row["source_ref"],
            dimensions,
            embedding,
        )
    except Exception as e:
        logger.warning(f"Failed to persist {chunk_row['source_ref']}: {e}", extra=_ctx(state))
        return "failed"

    return outcome


async def index_chunks(state: FileIngestionState) -> dict[str, Any]:
    """Tag, embed and persist chunks; one chunk's failure never stops its siblings."""
    settings = get_settings()

    if not state.chunks:
        return {}

    if settings.REPLACE_EXISTING_CHUNKS:
        try:
            await asyncio.to_thread(delete_file_chunks, state.file_id)
        except Exception as e:
            return {"error": f"Failed to clear prior chunks: {e}"}

    semaphore = asyncio.Semaphore(settings.EMBED_CONCURRENCY)
    store_without_vector = settings.EMBED_FAILURE_POLICY == "store_without_vector"

    outcomes = await asyncio.gather(
        *(_index_one(state, c, semaphore, store_without_vector) for c in state.chunks)
    )

    return {
        "chunks_stored": outcomes.count("stored") + outcomes.count("no_vector"),
        "chunks_without_vector": outcomes.count("no_vector"),
        "chunks_failed": outcomes.count("failed"),
    }


async def finalize(state: FileIngestionState) -> dict[str, Any]:
    """Settle the file status and log the outcome."""
    duration_ms = int(time.time() * 1000) - state.start_time_ms if state.start_time_ms else 0

    if state.error:
        logger.error(f"Ingestion failed for {state.path}: {state.error}", extra=_ctx(state))
        return {"status": "failed", "duration_ms": duration_ms}

    if state.skip_reason:
        logger.warning(f"Skipped {state.path}: {state.skip_reason}", extra=_ctx(state))
        return {"status": "skipped", "duration_ms": duration_ms}

    logger.info(
        f"Indexed {state.path}: {state.chunks_stored}/{len(state.chunks)} chunks "
        f"({state.chunks_failed} failed) in {duration_ms}ms",
        extra=_ctx(state),
    )
    return {"status": "indexed", "duration_ms": duration_ms}


def should_continue(state: FileIngestionState) -> str:
    """Determine if processing should continue."""
    if state.error or state.skip_reason:
        return "finalize"
    return "continue"


def build_ingestion_graph():
    """Build the file ingestion graph."""
    workflow = StateGraph(FileIngestionState)

    workflow.add_node("download", download)
    workflow.add_node("extract", extract)
    workflow.add_node("chunk", chunk)
    workflow.add_node("index_chunks", index_chunks)
    workflow.add_node("finalize", finalize)

    workflow.set_entry_point("download")
    workflow.add_conditional_edges(
        "download",
        should_continue,
        {"continue": "extract", "finalize": "finalize"},
    )
    workflow.add_conditional_edges(
        "extract",
        should_continue,
        {"continue": "chunk", "finalize": "finalize"},
    )
    workflow.add_conditional_edges(
        "chunk",
        should_continue,
        {"continue": "index_chunks", "finalize": "finalize"},
    )
    workflow.add_edge("index_chunks", "finalize")
    workflow.add_edge("finalize", END)

    return workflow.compile()


# Pre-compiled graph instance
ingestion_graph = build_ingestion_graph()


async def ingest_file(file_row: dict[str, Any], submission_id: str) -> dict[str, Any]:
    """Run one file through the graph.

    Args:
        file_row: Row from the files table (id, path, mime)
        submission_id: Owning submission

    Returns:
        Dict with file_id, path, status, chunk counts and reason
    """
    initial_state = FileIngestionState(
        file_id=str(file_row["id"]),
        submission_id=str(submission_id),
        path=file_row["path"],
        mime=file_row.get("mime") or "",
        start_time_ms=int(time.time() * 1000),
    )

    try:
        result = await ingestion_graph.ainvoke(initial_state)

        # ainvoke returns a dict, not the typed state object
        if not isinstance(result, dict):
            result = vars(result)

        return {
            "file_id": initial_state.file_id,
            "path": initial_state.path,
            "status": result.get("status", "failed"),
            "chunks_created": len(result.get("chunks") or []),
            "chunks_stored": result.get("chunks_stored", 0),
            "chunks_without_vector": result.get("chunks_without_vector", 0),
            "chunks_failed": result.get("chunks_failed", 0),
            "reason": result.get("error") or result.get("skip_reason"),
        }

    except Exception as e:
        logger.exception(f"Ingestion graph failed for {initial_state.path}: {e}")
        return {
            "file_id": initial_state.file_id,
            "path": initial_state.path,
            "status": "failed",
            "chunks_created": 0,
            "chunks_stored": 0,
            "chunks_without_vector": 0,
            "chunks_failed": 0,
            "reason": str(e),
        }
