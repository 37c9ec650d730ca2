"""OpenAI embeddings generation with validation."""

import asyncio

from openai import OpenAI

from readiness_engine.core.config import get_settings
from readiness_engine.core.logging import get_logger

logger = get_logger(__name__)


class EmbeddingServiceError(Exception):
    """Raised when the embedding provider fails or returns a bad vector."""


def _get_client() -> OpenAI:
    """Get OpenAI client instance."""
    settings = get_settings()
    return OpenAI(api_key=settings.OPENAI_API_KEY)


def embed_text(text: str) -> list[float]:
    """
    Embed a single chunk of text.

    Args:
        text: Text to embed

    Returns:
        Embedding vector of EMBEDDING_DIM floats

    Raises:
        EmbeddingServiceError: On transport/API failure or dimension mismatch
    """
    settings = get_settings()

    try:
        client = _get_client()
        response = client.embeddings.create(
            model=settings.EMBEDDING_MODEL,
            input=text,
        )
        embedding = response.data[0].embedding
    except Exception as e:
        logger.error(f"Embedding request failed: {e}")
        raise EmbeddingServiceError(f"Embedding request failed: {e}") from e

    if len(embedding) != settings.EMBEDDING_DIM:
        raise EmbeddingServiceError(
            f"Embedding dimension mismatch: expected {settings.EMBEDDING_DIM}, got {len(embedding)}"
        )

    logger.debug(
        f"Generated embedding using {settings.EMBEDDING_MODEL}",
        extra={"extra_data": {"model": settings.EMBEDDING_MODEL, "chars": len(text)}},
    )
    return embedding


async def embed_text_async(text: str) -> list[float]:
    """Async wrapper around embed_text using thread pool."""
    return await asyncio.to_thread(embed_text, text)
