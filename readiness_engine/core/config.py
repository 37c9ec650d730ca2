"""Configuration management for the Readiness Engine."""

from functools import lru_cache
from typing import Literal

from dotenv import load_dotenv
from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from .env file (only if accessible)
try:
    load_dotenv()
except (PermissionError, OSError):
    # Environment variables should be set directly
    pass


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    # Supabase configuration (required)
    SUPABASE_URL: str = Field(..., description="Supabase project URL")
    SUPABASE_SERVICE_ROLE_KEY: str = Field(..., description="Supabase service role key")

    # OpenAI configuration (required)
    OPENAI_API_KEY: str = Field(..., description="OpenAI API key")

    # Environment
    READINESS_ENV: str = Field(default="dev", description="Environment: dev, staging, prod")

    # Embedding configuration
    EMBEDDING_MODEL: str = Field(
        default="text-embedding-3-small", description="OpenAI embedding model"
    )
    EMBEDDING_DIM: int = Field(default=1536, description="Embedding vector dimension")
    EMBED_CONCURRENCY: int = Field(
        default=4, ge=1, description="Max concurrent embedding calls per file"
    )
    EMBED_FAILURE_POLICY: Literal["drop", "store_without_vector"] = Field(
        default="drop",
        description="What to do with a chunk whose embedding call failed",
    )

    # Chunking configuration
    CHUNK_SIZE: int = Field(default=1000, gt=0, description="Target characters per chunk")
    CHUNK_OVERLAP: int = Field(default=200, ge=0, description="Characters shared by adjacent chunks")
    REPLACE_EXISTING_CHUNKS: bool = Field(
        default=False, description="Delete a file's prior chunks before re-ingesting it"
    )

    # Ingestion timeouts
    DOWNLOAD_TIMEOUT_SECONDS: float = Field(default=60.0, description="Blob download timeout")
    EXTRACT_TIMEOUT_SECONDS: float = Field(default=120.0, description="Text extraction timeout")

    # Uploads and storage
    MAX_UPLOAD_BYTES: int = Field(default=10 * 1024 * 1024, description="Max file upload size in bytes")
    STORAGE_BUCKET: str = Field(default="readiness-uploads", description="Supabase storage bucket")

    # Queue configuration
    REDIS_URL: str = Field(default="redis://localhost:6379/0", description="Redis broker URL")
    ASSESSMENT_QUEUE: str = Field(default="assessments", description="rq queue name for assessments")
    JOB_MAX_RETRIES: int = Field(default=2, ge=0, description="Queue-level retries per assessment job")
    JOB_TIMEOUT_SECONDS: int = Field(default=600, description="Max runtime of one assessment job")
    QUEUE_RETRY_ATTEMPTS: int = Field(
        default=5, description="Retries for transient broker errors"
    )
    QUEUE_BACKOFF_BASE_SECONDS: float = Field(default=0.5, description="Backoff base for broker retries")
    QUEUE_BACKOFF_CAP_SECONDS: float = Field(default=10.0, description="Backoff cap for broker retries")
    STALE_SUBMISSION_MINUTES: int = Field(
        default=30, description="Age after which pending/processing submissions are requeued"
    )

    # Scoring
    SCORING_MODEL_NAME: str = Field(default="template-v1", description="Model name recorded on agent runs")

    # Cache TTLs
    RUBRIC_CACHE_TTL_SECONDS: float = Field(default=1800.0, description="Rubric cache TTL")
    STAGE_CACHE_TTL_SECONDS: float = Field(default=300.0, description="Stage cache TTL")

    @model_validator(mode="after")
    def _check_chunk_overlap(self) -> "Settings":
        if self.CHUNK_OVERLAP >= self.CHUNK_SIZE:
            raise ValueError(
                f"CHUNK_OVERLAP ({self.CHUNK_OVERLAP}) must be smaller than CHUNK_SIZE ({self.CHUNK_SIZE})"
            )
        return self


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings instance loaded from environment

    Raises:
        ValidationError: If required environment variables are missing
    """
    return Settings()
