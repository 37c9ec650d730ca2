"""Base extractor interface and registry for document processing.

Defines the contract that all document extractors must implement,
plus a registry for extractor selection based on the declared MIME type.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Optional


ACCEPTED_MIME_TYPES: frozenset[str] = frozenset(
    {
        "application/pdf",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        "application/msword",
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        "application/vnd.ms-excel",
        # Accepted on upload but no extractor handles slides yet
        "application/vnd.openxmlformats-officedocument.presentationml.presentation",
        "application/vnd.ms-powerpoint",
        "text/plain",
    }
)

ACCEPTED_EXTENSIONS: frozenset[str] = frozenset(
    {".pdf", ".docx", ".doc", ".xlsx", ".xls", ".pptx", ".ppt", ".txt"}
)

DEFAULT_SIZE_LIMIT = 10 * 1024 * 1024  # 10 MB


@dataclass
class ExtractionResult:
    """Result of document extraction."""

    raw_text: str
    """Full extracted text, in document order."""

    page_count: int = 1
    """Pages for PDFs, sheets for workbooks, 1 otherwise."""

    metadata: dict[str, Any] = field(default_factory=dict)
    warnings: list[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.raw_text.strip()


class BaseExtractor(ABC):
    """Base class for document extractors.

    Each document type (PDF, DOCX, etc.) has its own extractor implementation
    that inherits from this base class.
    """

    name: str = "base"

    @abstractmethod
    def get_supported_types(self) -> list[str]:
        """Return list of supported MIME types."""

    @abstractmethod
    async def extract(
        self,
        file_bytes: bytes,
        filename: str,
        **kwargs: Any,
    ) -> ExtractionResult:
        """Extract text from a document.

        Args:
            file_bytes: Raw file content
            filename: Original filename or storage path (for logging)
            **kwargs: Extractor-specific options

        Returns:
            ExtractionResult with the extracted text

        Raises:
            ExtractionError: If extraction fails
        """

    def can_handle(self, mime_type: str) -> bool:
        """Check if this extractor handles the declared MIME type."""
        return mime_type in self.get_supported_types()


class ExtractionError(Exception):
    """Raised when document extraction fails."""

    def __init__(self, message: str, extractor: str = None, recoverable: bool = False):
        super().__init__(message)
        self.extractor = extractor
        self.recoverable = recoverable


class UnsupportedFormatError(ExtractionError):
    """No extractor is registered for the declared MIME type."""

    def __init__(self, mime_type: str):
        super().__init__(f"Unsupported file type: {mime_type}", extractor=None, recoverable=False)
        self.mime_type = mime_type


class EmptyExtractionError(ExtractionError):
    """Extraction succeeded but produced no usable text."""


class ExtractorRegistry:
    """Registry for document extractors."""

    _extractors: list[BaseExtractor] = []

    @classmethod
    def register(cls, extractor: BaseExtractor) -> None:
        cls._extractors.append(extractor)

    @classmethod
    def get_extractor(cls, mime_type: str | None) -> Optional[BaseExtractor]:
        """Get the first registered extractor for a MIME type, or None."""
        for extractor in cls._extractors:
            if extractor.can_handle(mime_type or ""):
                return extractor
        return None


def get_extractor(mime_type: str | None) -> Optional[BaseExtractor]:
    """Convenience function to get extractor from registry."""
    return ExtractorRegistry.get_extractor(mime_type)


def validate_upload(
    size: int,
    mime_type: str,
    file_extension: str,
    max_bytes: int = DEFAULT_SIZE_LIMIT,
) -> tuple[bool, str]:
    """Validate an upload's declared type, extension and size.

    Both the MIME type and the extension must be on the allow-list.

    Returns:
        Tuple of (is_valid, error_message)
    """
    if mime_type not in ACCEPTED_MIME_TYPES:
        return False, "File type not allowed. Please upload PDF, Word, PowerPoint, Excel, or text files only."

    if file_extension.lower() not in ACCEPTED_EXTENSIONS:
        return False, "File extension not allowed"

    if size <= 0:
        return False, "File is empty"

    if size > max_bytes:
        limit_mb = max_bytes / (1024 * 1024)
        return False, f"File size must be less than {limit_mb:.0f}MB"

    return True, ""
