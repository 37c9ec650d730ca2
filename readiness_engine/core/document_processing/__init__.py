"""Document processing package: text extraction from uploaded files.

This package provides:
- Extractors for PDF, Word, spreadsheet and plain-text uploads
- A registry selecting the extractor by declared MIME type
- Upload validation against the accepted types

Usage:
    from readiness_engine.core.document_processing import extract_text

    text = await extract_text(file_bytes, "application/pdf", "venture/deck.pdf")
"""

from readiness_engine.core.document_processing.base import (
    BaseExtractor,
    EmptyExtractionError,
    ExtractionError,
    ExtractionResult,
    ExtractorRegistry,
    UnsupportedFormatError,
    get_extractor,
    validate_upload,
)

# Import extractors to register them
from readiness_engine.core.document_processing import pdf_extractor  # noqa: F401
from readiness_engine.core.document_processing import docx_extractor  # noqa: F401
from readiness_engine.core.document_processing import xlsx_extractor  # noqa: F401
from readiness_engine.core.document_processing import text_extractor  # noqa: F401


async def extract_text(file_bytes: bytes, mime_type: str, filename: str = "") -> str:
    """
    Extract raw text from a stored blob by its declared MIME type.

    Args:
        file_bytes: Raw file content
        mime_type: Declared MIME type of the file
        filename: Storage path or name, for logging

    Returns:
        Extracted text (never blank)

    Raises:
        UnsupportedFormatError: No extractor for the MIME type
        EmptyExtractionError: Extraction produced no usable text
        ExtractionError: The extractor failed to read the file
    """
    extractor = get_extractor(mime_type)
    if extractor is None:
        raise UnsupportedFormatError(mime_type)

    result = await extractor.extract(file_bytes=file_bytes, filename=filename)

    if result.is_empty:
        raise EmptyExtractionError(
            f"No text extracted from {filename or mime_type}",
            extractor=extractor.name,
            recoverable=False,
        )

    return result.raw_text


__all__ = [
    "BaseExtractor",
    "EmptyExtractionError",
    "ExtractionError",
    "ExtractionResult",
    "ExtractorRegistry",
    "UnsupportedFormatError",
    "extract_text",
    "get_extractor",
    "validate_upload",
]
