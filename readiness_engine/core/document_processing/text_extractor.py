"""Plain text extractor."""

from typing import Any

from readiness_engine.core.document_processing.base import (
    BaseExtractor,
    ExtractionResult,
    ExtractorRegistry,
)


def _decode_bytes(raw_bytes: bytes) -> tuple[str, str]:
    """
    Attempt to decode bytes using fallback chain.

    Returns:
        Tuple of (decoded_text, encoding_name)
    """
    # Check for UTF-8 BOM first
    if raw_bytes.startswith(b"\xef\xbb\xbf"):
        return raw_bytes.decode("utf-8-sig"), "utf-8-sig"

    try:
        return raw_bytes.decode("utf-8"), "utf-8"
    except UnicodeDecodeError:
        # latin-1 maps every byte, so this cannot fail
        return raw_bytes.decode("latin-1"), "latin-1"


class TextExtractor(BaseExtractor):
    """Passthrough decoder for text/plain uploads."""

    name = "text"

    def get_supported_types(self) -> list[str]:
        return ["text/plain"]

    async def extract(
        self,
        file_bytes: bytes,
        filename: str,
        **kwargs: Any,
    ) -> ExtractionResult:
        text, encoding = _decode_bytes(file_bytes)
        return ExtractionResult(
            raw_text=text,
            page_count=1,
            metadata={"filename": filename, "encoding": encoding},
        )


# Register extractor
ExtractorRegistry.register(TextExtractor())
