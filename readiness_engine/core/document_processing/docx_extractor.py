"""Word document extractor using python-docx."""

from io import BytesIO
from typing import Any

from readiness_engine.core.document_processing.base import (
    BaseExtractor,
    ExtractionError,
    ExtractionResult,
    ExtractorRegistry,
)
from readiness_engine.core.logging import get_logger

logger = get_logger(__name__)


class DOCXExtractor(BaseExtractor):
    """Word document extractor.

    Returns the raw paragraph text followed by table rows, with formatting
    discarded. Legacy binary .doc files are accepted by MIME type but
    python-docx cannot open them, so they fail with ExtractionError.
    """

    name = "docx"

    def get_supported_types(self) -> list[str]:
        return [
            "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
            "application/msword",
        ]

    async def extract(
        self,
        file_bytes: bytes,
        filename: str,
        **kwargs: Any,
    ) -> ExtractionResult:
        try:
            from docx import Document
        except ImportError:
            raise ExtractionError(
                "python-docx not installed", extractor=self.name, recoverable=False
            )

        try:
            doc = Document(BytesIO(file_bytes))
        except Exception as e:
            raise ExtractionError(
                f"Failed to open Word document: {e}", extractor=self.name, recoverable=False
            )

        parts = [para.text.strip() for para in doc.paragraphs if para.text.strip()]

        for table in doc.tables:
            for row in table.rows:
                cells = [cell.text.strip() for cell in row.cells]
                if any(cells):
                    parts.append("\t".join(cells))

        raw_text = "\n".join(parts)

        logger.info(f"Extracted Word document {filename}: {len(parts)} blocks, {len(raw_text)} chars")

        return ExtractionResult(
            raw_text=raw_text,
            page_count=1,
            metadata={"filename": filename, "tables": len(doc.tables)},
        )


# Register extractor
ExtractorRegistry.register(DOCXExtractor())
