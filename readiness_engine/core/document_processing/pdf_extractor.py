"""PDF document extractor.

Uses PyMuPDF (fitz) for native text extraction, page by page.
"""

from typing import Any

from readiness_engine.core.document_processing.base import (
    BaseExtractor,
    ExtractionError,
    ExtractionResult,
    ExtractorRegistry,
)
from readiness_engine.core.logging import get_logger

logger = get_logger(__name__)

# Lazy import to avoid loading heavy libraries at module load
fitz = None


def _get_fitz():
    """Lazy load PyMuPDF."""
    global fitz
    if fitz is None:
        try:
            import fitz as _fitz
            fitz = _fitz
        except ImportError:
            raise ImportError(
                "PyMuPDF (fitz) is required for PDF extraction. "
                "Install with: pip install pymupdf"
            )
    return fitz


class PDFExtractor(BaseExtractor):
    """PDF document extractor.

    Pages are read in order; each page's text is trimmed and the pages are
    joined with a newline. Image-only pages contribute nothing.
    """

    name = "pdf"

    def get_supported_types(self) -> list[str]:
        return ["application/pdf"]

    async def extract(
        self,
        file_bytes: bytes,
        filename: str,
        **kwargs: Any,
    ) -> ExtractionResult:
        fitz_lib = _get_fitz()

        try:
            doc = fitz_lib.open(stream=file_bytes, filetype="pdf")
        except Exception as e:
            logger.error(f"PDF open failed for {filename}: {e}")
            raise ExtractionError(f"PDF extraction failed: {e}", extractor=self.name, recoverable=False)

        try:
            page_texts = [page.get_text("text").strip() for page in doc]
            page_count = len(page_texts)
        except Exception as e:
            logger.error(f"PDF extraction failed for {filename}: {e}")
            raise ExtractionError(f"PDF extraction failed: {e}", extractor=self.name, recoverable=True)
        finally:
            doc.close()

        warnings = []
        blank_pages = sum(1 for text in page_texts if not text)
        if blank_pages:
            warnings.append(f"{blank_pages} of {page_count} pages have no text layer")

        raw_text = "\n".join(text for text in page_texts if text)

        logger.info(f"Extracted PDF {filename}: {page_count} pages, {len(raw_text)} chars")

        return ExtractionResult(
            raw_text=raw_text,
            page_count=page_count,
            metadata={"filename": filename, "blank_pages": blank_pages},
            warnings=warnings,
        )


# Register the extractor
ExtractorRegistry.register(PDFExtractor())
