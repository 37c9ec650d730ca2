"""Spreadsheet extractors: openpyxl for .xlsx, xlrd for legacy .xls."""

from io import BytesIO
from typing import Any, Iterable

from readiness_engine.core.document_processing.base import (
    BaseExtractor,
    ExtractionError,
    ExtractionResult,
    ExtractorRegistry,
)
from readiness_engine.core.logging import get_logger

logger = get_logger(__name__)


def _format_cell(value: Any) -> str:
    if value is None:
        return ""
    # xlrd reports every number as float
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _serialize_rows(rows: Iterable[Iterable[Any]]) -> list[str]:
    lines = []
    for row in rows:
        cells = [_format_cell(value) for value in row]
        # Drop trailing empty cells
        while cells and not cells[-1]:
            cells.pop()
        if cells:
            lines.append("\t".join(cells))
    return lines


def _sheet_block(name: str, lines: list[str]) -> str:
    return f"Sheet: {name}\n" + "\n".join(lines) + "\n\n"


class XLSXExtractor(BaseExtractor):
    """Spreadsheet extractor for Office Open XML workbooks.

    Serializes every sheet in workbook order as::

        Sheet: <name>
        <tab-separated rows>
    """

    name = "xlsx"

    def get_supported_types(self) -> list[str]:
        return ["application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"]

    async def extract(
        self,
        file_bytes: bytes,
        filename: str,
        **kwargs: Any,
    ) -> ExtractionResult:
        try:
            from openpyxl import load_workbook
        except ImportError:
            raise ExtractionError("openpyxl not installed", extractor=self.name, recoverable=False)

        try:
            workbook = load_workbook(BytesIO(file_bytes), read_only=True, data_only=True)
        except Exception as e:
            raise ExtractionError(
                f"Failed to open workbook: {e}", extractor=self.name, recoverable=False
            )

        try:
            sheet_blocks = [
                _sheet_block(sheet.title, _serialize_rows(sheet.iter_rows(values_only=True)))
                for sheet in workbook.worksheets
            ]
        finally:
            workbook.close()

        raw_text = "".join(sheet_blocks)

        logger.info(f"Extracted workbook {filename}: {len(sheet_blocks)} sheets, {len(raw_text)} chars")

        return ExtractionResult(
            raw_text=raw_text,
            page_count=len(sheet_blocks),
            metadata={"filename": filename},
        )


class XLSExtractor(BaseExtractor):
    """Extractor for legacy BIFF (.xls) workbooks, same output as XLSXExtractor."""

    name = "xls"

    def get_supported_types(self) -> list[str]:
        return ["application/vnd.ms-excel"]

    async def extract(
        self,
        file_bytes: bytes,
        filename: str,
        **kwargs: Any,
    ) -> ExtractionResult:
        try:
            import xlrd
        except ImportError:
            raise ExtractionError("xlrd not installed", extractor=self.name, recoverable=False)

        try:
            book = xlrd.open_workbook(file_contents=file_bytes, on_demand=True)
        except Exception as e:
            raise ExtractionError(
                f"Failed to open workbook: {e}", extractor=self.name, recoverable=False
            )

        try:
            sheet_blocks = []
            for index in range(book.nsheets):
                sheet = book.sheet_by_index(index)
                rows = (sheet.row_values(r) for r in range(sheet.nrows))
                sheet_blocks.append(_sheet_block(sheet.name, _serialize_rows(rows)))
        finally:
            book.release_resources()

        raw_text = "".join(sheet_blocks)

        logger.info(f"Extracted legacy workbook {filename}: {len(sheet_blocks)} sheets, {len(raw_text)} chars")

        return ExtractionResult(
            raw_text=raw_text,
            page_count=len(sheet_blocks),
            metadata={"filename": filename},
        )


# Register extractors
ExtractorRegistry.register(XLSXExtractor())
ExtractorRegistry.register(XLSExtractor())
