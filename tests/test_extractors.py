"""Tests for document text extraction with real in-memory files."""

from io import BytesIO

import fitz
import pytest
import xlwt
from docx import Document
from openpyxl import Workbook

from readiness_engine.core.document_processing import (
    EmptyExtractionError,
    ExtractionError,
    UnsupportedFormatError,
    extract_text,
    validate_upload,
)

PDF = "application/pdf"
DOCX = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
XLSX = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
XLS = "application/vnd.ms-excel"
PPTX = "application/vnd.openxmlformats-officedocument.presentationml.presentation"


def _pdf_bytes(*pages: str) -> bytes:
    doc = fitz.open()
    for text in pages:
        page = doc.new_page()
        if text:
            page.insert_text((72, 72), text)
    data = doc.tobytes()
    doc.close()
    return data


def _docx_bytes() -> bytes:
    doc = Document()
    doc.add_paragraph("Orbital Forge pitch")
    doc.add_paragraph("   ")
    doc.add_paragraph("TRL 6 prototype flown")
    table = doc.add_table(rows=1, cols=2)
    table.rows[0].cells[0].text = "Revenue"
    table.rows[0].cells[1].text = "120000"
    buffer = BytesIO()
    doc.save(buffer)
    return buffer.getvalue()


def _xlsx_bytes() -> bytes:
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = "Financials"
    sheet.append(["Year", "Revenue"])
    sheet.append([2025, 120000])
    second = workbook.create_sheet("Team")
    second.append(["Founders", 2])
    buffer = BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


def _xls_bytes() -> bytes:
    workbook = xlwt.Workbook()
    sheet = workbook.add_sheet("Financials")
    for r, row in enumerate([["Year", "Revenue"], [2025, 120000], ["Margin", 0.25]]):
        for c, value in enumerate(row):
            sheet.write(r, c, value)
    workbook.add_sheet("Team").write(0, 0, "Founders")
    buffer = BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


@pytest.mark.asyncio
async def test_pdf_pages_joined_in_order():
    text = await extract_text(_pdf_bytes("Page one text", "Page two text"), PDF, "deck.pdf")

    assert text == "Page one text\nPage two text"


@pytest.mark.asyncio
async def test_pdf_blank_pages_are_dropped():
    text = await extract_text(_pdf_bytes("Only page", ""), PDF, "deck.pdf")

    assert text == "Only page"


@pytest.mark.asyncio
async def test_pdf_without_text_is_empty():
    with pytest.raises(EmptyExtractionError):
        await extract_text(_pdf_bytes(""), PDF, "scan.pdf")


@pytest.mark.asyncio
async def test_corrupt_pdf_raises_extraction_error():
    with pytest.raises(ExtractionError):
        await extract_text(b"not a pdf at all", PDF, "broken.pdf")


@pytest.mark.asyncio
async def test_docx_paragraphs_and_tables():
    text = await extract_text(_docx_bytes(), DOCX, "plan.docx")

    assert text == "Orbital Forge pitch\nTRL 6 prototype flown\nRevenue\t120000"


@pytest.mark.asyncio
async def test_xlsx_sheets_serialized_in_order():
    text = await extract_text(_xlsx_bytes(), XLSX, "model.xlsx")

    assert text == "Sheet: Financials\nYear\tRevenue\n2025\t120000\n\nSheet: Team\nFounders\t2\n\n"


@pytest.mark.asyncio
async def test_legacy_xls_sheets_serialized_in_order():
    text = await extract_text(_xls_bytes(), XLS, "model.xls")

    assert text == "Sheet: Financials\nYear\tRevenue\n2025\t120000\nMargin\t0.25\n\nSheet: Team\nFounders\n\n"


@pytest.mark.asyncio
async def test_corrupt_xls_raises_extraction_error():
    with pytest.raises(ExtractionError, match="Failed to open workbook"):
        await extract_text(b"not a workbook", XLS, "broken.xls")


@pytest.mark.asyncio
async def test_text_with_bom_is_decoded():
    text = await extract_text("\ufeffMission brief".encode("utf-8"), "text/plain", "brief.txt")

    assert text == "Mission brief"


@pytest.mark.asyncio
async def test_latin1_text_falls_back():
    text = await extract_text("Caf\xe9 orbit".encode("latin-1"), "text/plain", "notes.txt")

    assert text == "Caf\xe9 orbit"


@pytest.mark.asyncio
async def test_unsupported_mime_type():
    with pytest.raises(UnsupportedFormatError):
        await extract_text(b"PK\x03\x04", "application/zip", "bundle.zip")


@pytest.mark.asyncio
async def test_slides_are_accepted_but_not_extracted():
    assert validate_upload(100, PPTX, ".pptx") == (True, "")
    with pytest.raises(UnsupportedFormatError):
        await extract_text(b"PK\x03\x04", PPTX, "deck.pptx")


def test_validate_upload_rejections():
    ok, msg = validate_upload(100, "image/png", ".png")
    assert not ok
    assert msg.startswith("File type not allowed")

    ok, msg = validate_upload(100, PDF, ".exe")
    assert not ok
    assert msg == "File extension not allowed"

    ok, msg = validate_upload(0, PDF, ".pdf")
    assert not ok
    assert msg == "File is empty"

    ok, msg = validate_upload(11 * 1024 * 1024, PDF, ".PDF", max_bytes=10 * 1024 * 1024)
    assert not ok
    assert msg == "File size must be less than 10MB"
