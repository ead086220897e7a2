"""Tests for resume text extraction."""
import io

import docx
import fitz  # PyMuPDF

from app.services.text_extraction import IMAGE_PLACEHOLDER, extract_text

DOCX_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


def make_pdf(text):
    doc = fitz.open()
    page = doc.new_page()
    page.insert_text((72, 72), text)
    data = doc.tobytes()
    doc.close()
    return data


def make_docx(*paragraphs):
    document = docx.Document()
    for paragraph in paragraphs:
        document.add_paragraph(paragraph)
    buffer = io.BytesIO()
    document.save(buffer)
    return buffer.getvalue()


def test_pdf():
    assert "Senior Python Developer" in extract_text(make_pdf("Senior Python Developer"), "application/pdf")


def test_docx():
    text = extract_text(make_docx("Jane Doe", "", "Data Engineer"), DOCX_TYPE)
    assert text == "Jane Doe\nData Engineer"


def test_plain_text():
    assert extract_text(b"  plain resume \n", "text/plain; charset=utf-8") == "plain resume"


def test_image_returns_placeholder():
    assert extract_text(b"\xff\xd8 jpeg", "image/jpeg") == IMAGE_PLACEHOLDER


def test_corrupt_document_returns_empty_string():
    assert extract_text(b"garbage", "application/pdf") == ""
    assert extract_text(b"garbage", DOCX_TYPE) == ""


def test_unsupported_type_returns_empty_string():
    assert extract_text(b"<html></html>", "text/html") == ""
    assert extract_text(b"data", None) == ""
