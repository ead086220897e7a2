"""
Plain-text extraction from uploaded resumes.

extract_text() never raises: unsupported types and parser failures both give "".
"""
import io
import logging

import docx
import fitz  # PyMuPDF

logger = logging.getLogger(__name__)

PDF_TYPES = {"application/pdf"}
WORD_TYPES = {
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
}
TEXT_TYPES = {"text/plain"}

# OCR is not implemented; images are accepted but only acknowledged.
IMAGE_PLACEHOLDER = "Image content detected - OCR functionality would be implemented here"


def _extract_pdf(content: bytes) -> str:
    with fitz.open(stream=content, filetype="pdf") as doc:
        return "\n".join(page.get_text() for page in doc).strip()


def _extract_docx(content: bytes) -> str:
    document = docx.Document(io.BytesIO(content))
    return "\n".join(p.text for p in document.paragraphs if p.text.strip())


def extract_text(content: bytes, media_type: str) -> str:
    media_type = (media_type or "").split(";")[0].strip().lower()
    try:
        if media_type in PDF_TYPES:
            return _extract_pdf(content)
        if media_type in WORD_TYPES or "wordprocessingml" in media_type:
            return _extract_docx(content)
        if media_type in TEXT_TYPES:
            return content.decode("utf-8", errors="replace").strip()
        if media_type.startswith("image/"):
            return IMAGE_PLACEHOLDER
    except Exception as e:
        logger.warning("Text extraction failed for %s: %s", media_type, e)
        return ""

    logger.warning("No text extractor for media type %r", media_type)
    return ""
