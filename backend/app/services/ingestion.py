"""Best-effort plain text from an uploaded file (PDF, Word or anything else)."""
import io
import logging

from docx import Document
from PyPDF2 import PdfReader

from app.core.errors import IngestionError

logger = logging.getLogger(__name__)


def extract_text_from_pdf(file_content: bytes) -> str:
    """Extract text content from a PDF file, one line block per page."""
    try:
        pdf_reader = PdfReader(io.BytesIO(file_content))
        text = ""
        for page in pdf_reader.pages:
            text += (page.extract_text() or "") + "\n"
        return text.strip()
    except Exception as e:
        raise IngestionError(f"Failed to read PDF: {str(e)}") from e


def extract_text_from_docx(file_content: bytes) -> str:
    """Raw paragraph text of a .docx file."""
    try:
        document = Document(io.BytesIO(file_content))
    except Exception as e:
        raise IngestionError(f"Failed to read Word document: {str(e)}") from e
    return "\n".join(paragraph.text for paragraph in document.paragraphs).strip()


def read_as_text(filename: str, file_content: bytes) -> str:
    """Dispatch on extension; unknown formats are decoded as UTF-8 as-is."""
    ext = (filename or "").lower().rsplit(".", 1)[-1]

    if ext == "pdf":
        text = extract_text_from_pdf(file_content)
    elif ext == "docx":
        text = extract_text_from_docx(file_content)
    else:
        text = file_content.decode("utf-8", errors="replace")

    logger.info("Read %d characters from %s", len(text), filename)
    return text
