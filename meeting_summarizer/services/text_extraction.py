"""Plain-text extraction for uploaded transcripts."""

import io
import zipfile
from enum import Enum
from typing import List, Optional

import docx
from docx.opc.exceptions import PackageNotFoundError
from docx.table import Table
from docx.text.paragraph import Paragraph

from meeting_summarizer.core.exceptions import UnsupportedFormatError
from meeting_summarizer.utils.logging import get_logger

LOGGER = get_logger(__name__)

TEXT_MIME_TYPE = "text/plain"
DOCX_MIME_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

UNSUPPORTED_MESSAGE = "Invalid file type. Please upload a .txt or .docx file."


class TranscriptFormat(str, Enum):
    """Upload formats the extractor understands."""
    TEXT = "text"
    DOCX = "docx"


def resolve_format(filename: Optional[str], mime_type: Optional[str]) -> TranscriptFormat:
    """Decide the upload format from its MIME type or, failing that, its extension.

    Raises:
        UnsupportedFormatError: If neither identifies a supported format
    """
    name = (filename or "").lower()
    declared = (mime_type or "").split(";")[0].strip().lower()

    if declared == TEXT_MIME_TYPE or name.endswith(".txt"):
        return TranscriptFormat.TEXT
    if declared == DOCX_MIME_TYPE or name.endswith(".docx"):
        return TranscriptFormat.DOCX

    raise UnsupportedFormatError(UNSUPPORTED_MESSAGE)


def _table_lines(table: Table) -> List[str]:
    lines = []
    for row in table.rows:
        for cell in row.cells:
            text = cell.text.strip()
            if text:
                lines.append(text)
    return lines


def extract_docx_text(data: bytes) -> str:
    """Flatten headings, paragraphs and table cells of a .docx into lines."""
    try:
        document = docx.Document(io.BytesIO(data))
    except (PackageNotFoundError, zipfile.BadZipFile, KeyError, ValueError) as e:
        LOGGER.warning(f"Could not open .docx upload: {e}")
        raise UnsupportedFormatError("The .docx file could not be read.", original_error=e) from e

    lines: List[str] = []
    for block in document.iter_inner_content():
        if isinstance(block, Paragraph):
            if block.text.strip():
                lines.append(block.text.strip())
        elif isinstance(block, Table):
            lines.extend(_table_lines(block))

    return "\n".join(lines)


def extract_text(filename: Optional[str], mime_type: Optional[str], data: bytes) -> str:
    """Extract plain text from an uploaded file.

    Args:
        filename: Name of the uploaded file
        mime_type: Declared content type
        data: Raw file bytes

    Returns:
        The extracted text

    Raises:
        UnsupportedFormatError: For formats other than .txt and .docx
    """
    transcript_format = resolve_format(filename, mime_type)

    if transcript_format == TranscriptFormat.TEXT:
        return data.decode("utf-8-sig", errors="replace")

    return extract_docx_text(data)
