import io

import docx
import pytest

from meeting_summarizer.core.exceptions import UnsupportedFormatError, ValidationError
from meeting_summarizer.services.text_extraction import (
    DOCX_MIME_TYPE,
    TranscriptFormat,
    extract_text,
    resolve_format,
)


def _docx_bytes(build) -> bytes:
    document = docx.Document()
    build(document)
    buffer = io.BytesIO()
    document.save(buffer)
    return buffer.getvalue()


@pytest.mark.parametrize("filename, mime_type, expected", [
    ("notes.txt", "text/plain", TranscriptFormat.TEXT),
    ("notes.bin", "text/plain; charset=utf-8", TranscriptFormat.TEXT),
    ("NOTES.TXT", "application/octet-stream", TranscriptFormat.TEXT),
    ("minutes.docx", DOCX_MIME_TYPE, TranscriptFormat.DOCX),
    ("minutes.docx", "", TranscriptFormat.DOCX),
])
def test_resolve_format(filename, mime_type, expected):
    assert resolve_format(filename, mime_type) == expected


def test_unsupported_format_is_a_validation_error():
    with pytest.raises(UnsupportedFormatError) as exc_info:
        extract_text("slides.pdf", "application/pdf", b"%PDF-1.4")

    assert isinstance(exc_info.value, ValidationError)
    assert exc_info.value.message == "Invalid file type. Please upload a .txt or .docx file."


def test_plain_text_is_decoded_as_utf8():
    data = "\ufeffBob: café at 10?\nAlice: yes".encode("utf-8")
    assert extract_text("call.txt", "text/plain", data) == "Bob: café at 10?\nAlice: yes"


def test_plain_text_replaces_undecodable_bytes():
    text = extract_text("call.txt", "text/plain", b"ok \xff ok")
    assert text.startswith("ok ") and text.endswith(" ok")


def test_docx_paragraphs_and_tables_in_document_order():
    def build(document):
        document.add_heading("Weekly sync", level=1)
        document.add_paragraph("Alice: the release slips a week.")
        document.add_paragraph("   ")
        table = document.add_table(rows=1, cols=2)
        table.cell(0, 0).text = "Owner"
        table.cell(0, 1).text = "Bob"
        document.add_paragraph("Bob: agreed.")

    text = extract_text("sync.docx", DOCX_MIME_TYPE, _docx_bytes(build))

    assert text.split("\n") == [
        "Weekly sync",
        "Alice: the release slips a week.",
        "Owner",
        "Bob",
        "Bob: agreed.",
    ]


def test_corrupt_docx_is_rejected():
    with pytest.raises(UnsupportedFormatError, match="could not be read"):
        extract_text("broken.docx", DOCX_MIME_TYPE, b"definitely not a zip archive")
