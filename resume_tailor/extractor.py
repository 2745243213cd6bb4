"""
Uploaded résumé ➜ raw text
– accepts PDF, legacy Word, Word XML and plain text uploads
– rejects unknown types and oversized files before reading a single byte
– strips `(cid:N)` glyph artifacts
– suppresses verbose CropBox warnings from pdfplumber/pdfminer
"""
from __future__ import annotations

import io, logging, warnings, zipfile

import docx
import pdfplumber
from docx.table import Table

from resume_tailor import config
from resume_tailor.cleaner import normalise_text
from resume_tailor.errors import ExtractionFailure, FileTooLarge, UnsupportedFormat

logger = logging.getLogger(__name__)

# silence noisy PDF logging
logging.getLogger("pdfplumber").setLevel(logging.ERROR)
logging.getLogger("pdfminer").setLevel(logging.ERROR)
warnings.filterwarnings("ignore", category=UserWarning, module="pdfminer")

PDF  = "application/pdf"
DOC  = "application/msword"
DOCX = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
TXT  = "text/plain"

ACCEPTED_TYPES = (PDF, DOC, DOCX, TXT)
ACCEPTED_EXTENSIONS = ("pdf", "doc", "docx", "txt")

_OLE_MAGIC = b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1"


def pdf_to_text(data: bytes) -> str:
    with pdfplumber.open(io.BytesIO(data)) as pdf:
        pages = [p.extract_text() or "" for p in pdf.pages]
    return "\n".join(pages)


def docx_to_text(data: bytes) -> str:
    """Paragraphs and table rows, in body order."""
    document = docx.Document(io.BytesIO(data))
    lines = []
    for block in document.iter_inner_content():
        if isinstance(block, Table):
            for row in block.rows:
                cells = []
                for cell in row.cells:
                    text = cell.text.strip()
                    # merged cells repeat their text once per spanned column
                    if text and (not cells or cells[-1] != text):
                        cells.append(text)
                if cells:
                    lines.append(" | ".join(cells))
        else:
            lines.append(block.text)
    return "\n".join(lines)


def doc_to_text(data: bytes) -> str:
    # .doc files saved by newer Word versions are often OOXML in disguise
    if zipfile.is_zipfile(io.BytesIO(data)):
        return docx_to_text(data)
    if data.startswith(_OLE_MAGIC):
        raise ExtractionFailure(
            "Legacy Word (.doc) documents cannot be read. "
            "Please save the file as .docx or PDF and upload it again."
        )
    raise ExtractionFailure("The file is not a valid Word document.")


def txt_to_text(data: bytes) -> str:
    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise ExtractionFailure(
            "The text file is not UTF-8 encoded. Please re-save it as UTF-8."
        ) from exc


_DECODERS = {
    PDF: pdf_to_text,
    DOC: doc_to_text,
    DOCX: docx_to_text,
    TXT: txt_to_text,
}


def check_upload(upload) -> None:
    """Type and size checks; only looks at the declared metadata."""
    if _mime(upload) not in ACCEPTED_TYPES:
        raise UnsupportedFormat("Please upload a PDF, Word document, or plain text file.")
    size = getattr(upload, "size", None) or 0
    if size > config.MAX_UPLOAD_BYTES:
        raise FileTooLarge(f"File size should be less than {config.MAX_UPLOAD_MB}MB.")


def _mime(upload) -> str:
    return (getattr(upload, "type", None) or "").split(";")[0].strip().lower()


def _read_bytes(upload) -> bytes:
    if hasattr(upload, "getvalue"):
        return upload.getvalue()
    return upload.read()


def extract_text_from_file(upload) -> str:
    """
    Turn an uploaded résumé into normalised plain text.

    `upload` needs `name`, `size`, `type` and either `getvalue()` or `read()`
    (Streamlit's UploadedFile has all of them).

    Raises UnsupportedFormat, FileTooLarge or ExtractionFailure.
    """
    check_upload(upload)
    mime = _mime(upload)
    data = _read_bytes(upload)
    if len(data) > config.MAX_UPLOAD_BYTES:
        raise FileTooLarge(f"File size should be less than {config.MAX_UPLOAD_MB}MB.")

    logger.info("Extracting text from %s (%s, %d bytes)", upload.name, mime, len(data))
    try:
        text = _DECODERS[mime](data)
    except ExtractionFailure:
        raise
    except Exception as exc:
        # pdfminer/python-docx raise a zoo of types for corrupt or encrypted input
        logger.warning("Extraction failed for %s: %r", upload.name, exc)
        raise ExtractionFailure(
            f"Could not read {upload.name}. The file may be corrupt or password-protected."
        ) from exc

    text = normalise_text(text).strip()
    if not text:
        raise ExtractionFailure(
            f"No text could be extracted from {upload.name}. "
            "Scanned documents are not supported."
        )
    logger.info("Extracted %d characters from %s", len(text), upload.name)
    return text
