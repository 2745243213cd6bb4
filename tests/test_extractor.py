import io

import docx
import pytest

from resume_tailor.errors import ExtractionFailure, FileTooLarge, UnsupportedFormat
from resume_tailor.extractor import DOC, DOCX, PDF, TXT, extract_text_from_file

FIVE_MIB = 5 * 1024 * 1024


class FakeUpload:
    """Stand-in for Streamlit's UploadedFile that counts reads."""

    def __init__(self, data=b"", name="resume.txt", type=TXT, size=None):
        self.name = name
        self.type = type
        self.size = len(data) if size is None else size
        self._data = data
        self.reads = 0

    def getvalue(self):
        self.reads += 1
        return self._data


def docx_bytes(paragraphs, table_rows=None):
    document = docx.Document()
    for text in paragraphs:
        document.add_paragraph(text)
    if table_rows:
        table = document.add_table(rows=len(table_rows), cols=len(table_rows[0]))
        for r, row in enumerate(table_rows):
            for c, value in enumerate(row):
                table.cell(r, c).text = value
    buf = io.BytesIO()
    document.save(buf)
    return buf.getvalue()


def test_plain_text_is_normalised():
    upload = FakeUpload("SUMMARY\r\nBuilt things.\r\n".encode("utf-8"))
    assert extract_text_from_file(upload) == "SUMMARY\nBuilt things."


def test_plain_text_with_bom_and_charset_parameter():
    upload = FakeUpload(b"\xef\xbb\xbfHello (cid:12)world", type="text/plain; charset=utf-8")
    assert extract_text_from_file(upload) == "Hello world"


def test_unsupported_type_is_rejected_before_reading():
    upload = FakeUpload(b"\x89PNG", name="photo.png", type="image/png")
    with pytest.raises(UnsupportedFormat):
        extract_text_from_file(upload)
    assert upload.reads == 0


def test_missing_type_is_rejected():
    with pytest.raises(UnsupportedFormat):
        extract_text_from_file(FakeUpload(b"hello", type=""))


def test_oversized_file_fails_without_reading():
    upload = FakeUpload(b"%PDF-1.4", name="big.pdf", type=PDF, size=FIVE_MIB + 1)
    with pytest.raises(FileTooLarge):
        extract_text_from_file(upload)
    assert upload.reads == 0


def test_file_at_the_limit_is_accepted():
    upload = FakeUpload(b"hi", size=FIVE_MIB)
    assert extract_text_from_file(upload) == "hi"


def test_upload_without_getvalue_is_read():
    class Reader:
        name, type, size = "cv.txt", TXT, 5

        def read(self):
            return b"hello"

    assert extract_text_from_file(Reader()) == "hello"


def test_non_utf8_text_fails():
    with pytest.raises(ExtractionFailure):
        extract_text_from_file(FakeUpload(b"caf\xe9 au lait"))


def test_blank_document_fails():
    with pytest.raises(ExtractionFailure):
        extract_text_from_file(FakeUpload(b"  \n\n  "))


def test_corrupt_pdf_fails():
    upload = FakeUpload(b"this is not a pdf at all", name="cv.pdf", type=PDF)
    with pytest.raises(ExtractionFailure):
        extract_text_from_file(upload)


def test_docx_paragraphs_and_tables():
    data = docx_bytes(["EXPERIENCE", "Acme Corp"], table_rows=[["Python", "Go"]])
    text = extract_text_from_file(FakeUpload(data, name="cv.docx", type=DOCX))
    lines = text.splitlines()
    assert "EXPERIENCE" in lines
    assert "Acme Corp" in lines
    assert "Python | Go" in lines
    assert lines.index("EXPERIENCE") < lines.index("Acme Corp") < lines.index("Python | Go")


def test_corrupt_docx_fails():
    upload = FakeUpload(b"PK\x03\x04garbage", name="cv.docx", type=DOCX)
    with pytest.raises(ExtractionFailure):
        extract_text_from_file(upload)


def test_doc_that_is_really_docx_is_read():
    data = docx_bytes(["SKILLS", "Python"])
    text = extract_text_from_file(FakeUpload(data, name="cv.doc", type=DOC))
    assert "SKILLS" in text.splitlines()


def test_legacy_binary_doc_fails_with_advice():
    data = b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1" + b"\x00" * 512
    with pytest.raises(ExtractionFailure, match="docx"):
        extract_text_from_file(FakeUpload(data, name="cv.doc", type=DOC))


def test_doc_with_unknown_content_fails():
    with pytest.raises(ExtractionFailure):
        extract_text_from_file(FakeUpload(b"random bytes", name="cv.doc", type=DOC))
