"""
Tests for PDF validation
"""
import base64
import io

import pytest
import PyPDF2

from services.pdf_processor import PDFProcessor
from utils.exceptions import ErrorCode, ValidationError


def make_pdf(pages=1) -> bytes:
    writer = PyPDF2.PdfWriter()
    for _ in range(pages):
        writer.add_blank_page(width=200, height=200)
    buffer = io.BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


class TestPDFProcessor:
    """Test cases for PDFProcessor"""

    def setup_method(self):
        self.processor = PDFProcessor(max_file_size_mb=1)

    def test_valid_pdf(self):
        assert self.processor.validate_pdf(make_pdf(pages=2), "invoice.pdf") == 2

    def test_extension_is_case_insensitive(self):
        assert self.processor.validate_pdf(make_pdf(), "INVOICE.PDF") == 1

    def test_empty_file(self):
        with pytest.raises(ValidationError) as exc_info:
            self.processor.validate_pdf(b"", "invoice.pdf")
        assert exc_info.value.error_code == ErrorCode.EMPTY_FILE

    def test_file_too_large(self):
        data = b"%PDF-" + b"0" * (1024 * 1024)
        with pytest.raises(ValidationError) as exc_info:
            self.processor.validate_pdf(data, "invoice.pdf")
        assert exc_info.value.error_code == ErrorCode.FILE_TOO_LARGE

    def test_wrong_extension(self):
        with pytest.raises(ValidationError) as exc_info:
            self.processor.validate_pdf(make_pdf(), "invoice.txt")
        assert exc_info.value.error_code == ErrorCode.INVALID_FILE_TYPE

    def test_missing_header(self):
        with pytest.raises(ValidationError) as exc_info:
            self.processor.validate_pdf(b"GIF89a not a pdf", "invoice.pdf")
        assert exc_info.value.error_code == ErrorCode.INVALID_FILE_TYPE

    def test_unparseable_pdf(self):
        with pytest.raises(ValidationError) as exc_info:
            self.processor.validate_pdf(b"%PDF-1.4\nthis is not really a pdf", "invoice.pdf")
        assert exc_info.value.error_code == ErrorCode.INVALID_FILE_TYPE


class TestBase64Decoding:
    """Test base64 payload decoding"""

    def test_plain_base64(self):
        pdf = make_pdf()
        assert PDFProcessor.decode_base64(base64.b64encode(pdf).decode()) == pdf

    def test_data_url_prefix(self):
        pdf = make_pdf()
        encoded = "data:application/pdf;base64," + base64.b64encode(pdf).decode()
        assert PDFProcessor.decode_base64(encoded) == pdf

    def test_embedded_newlines(self):
        encoded = base64.encodebytes(b"%PDF-1.4 some bytes").decode()
        assert "\n" in encoded
        assert PDFProcessor.decode_base64(encoded) == b"%PDF-1.4 some bytes"

    def test_invalid_base64(self):
        with pytest.raises(ValidationError) as exc_info:
            PDFProcessor.decode_base64("not*base64!")
        assert exc_info.value.error_code == ErrorCode.INVALID_ENCODING
