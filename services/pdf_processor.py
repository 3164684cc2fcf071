"""
PDF validation performed before a document is stored
"""
import base64
import binascii
import io
import logging
from typing import Optional

import PyPDF2

from config import settings
from utils.exceptions import (
    ValidationError, ErrorCode,
    create_file_too_large_error, create_invalid_file_type_error
)

logger = logging.getLogger(__name__)


PDF_MAGIC = b"%PDF-"


class PDFProcessor:
    """
    Service for checking that an upload is a readable PDF.
    Rejects bad uploads before anything is written to remote storage.
    """

    def __init__(self, max_file_size_mb: Optional[int] = None):
        """Initialize the PDF processor"""
        self.max_file_size = (max_file_size_mb or settings.max_file_size_mb) * 1024 * 1024

    @staticmethod
    def decode_base64(encoded: str) -> bytes:
        """
        Decode a base64 payload, accepting an optional data-URL prefix.

        Raises:
            ValidationError: If the payload is not valid base64
        """
        if encoded.startswith("data:") and "," in encoded:
            encoded = encoded.split(",", 1)[1]

        try:
            return base64.b64decode("".join(encoded.split()), validate=True)
        except (binascii.Error, ValueError) as e:
            raise ValidationError(
                message="Document payload is not valid base64",
                field_name="documentBase64",
                error_code=ErrorCode.INVALID_ENCODING,
                original_exception=e
            )

    def validate_pdf(self, data: bytes, filename: str) -> int:
        """
        Validate an uploaded PDF.

        Args:
            data: Raw document bytes
            filename: Display name of the upload

        Returns:
            Number of pages in the document

        Raises:
            ValidationError: If the upload is empty, too large, not named .pdf or unreadable
        """
        if not data:
            raise ValidationError(
                message=f"File '{filename}' is empty",
                field_name="document",
                field_value=filename,
                error_code=ErrorCode.EMPTY_FILE
            )

        if len(data) > self.max_file_size:
            raise create_file_too_large_error(filename, len(data), self.max_file_size)

        if not filename.lower().endswith('.pdf'):
            raise create_invalid_file_type_error(filename, "name must end with .pdf")

        if not data.startswith(PDF_MAGIC):
            raise create_invalid_file_type_error(filename, "missing %PDF- header")

        try:
            reader = PyPDF2.PdfReader(io.BytesIO(data))
            page_count = len(reader.pages)
        except Exception as e:
            logger.warning(f"PyPDF2 could not read {filename}: {e}")
            raise ValidationError(
                message=f"File '{filename}' could not be parsed as a PDF",
                field_name="document",
                field_value=filename,
                validation_rule="pdf",
                error_code=ErrorCode.INVALID_FILE_TYPE,
                original_exception=e
            )

        if page_count == 0:
            raise create_invalid_file_type_error(filename, "PDF contains no pages")

        logger.info(f"Validated {filename}: {len(data)} bytes, {page_count} pages")
        return page_count
