"""
Content extraction service: turns a stored document into unstructured text
"""
import logging
import os
import tempfile
import time
from contextlib import contextmanager
from typing import Iterator, Optional

import requests

from config import settings
from models.document import ExtractionResult
from services.gemini_client import GeminiClient, file_part, text_part
from utils.exceptions import (
    ErrorCode, ExtractionError, FetchError, GenerativeServiceError, ServiceUnavailableError
)
from utils.error_handlers import log_processing_step, log_performance_metric

logger = logging.getLogger(__name__)


EXTRACTION_PROMPT = (
    "Extract and structure all information from this document. "
    "Each and every line and word is important. Make sure all data is extracted."
)

PASSTHROUGH_ERROR_CODES = {ErrorCode.GENAI_TIMEOUT, ErrorCode.GENAI_RATE_LIMIT, ErrorCode.SERVICE_UNAVAILABLE}


@contextmanager
def scratch_file(data: bytes, directory: Optional[str] = None, suffix: str = ".pdf") -> Iterator[str]:
    """
    Write bytes to a temporary file and remove it when the block exits

    Args:
        data: Bytes to stage
        directory: Scratch directory (system temp directory when None)
        suffix: File name suffix

    Yields:
        Path of the staged file
    """
    fd, path = tempfile.mkstemp(suffix=suffix, prefix="docai-", dir=directory)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        yield path
    finally:
        try:
            os.remove(path)
        except FileNotFoundError:
            pass


class ContentExtractionService:
    """
    Fetches a stored document by address and asks the document-understanding
    model to extract all of its content.
    """

    def __init__(
        self,
        gemini_client: Optional[GeminiClient] = None,
        scratch_directory: Optional[str] = None,
        fetch_timeout: Optional[float] = None,
        delete_remote_files: Optional[bool] = None
    ):
        self.gemini_client = gemini_client or GeminiClient()
        self.scratch_directory = scratch_directory or settings.scratch_directory
        self.fetch_timeout = fetch_timeout or settings.request_timeout_seconds
        self.delete_remote_files = (
            settings.gemini_delete_remote_files if delete_remote_files is None else delete_remote_files
        )
        self.max_fetch_bytes = settings.max_file_size_mb * 1024 * 1024

        if self.scratch_directory:
            os.makedirs(self.scratch_directory, exist_ok=True)

    def fetch(self, address: str) -> bytes:
        """
        Retrieve the raw bytes of a stored document

        Raises:
            FetchError: If the address is unreachable, answers with an error status or is empty
        """
        try:
            response = requests.get(address, timeout=self.fetch_timeout)
        except requests.exceptions.RequestException as e:
            logger.error(f"Failed to fetch {address}: {e}")
            raise FetchError(
                message="Stored document is unreachable",
                address=address,
                original_exception=e
            )

        if not response.ok:
            logger.error(f"Fetching {address} returned HTTP {response.status_code}")
            raise FetchError(
                message=f"Stored document returned HTTP {response.status_code}",
                address=address,
                status_code=response.status_code
            )

        content = response.content
        if not content:
            raise FetchError(message="Stored document is empty", address=address)
        if len(content) > self.max_fetch_bytes:
            raise FetchError(
                message=f"Stored document exceeds {self.max_fetch_bytes} bytes",
                address=address
            )

        return content

    def extract(self, address: str) -> str:
        """Extract all content from the document at ``address`` as plain text"""
        return self.extract_result(address).text

    def extract_result(self, address: str) -> ExtractionResult:
        """
        Extract all content from a stored document

        Args:
            address: Publicly reachable address of the document

        Returns:
            ExtractionResult with the model's raw text

        Raises:
            FetchError: If the document cannot be retrieved
            ExtractionError: If the document-understanding call fails or returns nothing
        """
        start_time = time.time()

        log_processing_step("fetch_document", {"address": address})
        content = self.fetch(address)

        with scratch_file(content, directory=self.scratch_directory) as path:
            log_processing_step("extract_content", {"bytes": len(content)})
            try:
                uploaded = self.gemini_client.upload_file(path, mime_type="application/pdf", display_name="Chat Document")
                try:
                    uploaded = self.gemini_client.wait_until_active(uploaded)
                    result = self.gemini_client.generate_content([
                        file_part(uploaded),
                        text_part(EXTRACTION_PROMPT)
                    ])
                finally:
                    self._delete_remote_file(uploaded.name)
            except (GenerativeServiceError, ServiceUnavailableError) as e:
                raise ExtractionError(
                    message=f"Content extraction failed: {e.message}",
                    model_name=self.gemini_client.model,
                    address=address,
                    error_code=e.error_code if e.error_code in PASSTHROUGH_ERROR_CODES else ErrorCode.EXTRACTION_FAILED,
                    original_exception=e
                )

        if not result.text.strip():
            raise ExtractionError(
                message="Content extraction returned no text",
                model_name=result.model_used,
                address=address
            )

        processing_time_ms = int((time.time() - start_time) * 1000)
        log_performance_metric("content_extraction", processing_time_ms, {"chars": len(result.text)})

        return ExtractionResult(
            text=result.text,
            model_used=result.model_used,
            processing_time_ms=processing_time_ms
        )

    def _delete_remote_file(self, name: str) -> None:
        if not self.delete_remote_files:
            return
        try:
            self.gemini_client.delete_file(name)
        except GenerativeServiceError as e:
            logger.warning(f"Failed to delete remote file {name}: {e}")

    def is_available(self) -> bool:
        return self.gemini_client.is_available()
