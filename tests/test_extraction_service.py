"""
Tests for the content extraction service
"""
import os
from unittest.mock import Mock, patch

import pytest
import requests

from services.extraction_service import ContentExtractionService, EXTRACTION_PROMPT, scratch_file
from services.gemini_client import GeminiClient, GeminiFile, GenerationResult
from utils.exceptions import (
    ErrorCode, ExtractionError, FetchError, GenerativeServiceError, create_genai_unavailable_error
)


ADDRESS = "https://docai-uploads.s3.amazonaws.com/documents/1-invoice.pdf"
PDF_BYTES = b"%PDF-1.4\nInvoice Total: $42\n%%EOF"


def fetched(content=PDF_BYTES, status_code=200):
    response = Mock()
    response.ok = 200 <= status_code < 300
    response.status_code = status_code
    response.content = content
    return response


class TestScratchFile:
    """Test the scratch file context manager"""

    def test_file_exists_inside_block_and_is_removed(self, tmp_path):
        with scratch_file(b"abc", directory=str(tmp_path)) as path:
            assert os.path.exists(path)
            with open(path, "rb") as f:
                assert f.read() == b"abc"
        assert not os.path.exists(path)
        assert list(tmp_path.iterdir()) == []

    def test_file_removed_when_block_raises(self, tmp_path):
        with pytest.raises(RuntimeError):
            with scratch_file(b"abc", directory=str(tmp_path)):
                raise RuntimeError("boom")
        assert list(tmp_path.iterdir()) == []


class TestContentExtractionService:
    """Test cases for ContentExtractionService"""

    def setup_method(self):
        self.mock_client = Mock(spec=GeminiClient)
        self.mock_client.model = "gemini-1.5-flash"
        self.uploaded = GeminiFile(name="files/abc", uri="https://gemini.test/files/abc", mime_type="application/pdf")
        self.mock_client.upload_file.return_value = self.uploaded
        self.mock_client.wait_until_active.return_value = self.uploaded
        self.mock_client.generate_content.return_value = GenerationResult(
            text="Invoice Total: $42", model_used="gemini-1.5-flash", tokens_used=10, processing_time_ms=5
        )

    def make_service(self, tmp_path, delete_remote_files=True):
        return ContentExtractionService(
            gemini_client=self.mock_client,
            scratch_directory=str(tmp_path),
            fetch_timeout=5,
            delete_remote_files=delete_remote_files
        )

    @patch("services.extraction_service.requests.get")
    def test_extract_success(self, mock_get, tmp_path):
        mock_get.return_value = fetched()
        service = self.make_service(tmp_path)

        text = service.extract(ADDRESS)

        assert "42" in text
        mock_get.assert_called_once_with(ADDRESS, timeout=5)
        parts = self.mock_client.generate_content.call_args.args[0]
        assert parts[0]["fileData"]["fileUri"] == self.uploaded.uri
        assert parts[1] == {"text": EXTRACTION_PROMPT}
        self.mock_client.delete_file.assert_called_once_with("files/abc")

    @patch("services.extraction_service.requests.get")
    def test_scratch_file_removed_after_success(self, mock_get, tmp_path):
        mock_get.return_value = fetched()
        uploaded_paths = []

        def record_upload(path, **kwargs):
            uploaded_paths.append(path)
            with open(path, "rb") as f:
                assert f.read() == PDF_BYTES
            return self.uploaded

        self.mock_client.upload_file.side_effect = record_upload

        self.make_service(tmp_path).extract(ADDRESS)

        assert len(uploaded_paths) == 1
        assert not os.path.exists(uploaded_paths[0])
        assert list(tmp_path.iterdir()) == []

    @patch("services.extraction_service.requests.get")
    def test_scratch_file_removed_after_failure(self, mock_get, tmp_path):
        mock_get.return_value = fetched()
        self.mock_client.generate_content.side_effect = GenerativeServiceError("model down")

        with pytest.raises(ExtractionError) as exc_info:
            self.make_service(tmp_path).extract(ADDRESS)

        assert exc_info.value.error_code == ErrorCode.EXTRACTION_FAILED
        assert exc_info.value.details["address"] == ADDRESS
        assert list(tmp_path.iterdir()) == []
        self.mock_client.delete_file.assert_called_once_with("files/abc")

    @patch("services.extraction_service.requests.get")
    def test_rate_limit_code_is_preserved(self, mock_get, tmp_path):
        mock_get.return_value = fetched()
        self.mock_client.upload_file.side_effect = GenerativeServiceError(
            "slow down", error_code=ErrorCode.GENAI_RATE_LIMIT
        )

        with pytest.raises(ExtractionError) as exc_info:
            self.make_service(tmp_path).extract(ADDRESS)

        assert exc_info.value.error_code == ErrorCode.GENAI_RATE_LIMIT
        self.mock_client.delete_file.assert_not_called()

    @patch("services.extraction_service.requests.get")
    def test_empty_model_reply(self, mock_get, tmp_path):
        mock_get.return_value = fetched()
        self.mock_client.generate_content.return_value = GenerationResult(
            text="   ", model_used="gemini-1.5-flash", tokens_used=0, processing_time_ms=1
        )

        with pytest.raises(ExtractionError):
            self.make_service(tmp_path).extract(ADDRESS)

    @patch("services.extraction_service.requests.get")
    def test_remote_file_kept_when_deletion_disabled(self, mock_get, tmp_path):
        mock_get.return_value = fetched()

        self.make_service(tmp_path, delete_remote_files=False).extract(ADDRESS)

        self.mock_client.delete_file.assert_not_called()

    @patch("services.extraction_service.requests.get")
    def test_remote_delete_failure_does_not_fail_extraction(self, mock_get, tmp_path):
        mock_get.return_value = fetched()
        self.mock_client.delete_file.side_effect = GenerativeServiceError("gone")

        result = self.make_service(tmp_path).extract_result(ADDRESS)

        assert result.text == "Invoice Total: $42"
        assert result.model_used == "gemini-1.5-flash"

    @patch("services.extraction_service.requests.get")
    def test_fetch_unreachable(self, mock_get, tmp_path):
        mock_get.side_effect = requests.exceptions.ConnectionError("refused")

        with pytest.raises(FetchError) as exc_info:
            self.make_service(tmp_path).extract(ADDRESS)

        assert exc_info.value.error_code == ErrorCode.FETCH_FAILED
        self.mock_client.upload_file.assert_not_called()

    @patch("services.extraction_service.requests.get")
    def test_fetch_error_status(self, mock_get, tmp_path):
        mock_get.return_value = fetched(content=b"denied", status_code=403)

        with pytest.raises(FetchError) as exc_info:
            self.make_service(tmp_path).fetch(ADDRESS)
        assert exc_info.value.details["status_code"] == 403

    @patch("services.extraction_service.requests.get")
    def test_fetch_empty_body(self, mock_get, tmp_path):
        mock_get.return_value = fetched(content=b"")

        with pytest.raises(FetchError):
            self.make_service(tmp_path).fetch(ADDRESS)

    @patch("services.extraction_service.requests.get")
    def test_unconfigured_model_is_an_extraction_error(self, mock_get, tmp_path):
        mock_get.return_value = fetched()
        self.mock_client.upload_file.side_effect = create_genai_unavailable_error()

        with pytest.raises(ExtractionError) as exc_info:
            self.make_service(tmp_path).extract(ADDRESS)

        assert exc_info.value.error_code == ErrorCode.SERVICE_UNAVAILABLE
        assert list(tmp_path.iterdir()) == []

    @patch("services.gemini_client.time.sleep")
    @patch("services.gemini_client.requests.request")
    @patch("services.extraction_service.requests.get")
    def test_incomplete_file_status_is_an_extraction_error(self, mock_get, mock_request, mock_sleep, tmp_path):
        mock_get.return_value = fetched()
        status = Mock(status_code=200, ok=True)
        status.json.return_value = {"state": "ACTIVE"}
        mock_request.return_value = status

        client = GeminiClient(api_key="test-key", model="gemini-1.5-flash", base_url="https://gemini.test")
        self.mock_client.upload_file.return_value = GeminiFile(
            name="files/abc", uri="https://gemini.test/files/abc", mime_type="application/pdf", state="PROCESSING"
        )
        self.mock_client.wait_until_active.side_effect = client.wait_until_active

        with pytest.raises(ExtractionError) as exc_info:
            self.make_service(tmp_path).extract(ADDRESS)

        assert exc_info.value.error_code == ErrorCode.EXTRACTION_FAILED
        self.mock_client.generate_content.assert_not_called()
