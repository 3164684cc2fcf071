"""
Tests for the Gemini REST client
"""
from unittest.mock import Mock, patch

import pytest
import requests

from services.gemini_client import (
    GeminiClient, GeminiFile, GenerationResult, file_part, text_part
)
from utils.exceptions import ErrorCode, GenerativeServiceError, ServiceUnavailableError


def make_response(status_code=200, json_data=None, headers=None):
    response = Mock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 300
    response.json.return_value = json_data if json_data is not None else {}
    response.headers = headers or {}
    return response


@pytest.fixture
def client():
    return GeminiClient(api_key="test-key", model="gemini-1.5-flash", base_url="https://gemini.test/", timeout=5)


class TestContentParts:
    """Test content part builders"""

    def test_text_part(self):
        assert text_part("hello") == {"text": "hello"}

    def test_file_part(self):
        file = GeminiFile(name="files/abc", uri="https://gemini.test/files/abc", mime_type="application/pdf")
        assert file_part(file) == {
            "fileData": {"mimeType": "application/pdf", "fileUri": "https://gemini.test/files/abc"}
        }


class TestGeminiClient:
    """Test cases for GeminiClient"""

    def test_initialization(self, client):
        assert client.base_url == "https://gemini.test"
        assert client.is_available() is True
        assert client.get_model_info()["model"] == "gemini-1.5-flash"

    @patch("services.gemini_client.requests.request")
    def test_generate_content(self, mock_request, client):
        mock_request.return_value = make_response(json_data={
            "candidates": [{"content": {"parts": [{"text": "The total "}, {"text": "is $42."}]}}],
            "usageMetadata": {"totalTokenCount": 17}
        })

        result = client.generate_content([text_part("What is the total?")])

        assert isinstance(result, GenerationResult)
        assert result.text == "The total is $42."
        assert result.tokens_used == 17

        args, kwargs = mock_request.call_args
        assert args == ("POST", "https://gemini.test/v1beta/models/gemini-1.5-flash:generateContent")
        assert kwargs["headers"]["x-goog-api-key"] == "test-key"
        assert kwargs["timeout"] == 5
        assert kwargs["json"]["contents"][0]["parts"] == [{"text": "What is the total?"}]

    @patch("services.gemini_client.requests.request")
    def test_generate_content_blocked(self, mock_request, client):
        mock_request.return_value = make_response(json_data={"promptFeedback": {"blockReason": "SAFETY"}})

        with pytest.raises(GenerativeServiceError) as exc_info:
            client.generate_content([text_part("x")])
        assert "SAFETY" in exc_info.value.message

    @patch("services.gemini_client.requests.request")
    def test_rate_limit(self, mock_request, client):
        mock_request.return_value = make_response(status_code=429)

        with pytest.raises(GenerativeServiceError) as exc_info:
            client.generate_content([text_part("x")])
        assert exc_info.value.error_code == ErrorCode.GENAI_RATE_LIMIT

    @patch("services.gemini_client.requests.request")
    def test_http_error_carries_message(self, mock_request, client):
        mock_request.return_value = make_response(
            status_code=400, json_data={"error": {"message": "API key not valid"}}
        )

        with pytest.raises(GenerativeServiceError) as exc_info:
            client.generate_content([text_part("x")])
        assert "API key not valid" in exc_info.value.message
        assert exc_info.value.error_code == ErrorCode.GENAI_API_ERROR

    @patch("services.gemini_client.requests.request")
    def test_timeout(self, mock_request, client):
        mock_request.side_effect = requests.exceptions.Timeout("slow")

        with pytest.raises(GenerativeServiceError) as exc_info:
            client.generate_content([text_part("x")])
        assert exc_info.value.error_code == ErrorCode.GENAI_TIMEOUT

    @patch("services.gemini_client.requests.request")
    def test_connection_error(self, mock_request, client):
        mock_request.side_effect = requests.exceptions.ConnectionError("down")

        with pytest.raises(GenerativeServiceError):
            client.generate_content([text_part("x")])

    def test_missing_api_key(self):
        client = GeminiClient(api_key="", model="m", base_url="https://gemini.test")
        client.api_key = None

        assert client.is_available() is False
        with pytest.raises(ServiceUnavailableError):
            client.generate_content([text_part("x")])

    @patch("services.gemini_client.requests.request")
    def test_upload_file(self, mock_request, client, tmp_path):
        path = tmp_path / "doc.pdf"
        path.write_bytes(b"%PDF-1.4 test")

        mock_request.side_effect = [
            make_response(headers={"X-Goog-Upload-URL": "https://upload.test/session"}),
            make_response(json_data={"file": {
                "name": "files/abc",
                "uri": "https://gemini.test/v1beta/files/abc",
                "mimeType": "application/pdf",
                "state": "PROCESSING"
            }})
        ]

        uploaded = client.upload_file(str(path))

        assert uploaded.name == "files/abc"
        assert uploaded.state == "PROCESSING"

        start_call, upload_call = mock_request.call_args_list
        assert start_call.args == ("POST", "https://gemini.test/upload/v1beta/files")
        assert start_call.kwargs["headers"]["X-Goog-Upload-Protocol"] == "resumable"
        assert start_call.kwargs["headers"]["X-Goog-Upload-Header-Content-Length"] == str(len(b"%PDF-1.4 test"))
        assert upload_call.args == ("POST", "https://upload.test/session")
        assert upload_call.kwargs["headers"]["X-Goog-Upload-Command"] == "upload, finalize"

    @patch("services.gemini_client.requests.request")
    def test_upload_without_upload_url(self, mock_request, client, tmp_path):
        path = tmp_path / "doc.pdf"
        path.write_bytes(b"%PDF-1.4 test")
        mock_request.return_value = make_response(headers={})

        with pytest.raises(GenerativeServiceError):
            client.upload_file(str(path))

    @patch("services.gemini_client.time.sleep")
    @patch("services.gemini_client.requests.request")
    def test_wait_until_active(self, mock_request, mock_sleep, client):
        mock_request.return_value = make_response(json_data={
            "name": "files/abc", "uri": "u", "mimeType": "application/pdf", "state": "ACTIVE"
        })
        pending = GeminiFile(name="files/abc", uri="u", mime_type="application/pdf", state="PROCESSING")

        active = client.wait_until_active(pending)

        assert active.state == "ACTIVE"
        assert mock_request.call_args.args == ("GET", "https://gemini.test/v1beta/files/abc")
        mock_sleep.assert_called_once()

    @patch("services.gemini_client.requests.request")
    def test_wait_until_active_failed_state(self, mock_request, client):
        failed = GeminiFile(name="files/abc", uri="u", mime_type="application/pdf", state="FAILED")

        with pytest.raises(GenerativeServiceError):
            client.wait_until_active(failed)
        mock_request.assert_not_called()

    @patch("services.gemini_client.time.sleep")
    @patch("services.gemini_client.requests.request")
    def test_wait_until_active_times_out(self, mock_request, mock_sleep, client):
        client.active_timeout = 0
        pending = GeminiFile(name="files/abc", uri="u", mime_type="application/pdf", state="PROCESSING")

        with pytest.raises(GenerativeServiceError) as exc_info:
            client.wait_until_active(pending)
        assert exc_info.value.error_code == ErrorCode.GENAI_TIMEOUT

    @patch("services.gemini_client.requests.request")
    def test_delete_file(self, mock_request, client):
        mock_request.return_value = make_response()

        client.delete_file("files/abc")

        assert mock_request.call_args.args == ("DELETE", "https://gemini.test/v1beta/files/abc")

    @patch("services.gemini_client.time.sleep")
    @patch("services.gemini_client.requests.request")
    def test_status_without_file_metadata(self, mock_request, mock_sleep, client):
        mock_request.return_value = make_response(json_data={"state": "ACTIVE"})
        pending = GeminiFile(name="files/abc", uri="u", mime_type="application/pdf", state="PROCESSING")

        with pytest.raises(GenerativeServiceError) as exc_info:
            client.wait_until_active(pending)
        assert exc_info.value.details["processing_stage"] == "file_status"
