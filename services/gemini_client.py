"""
Gemini REST client used for document understanding and question answering
"""
import logging
import os
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import requests

from config import settings
from utils.exceptions import (
    GenerativeServiceError, ErrorCode, create_genai_unavailable_error
)
from utils.error_handlers import log_performance_metric

logger = logging.getLogger(__name__)


@dataclass
class GeminiFile:
    """A file uploaded to the Gemini file service"""
    name: str
    uri: str
    mime_type: str
    state: str = "ACTIVE"

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "GeminiFile":
        return cls(
            name=data["name"],
            uri=data["uri"],
            mime_type=data.get("mimeType", "application/pdf"),
            state=data.get("state", "ACTIVE")
        )


@dataclass
class GenerationResult:
    """Text generated by a Gemini model"""
    text: str
    model_used: str
    tokens_used: int
    processing_time_ms: int


def text_part(text: str) -> Dict[str, Any]:
    """Build a text content part"""
    return {"text": text}


def file_part(file: GeminiFile) -> Dict[str, Any]:
    """Build a content part referencing an uploaded file"""
    return {"fileData": {"mimeType": file.mime_type, "fileUri": file.uri}}


class GeminiClient:
    """Thin client for the Gemini generateContent and file APIs"""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None
    ):
        """
        Initialize the Gemini client

        Args:
            api_key: Gemini API key (if None, will use settings.gemini_api_key)
            model: Model to use (if None, will use settings.gemini_model)
            base_url: API root (if None, will use settings.gemini_base_url)
            timeout: Per-request timeout in seconds
        """
        self.api_key = api_key or settings.gemini_api_key
        self.model = model or settings.gemini_model
        self.base_url = (base_url or settings.gemini_base_url).rstrip("/")
        self.timeout = timeout or settings.request_timeout_seconds
        self.temperature = settings.gemini_temperature
        self.poll_interval = settings.gemini_file_poll_interval_seconds
        self.active_timeout = settings.gemini_file_active_timeout_seconds

        if self.api_key:
            logger.info(f"Gemini client initialized with model: {self.model}")
        else:
            logger.warning("No Gemini API key provided, generative AI calls will fail")

    def _request(self, method: str, url: str, stage: str, **kwargs) -> requests.Response:
        """
        Issue one HTTP request to the Gemini API and map failures to GenerativeServiceError

        Args:
            method: HTTP method
            url: Absolute URL
            stage: Name of the calling operation, recorded on errors

        Returns:
            The successful response
        """
        if not self.api_key:
            raise create_genai_unavailable_error()

        headers = kwargs.pop("headers", {})
        headers["x-goog-api-key"] = self.api_key

        try:
            response = requests.request(method, url, headers=headers, timeout=self.timeout, **kwargs)
        except requests.exceptions.Timeout as e:
            logger.error(f"Gemini {stage} timed out: {e}")
            raise GenerativeServiceError(
                message="Generative AI service request timed out",
                model_name=self.model,
                processing_stage=stage,
                error_code=ErrorCode.GENAI_TIMEOUT,
                original_exception=e
            )
        except requests.exceptions.RequestException as e:
            logger.error(f"Gemini {stage} connection error: {e}")
            raise GenerativeServiceError(
                message="Failed to connect to generative AI service",
                model_name=self.model,
                processing_stage=stage,
                original_exception=e
            )

        if response.status_code == 429:
            logger.error(f"Gemini {stage} rate limited")
            raise GenerativeServiceError(
                message="Rate limit exceeded for generative AI service",
                model_name=self.model,
                processing_stage=stage,
                error_code=ErrorCode.GENAI_RATE_LIMIT
            )
        if not response.ok:
            error_message = self._error_message(response)
            logger.error(f"Gemini {stage} failed with HTTP {response.status_code}: {error_message}")
            raise GenerativeServiceError(
                message=f"Generative AI service error: {error_message}",
                model_name=self.model,
                processing_stage=stage
            )

        return response

    @staticmethod
    def _error_message(response: requests.Response) -> str:
        try:
            return response.json().get("error", {}).get("message") or f"HTTP {response.status_code}"
        except ValueError:
            return f"HTTP {response.status_code}"

    @staticmethod
    def _json(response: requests.Response, stage: str) -> Dict[str, Any]:
        try:
            return response.json()
        except ValueError as e:
            raise GenerativeServiceError(
                message="Invalid response from generative AI service",
                processing_stage=stage,
                original_exception=e
            )

    def upload_file(self, file_path: str, mime_type: str = "application/pdf",
                    display_name: str = "Chat Document") -> GeminiFile:
        """
        Upload a local file with the resumable upload protocol

        Args:
            file_path: Path of the file to upload
            mime_type: MIME type to register the file with
            display_name: Human-readable name shown in the file service

        Returns:
            GeminiFile describing the uploaded file
        """
        size = os.path.getsize(file_path)

        start = self._request(
            "POST",
            f"{self.base_url}/upload/v1beta/files",
            stage="file_upload_start",
            headers={
                "X-Goog-Upload-Protocol": "resumable",
                "X-Goog-Upload-Command": "start",
                "X-Goog-Upload-Header-Content-Length": str(size),
                "X-Goog-Upload-Header-Content-Type": mime_type,
                "Content-Type": "application/json"
            },
            json={"file": {"display_name": display_name}}
        )

        upload_url = start.headers.get("X-Goog-Upload-URL")
        if not upload_url:
            raise GenerativeServiceError(
                message="File service did not return an upload URL",
                processing_stage="file_upload_start"
            )

        with open(file_path, "rb") as f:
            finished = self._request(
                "POST",
                upload_url,
                stage="file_upload",
                headers={
                    "Content-Length": str(size),
                    "X-Goog-Upload-Offset": "0",
                    "X-Goog-Upload-Command": "upload, finalize"
                },
                data=f
            )

        data = self._json(finished, "file_upload")
        try:
            uploaded = GeminiFile.from_api(data["file"])
        except (KeyError, TypeError) as e:
            raise GenerativeServiceError(
                message="File service response is missing file metadata",
                processing_stage="file_upload",
                original_exception=e
            )

        logger.info(f"Uploaded {size} bytes to Gemini file service as {uploaded.name}")
        return uploaded

    def get_file(self, name: str) -> GeminiFile:
        response = self._request("GET", f"{self.base_url}/v1beta/{name}", stage="file_status")
        data = self._json(response, "file_status")
        try:
            return GeminiFile.from_api(data)
        except (KeyError, TypeError) as e:
            raise GenerativeServiceError(
                message=f"File status response for {name} is missing file metadata",
                processing_stage="file_status",
                original_exception=e
            )

    def wait_until_active(self, file: GeminiFile) -> GeminiFile:
        """
        Poll an uploaded file until the service finishes processing it

        Raises:
            GenerativeServiceError: If the file fails or stays in PROCESSING past the timeout
        """
        deadline = time.monotonic() + self.active_timeout

        while file.state == "PROCESSING":
            if time.monotonic() >= deadline:
                raise GenerativeServiceError(
                    message=f"File {file.name} was not ready after {self.active_timeout}s",
                    processing_stage="file_status",
                    error_code=ErrorCode.GENAI_TIMEOUT
                )
            time.sleep(self.poll_interval)
            file = self.get_file(file.name)

        if file.state != "ACTIVE":
            raise GenerativeServiceError(
                message=f"File {file.name} ended in state {file.state}",
                processing_stage="file_status"
            )

        return file

    def delete_file(self, name: str) -> None:
        self._request("DELETE", f"{self.base_url}/v1beta/{name}", stage="file_delete")
        logger.info(f"Deleted Gemini file {name}")

    def generate_content(self, parts: List[Dict[str, Any]]) -> GenerationResult:
        """
        Generate text from a list of content parts

        Args:
            parts: Text and file parts forming a single user turn

        Returns:
            GenerationResult with the concatenated text of the first candidate
        """
        start_time = time.time()

        payload = {
            "contents": [{"role": "user", "parts": parts}],
            "generationConfig": {"temperature": self.temperature}
        }

        response = self._request(
            "POST",
            f"{self.base_url}/v1beta/models/{self.model}:generateContent",
            stage="generate_content",
            json=payload
        )
        data = self._json(response, "generate_content")

        candidates = data.get("candidates") or []
        if not candidates:
            block_reason = data.get("promptFeedback", {}).get("blockReason", "no candidates")
            raise GenerativeServiceError(
                message=f"Model returned no answer ({block_reason})",
                model_name=self.model,
                processing_stage="generate_content"
            )

        content_parts = candidates[0].get("content", {}).get("parts", [])
        text = "".join(part.get("text", "") for part in content_parts)

        duration_ms = int((time.time() - start_time) * 1000)
        log_performance_metric("gemini_generate_content", duration_ms, {"model": self.model})

        return GenerationResult(
            text=text,
            model_used=self.model,
            tokens_used=data.get("usageMetadata", {}).get("totalTokenCount", 0),
            processing_time_ms=duration_ms
        )

    def is_available(self) -> bool:
        """Check if the generative AI service is configured"""
        return bool(self.api_key)

    def get_model_info(self) -> Dict[str, str]:
        """Get information about the configured model"""
        return {
            "model": self.model,
            "base_url": self.base_url,
            "available": str(self.is_available())
        }
