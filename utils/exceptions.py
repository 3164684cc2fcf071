"""
Custom exception classes for the DocAI document chat service

This module defines all custom exceptions used throughout the application,
providing structured error handling with proper error codes and messages.
"""
import time
from typing import Optional, Dict, Any
from enum import Enum


class ErrorCode(Enum):
    """Enumeration of error codes for consistent error handling"""

    # General errors
    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"

    # Upload validation errors
    FILE_TOO_LARGE = "FILE_TOO_LARGE"
    INVALID_FILE_TYPE = "INVALID_FILE_TYPE"
    EMPTY_FILE = "EMPTY_FILE"
    INVALID_ENCODING = "INVALID_ENCODING"

    # Pipeline errors
    STORAGE_FAILED = "STORAGE_FAILED"
    FETCH_FAILED = "FETCH_FAILED"
    EXTRACTION_FAILED = "EXTRACTION_FAILED"
    ANSWER_FAILED = "ANSWER_FAILED"
    GENAI_API_ERROR = "GENAI_API_ERROR"
    GENAI_TIMEOUT = "GENAI_TIMEOUT"
    GENAI_RATE_LIMIT = "GENAI_RATE_LIMIT"

    # Session errors
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"


class DocAIException(Exception):
    """
    Base exception class for all DocAI errors

    Provides structured error information with error codes, messages,
    and optional details for debugging and user feedback.
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_SERVER_ERROR,
        details: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None
    ):
        """
        Initialize the exception

        Args:
            message: Human-readable error message
            error_code: Structured error code for programmatic handling
            details: Optional dictionary with additional error details
            original_exception: Original exception that caused this error (if any)
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.original_exception = original_exception
        self.timestamp = time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime())

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert exception to dictionary format for API responses

        Returns:
            Dictionary representation of the error
        """
        error_dict = {
            "error": {
                "code": self.error_code.value,
                "message": self.message,
                "timestamp": self.timestamp
            }
        }

        if self.details:
            error_dict["error"]["details"] = self.details

        return error_dict

    def __str__(self) -> str:
        """String representation of the exception"""
        return f"{self.error_code.value}: {self.message}"


class StorageError(DocAIException):
    """Raised when the remote object store rejects or fails a write or delete"""

    def __init__(
        self,
        message: str,
        bucket: Optional[str] = None,
        key: Optional[str] = None,
        original_exception: Optional[Exception] = None
    ):
        details = {}
        if bucket:
            details["bucket"] = bucket
        if key:
            details["key"] = key

        super().__init__(
            message=message,
            error_code=ErrorCode.STORAGE_FAILED,
            details=details,
            original_exception=original_exception
        )


class FetchError(DocAIException):
    """Raised when a stored document cannot be retrieved from its address"""

    def __init__(
        self,
        message: str,
        address: Optional[str] = None,
        status_code: Optional[int] = None,
        original_exception: Optional[Exception] = None
    ):
        details = {}
        if address:
            details["address"] = address
        if status_code is not None:
            details["status_code"] = status_code

        super().__init__(
            message=message,
            error_code=ErrorCode.FETCH_FAILED,
            details=details,
            original_exception=original_exception
        )


class GenerativeServiceError(DocAIException):
    """Base for failures of the generative AI service"""

    def __init__(
        self,
        message: str,
        model_name: Optional[str] = None,
        processing_stage: Optional[str] = None,
        error_code: ErrorCode = ErrorCode.GENAI_API_ERROR,
        original_exception: Optional[Exception] = None
    ):
        details = {}
        if model_name:
            details["model_name"] = model_name
        if processing_stage:
            details["processing_stage"] = processing_stage

        super().__init__(
            message=message,
            error_code=error_code,
            details=details,
            original_exception=original_exception
        )


class ExtractionError(GenerativeServiceError):
    """Raised when the document-understanding call fails"""

    def __init__(
        self,
        message: str,
        model_name: Optional[str] = None,
        address: Optional[str] = None,
        error_code: ErrorCode = ErrorCode.EXTRACTION_FAILED,
        original_exception: Optional[Exception] = None
    ):
        super().__init__(
            message=message,
            model_name=model_name,
            processing_stage="content_extraction",
            error_code=error_code,
            original_exception=original_exception
        )

        if address:
            self.details["address"] = address


class AnswerError(GenerativeServiceError):
    """Raised when the question-answering call fails"""

    def __init__(
        self,
        message: str,
        model_name: Optional[str] = None,
        question: Optional[str] = None,
        error_code: ErrorCode = ErrorCode.ANSWER_FAILED,
        original_exception: Optional[Exception] = None
    ):
        super().__init__(
            message=message,
            model_name=model_name,
            processing_stage="question_answering",
            error_code=error_code,
            original_exception=original_exception
        )

        if question:
            # Truncate question for security/privacy
            self.details["question"] = question[:100] + "..." if len(question) > 100 else question


class NotFoundError(DocAIException):
    """Raised when a chat session id is unknown"""

    def __init__(self, message: str, session_id: Optional[str] = None):
        details = {}
        if session_id:
            details["session_id"] = session_id

        super().__init__(
            message=message,
            error_code=ErrorCode.SESSION_NOT_FOUND,
            details=details
        )


class ServiceUnavailableError(DocAIException):
    """Exception for service unavailability"""

    def __init__(
        self,
        message: str,
        service_name: Optional[str] = None,
        original_exception: Optional[Exception] = None
    ):
        details = {}
        if service_name:
            details["service_name"] = service_name

        super().__init__(
            message=message,
            error_code=ErrorCode.SERVICE_UNAVAILABLE,
            details=details,
            original_exception=original_exception
        )


class ValidationError(DocAIException):
    """Exception for input validation errors"""

    def __init__(
        self,
        message: str,
        field_name: Optional[str] = None,
        field_value: Optional[Any] = None,
        validation_rule: Optional[str] = None,
        error_code: ErrorCode = ErrorCode.VALIDATION_ERROR,
        original_exception: Optional[Exception] = None
    ):
        details = {}
        if field_name:
            details["field_name"] = field_name
        if field_value is not None:
            # Convert to string and truncate for safety
            value_str = str(field_value)
            details["field_value"] = value_str[:100] + "..." if len(value_str) > 100 else value_str
        if validation_rule:
            details["validation_rule"] = validation_rule

        super().__init__(
            message=message,
            error_code=error_code,
            details=details,
            original_exception=original_exception
        )


# Convenience functions for creating common exceptions

def create_file_too_large_error(filename: str, file_size: int, max_size: int) -> ValidationError:
    """Create a file too large error"""
    return ValidationError(
        message=f"File '{filename}' exceeds maximum size limit of {max_size} bytes",
        field_name="document",
        field_value=file_size,
        validation_rule="max_size",
        error_code=ErrorCode.FILE_TOO_LARGE
    )


def create_invalid_file_type_error(filename: str, reason: str) -> ValidationError:
    """Create an invalid file type error"""
    return ValidationError(
        message=f"File '{filename}' is not a readable PDF: {reason}",
        field_name="document",
        field_value=filename,
        validation_rule="pdf",
        error_code=ErrorCode.INVALID_FILE_TYPE
    )


def create_session_not_found_error(session_id: str) -> NotFoundError:
    """Create a session not found error"""
    return NotFoundError(
        message=f"Chat session '{session_id}' does not exist",
        session_id=session_id
    )


def create_genai_unavailable_error(service_name: str = "Gemini") -> ServiceUnavailableError:
    """Create a generative AI service unavailable error"""
    return ServiceUnavailableError(
        message=f"{service_name} service is not configured. Please check your API key configuration.",
        service_name=service_name
    )
