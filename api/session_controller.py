"""
Chat session controller for the DocAI document chat REST API
"""
import logging
from typing import List

from fastapi import APIRouter, File, UploadFile, status

from models.api import (
    ErrorResponse, MessageExchangeResponse, SessionQuestionRequest,
    SessionResponse, SessionSummary
)
from utils.exceptions import ValidationError

logger = logging.getLogger(__name__)

# Create router for session endpoints
router = APIRouter(prefix="/api/sessions", tags=["sessions"])

# Import dependencies
from api.dependencies import ChatServiceDep, SessionManagerDep


@router.post(
    "",
    response_model=SessionResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 413: {"model": ErrorResponse}, 502: {"model": ErrorResponse}},
    summary="Upload a PDF and start a chat session",
    description="Validates, stores and extracts the PDF, then opens a session holding the welcome message"
)
def create_session(
    chat_service: ChatServiceDep,
    file: UploadFile = File(..., description="PDF file to chat about")
) -> SessionResponse:
    """
    Start a chat session for an uploaded PDF.

    No session is created when any processing step fails.

    Raises:
        ValidationError: For empty, oversized or non-PDF uploads
        StorageError, FetchError, ExtractionError: When the pipeline fails
    """
    if not file.filename:
        raise ValidationError(message="Uploaded file has no name", field_name="file")

    data = file.file.read()
    logger.info(f"Starting session for upload {file.filename} ({len(data)} bytes)")

    session = chat_service.start_session(data, file.filename)
    return SessionResponse.from_session(session)


@router.get(
    "",
    response_model=List[SessionSummary],
    summary="List chat sessions",
    description="All sessions of this process, newest first"
)
def list_sessions(session_manager: SessionManagerDep) -> List[SessionSummary]:
    return [SessionSummary.from_session(session) for session in session_manager.list_sessions()]


@router.get(
    "/{session_id}",
    response_model=SessionResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Get a chat session"
)
def get_session(session_id: str, session_manager: SessionManagerDep) -> SessionResponse:
    """Return a session with its full message history"""
    return SessionResponse.from_session(session_manager.get_session(session_id))


@router.post(
    "/{session_id}/messages",
    response_model=MessageExchangeResponse,
    responses={404: {"model": ErrorResponse}, 502: {"model": ErrorResponse}},
    summary="Ask a question in a chat session",
    description="Appends the question and the answer to the session history"
)
def post_message(
    session_id: str,
    request: SessionQuestionRequest,
    chat_service: ChatServiceDep
) -> MessageExchangeResponse:
    """
    Ask a question about the session's document.

    Canned responses answer greetings and thanks without calling the model.
    """
    exchange = chat_service.ask_in_session(session_id, request.question)

    return MessageExchangeResponse(
        session_id=exchange.session_id,
        user_message=exchange.user_message,
        assistant_message=exchange.assistant_message,
        canned=exchange.canned
    )
