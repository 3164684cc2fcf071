"""
Data models for the DocAI document chat service
"""

from .document import Document, ExtractionResult
from .chat import ChatSession, Message, MessageRole, SessionStatus
from .api import (
    ProcessDocumentRequest,
    ProcessDocumentResponse,
    AskQuestionRequest,
    AskQuestionResponse,
    ChatRequest,
    chat_request_adapter,
    SessionQuestionRequest,
    MessageExchangeResponse,
    SessionSummary,
    SessionResponse,
    ErrorResponse,
    ChatFailureResponse
)

__all__ = [
    # Document models
    "Document",
    "ExtractionResult",

    # Chat models
    "ChatSession",
    "Message",
    "MessageRole",
    "SessionStatus",

    # API models
    "ProcessDocumentRequest",
    "ProcessDocumentResponse",
    "AskQuestionRequest",
    "AskQuestionResponse",
    "ChatRequest",
    "chat_request_adapter",
    "SessionQuestionRequest",
    "MessageExchangeResponse",
    "SessionSummary",
    "SessionResponse",
    "ErrorResponse",
    "ChatFailureResponse"
]
