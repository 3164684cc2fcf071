"""
API request and response models for the DocAI document chat service
"""
from datetime import datetime
from typing import Annotated, Literal, Union
from pydantic import BaseModel, Field, field_validator, ConfigDict, TypeAdapter

from models.chat import ChatSession, Message, SessionStatus
from models.document import Document


class ProcessDocumentRequest(BaseModel):
    """Chat action that stores a base64-encoded PDF and extracts its content"""
    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "action": "process-document",
                "documentBase64": "JVBERi0xLjQK...",
                "documentName": "invoice.pdf"
            }
        }
    )

    action: Literal["process-document"]
    document_base64: str = Field(..., alias="documentBase64", min_length=1, description="Base64-encoded PDF bytes")
    document_name: str = Field(..., alias="documentName", min_length=1, max_length=255, description="Display name of the document")


class AskQuestionRequest(BaseModel):
    """Chat action that answers a question against caller-supplied extraction text"""
    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "action": "ask-question",
                "extractedInfo": "Invoice Total: $42",
                "question": "What is the total?"
            }
        }
    )

    action: Literal["ask-question"]
    extracted_info: str = Field("", alias="extractedInfo", description="Text previously returned by process-document")
    question: str = Field(..., min_length=1, max_length=4000, description="The question to answer")

    @field_validator('question')
    @classmethod
    def validate_question(cls, v):
        """Validate question is not blank"""
        stripped = v.strip()
        if not stripped:
            raise ValueError('Question cannot be empty or only whitespace')
        return stripped


ChatRequest = Annotated[Union[ProcessDocumentRequest, AskQuestionRequest], Field(discriminator="action")]

chat_request_adapter = TypeAdapter(ChatRequest)


class ProcessDocumentResponse(BaseModel):
    """Response for the process-document action"""
    model_config = ConfigDict(populate_by_name=True)

    extracted_info: str = Field(..., alias="extractedInfo", description="Everything extracted from the document")
    document_url: str = Field(..., alias="documentUrl", description="Address of the stored document")
    session_id: str = Field(..., alias="sessionId", description="Chat session created for the document")


class AskQuestionResponse(BaseModel):
    """Response for the ask-question action"""
    response: str = Field(..., description="The answer text")


class SessionQuestionRequest(BaseModel):
    """Question posted into an existing chat session"""
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "question": "What is the total?"
            }
        }
    )

    question: str = Field(..., min_length=1, max_length=4000, description="The question to answer")

    @field_validator('question')
    @classmethod
    def validate_question(cls, v):
        """Validate question is not blank"""
        stripped = v.strip()
        if not stripped:
            raise ValueError('Question cannot be empty or only whitespace')
        return stripped


class MessageExchangeResponse(BaseModel):
    """The pair of messages appended by one question"""
    session_id: str = Field(..., description="Session the messages were appended to")
    user_message: Message = Field(..., description="The question as recorded")
    assistant_message: Message = Field(..., description="The answer as recorded")
    canned: bool = Field(..., description="True when a canned response answered without the model")


class SessionSummary(BaseModel):
    """Sidebar entry for a chat session"""
    id: str
    document_name: str
    document_url: str
    status: SessionStatus
    created_at: datetime
    message_count: int = Field(..., ge=0)

    @classmethod
    def from_session(cls, session: ChatSession) -> "SessionSummary":
        return cls(
            id=session.id,
            document_name=session.document.name,
            document_url=session.document.address,
            status=session.status,
            created_at=session.created_at,
            message_count=session.message_count
        )


class SessionResponse(BaseModel):
    """Full view of a chat session"""
    id: str
    status: SessionStatus
    created_at: datetime
    document: Document
    extracted_info: str
    messages: list[Message]

    @classmethod
    def from_session(cls, session: ChatSession) -> "SessionResponse":
        return cls(
            id=session.id,
            status=session.status,
            created_at=session.created_at,
            document=session.document,
            extracted_info=session.extraction.text,
            messages=list(session.messages)
        )


class ErrorResponse(BaseModel):
    """Standard error response model"""
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "error": {
                    "code": "SESSION_NOT_FOUND",
                    "message": "Chat session '5f0c6a1e' does not exist",
                    "details": {
                        "session_id": "5f0c6a1e"
                    },
                    "timestamp": "2024-01-15T10:30:00Z"
                }
            }
        }
    )

    error: dict = Field(..., description="Error details")


class ChatFailureResponse(BaseModel):
    """Undifferentiated failure returned by the chat endpoint"""
    error: str = Field(..., description="Always 'Failed to process request'")
    request_id: str = Field(..., alias="requestId", description="Identifier of the failed request in the server logs")
