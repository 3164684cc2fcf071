"""
Chat session and message models for the DocAI document chat service
"""
from datetime import datetime, timezone
from enum import Enum
from pydantic import BaseModel, Field, ConfigDict
import uuid

from models.document import Document, ExtractionResult


class MessageRole(str, Enum):
    """Author of a chat message"""
    USER = "user"
    ASSISTANT = "assistant"


class SessionStatus(str, Enum):
    """Lifecycle of a chat session"""
    CREATED = "created"
    ACTIVE = "active"


class Message(BaseModel):
    """A single entry in a session's conversation log"""
    model_config = ConfigDict(frozen=True)

    role: MessageRole = Field(..., description="Who wrote the message")
    content: str = Field(..., description="Free-text message content")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), description="When the message was created")


class ChatSession(BaseModel):
    """One processed document paired with its question/answer log"""
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "5f0c6a1e2b7d4c43a1a4f1b2c3d4e5f6",
                "status": "active",
                "created_at": "2024-01-15T10:30:00Z",
                "document": {"name": "invoice.pdf"},
                "extraction": {"text": "Invoice Total: $42", "model_used": "gemini-1.5-flash"},
                "messages": [
                    {"role": "assistant", "content": "Hello! I'm DocAI.", "timestamp": "2024-01-15T10:30:00Z"}
                ]
            }
        }
    )

    id: str = Field(default_factory=lambda: uuid.uuid4().hex, description="Generated session identifier")
    document: Document = Field(..., description="The document this session is bound to")
    extraction: ExtractionResult = Field(..., description="Extraction computed before the session was created")
    messages: list[Message] = Field(default_factory=list, description="Conversation log in insertion order")
    status: SessionStatus = Field(default=SessionStatus.CREATED, description="Session lifecycle state")
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), description="When the session was created")

    @property
    def message_count(self) -> int:
        return len(self.messages)
