"""
Document-related data models for the DocAI document chat service
"""
from datetime import datetime, timezone
from pydantic import BaseModel, Field, field_validator, ConfigDict
import uuid


class Document(BaseModel):
    """An uploaded PDF after it has been written to the object store"""
    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "id": "123e4567-e89b-12d3-a456-426614174000",
                "name": "invoice.pdf",
                "address": "https://docai-uploads.s3.amazonaws.com/documents/1705314600000-invoice.pdf",
                "storage_key": "documents/1705314600000-invoice.pdf",
                "size_bytes": 48213,
                "page_count": 1,
                "content_type": "application/pdf",
                "uploaded_at": "2024-01-15T10:30:00Z"
            }
        }
    )

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), description="Unique document identifier")
    name: str = Field(..., min_length=1, max_length=255, description="Display name of the uploaded document")
    address: str = Field(..., min_length=1, description="Publicly reachable address of the stored object")
    storage_key: str = Field(..., min_length=1, description="Key of the object in the store")
    size_bytes: int = Field(..., gt=0, description="Size of the document in bytes")
    page_count: int = Field(default=0, ge=0, description="Number of pages reported by the PDF parser")
    content_type: str = Field(default="application/pdf", description="MIME type the object was stored with")
    uploaded_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), description="When the document was stored")

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        """Validate display name is not blank"""
        stripped = v.strip()
        if not stripped:
            raise ValueError('Document name cannot be empty or only whitespace')
        return stripped


class ExtractionResult(BaseModel):
    """Everything the document-understanding service extracted from one document"""
    model_config = ConfigDict(frozen=True)

    text: str = Field(..., min_length=1, description="Unstructured extracted text")
    model_used: str = Field(..., description="Model that produced the extraction")
    extracted_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), description="When the extraction finished")
    processing_time_ms: int = Field(default=0, ge=0, description="Time spent extracting in milliseconds")
