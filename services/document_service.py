"""
Document processing service for the DocAI document chat service

This service orchestrates the document pipeline:
1. PDF validation
2. Remote storage
3. Content extraction

A document that was stored but could not be extracted is deleted again so
failed uploads do not leave orphaned objects behind.
"""
import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

from config import settings
from models.document import Document, ExtractionResult
from services.extraction_service import ContentExtractionService
from services.object_store import ObjectStoreInterface, create_object_store
from services.pdf_processor import PDFProcessor
from utils.exceptions import DocAIException, StorageError
from utils.error_handlers import log_processing_step, log_performance_metric

logger = logging.getLogger(__name__)


@dataclass
class ProcessedDocument:
    """A stored document together with its extraction"""
    document: Document
    extraction: ExtractionResult
    processing_time_ms: int


class DocumentService:
    """
    Service for running an upload through validation, storage and extraction.

    The pipeline is all-or-nothing: any failure aborts the whole operation.
    """

    def __init__(
        self,
        object_store: Optional[ObjectStoreInterface] = None,
        extraction_service: Optional[ContentExtractionService] = None,
        pdf_processor: Optional[PDFProcessor] = None,
        cleanup_orphaned_documents: Optional[bool] = None
    ):
        """
        Initialize the document service with all required components.

        Args:
            object_store: Remote object store for uploaded documents
            extraction_service: Content extraction service
            pdf_processor: PDF validation service
            cleanup_orphaned_documents: Delete stored objects whose extraction failed
        """
        self.object_store = object_store or create_object_store("s3")
        self.extraction_service = extraction_service or ContentExtractionService()
        self.pdf_processor = pdf_processor or PDFProcessor()
        self.cleanup_orphaned_documents = (
            settings.cleanup_orphaned_documents if cleanup_orphaned_documents is None
            else cleanup_orphaned_documents
        )

        self.documents_processed = 0
        self.documents_failed = 0
        self.orphans_deleted = 0

        logger.info(f"DocumentService initialized (cleanup_orphaned_documents={self.cleanup_orphaned_documents})")

    def process_document(self, data: bytes, name: str) -> ProcessedDocument:
        """
        Validate, store and extract a single PDF.

        Args:
            data: Raw document bytes
            name: Display name of the document

        Returns:
            ProcessedDocument with the stored document and its extraction

        Raises:
            ValidationError: If the upload is not a readable PDF
            StorageError: If the document cannot be stored
            FetchError: If the stored document cannot be fetched back
            ExtractionError: If content extraction fails
        """
        start_time = time.time()

        try:
            log_processing_step("validate_document", {"name": name, "bytes": len(data)})
            page_count = self.pdf_processor.validate_pdf(data, name)

            log_processing_step("store_document", {"name": name})
            stored = self.object_store.put(data, name)
        except DocAIException:
            self.documents_failed += 1
            raise

        try:
            log_processing_step("extract_document", {"address": stored.address})
            extraction = self.extraction_service.extract_result(stored.address)
        except Exception as e:
            self.documents_failed += 1
            logger.error(f"Processing failed for {name} after storage: {e}")
            self._delete_orphan(stored.key)
            raise

        document = Document(
            name=name,
            address=stored.address,
            storage_key=stored.key,
            size_bytes=stored.size_bytes,
            page_count=page_count
        )

        processing_time_ms = int((time.time() - start_time) * 1000)
        log_performance_metric("process_document", processing_time_ms, {"name": name, "pages": page_count})
        self.documents_processed += 1

        return ProcessedDocument(
            document=document,
            extraction=extraction,
            processing_time_ms=processing_time_ms
        )

    def _delete_orphan(self, key: str) -> None:
        """Remove a stored object whose processing failed"""
        if not self.cleanup_orphaned_documents:
            logger.warning(f"Leaving orphaned object {key} in place (cleanup disabled)")
            return

        try:
            self.object_store.delete(key)
            self.orphans_deleted += 1
        except StorageError as e:
            logger.error(f"Failed to delete orphaned object {key}: {e}")

    def get_service_stats(self) -> Dict[str, Any]:
        """
        Get statistics about the document service.

        Returns:
            Dictionary containing service statistics
        """
        return {
            "documents_processed": self.documents_processed,
            "documents_failed": self.documents_failed,
            "orphans_deleted": self.orphans_deleted,
            "cleanup_orphaned_documents": self.cleanup_orphaned_documents,
            "object_store": self.object_store.get_stats()
        }
