"""
Dependency injection for the DocAI document chat API

Services are built once in the application lifespan and kept on
``app.state.services``; request handlers receive them through the
dependencies below.
"""
import logging
from dataclasses import dataclass
from typing import Annotated, Optional

from fastapi import Depends, Request

from services.answer_service import QuestionAnsweringService
from services.canned_responses import CannedResponder
from services.chat_service import ChatService
from services.document_service import DocumentService
from services.extraction_service import ContentExtractionService
from services.gemini_client import GeminiClient
from services.object_store import ObjectStoreInterface, create_object_store
from services.pdf_processor import PDFProcessor
from services.session_manager import ChatSessionManager
from services.session_store import SessionStoreInterface, create_session_store
from utils.exceptions import ServiceUnavailableError
from config import Settings, settings as default_settings

logger = logging.getLogger(__name__)


@dataclass
class AppServices:
    """Everything request handlers need, built once per application"""
    object_store: ObjectStoreInterface
    gemini_client: GeminiClient
    session_store: SessionStoreInterface
    session_manager: ChatSessionManager
    document_service: DocumentService
    chat_service: ChatService


def build_services(settings: Optional[Settings] = None) -> AppServices:
    """
    Wire the service graph from configuration

    Args:
        settings: Configuration to build from (defaults to the loaded settings)

    Returns:
        AppServices holding the shared instances
    """
    settings = settings or default_settings

    object_store = create_object_store(
        "s3",
        bucket=settings.s3_bucket,
        region=settings.s3_region,
        key_prefix=settings.s3_key_prefix,
        endpoint_url=settings.s3_endpoint_url,
        public_base_url=settings.s3_public_base_url,
        public_read=settings.s3_public_read
    )
    gemini_client = GeminiClient(
        api_key=settings.gemini_api_key,
        model=settings.gemini_model,
        base_url=settings.gemini_base_url,
        timeout=settings.request_timeout_seconds
    )

    document_service = DocumentService(
        object_store=object_store,
        extraction_service=ContentExtractionService(
            gemini_client=gemini_client,
            scratch_directory=settings.scratch_directory,
            fetch_timeout=settings.request_timeout_seconds,
            delete_remote_files=settings.gemini_delete_remote_files
        ),
        pdf_processor=PDFProcessor(max_file_size_mb=settings.max_file_size_mb),
        cleanup_orphaned_documents=settings.cleanup_orphaned_documents
    )

    session_store = create_session_store("memory")
    session_manager = ChatSessionManager(store=session_store)

    chat_service = ChatService(
        document_service=document_service,
        answer_service=QuestionAnsweringService(gemini_client=gemini_client),
        session_manager=session_manager,
        canned_responder=CannedResponder(whole_word=settings.canned_responses_whole_word)
    )

    logger.info("Application services built")

    return AppServices(
        object_store=object_store,
        gemini_client=gemini_client,
        session_store=session_store,
        session_manager=session_manager,
        document_service=document_service,
        chat_service=chat_service
    )


def get_services(request: Request) -> AppServices:
    services = getattr(request.app.state, "services", None)
    if services is None:
        raise ServiceUnavailableError(
            message="Application services are not initialized",
            service_name="application"
        )
    return services


def get_chat_service(request: Request) -> ChatService:
    """Get the shared chat service"""
    return get_services(request).chat_service


def get_session_manager(request: Request) -> ChatSessionManager:
    """Get the shared session manager"""
    return get_services(request).session_manager


# Type annotations for dependency injection
ChatServiceDep = Annotated[ChatService, Depends(get_chat_service)]
SessionManagerDep = Annotated[ChatSessionManager, Depends(get_session_manager)]
