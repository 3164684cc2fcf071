"""
Service layer for the DocAI document chat service
"""
from .object_store import ObjectStoreInterface, S3ObjectStore, StoredObject, create_object_store
from .gemini_client import GeminiClient, GeminiFile, GenerationResult
from .pdf_processor import PDFProcessor
from .extraction_service import ContentExtractionService, scratch_file
from .answer_service import QuestionAnsweringService, AnswerResult, PromptTemplate, NOT_FOUND_SENTINEL
from .canned_responses import CannedResponder, CannedResponseRule
from .session_store import SessionStoreInterface, InMemorySessionStore, create_session_store
from .session_manager import ChatSessionManager
from .document_service import DocumentService, ProcessedDocument
from .chat_service import ChatService, ChatReply, MessageExchange

__all__ = [
    'ObjectStoreInterface', 'S3ObjectStore', 'StoredObject', 'create_object_store',
    'GeminiClient', 'GeminiFile', 'GenerationResult',
    'PDFProcessor',
    'ContentExtractionService', 'scratch_file',
    'QuestionAnsweringService', 'AnswerResult', 'PromptTemplate', 'NOT_FOUND_SENTINEL',
    'CannedResponder', 'CannedResponseRule',
    'SessionStoreInterface', 'InMemorySessionStore', 'create_session_store',
    'ChatSessionManager',
    'DocumentService', 'ProcessedDocument',
    'ChatService', 'ChatReply', 'MessageExchange'
]
