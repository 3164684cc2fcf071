"""
Chat session management for the DocAI document chat service
"""
import logging
from typing import Any, Dict, List, Optional

from models.chat import ChatSession, Message, MessageRole
from models.document import Document, ExtractionResult
from services.session_store import SessionStoreInterface, create_session_store
from utils.exceptions import create_session_not_found_error

logger = logging.getLogger(__name__)


WELCOME_MESSAGE = (
    "Hello! I'm DocAI. I've analyzed your document and ready to answer questions. "
    "Ask me anything!"
)


class ChatSessionManager:
    """
    Owns the collection of chat sessions.

    Constructed once at application start with an injected store and shared by
    every request handler.
    """

    def __init__(self, store: Optional[SessionStoreInterface] = None):
        self.store = store or create_session_store("memory")

    def create_session(self, document: Document, extraction: ExtractionResult) -> ChatSession:
        """
        Create a session for a processed document

        Args:
            document: The stored document
            extraction: Extraction computed for the document

        Returns:
            The new session, already holding the welcome message
        """
        session = ChatSession(
            document=document,
            extraction=extraction,
            messages=[Message(role=MessageRole.ASSISTANT, content=WELCOME_MESSAGE)]
        )
        self.store.add(session)

        logger.info(f"Created chat session {session.id} for document {document.name}")
        return session

    def _append(self, session_id: str, role: MessageRole, text: str) -> Message:
        message = Message(role=role, content=text)
        if self.store.append_message(session_id, message) is None:
            raise create_session_not_found_error(session_id)
        return message

    def append_user_message(self, session_id: str, text: str) -> Message:
        """Append a user message; raises NotFoundError for unknown sessions"""
        return self._append(session_id, MessageRole.USER, text)

    def append_assistant_message(self, session_id: str, text: str) -> Message:
        """Append an assistant message; raises NotFoundError for unknown sessions"""
        return self._append(session_id, MessageRole.ASSISTANT, text)

    def get_session(self, session_id: str) -> ChatSession:
        session = self.store.get(session_id)
        if session is None:
            raise create_session_not_found_error(session_id)
        return session

    def list_sessions(self) -> List[ChatSession]:
        """All sessions, newest first"""
        return self.store.list()

    def get_stats(self) -> Dict[str, Any]:
        return self.store.get_stats()
