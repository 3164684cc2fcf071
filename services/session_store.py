"""
Storage for chat sessions
"""
import logging
import threading
from abc import ABC, abstractmethod
from collections import OrderedDict
from typing import Any, Dict, List, Optional

from models.chat import ChatSession, Message, MessageRole, SessionStatus

logger = logging.getLogger(__name__)


class SessionStoreInterface(ABC):
    """Abstract interface for chat session storage"""

    @abstractmethod
    def add(self, session: ChatSession) -> None:
        """Add a newly created session"""
        pass

    @abstractmethod
    def get(self, session_id: str) -> Optional[ChatSession]:
        """Return a snapshot of a session, or None if it does not exist"""
        pass

    @abstractmethod
    def list(self) -> List[ChatSession]:
        """Return snapshots of all sessions, newest first"""
        pass

    @abstractmethod
    def append_message(self, session_id: str, message: Message) -> Optional[ChatSession]:
        """Append a message to a session; None if the session does not exist"""
        pass

    @abstractmethod
    def get_stats(self) -> Dict[str, Any]:
        """Get statistics about stored sessions"""
        pass


class InMemorySessionStore(SessionStoreInterface):
    """Process-local session storage; sessions live until the process exits"""

    def __init__(self):
        self._sessions: "OrderedDict[str, ChatSession]" = OrderedDict()
        self._lock = threading.Lock()

    def add(self, session: ChatSession) -> None:
        with self._lock:
            if session.id in self._sessions:
                raise ValueError(f"Session {session.id} already exists")
            self._sessions[session.id] = session.model_copy(deep=True)

    def get(self, session_id: str) -> Optional[ChatSession]:
        with self._lock:
            session = self._sessions.get(session_id)
            return session.model_copy(deep=True) if session else None

    def list(self) -> List[ChatSession]:
        with self._lock:
            return [session.model_copy(deep=True) for session in reversed(self._sessions.values())]

    def append_message(self, session_id: str, message: Message) -> Optional[ChatSession]:
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                return None

            session.messages.append(message)
            if message.role == MessageRole.USER and session.status == SessionStatus.CREATED:
                session.status = SessionStatus.ACTIVE

            return session.model_copy(deep=True)

    def get_stats(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "backend": "memory",
                "total_sessions": len(self._sessions),
                "active_sessions": sum(1 for s in self._sessions.values() if s.status == SessionStatus.ACTIVE),
                "total_messages": sum(len(s.messages) for s in self._sessions.values())
            }


# Factory function to create session store instances
def create_session_store(store_type: str = "memory", **kwargs) -> SessionStoreInterface:
    """
    Factory function to create session store instances

    Args:
        store_type: Type of session store ("memory")
        **kwargs: Additional arguments for the session store

    Returns:
        SessionStore instance
    """
    if store_type.lower() == "memory":
        return InMemorySessionStore(**kwargs)
    else:
        raise ValueError(f"Unsupported session store type: {store_type}")
