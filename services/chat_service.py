"""
Chat orchestration: ties documents, sessions and answers together
"""
import logging
from dataclasses import dataclass
from typing import Optional

from config import settings
from models.chat import ChatSession, Message
from services.answer_service import QuestionAnsweringService
from services.canned_responses import CannedResponder
from services.document_service import DocumentService, ProcessedDocument
from services.session_manager import ChatSessionManager

logger = logging.getLogger(__name__)


ANSWER_FAILURE_MESSAGE = "Error processing request"


@dataclass
class ChatReply:
    """Answer text and whether a canned rule produced it"""
    text: str
    canned: bool


@dataclass
class MessageExchange:
    """Messages appended to a session by one question"""
    session_id: str
    user_message: Message
    assistant_message: Message
    canned: bool


class ChatService:
    """Service for the document chat flows"""

    def __init__(
        self,
        document_service: DocumentService,
        answer_service: QuestionAnsweringService,
        session_manager: ChatSessionManager,
        canned_responder: Optional[CannedResponder] = None
    ):
        self.document_service = document_service
        self.answer_service = answer_service
        self.session_manager = session_manager
        self.canned_responder = canned_responder or CannedResponder(
            whole_word=settings.canned_responses_whole_word
        )

    def answer_question(self, extracted_info: str, question: str) -> ChatReply:
        """
        Answer a question, letting canned rules short-circuit the model

        Args:
            extracted_info: Text the answer must come from
            question: The user's question

        Returns:
            ChatReply with the answer text
        """
        canned = self.canned_responder.match(question)
        if canned is not None:
            logger.info("Answered with canned response")
            return ChatReply(text=canned, canned=True)

        return ChatReply(text=self.answer_service.answer(extracted_info, question), canned=False)

    def process_document(self, data: bytes, name: str) -> ProcessedDocument:
        return self.document_service.process_document(data, name)

    def start_session(self, data: bytes, name: str) -> ChatSession:
        """
        Process a document and open a chat session for it.

        No session is created if any pipeline step fails.
        """
        processed = self.document_service.process_document(data, name)
        return self.session_manager.create_session(processed.document, processed.extraction)

    def ask_in_session(self, session_id: str, question: str) -> MessageExchange:
        """
        Ask a question inside a session and record both sides of the exchange

        Raises:
            NotFoundError: If the session does not exist
            AnswerError: If the model call fails

        Any failure after the question is recorded still appends the failure notice.
        """
        session = self.session_manager.get_session(session_id)
        user_message = self.session_manager.append_user_message(session_id, question)

        try:
            reply = self.answer_question(session.extraction.text, question)
        except Exception:
            self.session_manager.append_assistant_message(session_id, ANSWER_FAILURE_MESSAGE)
            raise

        assistant_message = self.session_manager.append_assistant_message(session_id, reply.text)

        return MessageExchange(
            session_id=session_id,
            user_message=user_message,
            assistant_message=assistant_message,
            canned=reply.canned
        )
