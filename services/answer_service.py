"""
Question answering over previously extracted document text
"""
import logging
import time
from dataclasses import dataclass
from typing import Optional

from services.gemini_client import GeminiClient, text_part
from utils.exceptions import (
    AnswerError, ErrorCode, GenerativeServiceError, ServiceUnavailableError, ValidationError
)
from utils.error_handlers import log_performance_metric

logger = logging.getLogger(__name__)


NOT_FOUND_SENTINEL = "This information is not available in the document."

PASSTHROUGH_ERROR_CODES = {ErrorCode.GENAI_TIMEOUT, ErrorCode.GENAI_RATE_LIMIT, ErrorCode.SERVICE_UNAVAILABLE}


class PromptTemplate:
    """Template for question-answering prompts"""

    QUESTION_TEMPLATE = "Using this extracted information: {extracted_info}\n\nAnswer this question: {question}"

    FALLBACK_INSTRUCTION = f"If the answer isn't found, respond: '{NOT_FOUND_SENTINEL}'"

    @classmethod
    def create_question_prompt(cls, extracted_info: str, question: str) -> str:
        return cls.QUESTION_TEMPLATE.format(extracted_info=extracted_info, question=question)


@dataclass
class AnswerResult:
    """Answer produced for one question"""
    answer: str
    model_used: str
    tokens_used: int
    processing_time_ms: int
    found: bool


def normalize_answer(text: str) -> str:
    """
    Collapse any rendering of the not-found sentinel to the exact phrase.

    Models sometimes wrap the sentinel in quotes, change its case or drop the
    final period; an empty reply also means nothing was found.
    """
    stripped = text.strip()
    if not stripped:
        return NOT_FOUND_SENTINEL

    unquoted = stripped.strip("'\"`*").strip()
    if unquoted.rstrip(".").lower() == NOT_FOUND_SENTINEL.rstrip(".").lower():
        return NOT_FOUND_SENTINEL

    return stripped


class QuestionAnsweringService:
    """Answers one question at a time against a single extraction text"""

    def __init__(self, gemini_client: Optional[GeminiClient] = None):
        self.gemini_client = gemini_client or GeminiClient()

    def answer(self, extracted_info: str, question: str) -> str:
        """Answer ``question`` using only ``extracted_info``"""
        return self.answer_result(extracted_info, question).answer

    def answer_result(self, extracted_info: str, question: str) -> AnswerResult:
        """
        Answer a question from extracted document text

        Args:
            extracted_info: Text previously produced by content extraction
            question: The user's question

        Returns:
            AnswerResult whose answer is exactly NOT_FOUND_SENTINEL when the
            text does not contain the answer

        Raises:
            ValidationError: If the question is empty
            AnswerError: If the generative AI call fails
        """
        if not question or not question.strip():
            raise ValidationError(
                message="Question cannot be empty",
                field_name="question",
                field_value=question
            )

        start_time = time.time()
        parts = [
            text_part(PromptTemplate.create_question_prompt(extracted_info, question)),
            text_part(PromptTemplate.FALLBACK_INSTRUCTION)
        ]

        try:
            result = self.gemini_client.generate_content(parts)
        except (GenerativeServiceError, ServiceUnavailableError) as e:
            raise AnswerError(
                message=f"Question answering failed: {e.message}",
                model_name=self.gemini_client.model,
                question=question,
                error_code=e.error_code if e.error_code in PASSTHROUGH_ERROR_CODES else ErrorCode.ANSWER_FAILED,
                original_exception=e
            )

        answer = normalize_answer(result.text)
        processing_time_ms = int((time.time() - start_time) * 1000)
        log_performance_metric("question_answering", processing_time_ms, {"model": result.model_used})

        return AnswerResult(
            answer=answer,
            model_used=result.model_used,
            tokens_used=result.tokens_used,
            processing_time_ms=processing_time_ms,
            found=answer != NOT_FOUND_SENTINEL
        )

    def is_available(self) -> bool:
        return self.gemini_client.is_available()
