"""
Chat controller for the DocAI document chat REST API

``POST /api/chat`` keeps the single-endpoint contract of the browser client:
the ``action`` field selects the operation and every failure collapses into
one generic response.
"""
import json
import logging
import uuid

from fastapi import APIRouter, Request, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError

from config import settings
from models.api import (
    AskQuestionRequest, AskQuestionResponse, ChatFailureResponse,
    ProcessDocumentRequest, ProcessDocumentResponse, chat_request_adapter
)
from services.chat_service import ChatService
from services.pdf_processor import PDFProcessor
from utils.error_handlers import create_generic_failure_response
from utils.exceptions import DocAIException

logger = logging.getLogger(__name__)

# Create router for chat endpoints
router = APIRouter(prefix="/api", tags=["chat"])

# Import dependencies
from api.dependencies import get_chat_service


def _decode_and_start_session(payload: ProcessDocumentRequest, chat_service: ChatService):
    data = PDFProcessor.decode_base64(payload.document_base64)
    return chat_service.start_session(data, payload.document_name)


async def _process_document(payload: ProcessDocumentRequest, chat_service: ChatService) -> ProcessDocumentResponse:
    # Payloads can be tens of megabytes; decoding stays off the event loop
    session = await run_in_threadpool(_decode_and_start_session, payload, chat_service)

    return ProcessDocumentResponse(
        extracted_info=session.extraction.text,
        document_url=session.document.address,
        session_id=session.id
    )


async def _ask_question(payload: AskQuestionRequest, chat_service: ChatService) -> AskQuestionResponse:
    reply = await run_in_threadpool(chat_service.answer_question, payload.extracted_info, payload.question)
    return AskQuestionResponse(response=reply.text)


@router.post(
    "/chat",
    response_model=ProcessDocumentResponse | AskQuestionResponse,
    status_code=status.HTTP_200_OK,
    responses={500: {"model": ChatFailureResponse}},
    summary="Process a document or ask a question",
    description="Dispatches on the 'action' field: 'process-document' or 'ask-question'"
)
async def chat(request: Request):
    """
    Handle a chat action.

    Args:
        request: Raw request; the body is parsed here so malformed JSON also
            gets the generic failure response

    Returns:
        ProcessDocumentResponse or AskQuestionResponse
    """
    request_id = getattr(request.state, "request_id", None) or uuid.uuid4().hex

    try:
        chat_service = get_chat_service(request)
        body = await request.json()
        payload = chat_request_adapter.validate_python(body)

        logger.info(f"Chat action: {payload.action}", extra={"request_id": request_id})

        if isinstance(payload, ProcessDocumentRequest):
            result = await _process_document(payload, chat_service)
        else:
            result = await _ask_question(payload, chat_service)

        return JSONResponse(content=result.model_dump(by_alias=True))

    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        logger.error(f"Chat request body is not JSON: {e}", extra={"request_id": request_id})
    except PydanticValidationError as e:
        logger.error(f"Invalid chat request: {e.errors()}", extra={"request_id": request_id})
    except DocAIException as e:
        logger.error(
            f"Chat request failed: {e}",
            extra={"request_id": request_id, "error_code": e.error_code.value}
        )
    except Exception as e:
        logger.exception(f"Unexpected error in chat request: {e}", extra={"request_id": request_id})

    return create_generic_failure_response(request_id, settings.chat_failure_status_code)
