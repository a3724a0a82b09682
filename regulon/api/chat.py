"""Compliance chat API endpoint."""

from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import StreamingResponse
from pydantic import BaseModel

from regulon.chains.chat_prompts import build_chat_messages
from regulon.core.auth_middleware import AuthContext, check_origin, require_function_auth
from regulon.core.errors import RegulonError, ValidationRejected, to_http_exception
from regulon.core.llm_gateway import get_llm_gateway
from regulon.core.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(dependencies=[Depends(check_origin)])


class ChatMessage(BaseModel):
    """A single chat message."""

    role: Literal["user", "assistant"]
    content: str


class ChatRequest(BaseModel):
    """Conversation so far; the system prompt is always added server-side."""

    messages: Optional[List[ChatMessage]] = None


@router.post("/compliance-chat")
async def compliance_chat(
    request: ChatRequest,
    auth: Optional[AuthContext] = Depends(require_function_auth),
) -> StreamingResponse:
    """
    Stream a compliance answer.

    Upstream SSE chunks are forwarded verbatim, ending with ``data: [DONE]``.
    """
    if not request.messages:
        raise to_http_exception(ValidationRejected("messages must be a non-empty list"))

    logger.info(f"Compliance chat query received: {len(request.messages)} messages")

    history = [{"role": m.role, "content": m.content} for m in request.messages]

    try:
        chunks = await get_llm_gateway().open_stream(build_chat_messages(history), purpose="chat")
    except RegulonError as e:
        raise to_http_exception(e) from e
    except Exception as e:
        logger.exception(f"Compliance chat error: {e}")
        raise HTTPException(status_code=500, detail={"error": "Compliance chat failed"}) from e

    return StreamingResponse(chunks, media_type="text/event-stream")
