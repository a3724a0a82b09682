"""LLM chains for the first draft and the reviewer pass."""

from collections.abc import AsyncIterator
from typing import Optional

from regulon.chains.drafting_prompts import (
    REVIEWER_SYSTEM_PROMPT,
    build_draft_system_prompt,
    build_draft_user_message,
)
from regulon.core.llm_gateway import LLMGateway, Message
from regulon.core.schemas_drafting import DraftRequest, NoticeIntelligence


def build_draft_messages(
    request: DraftRequest,
    intelligence: Optional[NoticeIntelligence] = None,
) -> list[Message]:
    """System prompt plus user instruction for a drafting call."""
    system_prompt = build_draft_system_prompt(
        document_type=request.doc_type,
        mode=request.mode,
        company_name=request.company_name,
        industry=request.industry,
        notice_details=request.notice_text or None,
        intelligence=intelligence,
    )
    user_message = build_draft_user_message(request.doc_type, request.company_name, request.context)
    return [
        {"role": "system", "content": system_prompt},
        {"role": "user", "content": user_message},
    ]


async def generate_first_draft(
    gateway: LLMGateway,
    request: DraftRequest,
    intelligence: Optional[NoticeIntelligence] = None,
) -> str:
    """Single buffered drafting call."""
    return await gateway.complete(build_draft_messages(request, intelligence), purpose="draft")


async def stream_first_draft(gateway: LLMGateway, request: DraftRequest) -> AsyncIterator[bytes]:
    """Streaming drafting call; basic path only."""
    return await gateway.open_stream(build_draft_messages(request), purpose="draft_stream")


async def review_draft(gateway: LLMGateway, draft: str) -> str:
    """Reviewer pass. The first draft is the only input."""
    return await gateway.complete(
        [
            {"role": "system", "content": REVIEWER_SYSTEM_PROMPT},
            {"role": "user", "content": draft},
        ],
        purpose="review",
    )
