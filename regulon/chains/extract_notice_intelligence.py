"""LLM chain for extracting structured intelligence from notice text."""

import json

from pydantic import ValidationError

from regulon.chains.drafting_prompts import (
    EXTRACTION_SYSTEM_PROMPT,
    build_extraction_user_message,
)
from regulon.core.errors import ExtractionRejected
from regulon.core.llm import parse_llm_json
from regulon.core.llm_gateway import LLMGateway
from regulon.core.logging import get_logger
from regulon.core.schemas_drafting import DocumentType, NoticeIntelligence

logger = get_logger(__name__)


async def extract_notice_intelligence(
    gateway: LLMGateway,
    notice_details: str,
    document_type: DocumentType,
) -> NoticeIntelligence:
    """
    Extract a NoticeIntelligence object from free-text notice content.

    Args:
        gateway: LLM gateway client
        notice_details: Raw notice/order text supplied by the caller
        document_type: Resolved document type, passed as a hint

    Returns:
        Validated NoticeIntelligence

    Raises:
        ExtractionRejected: If the model output is not valid JSON for the schema
        UpstreamError: Propagated unchanged from the gateway
    """
    raw_output = await gateway.complete(
        [
            {"role": "system", "content": EXTRACTION_SYSTEM_PROMPT},
            {"role": "user", "content": build_extraction_user_message(document_type, notice_details)},
        ],
        purpose="notice_extraction",
    )

    try:
        intelligence = parse_llm_json(raw_output, NoticeIntelligence)
    except (json.JSONDecodeError, ValidationError) as e:
        logger.warning(f"Notice extraction output unparseable: {e.__class__.__name__}")
        raise ExtractionRejected(
            "Could not extract structured notice data. "
            "Resubmit with clearer notice text (reference numbers, provisions, amounts, dates)."
        ) from e

    logger.info(
        f"Extracted notice intelligence: {len(intelligence.allegations)} allegations, "
        f"missing={intelligence.critical_missing_fields}"
    )
    return intelligence
