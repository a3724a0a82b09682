"""Drafting pipeline: validate → extract → gate → draft → review.

Each stage consumes the previous stage's output, so stages run strictly in
sequence. Reviewer failure degrades quality, not availability: the first
draft is returned instead.
"""

import logging
from collections.abc import AsyncIterator
from datetime import datetime, timezone
from typing import Optional

from regulon.chains.extract_notice_intelligence import extract_notice_intelligence
from regulon.chains.generate_draft import generate_first_draft, review_draft, stream_first_draft
from regulon.core.config import Settings
from regulon.core.llm_gateway import LLMGateway
from regulon.core.logging import get_logger, log_with_context
from regulon.core.notice_validation import (
    enforce_critical_fields,
    run_readiness_checks,
    validate_draft_request,
)
from regulon.core.schemas_drafting import (
    ADVANCED_VERSION,
    BASIC_VERSION,
    DraftMetadata,
    DraftRequest,
    DraftResponse,
    NoticeIntelligence,
)

logger = get_logger(__name__)


class DraftPipeline:
    """Runs one drafting request against the gateway."""

    def __init__(
        self,
        gateway: LLMGateway,
        min_notice_chars: int = 200,
        enforce_critical_fields_gate: bool = True,
    ):
        self.gateway = gateway
        self.min_notice_chars = min_notice_chars
        self.enforce_critical_fields_gate = enforce_critical_fields_gate

    @classmethod
    def from_settings(cls, gateway: LLMGateway, settings: Settings) -> "DraftPipeline":
        return cls(
            gateway,
            min_notice_chars=settings.STRICT_NOTICE_MIN_CHARS,
            enforce_critical_fields_gate=settings.ENFORCE_CRITICAL_FIELDS_GATE,
        )

    def validate(self, request: DraftRequest) -> None:
        validate_draft_request(request, self.min_notice_chars)
        if request.notice_text:
            failed = [
                c.label for c in run_readiness_checks(request.doc_type, request.notice_text) if not c.passed
            ]
            if failed:
                logger.debug(f"Notice readiness gaps for {request.doc_type.value}: {failed}")

    async def stream(self, request: DraftRequest) -> AsyncIterator[bytes]:
        """Validate and open a streamed basic draft."""
        if request.advanced_mode:
            raise ValueError("Advanced drafting is always buffered")
        self.validate(request)
        log_with_context(
            logger,
            logging.INFO,
            "Streaming basic draft",
            document_type=request.doc_type.value,
            draft_mode=request.mode.value,
        )
        return await stream_first_draft(self.gateway, request)

    async def run(self, request: DraftRequest) -> DraftResponse:
        """Produce a buffered draft with its metadata envelope."""
        self.validate(request)
        log_with_context(
            logger,
            logging.INFO,
            "Generating draft",
            document_type=request.doc_type.value,
            company=request.company_name,
            draft_mode=request.mode.value,
            advanced=request.advanced_mode,
        )

        if not request.advanced_mode:
            draft = await generate_first_draft(self.gateway, request)
            return self._response(request, draft, BASIC_VERSION, reviewed=False)

        intelligence: Optional[NoticeIntelligence] = None
        if request.notice_text:
            intelligence = await extract_notice_intelligence(
                self.gateway, request.notice_text, request.doc_type
            )
            enforce_critical_fields(
                intelligence,
                strict=request.strict_validation and self.enforce_critical_fields_gate,
            )

        first_draft = await generate_first_draft(self.gateway, request, intelligence)
        final_draft, reviewed = await self._review(first_draft, request)
        return self._response(
            request, final_draft, ADVANCED_VERSION, reviewed=reviewed, intelligence=intelligence
        )

    async def _review(self, first_draft: str, request: DraftRequest) -> tuple[str, bool]:
        try:
            reviewed = await review_draft(self.gateway, first_draft)
        except Exception as e:
            log_with_context(
                logger,
                logging.WARNING,
                f"Reviewer pass failed, returning first draft: {e}",
                document_type=request.doc_type.value,
                stage="review",
            )
            return first_draft, False

        if not reviewed.strip():
            logger.warning("Reviewer pass returned empty output, keeping first draft")
            return first_draft, False
        return reviewed, True

    def _response(
        self,
        request: DraftRequest,
        draft: str,
        version: str,
        reviewed: bool,
        intelligence: Optional[NoticeIntelligence] = None,
    ) -> DraftResponse:
        metadata = DraftMetadata(
            document_type=request.document_type,
            company_name=request.company_name,
            draft_mode=request.mode,
            industry=request.industry,
            advanced_mode=request.advanced_mode,
            generated_at=datetime.now(timezone.utc),
            version=version,
            reviewed=reviewed,
        )
        return DraftResponse(draft=draft, metadata=metadata, intelligence=intelligence)
