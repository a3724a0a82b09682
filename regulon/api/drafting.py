"""AI drafting API endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import StreamingResponse

from regulon.core.auth_middleware import AuthContext, check_origin, require_drafting_access
from regulon.core.config import get_settings
from regulon.core.draft_pipeline import DraftPipeline
from regulon.core.errors import RegulonError, to_http_exception
from regulon.core.llm_gateway import get_llm_gateway
from regulon.core.logging import get_logger
from regulon.core.notice_validation import run_readiness_checks
from regulon.core.schemas_drafting import (
    DocumentType,
    DraftRequest,
    DraftResponse,
    PrecheckRequest,
    PrecheckResponse,
)

logger = get_logger(__name__)

router = APIRouter(dependencies=[Depends(check_origin)])


@router.post("/ai-draft", response_model=DraftResponse, response_model_exclude_none=True)
async def generate_ai_draft(
    request: DraftRequest,
    auth: Optional[AuthContext] = Depends(require_drafting_access),
):
    """
    Generate a filing-ready regulatory draft.

    Basic requests with ``stream`` set are passed through as server-sent
    events. Advanced requests (extract → draft → review) are always buffered.
    """
    settings = get_settings()
    pipeline = DraftPipeline.from_settings(get_llm_gateway(settings), settings)

    logger.info(
        f"Draft requested: type={request.document_type}, mode={request.draft_mode}, "
        f"advanced={request.advanced_mode}, stream={request.stream}, "
        f"user={auth.user_id if auth else 'anonymous'}"
    )

    try:
        if request.stream and not request.advanced_mode:
            chunks = await pipeline.stream(request)
            return StreamingResponse(chunks, media_type="text/event-stream")
        return await pipeline.run(request)
    except RegulonError as e:
        raise to_http_exception(e) from e
    except Exception as e:
        logger.exception(f"AI draft error: {e}")
        raise HTTPException(status_code=500, detail={"error": "Failed to generate draft"}) from e


@router.post("/ai-draft/precheck", response_model=PrecheckResponse)
async def precheck_notice(
    request: PrecheckRequest,
    auth: Optional[AuthContext] = Depends(require_drafting_access),
) -> PrecheckResponse:
    """Report which notice facts are detectable before spending a model call."""
    settings = get_settings()
    document_type = DocumentType.resolve(request.document_type)
    text = request.notice_details.strip()
    checks = run_readiness_checks(document_type, text)
    return PrecheckResponse(
        document_type=document_type,
        notice_length=len(text),
        meets_strict_minimum=len(text) >= settings.STRICT_NOTICE_MIN_CHARS,
        checks=checks,
        missing=[check.label for check in checks if not check.passed],
    )
