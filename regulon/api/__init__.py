"""API router for v1 endpoints."""

from fastapi import APIRouter

from regulon.api import chat, drafting, session, verification

router = APIRouter()

# Drafting: ai-draft and readiness precheck
router.include_router(drafting.router, tags=["drafting"])

# Compliance chat (SSE passthrough)
router.include_router(chat.router, tags=["chat"])

# Session: identity, landing and route guard
router.include_router(session.router)

# Verification submission
router.include_router(verification.router)
