"""FastAPI application entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from regulon.api import router as api_router
from regulon.core.auth_middleware import origin_allowed
from regulon.core.config import get_settings
from regulon.core.identity import build_session_context
from regulon.core.logging import get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    app.state.session_context = build_session_context(settings.IDENTITY_TIMEOUT_SECONDS)
    logger.info(f"Regulon started: env={settings.REGULON_ENV}")
    yield


app = FastAPI(
    title="Regulon",
    description="Multi-tenant compliance backend: identity routing, AI drafting and compliance chat",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().allowed_origins or ["*"],
    allow_methods=["GET", "POST", "PUT", "OPTIONS"],
    allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
)


# Registered after CORSMiddleware, so it wraps it: disallowed preflights get 403.
@app.middleware("http")
async def reject_disallowed_preflight(request: Request, call_next):
    if request.method == "OPTIONS" and not origin_allowed(request.headers.get("origin")):
        return JSONResponse(status_code=403, content={"detail": {"error": "Origin not allowed"}})
    return await call_next(request)


@app.get("/health")
async def health_check() -> JSONResponse:
    """Health check endpoint."""
    return JSONResponse(content={"status": "ok"}, status_code=200)


# Include v1 API router
app.include_router(api_router, prefix="/v1", tags=["v1"])
