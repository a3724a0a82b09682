"""Error taxonomy shared by the drafting and chat endpoints.

Each error carries the HTTP status the API layer should surface. Routers
translate them into ``HTTPException`` via :func:`to_http_exception`.
"""

from typing import Optional

from fastapi import HTTPException


class RegulonError(Exception):
    """Base class for errors surfaced to callers."""

    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def detail(self) -> dict:
        return {"error": self.message}


# Auth -----------------------------------------------------------------------


class AuthRejected(RegulonError):
    """Missing or invalid session."""

    status_code = 401


class AccessDenied(RegulonError):
    """Authenticated, but not permitted (role or origin)."""

    status_code = 403


# Validation -----------------------------------------------------------------


class ValidationRejected(RegulonError):
    """Request is malformed or carries too little information."""

    status_code = 400


class ExtractionRejected(RegulonError):
    """Notice extraction failed or reported missing critical fields."""

    status_code = 422

    def __init__(self, message: str, missing_fields: Optional[list[str]] = None):
        super().__init__(message)
        self.missing_fields = missing_fields or []

    def detail(self) -> dict:
        body = super().detail()
        if self.missing_fields:
            body["missing_fields"] = self.missing_fields
        return body


# Upstream -------------------------------------------------------------------


class UpstreamError(RegulonError):
    """Base for failures reported by the LLM gateway."""

    retryable: bool = False

    def __init__(self, message: str, upstream_status: Optional[int] = None):
        super().__init__(message)
        self.upstream_status = upstream_status


class UpstreamThrottled(UpstreamError):
    """Rate limit or quota exhaustion reported by the gateway."""


class UpstreamRateLimited(UpstreamThrottled):
    status_code = 429
    retryable = True

    def __init__(self, message: str = "Rate limit exceeded. Please try again in a moment."):
        super().__init__(message, upstream_status=429)


class UpstreamQuotaExhausted(UpstreamThrottled):
    status_code = 402

    def __init__(self, message: str = "AI credits exhausted. Please add credits to continue."):
        super().__init__(message, upstream_status=402)


class UpstreamUnavailable(UpstreamError):
    status_code = 500


class UpstreamTimeout(UpstreamUnavailable):
    status_code = 503
    retryable = True

    def __init__(self, message: str = "AI gateway timed out. Please retry."):
        super().__init__(message)


def to_http_exception(error: RegulonError) -> HTTPException:
    """Convert a domain error into the HTTPException FastAPI renders."""
    headers = None
    if isinstance(error, AuthRejected):
        headers = {"WWW-Authenticate": "Bearer"}
    elif isinstance(error, (UpstreamRateLimited, UpstreamTimeout)):
        headers = {"Retry-After": "5"}
    return HTTPException(status_code=error.status_code, detail=error.detail(), headers=headers)
