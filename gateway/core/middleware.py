"""HTTP middleware: request correlation and per-route rate limiting.

Usage (last registered runs first):
    app.middleware("http")(rate_limit_middleware)
    app.middleware("http")(request_id_middleware)
"""

from __future__ import annotations

import hashlib
import logging
import time
import uuid

from fastapi import Request, Response, status
from fastapi.responses import JSONResponse

from gateway.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult
from gateway.core.config import RateLimitSettings, settings
from gateway.core.logging import clear_request_id, get_request_id, set_request_id

logger = logging.getLogger(__name__)


async def request_id_middleware(request: Request, call_next) -> Response:
    """Propagate or generate a correlation id for every request.

    The incoming ``X-Request-ID`` header (name configurable through
    LOG_REQUEST_ID_HEADER) is reused when present, otherwise a UUID4 is
    generated. The id is stored in a contextvar for log correlation and echoed
    back along with ``X-Request-Duration-ms``.
    """
    header_name = getattr(request.app.state, "settings", settings).log.request_id_header
    request_id = request.headers.get(header_name) or str(uuid.uuid4())
    set_request_id(request_id)
    start = time.perf_counter()
    try:
        response: Response = await call_next(request)
    finally:
        clear_request_id()

    duration_ms = (time.perf_counter() - start) * 1000
    response.headers[header_name] = request_id
    response.headers.setdefault("X-Request-Duration-ms", f"{duration_ms:.2f}")
    return response


def get_client_id(request: Request, *, trust_forwarded_for: bool = True) -> str:
    """Identify the caller: first X-Forwarded-For hop, socket peer, or 'unknown'."""
    if trust_forwarded_for:
        forwarded = request.headers.get("x-forwarded-for")
        if forwarded:
            first_hop = forwarded.split(",")[0].strip()
            if first_hop:
                return first_hop
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def build_rate_limit_key(client_id: str, path: str) -> str:
    return f"{client_id}:{path}"


def _hash_limiter_key(key: str) -> str:
    """Hash the limiter key so client addresses stay out of the logs."""
    return hashlib.sha256(key.encode()).hexdigest()[:16]


def _rate_limit_headers(result: RateLimitResult) -> dict[str, str]:
    return {
        "Retry-After": str(result.retry_after_seconds or 0),
        "X-RateLimit-Limit": str(result.limit),
        "X-RateLimit-Remaining": str(result.remaining),
        "X-RateLimit-Reset": str(result.reset_at),
    }


def too_many_requests_response(result: RateLimitResult, *, include_headers: bool) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content={
            "error": {
                "code": "rate_limit_exceeded",
                "message": "Too Many Requests",
                "request_id": get_request_id(),
            }
        },
        headers=_rate_limit_headers(result) if include_headers else None,
    )


async def rate_limit_middleware(request: Request, call_next) -> Response:
    """Admit or reject the request using the app's rate limiter.

    The key is ``<client id>:<path>``. A rejected request is answered with 429
    and never reaches the route.
    """
    cfg: RateLimitSettings = getattr(request.app.state, "settings", settings).rate_limit
    limiter: AbstractRateLimiter | None = getattr(request.app.state, "rate_limiter", None)
    path = request.url.path

    if not cfg.enabled or limiter is None or path in cfg.exempt_paths:
        return await call_next(request)

    key = build_rate_limit_key(
        get_client_id(request, trust_forwarded_for=cfg.trust_forwarded_for),
        path,
    )
    result = limiter.admit(key)
    if result.allowed:
        logger.debug(
            "rate_limit.allowed",
            extra={"key_hash": _hash_limiter_key(key), "count": result.count, "remaining": result.remaining},
        )
        return await call_next(request)

    logger.warning(
        "rate_limit.exceeded",
        extra={
            "key_hash": _hash_limiter_key(key),
            "path": path,
            "limit": result.limit,
            "window_s": cfg.window_seconds,
            "retry_after_s": result.retry_after_seconds,
        },
    )
    return too_many_requests_response(result, include_headers=cfg.include_headers)
