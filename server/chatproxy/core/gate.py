"""
Request gate middleware.
Rejects oversized payloads and abusive clients before a route runs.
"""
import logging
from typing import Callable

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from chatproxy.core.errors import ChatProxyError, PayloadTooLargeError
from chatproxy.core.ratelimit import (
    BruteForceGuard,
    FixedWindowRateLimiter,
    get_client_ip,
)

logger = logging.getLogger(__name__)

CONTENT_SECURITY_POLICY = "; ".join(
    [
        "default-src 'self'",
        "style-src 'self' 'unsafe-inline'",
        "script-src 'self'",
        "img-src 'self' data: https:",
        "connect-src 'self' https://api.openai.com https://api.anthropic.com "
        "https://openrouter.ai https://generativelanguage.googleapis.com",
    ]
)


class RequestGateMiddleware(BaseHTTPMiddleware):
    """Payload-size gate for every request; brute-force lockout and the
    general rate limit for everything under ``prefix``."""

    def __init__(
        self,
        app,
        limiter: FixedWindowRateLimiter,
        guard: BruteForceGuard,
        max_body_bytes: int,
        prefix: str = "/api",
    ):
        super().__init__(app)
        self.limiter = limiter
        self.guard = guard
        self.max_body_bytes = max_body_bytes
        self.prefix = prefix

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            self._check_content_length(request)
            if request.url.path.startswith(self.prefix) and request.method != "OPTIONS":
                ip = get_client_ip(request)
                self.guard.ensure_not_blocked(ip)
                self.limiter.hit(ip)
        except ChatProxyError as e:
            logger.warning(
                "Gate rejected %s %s from %s: %s",
                request.method,
                request.url.path,
                get_client_ip(request),
                e.error,
            )
            return e.to_response()
        return await call_next(request)

    def _check_content_length(self, request: Request) -> None:
        declared = request.headers.get("content-length")
        if not declared:
            return
        try:
            size = int(declared)
        except ValueError:
            return
        if size > self.max_body_bytes:
            raise PayloadTooLargeError()


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)
        response.headers.setdefault("Content-Security-Policy", CONTENT_SECURITY_POLICY)
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("X-Frame-Options", "SAMEORIGIN")
        response.headers.setdefault("Referrer-Policy", "no-referrer")
        return response


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Turn unhandled exceptions into the generic 500 envelope.

    Installed innermost so the response still passes through CORS and the
    security headers on its way out.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)
        except Exception:
            logger.exception("Unhandled error on %s %s", request.method, request.url.path)
            return JSONResponse(status_code=500, content={"error": "Internal server error"})
