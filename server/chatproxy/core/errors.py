"""
Error taxonomy for the proxy.

Every error answers with a JSON body that carries an ``error`` string; field
level validation failures add ``errors`` and rate limits add ``message``.
"""
from __future__ import annotations
import logging
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError as FastAPIRequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class ChatProxyError(Exception):
    status_code: int = status.HTTP_400_BAD_REQUEST
    error: str = "Bad request"

    def __init__(self, error: Optional[str] = None, message: Optional[str] = None) -> None:
        self.error = error or self.error
        self.message = message
        super().__init__(self.error)

    def body(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"error": self.error}
        if self.message:
            body["message"] = self.message
        return body

    def headers(self) -> Optional[Dict[str, str]]:
        return None

    def to_response(self) -> JSONResponse:
        return JSONResponse(status_code=self.status_code, content=self.body(), headers=self.headers())


class RequestValidationError(ChatProxyError):
    """Malformed or missing request fields."""

    error = "Validation failed"

    def __init__(self, errors: List[Dict[str, str]]) -> None:
        super().__init__()
        self.errors = errors

    def body(self) -> Dict[str, Any]:
        return {"error": self.error, "errors": self.errors}


class AuthFormatError(ChatProxyError):
    error = "Invalid API key format"


class UnsupportedProviderError(ChatProxyError):
    error = "Unsupported provider"


class PayloadTooLargeError(ChatProxyError):
    status_code = 413
    error = "Request too large"


class RateLimitError(ChatProxyError):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    error = "Too many requests"

    def __init__(self, error: Optional[str] = None, message: Optional[str] = None, retry_after: int = 1) -> None:
        super().__init__(error, message or "Please try again later.")
        self.retry_after = retry_after

    def headers(self) -> Optional[Dict[str, str]]:
        return {"Retry-After": str(self.retry_after)}


class ProviderError(Exception):
    """Non-2xx or unreadable response from an upstream LLM API."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code

    @property
    def is_auth_failure(self) -> bool:
        return self.status_code in (401, 403)


def field_path(loc: tuple) -> str:
    # ("body", "messages", 0, "role") -> "messages[0].role"
    out = ""
    for part in loc:
        if part == "body":
            continue
        if isinstance(part, int):
            out += f"[{part}]"
        else:
            out += f".{part}" if out else str(part)
    return out or "body"


def install_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ChatProxyError)
    async def _chatproxy_error(request: Request, exc: ChatProxyError) -> JSONResponse:
        logger.warning("%s %s -> %d %s", request.method, request.url.path, exc.status_code, exc.error)
        return exc.to_response()

    @app.exception_handler(FastAPIRequestValidationError)
    async def _body_error(request: Request, exc: FastAPIRequestValidationError) -> JSONResponse:
        errors = []
        for e in exc.errors():
            if e.get("type") == "json_invalid":
                errors.append({"field": "body", "message": "Malformed JSON body"})
            else:
                errors.append({"field": field_path(tuple(e.get("loc", ()))), "message": e.get("msg", "Invalid value")})
        return RequestValidationError(errors).to_response()

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        if exc.status_code == status.HTTP_404_NOT_FOUND:
            return JSONResponse(status_code=404, content={"error": "Not found"})
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def _unhandled(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"error": "Internal server error"})
