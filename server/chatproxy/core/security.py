"""
Sanitization and validation of inbound chat requests.

The sanitizer is a best-effort denylist against markup and script injection
when content is later rendered as rich text. It does not replace output-side
escaping in the renderer.
"""
from __future__ import annotations
import re
from typing import Any, Dict, List

from pydantic import ValidationError

from chatproxy.core.errors import RequestValidationError, field_path
from chatproxy.schemas.chat import MAX_CONTENT_LENGTH, ChatMessage, ChatRequest

API_KEY_MIN_LENGTH = 20
API_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")

_ANGLE_BRACKETS = re.compile(r"[<>]")
_JAVASCRIPT_SCHEME = re.compile(r"javascript:", re.IGNORECASE)
_EVENT_HANDLER = re.compile(r"on\w+=", re.IGNORECASE)

_FIELD_MESSAGES = {
    "messages": "Messages must be a non-empty array",
    "role": "Invalid message role",
    "content": "Message content is required",
    "provider": "Invalid provider",
    "apiKey": "API key is required",
    "modelId": "Model ID is required",
}


def _sanitize_once(text: str) -> str:
    text = text.strip()
    text = _ANGLE_BRACKETS.sub("", text)
    text = _JAVASCRIPT_SCHEME.sub("", text)
    text = _EVENT_HANDLER.sub("", text)
    return text


def sanitize_input(text: str) -> str:
    # Repeat until stable: removing one token can splice together another
    # (e.g. "jajavascript:vascript:").
    previous = None
    while previous != text:
        previous = text
        text = _sanitize_once(text)
    return text


def validate_api_key(api_key: str) -> bool:
    if not api_key or len(api_key) < API_KEY_MIN_LENGTH:
        return False
    return API_KEY_PATTERN.match(api_key) is not None


def _message_for(loc: tuple, error: Dict[str, Any]) -> str:
    leaf = next((p for p in reversed(loc) if isinstance(p, str)), "")
    return _FIELD_MESSAGES.get(leaf, error.get("msg", "Invalid value"))


def validate_chat_request(payload: Any) -> ChatRequest:
    """Validate a raw ``{messages, config}`` body and sanitize message contents.

    Raises ``RequestValidationError`` listing every offending field.
    """
    try:
        request = ChatRequest.model_validate(payload)
    except ValidationError as exc:
        details = []
        for err in exc.errors():
            loc = tuple(err.get("loc", ()))
            details.append({"field": field_path(loc), "message": _message_for(loc, err)})
        raise RequestValidationError(details) from None

    errors: List[Dict[str, str]] = []
    sanitized: List[ChatMessage] = []
    for i, message in enumerate(request.messages):
        # Length is bounded after trimming, before the denylist runs
        if len(message.content.strip()) > MAX_CONTENT_LENGTH:
            errors.append({"field": f"messages[{i}].content", "message": "Message too long"})
            continue
        content = sanitize_input(message.content)
        if not content:
            errors.append({"field": f"messages[{i}].content", "message": "Message content is required"})
            continue
        sanitized.append(message.model_copy(update={"content": content}))
    if errors:
        raise RequestValidationError(errors)

    return ChatRequest(messages=sanitized, config=request.config)
