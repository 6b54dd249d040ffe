from __future__ import annotations
from typing import Any, Dict, List, Sequence

from chatproxy.config import get_settings
from chatproxy.providers.base import (
    SYSTEM_PROMPT,
    ProviderRequest,
    dig,
    error_message,
    map_role,
    text_or_empty,
)
from chatproxy.schemas.chat import AIConfig, ChatMessage, ModelInfo

MAX_TOKENS = 4096


class AnthropicProvider:
    id = "anthropic"

    def list_models(self) -> List[ModelInfo]:
        return [
            ModelInfo(id="claude-3-5-sonnet-20241022", name="Claude 3.5 Sonnet", provider="anthropic", description="Most capable"),
            ModelInfo(id="claude-3-opus-20240229", name="Claude 3 Opus", provider="anthropic", description="Highest intelligence"),
            ModelInfo(id="claude-3-sonnet-20240229", name="Claude 3 Sonnet", provider="anthropic", description="Balanced performance"),
            ModelInfo(id="claude-3-haiku-20240307", name="Claude 3 Haiku", provider="anthropic", description="Fast and efficient"),
        ]

    def build_request(self, messages: Sequence[ChatMessage], config: AIConfig) -> ProviderRequest:
        settings = get_settings()
        # The system prompt is a top-level field here, never a message
        formatted: List[Dict[str, str]] = [
            {"role": map_role(m.role), "content": m.content} for m in messages
        ]
        return ProviderRequest(
            url=f"{settings.upstream_anthropic_url}/messages",
            headers={
                "x-api-key": config.apiKey,
                "anthropic-version": settings.upstream_anthropic_version,
                "content-type": "application/json",
            },
            body={
                "model": config.modelId,
                "max_tokens": MAX_TOKENS,
                "system": SYSTEM_PROMPT,
                "messages": formatted,
            },
        )

    def parse_response(self, data: Any) -> str:
        return text_or_empty(dig(data, "content", 0, "text"))

    def parse_error(self, status_code: int, data: Any) -> str:
        return error_message(status_code, data)
