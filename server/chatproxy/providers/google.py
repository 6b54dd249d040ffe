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

GENERATION_CONFIG = {
    "temperature": 0.7,
    "topK": 40,
    "topP": 0.95,
    "maxOutputTokens": 4096,
}


class GoogleProvider:
    id = "google"

    def list_models(self) -> List[ModelInfo]:
        return [
            ModelInfo(id="gemini-pro", name="Gemini Pro", provider="google", description="Flagship model"),
            ModelInfo(id="gemini-pro-vision", name="Gemini Pro Vision", provider="google", description="Multimodal capabilities"),
            ModelInfo(id="gemini-flash", name="Gemini Flash", provider="google", description="Fast responses"),
            ModelInfo(id="gemini-1.5-pro", name="Gemini 1.5 Pro", provider="google", description="Latest generation"),
            ModelInfo(id="gemini-1.5-flash", name="Gemini 1.5 Flash", provider="google", description="Fast 1.5 model"),
        ]

    def _to_contents(self, messages: Sequence[ChatMessage]) -> List[Dict[str, Any]]:
        # Gemini roles: "user" and "model"
        return [
            {"role": map_role(m.role, model_role="model"), "parts": [{"text": m.content}]}
            for m in messages
        ]

    def build_request(self, messages: Sequence[ChatMessage], config: AIConfig) -> ProviderRequest:
        settings = get_settings()
        return ProviderRequest(
            url=f"{settings.upstream_google_url}/models/{config.modelId}:generateContent",
            headers={"Content-Type": "application/json"},
            # Gemini authenticates with the key as a query parameter, not a header
            params={"key": config.apiKey},
            body={
                "contents": self._to_contents(messages),
                "systemInstruction": {"parts": [{"text": SYSTEM_PROMPT}]},
                "generationConfig": dict(GENERATION_CONFIG),
            },
        )

    def parse_response(self, data: Any) -> str:
        return text_or_empty(dig(data, "candidates", 0, "content", "parts", 0, "text"))

    def parse_error(self, status_code: int, data: Any) -> str:
        return error_message(status_code, data)
