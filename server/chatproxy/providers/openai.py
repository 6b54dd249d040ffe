from __future__ import annotations
from typing import Any, List, Sequence

from chatproxy.config import get_settings
from chatproxy.providers.base import (
    ProviderRequest,
    chat_completions_content,
    error_message,
    inject_system_prompt,
)
from chatproxy.schemas.chat import AIConfig, ChatMessage, ModelInfo


class OpenAIProvider:
    id = "openai"

    def list_models(self) -> List[ModelInfo]:
        return [
            ModelInfo(id="gpt-4-turbo-preview", name="GPT-4 Turbo Preview", provider="openai", description="Latest preview"),
            ModelInfo(id="gpt-4-turbo", name="GPT-4 Turbo", provider="openai", description="Fast GPT-4"),
            ModelInfo(id="gpt-4", name="GPT-4", provider="openai", description="Standard GPT-4"),
            ModelInfo(id="gpt-4-32k", name="GPT-4 32K", provider="openai", description="Extended context"),
            ModelInfo(id="gpt-3.5-turbo", name="GPT-3.5 Turbo", provider="openai", description="Fast and affordable"),
            ModelInfo(id="gpt-3.5-turbo-16k", name="GPT-3.5 Turbo 16K", provider="openai", description="Extended context"),
        ]

    def build_request(self, messages: Sequence[ChatMessage], config: AIConfig) -> ProviderRequest:
        settings = get_settings()
        return ProviderRequest(
            url=f"{settings.upstream_openai_url}/chat/completions",
            headers={
                "Authorization": f"Bearer {config.apiKey}",
                "Content-Type": "application/json",
            },
            body={
                "model": config.modelId,
                "messages": inject_system_prompt(messages),
            },
        )

    def parse_response(self, data: Any) -> str:
        return chat_completions_content(data)

    def parse_error(self, status_code: int, data: Any) -> str:
        return error_message(status_code, data)
