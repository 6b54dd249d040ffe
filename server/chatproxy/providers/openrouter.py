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

# (id, name, pricing, description)
_CATALOG = [
    ("anthropic/claude-3.5-sonnet", "Claude 3.5 Sonnet", "paid", "Most capable model"),
    ("anthropic/claude-3-opus", "Claude 3 Opus", "paid", "High intelligence"),
    ("anthropic/claude-3-sonnet", "Claude 3 Sonnet", "paid", "Balanced performance"),
    ("anthropic/claude-3-haiku", "Claude 3 Haiku", "paid", "Fast and efficient"),
    ("openai/gpt-4-turbo", "GPT-4 Turbo", "paid", "Latest GPT-4"),
    ("openai/gpt-4", "GPT-4", "paid", "Standard GPT-4"),
    ("openai/gpt-4-32k", "GPT-4 32K", "paid", "Extended context"),
    ("openai/gpt-3.5-turbo", "GPT-3.5 Turbo", "paid", "Fast and affordable"),
    ("openai/gpt-3.5-turbo-16k", "GPT-3.5 Turbo 16K", "paid", "Extended context"),
    ("google/gemini-pro", "Gemini Pro", "paid", "Google's flagship"),
    ("google/gemini-pro-vision", "Gemini Pro Vision", "paid", "Multimodal model"),
    ("google/gemini-flash", "Gemini Flash", "paid", "Fast responses"),
    ("meta-llama/llama-3-70b-instruct", "Llama 3 70B", "free", "Open source"),
    ("meta-llama/llama-3-8b-instruct", "Llama 3 8B", "free", "Lightweight"),
    ("meta-llama/llama-2-70b-chat", "Llama 2 70B", "free", "Previous generation"),
    ("mistralai/mistral-large", "Mistral Large", "paid", "Top performance"),
    ("mistralai/mixtral-8x7b-instruct", "Mixtral 8x7B", "free", "Mixture of experts"),
    ("mistralai/mistral-medium", "Mistral Medium", "paid", "Balanced model"),
    ("mistralai/mistral-small", "Mistral Small", "free", "Efficient model"),
    ("cohere/command-r-plus", "Command R+", "paid", "Advanced reasoning"),
    ("cohere/command-r", "Command R", "paid", "Strong performance"),
    ("perplexity/llama-3-sonar-large-32k-online", "Perplexity Sonar Large", "paid", "With web search"),
    ("qwen/qwen-2.5-72b-instruct", "Qwen 2.5 72B", "free", "Chinese model"),
    ("01-ai/yi-34b-chat", "Yi 34B Chat", "free", "Bilingual model"),
]


class OpenRouterProvider:
    """OpenRouter unified provider (OpenAI-compatible chat completions)."""

    id = "openrouter"

    def list_models(self) -> List[ModelInfo]:
        return [
            ModelInfo(id=mid, name=name, provider="openrouter", pricing=pricing, description=desc)
            for mid, name, pricing, desc in _CATALOG
        ]

    def build_request(self, messages: Sequence[ChatMessage], config: AIConfig) -> ProviderRequest:
        settings = get_settings()
        headers = {
            "Authorization": f"Bearer {config.apiKey}",
            "Content-Type": "application/json",
        }
        # Attribution headers
        if settings.openrouter_http_referer:
            headers["HTTP-Referer"] = settings.openrouter_http_referer
        if settings.openrouter_app_title:
            headers["X-Title"] = settings.openrouter_app_title

        return ProviderRequest(
            url=f"{settings.upstream_openrouter_url}/chat/completions",
            headers=headers,
            body={
                "model": config.modelId,
                "messages": inject_system_prompt(messages),
            },
        )

    def parse_response(self, data: Any) -> str:
        return chat_completions_content(data)

    def parse_error(self, status_code: int, data: Any) -> str:
        return error_message(status_code, data)
