from __future__ import annotations
from typing import Dict, List, Optional, get_args

from chatproxy.providers.anthropic import AnthropicProvider
from chatproxy.providers.base import ProviderAdapter
from chatproxy.providers.google import GoogleProvider
from chatproxy.providers.openai import OpenAIProvider
from chatproxy.providers.openrouter import OpenRouterProvider
from chatproxy.schemas.chat import ModelInfo, Provider


class ProviderRouter:
    def __init__(self) -> None:
        # One adapter per entry of the Provider literal
        self.providers: Dict[str, ProviderAdapter] = {
            "openrouter": OpenRouterProvider(),
            "openai": OpenAIProvider(),
            "anthropic": AnthropicProvider(),
            "google": GoogleProvider(),
        }
        missing = set(get_args(Provider)) - set(self.providers)
        if missing:
            raise RuntimeError(f"No adapter registered for provider(s): {sorted(missing)}")

    def get_adapter(self, provider: str) -> Optional[ProviderAdapter]:
        return self.providers.get(provider)

    def list_models(self) -> Dict[str, List[ModelInfo]]:
        return {pid: adapter.list_models() for pid, adapter in self.providers.items()}


router = ProviderRouter()
