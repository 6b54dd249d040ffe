from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, Sequence

from chatproxy.schemas.chat import AIConfig, ChatMessage, ModelInfo

SYSTEM_PROMPT = """You are an expert AI assistant designed to help users with a wide range of tasks. You are knowledgeable, helpful, and provide accurate, well-structured responses. Always aim to be clear, concise, and professional while maintaining a friendly and approachable tone.

Key guidelines:
- Provide accurate and up-to-date information
- Break down complex topics into understandable explanations
- When uncertain, acknowledge limitations and suggest reliable sources
- Format responses clearly with proper structure when appropriate
- Be concise but thorough
- Adapt your communication style to match the user's needs and context"""


@dataclass
class ProviderRequest:
    url: str
    headers: Dict[str, str]
    body: Dict[str, Any]
    params: Dict[str, str] = field(default_factory=dict)


class ProviderAdapter(Protocol):
    id: str

    def list_models(self) -> List[ModelInfo]:
        ...

    def build_request(self, messages: Sequence[ChatMessage], config: AIConfig) -> ProviderRequest:
        ...

    def parse_response(self, data: Any) -> str:
        """Extract the assistant text from a successful response body."""
        ...

    def parse_error(self, status_code: int, data: Any) -> str:
        ...


def map_role(role: str, model_role: str = "assistant") -> str:
    """Map an internal role onto a provider's user/model-output token."""
    return model_role if role == "assistant" else "user"


def inject_system_prompt(messages: Sequence[ChatMessage], prompt: str = SYSTEM_PROMPT) -> List[Dict[str, str]]:
    """Chat-completions message list: the system prompt first, then the
    conversation in its original order."""
    formatted = [{"role": "system", "content": prompt}]
    formatted.extend({"role": map_role(m.role), "content": m.content} for m in messages)
    return formatted


def error_message(status_code: int, data: Any) -> str:
    # All four providers answer errors as {"error": {"message": ...}}
    if isinstance(data, dict):
        err = data.get("error")
        if isinstance(err, dict) and err.get("message"):
            return str(err["message"])
    return f"HTTP {status_code}"


def dig(data: Any, *path: Any) -> Optional[Any]:
    """Walk nested dicts/lists, returning None on the first missing step."""
    current = data
    for step in path:
        try:
            current = current[step]
        except (KeyError, IndexError, TypeError):
            return None
    return current


def text_or_empty(value: Any) -> str:
    return value if isinstance(value, str) else ""


def chat_completions_content(data: Any) -> str:
    return text_or_empty(dig(data, "choices", 0, "message", "content"))
