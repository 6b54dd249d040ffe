from __future__ import annotations
from datetime import datetime, timezone
from typing import List, Literal, Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

Role = Literal["user", "assistant"]
Provider = Literal["openrouter", "openai", "anthropic", "google"]
Pricing = Literal["free", "paid"]

MAX_CONTENT_LENGTH = 10_000


def utcnow_iso() -> str:
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")


class ChatMessage(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: uuid4().hex)
    role: Role
    content: str
    timestamp: str = Field(default_factory=utcnow_iso)


class AIConfig(BaseModel):
    provider: Provider
    apiKey: str = Field(..., min_length=1)
    modelId: str = Field(..., min_length=1)

    def __repr__(self) -> str:
        # Keep the key out of tracebacks and logs
        return f"AIConfig(provider={self.provider!r}, modelId={self.modelId!r}, apiKey='***')"

    __str__ = __repr__


class ChatRequest(BaseModel):
    messages: List[ChatMessage] = Field(..., min_length=1)
    config: AIConfig


class ChatResponse(BaseModel):
    content: str = ""
    error: Optional[str] = None
    # Upstream HTTP status of a failed provider call; internal only
    upstream_status: Optional[int] = Field(default=None, exclude=True)

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_body(self) -> dict:
        return self.model_dump(exclude_none=True)


class ModelInfo(BaseModel):
    id: str
    name: str
    provider: Provider
    pricing: Pricing = "paid"
    description: Optional[str] = None


class AppSettings(BaseModel):
    provider: Provider
    apiKey: str
    modelId: str


class ChatSummary(BaseModel):
    id: int
    title: str
    # Group label like 'Today', 'Previous 7 Days', etc.
    date: str
    messages: List[ChatMessage] = Field(default_factory=list)
