from __future__ import annotations
import logging
from typing import Optional, Sequence, Union

import httpx

from chatproxy.config import get_settings
from chatproxy.schemas.chat import AIConfig, AppSettings, ChatMessage, ChatResponse

logger = logging.getLogger(__name__)


class ChatClient:
    """Caller side of ``POST /api/chat/message``.

    Mirrors the proxy's contract: failures come back as ``ChatResponse.error``
    rather than exceptions.
    """

    def __init__(self, base_url: Optional[str] = None, client: Optional[httpx.AsyncClient] = None) -> None:
        self.base_url = (base_url or get_settings().api_base_url).rstrip("/")
        self._client = client

    async def __aenter__(self) -> "ChatClient":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.aclose()

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            timeout = httpx.Timeout(connect=10.0, read=get_settings().request_timeout_seconds, write=30.0, pool=10.0)
            self._client = httpx.AsyncClient(timeout=timeout)
        return self._client

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def send_message(
        self,
        messages: Sequence[ChatMessage],
        config: Union[AppSettings, AIConfig],
    ) -> ChatResponse:
        """``config`` is usually the stored ``AppSettings``, whose key may still be blank."""
        if not config.apiKey:
            return ChatResponse(content="", error="API key is required. Please configure your settings.")

        try:
            resp = await self.client.post(
                f"{self.base_url}/api/chat/message",
                json={
                    "messages": [m.model_dump(mode="json") for m in messages],
                    "config": {"provider": config.provider, "apiKey": config.apiKey, "modelId": config.modelId},
                },
            )
            if resp.is_error:
                try:
                    detail = resp.json().get("error")
                except (ValueError, AttributeError):
                    detail = None
                return ChatResponse(content="", error=f"API Error: {detail or f'HTTP {resp.status_code}'}")
            data = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("Chat request to %s failed: %s", self.base_url, e)
            return ChatResponse(content="", error=f"API Error: {str(e) or type(e).__name__}")

        content = data.get("content") if isinstance(data, dict) else None
        return ChatResponse(content=content or "")
