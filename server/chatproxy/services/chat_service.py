from __future__ import annotations
import logging
from typing import Optional

import httpx

from chatproxy.config import get_settings
from chatproxy.core.errors import ProviderError
from chatproxy.providers.base import ProviderAdapter
from chatproxy.providers.router import ProviderRouter, router as default_router
from chatproxy.schemas.chat import ChatRequest, ChatResponse

logger = logging.getLogger(__name__)


class ChatService:
    """Send a conversation to the configured provider and normalize the result.

    ``send_message`` never raises: every failure comes back as a
    ``ChatResponse`` with ``error`` set. One attempt per call, no retries.
    """

    def __init__(self, providers: Optional[ProviderRouter] = None, client: Optional[httpx.AsyncClient] = None) -> None:
        self.providers = providers or default_router
        self._client = client

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            settings = get_settings()
            timeout = httpx.Timeout(connect=10.0, read=settings.request_timeout_seconds, write=30.0, pool=10.0)
            self._client = httpx.AsyncClient(timeout=timeout, trust_env=True)
        return self._client

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def send_message(self, request: ChatRequest) -> ChatResponse:
        config = request.config
        if not config.apiKey:
            return ChatResponse(content="", error="API key is required")

        adapter = self.providers.get_adapter(config.provider)
        if adapter is None:
            logger.warning("Unsupported provider requested: %r", config.provider)
            return ChatResponse(content="", error="Unsupported provider")

        try:
            content = await self._call(adapter, request)
        except ProviderError as e:
            logger.warning("Provider %s failed (status=%s): %s", adapter.id, e.status_code, e)
            return ChatResponse(content="", error=f"API Error: {e}", upstream_status=e.status_code)
        except httpx.HTTPError as e:
            message = str(e) or type(e).__name__
            logger.warning("Provider %s transport error: %s", adapter.id, message)
            return ChatResponse(content="", error=f"API Error: {message}")
        except Exception as e:
            logger.exception("Unexpected error calling provider %s", adapter.id)
            return ChatResponse(content="", error=f"API Error: {str(e) or 'Unknown error occurred'}")

        return ChatResponse(content=content)

    async def _call(self, adapter: ProviderAdapter, request: ChatRequest) -> str:
        outbound = adapter.build_request(request.messages, request.config)
        logger.info(
            "Dispatching to provider=%s model=%s messages=%d",
            adapter.id,
            request.config.modelId,
            len(request.messages),
        )
        resp = await self.client.post(
            outbound.url,
            headers=outbound.headers,
            params=outbound.params or None,
            json=outbound.body,
        )

        if resp.is_error:
            try:
                data = resp.json()
            except ValueError:
                data = None
            raise ProviderError(adapter.parse_error(resp.status_code, data), status_code=resp.status_code)

        try:
            data = resp.json()
        except ValueError:
            raise ProviderError("Invalid JSON in provider response", status_code=resp.status_code) from None
        return adapter.parse_response(data)


# Singleton
chat_service = ChatService()
