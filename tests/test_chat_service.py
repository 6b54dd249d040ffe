"""Tests for ChatService dispatch against a mocked upstream."""
import json

import httpx
import pytest

from chatproxy.schemas.chat import AIConfig, ChatMessage, ChatRequest
from chatproxy.services.chat_service import ChatService

from conftest import VALID_KEY, Upstream


def _unvalidated(provider="openai", api_key=VALID_KEY):
    # Bypasses model validation, as a caller skipping the route layer would
    return ChatRequest.model_construct(
        messages=[ChatMessage(role="user", content="Hello")],
        config=AIConfig.model_construct(provider=provider, apiKey=api_key, modelId="m"),
    )


class TestGuards:
    @pytest.mark.asyncio
    async def test_empty_api_key(self, upstream):
        response = await upstream.service().send_message(_unvalidated(api_key=""))
        assert response.content == ""
        assert response.error == "API key is required"
        assert upstream.requests == []

    @pytest.mark.asyncio
    async def test_unsupported_provider(self, upstream):
        response = await upstream.service().send_message(_unvalidated(provider="unknown"))
        assert response.to_body() == {"content": "", "error": "Unsupported provider"}
        assert upstream.requests == []


class TestDispatch:
    @pytest.mark.asyncio
    async def test_openrouter_end_to_end(self, upstream, make_request):
        response = await upstream.service().send_message(make_request("Hello"))
        assert response.to_body() == {"content": "Hi there"}
        assert response.error is None

        sent = upstream.requests[0]
        assert str(sent.url) == "https://openrouter.ai/api/v1/chat/completions"
        assert sent.headers["authorization"] == f"Bearer {VALID_KEY}"
        body = json.loads(sent.content)
        assert body["messages"][-1] == {"role": "user", "content": "Hello"}
        assert body["messages"][0]["role"] == "system"

    @pytest.mark.asyncio
    async def test_google_key_in_query(self, make_request):
        upstream = Upstream(json={"candidates": [{"content": {"parts": [{"text": "Hola"}]}}]})
        request = make_request("Hi", "Hello!", "Spanish please", provider="google", model_id="gemini-pro")
        response = await upstream.service().send_message(request)
        assert response.content == "Hola"

        sent = upstream.requests[0]
        assert sent.url.path == "/v1beta/models/gemini-pro:generateContent"
        assert sent.url.params["key"] == VALID_KEY
        body = json.loads(sent.content)
        assert [c["role"] for c in body["contents"]] == ["user", "model", "user"]

    @pytest.mark.asyncio
    async def test_anthropic_headers(self, make_request):
        upstream = Upstream(json={"content": [{"type": "text", "text": "Hey"}]})
        response = await upstream.service().send_message(make_request(provider="anthropic"))
        assert response.content == "Hey"
        sent = upstream.requests[0]
        assert sent.headers["x-api-key"] == VALID_KEY
        assert sent.headers["anthropic-version"] == "2023-06-01"

    @pytest.mark.asyncio
    async def test_single_attempt_only(self, make_request):
        upstream = Upstream(status_code=503, json={"error": {"message": "overloaded"}})
        await upstream.service().send_message(make_request())
        assert len(upstream.requests) == 1


class TestFailures:
    @pytest.mark.asyncio
    async def test_provider_error_message(self, make_request):
        upstream = Upstream(status_code=401, json={"error": {"message": "invalid key"}})
        response = await upstream.service().send_message(make_request(provider="openai"))
        assert response.to_body() == {"content": "", "error": "API Error: invalid key"}
        assert response.upstream_status == 401

    @pytest.mark.asyncio
    async def test_unparseable_error_body(self, make_request):
        upstream = Upstream(status_code=500, content=b"<html>oops</html>")
        response = await upstream.service().send_message(make_request())
        assert response.error == "API Error: HTTP 500"

    @pytest.mark.asyncio
    async def test_malformed_success_body(self, make_request):
        upstream = Upstream(status_code=200, content=b"not json")
        response = await upstream.service().send_message(make_request())
        assert response.error == "API Error: Invalid JSON in provider response"

    @pytest.mark.asyncio
    async def test_transport_error(self, make_request):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        service = ChatService(client=httpx.AsyncClient(transport=httpx.MockTransport(refuse)))
        response = await service.send_message(make_request())
        assert response.content == ""
        assert response.error == "API Error: connection refused"
        assert response.upstream_status is None

    @pytest.mark.asyncio
    async def test_upstream_status_not_serialized(self, make_request):
        upstream = Upstream(status_code=403, json={"error": {"message": "forbidden"}})
        response = await upstream.service().send_message(make_request())
        assert "upstream_status" not in response.model_dump()
