"""Unit tests for sanitization and request validation."""
import pytest
from hypothesis import given
from hypothesis import strategies as st

from chatproxy.core.errors import RequestValidationError
from chatproxy.core.security import sanitize_input, validate_api_key, validate_chat_request


class TestSanitizeInput:
    """Tests for the markup/script denylist."""

    def test_strips_brackets_and_javascript_scheme(self):
        assert sanitize_input("<script>javaScript:alert(1)</script>") == "scriptalert(1)/script"

    def test_strips_event_handler_attributes(self):
        assert sanitize_input('<img src=x OnError=alert(1)>') == "img src=x alert(1)"

    def test_trims_surrounding_whitespace(self):
        assert sanitize_input("   hello world \n") == "hello world"

    def test_plain_text_is_untouched(self):
        assert sanitize_input("What is 2 + 2?") == "What is 2 + 2?"

    def test_spliced_tokens_are_removed(self):
        assert sanitize_input("jajavascript:vascript:alert(1)") == "alert(1)"
        assert sanitize_input("java<script:x") == "x"

    @given(st.text())
    def test_idempotent(self, text):
        once = sanitize_input(text)
        assert sanitize_input(once) == once

    @given(st.text(alphabet="<>onjavascriptONJAVASCRIPT:= abc"))
    def test_idempotent_on_hostile_alphabet(self, text):
        once = sanitize_input(text)
        assert sanitize_input(once) == once
        assert "<" not in once and ">" not in once
        assert "javascript:" not in once.lower()


class TestValidateApiKey:
    def test_too_short(self):
        assert validate_api_key("short") is False

    def test_minimum_length(self):
        assert validate_api_key("a" * 20) is True
        assert validate_api_key("a" * 19) is False

    def test_rejects_spaces(self):
        assert validate_api_key("has spaces here 1234567890") is False

    def test_accepts_dashes_and_underscores(self):
        assert validate_api_key("sk-ant-REDACTED") is True

    def test_empty(self):
        assert validate_api_key("") is False


class TestValidateChatRequest:
    """Tests for validate_chat_request."""

    def _fields(self, exc_info):
        return {e["field"]: e["message"] for e in exc_info.value.errors}

    def test_valid_request_is_sanitized(self, chat_body):
        request = validate_chat_request(chat_body(content="  <b>Hello</b>  "))
        assert request.messages[0].content == "bHello/b"
        assert request.messages[0].id == "1"
        assert request.config.provider == "openrouter"

    def test_missing_id_and_timestamp_are_filled(self, chat_body):
        body = chat_body()
        del body["messages"][0]["id"]
        del body["messages"][0]["timestamp"]
        request = validate_chat_request(body)
        assert request.messages[0].id
        assert request.messages[0].timestamp.endswith("Z")

    def test_preserves_order(self, chat_body):
        body = chat_body(content="first")
        body["messages"].append({"id": "2", "role": "assistant", "content": "second"})
        body["messages"].append({"id": "3", "role": "user", "content": "third"})
        request = validate_chat_request(body)
        assert [m.content for m in request.messages] == ["first", "second", "third"]

    def test_empty_messages_rejected(self, chat_body):
        body = chat_body()
        body["messages"] = []
        with pytest.raises(RequestValidationError) as exc_info:
            validate_chat_request(body)
        assert self._fields(exc_info) == {"messages": "Messages must be a non-empty array"}

    def test_system_role_rejected(self, chat_body):
        with pytest.raises(RequestValidationError) as exc_info:
            validate_chat_request(chat_body(role="system"))
        assert self._fields(exc_info)["messages[0].role"] == "Invalid message role"

    def test_blank_content_rejected(self, chat_body):
        with pytest.raises(RequestValidationError) as exc_info:
            validate_chat_request(chat_body(content="   "))
        assert self._fields(exc_info) == {"messages[0].content": "Message content is required"}

    def test_content_that_sanitizes_to_nothing_rejected(self, chat_body):
        with pytest.raises(RequestValidationError):
            validate_chat_request(chat_body(content="<>"))

    def test_content_too_long(self, chat_body):
        with pytest.raises(RequestValidationError) as exc_info:
            validate_chat_request(chat_body(content="x" * 10_001))
        assert self._fields(exc_info) == {"messages[0].content": "Message too long"}

    def test_content_at_limit_accepted(self, chat_body):
        request = validate_chat_request(chat_body(content="x" * 10_000))
        assert len(request.messages[0].content) == 10_000

    def test_limit_applies_after_trimming(self, chat_body):
        request = validate_chat_request(chat_body(content="  " + "x" * 10_000 + "  \n"))
        assert request.messages[0].content == "x" * 10_000

    def test_unknown_provider(self, chat_body):
        with pytest.raises(RequestValidationError) as exc_info:
            validate_chat_request(chat_body(provider="cohere"))
        assert self._fields(exc_info) == {"config.provider": "Invalid provider"}

    def test_empty_key_and_model(self, chat_body):
        with pytest.raises(RequestValidationError) as exc_info:
            validate_chat_request(chat_body(api_key="", model_id=""))
        assert self._fields(exc_info) == {
            "config.apiKey": "API key is required",
            "config.modelId": "Model ID is required",
        }

    def test_non_object_body(self):
        with pytest.raises(RequestValidationError) as exc_info:
            validate_chat_request(["not", "an", "object"])
        assert "body" in self._fields(exc_info)
