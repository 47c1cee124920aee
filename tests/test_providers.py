import asyncio

import pytest

from docqa.core.config import Settings
from docqa.core.exceptions import MalformedResponse, MissingCredential, UnsupportedProvider, UpstreamError
from docqa.services.knowledge import providers
from docqa.services.knowledge.providers import (
    PROVIDER_ADAPTERS,
    Provider,
    extract_text,
    invoke_provider,
    resolve_provider,
)
from conftest import SpyTransport, make_response

CFG = Settings(LLM_TEMPERATURE=0.7, LLM_MAX_TOKENS=1000)


def _invoke(provider, api_key="secret-key", transport=None):
    return asyncio.run(invoke_provider(provider, api_key, "system text", "user text", transport=transport, cfg=CFG))


def test_every_provider_has_an_adapter():
    assert set(PROVIDER_ADAPTERS) == set(Provider)


class TestCredentialsAndProviders:
    """Failures that must happen before any request is built or sent."""

    @pytest.mark.parametrize("api_key", ["", None])
    def test_missing_key_makes_no_transport_call(self, api_key):
        transport = SpyTransport()

        with pytest.raises(MissingCredential):
            _invoke("openai", api_key=api_key, transport=transport)

        assert transport.calls == []

    def test_unknown_provider_never_builds_a_request(self, monkeypatch):
        transport = SpyTransport()
        for adapter in PROVIDER_ADAPTERS.values():
            monkeypatch.setattr(adapter, "build_request", _fail_if_called, raising=False)

        with pytest.raises(UnsupportedProvider):
            _invoke("cohere", transport=transport)

        assert transport.calls == []

    @pytest.mark.parametrize("tag", ["OpenAI", "", None, "open ai"])
    def test_resolve_is_exact(self, tag):
        with pytest.raises(UnsupportedProvider):
            resolve_provider(tag)

    def test_resolve_accepts_enum_and_tag(self):
        assert resolve_provider(Provider.GROQ) is Provider.GROQ
        assert resolve_provider("anthropic") is Provider.ANTHROPIC

    def test_provider_dropped_after_request_is_not_parsed(self, monkeypatch):
        transport = SpyTransport()
        original = providers.resolve_provider
        calls = {"n": 0}

        def flaky_resolve(provider):
            calls["n"] += 1
            if calls["n"] > 1:
                raise UnsupportedProvider(provider)
            return original(provider)

        monkeypatch.setattr(providers, "resolve_provider", flaky_resolve)

        with pytest.raises(UnsupportedProvider):
            _invoke("openai", transport=transport)
        assert len(transport.calls) == 1


def _fail_if_called(*args, **kwargs):
    raise AssertionError("build_request must not be called")


class TestRequestShapes:

    def test_openai(self):
        transport = SpyTransport(make_response(200, {"choices": [{"message": {"content": "hi"}}]}))

        assert _invoke("openai", transport=transport) == "hi"
        call = transport.calls[0]
        assert call["url"] == "https://api.openai.com/v1/chat/completions"
        assert call["headers"]["Authorization"] == "Bearer secret-key"
        assert call["body"] == {
            "model": "gpt-3.5-turbo",
            "messages": [
                {"role": "system", "content": "system text"},
                {"role": "user", "content": "user text"},
            ],
            "temperature": 0.7,
            "max_tokens": 1000,
        }

    def test_openrouter(self):
        transport = SpyTransport(make_response(200, {"choices": [{"message": {"content": "routed"}}]}))

        assert _invoke(Provider.OPENROUTER, transport=transport) == "routed"
        call = transport.calls[0]
        assert call["url"] == "https://openrouter.ai/api/v1/chat/completions"
        assert call["headers"]["Authorization"] == "Bearer secret-key"
        assert call["body"]["model"] == "mistralai/mistral-7b-instruct:free"
        assert "temperature" not in call["body"]

    def test_groq(self):
        transport = SpyTransport(make_response(200, {"choices": [{"message": {"content": "fast"}}]}))

        assert _invoke("groq", transport=transport) == "fast"
        assert transport.calls[0]["url"] == "https://api.groq.com/openai/v1/chat/completions"

    def test_anthropic(self):
        transport = SpyTransport(make_response(200, {"content": [{"type": "text", "text": "claude says"}]}))

        assert _invoke("anthropic", transport=transport) == "claude says"
        call = transport.calls[0]
        assert call["url"] == "https://api.anthropic.com/v1/messages"
        assert call["headers"]["x-api-key"] == "secret-key"
        assert call["headers"]["anthropic-version"] == "2023-06-01"
        assert "Authorization" not in call["headers"]
        assert call["body"] == {
            "model": "claude-3-sonnet-20240229",
            "max_tokens": 1000,
            "system": "system text",
            "messages": [{"role": "user", "content": "user text"}],
        }

    def test_gemini(self):
        body = {"candidates": [{"content": {"parts": [{"text": "gemini says"}], "role": "model"}}]}
        transport = SpyTransport(make_response(200, body))

        assert _invoke("gemini", transport=transport) == "gemini says"
        call = transport.calls[0]
        assert call["url"].endswith("/models/gemini-1.5-flash:generateContent")
        assert call["headers"]["x-goog-api-key"] == "secret-key"
        assert call["body"]["system_instruction"] == {"parts": [{"text": "system text"}]}
        assert call["body"]["contents"] == [{"role": "user", "parts": [{"text": "user text"}]}]
        assert call["body"]["generationConfig"]["maxOutputTokens"] == 1000

    def test_model_comes_from_settings(self):
        transport = SpyTransport()
        cfg = Settings(OPENAI_MODEL_NAME="gpt-4o-mini")

        asyncio.run(invoke_provider("openai", "k", "s", "u", transport=transport, cfg=cfg))

        assert transport.calls[0]["body"]["model"] == "gpt-4o-mini"


class TestResponses:

    def test_upstream_error_carries_status(self):
        transport = SpyTransport(make_response(401, b"<html>denied</html>", status_text="Unauthorized"))

        with pytest.raises(UpstreamError) as exc_info:
            _invoke("openai", transport=transport)

        assert exc_info.value.status_code == 401
        assert exc_info.value.status_text == "Unauthorized"
        assert str(exc_info.value) == "API Error: 401 Unauthorized"

    def test_non_json_success_is_malformed(self):
        transport = SpyTransport(make_response(200, b"not json"))

        with pytest.raises(MalformedResponse):
            _invoke("openai", transport=transport)

    @pytest.mark.parametrize("provider,body", [
        ("openai", {}),
        ("openai", {"choices": []}),
        ("openai", {"choices": [{"message": {"content": None}}]}),
        ("anthropic", {"content": []}),
        ("anthropic", {"choices": [{"message": {"content": "wrong schema"}}]}),
        ("gemini", {"candidates": [{"content": {}}]}),
        ("openrouter", ["unexpected", "list"]),
    ])
    def test_missing_text_field_is_malformed(self, provider, body):
        transport = SpyTransport(make_response(200, body))

        with pytest.raises(MalformedResponse):
            _invoke(provider, transport=transport)


def test_extract_text_walks_keys_and_indexes():
    body = {"a": [{"b": "found"}]}

    assert extract_text(body, ("a", 0, "b")) == "found"
    with pytest.raises(MalformedResponse, match=r"a\[1\]\.b"):
        extract_text(body, ("a", 1, "b"))
