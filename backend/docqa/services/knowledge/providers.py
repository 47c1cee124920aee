# backend/docqa/services/knowledge/providers.py
"""
Provider gateway: one table entry per LLM backend.

Each adapter knows two things about its provider: how to turn a
(system prompt, user prompt) pair into an HTTP request, and where the generated
text sits in the response body. Nothing outside this module knows which
provider is in use.

Adding a provider means adding a Provider member and an entry in
PROVIDER_ADAPTERS; call sites do not change.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Protocol, Sequence, Union

from docqa.core.config import Settings, settings
from docqa.core.exceptions import MalformedResponse, MissingCredential, UnsupportedProvider, UpstreamError
from docqa.core.logger import get_logger
from docqa.services.knowledge.transport import HttpxTransport, Transport

log = get_logger(__name__)


class Provider(str, Enum):
    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    OPENROUTER = "openrouter"
    GROQ = "groq"
    GEMINI = "gemini"


@dataclass(frozen=True)
class ProviderRequest:
    url: str
    headers: Dict[str, str]
    body: Dict[str, Any] = field(default_factory=dict)


class ProviderAdapter(Protocol):
    def build_request(self, api_key: str, system_prompt: str, user_prompt: str, cfg: Settings) -> ProviderRequest:
        ...

    def parse_response(self, body: Any) -> str:
        ...


def extract_text(body: Any, path: Sequence[Union[str, int]]) -> str:
    """Walks a parsed JSON body along path; anything missing is a MalformedResponse."""
    node = body
    for key in path:
        try:
            node = node[key]
        except (KeyError, IndexError, TypeError) as e:
            raise MalformedResponse(f"Response is missing '{_format_path(path)}'") from e
    if not isinstance(node, str):
        raise MalformedResponse(f"Expected text at '{_format_path(path)}', got {type(node).__name__}")
    return node


def _format_path(path: Sequence[Union[str, int]]) -> str:
    return "".join(f"[{p}]" if isinstance(p, int) else f".{p}" for p in path).lstrip(".")


# =============================================================================
# Adapters
# =============================================================================


class OpenAIChatAdapter:
    """
    OpenAI chat-completions format, shared by OpenAI-compatible APIs.

    Request:  {"model": ..., "messages": [{"role": "system", ...}, {"role": "user", ...}]}
    Response: choices[0].message.content
    """

    content_path = ("choices", 0, "message", "content")

    def __init__(self, url: str, model_setting: str, send_sampling: bool = True):
        self.url = url
        self.model_setting = model_setting
        self.send_sampling = send_sampling

    def build_request(self, api_key: str, system_prompt: str, user_prompt: str, cfg: Settings) -> ProviderRequest:
        body: Dict[str, Any] = {
            "model": getattr(cfg, self.model_setting),
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
        }
        if self.send_sampling:
            body["temperature"] = cfg.LLM_TEMPERATURE
            body["max_tokens"] = cfg.LLM_MAX_TOKENS
        headers = {"Authorization": f"Bearer {api_key}", "Content-Type": "application/json"}
        return ProviderRequest(url=self.url, headers=headers, body=body)

    def parse_response(self, body: Any) -> str:
        return extract_text(body, self.content_path)


class AnthropicMessagesAdapter:
    """
    Anthropic Messages API.

    The system prompt goes in the top-level "system" field; the user prompt is
    the only message. Response text is content[0].text.
    """

    url = "https://api.anthropic.com/v1/messages"
    content_path = ("content", 0, "text")

    def build_request(self, api_key: str, system_prompt: str, user_prompt: str, cfg: Settings) -> ProviderRequest:
        headers = {
            "x-api-key": api_key,
            "Content-Type": "application/json",
            "anthropic-version": cfg.ANTHROPIC_API_VERSION,
        }
        body = {
            "model": cfg.ANTHROPIC_MODEL_NAME,
            "max_tokens": cfg.LLM_MAX_TOKENS,
            "system": system_prompt,
            "messages": [{"role": "user", "content": user_prompt}],
        }
        return ProviderRequest(url=self.url, headers=headers, body=body)

    def parse_response(self, body: Any) -> str:
        return extract_text(body, self.content_path)


class GeminiAdapter:
    """
    Google Gemini generateContent API.

    Uses system_instruction plus a single user turn made of text parts.
    Response text is candidates[0].content.parts[0].text.
    """

    base_url = "https://generativelanguage.googleapis.com/v1beta/models"
    content_path = ("candidates", 0, "content", "parts", 0, "text")

    def build_request(self, api_key: str, system_prompt: str, user_prompt: str, cfg: Settings) -> ProviderRequest:
        headers = {"x-goog-api-key": api_key, "Content-Type": "application/json"}
        body = {
            "system_instruction": {"parts": [{"text": system_prompt}]},
            "contents": [{"role": "user", "parts": [{"text": user_prompt}]}],
            "generationConfig": {
                "temperature": cfg.LLM_TEMPERATURE,
                "maxOutputTokens": cfg.LLM_MAX_TOKENS,
            },
        }
        url = f"{self.base_url}/{cfg.GEMINI_MODEL_NAME}:generateContent"
        return ProviderRequest(url=url, headers=headers, body=body)

    def parse_response(self, body: Any) -> str:
        return extract_text(body, self.content_path)


PROVIDER_ADAPTERS: Dict[Provider, ProviderAdapter] = {
    Provider.OPENAI: OpenAIChatAdapter("https://api.openai.com/v1/chat/completions", "OPENAI_MODEL_NAME"),
    Provider.ANTHROPIC: AnthropicMessagesAdapter(),
    Provider.OPENROUTER: OpenAIChatAdapter(
        "https://openrouter.ai/api/v1/chat/completions", "OPENROUTER_MODEL_NAME", send_sampling=False
    ),
    Provider.GROQ: OpenAIChatAdapter("https://api.groq.com/openai/v1/chat/completions", "GROQ_MODEL_NAME"),
    Provider.GEMINI: GeminiAdapter(),
}


def supported_providers() -> list:
    return [p.value for p in Provider]


def resolve_provider(provider: Union[Provider, str, None]) -> Provider:
    """Maps a provider tag onto the closed Provider set."""
    try:
        resolved = Provider(provider)
    except ValueError:
        raise UnsupportedProvider(provider) from None
    if resolved not in PROVIDER_ADAPTERS:
        raise UnsupportedProvider(provider)
    return resolved


def require_credential(api_key: Optional[str]) -> str:
    if not api_key:
        raise MissingCredential()
    return api_key


# =============================================================================
# Gateway
# =============================================================================


async def invoke_provider(
    provider: Union[Provider, str],
    api_key: Optional[str],
    system_prompt: str,
    user_prompt: str,
    transport: Optional[Transport] = None,
    cfg: Optional[Settings] = None,
) -> str:
    """
    Sends one prompt to one provider and returns the generated text.

    Single attempt, no retries. Raises MissingCredential, UnsupportedProvider,
    UpstreamError or MalformedResponse.
    """
    api_key = require_credential(api_key)
    resolved = resolve_provider(provider)
    cfg = cfg or settings
    transport = transport or HttpxTransport(timeout=cfg.LLM_REQUEST_TIMEOUT)

    request = PROVIDER_ADAPTERS[resolved].build_request(api_key, system_prompt, user_prompt, cfg)
    log.info(f"[LLM Gateway] Calling '{resolved.value}' (prompt length: {len(system_prompt) + len(user_prompt)} chars)")
    response = await transport.post(request.url, request.headers, request.body)

    if not response.ok:
        log.warning(f"[LLM Gateway] '{resolved.value}' returned {response.status_code} {response.status_text}")
        raise UpstreamError(response.status_code, response.status_text)

    # Resolve again before choosing a parser: never fall through to another provider's schema.
    parser = PROVIDER_ADAPTERS.get(resolve_provider(resolved))
    if parser is None:
        raise UnsupportedProvider(provider)

    try:
        body = response.json()
    except ValueError as e:
        raise MalformedResponse(f"Response from '{resolved.value}' is not valid JSON") from e

    answer = parser.parse_response(body)
    log.info(f"[LLM Gateway] '{resolved.value}' answered ({len(answer)} chars)")
    return answer
