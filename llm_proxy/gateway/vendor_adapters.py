"""Vendor-Specific Adapters: protocol-level handling for each LLM provider.

Each adapter translates a ChatRequest into the provider's HTTP protocol,
sends it, and returns a ChatResponse. Model listings are mapped to
ModelDescriptors sorted by id.

Vendor-specific behaviors:
  - OpenAI: chat completions; gpt-5 models reject ``temperature``
  - Anthropic: system prompt as a top-level field, fixed max_tokens/temperature
  - Gemini: generateContent, ``model`` role, systemInstruction, key as query param

Non-success upstream responses raise UpstreamError carrying the raw status
and body so the HTTP layer can pass them through unchanged.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

import httpx

from llm_proxy.core.exceptions import UpstreamError
from llm_proxy.gateway import normalizer
from llm_proxy.gateway.types import ChatRequest, ChatResponse, ModelDescriptor, Provider

logger = logging.getLogger(__name__)

DEFAULT_TEMPERATURE = 0.2


class BaseVendorAdapter(ABC):
    """Base class for all vendor adapters."""

    provider: Provider
    api_key_setting: str

    def __init__(self, api_key: str, timeout: float = 60.0, **kwargs):
        self.api_key = api_key
        self.timeout = timeout

    @abstractmethod
    async def list_models(self) -> list[ModelDescriptor]:
        """Return the provider's models sorted ascending by id."""
        ...

    @abstractmethod
    async def complete(self, request: ChatRequest) -> ChatResponse:
        """Send a chat request and return the assistant reply."""
        ...

    def _headers(self) -> dict[str, str]:
        return {}

    async def _request(self, method: str, url: str, **kwargs) -> dict:
        """Perform a single upstream call; non-2xx raises UpstreamError."""
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            resp = await client.request(method, url, headers=self._headers(), **kwargs)

        if not resp.is_success:
            logger.warning("%s %s responded %d", self.provider.value, method, resp.status_code)
            raise UpstreamError(resp.status_code, resp.content, resp.headers.get("content-type"))

        return resp.json()


# ---------------------------------------------------------------------------
# OpenAI Adapter
# ---------------------------------------------------------------------------

# Newer-generation models reject a temperature parameter
_NO_TEMPERATURE_PREFIXES = ("gpt-5",)


def _accepts_temperature(model: str) -> bool:
    return not model.startswith(_NO_TEMPERATURE_PREFIXES)


class OpenAIAdapter(BaseVendorAdapter):
    """OpenAI Chat Completions adapter."""

    provider = Provider.OPENAI
    api_key_setting = "openai_api_key"
    models_url = "https://api.openai.com/v1/models"
    api_url = "https://api.openai.com/v1/chat/completions"

    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.api_key}"}

    async def list_models(self) -> list[ModelDescriptor]:
        data = await self._request("GET", self.models_url)
        return normalizer.sorted_models([m["id"] for m in data.get("data") or []])

    async def complete(self, request: ChatRequest) -> ChatResponse:
        payload = {
            "model": request.model,
            "messages": normalizer.to_openai_messages(request.messages),
        }
        if _accepts_temperature(request.model):
            payload["temperature"] = (
                request.temperature if request.temperature is not None else DEFAULT_TEMPERATURE
            )

        data = await self._request("POST", self.api_url, json=payload)
        return ChatResponse(content=normalizer.openai_reply_text(data))


# ---------------------------------------------------------------------------
# Anthropic Adapter
# ---------------------------------------------------------------------------

ANTHROPIC_MAX_TOKENS = 800


class AnthropicAdapter(BaseVendorAdapter):
    """Anthropic Messages API adapter."""

    provider = Provider.ANTHROPIC
    api_key_setting = "anthropic_api_key"
    models_url = "https://api.anthropic.com/v1/models"
    api_url = "https://api.anthropic.com/v1/messages"

    def __init__(self, api_key: str, timeout: float = 60.0, anthropic_version: str = "2023-06-01", **kwargs):
        super().__init__(api_key, timeout=timeout)
        self.anthropic_version = anthropic_version

    def _headers(self) -> dict[str, str]:
        return {"x-api-key": self.api_key, "anthropic-version": self.anthropic_version}

    async def list_models(self) -> list[ModelDescriptor]:
        data = await self._request("GET", self.models_url)
        return normalizer.sorted_models([m["id"] for m in data.get("data") or []])

    async def complete(self, request: ChatRequest) -> ChatResponse:
        # Request temperature is ignored for this provider
        payload = {
            "model": request.model,
            "messages": normalizer.to_anthropic_messages(request),
            "max_tokens": ANTHROPIC_MAX_TOKENS,
            "temperature": DEFAULT_TEMPERATURE,
        }
        system = request.system_prompt
        if system:
            payload["system"] = system

        data = await self._request("POST", self.api_url, json=payload)
        return ChatResponse(content=normalizer.anthropic_reply_text(data))


# ---------------------------------------------------------------------------
# Gemini Adapter
# ---------------------------------------------------------------------------


class GeminiAdapter(BaseVendorAdapter):
    """Google Gemini generateContent adapter."""

    provider = Provider.GEMINI
    api_key_setting = "gemini_api_key"
    base_url = "https://generativelanguage.googleapis.com/v1beta"

    @staticmethod
    def _resource_name(model: str) -> str:
        """Model ids from the listing are already "models/..."; bare names get qualified."""
        return model if model.startswith("models/") else f"models/{model}"

    async def list_models(self) -> list[ModelDescriptor]:
        data = await self._request("GET", f"{self.base_url}/models", params={"key": self.api_key})
        return normalizer.sorted_models([m["name"] for m in data.get("models") or []])

    async def complete(self, request: ChatRequest) -> ChatResponse:
        url = f"{self.base_url}/{self._resource_name(request.model)}:generateContent"

        payload = {
            "contents": normalizer.to_gemini_contents(request),
            "generationConfig": {"temperature": DEFAULT_TEMPERATURE},
        }

        # System instruction (separate from contents in Gemini API)
        system = request.system_prompt
        if system:
            payload["systemInstruction"] = {"parts": [{"text": system}]}

        data = await self._request("POST", url, json=payload, params={"key": self.api_key})
        return ChatResponse(content=normalizer.gemini_reply_text(data))


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

ADAPTER_REGISTRY: dict[Provider, type[BaseVendorAdapter]] = {
    Provider.OPENAI: OpenAIAdapter,
    Provider.ANTHROPIC: AnthropicAdapter,
    Provider.GEMINI: GeminiAdapter,
}


def get_adapter(provider: Provider, api_key: str, **kwargs) -> BaseVendorAdapter:
    """Factory: get the appropriate adapter for a provider."""
    return ADAPTER_REGISTRY[provider](api_key=api_key, **kwargs)


def adapter_for(provider: Provider, settings) -> BaseVendorAdapter:
    """Build an adapter with its credential read from settings.

    Raises ConfigurationError before any network call if the credential is missing.
    """
    cls = ADAPTER_REGISTRY[provider]
    return get_adapter(
        provider,
        settings.require(cls.api_key_setting),
        timeout=settings.upstream_timeout,
        anthropic_version=settings.anthropic_version,
    )
