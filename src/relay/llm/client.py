"""Client interface and shared helpers for chat-completion access."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

import httpx

from relay.llm.types import ChatRequest, ChatResponse


@runtime_checkable
class ModelClient(Protocol):
    model: str

    async def create_chat_completion(self, request: ChatRequest) -> ChatResponse:
        """Translate, invoke and translate back a single chat completion."""

    async def aclose(self) -> None:
        """Release any underlying client resources."""


@dataclass
class ProviderError(RuntimeError):
    provider: str
    status_code: int
    response_text: str
    request_id: str | None
    request: dict[str, Any]

    def __str__(self) -> str:
        return f"ProviderError(provider={self.provider}, status={self.status_code}, request_id={self.request_id})"


def create_client(mode: str, **kwargs: Any) -> ModelClient:
    if mode == "anthropic":
        from relay.llm.anthropic import AnthropicClient

        return AnthropicClient(**kwargs)
    if mode == "openai":
        from relay.llm.openai_compat import OpenAICompatibleClient

        return OpenAICompatibleClient(**kwargs)
    if mode == "mock":
        from relay.llm.mock import MockClient

        return MockClient(**kwargs)
    raise ValueError(f"Unsupported LLM mode: {mode}")


def raise_for_provider_status(
    provider: str,
    response: httpx.Response,
    *,
    body: dict[str, Any],
    headers: dict[str, str],
) -> None:
    if 200 <= response.status_code < 300:
        return
    raise ProviderError(
        provider=provider,
        status_code=response.status_code,
        response_text=response.text,
        request_id=extract_request_id(response.headers),
        request=sanitize_request(body, headers),
    )


def extract_request_id(headers: httpx.Headers) -> str | None:
    return headers.get("request-id") or headers.get("x-request-id")


_SECRET_HEADERS = {"authorization", "x-api-key"}


def sanitize_request(body: dict[str, Any], headers: dict[str, str]) -> dict[str, Any]:
    scrubbed_headers = {key: value for key, value in headers.items() if key.lower() not in _SECRET_HEADERS}
    return {
        "body": body,
        "headers": scrubbed_headers,
    }
