"""Anthropic messages API client speaking the OpenAI chat-completion contract."""

from __future__ import annotations

import logging
import os
from typing import Any

import httpx

from relay.llm.client import raise_for_provider_status
from relay.llm.translate import build_messages_body, translate_message_reply
from relay.llm.types import ChatRequest, ChatResponse

logger = logging.getLogger(__name__)

ANTHROPIC_VERSION = "2023-06-01"
# Local proxies in front of the messages API ignore the key but the header must be present.
PLACEHOLDER_API_KEY = "sk-dummy"


class AnthropicClient:
    def __init__(
        self,
        *,
        model: str,
        base_url: str | None = None,
        api_key: str | None = None,
        timeout_s: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not model:
            raise ValueError("A model name is required for AnthropicClient.")
        self.model = model
        self._api_key = api_key or os.environ.get("ANTHROPIC_API_KEY") or PLACEHOLDER_API_KEY
        self._base_url = base_url or os.environ.get("ANTHROPIC_BASE_URL", "https://api.anthropic.com")
        self._client = httpx.AsyncClient(base_url=self._base_url, timeout=timeout_s, transport=transport)

    @property
    def base_url(self) -> str:
        return self._base_url

    def build_body(self, request: ChatRequest) -> dict[str, Any]:
        return build_messages_body(request, model=self.model)

    async def create_chat_completion(self, request: ChatRequest) -> ChatResponse:
        body = self.build_body(request)
        headers = {
            "x-api-key": self._api_key,
            "anthropic-version": ANTHROPIC_VERSION,
            "content-type": "application/json",
        }
        structured = request.response_model is not None
        logger.debug(
            "POST /v1/messages model=%s tools=%d structured=%s",
            self.model,
            len(body.get("tools", [])),
            structured,
        )

        response = await self._client.post("/v1/messages", json=body, headers=headers)
        raise_for_provider_status("anthropic", response, body=body, headers=headers)
        return translate_message_reply(response.json(), structured=structured)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "AnthropicClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()
