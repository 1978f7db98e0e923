"""OpenAI-compatible backend (OpenAI, Ollama, vLLM, ...) behind the same client contract."""

from __future__ import annotations

import json
import logging
import os
import time
from typing import Any
import uuid

import httpx

from relay.llm.client import raise_for_provider_status
from relay.llm.translate import (
    DEFAULT_STRUCTURED_TOOL_NAME,
    empty_structured_result,
    normalize_structured_data,
)
from relay.llm.types import ChatRequest, ChatResponse, ToolCallRecord, Usage

logger = logging.getLogger(__name__)


class OpenAICompatibleClient:
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
            raise ValueError("A model name is required for OpenAICompatibleClient.")
        resolved_key = api_key or os.environ.get("OPENAI_API_KEY")
        if not resolved_key:
            raise ValueError("OPENAI_API_KEY is required for OpenAICompatibleClient.")
        self.model = model
        self._api_key = resolved_key
        self._base_url = base_url or os.environ.get("OPENAI_BASE_URL", "https://api.openai.com/v1")
        self._client = httpx.AsyncClient(base_url=self._base_url, timeout=timeout_s, transport=transport)

    @property
    def base_url(self) -> str:
        return self._base_url

    def build_body(self, request: ChatRequest) -> dict[str, Any]:
        body: dict[str, Any] = {
            "model": self.model,
            "messages": request.messages,
        }

        def add_optional(key: str, value: Any) -> None:
            if value is not None:
                body[key] = value

        add_optional("temperature", request.temperature)
        add_optional("top_p", request.top_p)
        add_optional("max_tokens", request.max_tokens)

        if request.response_model is not None:
            body["response_format"] = {
                "type": "json_schema",
                "json_schema": {
                    "name": request.response_model.name or DEFAULT_STRUCTURED_TOOL_NAME,
                    "schema": request.response_model.json_schema(),
                },
            }
        elif request.tools:
            body["tools"] = [tool.to_openai() for tool in request.tools]
            add_optional("tool_choice", request.tool_choice)
        return body

    async def create_chat_completion(self, request: ChatRequest) -> ChatResponse:
        body = self.build_body(request)
        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }
        logger.debug(
            "POST /chat/completions model=%s tools=%d structured=%s",
            self.model,
            len(body.get("tools", [])),
            "response_format" in body,
        )

        response = await self._client.post("/chat/completions", json=body, headers=headers)
        raise_for_provider_status("openai", response, body=body, headers=headers)
        return _translate_completion(response.json(), structured=request.response_model is not None)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "OpenAICompatibleClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()


def _translate_completion(payload: dict[str, Any], *, structured: bool) -> ChatResponse:
    choices = payload.get("choices") or []
    choice = choices[0] if choices else {}
    message = choice.get("message") or {}
    content = message.get("content")
    text = content if isinstance(content, str) else ""

    tool_calls = []
    for call in message.get("tool_calls") or []:
        function = call.get("function") or {}
        arguments = function.get("arguments")
        if not isinstance(arguments, str):
            arguments = json.dumps(arguments or {})
        tool_calls.append(
            ToolCallRecord(
                id=str(call.get("id") or f"call_{uuid.uuid4().hex[:24]}"),
                name=str(function.get("name") or ""),
                arguments=arguments,
            )
        )

    usage = payload.get("usage") or {}
    response = ChatResponse(
        id=str(payload.get("id") or f"chatcmpl_{uuid.uuid4().hex}"),
        model=str(payload.get("model") or ""),
        created=int(payload.get("created") or time.time()),
        content=text,
        tool_calls=tool_calls,
        finish_reason=choice.get("finish_reason") or "stop",
        usage=Usage(
            prompt_tokens=int(usage.get("prompt_tokens") or 0),
            completion_tokens=int(usage.get("completion_tokens") or 0),
        ),
        raw=payload,
    )
    if structured:
        response.data = _parse_structured_content(text, response.id)
    return response


def _parse_structured_content(text: str, response_id: str) -> Any:
    if not text.strip():
        logger.debug("Structured output requested but reply %s has no content", response_id)
        return empty_structured_result()
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        logger.debug("Structured output requested but reply %s is not valid JSON", response_id)
        return empty_structured_result()
    if data is None or data == {}:
        logger.debug("Structured output requested but reply %s decoded to an empty payload", response_id)
        return empty_structured_result()
    return normalize_structured_data(data)
