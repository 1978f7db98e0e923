from __future__ import annotations

from typing import Any, Callable

import httpx
import pytest


@pytest.fixture
def anthropic_reply() -> Callable[..., dict[str, Any]]:
    def _build(
        content: list[dict[str, Any]],
        *,
        stop_reason: str | None = "end_turn",
        input_tokens: int = 12,
        output_tokens: int = 5,
        **extra_usage: Any,
    ) -> dict[str, Any]:
        return {
            "id": "msg_01",
            "type": "message",
            "role": "assistant",
            "model": "claude-sonnet-4-20250514",
            "content": content,
            "stop_reason": stop_reason,
            "usage": {"input_tokens": input_tokens, "output_tokens": output_tokens, **extra_usage},
        }

    return _build


@pytest.fixture
def recording_transport() -> Callable[..., tuple[httpx.MockTransport, list[httpx.Request]]]:
    def _build(payload: dict[str, Any], *, status_code: int = 200) -> tuple[httpx.MockTransport, list[httpx.Request]]:
        captured: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            captured.append(request)
            return httpx.Response(status_code, json=payload, headers={"request-id": "req_123"})

        return httpx.MockTransport(handler), captured

    return _build
