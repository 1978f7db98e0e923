"""Mock client for offline testing."""

from __future__ import annotations

import hashlib
from typing import Any

from relay.llm.translate import build_messages_body, translate_message_reply
from relay.llm.types import ChatRequest, ChatResponse


class MockClient:
    """Answers every request with a canned Anthropic-shaped reply.

    ``content`` replaces the generated reply blocks; otherwise the client echoes
    the last user text, or emits an empty structured payload when a response
    model was requested. Requests still go through the full body translation so
    ``last_body`` reflects what would have been sent.
    """

    def __init__(self, *, model: str = "mock-model", content: list[dict[str, Any]] | None = None, **_: Any) -> None:
        self.model = model
        self._content = content
        self.last_body: dict[str, Any] | None = None

    async def create_chat_completion(self, request: ChatRequest) -> ChatResponse:
        body = build_messages_body(request, model=self.model)
        self.last_body = body
        structured = request.response_model is not None
        payload = {
            "id": f"msg_mock_{_stable_digest(body)[:16]}",
            "type": "message",
            "role": "assistant",
            "model": self.model,
            "content": self._content if self._content is not None else _mock_content(body, structured),
            "stop_reason": "tool_use" if structured else "end_turn",
            "usage": _mock_usage(body),
        }
        return translate_message_reply(payload, structured=structured)

    async def aclose(self) -> None:
        return


def _mock_content(body: dict[str, Any], structured: bool) -> list[dict[str, Any]]:
    if structured:
        tool = body["tools"][0]
        return [
            {
                "type": "tool_use",
                "id": f"toolu_mock_{_stable_digest(body)[:12]}",
                "name": tool["name"],
                "input": {"elements": []},
            }
        ]
    return [{"type": "text", "text": f"Mock reply from {body['model']}: {_last_user_text(body)}"}]


def _last_user_text(body: dict[str, Any]) -> str:
    for message in reversed(body["messages"]):
        if message.get("role") != "user":
            continue
        content = message.get("content")
        if isinstance(content, str):
            return content
        return " ".join(block.get("text", "") for block in content if block.get("type") == "text").strip()
    return ""


def _stable_digest(body: dict[str, Any]) -> str:
    hasher = hashlib.sha256()
    hasher.update(str(body.get("model")).encode("utf-8"))
    for message in body.get("messages", []):
        hasher.update(str(message).encode("utf-8"))
    return hasher.hexdigest()


def _mock_usage(body: dict[str, Any]) -> dict[str, int]:
    prompt_text = " ".join(str(message) for message in body.get("messages", []))
    return {
        "input_tokens": max(1, len(prompt_text) // 4),
        "output_tokens": 8,
    }
