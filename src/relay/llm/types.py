"""Core request/response types for chat-completion clients."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class ToolDefinition:
    name: str
    description: str = ""
    parameters: dict[str, Any] | None = None

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "ToolDefinition":
        # Accept both the flat shape and OpenAI's {"type": "function", "function": {...}} wrapper.
        function = payload.get("function") if isinstance(payload.get("function"), dict) else payload
        return cls(
            name=str(function.get("name", "")),
            description=str(function.get("description") or ""),
            parameters=function.get("parameters"),
        )

    def to_openai(self) -> dict[str, Any]:
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters or {"type": "object", "properties": {}},
            },
        }


@dataclass
class ResponseModel:
    """Request that the reply conform to ``schema`` instead of free text."""

    schema: Any
    name: str | None = None

    def json_schema(self) -> dict[str, Any]:
        builder = getattr(self.schema, "model_json_schema", None)
        if callable(builder):
            return builder()
        if isinstance(self.schema, dict):
            return self.schema
        return {}


@dataclass
class ChatRequest:
    messages: list[dict[str, Any]]
    temperature: float | None = None
    top_p: float | None = None
    max_tokens: int | None = None
    tools: list[ToolDefinition] | None = None
    tool_choice: dict[str, Any] | str | None = None
    response_model: ResponseModel | None = None


@dataclass
class ToolCallRecord:
    id: str
    name: str
    arguments: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": "function",
            "function": {
                "name": self.name,
                "arguments": self.arguments,
            },
        }


@dataclass
class Usage:
    prompt_tokens: int = 0
    completion_tokens: int = 0

    @property
    def total_tokens(self) -> int:
        return self.prompt_tokens + self.completion_tokens

    def to_dict(self) -> dict[str, int]:
        return {
            "prompt_tokens": self.prompt_tokens,
            "completion_tokens": self.completion_tokens,
            "total_tokens": self.total_tokens,
        }


@dataclass
class ChatResponse:
    id: str
    model: str
    created: int
    content: str = ""
    tool_calls: list[ToolCallRecord] = field(default_factory=list)
    finish_reason: str = "stop"
    usage: Usage = field(default_factory=Usage)
    data: Any = None
    raw: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "id": self.id,
            "object": "chat.completion",
            "created": self.created,
            "model": self.model,
            "choices": [
                {
                    "index": 0,
                    "message": {
                        "role": "assistant",
                        "content": self.content,
                        "tool_calls": [call.to_dict() for call in self.tool_calls],
                    },
                    "finish_reason": self.finish_reason,
                }
            ],
            "usage": self.usage.to_dict(),
        }
        if self.data is not None:
            payload["data"] = self.data
        return payload
