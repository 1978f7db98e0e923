"""Translation between OpenAI-shaped chat requests and Anthropic messages payloads."""

from __future__ import annotations

import json
import logging
import re
import time
from typing import Any
import uuid

from relay.llm.types import ChatRequest, ChatResponse, ResponseModel, ToolCallRecord, ToolDefinition, Usage

logger = logging.getLogger(__name__)

DEFAULT_MAX_TOKENS = 1024
DEFAULT_STRUCTURED_TOOL_NAME = "structured_output"
STRUCTURED_TOOL_DESCRIPTION = "Extract structured data according to the schema"
IMAGE_MEDIA_TYPE = "image/jpeg"

_DATA_URI_PREFIX = re.compile(r"^data:image/[a-z]+;base64,")
_BARE_INTEGER = re.compile(r"[0-9]+")
_LOCAL_REF = re.compile(r"^#/(?:\$defs|definitions)/([^/]+)$")
_SYSTEM_ROLES = {"system", "developer"}


def empty_structured_result() -> dict[str, Any]:
    return {"elements": []}


def build_messages_body(request: ChatRequest, *, model: str) -> dict[str, Any]:
    """Build the Anthropic ``/v1/messages`` body for ``request``."""
    body: dict[str, Any] = {
        "model": model,
        "max_tokens": request.max_tokens or DEFAULT_MAX_TOKENS,
        "messages": translate_messages(request.messages),
    }

    def add_optional(key: str, value: Any) -> None:
        if value is not None:
            body[key] = value

    add_optional("system", extract_system_prompt(request.messages))
    add_optional("temperature", request.temperature)
    add_optional("top_p", request.top_p)

    tool_choice = request.tool_choice
    if request.response_model is not None:
        tools = [structured_output_tool(request.response_model)]
        tool_choice = "required"
    elif request.tools:
        tools = [translate_tool(tool) for tool in request.tools]
    else:
        tools = None

    if tools:
        body["tools"] = tools
        add_optional("tool_choice", translate_tool_choice(tool_choice))
    return body


def extract_system_prompt(messages: list[dict[str, Any]]) -> str | None:
    for message in messages:
        if message.get("role") in _SYSTEM_ROLES:
            content = message.get("content")
            return content if isinstance(content, str) else None
    return None


def translate_messages(messages: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Map chat messages onto the vendor's two conversational roles.

    System and developer messages are lifted out by ``extract_system_prompt``.
    Tool results and any other role are sent as user turns.
    """
    translated: list[dict[str, Any]] = []
    for message in messages:
        role = message.get("role")
        if role in _SYSTEM_ROLES:
            continue
        content = message.get("content")
        if not isinstance(content, str):
            content = [translate_content_part(part) for part in content or []]
        translated.append({"role": "assistant" if role == "assistant" else "user", "content": content})
    return translated


def translate_content_part(part: Any) -> dict[str, Any]:
    if not isinstance(part, dict):
        return {"type": "text", "text": ""}
    text = part.get("text")
    if text:
        return {"type": "text", "text": text}
    image_url = part.get("image_url")
    url = image_url.get("url") if isinstance(image_url, dict) else image_url
    if isinstance(url, str) and url:
        return {
            "type": "image",
            "source": {
                "type": "base64",
                "media_type": IMAGE_MEDIA_TYPE,
                "data": _DATA_URI_PREFIX.sub("", url, count=1),
            },
        }
    return {"type": "text", "text": ""}


def _object_schema(properties: Any, required: Any) -> dict[str, Any]:
    return {
        "type": "object",
        "properties": properties or {},
        "required": required or [],
        "additionalProperties": False,
    }


def inline_schema_refs(schema: dict[str, Any]) -> dict[str, Any]:
    """Replace local ``#/$defs/...`` and ``#/definitions/...`` refs with their targets.

    Self-referencing definitions keep their innermost ``$ref`` since they cannot
    be expanded.
    """
    definitions = {
        **(schema.get("definitions") or {}),
        **(schema.get("$defs") or {}),
    }

    def resolve(node: Any, active: frozenset[str]) -> Any:
        if isinstance(node, list):
            return [resolve(item, active) for item in node]
        if not isinstance(node, dict):
            return node
        ref = node.get("$ref")
        if isinstance(ref, str):
            match = _LOCAL_REF.match(ref)
            if match and match.group(1) in definitions and match.group(1) not in active:
                name = match.group(1)
                siblings = {key: value for key, value in node.items() if key != "$ref"}
                target = resolve(definitions[name], active | {name})
                return {**target, **resolve(siblings, active)}
        return {
            key: resolve(value, active)
            for key, value in node.items()
            if key not in {"$defs", "definitions"}
        }

    return resolve(schema, frozenset())


def translate_tool(tool: ToolDefinition) -> dict[str, Any]:
    parameters = inline_schema_refs(tool.parameters or {})
    return {
        "name": tool.name,
        "description": tool.description,
        "input_schema": _object_schema(parameters.get("properties"), parameters.get("required")),
    }


def structured_output_tool(response_model: ResponseModel) -> dict[str, Any]:
    schema = inline_schema_refs(response_model.json_schema())
    return {
        "name": response_model.name or DEFAULT_STRUCTURED_TOOL_NAME,
        "description": STRUCTURED_TOOL_DESCRIPTION,
        "input_schema": _object_schema(schema.get("properties"), schema.get("required")),
    }


def translate_tool_choice(tool_choice: dict[str, Any] | str | None) -> dict[str, Any] | None:
    if not tool_choice:
        return None
    if isinstance(tool_choice, dict):
        function = tool_choice.get("function")
        if tool_choice.get("type") == "function" and isinstance(function, dict):
            return {"type": "tool", "name": function.get("name")}
        return tool_choice
    if tool_choice == "required":
        return {"type": "any"}
    return {"type": tool_choice}


def normalize_element_id(element_id: Any) -> Any:
    """Rewrite ``"<n>-<m>"`` ids with a non-zero leading integer to ``"0-<m>"``.

    Only the exact two-segment, bare-integer form is touched; every other id is
    returned unchanged.
    """
    if not isinstance(element_id, str):
        return element_id
    segments = element_id.split("-")
    if len(segments) != 2:
        return element_id
    head, tail = segments
    if not _BARE_INTEGER.fullmatch(head) or int(head) == 0:
        return element_id
    return f"0-{tail}"


def normalize_structured_data(data: Any) -> Any:
    if not isinstance(data, dict):
        return data
    elements = data.get("elements")
    if not isinstance(elements, list):
        return data
    normalized: list[Any] = []
    for element in elements:
        if isinstance(element, dict) and "elementId" in element:
            element = {**element, "elementId": normalize_element_id(element["elementId"])}
        normalized.append(element)
    return {**data, "elements": normalized}


def translate_usage(usage: dict[str, Any] | None) -> Usage:
    usage = usage or {}
    return Usage(
        prompt_tokens=int(usage.get("input_tokens") or 0),
        completion_tokens=int(usage.get("output_tokens") or 0),
    )


def _tool_use_blocks(content: list[dict[str, Any]]) -> list[dict[str, Any]]:
    return [block for block in content if isinstance(block, dict) and block.get("type") == "tool_use"]


def translate_message_reply(payload: dict[str, Any], *, structured: bool = False) -> ChatResponse:
    """Convert an Anthropic message reply into an OpenAI-shaped ChatResponse."""
    content = payload.get("content") or []
    tool_blocks = _tool_use_blocks(content)
    text = "".join(
        str(block.get("text") or "")
        for block in content
        if isinstance(block, dict) and block.get("type") == "text"
    )
    response = ChatResponse(
        id=str(payload.get("id") or f"msg_{uuid.uuid4().hex}"),
        model=str(payload.get("model") or ""),
        created=int(time.time()),
        content=text,
        tool_calls=[
            ToolCallRecord(
                id=str(block.get("id") or f"call_{uuid.uuid4().hex[:24]}"),
                name=str(block.get("name") or ""),
                arguments=json.dumps(block.get("input") or {}),
            )
            for block in tool_blocks
        ],
        finish_reason=payload.get("stop_reason") or "stop",
        usage=translate_usage(payload.get("usage")),
        raw=payload,
    )
    if structured:
        captured = tool_blocks[0].get("input") if tool_blocks else None
        if captured is None or captured == {}:
            logger.debug("Structured output requested but reply %s carried no tool input", response.id)
            response.data = empty_structured_result()
        else:
            response.data = normalize_structured_data(captured)
    return response
