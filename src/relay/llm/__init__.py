"""Chat-completion client interfaces and implementations."""

from relay.llm.anthropic import AnthropicClient
from relay.llm.client import ModelClient, ProviderError, create_client
from relay.llm.mock import MockClient
from relay.llm.openai_compat import OpenAICompatibleClient
from relay.llm.types import ChatRequest, ChatResponse, ResponseModel, ToolCallRecord, ToolDefinition, Usage

__all__ = [
    "AnthropicClient",
    "ChatRequest",
    "ChatResponse",
    "MockClient",
    "ModelClient",
    "OpenAICompatibleClient",
    "ProviderError",
    "ResponseModel",
    "ToolCallRecord",
    "ToolDefinition",
    "Usage",
    "create_client",
]
