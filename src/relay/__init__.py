"""OpenAI-style chat-completion adapter for the Anthropic messages API."""

__version__ = "0.1.0"
