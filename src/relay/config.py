"""Adapter configuration resolved once at startup from the environment."""

from __future__ import annotations

from dataclasses import dataclass
import os
from typing import Mapping

from relay.llm.client import ModelClient, create_client

PROVIDERS = ("anthropic", "openai", "mock")

DEFAULT_MODELS = {
    "anthropic": "claude-sonnet-4-20250514",
    "openai": "gpt-4o",
    "mock": "mock-model",
}

DEFAULT_BASE_URLS = {
    "anthropic": "http://localhost:5789",
    "openai": "https://api.openai.com/v1",
    "mock": "",
}

DEFAULT_TIMEOUT_S = 60.0


@dataclass(frozen=True)
class AdapterConfig:
    provider: str
    model: str
    base_url: str
    api_key: str | None
    timeout_s: float
    notes: tuple[str, ...] = ()

    def to_dict(self) -> dict:
        return {
            "provider": self.provider,
            "model": self.model,
            "base_url": self.base_url,
            "api_key": _mask(self.api_key),
            "timeout_s": self.timeout_s,
            "notes": list(self.notes),
        }

    def build_client(self) -> ModelClient:
        if self.provider == "mock":
            return create_client("mock", model=self.model)
        return create_client(
            self.provider,
            model=self.model,
            base_url=self.base_url,
            api_key=self.api_key,
            timeout_s=self.timeout_s,
        )


def resolve_config(environ: Mapping[str, str] | None = None) -> AdapterConfig:
    env = os.environ if environ is None else environ
    notes: list[str] = []

    provider = _select_provider(env, notes)
    model = env.get("RELAY_MODEL") or DEFAULT_MODELS[provider]

    if provider == "openai":
        base_url = env.get("RELAY_BASE_URL") or env.get("OPENAI_BASE_URL") or DEFAULT_BASE_URLS[provider]
        api_key = env.get("OPENAI_API_KEY")
    elif provider == "anthropic":
        base_url = env.get("RELAY_BASE_URL") or DEFAULT_BASE_URLS[provider]
        api_key = env.get("ANTHROPIC_API_KEY")
        if not api_key:
            notes.append("ANTHROPIC_API_KEY missing; sending placeholder key.")
    else:
        base_url = DEFAULT_BASE_URLS[provider]
        api_key = None

    return AdapterConfig(
        provider=provider,
        model=model,
        base_url=base_url,
        api_key=api_key,
        timeout_s=_parse_timeout(env.get("RELAY_TIMEOUT_S")),
        notes=tuple(notes),
    )


def _select_provider(env: Mapping[str, str], notes: list[str]) -> str:
    requested = (env.get("RELAY_PROVIDER") or "").strip().lower()
    if requested:
        if requested not in PROVIDERS:
            raise ValueError(f"Unsupported RELAY_PROVIDER '{requested}'. Expected one of: {', '.join(PROVIDERS)}.")
        if requested == "openai" and not env.get("OPENAI_API_KEY"):
            raise ValueError("RELAY_PROVIDER=openai requires OPENAI_API_KEY.")
        return requested
    if env.get("OPENAI_API_KEY") and not env.get("ANTHROPIC_API_KEY"):
        notes.append("Only OPENAI_API_KEY found; using the OpenAI-compatible backend.")
        return "openai"
    return "anthropic"


def _parse_timeout(raw: str | None) -> float:
    if not raw:
        return DEFAULT_TIMEOUT_S
    try:
        value = float(raw)
    except ValueError as exc:
        raise ValueError(f"RELAY_TIMEOUT_S must be a number, got '{raw}'.") from exc
    if value <= 0:
        raise ValueError("RELAY_TIMEOUT_S must be positive.")
    return value


def _mask(secret: str | None) -> str | None:
    if not secret:
        return None
    if len(secret) <= 8:
        return "****"
    return f"{secret[:4]}...{secret[-4:]}"
