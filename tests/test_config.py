from __future__ import annotations

from pathlib import Path

import pytest

from relay.config import resolve_config
from relay.env import load_dotenv
from relay.llm import AnthropicClient, MockClient, OpenAICompatibleClient


def test_defaults_target_local_anthropic_proxy() -> None:
    config = resolve_config({})
    assert config.provider == "anthropic"
    assert config.model == "claude-sonnet-4-20250514"
    assert config.base_url == "http://localhost:5789"
    assert config.api_key is None
    assert config.timeout_s == 60.0
    assert config.notes


def test_openai_selected_when_only_openai_key_present() -> None:
    config = resolve_config({"OPENAI_API_KEY": "sk-openai-123456"})
    assert config.provider == "openai"
    assert config.base_url == "https://api.openai.com/v1"
    assert config.to_dict()["api_key"] == "sk-o...3456"


def test_anthropic_wins_when_both_keys_present() -> None:
    config = resolve_config({"OPENAI_API_KEY": "a", "ANTHROPIC_API_KEY": "b", "RELAY_MODEL": "claude-opus-4-20250514"})
    assert config.provider == "anthropic"
    assert config.model == "claude-opus-4-20250514"
    assert config.notes == ()


def test_explicit_provider_and_validation() -> None:
    assert resolve_config({"RELAY_PROVIDER": "Mock"}).provider == "mock"
    with pytest.raises(ValueError):
        resolve_config({"RELAY_PROVIDER": "bedrock"})
    with pytest.raises(ValueError):
        resolve_config({"RELAY_PROVIDER": "openai"})
    with pytest.raises(ValueError):
        resolve_config({"RELAY_TIMEOUT_S": "soon"})
    with pytest.raises(ValueError):
        resolve_config({"RELAY_TIMEOUT_S": "0"})


@pytest.mark.asyncio
async def test_build_client_matches_provider() -> None:
    anthropic = resolve_config({"RELAY_BASE_URL": "http://proxy:9000", "RELAY_TIMEOUT_S": "5"}).build_client()
    openai = resolve_config({"OPENAI_API_KEY": "sk"}).build_client()
    mock = resolve_config({"RELAY_PROVIDER": "mock"}).build_client()
    try:
        assert isinstance(anthropic, AnthropicClient)
        assert anthropic.base_url == "http://proxy:9000"
        assert isinstance(openai, OpenAICompatibleClient)
        assert isinstance(mock, MockClient)
    finally:
        await anthropic.aclose()
        await openai.aclose()


def test_load_dotenv_does_not_override(tmp_path: Path) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text(
        "# comment\n"
        "RELAY_MODEL='claude-from-file'\n"
        "export RELAY_TIMEOUT_S=30  # seconds\n"
        "ANTHROPIC_API_KEY=\n"
        "RELAY_PROVIDER=mock\n"
        "not a pair\n",
        encoding="utf-8",
    )
    environ = {"RELAY_PROVIDER": "anthropic"}

    applied = load_dotenv(env_file, environ)

    assert applied == ["RELAY_MODEL", "RELAY_TIMEOUT_S"]
    assert environ == {
        "RELAY_PROVIDER": "anthropic",
        "RELAY_MODEL": "claude-from-file",
        "RELAY_TIMEOUT_S": "30",
    }
    assert resolve_config(environ).timeout_s == 30.0


def test_load_dotenv_missing_file_applies_nothing(tmp_path: Path) -> None:
    environ: dict[str, str] = {}
    assert load_dotenv(tmp_path / "missing.env", environ) == []
    assert environ == {}
