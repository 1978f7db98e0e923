from __future__ import annotations

import json
import os
from pathlib import Path
import subprocess
import sys

SRC_DIR = Path(__file__).resolve().parents[1] / "src"


def _run_cli(tmp_path: Path, *args: str, **env_overrides: str) -> subprocess.CompletedProcess[str]:
    env = {
        key: value
        for key, value in os.environ.items()
        if not key.startswith(("RELAY_", "ANTHROPIC_", "OPENAI_"))
    }
    env["PYTHONDONTWRITEBYTECODE"] = "1"
    env["PYTHONPATH"] = os.pathsep.join(filter(None, [str(SRC_DIR), env.get("PYTHONPATH")]))
    env.update(env_overrides)
    return subprocess.run(
        [sys.executable, "-m", "relay.cli", *args],
        capture_output=True,
        text=True,
        env=env,
        cwd=tmp_path,
    )


def test_dry_run_prints_translated_body(tmp_path: Path) -> None:
    result = _run_cli(tmp_path, "dry-run", RELAY_MODEL="claude-test")
    assert result.returncode == 0, result.stderr
    body = json.loads(result.stdout)
    assert body["model"] == "claude-test"
    assert body["system"] == "You are a browser automation assistant."
    assert body["tool_choice"] == {"type": "any"}
    assert body["messages"][0]["content"][1]["source"]["data"] == "iVBORw0KGgo="


def test_dry_run_structured(tmp_path: Path) -> None:
    result = _run_cli(tmp_path, "dry-run", "--structured")
    assert result.returncode == 0, result.stderr
    body = json.loads(result.stdout)
    assert [tool["name"] for tool in body["tools"]] == ["Observation"]
    assert body["tools"][0]["input_schema"]["additionalProperties"] is False


def test_chat_with_mock_provider(tmp_path: Path) -> None:
    result = _run_cli(tmp_path, "chat", "Hello there", "--system", "Be brief.", RELAY_PROVIDER="mock")
    assert result.returncode == 0, result.stderr
    assert '"object": "chat.completion"' in result.stdout
    assert "Mock reply from mock-model: Hello there" in result.stdout


def test_invalid_provider_exits_with_error(tmp_path: Path) -> None:
    result = _run_cli(tmp_path, "config", "show", RELAY_PROVIDER="bedrock")
    assert result.returncode == 1


def test_config_show_reads_dotenv(tmp_path: Path) -> None:
    (tmp_path / ".env").write_text("RELAY_MODEL=claude-dotenv\n", encoding="utf-8")
    result = _run_cli(tmp_path, "config", "show")
    assert result.returncode == 0, result.stderr
    assert "claude-dotenv" in result.stdout


def test_config_show_lists_notes(tmp_path: Path) -> None:
    result = _run_cli(tmp_path, "config", "show")
    assert result.returncode == 0, result.stderr
    assert "ANTHROPIC_API_KEY missing" in result.stdout
    assert "localhost:5789" in result.stdout


def test_chat_summarizes_usage(tmp_path: Path) -> None:
    result = _run_cli(tmp_path, "chat", "Hi", RELAY_PROVIDER="mock")
    assert result.returncode == 0, result.stderr
    assert "finish=end_turn" in result.stdout
