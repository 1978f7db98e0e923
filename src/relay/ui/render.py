"""Terminal output for the relay CLI."""

from __future__ import annotations

import json
from typing import Any

from rich import box
from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from relay.config import AdapterConfig
from relay.llm.types import ChatResponse
from relay.ui.theme import THEME

_CONSOLE = Console(theme=THEME, highlight=False)


def render_config(config: AdapterConfig) -> None:
    summary = config.to_dict()
    table = Table(show_header=False, box=None, pad_edge=False)
    table.add_column(style="label", no_wrap=True, justify="right")
    table.add_column(style="value")
    table.add_row("Provider", Text(summary["provider"], style="accent"))
    table.add_row("Model", Text(summary["model"], style="accent"))
    table.add_row("Base URL", summary["base_url"] or "n/a")
    table.add_row("API key", summary["api_key"] or "not set")
    table.add_row("Timeout", f"{summary['timeout_s']:g}s")

    notes = [Text(f"! {note}", style="warning") for note in summary["notes"]]
    body = Group(table, Text(""), *notes) if notes else table
    _CONSOLE.print(
        Panel(
            body,
            title=Text("relay · adapter config", style="step"),
            title_align="left",
            box=box.ROUNDED,
            border_style="border",
            padding=(0, 2),
        )
    )


def render_request_body(body: dict[str, Any]) -> None:
    # Plain print keeps the body machine-readable when piped.
    print(json.dumps(body, indent=2, sort_keys=True, ensure_ascii=False))


def render_response(response: ChatResponse) -> None:
    print(json.dumps(response.to_dict(), indent=2, sort_keys=True, ensure_ascii=False))
    usage = response.usage
    line = Text()
    line.append(f"{response.model or 'unknown model'}", style="accent")
    line.append(f"  finish={response.finish_reason}", style="info")
    line.append(f"  tokens={usage.prompt_tokens}+{usage.completion_tokens}={usage.total_tokens}", style="info")
    if response.tool_calls:
        names = ", ".join(call.name for call in response.tool_calls)
        line.append(f"  tool_calls=[{names}]", style="info")
    if response.data is not None:
        line.append("  structured", style="info")
    _CONSOLE.print(line)


def render_failure(message: str) -> None:
    _CONSOLE.print(Text(f"error: {message}", style="error"))
