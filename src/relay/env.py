"""Load adapter settings from a ``.env`` file."""

from __future__ import annotations

import os
from pathlib import Path
from typing import MutableMapping


def load_dotenv(path: str | Path = ".env", environ: MutableMapping[str, str] | None = None) -> list[str]:
    """Copy ``KEY=value`` pairs from ``path`` into ``environ``.

    Variables already present win over the file. Returns the keys that were
    applied; a missing or unreadable file applies nothing.
    """
    target = os.environ if environ is None else environ
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError:
        return []

    applied: list[str] = []
    for line in text.splitlines():
        entry = _parse_line(line)
        if entry is None:
            continue
        key, value = entry
        if key in target:
            continue
        target[key] = value
        applied.append(key)
    return applied


def _parse_line(line: str) -> tuple[str, str] | None:
    stripped = line.strip()
    if stripped.startswith("export "):
        stripped = stripped[len("export ") :]
    key, sep, value = stripped.partition("=")
    key = key.strip()
    if not sep or not key or key.startswith("#"):
        return None

    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "'\"":
        value = value[1:-1]
    else:
        # Unquoted values may carry a trailing comment.
        value = value.split(" #", 1)[0].rstrip()
    if not value:
        return None
    return key, value
