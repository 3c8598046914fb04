"""Persistent JSON config helpers.

Stores the tutorial and line-highlighter preferences and the default column.
All access is defensive: malformed or missing config falls back safely.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path

from platformdirs import user_config_dir

APP_NAME = "lazyreader"
CONFIG_FILENAME = "config.json"
PROGRESS_FILENAME = "progress.jsonl"
CONFIG_DIR = Path(user_config_dir(APP_NAME, appauthor=False))
CONFIG_PATH = CONFIG_DIR / CONFIG_FILENAME
DEFAULT_COLUMN = 110
DEFAULT_CONFIG: dict[str, object] = {
    "enable_tutorial": True,
    "enable_line_highlighter": True,
}
ENV_ENABLE_TUTORIAL = "LAZYREADER_ENABLE_TUTORIAL"
ENV_ENABLE_LINE_HIGHLIGHTER = "LAZYREADER_ENABLE_LINE_HIGHLIGHTER"


@dataclass(frozen=True)
class ReaderConfig:
    """Reader preferences resolved from the config file and environment.

    ``enable_tutorial`` stays ``None`` when unset so the pager can tell an
    explicit opt-out apart from the default first-run behavior.
    """

    enable_tutorial: bool | None = None
    enable_line_highlighter: bool = True
    show_progress: bool = False
    column: int = DEFAULT_COLUMN


def default_progress_path() -> Path:
    """Return the progress log location next to the config file."""
    return CONFIG_PATH.parent / PROGRESS_FILENAME


def load_config() -> dict[str, object]:
    """Load the persisted JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    try:
        data = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
    except Exception:
        return {}
    return data if isinstance(data, dict) else {}


def save_config(data: dict[str, object]) -> None:
    """Persist config data as pretty-printed JSON.

    Any filesystem/serialization error is ignored to keep runtime behavior
    non-fatal when config cannot be written.
    """
    try:
        CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
        CONFIG_PATH.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    except Exception:
        pass


def ensure_config_file() -> None:
    """Write the default config on first use."""
    if CONFIG_PATH.exists():
        return
    save_config(dict(DEFAULT_CONFIG))


def _env_flag(name: str) -> bool | None:
    value = os.environ.get(name)
    if value is None:
        return None
    return value.strip().lower() == "true"


def _load_flag(data: dict[str, object], key: str) -> bool | None:
    """Only explicit booleans are accepted; anything else reads as unset."""
    value = data.get(key)
    return value if isinstance(value, bool) else None


def _load_column(data: dict[str, object]) -> int:
    value = data.get("column")
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        return DEFAULT_COLUMN
    return value


def load_reader_config() -> ReaderConfig:
    """Resolve reader preferences, letting environment flags win over the file."""
    ensure_config_file()
    data = load_config()

    enable_tutorial = _env_flag(ENV_ENABLE_TUTORIAL)
    if enable_tutorial is None:
        enable_tutorial = _load_flag(data, "enable_tutorial")

    enable_line_highlighter = _env_flag(ENV_ENABLE_LINE_HIGHLIGHTER)
    if enable_line_highlighter is None:
        enable_line_highlighter = _load_flag(data, "enable_line_highlighter")

    return ReaderConfig(
        enable_tutorial=enable_tutorial,
        enable_line_highlighter=True if enable_line_highlighter is None else enable_line_highlighter,
        show_progress=bool(_load_flag(data, "show_progress")),
        column=_load_column(data),
    )
