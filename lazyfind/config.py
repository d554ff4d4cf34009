"""Persistent JSON config helpers.

Stores the default search command and the steady batch size.
All access is defensive: malformed or missing config falls back safely.
"""

from __future__ import annotations

import json
from pathlib import Path

from platformdirs import user_config_dir

from .source.file_external import SourceParams
from .source.types import DEFAULT_UPDATE_ITEMS

APP_NAME = "lazyfind"
CONFIG_FILENAME = "config.json"
DEFAULT_CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME
CONFIG_PATH = DEFAULT_CONFIG_PATH


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


def load_cmd() -> tuple[str, ...]:
    """Return the configured command; anything but a list of strings is ignored."""
    value = load_config().get("cmd")
    if not isinstance(value, list) or not all(isinstance(token, str) for token in value):
        return ()
    return tuple(value)


def load_update_items() -> int:
    value = load_config().get("update_items")
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        return DEFAULT_UPDATE_ITEMS
    return value


def load_source_params() -> SourceParams:
    return SourceParams(cmd=load_cmd(), update_items=load_update_items())


def save_source_params(params: SourceParams) -> None:
    config = load_config()
    config["cmd"] = list(params.cmd)
    config["update_items"] = int(params.update_items)
    save_config(config)
