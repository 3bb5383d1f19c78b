"""Persisted user settings.

Settings live in a small YAML document, ``~/.llm-cli/config.yaml`` by
default (set ``LLM_CLI_CONFIG_DIR`` to move it).  The dispatcher only
reads the default provider; the management menu is the only writer.
The file is re‑read on every access and written back immediately, so
there is no in‑process state to keep in sync between the two.

Recognised keys:

``default_provider``
    Name of the provider used when ``--provider`` is not given.
``update_check_last_at``
    Epoch milliseconds of the last update check.
``update_check_interval_ms``
    Minimum interval between update checks.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

CONFIG_DIR_ENV = "LLM_CLI_CONFIG_DIR"
DEFAULT_UPDATE_CHECK_INTERVAL_MS = 6 * 60 * 60 * 1000


def _config_dir() -> Path:
    """Return the configuration directory, honouring the env override."""
    override = os.environ.get(CONFIG_DIR_ENV)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".llm-cli"


class ConfigStore:
    """Get/set/clear access to the settings document."""

    def __init__(self, path: Optional[Union[str, Path]] = None) -> None:
        self._path = Path(path) if path is not None else None

    @property
    def path(self) -> Path:
        return self._path or _config_dir() / "config.yaml"

    def load(self) -> Dict[str, Any]:
        """Load the settings, returning an empty mapping if missing or malformed."""
        if not self.path.exists():
            return {}
        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError):
            return {}
        return data if isinstance(data, dict) else {}

    def save(self, data: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("w", encoding="utf-8") as f:
            yaml.safe_dump(data, f, default_flow_style=False)

    def get(self, key: str, default: Any = None) -> Any:
        return self.load().get(key, default)

    def set(self, key: str, value: Any) -> None:
        data = self.load()
        data[key] = value
        self.save(data)

    def clear(self, key: str) -> None:
        data = self.load()
        if key in data:
            del data[key]
            self.save(data)

    def get_default_provider(self) -> Optional[str]:
        value = self.get("default_provider")
        return str(value) if value else None

    def set_default_provider(self, name: str) -> None:
        self.set("default_provider", name)

    def clear_default_provider(self) -> None:
        self.clear("default_provider")

    def get_update_check_last_at(self) -> Optional[int]:
        return _as_int(self.get("update_check_last_at"))

    def set_update_check_last_at(self, epoch_ms: int) -> None:
        self.set("update_check_last_at", int(epoch_ms))

    def get_update_check_interval_ms(self) -> int:
        interval = _as_int(self.get("update_check_interval_ms"))
        return interval if interval is not None else DEFAULT_UPDATE_CHECK_INTERVAL_MS


def _as_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None
