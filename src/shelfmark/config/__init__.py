"""Configuration management for Shelfmark."""

from __future__ import annotations

import os
import textwrap
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping

import yaml

from .exceptions import ConfigError
from .models import ShelfmarkConfig
from .resolver import assign_nested, flatten_for_env, resolve_with_precedence

DEFAULT_CONFIG_PATH = Path("~/.shelfmark/config.yaml")
ENV_PREFIX = "SHELFMARK__"
_CONFIG_HEADER = textwrap.dedent(
    """\
    # Shelfmark configuration file
    # Generated automatically; manage via `shelfmark config edit` or `shelfmark config set`.
    """
)


class ConfigManager:
    """Load and persist Shelfmark settings, applying precedence rules."""

    def __init__(
        self,
        config_path: Path | None = None,
        *,
        env: Mapping[str, str] | None = None,
    ) -> None:
        self._config_path = (config_path or DEFAULT_CONFIG_PATH).expanduser()
        self._env = env if env is not None else os.environ

    @property
    def config_path(self) -> Path:
        """Return the resolved configuration path."""
        return self._config_path

    def load(
        self,
        *,
        cli_overrides: Mapping[str, Any] | None = None,
        include_env: bool = True,
        ensure_file: bool = True,
    ) -> ShelfmarkConfig:
        """Load settings from disk and layer environment and CLI overrides on top.

        Args:
            cli_overrides: Dotted-key overrides supplied on the command line.
            include_env: Whether ``SHELFMARK__`` environment variables apply.
            ensure_file: Whether to write a default file when none exists.

        Returns:
            ShelfmarkConfig: Validated settings.

        Raises:
            ConfigError: If the file cannot be parsed or values are invalid.
        """
        if ensure_file:
            self.ensure_exists()

        return resolve_with_precedence(
            defaults=ShelfmarkConfig(),
            file_overrides=self._read_file(),
            env_overrides=self._env_overrides() if include_env else None,
            cli_overrides=cli_overrides,
        )

    def load_file_overrides(self) -> dict[str, Any]:
        """Return raw overrides stored on disk."""
        return self._read_file()

    def save(self, config: ShelfmarkConfig | Mapping[str, Any]) -> None:
        """Persist settings to disk."""
        if isinstance(config, ShelfmarkConfig):
            data = config.model_dump(mode="python")
        else:
            data = dict(config)
        self._write_file(data)

    def ensure_exists(self) -> Path:
        """Create a configuration file with defaults if one does not exist."""
        if not self._config_path.exists():
            self._write_file(ShelfmarkConfig().model_dump(mode="python"))
        return self._config_path

    def read_text(self) -> str:
        """Return the current configuration file contents."""
        if not self._config_path.exists():
            return ""
        return self._config_path.read_text(encoding="utf-8")

    def set_folder_icon(self, folder: str, icon: str | None) -> None:
        """Assign or clear the icon shown for ``folder`` in the tree.

        Args:
            folder: Folder path.
            icon: Icon asset path, or ``None`` to remove the assignment.
        """
        data = self._read_file()
        icons = dict(data.get("folder_icons") or {})
        if icon:
            icons[folder] = icon
        else:
            icons.pop(folder, None)
        data["folder_icons"] = icons
        resolve_with_precedence(defaults=ShelfmarkConfig(), file_overrides=data)
        self._write_file(data)

    # Internal helpers -------------------------------------------------

    def _read_file(self) -> dict[str, Any]:
        if not self._config_path.exists():
            return {}

        try:
            raw = yaml.safe_load(self._config_path.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"Failed to parse configuration file: {exc}") from exc

        if not isinstance(raw, dict):
            raise ConfigError("Configuration file must contain a mapping at the top level.")
        return raw

    def _write_file(self, data: Mapping[str, Any]) -> None:
        self._config_path.parent.mkdir(parents=True, exist_ok=True)
        stamp = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
        serialized = yaml.safe_dump(dict(data), sort_keys=False, allow_unicode=True)
        self._config_path.write_text(
            f"{_CONFIG_HEADER}# Last updated: {stamp}\n{serialized}",
            encoding="utf-8",
        )

    def _env_overrides(self) -> dict[str, Any]:
        overrides: dict[str, Any] = {}
        for key, raw_value in self._env.items():
            if not key.startswith(ENV_PREFIX):
                continue
            path = [segment.lower() for segment in key[len(ENV_PREFIX) :].split("__") if segment]
            if not path:
                continue
            try:
                value: Any = yaml.safe_load(raw_value)
            except yaml.YAMLError:
                value = raw_value
            assign_nested(overrides, path, value)
        return overrides


__all__ = [
    "ConfigManager",
    "DEFAULT_CONFIG_PATH",
    "ENV_PREFIX",
    "ShelfmarkConfig",
    "assign_nested",
    "resolve_with_precedence",
    "flatten_for_env",
    "ConfigError",
]
