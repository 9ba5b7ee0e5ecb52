"""Configuration resolution helpers."""

from __future__ import annotations

from collections.abc import Mapping as MappingABC
from copy import deepcopy
from typing import Any, Dict, Mapping

import yaml
from pydantic import ValidationError

from .exceptions import ConfigError
from .models import ShelfmarkConfig

# Mappings whose keys are data (folder paths), not nested setting names.
_OPAQUE_SECTIONS = frozenset({"folder_icons"})


def resolve_with_precedence(
    *,
    defaults: ShelfmarkConfig,
    file_overrides: Mapping[str, Any] | None = None,
    env_overrides: Mapping[str, Any] | None = None,
    cli_overrides: Mapping[str, Any] | None = None,
) -> ShelfmarkConfig:
    """Merge configuration sources: defaults < file < environment < CLI.

    Args:
        defaults: Baseline settings.
        file_overrides: Values read from the configuration file.
        env_overrides: Values parsed from ``SHELFMARK__`` variables.
        cli_overrides: Dotted-key values supplied on the command line.

    Returns:
        ShelfmarkConfig: Validated merged settings.

    Raises:
        ConfigError: If a source is malformed or the merged values are invalid.
    """
    merged = defaults.model_dump(mode="python")
    for name, source in (
        ("file", file_overrides),
        ("environment", env_overrides),
        ("cli", cli_overrides),
    ):
        if source is None:
            continue
        if not isinstance(source, MappingABC):
            raise ConfigError(f"{name.capitalize()} overrides must be a mapping.")
        expanded: dict[str, Any] = {}
        for key, value in source.items():
            if not isinstance(key, str):
                raise ConfigError(f"{name.capitalize()} override keys must be strings.")
            assign_nested(expanded, key.split("."), value, source_name=name)
        merged = _deep_merge(merged, expanded)

    try:
        return ShelfmarkConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration values: {exc}") from exc


def flatten_for_env(config: ShelfmarkConfig) -> Dict[str, str]:
    """Flatten settings into ``SHELFMARK__SECTION__KEY`` environment mappings."""
    flat: Dict[str, str] = {}

    def _recurse(prefix: list[str], value: Any) -> None:
        if isinstance(value, dict) and prefix[0] not in _OPAQUE_SECTIONS:
            for key, child in value.items():
                _recurse(prefix + [str(key)], child)
            return
        env_key = "SHELFMARK__" + "__".join(part.upper() for part in prefix)
        if isinstance(value, (dict, list)):
            flat[env_key] = yaml.safe_dump(value, default_flow_style=True).strip()
        else:
            flat[env_key] = "null" if value is None else str(value)

    for key, value in config.model_dump(mode="python").items():
        _recurse([str(key)], value)
    return flat


def assign_nested(
    target: dict[str, Any],
    path: list[str],
    value: Any,
    *,
    source_name: str = "configuration",
) -> None:
    """Assign ``value`` at the nested location ``path`` inside ``target``.

    Args:
        target: Mapping to mutate in place.
        path: Keys leading to the value.
        value: Value to store.
        source_name: Name of the override source, used in error messages.

    Raises:
        ConfigError: If a non-mapping value sits on the path.
    """
    node = target
    for segment in path[:-1]:
        existing = node.setdefault(segment, {})
        if not isinstance(existing, dict):
            raise ConfigError(
                f"{source_name.capitalize()} override for {'.'.join(path)} "
                f"conflicts with existing value at '{segment}'."
            )
        node = existing
    node[path[-1]] = value


def _deep_merge(base: Mapping[str, Any], overrides: Mapping[str, Any]) -> dict[str, Any]:
    merged = {key: deepcopy(value) for key, value in base.items()}
    for key, value in overrides.items():
        if isinstance(value, MappingABC) and isinstance(merged.get(key), MappingABC):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = deepcopy(value)
    return merged


__all__ = ["assign_nested", "flatten_for_env", "resolve_with_precedence"]
