"""Configuration models describing Shelfmark settings."""

from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ShelfmarkBaseModel(BaseModel):
    """Shared configuration for Shelfmark Pydantic models."""

    model_config = ConfigDict(extra="forbid")


class CatalogSettings(ShelfmarkBaseModel):
    """Catalog location and authoring defaults.

    Attributes:
        root: Default catalog directory used when a command omits --root.
        default_folder: Folder assigned to new items.
        predefined_tags: Quick tags offered when creating or editing items.
    """

    root: Optional[str] = None
    default_folder: str = "Items"
    predefined_tags: List[str] = Field(
        default_factory=lambda: ["important", "todo", "reference", "project"]
    )


class TabIcons(ShelfmarkBaseModel):
    """Glyphs shown next to each view tab."""

    analytics: str = "📊"
    collections: str = "📁"
    items: str = "🔗"
    search: str = "🔍"


class LoggingSettings(ShelfmarkBaseModel):
    """Runtime logging configuration.

    Attributes:
        level: Logging verbosity level.
    """

    level: str = "WARNING"


class CLIOptions(ShelfmarkBaseModel):
    """CLI behavior defaults and presentation preferences.

    Attributes:
        quiet_default: Whether commands suppress non-error output by default.
        recent_days: Window, in days, for the recent items listing.
        recent_limit: Maximum number of recent items displayed.
    """

    quiet_default: bool = False
    recent_days: int = 7
    recent_limit: int = 5


class ShelfmarkConfig(ShelfmarkBaseModel):
    """Top-level configuration struct for Shelfmark.

    Attributes:
        catalog: Catalog location and authoring defaults.
        folder_icons: Mapping of folder path to icon asset path.
        tab_icons: Glyphs shown next to each view tab.
        logging: Logging configuration.
        cli: CLI presentation defaults.
    """

    catalog: CatalogSettings = Field(default_factory=CatalogSettings)
    folder_icons: Dict[str, str] = Field(default_factory=dict)
    tab_icons: TabIcons = Field(default_factory=TabIcons)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    cli: CLIOptions = Field(default_factory=CLIOptions)


__all__ = [
    "ShelfmarkBaseModel",
    "CatalogSettings",
    "TabIcons",
    "LoggingSettings",
    "CLIOptions",
    "ShelfmarkConfig",
]
