"""Configuration errors."""


class ConfigError(Exception):
    """Raised when Shelfmark settings cannot be read, merged or validated."""
