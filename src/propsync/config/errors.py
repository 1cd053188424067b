"""Configuration error definitions."""

from __future__ import annotations


class ConfigurationError(RuntimeError):
    """Raised when configuration values are invalid."""


class MissingConfigurationError(ConfigurationError):
    """Raised when required configuration values are absent or blank."""


class UnknownSourceError(ConfigurationError):
    """Raised when a sync is requested for a source that is not configured."""

    def __init__(self, source_id: str) -> None:
        super().__init__(f"Unknown market source: {source_id}")
        self.source_id = source_id
