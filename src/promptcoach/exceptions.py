"""Custom exceptions for promptcoach."""

from typing import Any


class PromptCoachError(Exception):
    """Base exception for all promptcoach errors."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.details = details or {}


class DiscoveryError(PromptCoachError):
    """Raised when the transcript directory structure cannot be read."""


class ConfigError(PromptCoachError):
    """Raised when an options file is missing or invalid."""
