"""Custom exception types for the modtimefs package."""

from __future__ import annotations


class ModTimeFSError(Exception):
    """Base class for all errors raised by modtimefs itself."""


class UnsupportedOperation(ModTimeFSError):
    """Raised when a wrapped handle lacks the requested capability."""


class ConfigurationError(ModTimeFSError):
    """Raised when a configuration file cannot be processed."""
