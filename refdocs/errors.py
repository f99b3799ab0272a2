"""Exceptions raised by refdocs."""

from __future__ import annotations


class ConfigError(ValueError):
    """Raised when the build configuration is invalid; no output is written."""


__all__ = ["ConfigError"]
