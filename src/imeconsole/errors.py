"""Exception hierarchy shared across ime-console.

Every error raised deliberately by this package derives from
``ImeConsoleError`` so that the CLI can report it uniformly on the
diagnostic stream.
"""
from __future__ import annotations


class ImeConsoleError(Exception):
    """Base class for all ime-console errors."""


class ConfigError(ImeConsoleError):
    """Raised when a configuration file or value is invalid.

    Parameters
    ----------
    message:
        Human-readable description of the problem.
    source:
        Path of the configuration file, when the error came from one.
    """

    def __init__(self, message: str, source: str | None = None) -> None:
        self.config_message = message
        self.source = source
        if source is not None:
            super().__init__(f"{source}: {message}")
        else:
            super().__init__(message)
