"""Error types raised by engine clients."""
from __future__ import annotations

from imeconsole.errors import ImeConsoleError


class EngineError(ImeConsoleError):
    """Base class for failures reported by an engine client."""


class EngineUnavailableError(EngineError):
    """Raised when an operation needs an engine that is not initialized.

    Parameters
    ----------
    operation:
        Name of the engine operation that was attempted.
    """

    def __init__(self, operation: str) -> None:
        self.operation = operation
        super().__init__(
            f"Engine is not available for {operation!r}: "
            "call setup() and initialize() first."
        )
