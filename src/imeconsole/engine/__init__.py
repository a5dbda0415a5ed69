"""Engine client interface, registry and the built-in memory engine.

Importing this package registers the built-in engines with
``engine_registry``.
"""
from __future__ import annotations

from imeconsole.engine.base import CandidateIterator, EngineClient
from imeconsole.engine.errors import EngineError, EngineUnavailableError
from imeconsole.engine.memory import MemoryEngine
from imeconsole.engine.registry import (
    EngineAlreadyRegisteredError,
    EngineNotFoundError,
    EngineRegistry,
    engine_registry,
)

__all__ = [
    "CandidateIterator",
    "EngineClient",
    "EngineError",
    "EngineUnavailableError",
    "MemoryEngine",
    "EngineRegistry",
    "EngineNotFoundError",
    "EngineAlreadyRegisteredError",
    "engine_registry",
]
