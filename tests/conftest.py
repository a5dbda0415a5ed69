"""Shared test fixtures for ime-console.

Fixtures defined here are available to all tests in the suite without
needing an explicit import. Add project-wide fixtures here; keep
domain-specific fixtures close to the tests that use them.
"""
from __future__ import annotations

import io
from collections.abc import Iterator

import pytest

from imeconsole.commands.dispatcher import CommandDispatcher, ConsoleContext
from imeconsole.console.output import ConsoleOutput
from imeconsole.engine.memory import MemoryEngine
from imeconsole.engine.types import EngineTraits
from imeconsole.session.registry import SessionRegistry


class CapturedOutput:
    """A ``ConsoleOutput`` writing into in-memory buffers."""

    def __init__(self) -> None:
        self.out = io.StringIO()
        self.err = io.StringIO()
        self.output = ConsoleOutput.to_files(self.out, self.err)

    def lines(self) -> list[str]:
        return [line.rstrip() for line in self.out.getvalue().splitlines()]

    def errors(self) -> list[str]:
        return [line.rstrip() for line in self.err.getvalue().splitlines()]

    def reset(self) -> None:
        for buffer in (self.out, self.err):
            buffer.seek(0)
            buffer.truncate()


@pytest.fixture()
def package_name() -> str:
    """Return the importable package name for assertions."""
    return "imeconsole"


@pytest.fixture()
def expected_version() -> str:
    """Return the current expected version string.

    Update this fixture when cutting a release so that the version
    test immediately catches stale ``__version__`` values.
    """
    return "0.1.0"


@pytest.fixture()
def captured() -> CapturedOutput:
    return CapturedOutput()


@pytest.fixture()
def engine() -> Iterator[MemoryEngine]:
    """An initialized memory engine with maintenance completed."""
    eng = MemoryEngine()
    eng.setup(EngineTraits(app_name="ime.console.test"))
    eng.initialize()
    if eng.start_maintenance(full_check=True):
        eng.join_maintenance_thread()
    yield eng
    eng.finalize()


@pytest.fixture()
def registry(engine: MemoryEngine) -> SessionRegistry:
    """A registry holding one bootstrap session."""
    reg = SessionRegistry(engine)
    reg.add(engine.create_session())
    return reg


@pytest.fixture()
def dispatcher(
    engine: MemoryEngine, registry: SessionRegistry, captured: CapturedOutput
) -> CommandDispatcher:
    return CommandDispatcher(ConsoleContext(engine, registry, captured.output))
