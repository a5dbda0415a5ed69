"""ime-console: interactive session multiplexer for input method engines.

Public API
----------
The stable public surface is everything exported from this module.
Anything inside submodules not re-exported here is considered private
and may change without notice.

Example
-------
::

    import imeconsole

    engine = imeconsole.create_engine("memory")
    exit_code = imeconsole.run_console(
        ["ni", "select candidate 1", "ls sessions", "exit"],
        engine=engine,
    )

    imeconsole.__version__
    '0.1.0'
"""
from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

__version__: str = "0.1.0"

if TYPE_CHECKING:
    from imeconsole.config import ConsoleConfig
    from imeconsole.console.output import ConsoleOutput
    from imeconsole.engine.base import EngineClient


def create_engine(name: str = "memory", **options: Any) -> "EngineClient":
    """Instantiate a registered engine by name.

    Parameters
    ----------
    name:
        Engine name, as listed by ``ime-console engines``.
    **options:
        Keyword arguments for the engine constructor.

    Raises
    ------
    imeconsole.engine.EngineNotFoundError
        If no engine is registered under ``name``.
    """
    from imeconsole.engine import engine_registry

    engine_registry.load_entrypoints()
    return engine_registry.create(name, **options)


def run_console(
    lines: Iterable[str],
    engine: "EngineClient | None" = None,
    config: "ConsoleConfig | None" = None,
    output: "ConsoleOutput | None" = None,
) -> int:
    """Run the console over ``lines`` and return its exit code.

    Parameters
    ----------
    lines:
        Input lines, with or without line terminators.
    engine:
        Engine to drive.  Created from ``config.engine`` when omitted.
    config:
        Console settings; defaults apply when omitted.
    output:
        Output streams; stdout / stderr when omitted.
    """
    from imeconsole.config import ConsoleConfig
    from imeconsole.console.app import ConsoleApp

    config = config or ConsoleConfig()
    if engine is None:
        engine = create_engine(config.engine, **config.engine_options)
    return ConsoleApp(engine, config, output).run(lines)


__all__ = [
    "__version__",
    "create_engine",
    "run_console",
]
