"""Primary and diagnostic output streams.

Both streams are ``rich`` consoles sharing one lock, so that lines
printed from the engine's notification thread and from the read loop
interleave only at line boundaries.  Primary lines are written to the
console's file verbatim, without rich rendering, so engine text reaches
the operator exactly as reported (tabs and brackets included).
Diagnostics keep rich styling.
"""
from __future__ import annotations

import threading
from collections.abc import Iterable
from typing import IO

from rich.console import Console
from rich.text import Text


class ConsoleOutput:
    """Line-oriented writer over a primary and a diagnostic stream.

    Parameters
    ----------
    console:
        Console for rendered state and notifications.  Defaults to one
        writing to ``sys.stdout``.
    err_console:
        Console for diagnostics.  Defaults to one writing to
        ``sys.stderr``.
    """

    def __init__(
        self,
        console: Console | None = None,
        err_console: Console | None = None,
    ) -> None:
        self.console = console or Console(markup=False, highlight=False, emoji=False)
        self.err_console = err_console or Console(stderr=True, markup=False, highlight=False, emoji=False)
        self._lock = threading.Lock()

    @classmethod
    def to_files(cls, out: IO[str], err: IO[str]) -> ConsoleOutput:
        """Build an output writing plain text to the given files."""
        return cls(
            Console(file=out, markup=False, highlight=False, emoji=False, color_system=None),
            Console(file=err, markup=False, highlight=False, emoji=False, color_system=None),
        )

    def emit(self, *lines: str) -> None:
        """Print lines on the primary stream."""
        self.emit_lines(lines)

    def emit_lines(self, lines: Iterable[str]) -> None:
        with self._lock:
            out = self.console.file
            for line in lines:
                out.write(f"{line}\n")
            out.flush()

    def error(self, message: str) -> None:
        """Print a diagnostic line."""
        with self._lock:
            self.err_console.print(Text(message, style="red"), soft_wrap=True)

    def info(self, message: str) -> None:
        """Print a progress line on the diagnostic stream."""
        with self._lock:
            self.err_console.print(Text(message, style="dim"), soft_wrap=True)
