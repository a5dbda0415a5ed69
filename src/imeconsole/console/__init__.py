"""Console application: output streams and the read-eval-print loop.

``ConsoleOutput`` is exported here; the application itself lives in
``imeconsole.console.app``.
"""
from __future__ import annotations

from imeconsole.console.output import ConsoleOutput

__all__ = ["ConsoleOutput"]
