"""Console application: bootstrap, read-eval-print loop and teardown.

Lifecycle
---------
1. ``setup`` the engine once per process.
2. Bootstrap: subscribe the notification bridge, ``initialize`` the
   engine, run and join maintenance, create the first session and reset
   the registry to ``{1: session}``.
3. Read lines and dispatch them until ``exit`` or end of input.
   ``reload`` tears down (destroy every session, ``finalize``) and runs
   the bootstrap again in place.
4. Tear down and return the exit code.
"""
from __future__ import annotations

import logging
from collections.abc import Iterable

from imeconsole.commands.dispatcher import CommandDispatcher, ConsoleContext, DispatchOutcome
from imeconsole.config import ConsoleConfig
from imeconsole.console.output import ConsoleOutput
from imeconsole.engine.base import EngineClient
from imeconsole.engine.types import NO_SESSION
from imeconsole.notify.bridge import NotificationBridge
from imeconsole.session.registry import SessionRegistry

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_BOOTSTRAP_FAILED = 1


class ConsoleApp:
    """Drives one engine through the interactive console.

    Parameters
    ----------
    engine:
        The engine client; not yet set up.
    config:
        Console settings.  Defaults to ``ConsoleConfig()``.
    output:
        Output streams.  Defaults to stdout / stderr.
    """

    def __init__(
        self,
        engine: EngineClient,
        config: ConsoleConfig | None = None,
        output: ConsoleOutput | None = None,
    ) -> None:
        self.engine = engine
        self.config = config or ConsoleConfig()
        self.output = output or ConsoleOutput()
        self.registry = SessionRegistry(engine)
        self.bridge = NotificationBridge(engine, self.output)
        self.dispatcher = CommandDispatcher(ConsoleContext(engine, self.registry, self.output))
        self._set_up = False

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> bool:
        """Set the engine up (once) and bootstrap the first session."""
        if not self._set_up:
            self.engine.setup(self.config.traits())
            self._set_up = True
        self.output.info("initializing...")
        return self.bootstrap()

    def bootstrap(self) -> bool:
        """Initialize the engine and reset the registry to one session.

        Returns ``False`` when the first session cannot be created.
        """
        self.bridge.attach()
        self.engine.initialize(self.config.traits())
        if self.engine.start_maintenance(self.config.full_check):
            self.engine.join_maintenance_thread()
        self.output.info("ready.")
        handle = self.engine.create_session()
        if handle == NO_SESSION:
            self.output.error("Error creating engine session.")
            return False
        self.registry.reset(handle)
        logger.debug("Bootstrapped with session %x", handle)
        return True

    def teardown(self) -> None:
        """Destroy every session and finalize the engine."""
        self.registry.clear(destroy=True)
        self.engine.finalize()

    # ------------------------------------------------------------------
    # Read loop
    # ------------------------------------------------------------------

    def run(self, lines: Iterable[str]) -> int:
        """Run the console over ``lines`` and return the exit code."""
        if not self.start():
            self.engine.finalize()
            return EXIT_BOOTSTRAP_FAILED
        try:
            for raw in lines:
                line = raw.rstrip("\r\n")
                limit = self.config.max_line_length
                if limit is not None and len(line) > limit:
                    self.output.error(f"line too long ({len(line)} > {limit} characters), ignored.")
                    continue
                outcome = self.dispatcher.execute(line)
                if outcome is DispatchOutcome.EXIT:
                    break
                if outcome is DispatchOutcome.RELOAD:
                    logger.debug("Reloading engine")
                    self.teardown()
                    if not self.bootstrap():
                        return EXIT_BOOTSTRAP_FAILED
        finally:
            self.teardown()
        return EXIT_OK
