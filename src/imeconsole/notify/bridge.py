"""Notification bridge: prints out-of-band engine events.

The bridge is registered as the engine's notification handler and is
called on the engine's own thread, independently of the read loop.  It
only formats and prints; it never touches the session registry.
"""
from __future__ import annotations

import logging

from imeconsole.console.output import ConsoleOutput
from imeconsole.engine.base import EngineClient
from imeconsole.engine.types import NotificationEvent
from imeconsole.render import format_notification, format_option_label, parse_option_value

logger = logging.getLogger(__name__)

OPTION_MESSAGE = "option"


class NotificationBridge:
    """Engine notification handler writing to the primary stream.

    Parameters
    ----------
    engine:
        Engine whose events are handled; queried for option state labels
        when it advertises that capability.
    output:
        Destination for the printed events.
    """

    def __init__(self, engine: EngineClient, output: ConsoleOutput) -> None:
        self._engine = engine
        self._output = output

    def attach(self) -> None:
        """Subscribe to the engine.  Must be repeated before each ``initialize``."""
        self._engine.subscribe_notifications(self)

    def __call__(self, event: NotificationEvent) -> None:
        logger.debug("Notification %r", event)
        self._output.emit(format_notification(event))
        if event.message_type == OPTION_MESSAGE and self._engine.supports_state_label():
            option, state = parse_option_value(event.message_value)
            label = self._engine.get_state_label(event.session_handle, option, state)
            if label:
                self._output.emit(format_option_label(option, state, label))
