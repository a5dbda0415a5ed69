"""Command dispatcher: executes one input line against the engine.

The dispatcher holds no state of its own between lines.  Everything it
mutates lives in the ``ConsoleContext`` owned by the read loop: the
engine, the session registry (including the active selection) and the
output streams.

``exit`` and ``reload`` are not executed here; the dispatcher reports
them through ``DispatchOutcome`` and the console application performs
the corresponding transition.
"""
from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum, auto

from imeconsole.commands.grammar import Command, CommandKind, parse_command
from imeconsole.console.output import ConsoleOutput
from imeconsole.engine.base import EngineClient
from imeconsole.engine.errors import EngineError
from imeconsole.engine.types import NO_SESSION, EngineHandle
from imeconsole.render import (
    NO_CANDIDATES,
    format_candidate_item,
    format_current_schema,
    format_schema_list,
    format_session_list,
    format_turn,
)
from imeconsole.session.registry import KillResult, SessionRegistry

logger = logging.getLogger(__name__)

INVALID_SESSION_INDEX = "invalid session index, please recheck!"
LAST_SESSION = "don't kill the last session"


class DispatchOutcome(Enum):
    """What the read loop should do after a line was dispatched."""

    CONTINUE = auto()
    EXIT = auto()
    RELOAD = auto()


@dataclass
class ConsoleContext:
    """Mutable state threaded through the dispatcher by the read loop."""

    engine: EngineClient
    registry: SessionRegistry
    output: ConsoleOutput

    @property
    def active_handle(self) -> EngineHandle:
        return self.registry.active_handle


class CommandDispatcher:
    """Executes console input lines.

    Parameters
    ----------
    context:
        Engine, registry and output to operate on.
    """

    def __init__(self, context: ConsoleContext) -> None:
        self.context = context
        self._handlers: dict[CommandKind, Callable[[Command], None]] = {
            CommandKind.LIST_SESSIONS: self._list_sessions,
            CommandKind.ADD_SESSION: self._add_session,
            CommandKind.LIST_SCHEMAS: self._list_schemas,
            CommandKind.SELECT_SCHEMA: self._select_schema,
            CommandKind.SELECT_CANDIDATE: self._select_candidate,
            CommandKind.LIST_CANDIDATES: self._list_candidates,
            CommandKind.SET_OPTION: self._set_option,
            CommandKind.SYNCHRONIZE: self._synchronize,
            CommandKind.SELECT_SESSION: self._select_session,
            CommandKind.KILL_SESSION: self._kill_session,
            CommandKind.KEYS: self._inject_keys,
        }

    @property
    def engine(self) -> EngineClient:
        return self.context.engine

    @property
    def registry(self) -> SessionRegistry:
        return self.context.registry

    @property
    def output(self) -> ConsoleOutput:
        return self.context.output

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def execute(self, line: str) -> DispatchOutcome:
        """Parse and execute one line.

        Engine errors are reported on the diagnostic stream; they never
        end the loop.
        """
        command = parse_command(line)
        logger.debug("Dispatching %s %r", command.kind.name, line)
        if command.kind is CommandKind.EXIT:
            return DispatchOutcome.EXIT
        if command.kind is CommandKind.RELOAD:
            return DispatchOutcome.RELOAD
        try:
            self._handlers[command.kind](command)
        except EngineError as exc:
            self.output.error(f"Engine error: {exc}")
        return DispatchOutcome.CONTINUE

    def print_turn(self, handle: EngineHandle) -> None:
        """Fetch and print commit, status and context of a session."""
        commit = self.engine.get_commit(handle)
        status = self.engine.get_status(handle)
        context = self.engine.get_context(handle)
        self.output.emit_lines(format_turn(commit, status, context))

    # ------------------------------------------------------------------
    # Shared printing
    # ------------------------------------------------------------------

    def _print_sessions(self) -> None:
        self.output.emit_lines(format_session_list(self.registry.listings()))

    def _print_current_schema(self) -> None:
        schema_id = self.engine.get_current_schema(self.context.active_handle)
        self.output.emit_lines(format_current_schema(schema_id))

    # ------------------------------------------------------------------
    # Command handlers
    # ------------------------------------------------------------------

    def _list_sessions(self, command: Command) -> None:
        self._print_sessions()

    def _add_session(self, command: Command) -> None:
        handle = self.engine.create_session()
        if handle == NO_SESSION:
            self.output.error("Error creating new engine session.")
            return
        local_id = self.registry.add(handle)
        self.registry.select_active(local_id)
        self._print_sessions()
        self._print_current_schema()

    def _list_schemas(self, command: Command) -> None:
        schemas = self.engine.get_schema_list()
        self.output.emit_lines(format_schema_list(schemas))
        self._print_current_schema()

    def _select_schema(self, command: Command) -> None:
        schema_id = command.argument or ""
        if self.engine.select_schema(self.context.active_handle, schema_id):
            self.output.emit(f"selected schema: [{schema_id}]")
        else:
            self.output.error(f"cannot select schema [{schema_id}].")

    def _select_candidate(self, command: Command) -> None:
        index = command.index if command.index is not None else 0
        handle = self.context.active_handle
        if index > 0 and self.engine.select_candidate_on_current_page(handle, index - 1):
            self.print_turn(handle)
        else:
            self.output.error(f"cannot select candidate at index {index}.")

    def _list_candidates(self, command: Command) -> None:
        lines: list[str] = []
        with self.engine.iterate_candidates(self.context.active_handle) as candidates:
            for item in candidates:
                lines.append(format_candidate_item(item))
        self.output.emit_lines(lines or [NO_CANDIDATES])

    def _set_option(self, command: Command) -> None:
        option = command.argument or ""
        if not option:
            self.output.error("missing option name.")
            return
        self.engine.set_option(self.context.active_handle, option, command.enabled)
        self.output.emit(f"{option} set {'on' if command.enabled else 'off'}.")

    def _synchronize(self, command: Command) -> None:
        if self.engine.sync_user_data():
            self.output.emit("user data synchronized.")
        else:
            self.output.error("Error synchronizing user data.")

    def _select_session(self, command: Command) -> None:
        if command.index is None or not self.registry.select_active(command.index):
            self.output.error(INVALID_SESSION_INDEX)
            return
        self._print_sessions()
        self._print_current_schema()

    def _kill_session(self, command: Command) -> None:
        if command.index is None or command.index <= 0:
            self.output.error(INVALID_SESSION_INDEX)
            return
        result = self.registry.kill(command.index)
        if result is KillResult.NOT_FOUND:
            self.output.error(INVALID_SESSION_INDEX)
        elif result is KillResult.LAST_SESSION:
            self.output.emit(LAST_SESSION)
            self._print_sessions()
        else:
            self._print_sessions()
            self._print_current_schema()

    def _inject_keys(self, command: Command) -> None:
        handle = self.context.active_handle
        if self.engine.inject_key_sequence(handle, command.text):
            self.print_turn(handle)
        else:
            self.output.error(f"Error processing key sequence: {command.text}")
