"""Command grammar and dispatcher.

Exports ``parse_command`` and the ``Command`` types from the grammar,
and ``CommandDispatcher`` with its context and outcome types.
"""
from __future__ import annotations

from imeconsole.commands.dispatcher import CommandDispatcher, ConsoleContext, DispatchOutcome
from imeconsole.commands.grammar import Command, CommandKind, parse_command, parse_index

__all__ = [
    "Command",
    "CommandKind",
    "CommandDispatcher",
    "ConsoleContext",
    "DispatchOutcome",
    "parse_command",
    "parse_index",
]
