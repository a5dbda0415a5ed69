"""Command grammar: classifies console input lines.

Each line is matched against a fixed table of administrative command
patterns, in order; the first match wins.  A line matching none of them
is a raw key sequence for the active session.

- ``ls sessions``: LIST_SESSIONS
- ``add session``: ADD_SESSION
- ``print schema list`` or ``ls schemas``: LIST_SCHEMAS
- ``select schema <id>``: SELECT_SCHEMA
- ``select candidate <n>``: SELECT_CANDIDATE
- ``print candidate list``: LIST_CANDIDATES
- ``set option <name>`` or ``set option !<name>``: SET_OPTION
- ``synchronize``: SYNCHRONIZE
- ``select session<n>``: SELECT_SESSION
- ``kill session<n>``: KILL_SESSION
- ``exit``: EXIT
- ``reload``: RELOAD
- anything else: KEYS, carrying the whole line

Integer arguments use leading-integer semantics: optional whitespace
and separator punctuation, then a decimal number; anything unparsable
becomes ``None``.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum, auto
from typing import Final


class CommandKind(Enum):
    """Kinds of console input."""

    LIST_SESSIONS = auto()
    ADD_SESSION = auto()
    LIST_SCHEMAS = auto()
    SELECT_SCHEMA = auto()
    SELECT_CANDIDATE = auto()
    LIST_CANDIDATES = auto()
    SET_OPTION = auto()
    SYNCHRONIZE = auto()
    SELECT_SESSION = auto()
    KILL_SESSION = auto()
    EXIT = auto()
    RELOAD = auto()
    KEYS = auto()


@dataclass(frozen=True, slots=True)
class Command:
    """A classified input line.

    Parameters
    ----------
    kind:
        What the line asks for.
    text:
        The raw line.
    argument:
        String argument (schema id, option name, key sequence), if any.
    index:
        Integer argument (candidate or session index); ``None`` when the
        command takes one but it could not be parsed.
    enabled:
        For ``SET_OPTION``: ``False`` when the option name was prefixed
        with ``!``.
    """

    kind: CommandKind
    text: str
    argument: str | None = None
    index: int | None = None
    enabled: bool = True


_EXACT: Final[dict[str, CommandKind]] = {
    "ls sessions": CommandKind.LIST_SESSIONS,
    "add session": CommandKind.ADD_SESSION,
    "print schema list": CommandKind.LIST_SCHEMAS,
    "ls schemas": CommandKind.LIST_SCHEMAS,
    "print candidate list": CommandKind.LIST_CANDIDATES,
    "synchronize": CommandKind.SYNCHRONIZE,
    "exit": CommandKind.EXIT,
    "reload": CommandKind.RELOAD,
}

SELECT_SCHEMA_PREFIX: Final = "select schema "
SELECT_CANDIDATE_PREFIX: Final = "select candidate "
SET_OPTION_PREFIX: Final = "set option "
SELECT_SESSION_PREFIX: Final = "select session"
KILL_SESSION_PREFIX: Final = "kill session"

_LEADING_INT: Final[re.Pattern[str]] = re.compile(r"[\s#:.=_]*([+-]?\d+)")


def parse_index(text: str) -> int | None:
    """Parse the integer at the start of ``text``.

    Leading whitespace and separators (``#:.=_``) are skipped; trailing
    text after the digits is ignored.  Returns ``None`` when no number is
    found or the number is too long to convert.
    """
    match = _LEADING_INT.match(text)
    if match is None:
        return None
    try:
        return int(match.group(1))
    except ValueError:
        return None


def parse_command(line: str) -> Command:
    """Classify one input line (without its line terminator)."""
    kind = _EXACT.get(line)
    if kind is not None:
        return Command(kind, line)
    if line.startswith(SELECT_SCHEMA_PREFIX):
        return Command(CommandKind.SELECT_SCHEMA, line, argument=line[len(SELECT_SCHEMA_PREFIX):])
    if line.startswith(SELECT_CANDIDATE_PREFIX):
        return Command(
            CommandKind.SELECT_CANDIDATE,
            line,
            index=parse_index(line[len(SELECT_CANDIDATE_PREFIX):]),
        )
    if line.startswith(SET_OPTION_PREFIX):
        option = line[len(SET_OPTION_PREFIX):]
        enabled = not option.startswith("!")
        return Command(
            CommandKind.SET_OPTION,
            line,
            argument=option if enabled else option[1:],
            enabled=enabled,
        )
    if line.startswith(SELECT_SESSION_PREFIX):
        return Command(
            CommandKind.SELECT_SESSION,
            line,
            index=parse_index(line[len(SELECT_SESSION_PREFIX):]),
        )
    if line.startswith(KILL_SESSION_PREFIX):
        return Command(
            CommandKind.KILL_SESSION,
            line,
            index=parse_index(line[len(KILL_SESSION_PREFIX):]),
        )
    return Command(CommandKind.KEYS, line, argument=line)
