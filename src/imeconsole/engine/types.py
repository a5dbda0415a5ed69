"""Value objects exchanged between the console and an engine.

Every structure an engine reports is returned as a frozen dataclass so
that callers hold an immutable snapshot rather than engine-owned state.
A snapshot is valid only for the turn that produced it; the console
never caches one across input lines.
"""
from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

EngineHandle = int
"""Opaque engine session identifier; ``0`` means "no session"."""

NO_SESSION: EngineHandle = 0


@dataclass(frozen=True, slots=True)
class EngineTraits:
    """Process-wide settings handed to ``setup`` and ``initialize``.

    Parameters
    ----------
    app_name:
        Identifier of the client application, e.g. ``"ime.console"``.
    shared_data_dir:
        Directory holding engine-wide read-only data, if any.
    user_data_dir:
        Directory where the engine may persist user data, if any.
    log_level:
        Name of the logging level the engine should use.
    """

    app_name: str = "ime.console"
    shared_data_dir: Path | None = None
    user_data_dir: Path | None = None
    log_level: str = "WARNING"


@dataclass(frozen=True, slots=True)
class CommitResult:
    """Text committed by the last key injection, if any."""

    text: str | None = None


@dataclass(frozen=True, slots=True)
class StatusSnapshot:
    """Session status flags and the current schema."""

    schema_id: str
    schema_name: str
    is_disabled: bool = False
    is_composing: bool = False
    is_ascii_mode: bool = False
    is_full_shape: bool = False
    is_simplified: bool = False


@dataclass(frozen=True, slots=True)
class CompositionSpan:
    """The composition buffer with its selected segment and cursor.

    Offsets are character offsets into ``preedit``.  ``preedit`` is
    ``None`` when the engine has no buffer to report.
    """

    preedit: str | None = None
    sel_start: int = 0
    sel_end: int = 0
    cursor_pos: int = 0

    @property
    def length(self) -> int:
        return len(self.preedit) if self.preedit is not None else 0


@dataclass(frozen=True, slots=True)
class Candidate:
    """One entry of a candidate menu."""

    text: str
    comment: str | None = None


@dataclass(frozen=True, slots=True)
class CandidateMenu:
    """The visible page of candidates."""

    page_no: int = 0
    page_size: int = 0
    is_last_page: bool = True
    highlighted_index: int = 0
    candidates: tuple[Candidate, ...] = ()

    @property
    def num_candidates(self) -> int:
        return len(self.candidates)


@dataclass(frozen=True, slots=True)
class EngineContext:
    """Composition and menu of a session, fetched together."""

    composition: CompositionSpan = field(default_factory=CompositionSpan)
    menu: CandidateMenu = field(default_factory=CandidateMenu)


@dataclass(frozen=True, slots=True)
class SchemaDescriptor:
    """An installed schema."""

    schema_id: str
    name: str


SchemaList = tuple[SchemaDescriptor, ...]


@dataclass(frozen=True, slots=True)
class CandidateItem:
    """A candidate produced by candidate iteration, across all pages."""

    index: int
    text: str
    comment: str | None = None


@dataclass(frozen=True, slots=True)
class NotificationEvent:
    """An out-of-band event raised by the engine.

    For ``message_type == "option"`` the value is the option name,
    prefixed with ``!`` when the option was switched off.
    """

    session_handle: EngineHandle
    message_type: str
    message_value: str


NotificationHandler = Callable[[NotificationEvent], None]
