"""Session registry: operator-facing numbering of engine sessions.

Each live engine session is addressed by a small ``local_id`` assigned
by the registry (1, 2, 3, ...).  One entry is always the active session;
key input and administrative commands are routed to it.

Invariants
----------
- ``local_id`` of a new entry is one more than the largest existing id,
  or 1 for an empty registry.
- While the console runs the registry is never empty, and
  ``active_id`` names a live entry.  ``kill`` refuses to remove the last
  entry.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum, auto

from imeconsole.engine.base import EngineClient
from imeconsole.engine.types import EngineHandle

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SessionEntry:
    """A registered engine session."""

    local_id: int
    handle: EngineHandle


@dataclass(frozen=True, slots=True)
class SessionListing:
    """A registry entry annotated for display."""

    local_id: int
    handle: EngineHandle
    is_active: bool
    schema_id: str | None


class KillResult(Enum):
    """Outcome of ``SessionRegistry.kill``.

    KILLED
        The session was destroyed and removed.
    LAST_SESSION
        The session is the only one left; nothing was changed.
    NOT_FOUND
        No session has the given id; nothing was changed.
    """

    KILLED = auto()
    LAST_SESSION = auto()
    NOT_FOUND = auto()


class SessionRegistry:
    """Ordered mapping of ``local_id`` to engine sessions.

    Parameters
    ----------
    engine:
        Engine owning the sessions; used to destroy killed sessions and
        to look up each session's current schema when listing.
    """

    def __init__(self, engine: EngineClient) -> None:
        self._engine = engine
        self._entries: dict[int, SessionEntry] = {}
        self._active_id: int | None = None

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def active_id(self) -> int | None:
        return self._active_id

    @property
    def active_handle(self) -> EngineHandle:
        """Handle of the active session.

        Raises
        ------
        LookupError
            If the registry is empty.
        """
        if self._active_id is None:
            raise LookupError("no active session")
        return self._entries[self._active_id].handle

    def get(self, local_id: int) -> SessionEntry | None:
        return self._entries.get(local_id)

    def entries(self) -> list[SessionEntry]:
        """Return all entries in ascending ``local_id`` order."""
        return [self._entries[key] for key in sorted(self._entries)]

    def listings(self) -> list[SessionListing]:
        """Return all entries annotated with activity and live schema id."""
        return [
            SessionListing(
                local_id=entry.local_id,
                handle=entry.handle,
                is_active=entry.local_id == self._active_id,
                schema_id=self._engine.get_current_schema(entry.handle),
            )
            for entry in self.entries()
        ]

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, local_id: object) -> bool:
        return local_id in self._entries

    def __repr__(self) -> str:
        return f"SessionRegistry(ids={sorted(self._entries)}, active={self._active_id})"

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def add(self, handle: EngineHandle) -> int:
        """Register ``handle`` and return its new ``local_id``.

        The active selection is left unchanged, except that the first
        entry of an empty registry becomes active.
        """
        local_id = max(self._entries, default=0) + 1
        self._entries[local_id] = SessionEntry(local_id=local_id, handle=handle)
        if self._active_id is None:
            self._active_id = local_id
        logger.debug("Added session %d -> %x", local_id, handle)
        return local_id

    def select_active(self, local_id: int) -> bool:
        if local_id not in self._entries:
            return False
        self._active_id = local_id
        logger.debug("Active session is now %d", local_id)
        return True

    def kill(self, local_id: int) -> KillResult:
        """Destroy and remove the session ``local_id``.

        When the killed session was active, the next higher ``local_id``
        becomes active, wrapping around to the lowest one.
        """
        if local_id not in self._entries:
            return KillResult.NOT_FOUND
        if len(self._entries) == 1:
            return KillResult.LAST_SESSION
        entry = self._entries.pop(local_id)
        self._engine.destroy_session(entry.handle)
        logger.debug("Killed session %d (%x)", local_id, entry.handle)
        if self._active_id == local_id:
            remaining = sorted(self._entries)
            higher = [key for key in remaining if key > local_id]
            self._active_id = higher[0] if higher else remaining[0]
            logger.debug("Active session is now %d", self._active_id)
        return KillResult.KILLED

    def clear(self, destroy: bool = True) -> None:
        """Remove every entry, destroying the engine sessions if asked."""
        if destroy:
            for entry in self.entries():
                self._engine.destroy_session(entry.handle)
        self._entries.clear()
        self._active_id = None

    def reset(self, handle: EngineHandle) -> None:
        """Forget all entries and start over with ``{1: handle}`` active."""
        self.clear(destroy=False)
        self.add(handle)
