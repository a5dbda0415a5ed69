"""Session registry module."""
from __future__ import annotations

from imeconsole.session.registry import (
    KillResult,
    SessionEntry,
    SessionListing,
    SessionRegistry,
)

__all__ = ["KillResult", "SessionEntry", "SessionListing", "SessionRegistry"]
