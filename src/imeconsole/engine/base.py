"""Abstract base class for engine clients.

An engine client is the only boundary between the console and an input
method engine.  The console drives sessions exclusively through the
methods declared on ``EngineClient``; any implementation honouring the
contract below can be plugged in through the engine registry.

The contract for implementations is:

* ``setup`` is called exactly once per process, before anything else.
* ``subscribe_notifications`` is called before every ``initialize``;
  ``finalize`` drops the subscription together with all sessions.
* Every other operation raises
  :class:`~imeconsole.engine.errors.EngineUnavailableError` while the
  engine is not initialized.
* Queries return ``None`` (not an error) when there is nothing to report,
  and boolean operations return ``False`` on rejection instead of raising.
* Optional capabilities are advertised through ``supports_*`` methods;
  callers check them before using the corresponding operation.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterator
from types import TracebackType

from imeconsole.engine.types import (
    CandidateItem,
    CommitResult,
    EngineContext,
    EngineHandle,
    EngineTraits,
    NotificationHandler,
    SchemaList,
    StatusSnapshot,
)


class CandidateIterator:
    """Single-pass iterator over every candidate of a session.

    The iterator is not restartable: ``iter()`` returns the iterator
    itself.  It must either be drained or closed; using it as a context
    manager guarantees the latter.

    Parameters
    ----------
    items:
        Lazy source of candidates, typically a generator owned by the
        engine.
    """

    def __init__(self, items: Iterator[CandidateItem]) -> None:
        self._items: Iterator[CandidateItem] | None = items

    def __iter__(self) -> CandidateIterator:
        return self

    def __next__(self) -> CandidateItem:
        if self._items is None:
            raise StopIteration
        try:
            return next(self._items)
        except StopIteration:
            self.close()
            raise

    def close(self) -> None:
        """Release the underlying source.  Safe to call more than once."""
        items, self._items = self._items, None
        close = getattr(items, "close", None)
        if close is not None:
            close()

    @property
    def closed(self) -> bool:
        return self._items is None

    def __enter__(self) -> CandidateIterator:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


class EngineClient(ABC):
    """Capability-queryable handle on an input method engine.

    Subclasses implement the abstract lifecycle, session and query
    operations.  Optional capabilities default to "not supported".
    """

    #: Short name under which the engine is registered; set by the registry.
    engine_name: str = ""

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @abstractmethod
    def setup(self, traits: EngineTraits) -> None:
        """Perform one-time process-wide initialization."""

    @abstractmethod
    def initialize(self, traits: EngineTraits | None = None) -> None:
        """Load engine state.  ``traits`` overrides those given to ``setup``."""

    @abstractmethod
    def finalize(self) -> None:
        """Tear down engine state, invalidating every session handle."""

    @abstractmethod
    def start_maintenance(self, full_check: bool) -> bool:
        """Start background maintenance; return ``True`` if a thread started."""

    @abstractmethod
    def join_maintenance_thread(self) -> None:
        """Block until background maintenance has finished."""

    @abstractmethod
    def subscribe_notifications(self, handler: NotificationHandler) -> None:
        """Register the single process-wide notification handler.

        The handler is invoked on an engine-owned thread.  Registering a
        new handler replaces the previous one.
        """

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    @abstractmethod
    def create_session(self) -> EngineHandle:
        """Create a session; return its handle, or ``0`` on failure."""

    @abstractmethod
    def destroy_session(self, handle: EngineHandle) -> bool:
        """Destroy a session; return ``False`` if the handle is unknown."""

    @abstractmethod
    def inject_key_sequence(self, handle: EngineHandle, keys: str) -> bool:
        """Feed a key sequence to a session.

        Returns ``False`` when the sequence cannot be processed.  Never
        raises for malformed input.
        """

    # ------------------------------------------------------------------
    # State queries
    # ------------------------------------------------------------------

    @abstractmethod
    def get_commit(self, handle: EngineHandle) -> CommitResult | None:
        """Return and consume the pending commit, or ``None``."""

    @abstractmethod
    def get_status(self, handle: EngineHandle) -> StatusSnapshot | None: ...

    @abstractmethod
    def get_context(self, handle: EngineHandle) -> EngineContext | None: ...

    @abstractmethod
    def get_current_schema(self, handle: EngineHandle) -> str | None: ...

    # ------------------------------------------------------------------
    # Schema, candidates and options
    # ------------------------------------------------------------------

    @abstractmethod
    def get_schema_list(self) -> SchemaList: ...

    @abstractmethod
    def select_schema(self, handle: EngineHandle, schema_id: str) -> bool: ...

    @abstractmethod
    def select_candidate_on_current_page(self, handle: EngineHandle, index: int) -> bool:
        """Select the candidate at zero-based ``index`` of the visible page."""

    @abstractmethod
    def iterate_candidates(self, handle: EngineHandle) -> CandidateIterator:
        """Return an iterator over every candidate of the session."""

    @abstractmethod
    def set_option(self, handle: EngineHandle, name: str, enabled: bool) -> None: ...

    @abstractmethod
    def get_option(self, handle: EngineHandle, name: str) -> bool: ...

    @abstractmethod
    def sync_user_data(self) -> bool:
        """Synchronize user data; return ``True`` on success."""

    # ------------------------------------------------------------------
    # Optional capabilities
    # ------------------------------------------------------------------

    def supports_state_label(self) -> bool:
        """Return ``True`` if ``get_state_label`` may be called."""
        return False

    def get_state_label(
        self, handle: EngineHandle, option: str, state: bool
    ) -> str | None:
        """Return the human-readable label of an option state.

        Only called when ``supports_state_label()`` is ``True``.
        """
        raise NotImplementedError(
            f"{type(self).__name__} does not provide state labels"
        )
