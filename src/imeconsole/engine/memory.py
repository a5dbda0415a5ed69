"""In-process reference engine.

``MemoryEngine`` implements the full ``EngineClient`` contract on top of
small code tables (see :mod:`imeconsole.engine.schemas`).  It exists so
the console can be exercised end to end without a native input method
engine, and so tests have a deterministic collaborator.

Key sequences
-------------
A key sequence is a string of literal characters and ``{Name}`` tokens:

- ``{BackSpace}``, ``{Escape}``, ``{Return}``
- ``{Page_Up}``, ``{Page_Down}``, ``{Up}``, ``{Down}``
- ``{space}``, ``{braceleft}``, ``{braceright}``

Characters of the schema alphabet extend the composition; space commits
the highlighted candidate; digits pick a candidate on the current page;
any other printable character commits the composition and then itself.
An unknown ``{Name}`` or a stray brace rejects the whole sequence before
any key is processed.

Threads
-------
Notifications are queued and delivered to the subscribed handler on a
dedicated daemon thread.  Maintenance runs on its own thread; sessions
report ``is_disabled`` until it is joined.
"""
from __future__ import annotations

import itertools
import logging
import queue
import re
import threading
from collections import Counter
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from imeconsole.engine.base import CandidateIterator, EngineClient
from imeconsole.engine.errors import EngineUnavailableError
from imeconsole.engine.registry import engine_registry
from imeconsole.engine.schemas import BUILTIN_SCHEMAS, SchemaTable, load_schemas
from imeconsole.engine.types import (
    NO_SESSION,
    Candidate,
    CandidateItem,
    CandidateMenu,
    CommitResult,
    CompositionSpan,
    EngineContext,
    EngineHandle,
    EngineTraits,
    NotificationEvent,
    NotificationHandler,
    SchemaDescriptor,
    SchemaList,
    StatusSnapshot,
)

logger = logging.getLogger(__name__)

_KEY_TOKEN = re.compile(r"\{([^{}]*)\}|(.)", re.DOTALL)

_NAMED_CHARS: dict[str, str] = {
    "space": " ",
    "braceleft": "{",
    "braceright": "}",
}

_NAMED_KEYS = frozenset(
    {"BackSpace", "Escape", "Return", "Page_Up", "Page_Down", "Up", "Down"}
)

_STATE_LABELS: dict[str, tuple[str, str]] = {
    "ascii_mode": ("中文", "西文"),
    "full_shape": ("半角", "全角"),
    "simplified": ("漢字", "汉字"),
}


def parse_key_sequence(keys: str) -> list[str] | None:
    """Split a key sequence into keys.

    Literal characters (and named characters such as ``{space}``) come
    back as one-character strings; other named keys come back as their
    name.  Returns ``None`` when the sequence contains an unknown name or
    an unbalanced brace.
    """
    result: list[str] = []
    for match in _KEY_TOKEN.finditer(keys):
        name, char = match.group(1), match.group(2)
        if char is not None:
            if char in "{}":
                return None
            result.append(char)
        elif name in _NAMED_CHARS:
            result.append(_NAMED_CHARS[name])
        elif name in _NAMED_KEYS:
            result.append(name)
        else:
            return None
    return result


def _full_width(ch: str) -> str:
    if ch == " ":
        return "\u3000"
    code = ord(ch)
    if 0x21 <= code <= 0x7E:
        return chr(code + 0xFEE0)
    return ch


@dataclass
class _Session:
    schema: SchemaTable
    buffer: str = ""
    highlighted: int = 0
    pending: list[str] = field(default_factory=list)
    options: dict[str, bool] = field(default_factory=dict)

    def candidates(self) -> list[Candidate]:
        return self.schema.lookup(self.buffer)

    @property
    def page_no(self) -> int:
        return self.highlighted // self.schema.page_size

    def clear(self) -> None:
        self.buffer = ""
        self.highlighted = 0


class _NotificationPump:
    """Delivers queued events to a handler on a background thread."""

    def __init__(self, handler: NotificationHandler) -> None:
        self._handler = handler
        self._queue: queue.Queue[NotificationEvent | None] = queue.Queue()
        self._thread = threading.Thread(
            target=self._run, name="imeconsole-notifications", daemon=True
        )
        self._thread.start()

    def post(self, event: NotificationEvent) -> None:
        self._queue.put(event)

    def wait_idle(self) -> None:
        self._queue.join()

    def stop(self) -> None:
        """Deliver everything still queued, then stop the thread."""
        self._queue.put(None)
        self._thread.join()

    def _run(self) -> None:
        while True:
            event = self._queue.get()
            try:
                if event is None:
                    return
                try:
                    self._handler(event)
                except Exception:
                    logger.exception("Notification handler failed for %r", event)
            finally:
                self._queue.task_done()


@engine_registry.register("memory")
class MemoryEngine(EngineClient):
    """Deterministic table-driven engine.

    Parameters
    ----------
    schemas_file:
        YAML file with schema tables.  The built-in demo schemas are used
        when omitted.
    state_labels:
        Whether to advertise the state-label capability.
    max_sessions:
        Upper bound on concurrent sessions; ``create_session`` returns
        ``0`` once it is reached.
    """

    def __init__(
        self,
        schemas_file: str | Path | None = None,
        state_labels: bool = True,
        max_sessions: int | None = None,
    ) -> None:
        self._schemas_file = Path(schemas_file) if schemas_file is not None else None
        self._state_labels = state_labels
        self._max_sessions = max_sessions
        self._traits: EngineTraits | None = None
        self._initialized = False
        self._schemas: dict[str, SchemaTable] = {}
        self._sessions: dict[EngineHandle, _Session] = {}
        self._handles = itertools.count(1)
        self._handler: NotificationHandler | None = None
        self._pump: _NotificationPump | None = None
        self._maintenance: threading.Thread | None = None
        self._deployed = False
        self._user_freq: dict[str, Counter[str]] = {}

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def setup(self, traits: EngineTraits) -> None:
        self._traits = traits
        logger.debug("Engine set up for app %r", traits.app_name)

    def initialize(self, traits: EngineTraits | None = None) -> None:
        if self._traits is None:
            raise EngineUnavailableError("initialize")
        if traits is not None:
            self._traits = traits
        tables = load_schemas(self._schemas_file) if self._schemas_file else BUILTIN_SCHEMAS
        self._schemas = {table.schema_id: table for table in tables}
        if self._handler is not None:
            self._pump = _NotificationPump(self._handler)
        self._deployed = False
        self._initialized = True
        logger.debug("Engine initialized with schemas %s", list(self._schemas))

    def finalize(self) -> None:
        if not self._initialized:
            return
        self.join_maintenance_thread()
        if self._pump is not None:
            self._pump.stop()
            self._pump = None
        self._handler = None
        self._sessions.clear()
        self._initialized = False
        logger.debug("Engine finalized")

    def start_maintenance(self, full_check: bool) -> bool:
        self._require("start_maintenance")
        if self._deployed and not full_check:
            return False
        self._maintenance = threading.Thread(
            target=self._maintain, name="imeconsole-maintenance", daemon=True
        )
        self._maintenance.start()
        return True

    def join_maintenance_thread(self) -> None:
        thread, self._maintenance = self._maintenance, None
        if thread is not None:
            thread.join()

    def subscribe_notifications(self, handler: NotificationHandler) -> None:
        self._handler = handler

    def wait_for_notifications(self) -> None:
        """Block until every queued notification has been handled."""
        if self._pump is not None:
            self._pump.wait_idle()

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    def create_session(self) -> EngineHandle:
        self._require("create_session")
        if self._max_sessions is not None and len(self._sessions) >= self._max_sessions:
            logger.debug("Session limit %d reached", self._max_sessions)
            return NO_SESSION
        handle = next(self._handles)
        self._sessions[handle] = _Session(schema=next(iter(self._schemas.values())))
        logger.debug("Created session %x", handle)
        return handle

    def destroy_session(self, handle: EngineHandle) -> bool:
        self._require("destroy_session")
        if self._sessions.pop(handle, None) is None:
            return False
        logger.debug("Destroyed session %x", handle)
        return True

    def inject_key_sequence(self, handle: EngineHandle, keys: str) -> bool:
        self._require("inject_key_sequence")
        session = self._sessions.get(handle)
        if session is None:
            return False
        parsed = parse_key_sequence(keys)
        if parsed is None:
            logger.debug("Rejected key sequence %r", keys)
            return False
        for key in parsed:
            self._process_key(session, key)
        return True

    # ------------------------------------------------------------------
    # State queries
    # ------------------------------------------------------------------

    def get_commit(self, handle: EngineHandle) -> CommitResult | None:
        self._require("get_commit")
        session = self._sessions.get(handle)
        if session is None or not session.pending:
            return None
        text = "".join(session.pending)
        session.pending.clear()
        return CommitResult(text=text)

    def get_status(self, handle: EngineHandle) -> StatusSnapshot | None:
        self._require("get_status")
        session = self._sessions.get(handle)
        if session is None:
            return None
        return StatusSnapshot(
            schema_id=session.schema.schema_id,
            schema_name=session.schema.name,
            is_disabled=self._maintenance is not None and self._maintenance.is_alive(),
            is_composing=bool(session.buffer),
            is_ascii_mode=session.options.get("ascii_mode", False),
            is_full_shape=session.options.get("full_shape", False),
            is_simplified=session.options.get("simplified", False),
        )

    def get_context(self, handle: EngineHandle) -> EngineContext | None:
        self._require("get_context")
        session = self._sessions.get(handle)
        if session is None:
            return None
        if not session.buffer:
            return EngineContext()
        size = session.schema.page_size
        candidates = session.candidates()
        start = session.page_no * size
        composition = CompositionSpan(
            preedit=session.buffer,
            sel_start=0,
            sel_end=len(session.buffer),
            cursor_pos=len(session.buffer),
        )
        menu = CandidateMenu(
            page_no=session.page_no,
            page_size=size,
            is_last_page=start + size >= len(candidates),
            highlighted_index=session.highlighted - start,
            candidates=tuple(candidates[start:start + size]),
        )
        return EngineContext(composition=composition, menu=menu)

    def get_current_schema(self, handle: EngineHandle) -> str | None:
        self._require("get_current_schema")
        session = self._sessions.get(handle)
        return session.schema.schema_id if session is not None else None

    # ------------------------------------------------------------------
    # Schema, candidates and options
    # ------------------------------------------------------------------

    def get_schema_list(self) -> SchemaList:
        self._require("get_schema_list")
        return tuple(
            SchemaDescriptor(schema_id=table.schema_id, name=table.name)
            for table in self._schemas.values()
        )

    def select_schema(self, handle: EngineHandle, schema_id: str) -> bool:
        self._require("select_schema")
        session = self._sessions.get(handle)
        table = self._schemas.get(schema_id)
        if session is None or table is None:
            return False
        session.schema = table
        session.clear()
        self._notify(handle, "schema", f"{table.schema_id}/{table.name}")
        return True

    def select_candidate_on_current_page(self, handle: EngineHandle, index: int) -> bool:
        self._require("select_candidate_on_current_page")
        session = self._sessions.get(handle)
        if session is None or not session.buffer:
            return False
        return self._select_on_page(session, index)

    def iterate_candidates(self, handle: EngineHandle) -> CandidateIterator:
        self._require("iterate_candidates")
        session = self._sessions.get(handle)
        candidates = session.candidates() if session is not None else []

        def items() -> Iterator[CandidateItem]:
            for index, candidate in enumerate(candidates):
                yield CandidateItem(index=index, text=candidate.text, comment=candidate.comment)

        return CandidateIterator(items())

    def set_option(self, handle: EngineHandle, name: str, enabled: bool) -> None:
        self._require("set_option")
        session = self._sessions.get(handle)
        if session is None:
            return
        session.options[name] = enabled
        self._notify(handle, "option", name if enabled else f"!{name}")

    def get_option(self, handle: EngineHandle, name: str) -> bool:
        self._require("get_option")
        session = self._sessions.get(handle)
        return session is not None and session.options.get(name, False)

    def sync_user_data(self) -> bool:
        self._require("sync_user_data")
        traits = self._traits
        if traits is None:
            raise EngineUnavailableError("sync_user_data")
        if traits.user_data_dir is None:
            logger.debug("No user data directory configured; nothing to sync")
            return True
        path = Path(traits.user_data_dir) / f"{traits.app_name}.userdb.yaml"
        snapshot = {
            schema_id: dict(counter.most_common())
            for schema_id, counter in sorted(self._user_freq.items())
        }
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(
                yaml.dump(snapshot, default_flow_style=False, allow_unicode=True),
                encoding="utf-8",
            )
        except OSError:
            logger.exception("Failed to write user data to %s", path)
            return False
        logger.debug("Synced user data to %s", path)
        return True

    # ------------------------------------------------------------------
    # Optional capabilities
    # ------------------------------------------------------------------

    def supports_state_label(self) -> bool:
        return self._state_labels

    def get_state_label(
        self, handle: EngineHandle, option: str, state: bool
    ) -> str | None:
        labels = _STATE_LABELS.get(option)
        if labels is None:
            return None
        return labels[1] if state else labels[0]

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _require(self, operation: str) -> None:
        if not self._initialized:
            raise EngineUnavailableError(operation)

    def _notify(self, handle: EngineHandle, message_type: str, value: str) -> None:
        if self._pump is not None:
            self._pump.post(NotificationEvent(handle, message_type, value))

    def _maintain(self) -> None:
        self._notify(NO_SESSION, "deploy", "start")
        for table in self._schemas.values():
            logger.debug("Checked schema %r (%d codes)", table.schema_id, len(table.entries))
        self._deployed = True
        self._notify(NO_SESSION, "deploy", "success")

    def _commit(self, session: _Session, text: str) -> None:
        session.pending.append(text)
        self._user_freq.setdefault(session.schema.schema_id, Counter())[text] += 1

    def _commit_composition(self, session: _Session) -> None:
        candidates = session.candidates()
        if candidates:
            self._commit(session, candidates[session.highlighted].text)
        else:
            self._commit(session, session.buffer)
        session.clear()

    def _process_key(self, session: _Session, key: str) -> None:
        if len(key) > 1:
            self._process_named_key(session, key)
            return
        if session.options.get("ascii_mode", False):
            if session.buffer:
                self._commit(session, session.buffer)
                session.clear()
            self._commit(session, key)
            return
        if key in session.schema.alphabet:
            session.buffer += key
            session.highlighted = 0
            return
        if not session.buffer:
            self._commit(session, self._shape(session, key))
            return
        if key.isdigit() and key != "0":
            self._select_on_page(session, int(key) - 1)
            return
        self._commit_composition(session)
        if key != " ":
            self._commit(session, self._shape(session, key))

    def _select_on_page(self, session: _Session, index: int) -> bool:
        size = session.schema.page_size
        position = session.page_no * size + index
        candidates = session.candidates()
        if not 0 <= index < size or position >= len(candidates):
            return False
        self._commit(session, candidates[position].text)
        session.clear()
        return True

    def _process_named_key(self, session: _Session, key: str) -> None:
        if not session.buffer:
            return
        size = session.schema.page_size
        last = max(len(session.candidates()) - 1, 0)
        if key == "BackSpace":
            session.buffer = session.buffer[:-1]
            session.highlighted = 0
        elif key == "Escape":
            session.clear()
        elif key == "Return":
            self._commit(session, session.buffer)
            session.clear()
        elif key == "Page_Down":
            if (session.page_no + 1) * size <= last:
                session.highlighted = (session.page_no + 1) * size
        elif key == "Page_Up":
            session.highlighted = max(session.page_no - 1, 0) * size
        elif key == "Down":
            session.highlighted = min(session.highlighted + 1, last)
        elif key == "Up":
            session.highlighted = max(session.highlighted - 1, 0)

    @staticmethod
    def _shape(session: _Session, ch: str) -> str:
        return _full_width(ch) if session.options.get("full_shape", False) else ch
