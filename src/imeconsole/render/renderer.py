"""Deterministic text rendering of engine state.

Every function here is pure: it takes value objects reported by an
engine and returns the lines to print, without calling the engine.
The same input always yields the same lines.

Output shapes
-------------
::

    commit: 你好
    schema: demo_pinyin / Demo Pinyin
    status: composing ascii_mode
    [ni]|
    page: 1  (of size 5)
    1. [你]
    2.  尼

Usage
-----
::

    from imeconsole.render import format_turn

    for line in format_turn(commit, status, context):
        print(line)
"""
from __future__ import annotations

from collections.abc import Sequence

from imeconsole.engine.types import (
    CandidateItem,
    CandidateMenu,
    CommitResult,
    CompositionSpan,
    EngineContext,
    NotificationEvent,
    SchemaList,
    StatusSnapshot,
)
from imeconsole.session.registry import SessionListing

NOT_COMPOSING = "(not composing)"
NO_CANDIDATES = "no candidates."


# ---------------------------------------------------------------------------
# Per-turn state
# ---------------------------------------------------------------------------


def status_flags(status: StatusSnapshot) -> list[str]:
    """Return the names of the active status flags in canonical order."""
    flags = [
        ("disabled", status.is_disabled),
        ("composing", status.is_composing),
        ("ascii_mode", status.is_ascii_mode),
        ("full_shape", status.is_full_shape),
        ("simplified", status.is_simplified),
    ]
    return [name for name, active in flags if active]


def format_status(status: StatusSnapshot) -> list[str]:
    return [
        f"schema: {status.schema_id} / {status.schema_name}",
        " ".join(["status:", *status_flags(status)]),
    ]


def composition_text(span: CompositionSpan) -> str:
    """Render a composition buffer with selection brackets and cursor.

    Offsets ``0..len(preedit)`` are visited in order.  At each offset the
    markers are emitted as ``[`` (selection start), ``]`` (selection end),
    ``|`` (cursor), followed by the character at that offset.  Brackets
    appear only when the selection is non-empty.
    """
    preedit = span.preedit or ""
    length = len(preedit)
    has_selection = span.sel_start < span.sel_end
    out: list[str] = []
    for i in range(length + 1):
        if has_selection:
            if i == span.sel_start:
                out.append("[")
            if i == span.sel_end:
                out.append("]")
        if i == span.cursor_pos:
            out.append("|")
        if i < length:
            out.append(preedit[i])
    return "".join(out)


def format_composition(span: CompositionSpan) -> list[str]:
    if span.preedit is None:
        return []
    return [composition_text(span)]


def format_menu(menu: CandidateMenu) -> list[str]:
    if menu.num_candidates == 0:
        return []
    marker = "$" if menu.is_last_page else " "
    lines = [f"page: {menu.page_no + 1}{marker} (of size {menu.page_size})"]
    for i, candidate in enumerate(menu.candidates):
        highlighted = i == menu.highlighted_index
        left, right = ("[", "]") if highlighted else (" ", " ")
        lines.append(f"{i + 1}. {left}{candidate.text}{right}{candidate.comment or ''}")
    return lines


def format_context(context: EngineContext) -> list[str]:
    if context.composition.length > 0 or context.menu.num_candidates > 0:
        lines = format_composition(context.composition)
    else:
        lines = [NOT_COMPOSING]
    return lines + format_menu(context.menu)


def format_commit(commit: CommitResult) -> list[str]:
    if commit.text is None:
        return []
    return [f"commit: {commit.text}"]


def format_turn(
    commit: CommitResult | None,
    status: StatusSnapshot | None,
    context: EngineContext | None,
) -> list[str]:
    """Render the state following a key injection or candidate selection.

    Each part is optional and rendered independently, in the order
    commit, status, context.
    """
    lines: list[str] = []
    if commit is not None:
        lines.extend(format_commit(commit))
    if status is not None:
        lines.extend(format_status(status))
    if context is not None:
        lines.extend(format_context(context))
    return lines


# ---------------------------------------------------------------------------
# Listings
# ---------------------------------------------------------------------------


def format_session_list(listings: Sequence[SessionListing]) -> list[str]:
    lines = ["current sessions list:"]
    for item in listings:
        mark = ">" if item.is_active else " "
        lines.append(
            f"{mark} {item.local_id}. session_id: {item.handle:x}, "
            f"schema_id: {item.schema_id or ''}"
        )
    return lines


def format_current_schema(schema_id: str | None) -> list[str]:
    if schema_id is None:
        return []
    return [f"current schema: [{schema_id}]"]


def format_schema_list(schemas: SchemaList) -> list[str]:
    lines = ["schema list:"]
    for i, schema in enumerate(schemas, start=1):
        lines.append(f"{i}. {schema.name} [{schema.schema_id}]")
    return lines


def format_candidate_item(item: CandidateItem) -> str:
    text = f"{item.index + 1}. {item.text}"
    if item.comment:
        text += f" ({item.comment})"
    return text


# ---------------------------------------------------------------------------
# Notifications
# ---------------------------------------------------------------------------


def format_notification(event: NotificationEvent) -> str:
    return f"message: [{event.session_handle}] [{event.message_type}] {event.message_value}"


def parse_option_value(value: str) -> tuple[str, bool]:
    """Split an ``option`` message value into ``(name, state)``.

    A leading ``!`` marks the option as switched off.
    """
    if value.startswith("!"):
        return value[1:], False
    return value, True


def format_option_label(option: str, state: bool, label: str) -> str:
    return f"updated option: {option} = {int(state)} // {label}"


__all__ = [
    "NOT_COMPOSING",
    "NO_CANDIDATES",
    "status_flags",
    "format_status",
    "composition_text",
    "format_composition",
    "format_menu",
    "format_context",
    "format_commit",
    "format_turn",
    "format_session_list",
    "format_current_schema",
    "format_schema_list",
    "format_candidate_item",
    "format_notification",
    "parse_option_value",
    "format_option_label",
]
