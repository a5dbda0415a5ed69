"""State renderer module.

Exports the pure formatting functions used by the dispatcher and the
notification bridge.
"""
from __future__ import annotations

from imeconsole.render.renderer import (
    NO_CANDIDATES,
    NOT_COMPOSING,
    composition_text,
    format_candidate_item,
    format_commit,
    format_composition,
    format_context,
    format_current_schema,
    format_menu,
    format_notification,
    format_option_label,
    format_schema_list,
    format_session_list,
    format_status,
    format_turn,
    parse_option_value,
    status_flags,
)

__all__ = [
    "NO_CANDIDATES",
    "NOT_COMPOSING",
    "composition_text",
    "format_candidate_item",
    "format_commit",
    "format_composition",
    "format_context",
    "format_current_schema",
    "format_menu",
    "format_notification",
    "format_option_label",
    "format_schema_list",
    "format_session_list",
    "format_status",
    "format_turn",
    "parse_option_value",
    "status_flags",
]
