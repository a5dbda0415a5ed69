"""Schema tables for the memory engine.

A schema maps input codes to ordered candidate lists.  The built-in
tables are intentionally tiny; larger tables are loaded from a YAML file
of the form::

    schemas:
      - schema_id: demo_pinyin
        name: Demo Pinyin
        page_size: 5
        alphabet: abcdefghijklmnopqrstuvwxyz
        entries:
          ni: [你, 尼]
          hao:
            - 好
            - {text: 号, comment: hào}
"""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from imeconsole.engine.types import Candidate
from imeconsole.errors import ConfigError

DEFAULT_ALPHABET = "abcdefghijklmnopqrstuvwxyz"
DEFAULT_PAGE_SIZE = 5


@dataclass(frozen=True, slots=True)
class SchemaTable:
    """A schema with its code table.

    Parameters
    ----------
    schema_id:
        Unique identifier, e.g. ``"demo_pinyin"``.
    name:
        Display name.
    page_size:
        Number of candidates per menu page.
    alphabet:
        Characters that extend the composition instead of committing.
    entries:
        Mapping of code to candidates, in table order.
    """

    schema_id: str
    name: str
    page_size: int
    alphabet: str
    entries: dict[str, tuple[Candidate, ...]]

    def lookup(self, code: str) -> list[Candidate]:
        """Return exact matches for ``code`` followed by completions.

        Completions are candidates of longer codes starting with
        ``code``, ordered by code, each commented with the remaining
        input as ``~rest``.
        """
        if not code:
            return []
        found = list(self.entries.get(code, ()))
        for other in sorted(self.entries):
            if other != code and other.startswith(code):
                rest = other[len(code):]
                found.extend(
                    Candidate(text=c.text, comment=f"~{rest}") for c in self.entries[other]
                )
        return found


def _table(
    schema_id: str,
    name: str,
    entries: dict[str, list[Any]],
    page_size: int = DEFAULT_PAGE_SIZE,
    alphabet: str = DEFAULT_ALPHABET,
) -> SchemaTable:
    return SchemaTable(
        schema_id=schema_id,
        name=name,
        page_size=page_size,
        alphabet=alphabet,
        entries={code: _candidates(code, items) for code, items in entries.items()},
    )


# ---------------------------------------------------------------------------
# YAML loading
# ---------------------------------------------------------------------------


def _candidates(code: str, items: Any, source: str | None = None) -> tuple[Candidate, ...]:
    if not isinstance(items, list):
        raise ConfigError(f"entries for code {code!r} must be a list", source)
    result: list[Candidate] = []
    for item in items:
        if isinstance(item, str):
            result.append(Candidate(text=item))
        elif isinstance(item, dict) and isinstance(item.get("text"), str):
            comment = item.get("comment")
            result.append(Candidate(text=item["text"], comment=None if comment is None else str(comment)))
        else:
            raise ConfigError(f"invalid candidate {item!r} for code {code!r}", source)
    return tuple(result)


def schema_from_dict(data: dict[str, Any], source: str | None = None) -> SchemaTable:
    """Build a ``SchemaTable`` from a mapping as found in a schema file.

    Raises
    ------
    ConfigError
        If a required key is missing or has the wrong type.
    """
    if not isinstance(data, dict):
        raise ConfigError(f"schema must be a mapping, got {type(data).__name__}", source)
    schema_id = data.get("schema_id")
    if not isinstance(schema_id, str) or not schema_id:
        raise ConfigError("schema is missing a 'schema_id'", source)
    page_size = data.get("page_size", DEFAULT_PAGE_SIZE)
    if not isinstance(page_size, int) or isinstance(page_size, bool) or not 1 <= page_size <= 9:
        raise ConfigError(f"schema {schema_id!r}: page_size must be between 1 and 9", source)
    entries = data.get("entries", {})
    if not isinstance(entries, dict):
        raise ConfigError(f"schema {schema_id!r}: 'entries' must be a mapping", source)
    return SchemaTable(
        schema_id=schema_id,
        name=str(data.get("name", schema_id)),
        page_size=page_size,
        alphabet=str(data.get("alphabet", DEFAULT_ALPHABET)),
        entries={str(code): _candidates(str(code), items, source) for code, items in entries.items()},
    )


def load_schemas(path: str | Path) -> tuple[SchemaTable, ...]:
    """Load schema tables from a YAML file.

    Raises
    ------
    ConfigError
        If the file cannot be read or does not describe at least one
        schema.
    """
    source = str(path)
    try:
        data = yaml.safe_load(Path(path).read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigError(f"cannot read schema file: {exc}", source) from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"invalid YAML: {exc}", source) from exc
    if not isinstance(data, dict) or not isinstance(data.get("schemas"), list):
        raise ConfigError("expected a top-level 'schemas' list", source)
    tables = tuple(schema_from_dict(item, source) for item in data["schemas"])
    if not tables:
        raise ConfigError("no schemas defined", source)
    seen: set[str] = set()
    for table in tables:
        if table.schema_id in seen:
            raise ConfigError(f"duplicate schema_id {table.schema_id!r}", source)
        seen.add(table.schema_id)
    return tables


BUILTIN_SCHEMAS: tuple[SchemaTable, ...] = (
    _table(
        "demo_pinyin",
        "Demo Pinyin",
        {
            "ni": ["你", "尼", "泥", "拟", "逆", "倪"],
            "hao": ["好", "号", "毫"],
            "nihao": ["你好"],
            "zhong": ["中", "种", "重"],
            "wen": ["文", "问", "闻"],
            "zhongwen": ["中文"],
        },
    ),
    _table(
        "demo_latin",
        "Demo Latin",
        {
            "a": [
                {"text": "à", "comment": "grave"},
                {"text": "á", "comment": "acute"},
                {"text": "â", "comment": "circumflex"},
                {"text": "ä", "comment": "diaeresis"},
            ],
            "e": [
                {"text": "è", "comment": "grave"},
                {"text": "é", "comment": "acute"},
                {"text": "ê", "comment": "circumflex"},
            ],
            "ss": [{"text": "ß", "comment": "sharp s"}],
        },
        page_size=3,
    ),
)
