"""Unit tests for imeconsole.engine.schemas — code tables and YAML loading."""
from __future__ import annotations

from pathlib import Path

import pytest

from imeconsole.engine.schemas import BUILTIN_SCHEMAS, load_schemas, schema_from_dict
from imeconsole.engine.types import Candidate
from imeconsole.errors import ConfigError


@pytest.fixture()
def pinyin():
    return BUILTIN_SCHEMAS[0]


# ===========================================================================
# SchemaTable.lookup
# ===========================================================================


class TestLookup:
    def test_exact_then_completions(self, pinyin) -> None:
        found = pinyin.lookup("zhong")
        assert found == [
            Candidate("中"),
            Candidate("种"),
            Candidate("重"),
            Candidate("中文", "~wen"),
        ]

    def test_prefix_only(self, pinyin) -> None:
        assert pinyin.lookup("zh") == [
            Candidate("中", "~ong"),
            Candidate("种", "~ong"),
            Candidate("重", "~ong"),
            Candidate("中文", "~ongwen"),
        ]

    def test_no_match(self, pinyin) -> None:
        assert pinyin.lookup("qq") == []

    def test_empty_code(self, pinyin) -> None:
        assert pinyin.lookup("") == []


# ===========================================================================
# schema_from_dict
# ===========================================================================


class TestSchemaFromDict:
    def test_defaults(self) -> None:
        table = schema_from_dict({"schema_id": "t", "entries": {"a": ["α"]}})
        assert table.name == "t"
        assert table.page_size == 5
        assert table.entries == {"a": (Candidate("α"),)}

    def test_candidate_with_comment(self) -> None:
        table = schema_from_dict({"schema_id": "t", "entries": {"a": [{"text": "α", "comment": "alpha"}]}})
        assert table.lookup("a") == [Candidate("α", "alpha")]

    @pytest.mark.parametrize(
        "data",
        [
            {"name": "no id"},
            {"schema_id": ""},
            {"schema_id": "t", "page_size": 0},
            {"schema_id": "t", "page_size": 10},
            {"schema_id": "t", "entries": ["a"]},
            {"schema_id": "t", "entries": {"a": "α"}},
            {"schema_id": "t", "entries": {"a": [{"comment": "no text"}]}},
        ],
    )
    def test_invalid(self, data: dict) -> None:
        with pytest.raises(ConfigError):
            schema_from_dict(data, "schemas.yaml")


# ===========================================================================
# load_schemas
# ===========================================================================


class TestLoadSchemas:
    def test_load(self, tmp_path: Path) -> None:
        path = tmp_path / "schemas.yaml"
        path.write_text(
            "schemas:\n"
            "  - schema_id: greek\n"
            "    name: Greek\n"
            "    page_size: 3\n"
            "    entries:\n"
            "      a: [α]\n"
            "      b: [β]\n",
            encoding="utf-8",
        )
        (table,) = load_schemas(path)
        assert table.schema_id == "greek"
        assert table.name == "Greek"
        assert table.page_size == 3

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError) as info:
            load_schemas(tmp_path / "absent.yaml")
        assert info.value.source == str(tmp_path / "absent.yaml")

    @pytest.mark.parametrize(
        "text",
        [
            "schemas: [\n",
            "- just a list\n",
            "schemas: []\n",
            "schemas:\n  - schema_id: a\n  - schema_id: a\n",
        ],
    )
    def test_invalid_documents(self, tmp_path: Path, text: str) -> None:
        path = tmp_path / "schemas.yaml"
        path.write_text(text, encoding="utf-8")
        with pytest.raises(ConfigError):
            load_schemas(path)
