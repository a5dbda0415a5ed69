"""Unit tests for imeconsole.commands.grammar — line classification."""
from __future__ import annotations

import pytest

from imeconsole.commands.grammar import CommandKind, parse_command, parse_index


# ===========================================================================
# parse_index
# ===========================================================================


class TestParseIndex:
    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("2", 2),
            (" 3", 3),
            ("#4", 4),
            (": 5", 5),
            ("12abc", 12),
            ("-1", -1),
            ("0", 0),
        ],
    )
    def test_leading_integer(self, text: str, expected: int) -> None:
        assert parse_index(text) == expected

    @pytest.mark.parametrize("text", ["", "abc", " x1", "#"])
    def test_unparsable(self, text: str) -> None:
        assert parse_index(text) is None

    def test_number_too_long_to_convert(self) -> None:
        assert parse_index("9" * 5000) is None

    def test_oversized_session_index_is_unparsed(self) -> None:
        command = parse_command("select session " + "9" * 5000)
        assert command.kind is CommandKind.SELECT_SESSION
        assert command.index is None


# ===========================================================================
# Exact commands
# ===========================================================================


class TestExactCommands:
    @pytest.mark.parametrize(
        ("line", "kind"),
        [
            ("ls sessions", CommandKind.LIST_SESSIONS),
            ("add session", CommandKind.ADD_SESSION),
            ("print schema list", CommandKind.LIST_SCHEMAS),
            ("ls schemas", CommandKind.LIST_SCHEMAS),
            ("print candidate list", CommandKind.LIST_CANDIDATES),
            ("synchronize", CommandKind.SYNCHRONIZE),
            ("exit", CommandKind.EXIT),
            ("reload", CommandKind.RELOAD),
        ],
    )
    def test_recognised(self, line: str, kind: CommandKind) -> None:
        assert parse_command(line).kind is kind

    def test_exact_match_required(self) -> None:
        command = parse_command("exit now")
        assert command.kind is CommandKind.KEYS
        assert command.argument == "exit now"

    def test_trailing_space_is_keys(self) -> None:
        assert parse_command("ls sessions ").kind is CommandKind.KEYS


# ===========================================================================
# Prefixed commands
# ===========================================================================


class TestPrefixedCommands:
    def test_select_schema(self) -> None:
        command = parse_command("select schema demo_latin")
        assert command.kind is CommandKind.SELECT_SCHEMA
        assert command.argument == "demo_latin"

    def test_select_candidate(self) -> None:
        command = parse_command("select candidate 3")
        assert command.kind is CommandKind.SELECT_CANDIDATE
        assert command.index == 3

    def test_select_candidate_unparsable(self) -> None:
        command = parse_command("select candidate x")
        assert command.kind is CommandKind.SELECT_CANDIDATE
        assert command.index is None

    def test_set_option_on(self) -> None:
        command = parse_command("set option ascii_mode")
        assert command.kind is CommandKind.SET_OPTION
        assert command.argument == "ascii_mode"
        assert command.enabled is True

    def test_set_option_off(self) -> None:
        command = parse_command("set option !full_shape")
        assert command.argument == "full_shape"
        assert command.enabled is False

    @pytest.mark.parametrize("line", ["select session 2", "select session2", "select session#2"])
    def test_select_session_forms(self, line: str) -> None:
        command = parse_command(line)
        assert command.kind is CommandKind.SELECT_SESSION
        assert command.index == 2

    def test_select_session_without_index(self) -> None:
        command = parse_command("select session")
        assert command.kind is CommandKind.SELECT_SESSION
        assert command.index is None

    def test_kill_session(self) -> None:
        command = parse_command("kill session 1")
        assert command.kind is CommandKind.KILL_SESSION
        assert command.index == 1

    def test_select_candidate_not_shadowed_by_select_session(self) -> None:
        assert parse_command("select candidate 1").kind is CommandKind.SELECT_CANDIDATE


# ===========================================================================
# Key sequences
# ===========================================================================


class TestKeySequences:
    @pytest.mark.parametrize("line", ["nihao", "ni{space}", "", "select", "{Return}"])
    def test_everything_else_is_keys(self, line: str) -> None:
        command = parse_command(line)
        assert command.kind is CommandKind.KEYS
        assert command.argument == line
        assert command.text == line
