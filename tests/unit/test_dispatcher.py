"""Unit tests for imeconsole.commands.dispatcher — command execution."""
from __future__ import annotations

from typing import TYPE_CHECKING
from unittest.mock import MagicMock

import pytest

from imeconsole.commands.dispatcher import (
    INVALID_SESSION_INDEX,
    LAST_SESSION,
    CommandDispatcher,
    ConsoleContext,
    DispatchOutcome,
)
from imeconsole.engine.base import CandidateIterator
from imeconsole.engine.memory import MemoryEngine
from imeconsole.session.registry import SessionRegistry

if TYPE_CHECKING:
    from conftest import CapturedOutput


def _mock_dispatcher(captured: CapturedOutput) -> tuple[CommandDispatcher, MagicMock]:
    engine = MagicMock()
    engine.get_current_schema.return_value = "demo_pinyin"
    registry = SessionRegistry(engine)
    registry.add(0x10)
    return CommandDispatcher(ConsoleContext(engine, registry, captured.output)), engine


# ===========================================================================
# Outcomes
# ===========================================================================


class TestOutcomes:
    def test_exit(self, dispatcher: CommandDispatcher, captured: CapturedOutput) -> None:
        assert dispatcher.execute("exit") is DispatchOutcome.EXIT
        assert captured.lines() == []

    def test_reload(self, dispatcher: CommandDispatcher) -> None:
        assert dispatcher.execute("reload") is DispatchOutcome.RELOAD

    def test_other_lines_continue(self, dispatcher: CommandDispatcher) -> None:
        assert dispatcher.execute("ls sessions") is DispatchOutcome.CONTINUE
        assert dispatcher.execute("ni") is DispatchOutcome.CONTINUE

    def test_engine_error_is_reported(
        self, dispatcher: CommandDispatcher, engine: MemoryEngine, captured: CapturedOutput
    ) -> None:
        engine.finalize()
        assert dispatcher.execute("ls schemas") is DispatchOutcome.CONTINUE
        assert captured.errors()[0].startswith("Engine error:")


# ===========================================================================
# Key injection
# ===========================================================================


class TestKeys:
    def test_composing_turn(self, dispatcher: CommandDispatcher, captured: CapturedOutput) -> None:
        dispatcher.execute("ni")
        assert captured.lines() == [
            "schema: demo_pinyin / Demo Pinyin",
            "status: composing",
            "[ni]|",
            "page: 1  (of size 5)",
            "1. [你]",
            "2.  尼",
            "3.  泥",
            "4.  拟",
            "5.  逆",
        ]

    def test_commit_turn(self, dispatcher: CommandDispatcher, captured: CapturedOutput) -> None:
        dispatcher.execute("ni{space}")
        assert captured.lines() == [
            "commit: 你",
            "schema: demo_pinyin / Demo Pinyin",
            "status:",
            "(not composing)",
        ]

    def test_commit_text_is_written_verbatim(self, dispatcher: CommandDispatcher, captured: CapturedOutput) -> None:
        dispatcher.execute("a\tb")
        assert captured.out.getvalue().startswith("commit: a\t\n")

    def test_invalid_sequence(self, dispatcher: CommandDispatcher, captured: CapturedOutput) -> None:
        dispatcher.execute("{Bogus}")
        assert captured.lines() == []
        assert captured.errors() == ["Error processing key sequence: {Bogus}"]


# ===========================================================================
# Candidates
# ===========================================================================


class TestSelectCandidate:
    def test_selects_and_prints_turn(self, dispatcher: CommandDispatcher, captured: CapturedOutput) -> None:
        dispatcher.execute("ni")
        captured.reset()
        dispatcher.execute("select candidate 2")
        assert captured.lines()[0] == "commit: 尼"

    def test_out_of_range(self, dispatcher: CommandDispatcher, captured: CapturedOutput) -> None:
        dispatcher.execute("ni")
        dispatcher.execute("select candidate 9")
        assert captured.errors() == ["cannot select candidate at index 9."]

    @pytest.mark.parametrize(("line", "index"), [("select candidate 0", 0), ("select candidate -3", -3), ("select candidate x", 0)])
    def test_non_positive_never_calls_engine(self, captured: CapturedOutput, line: str, index: int) -> None:
        dispatcher, engine = _mock_dispatcher(captured)
        dispatcher.execute(line)
        engine.select_candidate_on_current_page.assert_not_called()
        assert captured.errors() == [f"cannot select candidate at index {index}."]

    def test_oversized_index_is_reported(self, captured: CapturedOutput) -> None:
        dispatcher, engine = _mock_dispatcher(captured)
        assert dispatcher.execute("select candidate " + "1" * 5000) is DispatchOutcome.CONTINUE
        engine.select_candidate_on_current_page.assert_not_called()
        assert captured.errors() == ["cannot select candidate at index 0."]


class TestListCandidates:
    def test_no_candidates(self, dispatcher: CommandDispatcher, captured: CapturedOutput) -> None:
        dispatcher.execute("print candidate list")
        assert captured.lines() == ["no candidates."]

    def test_all_candidates(self, dispatcher: CommandDispatcher, captured: CapturedOutput) -> None:
        dispatcher.execute("ni")
        captured.reset()
        dispatcher.execute("print candidate list")
        lines = captured.lines()
        assert len(lines) == 7
        assert lines[0] == "1. 你"
        assert lines[-1] == "7. 你好 (~hao)"

    def test_iterator_is_closed(self, captured: CapturedOutput) -> None:
        dispatcher, engine = _mock_dispatcher(captured)
        iterator = CandidateIterator(iter([]))
        engine.iterate_candidates.return_value = iterator
        dispatcher.execute("print candidate list")
        assert iterator.closed


# ===========================================================================
# Sessions
# ===========================================================================


class TestSessions:
    def test_list_sessions(self, dispatcher: CommandDispatcher, captured: CapturedOutput) -> None:
        dispatcher.execute("ls sessions")
        assert captured.lines() == [
            "current sessions list:",
            "> 1. session_id: 1, schema_id: demo_pinyin",
        ]

    def test_add_session_becomes_active(self, dispatcher: CommandDispatcher, captured: CapturedOutput) -> None:
        dispatcher.execute("add session")
        assert captured.lines() == [
            "current sessions list:",
            "  1. session_id: 1, schema_id: demo_pinyin",
            "> 2. session_id: 2, schema_id: demo_pinyin",
            "current schema: [demo_pinyin]",
        ]

    def test_add_session_failure(self, captured: CapturedOutput) -> None:
        dispatcher, engine = _mock_dispatcher(captured)
        engine.create_session.return_value = 0
        dispatcher.execute("add session")
        assert captured.errors() == ["Error creating new engine session."]
        assert len(dispatcher.registry) == 1

    def test_select_session(self, dispatcher: CommandDispatcher, captured: CapturedOutput) -> None:
        dispatcher.execute("add session")
        captured.reset()
        dispatcher.execute("select session 1")
        assert captured.lines()[1] == "> 1. session_id: 1, schema_id: demo_pinyin"

    @pytest.mark.parametrize("line", ["select session 5", "select session", "select session x"])
    def test_select_invalid_session(self, dispatcher: CommandDispatcher, captured: CapturedOutput, line: str) -> None:
        dispatcher.execute(line)
        assert captured.errors() == [INVALID_SESSION_INDEX]
        assert dispatcher.registry.active_id == 1

    @pytest.mark.parametrize("prefix", ["select session ", "kill session "])
    def test_oversized_session_index(self, dispatcher: CommandDispatcher, captured: CapturedOutput, prefix: str) -> None:
        assert dispatcher.execute(prefix + "9" * 5000) is DispatchOutcome.CONTINUE
        assert captured.errors() == [INVALID_SESSION_INDEX]
        assert len(dispatcher.registry) == 1

    def test_sessions_keep_separate_state(self, dispatcher: CommandDispatcher, captured: CapturedOutput) -> None:
        dispatcher.execute("ni")
        dispatcher.execute("add session")
        dispatcher.execute("select schema demo_latin")
        dispatcher.execute("select session 1")
        captured.reset()
        dispatcher.execute("{space}")
        assert captured.lines()[0] == "commit: 你"


class TestKillSession:
    def test_kill_last_session_refused(self, dispatcher: CommandDispatcher, captured: CapturedOutput) -> None:
        dispatcher.execute("kill session 1")
        assert captured.lines() == [
            LAST_SESSION,
            "current sessions list:",
            "> 1. session_id: 1, schema_id: demo_pinyin",
        ]

    def test_kill_active_wraps_to_lowest(self, dispatcher: CommandDispatcher, captured: CapturedOutput) -> None:
        dispatcher.execute("add session")
        dispatcher.execute("add session")
        captured.reset()
        dispatcher.execute("kill session 3")
        assert captured.lines() == [
            "current sessions list:",
            "> 1. session_id: 1, schema_id: demo_pinyin",
            "  2. session_id: 2, schema_id: demo_pinyin",
            "current schema: [demo_pinyin]",
        ]

    @pytest.mark.parametrize("line", ["kill session 9", "kill session 0", "kill session -1", "kill session"])
    def test_invalid_index(self, dispatcher: CommandDispatcher, captured: CapturedOutput, line: str) -> None:
        dispatcher.execute(line)
        assert captured.errors() == [INVALID_SESSION_INDEX]
        assert len(dispatcher.registry) == 1


# ===========================================================================
# Schemas, options, sync
# ===========================================================================


class TestSchemas:
    def test_schema_list(self, dispatcher: CommandDispatcher, captured: CapturedOutput) -> None:
        dispatcher.execute("print schema list")
        assert captured.lines() == [
            "schema list:",
            "1. Demo Pinyin [demo_pinyin]",
            "2. Demo Latin [demo_latin]",
            "current schema: [demo_pinyin]",
        ]

    def test_select_schema(self, dispatcher: CommandDispatcher, captured: CapturedOutput) -> None:
        dispatcher.execute("select schema demo_latin")
        assert captured.lines() == ["selected schema: [demo_latin]"]

    def test_select_unknown_schema(self, dispatcher: CommandDispatcher, captured: CapturedOutput) -> None:
        dispatcher.execute("select schema klingon")
        assert captured.errors() == ["cannot select schema [klingon]."]


class TestOptions:
    def test_set_on(self, dispatcher: CommandDispatcher, engine: MemoryEngine, captured: CapturedOutput) -> None:
        dispatcher.execute("set option ascii_mode")
        assert captured.lines() == ["ascii_mode set on."]
        assert engine.get_option(dispatcher.context.active_handle, "ascii_mode") is True

    def test_set_off(self, dispatcher: CommandDispatcher, captured: CapturedOutput) -> None:
        dispatcher.execute("set option !full_shape")
        assert captured.lines() == ["full_shape set off."]

    def test_set_then_clear(self, dispatcher: CommandDispatcher, engine: MemoryEngine, captured: CapturedOutput) -> None:
        handle = dispatcher.context.active_handle
        dispatcher.execute("set option foo")
        assert engine.get_option(handle, "foo") is True
        dispatcher.execute("set option !foo")
        assert engine.get_option(handle, "foo") is False
        assert captured.lines() == ["foo set on.", "foo set off."]

    def test_missing_name(self, captured: CapturedOutput) -> None:
        dispatcher, engine = _mock_dispatcher(captured)
        dispatcher.execute("set option ")
        engine.set_option.assert_not_called()
        assert captured.errors() == ["missing option name."]


class TestSynchronize:
    def test_success(self, dispatcher: CommandDispatcher, captured: CapturedOutput) -> None:
        dispatcher.execute("synchronize")
        assert captured.lines() == ["user data synchronized."]

    def test_failure(self, captured: CapturedOutput) -> None:
        dispatcher, engine = _mock_dispatcher(captured)
        engine.sync_user_data.return_value = False
        dispatcher.execute("synchronize")
        assert captured.errors() == ["Error synchronizing user data."]
        engine.inject_key_sequence.assert_not_called()
