"""Unit tests for decoding the Claude Code CLI stream-json output."""

import json
from typing import Any

import pytest

from claude_release_notes.release_notes.models import AssistantMessage, FinalResult, SystemInit, UserToolResult
from claude_release_notes.release_notes.stream import (
    decode_stream_event,
    extract_final_text,
    find_final_text,
    parse_stream_events,
)
from claude_release_notes.utils.constants import NO_NOTES_FALLBACK


def stream(*events: Any) -> str:
    """Join events into stream output; strings are written verbatim."""
    return "\n".join(event if isinstance(event, str) else json.dumps(event) for event in events) + "\n"


def assistant(*blocks: dict[str, Any], stop_reason: str | None = "end_turn") -> dict[str, Any]:
    return {
        "type": "assistant",
        "message": {"id": "msg_1", "type": "message", "role": "assistant", "content": list(blocks), "stop_reason": stop_reason},
        "session_id": "abc",
    }


def text(value: str) -> dict[str, Any]:
    return {"type": "text", "text": value}


def tool_use() -> dict[str, Any]:
    return {"type": "tool_use", "id": "toolu_1", "name": "Bash", "input": {"command": "git log"}}


def result(value: Any = "## 1.0.0", subtype: str = "success") -> dict[str, Any]:
    return {"type": "result", "subtype": subtype, "is_error": subtype != "success", "result": value, "session_id": "abc"}


SYSTEM_INIT = {"type": "system", "subtype": "init", "session_id": "abc", "tools": ["Bash"], "mcp_servers": []}
TOOL_RESULT = {
    "type": "user",
    "message": {"role": "user", "content": [{"tool_use_id": "toolu_1", "type": "tool_result", "content": "## fake"}]},
    "session_id": "abc",
}


class TestDecodeStreamEvent:
    """Tests for decoding single lines."""

    def test_decodes_each_event_variant(self) -> None:
        """Each known type decodes into its own model."""
        assert isinstance(decode_stream_event(json.dumps(SYSTEM_INIT)), SystemInit)
        assert isinstance(decode_stream_event(json.dumps(assistant(text("hi")))), AssistantMessage)
        assert isinstance(decode_stream_event(json.dumps(TOOL_RESULT)), UserToolResult)
        assert isinstance(decode_stream_event(json.dumps(result())), FinalResult)

    @pytest.mark.parametrize(
        "line",
        [
            "not json at all",
            "{truncated",
            "42",
            '"a string"',
            "[1, 2]",
            "null",
            '{"no_type": true}',
            '{"type": "telemetry", "value": 1}',
            '{"type": "assistant"}',
            '{"type": "assistant", "message": {"content": "not a list"}}',
        ],
    )
    def test_non_events_yield_none(self, line: str) -> None:
        """Lines that are not events are discarded rather than raising."""
        assert decode_stream_event(line) is None

    def test_legacy_role_discriminator(self) -> None:
        """Lines tagged with ``role`` instead of ``type`` still decode."""
        event = decode_stream_event(json.dumps({"role": "assistant", "message": {"content": [text("x")], "stop_reason": "end_turn"}}))
        assert isinstance(event, AssistantMessage)

    def test_unknown_content_blocks_are_kept_but_not_text(self) -> None:
        """Unknown block types do not invalidate the message."""
        event = decode_stream_event(json.dumps(assistant({"type": "thinking", "thinking": "hmm"}, text("answer"))))
        assert isinstance(event, AssistantMessage)
        assert [block.text for block in event.message.text_blocks] == ["answer"]


def test_parse_stream_events_skips_blank_and_invalid_lines() -> None:
    """Only decodable lines become events, in order."""
    raw = "\n\n" + stream(SYSTEM_INIT, "[debug] starting", "   ", result())
    events = parse_stream_events(raw)
    assert [type(event) for event in events] == [SystemInit, FinalResult]


class TestFindFinalText:
    """Tests for choosing the final answer in a stream."""

    def test_result_event_wins_over_non_terminal_assistant_message(self) -> None:
        """A success result is returned; a tool_use turn is never considered."""
        raw = stream(
            SYSTEM_INIT,
            "this is not json",
            assistant(text("thinking out loud"), tool_use(), stop_reason="tool_use"),
            result("X"),
        )
        assert find_final_text(raw) == "X"

    def test_result_event_wins_over_later_end_turn_message(self) -> None:
        """Priority holds even when an end_turn message comes after the result."""
        raw = stream(result("from result"), assistant(text("from assistant")))
        assert find_final_text(raw) == "from result"

    def test_last_result_event_wins(self) -> None:
        """Events are scanned from the end of the stream."""
        raw = stream(result("first"), result("second"))
        assert find_final_text(raw) == "second"

    def test_falls_back_to_end_turn_assistant_message(self) -> None:
        """Without a result event the last end_turn message supplies the text."""
        raw = stream(SYSTEM_INIT, assistant(text("## 1.0.0"), tool_use(), text("- Added X")), TOOL_RESULT)
        assert find_final_text(raw) == "## 1.0.0\n- Added X"

    def test_picks_the_last_end_turn_assistant_message(self) -> None:
        """Earlier concluding messages lose to later ones."""
        raw = stream(assistant(text("old")), assistant(text("new")))
        assert find_final_text(raw) == "new"

    def test_ignores_assistant_message_without_text(self) -> None:
        """An end_turn message with only tool_use blocks is skipped."""
        raw = stream(assistant(text("earlier answer")), assistant(tool_use()))
        assert find_final_text(raw) == "earlier answer"

    @pytest.mark.parametrize("stop_reason", ["tool_use", "max_tokens", None])
    def test_ignores_non_terminal_assistant_messages(self, stop_reason: str | None) -> None:
        """Messages that did not end the turn are never the answer."""
        assert find_final_text(stream(assistant(text("partial"), stop_reason=stop_reason))) is None

    def test_ignores_error_results(self) -> None:
        """Only successful results count."""
        raw = stream(assistant(text("usable")), result("boom", subtype="error"))
        assert find_final_text(raw) == "usable"

    def test_ignores_non_string_result(self) -> None:
        """A success result without string text is skipped."""
        raw = stream(assistant(text("usable")), result(None), result(12))
        assert find_final_text(raw) == "usable"

    def test_tool_results_are_never_the_answer(self) -> None:
        """Echoed tool output does not count as an answer."""
        assert find_final_text(stream(SYSTEM_INIT, TOOL_RESULT)) is None

    def test_empty_stream(self) -> None:
        """No events means no answer."""
        assert find_final_text("") is None


class TestExtractFinalText:
    """Tests for the fallback wrapper."""

    def test_returns_found_text(self) -> None:
        """The found text is returned verbatim."""
        assert extract_final_text(stream(result("  ## 1.0.0  "))) == "  ## 1.0.0  "

    @pytest.mark.parametrize("raw", ["", "garbage\nmore garbage", stream(SYSTEM_INIT), stream(result(""))])
    def test_uses_fallback_when_nothing_usable(self, raw: str) -> None:
        """Callers always receive usable text."""
        assert extract_final_text(raw) == NO_NOTES_FALLBACK


class TestNoisyStreams:
    """Tests for streams holding lines the JSON decoder cannot handle."""

    @pytest.mark.parametrize("noise", ["1" * 5000, "[" * 100_000], ids=["huge-integer", "deep-nesting"])
    def test_undecodable_line_is_not_an_event(self, noise: str) -> None:
        """Lines that exhaust the decoder's limits are dropped."""
        assert decode_stream_event(noise) is None

    @pytest.mark.parametrize("noise", ["1" * 5000, "[" * 100_000], ids=["huge-integer", "deep-nesting"])
    def test_result_after_undecodable_line_is_found(self, noise: str) -> None:
        """One bad line does not hide the answer."""
        assert extract_final_text(stream(noise, result("X"))) == "X"

    @pytest.mark.parametrize(
        "extra",
        [
            {"session_id": 123},
            {"session_id": None},
            {"is_error": None},
            {"is_error": "no"},
        ],
    )
    def test_result_with_odd_unused_fields_is_found(self, extra: dict[str, Any]) -> None:
        """Only subtype and result decide whether a result event is the answer."""
        assert find_final_text(stream({**result("X"), **extra})) == "X"

    def test_assistant_message_with_odd_unused_fields_is_found(self) -> None:
        """Unused assistant fields of any shape are tolerated."""
        event = assistant(text("usable"))
        event["session_id"] = ["not", "a", "string"]
        event["message"]["model"] = 7
        assert find_final_text(stream(event)) == "usable"
