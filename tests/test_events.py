"""Tests for stream event models and the record parser."""

from __future__ import annotations

import json
from typing import Any

import pytest

from droid_sdk.errors import ParseError, UnknownEventError
from droid_sdk.events import (
    MessageEvent,
    SystemInitEvent,
    ToolCallEvent,
    ToolResultEvent,
    TurnCompletedEvent,
    TurnFailedEvent,
    is_message_event,
    is_system_init_event,
    is_tool_call_event,
    is_tool_result_event,
    is_turn_completed_event,
    is_turn_failed_event,
    parse_record,
)


def _line(**record: Any) -> str:
    return json.dumps(record)


# ------------------------------------------------------------------ #
# Well-formed records
# ------------------------------------------------------------------ #


class TestParseKnownRecords:
    def test_system_init(self) -> None:
        event = parse_record(
            _line(
                type="system",
                subtype="init",
                cwd="/work",
                session_id="s1",
                tools=["Read", "Edit"],
                model="m1",
            )
        )
        assert isinstance(event, SystemInitEvent)
        assert event.session_id == "s1"
        assert event.tools == ["Read", "Edit"]
        assert event.model == "m1"
        assert is_system_init_event(event)

    def test_message(self) -> None:
        event = parse_record(
            _line(type="message", role="assistant", id="m1", text="hi", timestamp=1)
        )
        assert isinstance(event, MessageEvent)
        assert event.role == "assistant"
        assert event.text == "hi"
        assert is_message_event(event)

    def test_tool_call_camel_case_fields(self) -> None:
        event = parse_record(
            _line(
                type="tool_call",
                id="c1",
                messageId="m1",
                toolId="t1",
                toolName="Read",
                parameters={"path": "a.py"},
                timestamp=2,
            )
        )
        assert isinstance(event, ToolCallEvent)
        assert event.message_id == "m1"
        assert event.tool_id == "t1"
        assert event.tool_name == "Read"
        assert event.parameters == {"path": "a.py"}
        assert is_tool_call_event(event)

    def test_tool_result(self) -> None:
        event = parse_record(
            _line(
                type="tool_result",
                id="r1",
                messageId="m1",
                toolId="t1",
                toolName="Read",
                isError=True,
                value="denied",
                timestamp=3,
            )
        )
        assert isinstance(event, ToolResultEvent)
        assert event.is_error is True
        assert event.value == "denied"
        assert is_tool_result_event(event)

    def test_completion(self) -> None:
        event = parse_record(
            _line(
                type="completion",
                finalText="done",
                numTurns=2,
                durationMs=1500,
                session_id="s1",
            )
        )
        assert isinstance(event, TurnCompletedEvent)
        assert event.final_text == "done"
        assert event.num_turns == 2
        assert event.duration_ms == 1500
        assert is_turn_completed_event(event)

    def test_turn_failed(self) -> None:
        event = parse_record(
            _line(type="turn.failed", error={"message": "quota", "code": "E42"})
        )
        assert isinstance(event, TurnFailedEvent)
        assert event.error_message == "quota"
        assert event.error_code == "E42"
        assert is_turn_failed_event(event)

    def test_extra_fields_ignored(self) -> None:
        event = parse_record(_line(type="message", text="hi", unexpected=[1, 2]))
        assert isinstance(event, MessageEvent)
        assert not hasattr(event, "unexpected")


# ------------------------------------------------------------------ #
# Permissive acceptance
# ------------------------------------------------------------------ #


class TestPermissiveParsing:
    def test_wrong_field_types_still_accepted(self) -> None:
        event = parse_record(_line(type="message", text=123, timestamp="soon"))
        assert isinstance(event, MessageEvent)
        assert event.text == 123
        assert event.timestamp == "soon"

    def test_failed_event_with_string_error(self) -> None:
        event = parse_record(_line(type="turn.failed", error="plain text"))
        assert isinstance(event, TurnFailedEvent)
        assert event.error_message == "plain text"
        assert event.error_code is None

    def test_failed_event_without_error(self) -> None:
        event = parse_record(_line(type="turn.failed"))
        assert isinstance(event, TurnFailedEvent)
        assert event.error_message == ""


# ------------------------------------------------------------------ #
# Rejections
# ------------------------------------------------------------------ #


class TestParseFailures:
    def test_invalid_json(self) -> None:
        text = "{not json" + "x" * 200
        with pytest.raises(ParseError) as exc_info:
            parse_record(text)
        assert exc_info.value.raw == text
        assert str(exc_info.value).startswith("Failed to parse JSON line: {not json")
        assert isinstance(exc_info.value.cause, json.JSONDecodeError)

    def test_non_object(self) -> None:
        with pytest.raises(ParseError):
            parse_record("[1, 2, 3]")

    def test_unknown_type(self) -> None:
        with pytest.raises(UnknownEventError) as exc_info:
            parse_record(_line(type="heartbeat"))
        assert exc_info.value.event_type == "heartbeat"

    def test_missing_type(self) -> None:
        with pytest.raises(UnknownEventError):
            parse_record(_line(text="orphan"))

    def test_non_string_type(self) -> None:
        with pytest.raises(UnknownEventError):
            parse_record(_line(type=7))
