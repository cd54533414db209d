"""Turn aggregator — fold stream events or a JSON result into a TurnResult."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from droid_sdk.events.models import (
    MessageEvent,
    StreamEvent,
    ToolCallEvent,
    ToolResultEvent,
    TurnCompletedEvent,
    TurnFailedEvent,
)
from droid_sdk.turn.models import (
    JsonResult,
    MessageItem,
    ToolCallItem,
    ToolResultItem,
    TurnResult,
)


def _to_item(event: StreamEvent) -> MessageItem | ToolCallItem | ToolResultItem | None:
    # Items are built without validation: events may have been accepted
    # permissively, and aggregation must not fail on their contents.
    if isinstance(event, MessageEvent):
        return MessageItem.model_construct(
            role=event.role,
            id=event.id,
            text=event.text,
            timestamp=event.timestamp,
        )
    if isinstance(event, ToolCallEvent):
        return ToolCallItem.model_construct(
            id=event.id,
            message_id=event.message_id,
            tool_id=event.tool_id,
            tool_name=event.tool_name,
            parameters=event.parameters,
            timestamp=event.timestamp,
        )
    if isinstance(event, ToolResultEvent):
        return ToolResultItem.model_construct(
            id=event.id,
            message_id=event.message_id,
            tool_id=event.tool_id,
            tool_name=event.tool_name,
            is_error=event.is_error,
            value=event.value,
            timestamp=event.timestamp,
        )
    return None


def build_turn_result_from_events(events: Iterable[StreamEvent]) -> TurnResult:
    """Fold *events*, in arrival order, into a single TurnResult.

    * Message / tool call / tool result events become items, in order.
    * The latest non-empty ``session_id`` wins; an empty one never clears it.
    * ``completion`` sets the final text, duration and turn count (the
      last one wins).
    * ``turn.failed`` sets ``is_error`` and replaces the final text with
      the error message, leaving duration and turn count untouched.
    """
    items: list[MessageItem | ToolCallItem | ToolResultItem] = []
    session_id: str | None = None
    final_response = ""
    duration_ms = 0
    num_turns = 0
    is_error = False

    for event in events:
        event_session = getattr(event, "session_id", None)
        if event_session:
            session_id = event_session

        item = _to_item(event)
        if item is not None:
            items.append(item)
        elif isinstance(event, TurnCompletedEvent):
            final_response = event.final_text
            duration_ms = event.duration_ms
            num_turns = event.num_turns
        elif isinstance(event, TurnFailedEvent):
            is_error = True
            final_response = event.error_message

    return TurnResult.model_construct(
        final_response=final_response,
        items=tuple(items),
        session_id=session_id,
        duration_ms=duration_ms,
        num_turns=num_turns,
        is_error=is_error,
    )


def build_turn_result_from_json(result: JsonResult) -> TurnResult:
    """Map a blocking-mode JSON result to a TurnResult with no items."""
    return TurnResult(
        final_response=result.result,
        items=(),
        session_id=result.session_id or None,
        duration_ms=result.duration_ms,
        num_turns=result.num_turns,
        is_error=result.is_error,
    )


@dataclass(frozen=True)
class StreamSummary:
    """Lightweight summary of a list of stream events."""

    session_id: str | None
    final_text: str | None
    duration_ms: int | float
    num_turns: int
    is_error: bool
    error_message: str | None = None


def collect_stream_events(events: Iterable[StreamEvent]) -> StreamSummary:
    """Summarise *events* without building items.

    Unlike ``build_turn_result_from_events``, a failure does not replace
    the completion text; it is reported separately as ``error_message``.
    """
    session_id: str | None = None
    final_text: str | None = None
    duration_ms = 0
    num_turns = 0
    is_error = False
    error_message: str | None = None

    for event in events:
        event_session = getattr(event, "session_id", None)
        if event_session:
            session_id = event_session
        if isinstance(event, TurnCompletedEvent):
            final_text = event.final_text
            duration_ms = event.duration_ms
            num_turns = event.num_turns
        elif isinstance(event, TurnFailedEvent):
            is_error = True
            error_message = event.error_message

    return StreamSummary(
        session_id=session_id,
        final_text=final_text,
        duration_ms=duration_ms,
        num_turns=num_turns,
        is_error=is_error,
        error_message=error_message,
    )
