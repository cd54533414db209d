"""Stream event models and the record parser."""

from droid_sdk.events.models import (
    EVENT_TYPES,
    MessageEvent,
    StreamEvent,
    SystemInitEvent,
    ToolCallEvent,
    ToolResultEvent,
    TurnCompletedEvent,
    TurnError,
    TurnFailedEvent,
    is_message_event,
    is_system_init_event,
    is_tool_call_event,
    is_tool_result_event,
    is_turn_completed_event,
    is_turn_failed_event,
)
from droid_sdk.events.parser import parse_record

__all__ = [
    "EVENT_TYPES",
    "MessageEvent",
    "StreamEvent",
    "SystemInitEvent",
    "ToolCallEvent",
    "ToolResultEvent",
    "TurnCompletedEvent",
    "TurnError",
    "TurnFailedEvent",
    "is_message_event",
    "is_system_init_event",
    "is_tool_call_event",
    "is_tool_result_event",
    "is_turn_completed_event",
    "is_turn_failed_event",
    "parse_record",
]
