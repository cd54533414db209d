"""Turn results and the event aggregator."""

from droid_sdk.turn.aggregator import (
    StreamSummary,
    build_turn_result_from_events,
    build_turn_result_from_json,
    collect_stream_events,
)
from droid_sdk.turn.models import (
    JsonResult,
    MessageItem,
    ToolCallItem,
    ToolResultItem,
    TurnItem,
    TurnResult,
)

__all__ = [
    "JsonResult",
    "MessageItem",
    "StreamSummary",
    "ToolCallItem",
    "ToolResultItem",
    "TurnItem",
    "TurnResult",
    "build_turn_result_from_events",
    "build_turn_result_from_json",
    "collect_stream_events",
]
