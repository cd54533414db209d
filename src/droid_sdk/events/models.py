"""Pydantic v2 models for the events streamed by ``droid exec -o stream-json``."""

from __future__ import annotations

from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Discriminator, Field, Tag


class _EventBase(BaseModel):
    """Common configuration shared by every stream event.

    Wire keys are camelCase; attributes are snake_case.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    session_id: str | None = Field(
        default=None, description="Session identifier (absent before init)"
    )


class SystemInitEvent(_EventBase):
    """Emitted once at the start of a streaming execution."""

    type: Literal["system"] = "system"
    subtype: Literal["init"] = "init"
    cwd: str = Field(default="", description="Working directory for the session")
    tools: list[str] = Field(default_factory=list, description="Available tools")
    model: str = Field(default="", description="Model identifier")


class MessageEvent(_EventBase):
    """A user or assistant message."""

    type: Literal["message"] = "message"
    role: Literal["user", "assistant"] = "assistant"
    id: str = Field(default="", description="Message identifier")
    text: str = Field(default="", description="Message text")
    timestamp: int = Field(default=0, description="Unix timestamp in milliseconds")


class ToolCallEvent(_EventBase):
    """The agent invoked a tool."""

    type: Literal["tool_call"] = "tool_call"
    id: str = Field(default="", description="Tool call identifier")
    message_id: str = Field(default="", alias="messageId")
    tool_id: str = Field(default="", alias="toolId")
    tool_name: str = Field(default="", alias="toolName")
    parameters: dict[str, Any] = Field(default_factory=dict)
    timestamp: int = 0


class ToolResultEvent(_EventBase):
    """A tool call returned a value or an error."""

    type: Literal["tool_result"] = "tool_result"
    id: str = Field(default="", description="Result identifier")
    message_id: str = Field(default="", alias="messageId")
    tool_id: str = Field(default="", alias="toolId")
    tool_name: str = Field(default="", alias="toolName")
    is_error: bool = Field(default=False, alias="isError")
    value: str = Field(default="", description="Tool output or error text")
    timestamp: int = 0


class TurnCompletedEvent(_EventBase):
    """The turn finished; carries the final text and statistics."""

    type: Literal["completion"] = "completion"
    final_text: str = Field(default="", alias="finalText")
    num_turns: int = Field(default=0, alias="numTurns")
    duration_ms: int | float = Field(default=0, alias="durationMs")
    timestamp: int = 0


class TurnError(BaseModel):
    """Error payload of a ``turn.failed`` event."""

    model_config = ConfigDict(extra="ignore")

    message: str = ""
    code: str | None = None


class TurnFailedEvent(_EventBase):
    """The turn failed."""

    type: Literal["turn.failed"] = "turn.failed"
    error: TurnError = Field(default_factory=TurnError)
    timestamp: int = 0

    @property
    def error_message(self) -> str:
        # Permissively parsed records may still hold the raw mapping.
        error: Any = self.error
        if isinstance(error, dict):
            return str(error.get("message", ""))
        if isinstance(error, str):
            return error
        return str(getattr(error, "message", ""))

    @property
    def error_code(self) -> str | None:
        error: Any = self.error
        if isinstance(error, dict):
            code = error.get("code")
            return None if code is None else str(code)
        return getattr(error, "code", None)


def _event_discriminator(v: Any) -> str:
    """Extract the discriminator value from raw data or a model instance."""
    if isinstance(v, dict):
        return str(v.get("type", ""))
    return str(getattr(v, "type", ""))


StreamEvent = Annotated[
    Annotated[SystemInitEvent, Tag("system")]
    | Annotated[MessageEvent, Tag("message")]
    | Annotated[ToolCallEvent, Tag("tool_call")]
    | Annotated[ToolResultEvent, Tag("tool_result")]
    | Annotated[TurnCompletedEvent, Tag("completion")]
    | Annotated[TurnFailedEvent, Tag("turn.failed")],
    Discriminator(_event_discriminator),
]
"""Discriminated union of all stream event types."""

#: Wire ``type`` tag -> model class.
EVENT_TYPES: dict[str, type[_EventBase]] = {
    "system": SystemInitEvent,
    "message": MessageEvent,
    "tool_call": ToolCallEvent,
    "tool_result": ToolResultEvent,
    "completion": TurnCompletedEvent,
    "turn.failed": TurnFailedEvent,
}


def is_system_init_event(event: object) -> bool:
    return isinstance(event, SystemInitEvent) and event.subtype == "init"


def is_message_event(event: object) -> bool:
    return isinstance(event, MessageEvent)


def is_tool_call_event(event: object) -> bool:
    return isinstance(event, ToolCallEvent)


def is_tool_result_event(event: object) -> bool:
    return isinstance(event, ToolResultEvent)


def is_turn_completed_event(event: object) -> bool:
    return isinstance(event, TurnCompletedEvent)


def is_turn_failed_event(event: object) -> bool:
    return isinstance(event, TurnFailedEvent)
