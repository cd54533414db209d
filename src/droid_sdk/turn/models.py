"""Pydantic v2 models for turn results and the blocking-mode JSON payload."""

from __future__ import annotations

import json
from typing import Annotated, Any, Literal, TypeVar

from pydantic import BaseModel, ConfigDict, Discriminator, Field, Tag, TypeAdapter

from droid_sdk.errors import ParseError

_T = TypeVar("_T")


class _ItemBase(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class MessageItem(_ItemBase):
    """A message retained from the turn."""

    type: Literal["message"] = "message"
    role: Literal["user", "assistant"]
    id: str
    text: str
    timestamp: int


class ToolCallItem(_ItemBase):
    """A tool invocation retained from the turn."""

    type: Literal["tool_call"] = "tool_call"
    id: str
    message_id: str = Field(alias="messageId")
    tool_id: str = Field(alias="toolId")
    tool_name: str = Field(alias="toolName")
    parameters: dict[str, Any] = Field(default_factory=dict)
    timestamp: int


class ToolResultItem(_ItemBase):
    """A tool result retained from the turn."""

    type: Literal["tool_result"] = "tool_result"
    id: str
    message_id: str = Field(alias="messageId")
    tool_id: str = Field(alias="toolId")
    tool_name: str = Field(alias="toolName")
    is_error: bool = Field(alias="isError")
    value: str
    timestamp: int


def _item_discriminator(v: Any) -> str:
    if isinstance(v, dict):
        return str(v.get("type", ""))
    return str(getattr(v, "type", ""))


TurnItem = Annotated[
    Annotated[MessageItem, Tag("message")]
    | Annotated[ToolCallItem, Tag("tool_call")]
    | Annotated[ToolResultItem, Tag("tool_result")],
    Discriminator(_item_discriminator),
]
"""Discriminated union of retained turn items."""


class TurnResult(BaseModel):
    """Immutable outcome of one turn.

    When ``is_error`` is true, ``final_response`` holds the failure message
    rather than agent output.
    """

    model_config = ConfigDict(frozen=True)

    final_response: str = ""
    items: tuple[TurnItem, ...] = ()
    session_id: str | None = None
    duration_ms: int | float = 0
    num_turns: int = 0
    is_error: bool = False

    @property
    def tool_calls(self) -> list[ToolCallItem]:
        return [item for item in self.items if isinstance(item, ToolCallItem)]

    @property
    def tool_results(self) -> list[ToolResultItem]:
        return [item for item in self.items if isinstance(item, ToolResultItem)]

    @property
    def messages(self) -> list[MessageItem]:
        return [item for item in self.items if isinstance(item, MessageItem)]

    @property
    def assistant_messages(self) -> list[MessageItem]:
        return [m for m in self.messages if m.role == "assistant"]

    def parse(self, schema: type[_T]) -> _T:
        """Parse ``final_response`` as JSON and validate it against *schema*.

        *schema* is a pydantic model class or any type ``TypeAdapter``
        accepts.

        Raises:
            ParseError: ``final_response`` is not valid JSON.
            pydantic.ValidationError: the JSON does not match *schema*.
        """
        try:
            data = json.loads(self.final_response)
        except json.JSONDecodeError as exc:
            msg = "Failed to parse finalResponse as JSON"
            raise ParseError(msg, self.final_response, exc) from exc
        if isinstance(schema, type) and issubclass(schema, BaseModel):
            return schema.model_validate(data)
        return TypeAdapter(schema).validate_python(data)

    def try_parse(self, schema: type[_T]) -> _T | None:
        """Like ``parse`` but returns ``None`` on any parse or validation error."""
        try:
            return self.parse(schema)
        except (ParseError, ValueError):
            return None

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-compatible dict using the wire field names."""
        return {
            "finalResponse": self.final_response,
            "items": [item.model_dump(by_alias=True) for item in self.items],
            "sessionId": self.session_id,
            "durationMs": self.duration_ms,
            "numTurns": self.num_turns,
            "isError": self.is_error,
        }


class JsonResult(BaseModel):
    """The single JSON document printed by ``droid exec -o json``."""

    model_config = ConfigDict(extra="ignore")

    type: str = "result"
    subtype: str = "success"
    is_error: bool = False
    duration_ms: int | float = 0
    num_turns: int = 0
    result: str
    session_id: str | None = None
