"""Record parser — one JSON line in, one typed stream event out."""

from __future__ import annotations

import json
import logging
from typing import Any

from pydantic import ValidationError

from droid_sdk.errors import ParseError, UnknownEventError
from droid_sdk.events.models import EVENT_TYPES, StreamEvent

logger = logging.getLogger(__name__)

#: Characters of the offending record quoted in parse error messages.
_PREVIEW_CHARS = 100


def parse_record(text: str) -> StreamEvent:
    """Parse a single JSON record into a stream event.

    Dispatch is on the ``type`` tag only.  A record with a known tag but an
    unexpected body is still accepted: the model is built as-is rather than
    rejected.

    Raises:
        ParseError: *text* is not a JSON object.
        UnknownEventError: the ``type`` tag is not a known event type.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        msg = f"Failed to parse JSON line: {text[:_PREVIEW_CHARS]}..."
        raise ParseError(msg, text, exc) from exc

    if not isinstance(data, dict):
        msg = (
            f"Expected a JSON object, got {type(data).__name__}: "
            f"{text[:_PREVIEW_CHARS]}"
        )
        raise ParseError(msg, text)

    event_type = data.get("type")
    model = EVENT_TYPES.get(event_type) if isinstance(event_type, str) else None
    if model is None:
        raise UnknownEventError(event_type, text)

    return _build(model, data)


def _build(model: Any, data: dict[str, Any]) -> Any:
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        logger.debug(
            "accepting malformed %r record without validation: %s",
            data.get("type"),
            exc.error_count(),
        )
        return model.model_construct(**data)
