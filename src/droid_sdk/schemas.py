"""Structured-output helpers: JSON Schema from pydantic types."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, TypeAdapter


def is_pydantic_model(value: object) -> bool:
    """True if *value* is a pydantic model class."""
    return isinstance(value, type) and issubclass(value, BaseModel)


def to_json_schema(schema: Any) -> dict[str, Any]:
    """Return the JSON Schema for a pydantic model class or any type.

    Useful for describing the expected shape of ``final_response`` in a
    prompt before validating it with ``TurnResult.parse``.
    """
    if is_pydantic_model(schema):
        return schema.model_json_schema()
    return TypeAdapter(schema).json_schema()
