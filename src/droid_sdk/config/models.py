"""Pydantic v2 models for SDK, thread, and per-run configuration."""

from __future__ import annotations

from typing import Literal, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from droid_sdk.constants import DEFAULT_DROID_PATH, DEFAULT_TIMEOUT

AutonomyLevel = Literal["default", "low", "medium", "high"]
ReasoningEffort = Literal["off", "none", "low", "medium", "high"]
OutputFormat = Literal["text", "json", "stream-json", "stream-jsonrpc"]

_OptionsT = TypeVar("_OptionsT", bound=BaseModel)


class FileAttachment(BaseModel):
    """A file referenced from the prompt with ``@path`` syntax."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    path: str = Field(description="File path, relative to the working directory")
    type: Literal["image", "text", "data"] = Field(
        default="text",
        description="Kind of file being attached",
    )
    description: str | None = Field(
        default=None,
        description="Short note rendered next to the reference",
    )


class DroidConfig(BaseModel):
    """Top-level SDK configuration (``droid.yaml``)."""

    model_config = ConfigDict(extra="forbid")

    cwd: str | None = Field(
        default=None,
        description="Default working directory (defaults to the process cwd)",
    )
    model: str | None = Field(default=None, description="Default model identifier")
    autonomy_level: AutonomyLevel | None = Field(
        default=None,
        description="Default autonomy level passed as --auto",
    )
    reasoning_effort: ReasoningEffort | None = Field(
        default=None,
        description="Default reasoning effort passed as -r",
    )
    droid_path: str = Field(
        default=DEFAULT_DROID_PATH,
        description="Preferred path to the droid executable",
    )
    timeout: float = Field(
        default=DEFAULT_TIMEOUT,
        gt=0,
        description="Wall-clock timeout in seconds for blocking executions",
    )


class ThreadOptions(BaseModel):
    """Options applied to every run of a thread."""

    model_config = ConfigDict(extra="forbid")

    cwd: str | None = None
    model: str | None = None
    autonomy_level: AutonomyLevel | None = None
    reasoning_effort: ReasoningEffort | None = None
    use_spec: bool | None = None
    spec_model: str | None = None
    spec_reasoning_effort: ReasoningEffort | None = None
    enabled_tools: list[str] | None = None
    disabled_tools: list[str] | None = None
    skip_permissions_unsafe: bool | None = None


class RunOptions(ThreadOptions):
    """Per-run options; override the thread's options for one prompt."""

    prompt_file: str | None = Field(
        default=None,
        description="Read the prompt from this file (-f)",
    )
    attachments: list[FileAttachment] | None = None


class ExecOptions(RunOptions):
    """Options for a one-shot ``Droid.exec`` call."""

    session_id: str | None = Field(
        default=None,
        description="Resume this session instead of starting a new one",
    )


def merge_options(target: type[_OptionsT], *layers: BaseModel | None) -> _OptionsT:
    """Overlay option *layers* left to right into a *target* model.

    Only fields explicitly set on a layer override earlier layers, and
    fields unknown to *target* are dropped.
    """
    merged: dict[str, object] = {}
    for layer in layers:
        if layer is None:
            continue
        merged.update(layer.model_dump(exclude_unset=True))
    known = {k: v for k, v in merged.items() if k in target.model_fields}
    return target.model_validate(known)
