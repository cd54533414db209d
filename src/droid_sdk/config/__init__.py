"""Configuration models and parser for droid.yaml."""

from droid_sdk.config.models import (
    AutonomyLevel,
    DroidConfig,
    ExecOptions,
    FileAttachment,
    OutputFormat,
    ReasoningEffort,
    RunOptions,
    ThreadOptions,
    merge_options,
)
from droid_sdk.config.parser import ConfigError, find_config, load_config

__all__ = [
    "AutonomyLevel",
    "ConfigError",
    "DroidConfig",
    "ExecOptions",
    "FileAttachment",
    "OutputFormat",
    "ReasoningEffort",
    "RunOptions",
    "ThreadOptions",
    "find_config",
    "load_config",
    "merge_options",
]
