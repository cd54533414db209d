"""Python SDK for the Droid CLI agent."""

from droid_sdk.config import (
    ConfigError,
    DroidConfig,
    ExecOptions,
    FileAttachment,
    RunOptions,
    ThreadOptions,
    load_config,
)
from droid_sdk.droid import Droid
from droid_sdk.errors import (
    CliNotFoundError,
    DroidError,
    DroidTimeoutError,
    ErrorKind,
    ExecutionError,
    InstallError,
    ParseError,
    StreamError,
    UnknownEventError,
)
from droid_sdk.events import StreamEvent, parse_record
from droid_sdk.models import MODELS, get_model_info, is_valid_model
from droid_sdk.runner import (
    InstallProgress,
    ensure_droid_cli,
    find_droid_path,
    is_droid_cli_installed,
)
from droid_sdk.schemas import to_json_schema
from droid_sdk.stream import EventStream, StreamedTurn
from droid_sdk.thread import Thread
from droid_sdk.turn import TurnItem, TurnResult

__version__ = "0.3.0"

__all__ = [
    "MODELS",
    "CliNotFoundError",
    "ConfigError",
    "Droid",
    "DroidConfig",
    "DroidError",
    "DroidTimeoutError",
    "ErrorKind",
    "EventStream",
    "ExecOptions",
    "ExecutionError",
    "FileAttachment",
    "InstallError",
    "InstallProgress",
    "ParseError",
    "RunOptions",
    "StreamError",
    "StreamEvent",
    "StreamedTurn",
    "Thread",
    "ThreadOptions",
    "TurnItem",
    "TurnResult",
    "UnknownEventError",
    "__version__",
    "ensure_droid_cli",
    "find_droid_path",
    "get_model_info",
    "is_droid_cli_installed",
    "is_valid_model",
    "load_config",
    "parse_record",
    "to_json_schema",
]
