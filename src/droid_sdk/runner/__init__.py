"""Subprocess side of the SDK: locating, spawning, and decoding ``droid``."""

from droid_sdk.runner.args import (
    SpawnOptions,
    build_args,
    build_prompt_with_attachments,
)
from droid_sdk.runner.decoder import iter_chunks, iter_lines, parse_json_lines
from droid_sdk.runner.installer import InstallProgress, ensure_droid_cli
from droid_sdk.runner.locator import (
    find_droid_path,
    get_droid_cli_path,
    is_droid_cli_installed,
)
from droid_sdk.runner.process import (
    ProcessHandle,
    ProcessResult,
    exec_droid_json,
    list_droid_tools,
    run_droid,
    spawn_droid,
    spawn_droid_streaming,
    wait_for_exit,
)

__all__ = [
    "InstallProgress",
    "ProcessHandle",
    "ProcessResult",
    "SpawnOptions",
    "build_args",
    "build_prompt_with_attachments",
    "ensure_droid_cli",
    "exec_droid_json",
    "find_droid_path",
    "get_droid_cli_path",
    "is_droid_cli_installed",
    "iter_chunks",
    "iter_lines",
    "list_droid_tools",
    "parse_json_lines",
    "run_droid",
    "spawn_droid",
    "spawn_droid_streaming",
    "wait_for_exit",
]
