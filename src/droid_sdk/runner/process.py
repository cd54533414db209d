"""Process runner — spawn ``droid``, enforce timeouts, expose output.

Two execution modes share one spawn path:

* **Blocking** (``run_droid``): stdout, stderr and the exit code are
  collected concurrently so a full stderr pipe can never stall stdout.
* **Streaming** (``spawn_droid_streaming``): stdout is decoded into a live
  sequence of stream events; no timeout is enforced at this layer.
"""

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
import os
from collections.abc import AsyncIterator
from dataclasses import dataclass, replace
from types import TracebackType

from pydantic import ValidationError

from droid_sdk.errors import CliNotFoundError, DroidTimeoutError, ExecutionError
from droid_sdk.events.models import StreamEvent
from droid_sdk.runner.args import SpawnOptions, build_args
from droid_sdk.runner.decoder import iter_chunks, parse_json_lines
from droid_sdk.runner.locator import find_droid_path
from droid_sdk.turn.models import JsonResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProcessResult:
    """Captured output of a finished blocking execution."""

    stdout: str
    stderr: str
    exit_code: int


async def wait_for_exit(proc: asyncio.subprocess.Process) -> int:
    """Return *proc*'s exit code once it has exited.

    The result is settled exactly once, either from an exit code that is
    already known when this is called or from the live wait, whichever
    comes first.
    """
    loop = asyncio.get_running_loop()
    exited: asyncio.Future[int] = loop.create_future()

    def _settle(code: int | None) -> None:
        if not exited.done():
            exited.set_result(0 if code is None else code)

    def _on_wait_done(task: asyncio.Future[int]) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exited.done():
            return
        if exc is not None:
            exited.set_exception(exc)
        else:
            _settle(task.result())

    waiter = asyncio.ensure_future(proc.wait())
    waiter.add_done_callback(_on_wait_done)
    if proc.returncode is not None:
        _settle(proc.returncode)

    try:
        return await exited
    finally:
        if not waiter.done():
            waiter.cancel()


async def _spawn(
    droid_path: str,
    args: list[str],
    cwd: str | None,
    *,
    capture_stderr: bool,
) -> asyncio.subprocess.Process:
    work_dir = cwd or os.getcwd()
    logger.debug("spawning %s %s (cwd=%s)", droid_path, args, work_dir)
    try:
        # stdin is inherited: the agent may prompt on the parent's terminal.
        proc = await asyncio.create_subprocess_exec(
            droid_path,
            *args,
            cwd=work_dir,
            stdin=None,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE
            if capture_stderr
            else asyncio.subprocess.DEVNULL,
        )
    except FileNotFoundError as exc:
        if exc.filename == droid_path:
            raise CliNotFoundError([droid_path]) from exc
        msg = f"Failed to start droid in {work_dir}: {exc.strerror}"
        raise ExecutionError(msg, -1, str(exc)) from exc
    except OSError as exc:
        msg = f"Failed to start {droid_path}: {exc.strerror}"
        raise ExecutionError(msg, -1, str(exc)) from exc
    logger.debug("droid started (pid=%s)", proc.pid)
    return proc


async def _read_text(stream: asyncio.StreamReader | None) -> str:
    if stream is None:
        return ""
    data = await stream.read()
    return data.decode("utf-8", errors="replace")


async def _kill_and_reap(proc: asyncio.subprocess.Process) -> None:
    """Kill *proc* if it is still running, drain its pipes, and reap it."""
    if proc.returncode is None:
        with contextlib.suppress(ProcessLookupError):
            proc.kill()
    # Unread pipe data can keep the transport open after the kill.
    for stream in (proc.stdout, proc.stderr):
        if stream is not None and not stream.at_eof():
            with contextlib.suppress(OSError):
                await stream.read()
    await proc.wait()


async def run_droid(
    args: list[str],
    *,
    cwd: str | None = None,
    timeout: float | None = None,
    droid_path: str | None = None,
) -> ProcessResult:
    """Run ``droid`` with *args* to completion and capture its output.

    Args:
        args: Arguments passed after the executable path.
        cwd: Working directory (defaults to the current directory).
        timeout: Wall-clock limit in seconds; ``None`` or ``0`` disables it.
        droid_path: Preferred executable path.

    Raises:
        CliNotFoundError: the executable could not be located.
        ExecutionError: the process could not be started, for example
            because *cwd* does not exist.
        DroidTimeoutError: *timeout* elapsed; the process was killed and
            any partial output discarded.
    """
    path = find_droid_path(droid_path)
    proc = await _spawn(path, args, cwd, capture_stderr=True)

    limit = timeout if timeout and timeout > 0 else None
    try:
        stdout, stderr, exit_code = await asyncio.wait_for(
            asyncio.gather(
                _read_text(proc.stdout),
                _read_text(proc.stderr),
                wait_for_exit(proc),
            ),
            timeout=limit,
        )
    except TimeoutError:
        logger.warning("droid (pid=%s) timed out after %ss, killing", proc.pid, limit)
        await _kill_and_reap(proc)
        raise DroidTimeoutError(timeout or 0) from None
    except asyncio.CancelledError:
        await _kill_and_reap(proc)
        raise

    if exit_code != 0:
        logger.warning("droid (pid=%s) exited with code %d", proc.pid, exit_code)
    return ProcessResult(stdout=stdout, stderr=stderr, exit_code=exit_code)


class ProcessHandle:
    """A live streaming ``droid`` process.

    ``events`` is a single-pass async iterator of decoded stream events.
    ``aclose()`` (or leaving an ``async with`` block) kills the process if
    it is still running, closes the event iterator, drains the pipes and
    reaps the process.
    """

    def __init__(
        self,
        proc: asyncio.subprocess.Process,
        events: AsyncIterator[StreamEvent],
    ) -> None:
        self._proc = proc
        self.events = events
        self._closed = False

    @property
    def pid(self) -> int:
        return self._proc.pid

    @property
    def returncode(self) -> int | None:
        return self._proc.returncode

    async def wait(self) -> int:
        """Wait for the process to exit and return its exit code."""
        return await wait_for_exit(self._proc)

    def kill(self) -> None:
        """Forcibly terminate the process (no-op once it has exited)."""
        if self._proc.returncode is None:
            with contextlib.suppress(ProcessLookupError):
                self._proc.kill()

    async def aclose(self) -> None:
        if self._closed:
            return
        self._closed = True
        self.kill()
        aclose = getattr(self.events, "aclose", None)
        if aclose is not None:
            await aclose()
        await _kill_and_reap(self._proc)

    async def __aenter__(self) -> ProcessHandle:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()


async def spawn_droid(options: SpawnOptions) -> ProcessResult:
    """Run ``droid exec`` for *options* in blocking mode."""
    return await run_droid(
        build_args(options),
        cwd=options.cwd,
        timeout=options.timeout,
        droid_path=options.droid_path,
    )


async def spawn_droid_streaming(options: SpawnOptions) -> ProcessHandle:
    """Start ``droid exec -o stream-json`` and return a live handle.

    stderr is discarded in streaming mode.
    """
    path = find_droid_path(options.droid_path)
    args = build_args(replace(options, output_format="stream-json"))
    proc = await _spawn(path, args, options.cwd, capture_stderr=False)
    if proc.stdout is None:
        msg = "droid process has no stdout pipe"
        raise RuntimeError(msg)
    events = parse_json_lines(iter_chunks(proc.stdout))
    return ProcessHandle(proc, events)


async def exec_droid_json(options: SpawnOptions) -> JsonResult:
    """Run ``droid exec -o json`` and parse the single JSON result.

    Raises:
        ExecutionError: non-zero exit (``stderr`` holds the captured
            stderr) or unparseable output (``stderr`` holds the raw stdout).
    """
    result = await spawn_droid(replace(options, output_format="json"))

    if result.exit_code != 0:
        msg = f"Droid exec failed with exit code {result.exit_code}"
        raise ExecutionError(msg, result.exit_code, result.stderr)

    try:
        return JsonResult.model_validate_json(result.stdout)
    except ValidationError as exc:
        msg = "Failed to parse JSON response from droid"
        raise ExecutionError(msg, result.exit_code, result.stdout) from exc


async def list_droid_tools(
    droid_path: str | None = None, model: str | None = None
) -> list[str]:
    """Return the tool names the CLI reports (empty list on failure)."""
    args = ["exec", "--list-tools", "-o", "json"]
    if model:
        args.extend(["-m", model])

    result = await run_droid(args, droid_path=droid_path)
    if result.exit_code != 0:
        return []

    try:
        data = json.loads(result.stdout)
    except json.JSONDecodeError:
        return [line for line in result.stdout.strip().split("\n") if line]

    if isinstance(data, list):
        return [str(tool) for tool in data]
    if isinstance(data, dict) and isinstance(data.get("tools"), list):
        return [str(tool) for tool in data["tools"]]
    return []
