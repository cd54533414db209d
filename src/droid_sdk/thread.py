"""Thread — a conversation with the Droid agent that persists across runs."""

from __future__ import annotations

import logging
import os

from droid_sdk.config.models import (
    DroidConfig,
    RunOptions,
    ThreadOptions,
    merge_options,
)
from droid_sdk.runner.args import SpawnOptions
from droid_sdk.runner.process import exec_droid_json, spawn_droid_streaming
from droid_sdk.stream import StreamedTurn
from droid_sdk.turn.aggregator import build_turn_result_from_json
from droid_sdk.turn.models import TurnResult

logger = logging.getLogger(__name__)


class Thread:
    """A conversation thread bound to one Droid session.

    The session identifier is unknown until the first run reports one; it
    is then reused for every later run so the agent keeps its context.
    Runs on the same thread must not overlap.
    """

    def __init__(
        self,
        config: DroidConfig,
        thread_options: ThreadOptions | None = None,
        session_id: str | None = None,
    ) -> None:
        self._config = config
        self._thread_options = thread_options or ThreadOptions()
        self._session_id = session_id
        self._cwd = self._thread_options.cwd or config.cwd or os.getcwd()

    @property
    def id(self) -> str | None:
        """Session identifier, or ``None`` before the first run."""
        return self._session_id

    @property
    def cwd(self) -> str:
        """Working directory for this thread's runs."""
        return self._cwd

    async def run(self, prompt: str, options: RunOptions | None = None) -> TurnResult:
        """Execute *prompt* and wait for the complete result.

        Raises:
            CliNotFoundError: the droid executable could not be found.
            DroidTimeoutError: the configured timeout elapsed.
            ExecutionError: non-zero exit or unparseable output.
        """
        spawn_options = self._build_spawn_options(prompt, options)
        json_result = await exec_droid_json(spawn_options)

        if json_result.session_id:
            self._adopt_session(json_result.session_id)

        return build_turn_result_from_json(json_result)

    async def run_streamed(
        self, prompt: str, options: RunOptions | None = None
    ) -> StreamedTurn:
        """Start *prompt* and return its live event stream.

        Iterate ``turn.events`` for events as they arrive, then await
        ``turn.result`` for the aggregate.  Prefer ``async with`` so the
        process is released even if iteration stops early.

        Raises:
            CliNotFoundError: the droid executable could not be found.
        """
        spawn_options = self._build_spawn_options(prompt, options)
        handle = await spawn_droid_streaming(spawn_options)
        return StreamedTurn(
            handle,
            session_id=self._session_id,
            on_session_id=self._adopt_session,
        )

    def _adopt_session(self, session_id: str) -> None:
        if self._session_id:
            return
        logger.debug("thread bound to session %s", session_id)
        self._session_id = session_id

    def _build_spawn_options(
        self, prompt: str, options: RunOptions | None
    ) -> SpawnOptions:
        run_options = options or RunOptions()
        merged = merge_options(RunOptions, self._thread_options, run_options)

        return SpawnOptions(
            prompt=prompt,
            prompt_file=run_options.prompt_file,
            session_id=self._session_id,
            cwd=self._cwd,
            droid_path=self._config.droid_path,
            timeout=self._config.timeout,
            thread_options=merged,
            run_options=run_options,
            attachments=list(run_options.attachments or []),
        )
