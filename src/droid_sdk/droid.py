"""Droid — entry point for running the Droid CLI agent from Python."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from droid_sdk.config.models import (
    DroidConfig,
    ExecOptions,
    ThreadOptions,
    merge_options,
)
from droid_sdk.config.parser import load_config
from droid_sdk.runner.args import SpawnOptions
from droid_sdk.runner.process import exec_droid_json, list_droid_tools
from droid_sdk.thread import Thread
from droid_sdk.turn.aggregator import build_turn_result_from_json
from droid_sdk.turn.models import TurnResult


class Droid:
    """Client for the Droid CLI.

    Holds SDK-wide defaults (model, autonomy, reasoning effort, binary path,
    timeout) and hands them down to threads and one-shot executions.
    """

    def __init__(self, config: DroidConfig | None = None, **overrides: Any) -> None:
        base = config or DroidConfig()
        if overrides:
            layered = {**base.model_dump(exclude_unset=True), **overrides}
            base = DroidConfig.model_validate(layered)
        if base.cwd is None:
            base = base.model_copy(update={"cwd": os.getcwd()})
        self._config = base

    @classmethod
    def from_config(cls, path: Path | None = None) -> Droid:
        """Build a client from a ``droid.yaml`` file."""
        return cls(load_config(path))

    @property
    def config(self) -> DroidConfig:
        return self._config

    def _defaults(self) -> ThreadOptions:
        return ThreadOptions(
            model=self._config.model,
            autonomy_level=self._config.autonomy_level,
            reasoning_effort=self._config.reasoning_effort,
        )

    def start_thread(
        self, options: ThreadOptions | None = None, **kwargs: Any
    ) -> Thread:
        """Start a new conversation thread."""
        merged = merge_options(
            ThreadOptions,
            self._defaults(),
            options,
            _from_kwargs(ThreadOptions, kwargs),
        )
        return Thread(self._config, merged)

    def resume_thread(
        self, session_id: str, options: ThreadOptions | None = None, **kwargs: Any
    ) -> Thread:
        """Reopen the conversation identified by *session_id*."""
        merged = merge_options(
            ThreadOptions,
            self._defaults(),
            options,
            _from_kwargs(ThreadOptions, kwargs),
        )
        return Thread(self._config, merged, session_id)

    async def exec(
        self, prompt: str, options: ExecOptions | None = None, **kwargs: Any
    ) -> TurnResult:
        """Run a single prompt without creating a thread.

        Raises:
            CliNotFoundError: the droid executable could not be found.
            DroidTimeoutError: the configured timeout elapsed.
            ExecutionError: non-zero exit or unparseable output.
        """
        merged = merge_options(
            ExecOptions, self._defaults(), options, _from_kwargs(ExecOptions, kwargs)
        )
        json_result = await exec_droid_json(
            SpawnOptions(
                prompt=prompt,
                prompt_file=merged.prompt_file,
                session_id=merged.session_id,
                cwd=merged.cwd or self._config.cwd,
                droid_path=self._config.droid_path,
                timeout=self._config.timeout,
                thread_options=merged,
                run_options=merged,
                attachments=list(merged.attachments or []),
            )
        )
        return build_turn_result_from_json(json_result)

    async def list_tools(self, model: str | None = None) -> list[str]:
        """List the tools available to *model* (or the default model)."""
        return await list_droid_tools(
            self._config.droid_path, model or self._config.model
        )


def _from_kwargs(
    target: type[ThreadOptions], kwargs: dict[str, Any]
) -> ThreadOptions | None:
    if not kwargs:
        return None
    return target.model_validate(kwargs)
