"""droid-sdk exec — run one prompt through the Droid CLI."""

from __future__ import annotations

import asyncio
from typing import Any

import click

from droid_sdk.commands._client import load_client
from droid_sdk.config.models import ExecOptions, FileAttachment, RunOptions
from droid_sdk.config.parser import ConfigError
from droid_sdk.droid import Droid
from droid_sdk.errors import DroidError
from droid_sdk.turn.models import TurnResult


@click.command("exec")
@click.argument("prompt")
@click.option("-m", "--model", default=None, help="Model identifier.")
@click.option(
    "--auto",
    "autonomy_level",
    type=click.Choice(["low", "medium", "high"]),
    default=None,
    help="Autonomy level for file and command operations.",
)
@click.option(
    "-r",
    "--reasoning-effort",
    type=click.Choice(["off", "none", "low", "medium", "high"]),
    default=None,
    help="Reasoning effort for models that support it.",
)
@click.option(
    "--cwd",
    type=click.Path(exists=True, file_okay=False),
    default=None,
    help="Working directory for the agent.",
)
@click.option("-s", "--session", "session_id", default=None, help="Resume a session.")
@click.option(
    "--attach",
    "attach",
    multiple=True,
    help="File to reference from the prompt (repeatable).",
)
@click.option("--stream", is_flag=True, help="Print events as JSON lines.")
@click.option(
    "--config",
    "config_file",
    type=click.Path(dir_okay=False),
    default=None,
    help="Path to droid.yaml (default: ./droid.yaml if present).",
)
def exec_command(
    prompt: str,
    model: str | None,
    autonomy_level: str | None,
    reasoning_effort: str | None,
    cwd: str | None,
    session_id: str | None,
    attach: tuple[str, ...],
    stream: bool,
    config_file: str | None,
) -> None:
    """Execute PROMPT and print the agent's final response."""
    overrides: dict[str, Any] = {
        key: value
        for key, value in (
            ("model", model),
            ("autonomy_level", autonomy_level),
            ("reasoning_effort", reasoning_effort),
            ("cwd", cwd),
        )
        if value is not None
    }
    attachments = [FileAttachment(path=path) for path in attach]

    try:
        droid = load_client(config_file)
        if stream:
            result = asyncio.run(
                _run_streamed(droid, prompt, overrides, attachments, session_id)
            )
        else:
            if session_id:
                overrides["session_id"] = session_id
            if attachments:
                overrides["attachments"] = attachments
            result = asyncio.run(
                droid.exec(prompt, ExecOptions.model_validate(overrides))
            )
    except (ConfigError, DroidError) as exc:
        click.echo(f"Error: {exc}", err=True)
        raise SystemExit(1) from None

    if not stream:
        click.echo(result.final_response)
    if result.is_error:
        raise SystemExit(1)


async def _run_streamed(
    droid: Droid,
    prompt: str,
    overrides: dict[str, Any],
    attachments: list[FileAttachment],
    session_id: str | None,
) -> TurnResult:
    if session_id:
        thread = droid.resume_thread(session_id, **overrides)
    else:
        thread = droid.start_thread(**overrides)

    options = RunOptions(attachments=attachments) if attachments else None
    turn = await thread.run_streamed(prompt, options)
    async with turn:
        async for event in turn.events:
            click.echo(event.model_dump_json(by_alias=True, exclude_none=True))
    return await turn.result
