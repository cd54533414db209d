"""droid-sdk tools — list the tools available to a model."""

from __future__ import annotations

import asyncio

import click

from droid_sdk.commands._client import load_client
from droid_sdk.config.parser import ConfigError
from droid_sdk.errors import DroidError


@click.command()
@click.option("-m", "--model", default=None, help="Model to list tools for.")
@click.option(
    "--config",
    "config_file",
    type=click.Path(dir_okay=False),
    default=None,
    help="Path to droid.yaml (default: ./droid.yaml if present).",
)
def tools(model: str | None, config_file: str | None) -> None:
    """Print one available tool name per line."""
    try:
        droid = load_client(config_file)
        names = asyncio.run(droid.list_tools(model))
    except (ConfigError, DroidError) as exc:
        click.echo(f"Error: {exc}", err=True)
        raise SystemExit(1) from None

    for name in names:
        click.echo(name)
