"""droid-sdk install — install the Droid CLI if it is missing."""

from __future__ import annotations

import asyncio
from pathlib import Path

import click

from droid_sdk.errors import DroidError
from droid_sdk.runner.installer import InstallProgress, ensure_droid_cli


def _echo_progress(progress: InstallProgress) -> None:
    if progress.message:
        click.echo(progress.message)


@click.command()
@click.option("--force", is_flag=True, help="Reinstall even if droid is found.")
@click.option(
    "--dir",
    "install_dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Install directory (default: ~/.droid-sdk/bin).",
)
def install(force: bool, install_dir: Path | None) -> None:
    """Install the Droid CLI and print its path."""
    try:
        path = asyncio.run(
            ensure_droid_cli(install_dir, force=force, on_progress=_echo_progress)
        )
    except DroidError as exc:
        click.echo(f"Error: {exc}", err=True)
        raise SystemExit(1) from None

    click.echo(path)
