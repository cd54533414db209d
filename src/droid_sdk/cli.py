"""Root CLI group, version and verbosity flags."""

import logging

import click

from droid_sdk import __version__
from droid_sdk.commands.exec import exec_command
from droid_sdk.commands.install import install
from droid_sdk.commands.tools import tools


@click.group()
@click.version_option(version=__version__, prog_name="droid-sdk")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
def cli(verbose: bool) -> None:
    """Droid SDK — run the Droid CLI agent and inspect its output."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )


cli.add_command(exec_command)
cli.add_command(tools)
cli.add_command(install)
