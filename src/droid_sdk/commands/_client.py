"""Client construction shared by the CLI commands."""

from __future__ import annotations

from pathlib import Path

from droid_sdk.constants import DEFAULT_CONFIG_NAME
from droid_sdk.droid import Droid


def load_client(config_file: str | None) -> Droid:
    """Build a ``Droid`` from *config_file*, ``./droid.yaml``, or defaults.

    Raises ``ConfigError`` when an explicit or discovered file is invalid.
    """
    if config_file:
        return Droid.from_config(Path(config_file))
    if (Path.cwd() / DEFAULT_CONFIG_NAME).is_file():
        return Droid.from_config()
    return Droid()
