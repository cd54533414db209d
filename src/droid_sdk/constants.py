"""Shared constants for the Droid SDK."""

from __future__ import annotations

#: Default wall-clock timeout for blocking executions, in seconds.
DEFAULT_TIMEOUT = 600.0

#: Default executable name (resolved against PATH).
DEFAULT_DROID_PATH = "droid"

#: Config file looked up in the working directory.
DEFAULT_CONFIG_NAME = "droid.yaml"
