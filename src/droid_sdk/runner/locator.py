"""Locate the ``droid`` executable."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from droid_sdk.errors import CliNotFoundError

logger = logging.getLogger(__name__)

#: Executable name searched for on PATH.
DROID_BINARY = "droid"


def _well_known_paths() -> list[str]:
    home = os.environ.get("HOME") or os.environ.get("USERPROFILE") or ""
    return [
        f"{home}/.local/bin/{DROID_BINARY}",
        f"{home}/.droid-sdk/bin/{DROID_BINARY}",
        f"/usr/local/bin/{DROID_BINARY}",
        f"/opt/homebrew/bin/{DROID_BINARY}",
    ]


def find_droid_path(preferred_path: str | None = None) -> str:
    """Return the first ``droid`` candidate that is an executable file.

    Search order: *preferred_path*, each ``PATH`` directory, then the
    well-known install locations.  A bare name such as ``"droid"`` counts
    as a candidate relative to the current directory and then falls
    through to the ``PATH`` search.

    Raises:
        CliNotFoundError: nothing matched; lists every path tried.
    """
    searched: list[str] = []

    candidates: list[str] = []
    if preferred_path:
        candidates.append(preferred_path)
    for directory in os.environ.get("PATH", "").split(os.pathsep):
        if directory:
            candidates.append(os.path.join(directory, DROID_BINARY))
    candidates.extend(_well_known_paths())

    for candidate in candidates:
        searched.append(candidate)
        if Path(candidate).is_file() and os.access(candidate, os.X_OK):
            logger.debug("found droid CLI at %s", candidate)
            return candidate

    raise CliNotFoundError(searched)


def get_droid_cli_path() -> str | None:
    """Return the resolved CLI path, or ``None`` if it is not installed."""
    try:
        return find_droid_path()
    except CliNotFoundError:
        return None


def is_droid_cli_installed() -> bool:
    return get_droid_cli_path() is not None
