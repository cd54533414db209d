"""Install the Droid CLI using the official install script."""

from __future__ import annotations

import asyncio
import logging
import os
import sys
import urllib.error
import urllib.request
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from droid_sdk.errors import InstallError
from droid_sdk.runner.locator import DROID_BINARY, find_droid_path, get_droid_cli_path

logger = logging.getLogger(__name__)

INSTALL_SCRIPT_URL = "https://app.factory.ai/cli"
WINDOWS_INSTALL_COMMAND = "irm https://app.factory.ai/cli/windows | iex"

#: Seconds allowed for downloading the install script.
_DOWNLOAD_TIMEOUT = 30

InstallPhase = Literal["checking", "downloading", "installing", "verifying", "complete"]


@dataclass(frozen=True)
class InstallProgress:
    phase: InstallPhase
    percent: int | None = None
    message: str | None = None


ProgressCallback = Callable[[InstallProgress], None]


def default_install_dir() -> Path:
    return Path.home() / ".droid-sdk" / "bin"


async def ensure_droid_cli(
    install_dir: Path | None = None,
    force: bool = False,
    on_progress: ProgressCallback | None = None,
) -> str:
    """Return the path to a working ``droid`` binary, installing it if needed.

    Raises:
        InstallError: downloading or running the installer failed.
    """

    def report(phase: InstallPhase, message: str, percent: int | None = None) -> None:
        if on_progress is not None:
            on_progress(InstallProgress(phase=phase, percent=percent, message=message))

    report("checking", "Checking for existing installation...")
    if not force:
        existing = get_droid_cli_path()
        if existing:
            report("complete", "Droid CLI already installed")
            return existing

    target = install_dir or default_install_dir()
    if sys.platform == "win32":
        return await _install_windows(report)
    return await _install_unix(target, report)


def _fetch_script(url: str) -> str:
    req = urllib.request.Request(url, headers={"User-Agent": "droid-sdk-python"})
    with urllib.request.urlopen(req, timeout=_DOWNLOAD_TIMEOUT) as resp:
        raw: bytes = resp.read()
        return raw.decode("utf-8", errors="replace")


async def _run_installer(args: list[str], env: dict[str, str] | None = None) -> None:
    proc = await asyncio.create_subprocess_exec(
        *args,
        env=env,
        stdin=None,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )
    _, stderr = await proc.communicate()
    if proc.returncode != 0:
        detail = stderr.decode(errors="replace").strip()
        msg = f"Installation failed (exit code {proc.returncode}): {detail}"
        raise InstallError(msg)


async def _install_unix(install_dir: Path, report: Callable[..., None]) -> str:
    install_dir.mkdir(parents=True, exist_ok=True)

    report("downloading", "Fetching installer...", 25)
    loop = asyncio.get_running_loop()
    try:
        script = await loop.run_in_executor(None, _fetch_script, INSTALL_SCRIPT_URL)
    except (urllib.error.URLError, OSError) as exc:
        msg = f"Failed to download installer: {exc}"
        raise InstallError(msg, cause=exc) from exc

    report("installing", "Running installer...", 50)
    logger.info("installing droid CLI into %s", install_dir)
    env = {**os.environ, "DROID_INSTALL_DIR": str(install_dir)}
    await _run_installer(["sh", "-c", script], env=env)

    report("verifying", "Verifying installation...", 90)
    installed = install_dir / DROID_BINARY
    path = str(installed) if installed.is_file() else find_droid_path()
    report("complete", "Installation complete", 100)
    return path


async def _install_windows(report: Callable[..., None]) -> str:
    report("downloading", "Windows installation requires PowerShell...")
    await _run_installer(["powershell", "-Command", WINDOWS_INSTALL_COMMAND])

    report("verifying", "Verifying installation...", 90)
    path = find_droid_path()
    report("complete", "Installation complete", 100)
    return path
