"""Read ``droid.yaml`` into a validated DroidConfig."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv
from pydantic import ValidationError

from droid_sdk.config.models import DroidConfig
from droid_sdk.constants import DEFAULT_CONFIG_NAME


class ConfigError(Exception):
    """User-facing configuration error."""


def load_config(path: Path | None = None) -> DroidConfig:
    """Load *path* (or ``./droid.yaml``) and return the validated config.

    A ``.env`` file next to the config is loaded into the environment, and
    a relative ``cwd`` setting is taken relative to the config's directory.

    Raises:
        ConfigError: the file is missing or unreadable, is not a YAML
            mapping, or holds invalid settings.
    """
    config_path = Path(path) if path is not None else find_config()
    if not config_path.is_file():
        msg = f"Config file not found: {config_path}"
        raise ConfigError(msg)

    settings = _read_mapping(config_path)
    base_dir = config_path.parent
    if isinstance(settings.get("cwd"), str):
        settings["cwd"] = _anchor(settings["cwd"], base_dir)

    env_file = base_dir / ".env"
    if env_file.is_file():
        load_dotenv(env_file)

    try:
        return DroidConfig.model_validate(settings)
    except ValidationError as exc:
        raise ConfigError(_describe(exc, config_path.name)) from exc


def find_config() -> Path:
    """Return ``droid.yaml`` in the current directory."""
    candidate = Path.cwd() / DEFAULT_CONFIG_NAME
    if not candidate.is_file():
        msg = f"No {DEFAULT_CONFIG_NAME} found in {Path.cwd()}"
        raise ConfigError(msg)
    return candidate


def _read_mapping(path: Path) -> dict[str, Any]:
    try:
        with path.open(encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except OSError as exc:
        msg = f"Cannot read config file: {exc}"
        raise ConfigError(msg) from exc
    except yaml.YAMLError as exc:
        msg = f"Invalid YAML in {path.name}{_position(exc)}"
        raise ConfigError(msg) from exc

    # An empty file means "all defaults".
    if data is None:
        return {}
    if isinstance(data, dict):
        return data
    msg = f"Expected a YAML mapping in {path.name}, got {type(data).__name__}"
    raise ConfigError(msg)


def _position(exc: yaml.YAMLError) -> str:
    mark = getattr(exc, "problem_mark", None)
    if mark is None:
        return ""
    return f" (line {mark.line + 1}, column {mark.column + 1})"


def _anchor(value: str, base_dir: Path) -> str:
    if Path(value).is_absolute():
        return value
    return str((base_dir / value).resolve())


def _describe(exc: ValidationError, source: str) -> str:
    lines = [f"Invalid settings in {source}:"]
    for err in exc.errors():
        field = ".".join(str(part) for part in err["loc"]) or "(root)"
        kind = err["type"]
        if kind == "extra_forbidden":
            detail = "Unknown setting"
        elif kind == "literal_error":
            detail = f"Invalid value: {err['msg']}"
        elif kind == "greater_than":
            detail = f"Must be greater than {err.get('ctx', {}).get('gt')}"
        else:
            detail = err["msg"]
        lines.append(f"  {field}: {detail}")
    return "\n".join(lines)
