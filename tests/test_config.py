"""Tests for droid-sdk config models and parser."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import pytest
import yaml
from pydantic import ValidationError

from droid_sdk.config import (
    ConfigError,
    DroidConfig,
    ExecOptions,
    FileAttachment,
    RunOptions,
    ThreadOptions,
    load_config,
    merge_options,
)
from droid_sdk.constants import DEFAULT_DROID_PATH, DEFAULT_TIMEOUT

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _write_yaml(path: Path, data: Any) -> Path:
    """Write *data* as YAML and return the file path."""
    path.write_text(yaml.dump(data), encoding="utf-8")
    return path


# ===================================================================
# Model validation tests
# ===================================================================


class TestDroidConfig:
    def test_defaults(self) -> None:
        cfg = DroidConfig()
        assert cfg.cwd is None
        assert cfg.model is None
        assert cfg.droid_path == DEFAULT_DROID_PATH
        assert cfg.timeout == DEFAULT_TIMEOUT

    def test_unknown_key_rejected(self) -> None:
        with pytest.raises(ValidationError):
            DroidConfig.model_validate({"modle": "typo"})

    def test_timeout_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            DroidConfig(timeout=0)

    def test_invalid_autonomy(self) -> None:
        with pytest.raises(ValidationError):
            DroidConfig.model_validate({"autonomy_level": "extreme"})


class TestFileAttachment:
    def test_type_defaults_to_text(self) -> None:
        assert FileAttachment(path="a.txt").type == "text"

    def test_frozen(self) -> None:
        attachment = FileAttachment(path="a.txt")
        with pytest.raises(ValidationError):
            attachment.path = "b.txt"  # type: ignore[misc]


class TestMergeOptions:
    def test_later_layers_override_set_fields_only(self) -> None:
        merged = merge_options(
            RunOptions,
            ThreadOptions(model="base", reasoning_effort="high"),
            RunOptions(model="override"),
        )
        assert merged.model == "override"
        assert merged.reasoning_effort == "high"

    def test_none_layers_skipped(self) -> None:
        merged = merge_options(ThreadOptions, None, ThreadOptions(cwd="/x"), None)
        assert merged.cwd == "/x"

    def test_unknown_fields_dropped(self) -> None:
        merged = merge_options(
            ThreadOptions, ExecOptions(session_id="s1", prompt_file="p.md", model="m")
        )
        assert merged.model == "m"
        assert not hasattr(merged, "session_id")


# ===================================================================
# Parser tests
# ===================================================================


class TestLoadConfig:
    def test_loads_explicit_file(self, tmp_path: Path) -> None:
        path = _write_yaml(
            tmp_path / "droid.yaml",
            {"model": "m1", "autonomy_level": "medium", "timeout": 30},
        )
        cfg = load_config(path)
        assert cfg.model == "m1"
        assert cfg.autonomy_level == "medium"
        assert cfg.timeout == 30

    def test_discovers_file_in_cwd(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        _write_yaml(tmp_path / "droid.yaml", {"model": "m2"})
        monkeypatch.chdir(tmp_path)
        assert load_config().model == "m2"

    def test_missing_explicit_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="Config file not found"):
            load_config(tmp_path / "missing.yaml")

    def test_missing_default_file(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.chdir(tmp_path)
        with pytest.raises(ConfigError, match="No droid.yaml found"):
            load_config()

    def test_empty_file_gives_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "droid.yaml"
        path.write_text("", encoding="utf-8")
        assert load_config(path) == DroidConfig()

    def test_invalid_yaml_reports_position(self, tmp_path: Path) -> None:
        path = tmp_path / "droid.yaml"
        path.write_text("model: [unclosed\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="Invalid YAML in droid.yaml"):
            load_config(path)

    def test_non_mapping_rejected(self, tmp_path: Path) -> None:
        path = _write_yaml(tmp_path / "droid.yaml", ["a", "b"])
        with pytest.raises(ConfigError, match="Expected a YAML mapping"):
            load_config(path)

    def test_unknown_setting_is_friendly(self, tmp_path: Path) -> None:
        path = _write_yaml(tmp_path / "droid.yaml", {"modle": "typo"})
        with pytest.raises(ConfigError) as exc_info:
            load_config(path)
        assert "modle: Unknown setting" in str(exc_info.value)

    def test_invalid_value_is_friendly(self, tmp_path: Path) -> None:
        path = _write_yaml(tmp_path / "droid.yaml", {"reasoning_effort": "max"})
        with pytest.raises(ConfigError) as exc_info:
            load_config(path)
        assert "reasoning_effort: Invalid value" in str(exc_info.value)

    def test_relative_cwd_resolved_against_config_dir(self, tmp_path: Path) -> None:
        (tmp_path / "project").mkdir()
        path = _write_yaml(tmp_path / "droid.yaml", {"cwd": "project"})
        cfg = load_config(path)
        assert cfg.cwd == str((tmp_path / "project").resolve())

    def test_absolute_cwd_kept(self, tmp_path: Path) -> None:
        path = _write_yaml(tmp_path / "droid.yaml", {"cwd": "/srv/app"})
        assert load_config(path).cwd == "/srv/app"

    def test_dotenv_loaded_next_to_config(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.delenv("DROID_SDK_TEST_TOKEN", raising=False)
        (tmp_path / ".env").write_text("DROID_SDK_TEST_TOKEN=abc\n", encoding="utf-8")
        path = _write_yaml(tmp_path / "droid.yaml", {"model": "m"})
        load_config(path)
        assert os.environ["DROID_SDK_TEST_TOKEN"] == "abc"
        monkeypatch.delenv("DROID_SDK_TEST_TOKEN")

    def test_timeout_bound_is_friendly(self, tmp_path: Path) -> None:
        path = _write_yaml(tmp_path / "droid.yaml", {"timeout": -1})
        with pytest.raises(ConfigError) as exc_info:
            load_config(path)
        assert "timeout: Must be greater than" in str(exc_info.value)
        assert str(exc_info.value).startswith("Invalid settings in droid.yaml:")
