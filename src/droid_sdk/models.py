"""Catalogue of model identifiers known to the Droid CLI."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict

#: Friendly name -> model identifier passed with ``-m``.
MODELS: dict[str, str] = {
    "CLAUDE_OPUS": "claude-opus-4-5-20251101",
    "CLAUDE_SONNET": "claude-sonnet-4-5-20250929",
    "CLAUDE_HAIKU": "claude-haiku-4-5-20251001",
    "GPT_5_1": "gpt-5.1",
    "GPT_5_1_CODEX": "gpt-5.1-codex",
    "GPT_5_1_CODEX_MAX": "gpt-5.1-codex-max",
    "GPT_5_2": "gpt-5.2",
    "GEMINI_3_PRO": "gemini-3-pro-preview",
    "GEMINI_3_FLASH": "gemini-3-flash-preview",
    "DROID_CORE": "glm-4.6",
}

#: Prefix accepted for user-defined models.
CUSTOM_MODEL_PREFIX = "custom:"


class ModelInfo(BaseModel):
    """Static metadata about one model."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    provider: Literal["anthropic", "openai", "google", "opensource"]
    supports_reasoning: bool
    default_reasoning_effort: str | None = None


def _info(
    model_id: str,
    name: str,
    provider: Literal["anthropic", "openai", "google", "opensource"],
    effort: str | None,
) -> ModelInfo:
    return ModelInfo(
        id=model_id,
        name=name,
        provider=provider,
        supports_reasoning=effort is not None,
        default_reasoning_effort=effort,
    )


MODEL_INFO: dict[str, ModelInfo] = {
    info.id: info
    for info in (
        _info(MODELS["CLAUDE_OPUS"], "Claude Opus 4.5", "anthropic", "off"),
        _info(MODELS["CLAUDE_SONNET"], "Claude Sonnet 4.5", "anthropic", "off"),
        _info(MODELS["CLAUDE_HAIKU"], "Claude Haiku 4.5", "anthropic", "off"),
        _info(MODELS["GPT_5_1"], "GPT-5.1", "openai", "none"),
        _info(MODELS["GPT_5_1_CODEX"], "GPT-5.1-Codex", "openai", "medium"),
        _info(MODELS["GPT_5_1_CODEX_MAX"], "GPT-5.1-Codex-Max", "openai", "medium"),
        _info(MODELS["GPT_5_2"], "GPT-5.2", "openai", "low"),
        _info(MODELS["GEMINI_3_PRO"], "Gemini 3 Pro", "google", "high"),
        _info(MODELS["GEMINI_3_FLASH"], "Gemini 3 Flash", "google", "high"),
        _info(MODELS["DROID_CORE"], "Droid Core (GLM-4.6)", "opensource", None),
    )
}


def get_model_info(model_id: str) -> ModelInfo | None:
    return MODEL_INFO.get(model_id)


def is_valid_model(model_id: str) -> bool:
    """True for catalogued models and any ``custom:`` model."""
    return model_id in MODEL_INFO or model_id.startswith(CUSTOM_MODEL_PREFIX)
