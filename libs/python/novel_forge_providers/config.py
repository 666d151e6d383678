"""Endpoint configuration models and environment loading."""

from __future__ import annotations

import os
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .exceptions import ProviderConfigError

PROVIDER_ENV_VAR = "LLM_PROVIDER"
DEFAULT_PREFIX = "NOVEL_FORGE"
DEFAULT_PROVIDER = "openai"
DEFAULT_BASE_URL = "https://api.openai.com/v1"
DEFAULT_MAX_TOKENS = 8192
DEFAULT_TIMEOUT_SECONDS = 600.0

# Stages without their own model override borrow the override of another stage.
STAGE_MODEL_FALLBACKS = {
    "quality_check": "draft",
    "repair": "draft",
    "enrich": "draft",
}


class EndpointConfig(BaseModel):
    """Connection and sampling settings for one OpenAI-compatible endpoint."""

    model_config = ConfigDict(frozen=True)

    provider: str = DEFAULT_PROVIDER
    base_url: str = DEFAULT_BASE_URL
    api_key: str = ""
    model: str
    temperature: float = Field(0.7, ge=0, le=2)
    max_tokens: int | None = Field(DEFAULT_MAX_TOKENS, ge=16)
    timeout: float = Field(DEFAULT_TIMEOUT_SECONDS, gt=0, description="Request timeout in seconds")
    stage_models: dict[str, str] = Field(
        default_factory=dict,
        description="Per-stage model overrides keyed by stage name",
    )

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @field_validator("stage_models")
    @classmethod
    def normalise_stage_keys(cls, value: dict[str, str]) -> dict[str, str]:
        return {str(key).lower(): model for key, model in value.items() if model}

    def for_stage(self, stage: Any) -> "EndpointConfig":
        """Return the configuration to use for ``stage``.

        Accepts a stage enum member or its string value. When no override exists
        the same instance is returned.
        """

        key = str(getattr(stage, "value", stage)).lower()
        model = self.stage_models.get(key)
        if not model and key in STAGE_MODEL_FALLBACKS:
            model = self.stage_models.get(STAGE_MODEL_FALLBACKS[key])
        if not model or model == self.model:
            return self
        return self.model_copy(update={"model": model})


def load_endpoint_config(prefix: str | None = None) -> EndpointConfig:
    """Load configuration from environment variables.

    Args:
        prefix: Optional prefix for environment variables (defaults to ``NOVEL_FORGE``).

    Environment variables used (assuming the default prefix):
        NOVEL_FORGE_PROVIDER (optional, falls back to LLM_PROVIDER, then "openai")
        NOVEL_FORGE_BASE_URL (optional)
        NOVEL_FORGE_API_KEY
        NOVEL_FORGE_MODEL
        NOVEL_FORGE_TEMPERATURE (optional)
        NOVEL_FORGE_MAX_TOKENS (optional)
        NOVEL_FORGE_TIMEOUT (optional, seconds)
        NOVEL_FORGE_STAGE_MODEL_<STAGE> (optional, e.g. ..._STAGE_MODEL_BLUEPRINT)

    Raises:
        ProviderConfigError: If the API key or model is missing for a real provider,
            or a numeric variable cannot be parsed.
    """

    env_prefix = (prefix or DEFAULT_PREFIX).upper()

    def read_env(key: str, default: Any | None = None) -> Any:
        value = os.getenv(f"{env_prefix}_{key}")
        if value is None or not value.strip():
            return default
        return value.strip()

    def parse_number(key: str, cast: type, default: Any) -> Any:
        raw = read_env(key)
        if raw is None:
            return default
        try:
            return cast(raw)
        except ValueError as exc:
            raise ProviderConfigError(f"{env_prefix}_{key} must be a number, got {raw!r}") from exc

    provider = str(read_env("PROVIDER") or os.getenv(PROVIDER_ENV_VAR) or DEFAULT_PROVIDER).lower()
    api_key = read_env("API_KEY", "")
    model = read_env("MODEL")

    if provider == "mock":
        model = model or "mock"
    elif not api_key or not model:
        raise ProviderConfigError(f"{env_prefix}_API_KEY and {env_prefix}_MODEL must be configured")

    stage_prefix = f"{env_prefix}_STAGE_MODEL_"
    stage_models = {
        key[len(stage_prefix):].lower(): value.strip()
        for key, value in os.environ.items()
        if key.startswith(stage_prefix) and value.strip()
    }

    max_tokens = parse_number("MAX_TOKENS", int, DEFAULT_MAX_TOKENS)
    return EndpointConfig(
        provider=provider,
        base_url=read_env("BASE_URL", DEFAULT_BASE_URL),
        api_key=api_key,
        model=model,
        temperature=parse_number("TEMPERATURE", float, 0.7),
        max_tokens=max_tokens if max_tokens and max_tokens > 0 else None,
        timeout=parse_number("TIMEOUT", float, DEFAULT_TIMEOUT_SECONDS),
        stage_models=stage_models,
    )
