"""Utilities for working with endpoint configurations inside the orchestrator."""

from __future__ import annotations

import os

from novel_forge_providers import EndpointConfig, load_endpoint_config
from novel_forge_providers.config import PROVIDER_ENV_VAR

from .models import EndpointOverride


def resolve_endpoint_config(override: EndpointOverride | None) -> EndpointConfig:
    provider_name = override.provider if override and override.provider else None
    provider_name = provider_name or os.getenv("NOVEL_FORGE_PROVIDER") or os.getenv(PROVIDER_ENV_VAR, "mock")

    if provider_name.lower() == "mock":
        config = EndpointConfig(provider="mock", model="mock")
    else:
        config = load_endpoint_config()
        if config.provider != provider_name.lower():
            config = config.model_copy(update={"provider": provider_name.lower()})

    if override is None:
        return config

    update_kwargs: dict[str, object] = {}
    if override.base_url:
        update_kwargs["base_url"] = override.base_url.rstrip("/")
    if override.api_key:
        update_kwargs["api_key"] = override.api_key
    if override.model:
        update_kwargs["model"] = override.model
    if override.temperature is not None:
        update_kwargs["temperature"] = override.temperature
    if override.max_tokens is not None:
        update_kwargs["max_tokens"] = override.max_tokens
    if override.stage_models:
        merged = dict(config.stage_models)
        merged.update({key.lower(): model for key, model in override.stage_models.items() if model})
        update_kwargs["stage_models"] = merged

    if update_kwargs:
        config = config.model_copy(update=update_kwargs)
    return config
