"""Factory utilities for instantiating completion clients."""

from __future__ import annotations

from typing import Dict, Type

from .base import CompletionClient
from .config import EndpointConfig, load_endpoint_config
from .exceptions import ProviderConfigError
from .mock import MockCompletionClient
from .openai import OpenAICompatibleClient

CLIENT_MAP: Dict[str, Type[CompletionClient]] = {
    "openai": OpenAICompatibleClient,
    "mock": MockCompletionClient,
}


class ClientFactory:
    """Factory for creating completion clients based on configuration."""

    @staticmethod
    def create(config: EndpointConfig | None = None) -> CompletionClient:
        if config is None:
            config = load_endpoint_config()
        client_cls = CLIENT_MAP.get(config.provider.lower())
        if client_cls is None:
            raise ProviderConfigError(f"Unknown provider: {config.provider}")
        return client_cls()
