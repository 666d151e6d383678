"""Completion client abstraction for OpenAI-compatible endpoints."""

from .base import ChunkCallback, CompletionClient, CompletionRequest
from .config import EndpointConfig, load_endpoint_config
from .exceptions import (
    NetworkError,
    ProviderConfigError,
    ProviderError,
    ProviderResponseError,
    RequestFailed,
)
from .factory import ClientFactory
from .mock import MockCompletionClient
from .openai import OpenAICompatibleClient
from .sanitizer import clean_response

__all__ = [
    "ChunkCallback",
    "CompletionClient",
    "CompletionRequest",
    "EndpointConfig",
    "load_endpoint_config",
    "NetworkError",
    "ProviderConfigError",
    "ProviderError",
    "ProviderResponseError",
    "RequestFailed",
    "ClientFactory",
    "MockCompletionClient",
    "OpenAICompatibleClient",
    "clean_response",
]
