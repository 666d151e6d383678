"""Core interfaces and dataclasses for completion calls."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Optional

from .config import EndpointConfig

ChunkCallback = Callable[[str, str], None]
"""Receives ``(increment, full_text)`` while a streamed completion arrives."""


@dataclass(slots=True)
class CompletionRequest:
    """Normalized chat completion request sent to an endpoint."""

    prompt: str
    stream: bool = False

    def to_payload(self, config: EndpointConfig) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "model": config.model,
            "messages": [{"role": "user", "content": self.prompt}],
            "temperature": config.temperature,
            "stream": self.stream,
        }
        if config.max_tokens:
            payload["max_tokens"] = config.max_tokens
        return payload


class CompletionClient(ABC):
    """Abstract base class implemented by concrete completion clients."""

    name: str

    @abstractmethod
    async def complete(
        self,
        config: EndpointConfig,
        prompt: str,
        on_chunk: Optional[ChunkCallback] = None,
    ) -> str:
        """Return the full completion text.

        When ``on_chunk`` is given the request is streamed and the callback
        receives throttled increments followed by one final ``("", full_text)``
        call.
        """

    @abstractmethod
    async def list_models(self, config: EndpointConfig) -> list[str]:
        """Return the model identifiers exposed by the endpoint."""
