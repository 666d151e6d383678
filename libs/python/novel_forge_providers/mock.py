"""Deterministic mock client for tests and offline development."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Callable, Iterable, Optional, Union

from .base import ChunkCallback, CompletionClient
from .config import EndpointConfig

DEFAULT_TEXT = "Mock completion generated for testing."

ScriptedResponse = Union[str, BaseException, Callable[[str], str]]


@dataclass
class RecordedCall:
    prompt: str
    model: str
    streamed: bool


class MockCompletionClient(CompletionClient):
    """Replay scripted responses in order and record every prompt.

    Each scripted item is a string, an exception instance to raise, or a
    callable receiving the prompt. Once the script is exhausted the client
    echoes :data:`DEFAULT_TEXT` with the start of the prompt.
    """

    name = "mock"

    def __init__(
        self,
        responses: Optional[Iterable[ScriptedResponse]] = None,
        *,
        models: Optional[list[str]] = None,
    ) -> None:
        self.calls: list[RecordedCall] = []
        self.models = list(models) if models else ["mock"]
        self._script: deque[ScriptedResponse] = deque(responses or [])

    @property
    def prompts(self) -> list[str]:
        return [call.prompt for call in self.calls]

    async def complete(
        self,
        config: EndpointConfig,
        prompt: str,
        on_chunk: Optional[ChunkCallback] = None,
    ) -> str:
        self.calls.append(RecordedCall(prompt=prompt, model=config.model, streamed=on_chunk is not None))
        text = self._next_text(prompt)
        if on_chunk is not None:
            if text:
                on_chunk(text, text)
            on_chunk("", text)
        return text

    async def list_models(self, config: EndpointConfig) -> list[str]:
        return list(self.models)

    def _next_text(self, prompt: str) -> str:
        if not self._script:
            return f"{DEFAULT_TEXT}\nPrompt: {prompt[:80]}"
        item = self._script.popleft()
        if isinstance(item, BaseException):
            raise item
        if callable(item):
            return item(prompt)
        return item
