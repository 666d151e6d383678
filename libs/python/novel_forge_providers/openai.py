"""Client for OpenAI-compatible chat completion endpoints."""

from __future__ import annotations

import asyncio
import logging
from time import perf_counter
from typing import Any, Optional

import httpx

from .base import ChunkCallback, CompletionClient, CompletionRequest
from .config import EndpointConfig
from .exceptions import NetworkError, ProviderResponseError, RequestFailed
from .streaming import ThrottledDelivery, iter_stream_content

logger = logging.getLogger(__name__)

CHAT_COMPLETIONS_PATH = "/chat/completions"
MODELS_PATH = "/models"

MAX_ATTEMPTS = 3
RETRYABLE_STATUSES = frozenset({429, 502, 503, 504})
_ERROR_DETAIL_LIMIT = 300


def backoff_delay(attempt: int) -> float:
    """Exponential backoff in seconds for the given 1-based attempt (2, 4, 8...)."""

    return float(2**attempt)


async def _sleep(seconds: float) -> None:
    await asyncio.sleep(seconds)


class OpenAICompatibleClient(CompletionClient):
    name = "openai"

    def __init__(self, *, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self._transport = transport

    async def complete(
        self,
        config: EndpointConfig,
        prompt: str,
        on_chunk: Optional[ChunkCallback] = None,
    ) -> str:
        if on_chunk is None:
            return await self._complete_once(config, prompt)
        return await self._stream_with_retry(config, prompt, on_chunk)

    async def list_models(self, config: EndpointConfig) -> list[str]:
        try:
            async with self._http_client(config) as client:
                response = await client.get(MODELS_PATH)
        except httpx.TransportError as exc:
            raise NetworkError(_describe(exc)) from exc

        if not response.is_success:
            raise RequestFailed(response.status_code, _error_detail(response.text))

        try:
            entries = response.json().get("data") or []
        except (ValueError, AttributeError) as err:
            raise ProviderResponseError("Model listing was not a JSON object") from err
        return [str(item["id"]) for item in entries if isinstance(item, dict) and item.get("id")]

    async def _complete_once(self, config: EndpointConfig, prompt: str) -> str:
        request = CompletionRequest(prompt=prompt, stream=False)
        start = perf_counter()
        try:
            async with self._http_client(config) as client:
                response = await client.post(CHAT_COMPLETIONS_PATH, json=request.to_payload(config))
        except httpx.TransportError as exc:
            raise NetworkError(_describe(exc)) from exc

        if not response.is_success:
            raise RequestFailed(response.status_code, _error_detail(response.text))

        try:
            body: Any = response.json()
            content = body["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as err:
            raise ProviderResponseError("Completion response missing message content") from err

        logger.debug(
            "Completion received",
            extra={"model": config.model, "latency_ms": (perf_counter() - start) * 1000},
        )
        return content or ""

    async def _stream_with_retry(
        self,
        config: EndpointConfig,
        prompt: str,
        on_chunk: ChunkCallback,
    ) -> str:
        for attempt in range(1, MAX_ATTEMPTS + 1):
            try:
                return await self._stream_once(config, prompt, on_chunk)
            except RequestFailed as exc:
                if exc.status not in RETRYABLE_STATUSES or attempt >= MAX_ATTEMPTS:
                    raise
                reason = f"HTTP {exc.status}"
            except httpx.TransportError as exc:
                if attempt >= MAX_ATTEMPTS:
                    raise NetworkError(_describe(exc)) from exc
                reason = _describe(exc)

            delay = backoff_delay(attempt)
            logger.warning(
                "Completion attempt failed, retrying",
                extra={
                    "attempt": attempt,
                    "max_attempts": MAX_ATTEMPTS,
                    "reason": reason,
                    "delay_seconds": delay,
                    "model": config.model,
                },
            )
            await _sleep(delay)

        raise NetworkError("Completion retries exhausted")  # pragma: no cover - loop always returns or raises

    async def _stream_once(
        self,
        config: EndpointConfig,
        prompt: str,
        on_chunk: ChunkCallback,
    ) -> str:
        request = CompletionRequest(prompt=prompt, stream=True)
        delivery = ThrottledDelivery(on_chunk)
        start = perf_counter()
        try:
            async with self._http_client(config) as client:
                async with client.stream(
                    "POST", CHAT_COMPLETIONS_PATH, json=request.to_payload(config)
                ) as response:
                    if not response.is_success:
                        body = await response.aread()
                        raise RequestFailed(
                            response.status_code,
                            _error_detail(body.decode("utf-8", errors="replace")),
                        )
                    async for content in iter_stream_content(response.aiter_lines()):
                        delivery.push(content)
        finally:
            delivery.close()

        logger.debug(
            "Streamed completion finished",
            extra={
                "model": config.model,
                "latency_ms": (perf_counter() - start) * 1000,
                "characters": len(delivery.full_text),
            },
        )
        return delivery.finish()

    def _http_client(self, config: EndpointConfig) -> httpx.AsyncClient:
        headers: dict[str, str] = {}
        if config.api_key:
            headers["Authorization"] = f"Bearer {config.api_key}"
        return httpx.AsyncClient(
            base_url=config.base_url,
            headers=headers,
            timeout=config.timeout,
            transport=self._transport,
        )


def _describe(exc: Exception) -> str:
    message = str(exc)
    return f"{exc.__class__.__name__}: {message}" if message else exc.__class__.__name__


def _error_detail(text: str) -> str | None:
    text = text.strip()
    if not text:
        return None
    return text[:_ERROR_DETAIL_LIMIT]
