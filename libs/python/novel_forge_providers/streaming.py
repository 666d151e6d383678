"""Server-sent event decoding and throttled delivery of streamed completions."""

from __future__ import annotations

import asyncio
import json
import time
from enum import Enum
from typing import Any, AsyncIterator, Callable

from .base import ChunkCallback

THROTTLE_INTERVAL_SECONDS = 0.1
DATA_PREFIX = "data:"
DONE_MARKER = "[DONE]"


class DeliveryState(str, Enum):
    IDLE = "idle"
    SCHEDULED = "scheduled"
    FIRED = "fired"


class ThrottledDelivery:
    """Forward stream increments to a consumer at most once per interval.

    Increments arriving inside the interval are buffered and flushed by a timer
    scheduled for the remainder of the interval. ``finish`` cancels any pending
    timer and emits the final ``("", full_text)`` call; ``close`` cancels without
    emitting and must be called when the request fails or is cancelled.
    """

    def __init__(
        self,
        on_chunk: ChunkCallback,
        *,
        interval: float = THROTTLE_INTERVAL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._on_chunk = on_chunk
        self._interval = interval
        self._clock = clock
        self._last_delivery: float | None = None
        self._buffered = ""
        self._timer: asyncio.TimerHandle | None = None
        self._closed = False
        self.full_text = ""
        self.state = DeliveryState.IDLE

    @property
    def has_pending(self) -> bool:
        return self._timer is not None

    def push(self, increment: str) -> None:
        if self._closed or not increment:
            return
        self.full_text += increment
        self._buffered += increment

        now = self._clock()
        if self._last_delivery is None or now - self._last_delivery >= self._interval:
            self._cancel_timer()
            self._deliver(now)
            return

        if self._timer is None:
            remaining = self._interval - (now - self._last_delivery)
            self._timer = asyncio.get_running_loop().call_later(remaining, self._fire)
            self.state = DeliveryState.SCHEDULED

    def finish(self) -> str:
        self.close()
        self._on_chunk("", self.full_text)
        return self.full_text

    def close(self) -> None:
        self._closed = True
        self._cancel_timer()

    def _fire(self) -> None:
        self._timer = None
        if self._closed or not self._buffered:
            return
        self._deliver(self._clock())

    def _deliver(self, now: float) -> None:
        increment, self._buffered = self._buffered, ""
        self._last_delivery = now
        self.state = DeliveryState.FIRED
        self._on_chunk(increment, self.full_text)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
            self.state = DeliveryState.IDLE


def parse_event_line(line: str) -> dict[str, Any] | str | None:
    """Decode one event-stream line.

    Returns the JSON payload for ``data:`` lines, :data:`DONE_MARKER` for the
    end-of-stream line and ``None`` for anything else, including malformed JSON.
    """

    stripped = line.strip()
    if not stripped.startswith(DATA_PREFIX):
        return None
    payload = stripped[len(DATA_PREFIX):].strip()
    if payload == DONE_MARKER:
        return DONE_MARKER
    if not payload:
        return None
    try:
        parsed = json.loads(payload)
    except json.JSONDecodeError:
        return None
    return parsed if isinstance(parsed, dict) else None


def extract_delta_content(event: dict[str, Any]) -> str:
    choices = event.get("choices")
    if not isinstance(choices, list) or not choices:
        return ""
    first = choices[0]
    if not isinstance(first, dict):
        return ""
    delta = first.get("delta") or {}
    if not isinstance(delta, dict):
        return ""
    content = delta.get("content")
    return content if isinstance(content, str) else ""


async def iter_stream_content(lines: AsyncIterator[str]) -> AsyncIterator[str]:
    """Yield non-empty content increments until the end-of-stream marker."""

    async for line in lines:
        event = parse_event_line(line)
        if event is None:
            continue
        if event == DONE_MARKER:
            break
        content = extract_delta_content(event)
        if content:
            yield content
