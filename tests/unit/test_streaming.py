"""Tests for event-stream decoding and throttled chunk delivery."""

import anyio
import pytest

from novel_forge_providers.streaming import (
    DONE_MARKER,
    DeliveryState,
    ThrottledDelivery,
    extract_delta_content,
    iter_stream_content,
    parse_event_line,
)


@pytest.fixture
def anyio_backend():
    return "asyncio"


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def _recorder():
    calls: list[tuple[str, str]] = []
    return calls, lambda increment, full_text: calls.append((increment, full_text))


@pytest.mark.anyio
async def test_first_increment_is_delivered_immediately() -> None:
    calls, sink = _recorder()
    clock = FakeClock()
    delivery = ThrottledDelivery(sink, interval=0.1, clock=clock)

    delivery.push("Hel")

    assert calls == [("Hel", "Hel")]
    assert delivery.state is DeliveryState.FIRED
    delivery.close()


@pytest.mark.anyio
async def test_increments_inside_interval_are_buffered_until_finish() -> None:
    calls, sink = _recorder()
    clock = FakeClock()
    delivery = ThrottledDelivery(sink, interval=0.1, clock=clock)

    delivery.push("Hel")
    clock.now = 0.05
    delivery.push("lo")
    clock.now = 0.07
    delivery.push(" world")

    assert calls == [("Hel", "Hel")]
    assert delivery.state is DeliveryState.SCHEDULED
    assert delivery.has_pending

    assert delivery.finish() == "Hello world"
    assert calls[-1] == ("", "Hello world")
    assert not delivery.has_pending


@pytest.mark.anyio
async def test_timer_flushes_buffered_increments() -> None:
    calls, sink = _recorder()
    clock = FakeClock()
    delivery = ThrottledDelivery(sink, interval=0.02, clock=clock)

    delivery.push("a")
    clock.now = 0.01
    delivery.push("b")
    delivery.push("c")
    await anyio.sleep(0.1)

    assert calls == [("a", "a"), ("bc", "abc")]
    assert delivery.state is DeliveryState.FIRED
    assert not delivery.has_pending
    delivery.close()


@pytest.mark.anyio
async def test_increment_after_interval_is_delivered_immediately() -> None:
    calls, sink = _recorder()
    clock = FakeClock()
    delivery = ThrottledDelivery(sink, interval=0.1, clock=clock)

    delivery.push("a")
    clock.now = 0.5
    delivery.push("b")

    assert calls == [("a", "a"), ("b", "ab")]
    delivery.close()


@pytest.mark.anyio
async def test_close_cancels_pending_timer() -> None:
    calls, sink = _recorder()
    clock = FakeClock()
    delivery = ThrottledDelivery(sink, interval=0.02, clock=clock)

    delivery.push("a")
    clock.now = 0.01
    delivery.push("b")
    delivery.close()
    await anyio.sleep(0.1)

    assert calls == [("a", "a")]
    assert delivery.state is DeliveryState.IDLE
    delivery.push("ignored")
    assert delivery.full_text == "ab"


def test_parse_event_line_variants() -> None:
    assert parse_event_line('data: {"choices": []}') == {"choices": []}
    assert parse_event_line("data: [DONE]") == DONE_MARKER
    assert parse_event_line(": keep-alive") is None
    assert parse_event_line("event: message") is None
    assert parse_event_line("data: {not json") is None
    assert parse_event_line("data:") is None
    assert parse_event_line("data: [1, 2]") is None


def test_extract_delta_content_tolerates_missing_parts() -> None:
    assert extract_delta_content({"choices": [{"delta": {"content": "x"}}]}) == "x"
    assert extract_delta_content({"choices": [{"delta": {"role": "assistant"}}]}) == ""
    assert extract_delta_content({"choices": []}) == ""
    assert extract_delta_content({}) == ""


@pytest.mark.anyio
async def test_iter_stream_content_stops_at_done_and_skips_bad_lines() -> None:
    async def lines():
        for line in (
            'data: {"choices": [{"delta": {"content": "A"}}]}',
            "",
            "data: {oops",
            'data: {"choices": [{"delta": {"content": "B"}}]}',
            "data: [DONE]",
            'data: {"choices": [{"delta": {"content": "C"}}]}',
        ):
            yield line

    received = [content async for content in iter_stream_content(lines())]

    assert received == ["A", "B"]
