"""Tests for the mock client, the factory and the response sanitizer."""

import asyncio

import pytest

from novel_forge_providers import (
    ClientFactory,
    EndpointConfig,
    MockCompletionClient,
    NetworkError,
    OpenAICompatibleClient,
    ProviderConfigError,
    clean_response,
)
from novel_forge_providers.mock import DEFAULT_TEXT


def test_mock_replays_script_in_order() -> None:
    client = MockCompletionClient(["first", lambda prompt: prompt.upper(), NetworkError("down")])
    config = EndpointConfig(provider="mock", model="mock")

    assert asyncio.run(client.complete(config, "one")) == "first"
    assert asyncio.run(client.complete(config, "two")) == "TWO"
    with pytest.raises(NetworkError):
        asyncio.run(client.complete(config, "three"))
    assert client.prompts == ["one", "two", "three"]


def test_mock_default_text_and_stream_callback() -> None:
    client = MockCompletionClient()
    config = EndpointConfig(provider="mock", model="mock")
    calls: list[tuple[str, str]] = []

    text = asyncio.run(client.complete(config, "Describe the hero", lambda inc, full: calls.append((inc, full))))

    assert text.startswith(DEFAULT_TEXT)
    assert "Describe the hero" in text
    assert calls == [(text, text), ("", text)]
    assert client.calls[0].streamed is True


def test_factory_creates_clients_by_provider() -> None:
    assert isinstance(ClientFactory.create(EndpointConfig(provider="mock", model="mock")), MockCompletionClient)
    assert isinstance(
        ClientFactory.create(EndpointConfig(provider="openai", model="gpt", api_key="k")),
        OpenAICompatibleClient,
    )


def test_factory_rejects_unknown_provider() -> None:
    with pytest.raises(ProviderConfigError):
        ClientFactory.create(EndpointConfig(provider="gemini", model="g"))


def test_clean_response_strips_fences_and_backticks() -> None:
    raw = "  Intro line\n```json\n{\"draft\": true}\n```\nThe `sword` gleamed.  "

    assert clean_response(raw) == "Intro line\n\nThe sword gleamed."


def test_clean_response_is_idempotent_and_handles_empty() -> None:
    raw = "```\ncode\n```Story ``begins`` here\n"

    once = clean_response(raw)

    assert once == "Story begins here"
    assert clean_response(once) == once
    assert clean_response("") == ""
    assert clean_response(None) == ""
