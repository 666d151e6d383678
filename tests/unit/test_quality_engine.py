"""Tests for the quality check and the best-effort repair pass."""

import json

import pytest

from novel_forge_providers import MockCompletionClient, NetworkError, RequestFailed
from novel_forge_schemas import QualityReport

from services.orchestrator.app.context import resolve_chapter_context
from services.orchestrator.app.quality import check_quality, fix_chapter, repair_instructions
from services.orchestrator.app.quality.engine import REQUEST_FAILED_ISSUE, UNPARSEABLE_ISSUE

pytestmark = pytest.mark.anyio("asyncio")

TEN_WORDS = "one two three four five six seven eight nine ten"


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def context(make_project, make_blueprint):
    project = make_project(chapter_blueprint=make_blueprint(1, 3))
    return resolve_chapter_context(project, 1)


def _report_json(**overrides) -> str:
    payload = {
        "wordCount": 3,
        "wordCountPass": False,
        "contentMatch": True,
        "nextChapterSpill": False,
        "hasCliffhanger": True,
        "overallPass": True,
        "issues": [],
    }
    payload.update(overrides)
    return json.dumps(payload)


async def test_passing_report_uses_local_word_count(context, mock_config) -> None:
    client = MockCompletionClient([f"Here is the report:\n{_report_json()}\nThanks"])

    report = await check_quality(TEN_WORDS, context, 10, mock_config, client=client)

    assert report.word_count == 10
    assert report.word_count_pass
    assert report.overall_pass
    assert report.issues == []
    prompt = client.prompts[0]
    assert "Actual length: 10 words" in prompt
    assert "9-11 words" in prompt
    assert "Chapter 2: Title 2" in prompt
    assert TEN_WORDS in prompt
    assert client.calls[0].streamed is False


async def test_leakage_fails_overall_even_when_model_passes_it(context, mock_config) -> None:
    client = MockCompletionClient([_report_json(nextChapterSpill=True, issues=["Reaches chapter 2 events"])])

    report = await check_quality(TEN_WORDS, context, 10, mock_config, client=client)

    assert report.no_leakage is False
    assert report.overall_pass is False
    assert report.issues == ["Reaches chapter 2 events"]


async def test_word_count_outside_band_fails(context, mock_config) -> None:
    client = MockCompletionClient([_report_json(wordCountPass=True)])

    report = await check_quality("too short", context, 10, mock_config, client=client)

    assert report.word_count == 2
    assert report.word_count_pass is False
    assert report.overall_pass is False


async def test_first_parseable_object_is_used(context, mock_config) -> None:
    response = "Scratch {not json} then " + _report_json(contentMatch=False, overallPass=False)
    client = MockCompletionClient([response])

    report = await check_quality(TEN_WORDS, context, 10, mock_config, client=client)

    assert report.content_match is False
    assert report.overall_pass is False


@pytest.mark.parametrize("response", ["No JSON at all", "{broken", '{"wordCount": "many"}'])
async def test_unparseable_response_defaults_to_pass(context, mock_config, response: str) -> None:
    client = MockCompletionClient([response])

    report = await check_quality(TEN_WORDS, context, 10, mock_config, client=client)

    assert report.overall_pass
    assert report.all_dimensions_pass
    assert report.word_count == 10
    assert report.issues == [UNPARSEABLE_ISSUE]


@pytest.mark.parametrize(
    "payload",
    [{"overallPass": True, "issues": 5}, {"overallPass": True, "nextChapterSpill": "perhaps"}],
)
async def test_malformed_report_fields_default_to_pass(context, mock_config, payload) -> None:
    client = MockCompletionClient([json.dumps(payload)])

    report = await check_quality(TEN_WORDS, context, 10, mock_config, client=client)

    assert report.overall_pass
    assert report.issues == [UNPARSEABLE_ISSUE]


async def test_string_flags_follow_boolean_parsing(context, mock_config) -> None:
    response = _report_json(
        contentMatch="true",
        nextChapterSpill="false",
        hasCliffhanger="true",
        overallPass="true",
    )
    client = MockCompletionClient([response])

    report = await check_quality(TEN_WORDS, context, 10, mock_config, client=client)

    assert report.no_leakage
    assert report.overall_pass


async def test_string_spill_flag_marks_leakage(context, mock_config) -> None:
    client = MockCompletionClient([_report_json(nextChapterSpill="true")])

    report = await check_quality(TEN_WORDS, context, 10, mock_config, client=client)

    assert not report.no_leakage
    assert not report.overall_pass


@pytest.mark.parametrize("error", [NetworkError("down"), RequestFailed(503)])
async def test_request_failure_defaults_to_pass(context, mock_config, error) -> None:
    client = MockCompletionClient([error])

    report = await check_quality(TEN_WORDS, context, 10, mock_config, client=client)

    assert report.overall_pass
    assert report.issues == [REQUEST_FAILED_ISSUE]


async def test_fix_returns_input_for_passing_report(context, mock_config) -> None:
    client = MockCompletionClient()

    text = await fix_chapter(TEN_WORDS, QualityReport(word_count=10), context, 10, mock_config, client=client)

    assert text == TEN_WORDS
    assert client.calls == []


async def test_fix_prompt_lists_only_failing_dimensions(context, mock_config) -> None:
    report = QualityReport(word_count=10, no_leakage=False, overall_pass=False, issues=["Spills over"])
    client = MockCompletionClient(["Repaired chapter."])
    progress: list[tuple[int, int]] = []

    text = await fix_chapter(
        TEN_WORDS,
        report,
        context,
        10,
        mock_config,
        client=client,
        on_progress=lambda message, done, total: progress.append((done, total)),
    )

    assert text == "Repaired chapter."
    prompt = client.prompts[0]
    assert "[Leakage]" in prompt
    assert "[Length]" not in prompt
    assert "[Cliffhanger]" not in prompt
    assert "[Outline match]" not in prompt
    assert "1. Spills over" in prompt
    assert "Title 2" in prompt
    assert progress == [(0, 1), (1, 1)]


async def test_fix_keeps_original_on_failure(context, mock_config) -> None:
    report = QualityReport(word_count=10, has_cliffhanger=False, overall_pass=False)
    messages: list[str] = []
    client = MockCompletionClient([NetworkError("down")])

    text = await fix_chapter(
        TEN_WORDS,
        report,
        context,
        10,
        mock_config,
        client=client,
        on_progress=lambda message, done, total: messages.append(message),
    )

    assert text == TEN_WORDS
    assert messages[-1] == "Repair failed"


async def test_fix_keeps_original_on_empty_response(context, mock_config) -> None:
    report = QualityReport(word_count=10, content_match=False, overall_pass=False)
    client = MockCompletionClient([""])

    assert await fix_chapter(TEN_WORDS, report, context, 10, mock_config, client=client) == TEN_WORDS


def test_repair_instructions_follow_fixed_order(context) -> None:
    report = QualityReport(
        word_count=40,
        word_count_pass=False,
        content_match=False,
        no_leakage=False,
        has_cliffhanger=False,
        overall_pass=False,
    )

    instructions = repair_instructions(report, context, 100)

    positions = [instructions.index(tag) for tag in ("[Length]", "[Leakage]", "[Cliffhanger]", "[Outline match]")]
    assert positions == sorted(positions)
    assert "current length 40 words, target 100 words" in instructions
    assert 'chapter 2 or "Title 2"' in instructions
