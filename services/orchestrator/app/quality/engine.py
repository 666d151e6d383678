"""Automated quality check and best-effort repair of drafted chapters."""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

from pydantic import ValidationError

from novel_forge_observability import log_context, observe_quality_outcome
from novel_forge_providers import (
    ClientFactory,
    CompletionClient,
    EndpointConfig,
    ProviderError,
    ProviderResponseError,
    clean_response,
)
from novel_forge_schemas import GenerationStage, QualityReport
from novel_forge_schemas.utils.validators import count_words, is_within_word_band, word_count_bounds

from ..completions import complete_for_stage
from ..context import NO_VALUE_MARKER, ChapterContext, or_marker
from ..progress import ProgressCallback, TextStreamCallback, report, text_stream
from .prompts import (
    CLIFFHANGER_INSTRUCTION,
    CONTENT_MATCH_INSTRUCTION,
    LEAKAGE_INSTRUCTION,
    QUALITY_CHECK_PROMPT,
    REPAIR_PROMPT,
    WORD_COUNT_INSTRUCTION,
)

logger = logging.getLogger(__name__)
SERVICE_NAME = "orchestrator"

REQUEST_FAILED_ISSUE = "Quality check request failed, check skipped"
UNPARSEABLE_ISSUE = "Quality check response could not be parsed, check skipped"


async def check_quality(
    chapter_text: str,
    context: ChapterContext,
    target_words: int,
    config: EndpointConfig,
    *,
    client: CompletionClient | None = None,
) -> QualityReport:
    """Ask the model to grade a chapter against its outline.

    Never raises for provider or parsing failures: those produce a passing
    report with a single issue explaining that the check was skipped. Word
    count and its verdict are always measured locally.
    """

    stage_config = config.for_stage(GenerationStage.QUALITY_CHECK)
    client = client or ClientFactory.create(stage_config)
    actual = count_words(chapter_text)
    within_band = is_within_word_band(actual, target_words)
    low, high = word_count_bounds(target_words)

    with log_context(stage=GenerationStage.QUALITY_CHECK.value, chapter=context.number):
        prompt = QUALITY_CHECK_PROMPT.format(
            chapter_number=context.number,
            chapter_title=context.entry.title,
            chapter_summary=or_marker(context.entry.summary),
            word_number=target_words,
            actual_word_count=actual,
            next_chapter_number=context.next_entry.number,
            next_chapter_title=or_marker(context.next_entry.title),
            next_chapter_summary=or_marker(context.next_entry.summary),
            chapter_text=chapter_text,
            word_count_pass_json=json.dumps(within_band),
            low_words=low,
            high_words=high,
            word_count_verdict="passes" if within_band else "fails",
        )
        try:
            response = await complete_for_stage(client, stage_config, GenerationStage.QUALITY_CHECK, prompt)
        except ProviderError as exc:
            logger.warning("Quality check request failed, skipping", extra={"error": str(exc)})
            observe_quality_outcome("skipped", service_name=SERVICE_NAME)
            return QualityReport.default_pass(actual, REQUEST_FAILED_ISSUE)

        try:
            result = _parse_report(response)
        except (ProviderResponseError, ValidationError, TypeError, ValueError) as exc:
            logger.warning("Quality report unparseable, skipping", extra={"error": str(exc)})
            observe_quality_outcome("skipped", service_name=SERVICE_NAME)
            return QualityReport.default_pass(actual, UNPARSEABLE_ISSUE)

        result = result.model_copy(update={"word_count": actual, "word_count_pass": within_band})
        result = result.model_copy(update={"overall_pass": result.overall_pass and result.all_dimensions_pass})
        observe_quality_outcome("passed" if result.overall_pass else "failed", service_name=SERVICE_NAME)
        logger.info(
            "Quality check finished",
            extra={"overall_pass": result.overall_pass, "issue_count": len(result.issues)},
        )
    return result


async def fix_chapter(
    chapter_text: str,
    quality: QualityReport,
    context: ChapterContext,
    target_words: int,
    config: EndpointConfig,
    *,
    client: CompletionClient | None = None,
    on_progress: Optional[ProgressCallback] = None,
    on_stream: Optional[TextStreamCallback] = None,
) -> str:
    """Rewrite the failing dimensions of a chapter.

    A passing report returns ``chapter_text`` without calling the model. Any
    provider failure or empty response also returns ``chapter_text``.
    """

    if quality.overall_pass:
        return chapter_text

    stage_config = config.for_stage(GenerationStage.REPAIR)
    client = client or ClientFactory.create(stage_config)
    low, high = word_count_bounds(target_words)

    with log_context(stage=GenerationStage.REPAIR.value, chapter=context.number):
        report(on_progress, "Repairing chapter from quality report...", 0, 1)
        prompt = REPAIR_PROMPT.format(
            chapter_number=context.number,
            chapter_title=context.entry.title,
            chapter_summary=or_marker(context.entry.summary),
            word_number=target_words,
            next_chapter_number=context.next_entry.number,
            next_chapter_title=or_marker(context.next_entry.title),
            issues=_numbered(quality.issues),
            chapter_text=chapter_text,
            instructions=repair_instructions(quality, context, target_words),
            low_words=low,
            high_words=high,
        )
        try:
            fixed = clean_response(
                await complete_for_stage(client, stage_config, GenerationStage.REPAIR, prompt, text_stream(on_stream))
            )
        except ProviderError as exc:
            logger.warning("Chapter repair failed, keeping original text", extra={"error": str(exc)})
            report(on_progress, "Repair failed", 1, 1)
            return chapter_text

        report(on_progress, "Repair complete", 1, 1)
    return fixed or chapter_text


def repair_instructions(quality: QualityReport, context: ChapterContext, target_words: int) -> str:
    """Targeted instructions for each failing dimension, in a fixed order."""

    sections: list[str] = []
    if not quality.word_count_pass:
        sections.append(WORD_COUNT_INSTRUCTION.format(word_count=quality.word_count, word_number=target_words))
    if not quality.no_leakage:
        sections.append(
            LEAKAGE_INSTRUCTION.format(
                next_chapter_number=context.next_entry.number,
                next_chapter_title=or_marker(context.next_entry.title),
            )
        )
    if not quality.has_cliffhanger:
        sections.append(CLIFFHANGER_INSTRUCTION)
    if not quality.content_match:
        sections.append(CONTENT_MATCH_INSTRUCTION)
    return "\n\n".join(sections) or NO_VALUE_MARKER


def _parse_report(payload: str) -> QualityReport:
    data = _first_json_object(payload or "")
    if data is None:
        raise ProviderResponseError("Quality response contained no JSON object")
    return QualityReport.model_validate(data)


def _first_json_object(text: str) -> dict[str, Any] | None:
    decoder = json.JSONDecoder()
    index = text.find("{")
    while index != -1:
        try:
            value, _ = decoder.raw_decode(text, index)
        except json.JSONDecodeError:
            value = None
        if isinstance(value, dict):
            return value
        index = text.find("{", index + 1)
    return None


def _numbered(issues: list[str]) -> str:
    if not issues:
        return NO_VALUE_MARKER
    return "\n".join(f"{position}. {issue}" for position, issue in enumerate(issues, start=1))
