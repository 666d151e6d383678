"""Chapter drafting from the blueprint and the rolling narrative state."""

from __future__ import annotations

import logging
from typing import Optional

from novel_forge_observability import log_context
from novel_forge_providers import ClientFactory, CompletionClient, EndpointConfig, clean_response
from novel_forge_schemas import ChapterBlueprintEntry, GenerationStage, Project

from ..completions import complete_for_stage
from ..context import (
    NO_CHARACTER_STATE_MARKER,
    NO_SUMMARY_MARKER,
    build_novel_setting,
    or_marker,
    previous_chapter_excerpt,
    resolve_chapter_context,
)
from ..progress import ProgressCallback, TextStreamCallback, report, text_stream
from .prompts import ENRICH_CHAPTER_PROMPT, FIRST_CHAPTER_PROMPT, NEXT_CHAPTER_PROMPT

logger = logging.getLogger(__name__)

DRAFT_STEPS = 3


async def generate_chapter_draft(
    project: Project,
    chapter_number: int,
    config: EndpointConfig,
    *,
    client: CompletionClient | None = None,
    on_progress: Optional[ProgressCallback] = None,
    on_stream: Optional[TextStreamCallback] = None,
) -> str:
    """Draft one chapter and return the sanitized text.

    The draft is not written into ``project.chapters``; the caller commits it
    after any quality pass. Raises :class:`ChapterNotFound` when the blueprint
    has no entry for ``chapter_number``.
    """

    context = resolve_chapter_context(project, chapter_number)
    stage_config = config.for_stage(GenerationStage.DRAFT)
    client = client or ClientFactory.create(stage_config)

    with log_context(stage=GenerationStage.DRAFT.value, project_id=project.id, chapter=chapter_number):
        report(on_progress, f"Generating draft for chapter {chapter_number}...", 0, DRAFT_STEPS)
        params = {
            "chapter_number": chapter_number,
            "word_number": project.word_number,
            "user_guidance": or_marker(project.user_guidance),
            **_entry_params(context.entry),
        }
        if chapter_number == 1:
            prompt = FIRST_CHAPTER_PROMPT.format(novel_setting=build_novel_setting(project), **params)
        else:
            prompt = NEXT_CHAPTER_PROMPT.format(
                global_summary=or_marker(project.global_summary, NO_SUMMARY_MARKER),
                previous_chapter_excerpt=previous_chapter_excerpt(project, chapter_number),
                character_state=or_marker(project.character_state, NO_CHARACTER_STATE_MARKER),
                next_chapter_number=context.next_entry.number,
                **_entry_params(context.next_entry, prefix="next_"),
                **params,
            )

        text = clean_response(
            await complete_for_stage(client, stage_config, GenerationStage.DRAFT, prompt, text_stream(on_stream))
        )
        if not text:
            logger.warning("Chapter draft came back empty")
        report(on_progress, f"Chapter {chapter_number} draft complete", 1, DRAFT_STEPS)
    return text


async def enrich_chapter(
    chapter_text: str,
    word_number: int,
    config: EndpointConfig,
    *,
    client: CompletionClient | None = None,
    on_progress: Optional[ProgressCallback] = None,
    on_stream: Optional[TextStreamCallback] = None,
) -> str:
    """Expand a short chapter towards ``word_number`` words.

    An empty response returns ``chapter_text`` unchanged.
    """

    stage_config = config.for_stage(GenerationStage.ENRICH)
    client = client or ClientFactory.create(stage_config)

    with log_context(stage=GenerationStage.ENRICH.value):
        report(on_progress, "Enriching chapter...", 0, 1)
        prompt = ENRICH_CHAPTER_PROMPT.format(chapter_text=chapter_text, word_number=word_number)
        enriched = clean_response(
            await complete_for_stage(client, stage_config, GenerationStage.ENRICH, prompt, text_stream(on_stream))
        )
        report(on_progress, "Enrichment complete", 1, 1)
    return enriched or chapter_text


def _entry_params(entry: ChapterBlueprintEntry, prefix: str = "") -> dict[str, str]:
    # Prompt keys keep the outline vocabulary: role, purpose, foreshadowing...
    return {
        f"{prefix}chapter_title": entry.title,
        f"{prefix}chapter_role": entry.position,
        f"{prefix}chapter_purpose": entry.purpose,
        f"{prefix}suspense_level": entry.suspense,
        f"{prefix}foreshadowing": entry.hook,
        f"{prefix}plot_twist_level": entry.twist_level,
        f"{prefix}chapter_summary": entry.summary,
    }
