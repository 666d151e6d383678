"""Chapter finalization: fold a chapter into the rolling summary and character state."""

from __future__ import annotations

import logging
from typing import Optional

from novel_forge_observability import log_context
from novel_forge_providers import ClientFactory, CompletionClient, EndpointConfig, clean_response
from novel_forge_schemas import GenerationStage, Project

from ..completions import complete_for_stage
from ..context import NO_VALUE_MARKER, or_marker
from ..pacing import FINALIZE_PAUSE_SECONDS, pause
from ..progress import FieldStreamCallback, ProgressCallback, field_stream, report
from .prompts import SUMMARY_PROMPT, UPDATE_CHARACTER_STATE_PROMPT

logger = logging.getLogger(__name__)

FINALIZE_STEPS = 3


async def finalize_chapter(
    project: Project,
    chapter_number: int,
    chapter_text: str,
    config: EndpointConfig,
    *,
    client: CompletionClient | None = None,
    on_progress: Optional[ProgressCallback] = None,
    on_stream: Optional[FieldStreamCallback] = None,
) -> Project:
    """Commit ``chapter_text`` and refresh the rolling narrative state.

    Empty model output keeps the previous summary or state. Provider errors
    propagate and nothing is committed, since the caller's snapshot is never
    modified in place.
    """

    stage_config = config.for_stage(GenerationStage.FINALIZE)
    client = client or ClientFactory.create(stage_config)

    with log_context(stage=GenerationStage.FINALIZE.value, project_id=project.id, chapter=chapter_number):
        report(on_progress, "Updating story summary...", 1, FINALIZE_STEPS)
        summary_prompt = SUMMARY_PROMPT.format(
            chapter_text=chapter_text,
            global_summary=or_marker(project.global_summary, NO_VALUE_MARKER),
        )
        summary = clean_response(
            await complete_for_stage(
                client, stage_config, GenerationStage.FINALIZE, summary_prompt, field_stream(on_stream, "global_summary")
            )
        )
        if not summary:
            logger.warning("Summary update came back empty, keeping previous summary")

        await pause(FINALIZE_PAUSE_SECONDS)

        report(on_progress, "Updating character state...", 2, FINALIZE_STEPS)
        state_prompt = UPDATE_CHARACTER_STATE_PROMPT.format(
            chapter_text=chapter_text,
            old_state=project.character_state,
        )
        character_state = clean_response(
            await complete_for_stage(
                client, stage_config, GenerationStage.FINALIZE, state_prompt, field_stream(on_stream, "character_state")
            )
        )
        if not character_state:
            logger.warning("Character state update came back empty, keeping previous state")

        chapters = {**project.chapters, chapter_number: chapter_text}
        updated = project.touched(
            chapters=chapters,
            global_summary=summary or project.global_summary,
            character_state=character_state or project.character_state,
        )
        report(on_progress, "Chapter finalized", FINALIZE_STEPS, FINALIZE_STEPS)
    return updated
