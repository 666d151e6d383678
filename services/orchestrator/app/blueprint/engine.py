"""Chapter blueprint generation, chunked to fit the output token budget."""

from __future__ import annotations

import logging
import math
from typing import Callable, Optional

from novel_forge_observability import log_context
from novel_forge_providers import ClientFactory, CompletionClient, EndpointConfig, clean_response
from novel_forge_providers.config import DEFAULT_MAX_TOKENS
from novel_forge_schemas import GenerationStage, Project

from ..completions import complete_for_stage
from ..context import NO_VALUE_MARKER, build_novel_architecture, or_marker
from ..pacing import BLUEPRINT_CHUNK_PAUSE_SECONDS, pause
from ..progress import ProgressCallback, TextStreamCallback, report, text_stream
from .parser import max_chapter_number, truncate_to_recent
from .prompts import BLUEPRINT_CHUNK_PROMPT, BLUEPRINT_PROMPT, ENTRY_FORMAT

logger = logging.getLogger(__name__)

# Empirical output cost of one outlined chapter.
TOKENS_PER_CHAPTER = 350
# Only 70% of max_tokens is planned for, so a chunk is not cut off mid-chapter.
TOKEN_BUDGET_RATIO = 0.7
MIN_CHUNK_SIZE = 5
MAX_CHUNK_SIZE = 25
CONTEXT_CHAPTER_LIMIT = 100


def compute_chunk_size(max_tokens: int | None, remaining_chapters: int) -> int:
    """Number of chapters to request per call.

    The token-derived size is clamped to [5, 25] and then to the number of
    chapters still to outline.
    """

    budget = (max_tokens or DEFAULT_MAX_TOKENS) * TOKEN_BUDGET_RATIO
    size = math.floor(budget / TOKENS_PER_CHAPTER)
    size = max(MIN_CHUNK_SIZE, min(size, MAX_CHUNK_SIZE))
    return max(1, min(size, remaining_chapters))


async def generate_blueprint(
    project: Project,
    config: EndpointConfig,
    *,
    client: CompletionClient | None = None,
    on_progress: Optional[ProgressCallback] = None,
    on_stream: Optional[TextStreamCallback] = None,
    on_checkpoint: Optional[Callable[[Project], None]] = None,
) -> Project:
    """Outline every chapter that the blueprint does not mention yet.

    Generation resumes one past the highest chapter number already present.
    ``on_checkpoint`` receives the snapshot after each appended chunk so the
    caller can persist progress before a later chunk fails.
    """

    stage_config = config.for_stage(GenerationStage.BLUEPRINT)
    client = client or ClientFactory.create(stage_config)
    total = project.number_of_chapters
    blueprint = project.chapter_blueprint or ""
    start = max_chapter_number(blueprint) + 1
    chunk_size = compute_chunk_size(stage_config.max_tokens, max(total - start + 1, 1))
    novel_architecture = build_novel_architecture(project)
    user_guidance = or_marker(project.user_guidance)
    current = project

    with log_context(stage=GenerationStage.BLUEPRINT.value, project_id=project.id):
        if chunk_size >= total and not blueprint:
            report(on_progress, f"Generating chapter blueprint (1-{total})...", 0, 1)
            prompt = BLUEPRINT_PROMPT.format(
                novel_architecture=novel_architecture,
                user_guidance=user_guidance,
                number_of_chapters=total,
                entry_format=ENTRY_FORMAT,
            )
            blueprint = clean_response(
                await complete_for_stage(client, stage_config, GenerationStage.BLUEPRINT, prompt, text_stream(on_stream))
            )
            current = current.touched(chapter_blueprint=blueprint)
            if on_checkpoint is not None:
                on_checkpoint(current)
        else:
            if start > 1:
                logger.info("Resuming chapter blueprint", extra={"start_chapter": start, "chunk_size": chunk_size})
            while start <= total:
                end = min(start + chunk_size - 1, total)
                report(on_progress, f"Generating chapter blueprint ({start}-{end})...", start - 1, total)

                prompt = BLUEPRINT_CHUNK_PROMPT.format(
                    novel_architecture=novel_architecture,
                    user_guidance=user_guidance,
                    number_of_chapters=total,
                    chapter_list=truncate_to_recent(blueprint, CONTEXT_CHAPTER_LIMIT) or NO_VALUE_MARKER,
                    start_chapter=start,
                    end_chapter=end,
                    entry_format=ENTRY_FORMAT,
                )
                chunk = clean_response(
                    await complete_for_stage(
                        client, stage_config, GenerationStage.BLUEPRINT, prompt, text_stream(on_stream)
                    )
                )
                if chunk:
                    blueprint = f"{blueprint}\n\n{chunk}" if blueprint else chunk
                    current = current.touched(chapter_blueprint=blueprint)
                    if on_checkpoint is not None:
                        on_checkpoint(current)
                else:
                    logger.warning("Blueprint chunk came back empty", extra={"start_chapter": start, "end_chapter": end})

                start = end + 1
                if start <= total:
                    await pause(BLUEPRINT_CHUNK_PAUSE_SECONDS)

        current = current.model_copy(
            update={"blueprint_generated": max_chapter_number(current.chapter_blueprint) >= total}
        )
        report(on_progress, "Chapter blueprint complete", total, total)
    return current
