"""Architecture generation: core seed, cast, character state, world and plot."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from novel_forge_observability import log_context
from novel_forge_providers import ClientFactory, CompletionClient, EndpointConfig, clean_response
from novel_forge_schemas import ArchitectureField, GenerationStage, Project

from ..completions import complete_for_stage
from ..context import or_marker
from ..progress import FieldStreamCallback, ProgressCallback, field_stream, report
from .prompts import (
    CHARACTER_DYNAMICS_PROMPT,
    CHARACTER_STATE_PROMPT,
    CORE_SEED_PROMPT,
    PLOT_ARCHITECTURE_PROMPT,
    WORLD_BUILDING_PROMPT,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ArchitectureStep:
    field: ArchitectureField
    template: str
    requires: tuple[ArchitectureField, ...]
    message: str


ARCHITECTURE_STEPS: tuple[ArchitectureStep, ...] = (
    ArchitectureStep(
        ArchitectureField.CORE_SEED,
        CORE_SEED_PROMPT,
        (),
        "Generating core seed...",
    ),
    ArchitectureStep(
        ArchitectureField.CHARACTER_DYNAMICS,
        CHARACTER_DYNAMICS_PROMPT,
        (ArchitectureField.CORE_SEED,),
        "Generating character dynamics...",
    ),
    ArchitectureStep(
        ArchitectureField.CHARACTER_STATE,
        CHARACTER_STATE_PROMPT,
        (ArchitectureField.CORE_SEED, ArchitectureField.CHARACTER_DYNAMICS),
        "Generating initial character state...",
    ),
    ArchitectureStep(
        ArchitectureField.WORLD_BUILDING,
        WORLD_BUILDING_PROMPT,
        (ArchitectureField.CORE_SEED, ArchitectureField.CHARACTER_DYNAMICS),
        "Generating world building...",
    ),
    ArchitectureStep(
        ArchitectureField.PLOT_ARCHITECTURE,
        PLOT_ARCHITECTURE_PROMPT,
        (
            ArchitectureField.CORE_SEED,
            ArchitectureField.CHARACTER_DYNAMICS,
            ArchitectureField.WORLD_BUILDING,
        ),
        "Designing plot architecture...",
    ),
)


async def generate_architecture(
    project: Project,
    config: EndpointConfig,
    *,
    client: CompletionClient | None = None,
    on_progress: Optional[ProgressCallback] = None,
    on_stream: Optional[FieldStreamCallback] = None,
    on_checkpoint: Optional[Callable[[Project], None]] = None,
) -> Project:
    """Fill every empty architecture field in dependency order.

    Populated fields are kept as they are, so a run interrupted by a provider
    error can be resumed with the last checkpointed snapshot. Provider errors
    propagate to the caller.
    """

    stage_config = config.for_stage(GenerationStage.ARCHITECTURE)
    client = client or ClientFactory.create(stage_config)
    total = len(ARCHITECTURE_STEPS)
    current = project

    with log_context(stage=GenerationStage.ARCHITECTURE.value, project_id=project.id):
        for index, step in enumerate(ARCHITECTURE_STEPS, start=1):
            name = step.field.value
            if getattr(current, name):
                logger.info("Architecture field already populated", extra={"field": name})
                continue
            missing = [required.value for required in step.requires if not getattr(current, required.value)]
            if missing:
                logger.warning(
                    "Architecture field waiting on predecessors",
                    extra={"field": name, "missing": missing},
                )
                continue

            report(on_progress, step.message, index, total)
            prompt = step.template.format(**_prompt_params(current))
            text = await complete_for_stage(
                client, stage_config, GenerationStage.ARCHITECTURE, prompt, field_stream(on_stream, name)
            )
            current = current.touched(**{name: clean_response(text)})
            if on_checkpoint is not None:
                on_checkpoint(current)

        current = current.model_copy(update={"architecture_generated": current.architecture_complete})
        report(on_progress, "Architecture generation complete", total, total)
    return current


def _prompt_params(project: Project) -> dict[str, object]:
    return {
        "topic": project.topic,
        "genre": project.genre_label,
        "number_of_chapters": project.number_of_chapters,
        "word_number": project.word_number,
        "user_guidance": or_marker(project.user_guidance),
        "core_seed": project.core_seed,
        "character_dynamics": project.character_dynamics,
        "character_state": project.character_state,
        "world_building": project.world_building,
    }
