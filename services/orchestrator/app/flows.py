"""Prefect flow dispatching one generation stage per request."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from time import perf_counter
from typing import Awaitable, Callable, Optional

from prefect import flow, get_run_logger
from prefect.exceptions import MissingContextError

from novel_forge_observability import log_context, observe_stage_duration
from novel_forge_providers import CompletionClient, EndpointConfig
from novel_forge_schemas import GenerationStage, Project, QualityReport

from .architecture import generate_architecture
from .blueprint.engine import generate_blueprint
from .context import resolve_chapter_context
from .drafting import enrich_chapter, generate_chapter_draft
from .errors import MissingStageInput
from .finalize import finalize_chapter
from .models import StageResult, StageRunRequest
from .progress import ProgressCallback
from .providers import resolve_endpoint_config
from .quality import check_quality, fix_chapter

logger = logging.getLogger(__name__)
SERVICE_NAME = "orchestrator"

HandlerOutput = tuple[Project, Optional[str], Optional[QualityReport]]
StageHandler = Callable[
    [StageRunRequest, EndpointConfig, Optional[CompletionClient], "StageSinks"], Awaitable[HandlerOutput]
]


@dataclass
class StageSinks:
    """Progress and stream sinks handed to the engines for one stage run.

    Passing a stream sink puts every completion on the streaming path, which is
    the path that retries transient upstream failures.
    """

    on_progress: Optional[ProgressCallback] = None
    streamed_characters: int = 0

    def on_text(self, full_text: str) -> None:
        self.streamed_characters = len(full_text)

    def on_field(self, field_name: str, full_text: str) -> None:
        self.streamed_characters = len(full_text)


async def _run_architecture(request, config, client, sinks) -> HandlerOutput:
    project = await generate_architecture(
        request.project, config, client=client, on_progress=sinks.on_progress, on_stream=sinks.on_field
    )
    return project, None, None


async def _run_blueprint(request, config, client, sinks) -> HandlerOutput:
    project = await generate_blueprint(
        request.project, config, client=client, on_progress=sinks.on_progress, on_stream=sinks.on_text
    )
    return project, None, None


async def _run_draft(request, config, client, sinks) -> HandlerOutput:
    chapter_number = _require_chapter(request, GenerationStage.DRAFT)
    text = await generate_chapter_draft(
        request.project,
        chapter_number,
        config,
        client=client,
        on_progress=sinks.on_progress,
        on_stream=sinks.on_text,
    )
    return request.project, text, None


async def _run_finalize(request, config, client, sinks) -> HandlerOutput:
    chapter_number = _require_chapter(request, GenerationStage.FINALIZE)
    chapter_text = _require_text(request, GenerationStage.FINALIZE)
    project = await finalize_chapter(
        request.project,
        chapter_number,
        chapter_text,
        config,
        client=client,
        on_progress=sinks.on_progress,
        on_stream=sinks.on_field,
    )
    return project, chapter_text, None


async def _run_quality_check(request, config, client, sinks) -> HandlerOutput:
    chapter_number = _require_chapter(request, GenerationStage.QUALITY_CHECK)
    chapter_text = _require_text(request, GenerationStage.QUALITY_CHECK)
    context = resolve_chapter_context(request.project, chapter_number)
    report = await check_quality(chapter_text, context, request.project.word_number, config, client=client)
    return request.project, chapter_text, report


async def _run_repair(request, config, client, sinks) -> HandlerOutput:
    chapter_number = _require_chapter(request, GenerationStage.REPAIR)
    chapter_text = _require_text(request, GenerationStage.REPAIR)
    if request.report is None:
        raise MissingStageInput(GenerationStage.REPAIR.value, "report")
    context = resolve_chapter_context(request.project, chapter_number)
    text = await fix_chapter(
        chapter_text,
        request.report,
        context,
        request.project.word_number,
        config,
        client=client,
        on_progress=sinks.on_progress,
        on_stream=sinks.on_text,
    )
    return request.project, text, request.report


async def _run_enrich(request, config, client, sinks) -> HandlerOutput:
    chapter_text = _require_text(request, GenerationStage.ENRICH)
    text = await enrich_chapter(
        chapter_text,
        request.project.word_number,
        config,
        client=client,
        on_progress=sinks.on_progress,
        on_stream=sinks.on_text,
    )
    return request.project, text, None


STAGE_HANDLERS: dict[GenerationStage, StageHandler] = {
    GenerationStage.ARCHITECTURE: _run_architecture,
    GenerationStage.BLUEPRINT: _run_blueprint,
    GenerationStage.DRAFT: _run_draft,
    GenerationStage.FINALIZE: _run_finalize,
    GenerationStage.QUALITY_CHECK: _run_quality_check,
    GenerationStage.REPAIR: _run_repair,
    GenerationStage.ENRICH: _run_enrich,
}


@flow(name="novel-forge-stage", version="0.1.0", validate_parameters=False)
async def run_stage(
    stage: GenerationStage,
    request: StageRunRequest,
    client: CompletionClient | None = None,
) -> StageResult:
    """Run a single stage against the project snapshot carried by ``request``.

    The snapshot is never modified in place; the returned result carries the
    updated copy for the caller to persist.
    """

    stage = GenerationStage(stage)
    handler = STAGE_HANDLERS[stage]
    config = resolve_endpoint_config(request.override)
    sinks = StageSinks(on_progress=_run_progress_sink(stage))

    with log_context(stage=stage.value, project_id=request.project.id, chapter=request.chapter_number):
        logger.info("Executing stage", extra={"provider": config.provider, "model": config.for_stage(stage).model})
        stage_start = perf_counter()
        outcome = "success"
        try:
            project, text, report = await handler(request, config, client, sinks)
        except Exception:
            outcome = "error"
            logger.exception("Stage execution failed")
            raise
        finally:
            elapsed = perf_counter() - stage_start
            observe_stage_duration(
                stage=stage.value,
                duration_seconds=elapsed,
                service_name=SERVICE_NAME,
                status=outcome,
            )

        logger.info(
            "Stage completed",
            extra={"duration_ms": elapsed * 1000, "streamed_characters": sinks.streamed_characters},
        )

    return StageResult(
        stage=stage,
        project=project,
        text=text,
        report=report,
        duration_ms=elapsed * 1000,
    )


def _require_chapter(request: StageRunRequest, stage: GenerationStage) -> int:
    if request.chapter_number is None:
        raise MissingStageInput(stage.value, "chapter_number")
    return request.chapter_number


def _require_text(request: StageRunRequest, stage: GenerationStage) -> str:
    if not request.chapter_text:
        raise MissingStageInput(stage.value, "chapter_text")
    return request.chapter_text


def _run_progress_sink(stage: GenerationStage) -> Optional[ProgressCallback]:
    """Forward engine milestones to the Prefect run log, when a flow run is active."""

    try:
        run_logger = get_run_logger()
    except MissingContextError:
        return None

    def forward(message: str, completed: int, total: int) -> None:
        run_logger.info("[%s] %s (%d/%d)", stage.value, message, completed, total)

    return forward
