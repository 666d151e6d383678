"""FastAPI entrypoint for the Prefect-powered orchestrator."""

from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import FastAPI, HTTPException
from fastapi.responses import PlainTextResponse

from novel_forge_observability import log_context, setup_fastapi_metrics, setup_logging
from novel_forge_providers import ClientFactory, ProviderConfigError, ProviderError, RequestFailed
from novel_forge_schemas import GenerationStage, Project

from .errors import ChapterNotFound, MissingStageInput
from .export import export_text
from .flows import run_stage
from .models import EndpointOverride, ModelListResponse, StageDescription, StageResult, StageRunRequest
from .providers import resolve_endpoint_config
from .stages import CHAPTER_STAGES, STAGE_DESCRIPTIONS

SERVICE_NAME = "orchestrator"
setup_logging(SERVICE_NAME)
logger = logging.getLogger(__name__)

app = FastAPI(title="Novel Forge Orchestrator", version="0.1.0")
setup_fastapi_metrics(app, service_name=SERVICE_NAME)


@app.get("/health", tags=["health"])
async def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/stages", tags=["orchestrator"])
async def list_stages() -> List[StageDescription]:
    return [
        StageDescription(stage=stage, description=description, requires_chapter=stage in CHAPTER_STAGES)
        for stage, description in STAGE_DESCRIPTIONS.items()
    ]


@app.get("/models", response_model=ModelListResponse, tags=["orchestrator"])
async def list_models(provider: Optional[str] = None, base_url: Optional[str] = None) -> ModelListResponse:
    try:
        config = resolve_endpoint_config(EndpointOverride(provider=provider, base_url=base_url))
        client = ClientFactory.create(config)
        models = await client.list_models(config)
    except ProviderConfigError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except ProviderError as exc:
        raise HTTPException(status_code=502, detail=_provider_detail(exc)) from exc
    return ModelListResponse(provider=config.provider, models=models)


@app.post("/stages/{stage}", response_model=StageResult, tags=["orchestrator"])
async def execute_stage(stage: GenerationStage, payload: StageRunRequest) -> StageResult:
    with log_context(stage=stage.value, project_id=payload.project.id):
        logger.info("Dispatching stage", extra={"chapter_number": payload.chapter_number})
        try:
            result = await run_stage(stage, payload)
        except ChapterNotFound as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        except MissingStageInput as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        except ProviderConfigError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        except ProviderError as exc:
            raise HTTPException(status_code=502, detail=_provider_detail(exc)) from exc
    return result


@app.post("/export", response_class=PlainTextResponse, tags=["orchestrator"])
async def export_project(project: Project) -> str:
    return export_text(project)


def _provider_detail(exc: ProviderError) -> str:
    if isinstance(exc, RequestFailed):
        return f"Upstream request failed with status {exc.status}"
    return str(exc) or exc.__class__.__name__
