"""Completion calls issued on behalf of a stage, with latency and outcome metrics."""

from __future__ import annotations

import asyncio
from time import perf_counter
from typing import Optional

from novel_forge_observability import observe_completion
from novel_forge_providers import ChunkCallback, CompletionClient, EndpointConfig
from novel_forge_schemas import GenerationStage

SERVICE_NAME = "orchestrator"


async def complete_for_stage(
    client: CompletionClient,
    config: EndpointConfig,
    stage: GenerationStage,
    prompt: str,
    on_chunk: Optional[ChunkCallback] = None,
) -> str:
    """Return the raw completion text; provider errors propagate unchanged."""

    start = perf_counter()
    status = "success"
    text = ""
    try:
        text = await client.complete(config, prompt, on_chunk)
    except asyncio.CancelledError:
        status = "cancelled"
        raise
    except Exception:
        status = "error"
        raise
    finally:
        observe_completion(
            stage=stage.value,
            model=config.model,
            duration_seconds=perf_counter() - start,
            service_name=SERVICE_NAME,
            status=status,
            characters=len(text or ""),
        )
    return text
