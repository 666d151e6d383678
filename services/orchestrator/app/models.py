"""Pydantic models for the orchestrator API."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Dict, Optional

from pydantic import BaseModel, Field

from novel_forge_schemas import GenerationStage, Project, QualityReport


class EndpointOverride(BaseModel):
    provider: Optional[str] = Field(None, description="Provider identifier: openai, mock")
    base_url: Optional[str] = None
    api_key: Optional[str] = None
    model: Optional[str] = None
    temperature: Optional[float] = Field(None, ge=0, le=2)
    max_tokens: Optional[int] = Field(None, ge=16)
    stage_models: Optional[Dict[str, str]] = Field(
        None, description="Per-stage model overrides merged over the configured ones"
    )


class StageRunRequest(BaseModel):
    project: Project
    chapter_number: Optional[int] = Field(None, ge=1)
    chapter_text: Optional[str] = Field(
        None, description="Chapter text for finalize, quality check, repair and enrich"
    )
    report: Optional[QualityReport] = Field(None, description="Quality report driving a repair")
    override: EndpointOverride | None = None


class StageResult(BaseModel):
    stage: GenerationStage
    project: Project
    text: Optional[str] = None
    report: Optional[QualityReport] = None
    duration_ms: float | None = None
    completed_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class StageDescription(BaseModel):
    stage: GenerationStage
    description: str
    requires_chapter: bool


class ModelListResponse(BaseModel):
    provider: str
    models: list[str]
