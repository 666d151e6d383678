"""Shared domain models for the novel generation pipeline."""

from .enums import ArchitectureField, GenerationStage
from .models import ChapterBlueprintEntry, Project, QualityReport

__all__ = [
    "ArchitectureField",
    "GenerationStage",
    "ChapterBlueprintEntry",
    "Project",
    "QualityReport",
]
