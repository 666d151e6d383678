"""Enum definitions shared across the generation pipeline."""

from __future__ import annotations

from enum import Enum


class GenerationStage(str, Enum):
    ARCHITECTURE = "architecture"
    BLUEPRINT = "blueprint"
    DRAFT = "draft"
    FINALIZE = "finalize"
    QUALITY_CHECK = "quality_check"
    REPAIR = "repair"
    ENRICH = "enrich"


class ArchitectureField(str, Enum):
    """Project fields written by the architecture stage, in generation order."""

    CORE_SEED = "core_seed"
    CHARACTER_DYNAMICS = "character_dynamics"
    CHARACTER_STATE = "character_state"
    WORLD_BUILDING = "world_building"
    PLOT_ARCHITECTURE = "plot_architecture"
