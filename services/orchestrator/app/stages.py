"""Stage descriptions exposed by the API."""

from __future__ import annotations

from novel_forge_schemas import GenerationStage

STAGE_DESCRIPTIONS = {
    GenerationStage.ARCHITECTURE: "Generate core seed, characters, character state, world and plot architecture.",
    GenerationStage.BLUEPRINT: "Outline every chapter, in token-budget sized chunks when needed.",
    GenerationStage.DRAFT: "Draft one chapter from its outline and the rolling narrative state.",
    GenerationStage.FINALIZE: "Commit a chapter and refresh the story summary and character state.",
    GenerationStage.QUALITY_CHECK: "Grade a chapter for length, outline match, leakage and cliffhanger.",
    GenerationStage.REPAIR: "Rewrite the failing parts of a chapter from its quality report.",
    GenerationStage.ENRICH: "Expand a short chapter towards the target length.",
}

CHAPTER_STAGES = frozenset(
    {
        GenerationStage.DRAFT,
        GenerationStage.FINALIZE,
        GenerationStage.QUALITY_CHECK,
        GenerationStage.REPAIR,
    }
)
