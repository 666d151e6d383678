"""Errors raised by the orchestration engines."""

from __future__ import annotations


class ChapterNotFound(LookupError):
    """Raised when the requested chapter is absent from the parsed blueprint."""

    def __init__(self, chapter_number: int) -> None:
        super().__init__(f"Chapter {chapter_number} is not present in the chapter blueprint")
        self.chapter_number = chapter_number


class MissingStageInput(ValueError):
    """Raised when a stage request lacks a field the stage needs."""

    def __init__(self, stage: str, field: str) -> None:
        super().__init__(f"Stage '{stage}' requires '{field}'")
        self.stage = stage
        self.field = field
