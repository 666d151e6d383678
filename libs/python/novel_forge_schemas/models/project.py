"""Project record carried through every generation stage."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from ..enums import ArchitectureField


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Project(BaseModel):
    """The unit of work: settings, generated architecture, outline and chapters.

    Serialised with camelCase aliases so records written by the browser store
    (``coreSeed``, ``numberOfChapters``...) validate unchanged.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str = Field(default_factory=lambda: uuid4().hex)
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    title: str = ""
    genre: list[str] = Field(default_factory=list)
    topic: str = ""
    number_of_chapters: int = Field(..., ge=1)
    word_number: int = Field(..., ge=1, description="Target words per chapter")
    user_guidance: str = ""

    core_seed: str = ""
    character_dynamics: str = ""
    character_state: str = ""
    world_building: str = ""
    plot_architecture: str = ""

    chapter_blueprint: str = ""
    chapters: dict[int, str] = Field(default_factory=dict)
    global_summary: str = ""

    architecture_generated: bool = False
    blueprint_generated: bool = False

    @field_validator("genre", mode="before")
    @classmethod
    def wrap_single_genre(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, str):
            return [value] if value.strip() else []
        return value

    @field_validator("chapters")
    @classmethod
    def validate_chapter_numbers(cls, chapters: dict[int, str]) -> dict[int, str]:
        invalid = sorted(number for number in chapters if number < 1)
        if invalid:
            raise ValueError(f"Chapter numbers must be positive, got {invalid}")
        return chapters

    @property
    def genre_label(self) -> str:
        return " / ".join(tag for tag in self.genre if tag)

    @property
    def architecture_complete(self) -> bool:
        return all(getattr(self, field.value) for field in ArchitectureField)

    def touched(self, **updates: Any) -> "Project":
        """Return a copy with ``updates`` applied and ``updated_at`` refreshed."""

        updates["updated_at"] = _utcnow()
        return self.model_copy(update=updates)
