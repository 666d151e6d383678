"""Assemble the context blocks embedded in stage prompts.

Later stages see the novel through progressively narrower windows: the
blueprint stage gets the full architecture, drafting gets the setting plus the
rolling summary, the tail of the previous chapter and the character state.
"""

from __future__ import annotations

from dataclasses import dataclass

from novel_forge_schemas import ChapterBlueprintEntry, Project

from .blueprint.parser import find_entry, parse_blueprint
from .errors import ChapterNotFound

PREVIOUS_EXCERPT_CHARS = 800

NO_SUMMARY_MARKER = "(This is the first chapter, no summary yet.)"
NO_PREVIOUS_CHAPTER_MARKER = "(No previous chapter text.)"
NO_CHARACTER_STATE_MARKER = "(No character state yet.)"
NO_VALUE_MARKER = "(none)"


def placeholder_next_entry(number: int) -> ChapterBlueprintEntry:
    """Stand-in for a following chapter that has not been outlined yet."""

    return ChapterBlueprintEntry(
        number=number,
        title="(to be decided)",
        position="Transitional chapter",
        purpose="Carry the story from this chapter into the next",
        suspense="Medium",
        hook="No special foreshadowing",
        twist_level="★☆☆☆☆",
        summary="Transitional content",
    )


@dataclass(frozen=True)
class ChapterContext:
    """Blueprint entries for a chapter and the one that follows it."""

    entry: ChapterBlueprintEntry
    next_entry: ChapterBlueprintEntry
    next_outlined: bool

    @property
    def number(self) -> int:
        return self.entry.number


def resolve_chapter_context(project: Project, chapter_number: int) -> ChapterContext:
    entries = parse_blueprint(project.chapter_blueprint)
    entry = find_entry(entries, chapter_number)
    if entry is None:
        raise ChapterNotFound(chapter_number)
    next_entry = find_entry(entries, chapter_number + 1)
    if next_entry is None:
        return ChapterContext(entry, placeholder_next_entry(chapter_number + 1), False)
    return ChapterContext(entry, next_entry, True)


def build_novel_architecture(project: Project) -> str:
    """Full architecture block used when outlining chapters."""

    return (
        "=== 0) Novel settings ===\n"
        f"Topic: {project.topic}; Genre: {project.genre_label}; "
        f"Length: about {project.number_of_chapters} chapters "
        f"({project.word_number} words each)\n\n"
        "=== 1) Core seed ===\n"
        f"{project.core_seed}\n\n"
        "=== 2) Character dynamics ===\n"
        f"{project.character_dynamics}\n\n"
        "=== 3) World building ===\n"
        f"{project.world_building}\n\n"
        "=== 4) Three-act plot architecture ===\n"
        f"{project.plot_architecture}"
    )


def build_novel_setting(project: Project) -> str:
    """Setting block used when drafting the opening chapter."""

    return (
        f"Genre: {project.genre_label}\n\n"
        f"Core seed: {project.core_seed}\n\n"
        f"Characters: {project.character_dynamics}\n\n"
        f"World: {project.world_building}\n\n"
        f"Plot architecture: {project.plot_architecture}"
    )


def previous_chapter_excerpt(project: Project, chapter_number: int) -> str:
    previous = project.chapters.get(chapter_number - 1, "")
    excerpt = previous[-PREVIOUS_EXCERPT_CHARS:]
    return excerpt or NO_PREVIOUS_CHAPTER_MARKER


def or_marker(value: str | None, marker: str = NO_VALUE_MARKER) -> str:
    return value if value else marker
