"""Plain-text export of a project's committed chapters."""

from __future__ import annotations

from novel_forge_schemas import Project

from .blueprint.parser import find_entry, parse_blueprint

TITLE_RULE = "=" * 50
CHAPTER_RULE = "-" * 30


def export_text(project: Project) -> str:
    """Join title, genre, topic and chapters in numeric order.

    Chapters are emitted under their blueprint titles; a chapter missing from
    the blueprint is headed by its number only.
    """

    lines = [
        project.title or "Untitled",
        "",
        f"Genre: {project.genre_label}",
        f"Topic: {project.topic}",
        "",
        TITLE_RULE,
        "",
    ]
    entries = parse_blueprint(project.chapter_blueprint)
    for number in sorted(project.chapters):
        entry = find_entry(entries, number)
        heading = f"Chapter {number} {entry.title}" if entry and entry.title else f"Chapter {number}"
        lines.extend([heading, "", project.chapters[number], "", CHAPTER_RULE, ""])
    return "\n".join(lines)
