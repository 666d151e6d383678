"""Tests for plain-text export."""

from services.orchestrator.app.export import CHAPTER_RULE, export_text


def test_export_orders_chapters_numerically(make_project, make_blueprint) -> None:
    project = make_project(
        title="Ashes",
        chapter_blueprint=make_blueprint(1, 10),
        chapters={10: "Tenth.", 2: "Second.", 1: "First."},
    )

    text = export_text(project)

    assert text.startswith("Ashes\n\nGenre: Xianxia / Revenge\nTopic: A disowned disciple climbs back\n")
    positions = [text.index(f"Chapter {number} Title {number}\n") for number in (1, 2, 10)]
    assert positions == sorted(positions)
    assert text.count(CHAPTER_RULE) == 3


def test_export_uses_number_when_blueprint_lacks_chapter(make_project) -> None:
    project = make_project(chapters={1: "Orphan chapter."})

    text = export_text(project)

    assert "Chapter 1\n\nOrphan chapter." in text


def test_export_without_chapters(make_project) -> None:
    text = export_text(make_project(title=""))

    assert text.startswith("Untitled\n")
    assert "Chapter" not in text
