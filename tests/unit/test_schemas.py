"""Tests for the shared project and report models."""

import pytest
from pydantic import ValidationError

from novel_forge_schemas import ArchitectureField, Project, QualityReport
from novel_forge_schemas.utils.validators import count_words, is_within_word_band, word_count_bounds


def test_project_accepts_camel_case_record() -> None:
    project = Project.model_validate(
        {
            "title": "Ashes",
            "genre": "Xianxia",
            "numberOfChapters": 10,
            "wordNumber": 2000,
            "coreSeed": "A disowned disciple",
            "chapters": {"2": "Second chapter", "1": "First chapter"},
            "architectureGenerated": False,
        }
    )

    assert project.genre == ["Xianxia"]
    assert project.number_of_chapters == 10
    assert project.core_seed == "A disowned disciple"
    assert project.chapters == {1: "First chapter", 2: "Second chapter"}

    dumped = project.model_dump(by_alias=True)
    assert dumped["numberOfChapters"] == 10
    assert dumped["coreSeed"] == "A disowned disciple"


def test_project_rejects_non_positive_chapter_numbers() -> None:
    with pytest.raises(ValidationError):
        Project(number_of_chapters=3, word_number=100, chapters={0: "prologue"})


def test_project_requires_positive_targets() -> None:
    with pytest.raises(ValidationError):
        Project(number_of_chapters=0, word_number=100)


def test_touched_returns_updated_copy(make_project) -> None:
    project = make_project()

    updated = project.touched(core_seed="seed")

    assert project.core_seed == ""
    assert updated.core_seed == "seed"
    assert updated.updated_at >= project.updated_at
    assert updated.id == project.id


def test_architecture_complete_requires_every_field(make_project) -> None:
    values = {field.value: "text" for field in ArchitectureField}
    assert make_project(**values).architecture_complete
    values[ArchitectureField.WORLD_BUILDING.value] = ""
    assert not make_project(**values).architecture_complete


def test_genre_label_joins_tags(make_project) -> None:
    assert make_project(genre=["Xianxia", "Revenge"]).genre_label == "Xianxia / Revenge"


def test_quality_report_maps_model_payload() -> None:
    report = QualityReport.model_validate(
        {
            "wordCount": 1800,
            "wordCountPass": True,
            "contentMatch": True,
            "nextChapterSpill": True,
            "hasCliffhanger": False,
            "overallPass": False,
            "issues": ["Spills into chapter 4", " "],
        }
    )

    assert report.word_count == 1800
    assert report.no_leakage is False
    assert report.has_cliffhanger is False
    assert report.issues == ["Spills into chapter 4"]
    assert not report.all_dimensions_pass


@pytest.mark.parametrize("spill, expected", [("false", True), ("true", False), (0, True), ("no", True)])
def test_quality_report_spill_flag_uses_boolean_parsing(spill, expected: bool) -> None:
    report = QualityReport.model_validate({"nextChapterSpill": spill})

    assert report.no_leakage is expected


@pytest.mark.parametrize("payload", [{"issues": 5}, {"issues": {"a": 1}}, {"nextChapterSpill": "sometimes"}])
def test_quality_report_rejects_malformed_fields(payload) -> None:
    with pytest.raises(ValidationError):
        QualityReport.model_validate(payload)


def test_default_pass_report_has_single_issue() -> None:
    report = QualityReport.default_pass(120, "skipped")

    assert report.overall_pass
    assert report.all_dimensions_pass
    assert report.word_count == 120
    assert report.issues == ["skipped"]


def test_count_words_mixed_scripts() -> None:
    assert count_words("The hero rose - again!") == 4
    assert count_words("退婚之辱 begins now") == 6
    assert count_words("") == 0
    assert count_words(None) == 0


def test_word_count_band_is_inclusive() -> None:
    assert word_count_bounds(100) == (85, 115)
    assert word_count_bounds(3) == (3, 3)
    assert is_within_word_band(85, 100)
    assert is_within_word_band(115, 100)
    assert not is_within_word_band(84, 100)
    assert not is_within_word_band(116, 100)
