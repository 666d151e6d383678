"""Chapter-level records derived from the blueprint and quality checks."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, TypeAdapter, ValidationError, model_validator

_FLAG = TypeAdapter(bool)


class ChapterBlueprintEntry(BaseModel):
    """One chapter of the outline, recovered from free-form blueprint text."""

    number: int = Field(..., ge=0)
    title: str = ""
    position: str = Field("", description="Where the chapter sits in the arc / how it connects")
    purpose: str = Field("", description="Payoff or core purpose of the chapter")
    suspense: str = Field("", description="Emotional curve or suspense density")
    hook: str = Field("", description="End-of-chapter hook or foreshadowing")
    twist_level: str = Field("", description="Tension or twist rating")
    summary: str = Field("", description="One-line synopsis")
    conflict: str = ""
    reward: str = ""


class QualityReport(BaseModel):
    """Result of one automated quality check; every flag reads True when passing."""

    word_count: int = Field(0, ge=0)
    word_count_pass: bool = True
    content_match: bool = True
    no_leakage: bool = Field(True, description="False when the next chapter's events leaked in")
    has_cliffhanger: bool = True
    overall_pass: bool = True
    issues: list[str] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def accept_report_payload(cls, data: Any) -> Any:
        """Map the camelCase report emitted by the model onto field names."""

        if not isinstance(data, dict):
            return data
        mapped = dict(data)
        renames = {
            "wordCount": "word_count",
            "wordCountPass": "word_count_pass",
            "contentMatch": "content_match",
            "hasCliffhanger": "has_cliffhanger",
            "overallPass": "overall_pass",
            "noLeakage": "no_leakage",
        }
        for source, target in renames.items():
            if source in mapped and target not in mapped:
                mapped[target] = mapped.pop(source)
        if "nextChapterSpill" in mapped and "no_leakage" not in mapped:
            mapped["no_leakage"] = not _parse_flag(mapped.pop("nextChapterSpill"), "nextChapterSpill")
        issues = mapped.get("issues")
        if issues is None:
            mapped["issues"] = []
        elif isinstance(issues, str):
            mapped["issues"] = [issues]
        elif isinstance(issues, (list, tuple)):
            mapped["issues"] = [str(issue) for issue in issues if str(issue).strip()]
        else:
            raise ValueError(f"issues must be a list of strings, got {type(issues).__name__}")
        return mapped

    @property
    def all_dimensions_pass(self) -> bool:
        return self.word_count_pass and self.content_match and self.no_leakage and self.has_cliffhanger

    @classmethod
    def default_pass(cls, word_count: int, reason: str) -> "QualityReport":
        return cls(word_count=word_count, issues=[reason])


def _parse_flag(value: Any, name: str) -> bool:
    """Read a boolean with the same lax rules pydantic applies to the other flags."""

    try:
        return _FLAG.validate_python(value)
    except ValidationError as exc:
        raise ValueError(f"{name} must be a boolean, got {value!r}") from exc
