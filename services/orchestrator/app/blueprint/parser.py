"""Pattern-based extraction of chapter records from free-form blueprint text.

Blueprints come back from the model as loosely formatted text, and the label
vocabulary changed over time, so every attribute is recovered by trying an
ordered list of accepted labels. Headings may be written either as
``Chapter 12 - Title`` or ``第12章｜标题``.
"""

from __future__ import annotations

import re
from typing import Iterable, Optional

from novel_forge_schemas import ChapterBlueprintEntry

HEADING_PATTERN = re.compile(
    r"(?:Chapter\s*(\d+)|第\s*(\d+)\s*章)[ \t]*[:：|｜\-－–—][ \t]*\[?(.+?)\]?[ \t]*(?=\n|$)"
)
MARKER_PATTERN = re.compile(r"Chapter\s*(\d+)|第\s*(\d+)\s*章")
SPAN_PATTERN = re.compile(
    r"((?:Chapter\s*\d+|第\s*\d+\s*章).*?)(?=Chapter\s*\d+|第\s*\d+\s*章|$)",
    re.DOTALL,
)

# Ordered by priority: current labels first, then the labels used by older
# blueprints, then the Chinese label set.
FIELD_LABELS: dict[str, tuple[str, ...]] = {
    "position": (
        "Connection point",
        "Chapter role",
        "Opening hook",
        "承接点",
        "本章定位",
        "开场钩子",
    ),
    "purpose": ("Payoff", "Core purpose", "Conflict", "本章爽点兑现", "核心作用", "本章冲突"),
    "suspense": ("Emotional curve", "Suspense level", "情绪曲线", "悬念密度"),
    "hook": ("Cliffhanger", "Foreshadowing", "章末卡点", "伏笔操作"),
    "twist_level": ("Tension rating", "Twist level", "张力星级", "认知颠覆"),
    "summary": ("One-line plot", "Chapter summary", "一句话剧情", "本章简述"),
    "conflict": ("Conflict", "本章冲突"),
    "reward": ("Reward", "本章收益"),
}

_TITLE_TRIM = "[]*#_ \t"


def parse_blueprint(blueprint: str | None) -> list[ChapterBlueprintEntry]:
    """Return one entry per chapter heading, in the order they appear.

    A chapter's span runs from its heading to the next heading numbered one
    higher, or to the end of the text. Numbering that skips or repeats
    therefore produces spans that run into unrelated chapters.
    """

    if not blueprint:
        return []

    entries: list[ChapterBlueprintEntry] = []
    for match in HEADING_PATTERN.finditer(blueprint):
        number = int(match.group(1) or match.group(2))
        successor = _marker_for(number + 1).search(blueprint, match.end())
        end = successor.start() if successor else len(blueprint)
        span = blueprint[match.start():end]

        fields = {name: extract_field(span, labels) for name, labels in FIELD_LABELS.items()}
        entries.append(
            ChapterBlueprintEntry(number=number, title=_clean_title(match.group(3)), **fields)
        )
    return entries


def extract_field(text: str, labels: Iterable[str]) -> str:
    """Return the text after the first label that has a non-empty value."""

    for label in labels:
        match = re.search(rf"{re.escape(label)}[ \t]*[:：][ \t]*(.+)", text)
        if match:
            value = match.group(1).strip()
            if value:
                return value
    return ""


def truncate_to_recent(blueprint: str | None, limit: int) -> str:
    """Keep only the last ``limit`` chapter spans of ``blueprint``."""

    if not blueprint:
        return ""
    spans = SPAN_PATTERN.findall(blueprint)
    if len(spans) <= limit:
        return blueprint
    recent = spans[-limit:] if limit > 0 else []
    return "\n\n".join(span.strip() for span in recent).strip()


def max_chapter_number(blueprint: str | None) -> int:
    """Highest chapter number mentioned anywhere in ``blueprint`` (0 if none)."""

    if not blueprint:
        return 0
    numbers = [int(en or zh) for en, zh in MARKER_PATTERN.findall(blueprint)]
    return max(numbers, default=0)


def find_entry(
    entries: Iterable[ChapterBlueprintEntry], number: int
) -> Optional[ChapterBlueprintEntry]:
    return next((entry for entry in entries if entry.number == number), None)


def _marker_for(number: int) -> re.Pattern[str]:
    return re.compile(rf"Chapter\s*{number}(?!\d)|第\s*{number}\s*章")


def _clean_title(raw: str) -> str:
    return raw.strip().strip(_TITLE_TRIM).strip()
