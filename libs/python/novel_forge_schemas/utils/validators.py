"""Reusable validation and measurement helpers."""

from __future__ import annotations

import re

# Accepted chapter length is target +/- this many percent. Shared by the
# quality check and the repair prompt.
WORD_COUNT_TOLERANCE_PERCENT = 15

_CJK_CHAR = re.compile(r"[\u3040-\u30ff\u3400-\u4dbf\u4e00-\u9fff\uac00-\ud7af\uf900-\ufaff]")


def count_words(value: str | None) -> int:
    """Count words in mixed-script text.

    Each CJK character counts as one word; other text is split on whitespace
    and tokens without any letter or digit are ignored.
    """

    if not value:
        return 0
    cjk_count = len(_CJK_CHAR.findall(value))
    remainder = _CJK_CHAR.sub(" ", value)
    tokens = [token for token in remainder.split() if any(ch.isalnum() for ch in token)]
    return cjk_count + len(tokens)


def word_count_bounds(target: int) -> tuple[int, int]:
    """Return the inclusive ``(low, high)`` word range accepted for ``target``."""

    low = -(-target * (100 - WORD_COUNT_TOLERANCE_PERCENT) // 100)
    high = target * (100 + WORD_COUNT_TOLERANCE_PERCENT) // 100
    return low, high


def is_within_word_band(actual: int, target: int) -> bool:
    low, high = word_count_bounds(target)
    return low <= actual <= high
