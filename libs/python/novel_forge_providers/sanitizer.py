"""Strip formatting artifacts from raw model output."""

from __future__ import annotations

import re

_FENCED_BLOCK = re.compile(r"```.*?```", re.DOTALL)
_INLINE_DELIMITER = re.compile(r"`")


def clean_response(text: str | None) -> str:
    """Return plain narrative text.

    Fenced code blocks are removed together with their delimiters, stray
    backticks are dropped and surrounding whitespace is trimmed. Applying the
    function twice gives the same result as applying it once.
    """

    if not text:
        return ""
    cleaned = _FENCED_BLOCK.sub("", text)
    cleaned = _INLINE_DELIMITER.sub("", cleaned)
    return cleaned.strip()
