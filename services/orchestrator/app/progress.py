"""Progress and stream sink types shared by the stage engines."""

from __future__ import annotations

import logging
from typing import Callable, Optional

from novel_forge_providers import ChunkCallback

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str, int, int], None]
"""Receives ``(message, completed_units, total_units)`` at each milestone."""

FieldStreamCallback = Callable[[str, str], None]
"""Receives ``(field_name, full_text)`` while an architecture field streams."""

TextStreamCallback = Callable[[str], None]
"""Receives the accumulated text while a chapter or blueprint streams."""


def report(on_progress: Optional[ProgressCallback], message: str, completed: int, total: int) -> None:
    logger.info(message, extra={"completed": completed, "total": total})
    if on_progress is not None:
        on_progress(message, completed, total)


def field_stream(on_stream: Optional[FieldStreamCallback], field_name: str) -> Optional[ChunkCallback]:
    if on_stream is None:
        return None
    return lambda _increment, full_text: on_stream(field_name, full_text)


def text_stream(on_stream: Optional[TextStreamCallback]) -> Optional[ChunkCallback]:
    if on_stream is None:
        return None
    return lambda _increment, full_text: on_stream(full_text)
