"""Fixed pauses between consecutive upstream calls to stay under rate limits."""

from __future__ import annotations

import asyncio

BLUEPRINT_CHUNK_PAUSE_SECONDS = 1.5
FINALIZE_PAUSE_SECONDS = 0.5


async def pause(seconds: float) -> None:
    await asyncio.sleep(seconds)
