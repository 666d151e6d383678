from .engine import finalize_chapter

__all__ = ["finalize_chapter"]
