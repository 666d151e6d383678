from .engine import enrich_chapter, generate_chapter_draft

__all__ = ["enrich_chapter", "generate_chapter_draft"]
