from .engine import check_quality, fix_chapter, repair_instructions

__all__ = ["check_quality", "fix_chapter", "repair_instructions"]
