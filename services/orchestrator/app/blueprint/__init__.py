from .parser import find_entry, max_chapter_number, parse_blueprint, truncate_to_recent

__all__ = ["find_entry", "max_chapter_number", "parse_blueprint", "truncate_to_recent"]
