from .chapter import ChapterBlueprintEntry, QualityReport
from .project import Project

__all__ = ["ChapterBlueprintEntry", "Project", "QualityReport"]
