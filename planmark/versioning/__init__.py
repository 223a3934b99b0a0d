"""Plan version history, identity and decision archive."""

from .manager import VersionManager, version_filename
from .identity import sanitize_tag, extract_first_heading, generate_slug, detect_project_name
from .archive import PlanArchive

__all__ = [
    "VersionManager",
    "version_filename",
    "sanitize_tag",
    "extract_first_heading",
    "generate_slug",
    "detect_project_name",
    "PlanArchive"
]
