"""
planmark: annotate, version, diff and share Markdown plans.

Splits plans into addressable blocks, anchors review annotations to them,
keeps a deduplicated version history and packs plan plus feedback into
compact share tokens.
"""

__version__ = "0.1.0"
__author__ = "planmark Project"

# Import main components
from .models import Block, Annotation, PlanVersion, DiffBlock, PlanDiff
from .parser import MarkdownParser, parse
from .annotations import AnnotationStore, create_annotation, relocate, reconcile
from .diff import compute_diff
from .versioning import VersionManager, PlanArchive
from .sharing import SharePayload, encode, decode, try_decode
from .export import export_report

__all__ = [
    "Block",
    "Annotation",
    "PlanVersion",
    "DiffBlock",
    "PlanDiff",
    "MarkdownParser",
    "parse",
    "AnnotationStore",
    "create_annotation",
    "relocate",
    "reconcile",
    "compute_diff",
    "VersionManager",
    "PlanArchive",
    "SharePayload",
    "encode",
    "decode",
    "try_decode",
    "export_report"
]
