"""Data models for planmark."""

from .blocks import Block, BlockKind, TocItem, ChecklistItem
from .annotations import Annotation, AnnotationType, AnnotationPosition, Selection
from .versions import PlanVersion, VersionEntry, SaveResult, ProjectPlan
from .diff import DiffBlock, DiffBlockType, DiffStats, PlanDiff, DiffLine

__all__ = [
    "Block",
    "BlockKind",
    "TocItem",
    "ChecklistItem",
    "Annotation",
    "AnnotationType",
    "AnnotationPosition",
    "Selection",
    "PlanVersion",
    "VersionEntry",
    "SaveResult",
    "ProjectPlan",
    "DiffBlock",
    "DiffBlockType",
    "DiffStats",
    "PlanDiff",
    "DiffLine"
]
