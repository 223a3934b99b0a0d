"""Annotation creation, reconciliation and storage."""

from .reconciler import create_annotation, relocate, position_resolves, reconcile, sort_for_display
from .store import AnnotationStore

__all__ = [
    "create_annotation",
    "relocate",
    "position_resolves",
    "reconcile",
    "sort_for_display",
    "AnnotationStore"
]
