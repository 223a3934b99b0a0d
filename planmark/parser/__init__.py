"""Document parsers and derived views."""

from .base import BaseParser
from .markdown import MarkdownParser, parse
from .outline import build_outline, annotation_counts_by_section, parse_checklist

__all__ = [
    "BaseParser",
    "MarkdownParser",
    "parse",
    "build_outline",
    "annotation_counts_by_section",
    "parse_checklist"
]
