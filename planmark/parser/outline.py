"""
Derived document views: heading outline, per-section annotation counts and
task checklists.
"""

import re
from typing import Dict, List, Optional, Sequence

from ..config import config
from ..models import Annotation, Block, BlockKind, ChecklistItem, TocItem


CHECKLIST_PATTERN = re.compile(r'^[-*]\s*\[([ xX])\]\s+(.+)$', re.MULTILINE)


def build_outline(blocks: Sequence[Block], max_level: Optional[int] = None) -> List[TocItem]:
    """
    Nest the heading blocks of a document into a table of contents.

    Args:
        blocks: Parsed blocks in document order
        max_level: Deepest heading level to include (defaults to outline.max_level)

    Returns:
        Top-level outline entries, each holding its sub-headings
    """
    if max_level is None:
        max_level = config.outline_max_level

    roots: List[TocItem] = []
    stack: List[TocItem] = []

    for block in blocks:
        if block.kind is not BlockKind.HEADING or block.level is None or block.level > max_level:
            continue

        item = TocItem(id=block.id, content=block.content, level=block.level)
        while stack and stack[-1].level >= item.level:
            stack.pop()

        if stack:
            stack[-1].children.append(item)
        else:
            roots.append(item)
        stack.append(item)

    return roots


def annotation_counts_by_section(blocks: Sequence[Block], annotations: Sequence[Annotation]) -> Dict[str, int]:
    """
    Count located annotations under each heading.

    A block belongs to the nearest heading above it. Annotations without a
    position, or on blocks above the first heading, are not counted.

    Returns:
        Mapping of heading block id to annotation count (zero counts included)
    """
    section_of: Dict[str, str] = {}
    counts: Dict[str, int] = {}
    current: Optional[str] = None

    for block in blocks:
        if block.kind is BlockKind.HEADING:
            current = block.id
            counts[current] = 0
        if current is not None:
            section_of[block.id] = current

    for annotation in annotations:
        if annotation.position is None:
            continue
        heading_id = section_of.get(annotation.position.block_id)
        if heading_id is not None:
            counts[heading_id] += 1

    return counts


def parse_checklist(text: str) -> List[ChecklistItem]:
    """
    Extract markdown task boxes ('- [ ] step', '* [x] done') from plan text.

    Steps are numbered from 1 in document order; items with no text are skipped.
    """
    items: List[ChecklistItem] = []
    for match in CHECKLIST_PATTERN.finditer(text):
        item_text = match.group(2).strip()
        if item_text:
            items.append(ChecklistItem(
                step=len(items) + 1,
                text=item_text,
                completed=match.group(1) != ' '
            ))
    return items
