"""
Annotation creation and position reconciliation for planmark.

An annotation's target text is its durable identity. Its position (block id
plus offsets) is a cache: whenever the document is reparsed, positions that no
longer resolve are recomputed by searching block contents for the target
text. The first occurrence in document order wins; duplicate text elsewhere
in the plan is not disambiguated.
"""

import logging
import time
import uuid
from typing import List, Optional, Sequence, Union

from ..errors import InvalidAnnotation, InvalidSelection
from ..models import Annotation, AnnotationPosition, AnnotationType, Block, Selection


def create_annotation(
    selection: Optional[Selection],
    annotation_type: Union[AnnotationType, str],
    note: Optional[str] = None,
    author: Optional[str] = None,
    created_at: Optional[float] = None,
    annotation_id: Optional[str] = None,
) -> Annotation:
    """
    Build an annotation from a user's text selection.

    Args:
        selection: The selected text with its block id and offsets
            (ignored for global comments)
        annotation_type: Kind of feedback
        note: Comment, replacement or insertion text
        author: Reviewer display name
        created_at: Ordering timestamp (defaults to now)
        annotation_id: Explicit id (defaults to a new uuid4)

    Returns:
        An Annotation carrying a position whenever a selection was given

    Raises:
        InvalidSelection: If a deletion, insertion or replacement has a blank selection
        InvalidAnnotation: If a type that needs a note has none
    """
    annotation_type = AnnotationType(annotation_type)
    target_text = ""
    position = None

    if annotation_type is not AnnotationType.GLOBAL_COMMENT:
        target_text = selection.text if selection is not None else ""
        if annotation_type.targets_text and not target_text.strip():
            raise InvalidSelection(annotation_type.value)
        if selection is not None and target_text:
            position = AnnotationPosition(
                block_id=selection.block_id,
                start_offset=selection.start_offset,
                end_offset=selection.end_offset
            )

    if note is not None and not note.strip():
        note = None
    if annotation_type.requires_note and note is None:
        raise InvalidAnnotation(f"A note is required for {annotation_type.value} annotations")

    return Annotation(
        id=annotation_id or str(uuid.uuid4()),
        type=annotation_type,
        target_text=target_text,
        note=note,
        author=author,
        created_at=time.time() if created_at is None else created_at,
        position=position
    )


def relocate(annotation: Annotation, blocks: Sequence[Block]) -> Annotation:
    """
    Locate an annotation's target text in a block sequence.

    Args:
        annotation: The annotation to place
        blocks: Blocks of the currently loaded document

    Returns:
        A copy of the annotation positioned at the first block containing its
        target text, or with no position and `orphaned` set when no block does.
        Annotations without target text come back unplaced and not orphaned.
    """
    target = annotation.target_text
    if not target:
        return annotation.model_copy(update={"position": None, "orphaned": False})

    for block in sorted(blocks, key=lambda b: b.order):
        offset = block.content.find(target)
        if offset != -1:
            position = AnnotationPosition(
                block_id=block.id,
                start_offset=offset,
                end_offset=offset + len(target)
            )
            return annotation.model_copy(update={"position": position, "orphaned": False})

    logging.debug(f"Annotation {annotation.id} orphaned: target text not found")
    return annotation.model_copy(update={"position": None, "orphaned": True})


def position_resolves(annotation: Annotation, blocks: Sequence[Block]) -> bool:
    """Check that a cached position still points at the annotation's target text."""
    position = annotation.position
    if position is None:
        return False

    for block in blocks:
        if block.id == position.block_id:
            return block.content[position.start_offset:position.end_offset] == annotation.target_text
    return False


def reconcile(annotations: Sequence[Annotation], blocks: Sequence[Block]) -> List[Annotation]:
    """
    Bring a list of annotations in line with a freshly parsed document.

    Annotations whose positions still resolve are kept as they are; every
    other annotation is relocated by text search.

    Returns:
        Annotations in the same order as given
    """
    reconciled = []
    relocated = 0

    for annotation in annotations:
        if annotation.target_text and position_resolves(annotation, blocks):
            reconciled.append(annotation.model_copy(update={"orphaned": False}))
        else:
            reconciled.append(relocate(annotation, blocks))
            relocated += 1

    orphaned = sum(1 for a in reconciled if a.orphaned)
    logging.info(f"Reconciled {len(reconciled)} annotations ({relocated} relocated, {orphaned} orphaned)")
    return reconciled


def sort_for_display(annotations: Sequence[Annotation]) -> List[Annotation]:
    """Order annotations by creation time; ties keep their original order."""
    return sorted(annotations, key=lambda a: a.created_at)
