"""
Annotation data models for planmark.

An annotation is one piece of structured feedback on a plan. Its target text
is its durable identity; the structural position is a best-effort cache that
is recomputed by text search whenever the document is reparsed.
"""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field, model_validator


class AnnotationType(str, Enum):
    """The kind of edit suggestion an annotation represents."""

    DELETION = "deletion"
    INSERTION = "insertion"
    REPLACEMENT = "replacement"
    COMMENT = "comment"
    GLOBAL_COMMENT = "global-comment"

    @property
    def targets_text(self) -> bool:
        """Whether annotations of this type must point at selected text."""
        return self in (AnnotationType.DELETION, AnnotationType.INSERTION, AnnotationType.REPLACEMENT)

    @property
    def requires_note(self) -> bool:
        """Whether annotations of this type must carry a note."""
        return self is not AnnotationType.DELETION


class AnnotationPosition(BaseModel):
    """Structural locator: a block id plus a character range inside its content."""

    block_id: str = Field(..., description="Id of the block containing the target text")
    start_offset: int = Field(..., ge=0, description="Start of the target text in the block content")
    end_offset: int = Field(..., ge=0, description="End (exclusive) of the target text in the block content")

    @model_validator(mode="after")
    def _check_range(self) -> "AnnotationPosition":
        if self.end_offset < self.start_offset:
            raise ValueError("end_offset must not precede start_offset")
        return self


class Selection(BaseModel):
    """
    A text selection made by the user inside one block.
    """

    text: str = Field(..., description="The exact selected text")
    block_id: str = Field(..., description="Id of the block the selection lives in")
    start_offset: int = Field(..., ge=0, description="Start offset in the block content")
    end_offset: int = Field(..., ge=0, description="End offset (exclusive) in the block content")


class Annotation(BaseModel):
    """
    One user-authored piece of feedback on a plan.
    """

    id: str = Field(
        ...,
        description="Unique annotation identifier"
    )

    type: AnnotationType = Field(
        ...,
        description="The kind of feedback"
    )

    target_text: str = Field(
        default="",
        description="The exact text the annotation refers to (empty for global comments)"
    )

    note: Optional[str] = Field(
        default=None,
        description="Comment text, replacement text or text to insert"
    )

    author: Optional[str] = Field(
        default=None,
        description="Display identity of the reviewer"
    )

    created_at: float = Field(
        default=0.0,
        description="Ordering timestamp (epoch seconds or a logical counter)"
    )

    position: Optional[AnnotationPosition] = Field(
        default=None,
        description="Where the target text was last found, if known"
    )

    orphaned: bool = Field(
        default=False,
        description="True when the target text could not be found in the current document"
    )

    @model_validator(mode="after")
    def _global_comments_have_no_position(self) -> "Annotation":
        if self.type is AnnotationType.GLOBAL_COMMENT and self.position is not None:
            raise ValueError("global comments cannot carry a position")
        return self

    @property
    def is_located(self) -> bool:
        """Whether the annotation currently points at a block."""
        return self.position is not None
