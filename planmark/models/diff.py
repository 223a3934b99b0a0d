"""
Diff data models for planmark.
"""

from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, Field


class DiffBlockType(str, Enum):
    """Classification of one contiguous span of a line diff."""

    ADDED = "added"
    REMOVED = "removed"
    MODIFIED = "modified"
    UNCHANGED = "unchanged"


class DiffBlock(BaseModel):
    """
    One contiguous span of a computed line-level diff.

    `content` is the new text for added, modified and unchanged blocks and the
    old text for removed blocks.
    """

    type: DiffBlockType = Field(..., description="What kind of change this block represents")
    content: str = Field(..., description="Block text")
    old_content: Optional[str] = Field(default=None, description="Replaced text, for modified blocks only")
    lines: int = Field(..., ge=0, description="Number of lines in content")


class DiffStats(BaseModel):
    """Aggregate line counts for a diff."""

    additions: int = Field(default=0, ge=0, description="Lines added, including modified blocks")
    deletions: int = Field(default=0, ge=0, description="Lines removed, including modified blocks")
    modifications: int = Field(default=0, ge=0, description="Number of modified blocks")


class PlanDiff(BaseModel):
    """The full result of diffing two plan versions."""

    blocks: List[DiffBlock] = Field(default_factory=list)
    stats: DiffStats = Field(default_factory=DiffStats)


class DiffLine(BaseModel):
    """One line of a raw, prefix-style diff rendering."""

    type: DiffBlockType = Field(..., description="added, removed or unchanged")
    content: str = Field(..., description="Line text without newline")
    line_number: Optional[int] = Field(default=None, description="Line number in the new text; None for removed lines")
