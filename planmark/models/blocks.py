"""
Block data models for planmark.

This module defines the structural units a plan document is decomposed into,
plus the outline and checklist records derived from them.
"""

from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field


class BlockKind(str, Enum):
    """The structural type of a parsed block."""

    PARAGRAPH = "paragraph"
    HEADING = "heading"
    BLOCKQUOTE = "blockquote"
    LIST_ITEM = "list-item"
    CODE = "code"
    HORIZONTAL_RULE = "horizontal-rule"
    TABLE = "table"


class Block(BaseModel):
    """
    One structurally typed unit of a parsed document.

    Blocks are produced fresh on every parse and never mutated.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(
        ...,
        description="Position-derived identifier, unique within one parse (e.g. 'block-0')"
    )

    kind: BlockKind = Field(
        ...,
        description="The structural type of the block"
    )

    content: str = Field(
        ...,
        description="The block's raw text without structural markers"
    )

    level: Optional[int] = Field(
        default=None,
        description="Heading depth (1-6) or list nesting depth (0 for top-level items)"
    )

    language: Optional[str] = Field(
        default=None,
        description="Language tag of a fenced code block"
    )

    checked: Optional[bool] = Field(
        default=None,
        description="Task checkbox state for list items written as '- [ ]' or '- [x]'"
    )

    order: int = Field(
        ...,
        description="Emission sequence position, strictly increasing"
    )

    start_line: int = Field(
        ...,
        description="1-based line number where the block starts in the source"
    )


class TocItem(BaseModel):
    """
    A heading in a plan outline, with the headings nested beneath it.
    """

    id: str = Field(
        ...,
        description="Id of the heading block"
    )

    content: str = Field(
        ...,
        description="Heading text"
    )

    level: int = Field(
        ...,
        description="Heading depth"
    )

    children: List['TocItem'] = Field(
        default_factory=list,
        description="Deeper headings within this section"
    )


class ChecklistItem(BaseModel):
    """A markdown task item ('- [ ] step')."""

    step: int = Field(..., description="1-based step number")
    text: str = Field(..., description="Task text without the checkbox")
    completed: bool = Field(default=False, description="Whether the box is ticked")


# Enable forward references for self-referencing model
TocItem.model_rebuild()
