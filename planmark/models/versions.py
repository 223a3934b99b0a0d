"""
Version history models for planmark.

This module defines the records returned by the version history store.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


class PlanVersion(BaseModel):
    """
    One persisted snapshot in a plan's history.
    """

    project: str = Field(
        ...,
        description="Sanitized identity of the enclosing workspace"
    )

    slug: str = Field(
        ...,
        description="Sanitized identity grouping versions of the same plan"
    )

    version: int = Field(
        ...,
        ge=1,
        description="Version number, contiguous from 1 within (project, slug)"
    )

    content: str = Field(
        ...,
        description="Full plan text at this version"
    )

    timestamp: Optional[datetime] = Field(
        default=None,
        description="Last-modified time of the stored file"
    )


class VersionEntry(BaseModel):
    """A row in a version listing."""

    version: int = Field(..., ge=1, description="Version number")
    timestamp: Optional[datetime] = Field(default=None, description="Last-modified time, if readable")


class SaveResult(BaseModel):
    """
    The outcome of saving a plan to history.
    """

    version: int = Field(..., ge=1, description="The version the content is stored under")
    path: str = Field(..., description="Path of the version file")
    is_new: bool = Field(..., description="False when identical content was already the latest version")


class ProjectPlan(BaseModel):
    """A plan slug stored for a project, with its version count."""

    slug: str = Field(..., description="Plan slug")
    versions: int = Field(..., ge=0, description="Number of stored versions")
    last_modified: Optional[datetime] = Field(default=None, description="Newest version file mtime")
