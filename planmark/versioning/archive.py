"""
Decision archive for reviewed plans.

Keeps the latest plan text, its exported annotations and a final snapshot
written when the plan is approved or denied. Unlike version history these
files are overwritten on every save.
"""

import logging
from pathlib import Path
from typing import Optional, Union

from ..config import config
from ..export import NO_CHANGES


APPROVED = "approved"
DENIED = "denied"


class PlanArchive:
    """
    Writes review artifacts for plans into a single directory.
    """

    def __init__(self, plans_dir: Optional[Union[str, Path]] = None):
        """
        Initialize the archive.

        Args:
            plans_dir: Custom archive directory; '~' is expanded.
                Defaults to paths.plans_dir from config.
        """
        self.plans_dir = Path(plans_dir).expanduser() if plans_dir else config.plans_directory

    def _write(self, filename: str, content: str) -> str:
        self.plans_dir.mkdir(parents=True, exist_ok=True)
        file_path = self.plans_dir / filename
        with open(file_path, 'w', encoding='utf-8', newline='') as f:
            f.write(content)
        logging.info(f"Wrote {file_path}")
        return str(file_path)

    def save_plan(self, slug: str, content: str) -> str:
        """Save the plan text as {slug}.md and return its path."""
        return self._write(f"{slug}.md", content)

    def save_annotations(self, slug: str, annotations: str) -> str:
        """Save an exported annotation report as {slug}.annotations.md and return its path."""
        return self._write(f"{slug}.annotations.md", annotations)

    def save_final_snapshot(self, slug: str, status: str, plan: str, annotations: str) -> str:
        """
        Save the plan as it stood when the review was decided.

        Args:
            slug: Plan slug
            status: 'approved' or 'denied'
            plan: Plan text
            annotations: Exported feedback; appended after a rule unless empty
                or the no-changes placeholder

        Returns:
            Path of {slug}-{status}.md
        """
        if status not in (APPROVED, DENIED):
            raise ValueError(f"status must be '{APPROVED}' or '{DENIED}', got {status!r}")

        content = plan
        if annotations and annotations != NO_CHANGES:
            content += "\n\n---\n\n" + annotations

        return self._write(f"{slug}-{status}.md", content)
