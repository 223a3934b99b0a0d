"""
Plan version history for planmark.

This module stores successive full-text snapshots of a plan under
{history_dir}/{project}/{slug}/NNN.md, assigns increasing version numbers and
skips saves whose content matches the latest version.

The read-compare-write sequence in save_version takes no lock: one local
process is expected to drive plan submission at a time, and two concurrent
writers to the same plan can produce a duplicate version.
"""

import logging
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Tuple, Union

from ..config import config
from ..errors import InvalidIdentity
from ..models import PlanVersion, ProjectPlan, SaveResult, VersionEntry


VERSION_FILE_PATTERN = re.compile(r'^(\d+)\.md$')
VERSION_PADDING = 3


def version_filename(version: int) -> str:
    """File name of a version, e.g. 7 -> '007.md'."""
    return f"{version:0{VERSION_PADDING}d}.md"


def _check_segment(field: str, value: str) -> str:
    if not value or value in (".", "..") or "/" in value or "\\" in value:
        raise InvalidIdentity(field, value)
    return value


def _read_text(path: Path) -> str:
    # newline='' keeps stored content byte-for-byte
    with open(path, 'r', encoding='utf-8', newline='') as f:
        return f.read()


def _mtime(path: Path) -> Optional[datetime]:
    try:
        return datetime.fromtimestamp(path.stat().st_mtime, tz=timezone.utc)
    except OSError:
        return None


class VersionManager:
    """
    Manages the on-disk version history of plans.

    Provides functionality to save deduplicated versions, read them back and
    list the versions of a plan or the plans of a project.
    """

    def __init__(self, history_dir: Optional[Union[str, Path]] = None):
        """
        Initialize the version manager.

        Args:
            history_dir: Root of the history tree (default: paths.history_dir from config)
        """
        self.history_dir = Path(history_dir).expanduser() if history_dir else config.history_directory
        logging.info(f"Initialized VersionManager for: {self.history_dir}")

    def _plan_dir(self, project: str, slug: str) -> Path:
        return self.history_dir / _check_segment("project", project) / _check_segment("slug", slug)

    def _scan(self, plan_dir: Path) -> List[Tuple[int, Path]]:
        """List (version, path) pairs in a plan directory, ascending."""
        try:
            entries = list(plan_dir.iterdir())
        except OSError:
            return []

        versions = []
        for entry in entries:
            match = VERSION_FILE_PATTERN.match(entry.name)
            if match and entry.is_file():
                versions.append((int(match.group(1)), entry))
        return sorted(versions)

    def save_version(self, project: str, slug: str, content: str) -> SaveResult:
        """
        Save plan content as the next version.

        Args:
            project: Sanitized project name
            slug: Sanitized plan slug
            content: Full plan text

        Returns:
            SaveResult with the version number; is_new is False when the
            latest stored version already had identical content

        Raises:
            InvalidIdentity: If project or slug is not a plain path segment
        """
        plan_dir = self._plan_dir(project, slug)
        plan_dir.mkdir(parents=True, exist_ok=True)

        existing = self._scan(plan_dir)
        next_version = existing[-1][0] + 1 if existing else 1

        if existing:
            latest_version, latest_path = existing[-1]
            try:
                if latest_path.read_bytes() == content.encode('utf-8'):
                    logging.info(f"{project}/{slug} unchanged, keeping version {latest_version}")
                    return SaveResult(version=latest_version, path=str(latest_path), is_new=False)
            except OSError as e:
                logging.warning(f"Could not read {latest_path} for comparison: {e}")

        file_path = plan_dir / version_filename(next_version)
        with open(file_path, 'w', encoding='utf-8', newline='') as f:
            f.write(content)

        logging.info(f"Saved {project}/{slug} version {next_version}")
        return SaveResult(version=next_version, path=str(file_path), is_new=True)

    def get_version(self, project: str, slug: str, version: int) -> Optional[str]:
        """
        Read one version's content.

        Returns:
            The stored text, or None if the version does not exist or cannot be read
        """
        path = self._find(project, slug, version)
        if path is None:
            return None
        try:
            return _read_text(path)
        except (OSError, UnicodeDecodeError) as e:
            logging.warning(f"Failed to read {path}: {e}")
            return None

    def _find(self, project: str, slug: str, version: int) -> Optional[Path]:
        try:
            plan_dir = self._plan_dir(project, slug)
        except InvalidIdentity:
            return None
        for number, path in self._scan(plan_dir):
            if number == version:
                return path
        return None

    def get_plan_version(self, project: str, slug: str, version: int) -> Optional[PlanVersion]:
        """Read one version as a PlanVersion record, or None."""
        content = self.get_version(project, slug, version)
        if content is None:
            return None
        path = self._find(project, slug, version)
        return PlanVersion(
            project=project,
            slug=slug,
            version=version,
            content=content,
            timestamp=_mtime(path) if path else None
        )

    def get_latest_version(self, project: str, slug: str) -> Optional[PlanVersion]:
        """Return the highest-numbered version of a plan, or None if it has no history."""
        entries = self.list_versions(project, slug)
        if not entries:
            return None
        return self.get_plan_version(project, slug, entries[-1].version)

    def get_previous_content(self, project: str, slug: str, version: int) -> Optional[str]:
        """
        Content of the version before `version`, the default base to diff against.

        Returns:
            None for version 1 or when the previous version is missing
        """
        if version <= 1:
            return None
        return self.get_version(project, slug, version - 1)

    def list_versions(self, project: str, slug: str) -> List[VersionEntry]:
        """
        List the versions of a plan.

        Returns:
            Entries ascending by version number (empty when there is no history)
        """
        try:
            plan_dir = self._plan_dir(project, slug)
        except InvalidIdentity:
            return []
        return [VersionEntry(version=number, timestamp=_mtime(path)) for number, path in self._scan(plan_dir)]

    def count_versions(self, project: str, slug: str) -> int:
        """Number of stored versions of a plan (0 when there is no history)."""
        return len(self.list_versions(project, slug))

    def list_project_plans(self, project: str) -> List[ProjectPlan]:
        """
        List every plan with history in a project.

        Args:
            project: Sanitized project name

        Returns:
            Plans sorted by most recently modified first; slug directories
            without version files are skipped
        """
        try:
            project_dir = self.history_dir / _check_segment("project", project)
            slug_dirs = [entry for entry in project_dir.iterdir() if entry.is_dir()]
        except (InvalidIdentity, OSError):
            return []

        plans = []
        for slug_dir in slug_dirs:
            versions = self._scan(slug_dir)
            if not versions:
                continue
            mtimes = [m for m in (_mtime(path) for _, path in versions) if m is not None]
            plans.append(ProjectPlan(
                slug=slug_dir.name,
                versions=len(versions),
                last_modified=max(mtimes) if mtimes else None
            ))

        epoch = datetime.fromtimestamp(0, tz=timezone.utc)
        return sorted(plans, key=lambda p: p.last_modified or epoch, reverse=True)
