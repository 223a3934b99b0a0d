"""
Plan identity derivation.

A plan's history is keyed by (project, slug). The project comes from the
enclosing git repository (or directory) name; the slug from the current date plus
the plan's first heading. Both are sanitized to lowercase alphanumerics
and hyphens. The scheme is coarse on purpose: two unrelated plans sharing a
first heading on the same day share a history.
"""

import logging
import re
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Optional, Union

try:
    from git import Repo  # type: ignore
    from git.exc import InvalidGitRepositoryError, NoSuchPathError  # type: ignore
except ImportError:
    # GitPython refuses to import when no git executable is installed
    Repo = None  # type: ignore
    InvalidGitRepositoryError = NoSuchPathError = Exception  # type: ignore

from ..config import config


UNKNOWN_PROJECT = "_unknown"
FIRST_HEADING_PATTERN = re.compile(r'^#\s+(.+)$', re.MULTILINE)


def sanitize_tag(name: Optional[str], max_length: Optional[int] = None) -> Optional[str]:
    """
    Reduce a free-form name to a lowercase, hyphenated tag.

    Args:
        name: The text to sanitize (a heading, a directory name, ...)
        max_length: Cap on the result length (defaults to slug.max_length)

    Returns:
        The tag, or None when fewer than slug.min_length characters survive

    Examples:
        sanitize_tag("Add OAuth Login!")  # "add-oauth-login"
        sanitize_tag("my_repo")           # "my-repo"
    """
    if not name or not isinstance(name, str):
        return None
    if max_length is None:
        max_length = config.slug_max_length

    tag = name.lower().strip()
    tag = re.sub(r'[\s_]+', '-', tag)
    tag = re.sub(r'[^a-z0-9-]', '', tag)
    tag = re.sub(r'-+', '-', tag)
    tag = tag.strip('-')[:max_length]

    return tag if len(tag) >= config.slug_min_length else None


def extract_first_heading(text: str) -> Optional[str]:
    """Return the text of the first level-1 heading, if any."""
    match = FIRST_HEADING_PATTERN.search(text)
    if not match:
        return None
    return match.group(1).strip()


def generate_slug(text: str, today: Optional[date] = None) -> str:
    """
    Derive the history slug for a plan.

    Args:
        text: Plan text
        today: Date to stamp the slug with (defaults to the current UTC date)

    Returns:
        '{YYYY-MM-DD}-{heading-tag}', or '{YYYY-MM-DD}-{fallback}' when the plan
        has no usable heading
    """
    if today is None:
        today = datetime.now(timezone.utc).date()

    heading = extract_first_heading(text)
    tag = sanitize_tag(heading) if heading else None
    return f"{today.isoformat()}-{tag or config.slug_fallback}"


def detect_project_name(path: Optional[Union[str, Path]] = None) -> str:
    """
    Name the project a plan belongs to.

    Uses the working tree of the git repository containing `path` (searching
    parent directories); outside a repository, the directory itself.

    Args:
        path: Directory to start from (defaults to the current directory)

    Returns:
        Sanitized project name, or '_unknown' when nothing usable remains
    """
    start = Path(path) if path is not None else Path.cwd()

    if Repo is None:
        logging.debug("GitPython unavailable, naming project after its directory")
        return sanitize_tag(start.resolve().name) or UNKNOWN_PROJECT

    try:
        repo = Repo(start, search_parent_directories=True)
        if repo.working_tree_dir:
            return sanitize_tag(Path(repo.working_tree_dir).name) or UNKNOWN_PROJECT
    except (InvalidGitRepositoryError, NoSuchPathError):
        logging.debug(f"No git repository at {start}, using directory name")

    return sanitize_tag(start.resolve().name) or UNKNOWN_PROJECT
