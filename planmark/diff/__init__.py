"""Line-level plan diffs."""

from .engine import compute_diff, count_lines, raw_diff_lines, render_raw_diff, format_badge, has_changes

__all__ = [
    "compute_diff",
    "count_lines",
    "raw_diff_lines",
    "render_raw_diff",
    "format_badge",
    "has_changes"
]
