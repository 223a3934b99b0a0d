"""Feedback report export."""

from .feedback import export_report, summarize_diff, NO_CHANGES

__all__ = ["export_report", "summarize_diff", "NO_CHANGES"]
