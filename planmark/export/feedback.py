"""
Feedback report export.

Renders annotations (and optionally a diff summary) as heading-delimited plain
text that is handed verbatim to the agent that wrote the plan.
"""

from typing import List, Optional, Sequence

from ..annotations import sort_for_display
from ..diff import format_badge, has_changes
from ..models import Annotation, AnnotationType, DiffStats, PlanDiff


NO_CHANGES = "No changes detected."


def _fenced(text: str) -> List[str]:
    return ["```", text, "```"]


def _quoted(text: str) -> List[str]:
    return [f"> {line}" if line else ">" for line in text.split("\n")]


def _render_annotation(index: int, annotation: Annotation) -> List[str]:
    kind = annotation.type
    target = annotation.target_text
    note = annotation.note or ""

    if kind is AnnotationType.DELETION:
        lines = [f"## {index}. Remove this", ""] + _fenced(target)
        if note:
            lines += [""] + _quoted(note)
    elif kind is AnnotationType.REPLACEMENT:
        lines = [f"## {index}. Change this", "", "From:"] + _fenced(target) + ["", "To:"] + _fenced(note)
    elif kind is AnnotationType.INSERTION:
        lines = [f"## {index}. Add this", "", "After:"] + _fenced(target) + ["", "Insert:"] + _fenced(note)
    elif kind is AnnotationType.COMMENT and target:
        first_line = target.split("\n")[0]
        lines = [f'## {index}. Feedback on: "{first_line}"', ""]
        if "\n" in target:
            lines += _fenced(target) + [""]
        lines += _quoted(note)
    else:
        lines = [f"## {index}. General feedback about the plan", ""] + _quoted(note)

    if annotation.orphaned:
        lines += ["", "(This text was not found in the current version of the plan.)"]
    if annotation.author:
        lines += ["", f"-- {annotation.author}"]
    return lines


def summarize_diff(stats: DiffStats) -> str:
    """
    Describe a diff in one line, e.g. 'Changes since the previous version: +4/-2 lines, 1 modified section.'
    """
    if not has_changes(stats):
        return "No changes since the previous version."
    sections = "section" if stats.modifications == 1 else "sections"
    return (
        f"Changes since the previous version: {format_badge(stats)} lines, "
        f"{stats.modifications} modified {sections}."
    )


def export_report(annotations: Sequence[Annotation], diff: Optional[PlanDiff] = None) -> str:
    """
    Render feedback as structured plain text.

    Args:
        annotations: Annotations in any order; they are presented in display order
        diff: Diff against the previous plan version, if there is one

    Returns:
        The report. With no annotations it is the diff summary, or
        'No changes detected.' when there is no diff either.
    """
    if not annotations:
        return summarize_diff(diff.stats) if diff is not None else NO_CHANGES

    ordered = sort_for_display(annotations)
    count = len(ordered)
    noun = "piece" if count == 1 else "pieces"

    lines = ["# Plan Feedback", "", f"I've reviewed this plan and have {count} {noun} of feedback:", ""]
    for index, annotation in enumerate(ordered, start=1):
        lines += _render_annotation(index, annotation)
        lines.append("")

    if diff is not None:
        lines += ["## Changes since previous version", "", summarize_diff(diff.stats), ""]

    lines.append("---")
    return "\n".join(lines)
