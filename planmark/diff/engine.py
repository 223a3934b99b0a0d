"""
Plan diff engine.

Computes line-level diffs between two plan versions with diff-match-patch's
line mode and groups a removal immediately followed by an addition into a
single "modified" block, so readers see what was replaced rather than an
unrelated delete and insert.
"""

import logging
from typing import List, Tuple

from diff_match_patch import diff_match_patch

from ..models import DiffBlock, DiffBlockType, DiffLine, DiffStats, PlanDiff


def count_lines(text: str) -> int:
    """
    Count lines in a diff chunk.

    A trailing newline ends the last line; it does not start an empty one.
    """
    lines = text.split("\n")
    if lines and lines[-1] == "":
        return len(lines) - 1
    return len(lines)


def _line_changes(old_text: str, new_text: str) -> List[Tuple[int, str]]:
    """Return diff-match-patch (operation, text) tuples where every text is whole lines."""
    dmp = diff_match_patch()
    # No timeout: always compute the minimal diff, never a speedup approximation
    dmp.Diff_Timeout = 0
    old_chars, new_chars, line_array = dmp.diff_linesToChars(old_text, new_text)
    diffs = dmp.diff_main(old_chars, new_chars, False)
    dmp.diff_charsToLines(diffs, line_array)
    return diffs


def compute_diff(old_text: str, new_text: str) -> PlanDiff:
    """
    Compute the diff between two plan versions.

    Args:
        old_text: The earlier plan text
        new_text: The current plan text

    Returns:
        PlanDiff with grouped blocks and line statistics
    """
    if old_text == new_text:
        block = DiffBlock(type=DiffBlockType.UNCHANGED, content=new_text, lines=count_lines(new_text))
        return PlanDiff(blocks=[block], stats=DiffStats())

    changes = _line_changes(old_text, new_text)
    blocks: List[DiffBlock] = []
    stats = DiffStats()

    i = 0
    while i < len(changes):
        operation, text = changes[i]
        following = changes[i + 1] if i + 1 < len(changes) else None

        if operation == diff_match_patch.DIFF_DELETE and following and following[0] == diff_match_patch.DIFF_INSERT:
            added = following[1]
            blocks.append(DiffBlock(
                type=DiffBlockType.MODIFIED,
                content=added,
                old_content=text,
                lines=count_lines(added)
            ))
            stats.modifications += 1
            stats.additions += count_lines(added)
            stats.deletions += count_lines(text)
            i += 2
            continue

        if operation == diff_match_patch.DIFF_INSERT:
            blocks.append(DiffBlock(type=DiffBlockType.ADDED, content=text, lines=count_lines(text)))
            stats.additions += count_lines(text)
        elif operation == diff_match_patch.DIFF_DELETE:
            blocks.append(DiffBlock(type=DiffBlockType.REMOVED, content=text, lines=count_lines(text)))
            stats.deletions += count_lines(text)
        else:
            blocks.append(DiffBlock(type=DiffBlockType.UNCHANGED, content=text, lines=count_lines(text)))
        i += 1

    logging.debug(f"Computed plan diff: {len(blocks)} blocks, {format_badge(stats)}")
    return PlanDiff(blocks=blocks, stats=stats)


def _split_lines(text: str) -> List[str]:
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return lines


def raw_diff_lines(blocks: List[DiffBlock]) -> List[DiffLine]:
    """
    Flatten diff blocks into individual lines for a prefix-style rendering.

    Removed lines carry no line number; added and unchanged lines are numbered
    by their position in the new text. A modified block shows its old lines
    as removed followed by its new lines as added.
    """
    result: List[DiffLine] = []
    line_number = 1

    for block in blocks:
        if block.type is DiffBlockType.MODIFIED and block.old_content:
            for line in _split_lines(block.old_content):
                result.append(DiffLine(type=DiffBlockType.REMOVED, content=line))

        if block.type is DiffBlockType.REMOVED:
            for line in _split_lines(block.content):
                result.append(DiffLine(type=DiffBlockType.REMOVED, content=line))
            continue

        line_type = DiffBlockType.UNCHANGED if block.type is DiffBlockType.UNCHANGED else DiffBlockType.ADDED
        for line in _split_lines(block.content):
            result.append(DiffLine(type=line_type, content=line, line_number=line_number))
            line_number += 1

    return result


def render_raw_diff(blocks: List[DiffBlock]) -> str:
    """Render diff blocks as text with '+ ', '- ' and '  ' line prefixes."""
    prefixes = {
        DiffBlockType.ADDED: "+ ",
        DiffBlockType.REMOVED: "- ",
        DiffBlockType.UNCHANGED: "  ",
    }
    return "\n".join(prefixes[line.type] + line.content for line in raw_diff_lines(blocks))


def format_badge(stats: DiffStats) -> str:
    """Headline change count, e.g. '+3/-1'. Modifications are not part of it."""
    return f"+{stats.additions}/-{stats.deletions}"


def has_changes(stats: DiffStats) -> bool:
    """Whether a diff changed anything at all."""
    return stats.additions > 0 or stats.deletions > 0 or stats.modifications > 0
