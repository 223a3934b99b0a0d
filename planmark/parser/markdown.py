"""
Markdown block parser for planmark.

This module splits plan text written in a constrained Markdown subset into
typed Block objects. Parsing is line-oriented: each physical line either
starts a block, continues the current one, or (when blank) ends it.
"""

import re
from typing import List, Optional

from ..models import Block, BlockKind
from .base import BaseParser


HEADING_PATTERN = re.compile(r'^(#{1,6})\s+(.*)$')
FENCE_OPEN_PATTERN = re.compile(r'^`{3,}\s*([^\s`]*)')
FENCE_CLOSE_PATTERN = re.compile(r'^`{3,}\s*$')
RULE_PATTERN = re.compile(r'^([-*_])(?:\s*\1){2,}$')
LIST_PATTERN = re.compile(r'^(\s*)([-*+]|\d+[.)])\s+(.*)$')
TASK_PATTERN = re.compile(r'^\[([ xX])\](?:\s+(.*))?$')
TABLE_SEPARATOR_PATTERN = re.compile(r'^\|?\s*:?-+:?\s*(?:\|\s*:?-+:?\s*)*\|?$')

TAB_WIDTH = 4
INDENT_PER_LEVEL = 2


class MarkdownParser(BaseParser):
    """
    Parser for the Markdown subset plans are written in.

    Recognizes headings, fenced code, blockquotes, list items, horizontal
    rules, pipe tables and paragraphs. Anything else is paragraph text.
    """

    def parse(self, text: str) -> List[Block]:
        """
        Split plan text into blocks.

        Args:
            text: Raw Markdown text

        Returns:
            Blocks in document order, with ids 'block-0', 'block-1', ...
        """
        lines = text.replace('\r\n', '\n').split('\n')
        blocks: List[Block] = []
        paragraph: List[str] = []
        paragraph_start = 0

        def emit(kind: BlockKind, content: str, start_line: int, **extra) -> None:
            order = len(blocks)
            blocks.append(Block(
                id=f"block-{order}",
                kind=kind,
                content=content,
                order=order,
                start_line=start_line,
                **extra
            ))

        def flush_paragraph() -> None:
            nonlocal paragraph
            if paragraph:
                emit(BlockKind.PARAGRAPH, '\n'.join(paragraph), paragraph_start)
                paragraph = []

        i = 0
        while i < len(lines):
            line = lines[i]
            stripped = line.strip()

            if not stripped:
                flush_paragraph()
                i += 1
                continue

            if not self._starts_block(lines, i):
                if not paragraph:
                    paragraph_start = i + 1
                paragraph.append(line)
                i += 1
                continue

            flush_paragraph()

            heading = HEADING_PATTERN.match(stripped)
            if heading:
                emit(BlockKind.HEADING, heading.group(2).strip(), i + 1, level=len(heading.group(1)))
                i += 1
                continue

            fence = FENCE_OPEN_PATTERN.match(stripped)
            close = self._find_closing_fence(lines, i) if fence else None
            if fence and close is not None:
                language = fence.group(1) or None
                emit(BlockKind.CODE, '\n'.join(lines[i + 1:close]), i + 1, language=language)
                i = close + 1
                continue

            if stripped.startswith('>'):
                start = i
                quoted = []
                while i < len(lines) and lines[i].strip().startswith('>'):
                    quoted.append(self._strip_quote_marker(lines[i]))
                    i += 1
                emit(BlockKind.BLOCKQUOTE, '\n'.join(quoted), start + 1)
                continue

            if RULE_PATTERN.match(stripped):
                emit(BlockKind.HORIZONTAL_RULE, '', i + 1)
                i += 1
                continue

            item = LIST_PATTERN.match(line)
            if item:
                indent = len(item.group(1).expandtabs(TAB_WIDTH))
                content = item.group(3)
                checked = None
                task = TASK_PATTERN.match(content)
                if task:
                    checked = task.group(1) != ' '
                    content = task.group(2) or ''
                emit(BlockKind.LIST_ITEM, content, i + 1, level=indent // INDENT_PER_LEVEL, checked=checked)
                i += 1
                continue

            # Only a table start is left
            start = i
            while i < len(lines) and lines[i].strip() and '|' in lines[i]:
                i += 1
            emit(BlockKind.TABLE, '\n'.join(lines[start:i]), start + 1)

        flush_paragraph()
        return blocks

    def _starts_block(self, lines: List[str], index: int) -> bool:
        """Check whether the line at index opens a non-paragraph block."""
        line = lines[index]
        stripped = line.strip()

        if HEADING_PATTERN.match(stripped):
            return True
        if FENCE_OPEN_PATTERN.match(stripped) and self._find_closing_fence(lines, index) is not None:
            return True
        if stripped.startswith('>'):
            return True
        if RULE_PATTERN.match(stripped):
            return True
        if LIST_PATTERN.match(line):
            return True
        return self._is_table_start(lines, index)

    @staticmethod
    def _find_closing_fence(lines: List[str], index: int) -> Optional[int]:
        """Return the index of the fence closing the one opened at index, if any."""
        for j in range(index + 1, len(lines)):
            if FENCE_CLOSE_PATTERN.match(lines[j].strip()):
                return j
        return None

    @staticmethod
    def _is_table_start(lines: List[str], index: int) -> bool:
        if '|' not in lines[index] or index + 1 >= len(lines):
            return False
        separator = lines[index + 1].strip()
        return '|' in separator and bool(TABLE_SEPARATOR_PATTERN.match(separator))

    @staticmethod
    def _strip_quote_marker(line: str) -> str:
        body = line.lstrip()[1:]
        return body[1:] if body.startswith(' ') else body


def parse(text: str) -> List[Block]:
    """
    Parse plan text into blocks with the default Markdown parser.

    Args:
        text: Raw Markdown text

    Returns:
        List of Block objects in document order
    """
    return MarkdownParser().parse(text)
