"""
Tests for feedback report export.
"""

import unittest

from planmark.diff import compute_diff
from planmark.export import NO_CHANGES, export_report, summarize_diff
from planmark.models import Annotation, AnnotationType, DiffStats


def make(annotation_type, target_text="", note=None, author=None, created_at=0.0, orphaned=False):
    return Annotation(
        id=f"{annotation_type}-{created_at}",
        type=annotation_type,
        target_text=target_text,
        note=note,
        author=author,
        created_at=created_at,
        orphaned=orphaned
    )


class TestExportReport(unittest.TestCase):
    """Test the rendered feedback report."""

    def test_no_annotations(self):
        """Test the placeholder when there is nothing to report."""
        self.assertEqual(export_report([]), NO_CHANGES)

    def test_no_annotations_with_diff(self):
        """Test the diff summary stands in for an empty report."""
        report = export_report([], compute_diff("a\n", "a\nb\n"))

        self.assertEqual(report, "Changes since the previous version: +1/-0 lines, 0 modified sections.")

    def test_header_and_footer(self):
        """Test report framing and the feedback count."""
        report = export_report([make(AnnotationType.GLOBAL_COMMENT, note="Ship it")])

        self.assertTrue(report.startswith("# Plan Feedback\n\nI've reviewed this plan and have 1 piece of feedback:"))
        self.assertTrue(report.endswith("---"))
        self.assertIn("## 1. General feedback about the plan\n\n> Ship it", report)

    def test_each_annotation_type(self):
        """Test the section rendered for every annotation type."""
        annotations = [
            make(AnnotationType.DELETION, "old step", created_at=1),
            make(AnnotationType.REPLACEMENT, "sessions", note="JWTs", created_at=2),
            make(AnnotationType.INSERTION, "step two", note="step two and a half", created_at=3),
            make(AnnotationType.COMMENT, "use redis\nfor caching", note="Why redis?", created_at=4),
        ]
        report = export_report(annotations)

        self.assertIn("have 4 pieces of feedback", report)
        self.assertIn("## 1. Remove this\n\n```\nold step\n```", report)
        self.assertIn("## 2. Change this\n\nFrom:\n```\nsessions\n```\n\nTo:\n```\nJWTs\n```", report)
        self.assertIn("## 3. Add this\n\nAfter:\n```\nstep two\n```\n\nInsert:\n```\nstep two and a half\n```", report)
        self.assertIn('## 4. Feedback on: "use redis"\n\n```\nuse redis\nfor caching\n```\n\n> Why redis?', report)

    def test_ordered_by_creation_time(self):
        """Test sections follow created_at, not input order."""
        report = export_report([
            make(AnnotationType.GLOBAL_COMMENT, note="second", created_at=2),
            make(AnnotationType.GLOBAL_COMMENT, note="first", created_at=1),
        ])

        self.assertLess(report.index("> first"), report.index("> second"))

    def test_deletion_note_author_and_orphan(self):
        """Test optional details on a section."""
        report = export_report([
            make(AnnotationType.DELETION, "gone", note="line one\n\nline two", author="kim", orphaned=True)
        ])

        self.assertIn("> line one\n>\n> line two", report)
        self.assertIn("(This text was not found in the current version of the plan.)", report)
        self.assertIn("-- kim", report)

    def test_diff_section(self):
        """Test the changes section is appended before the closing rule."""
        diff = compute_diff("line1\nline2\n", "line1\nline2-edited\n")
        report = export_report([make(AnnotationType.GLOBAL_COMMENT, note="ok")], diff)

        self.assertIn(
            "## Changes since previous version\n\n"
            "Changes since the previous version: +1/-1 lines, 1 modified section.\n\n---",
            report
        )


class TestSummarizeDiff(unittest.TestCase):
    """Test the one-line diff summary."""

    def test_no_changes(self):
        self.assertEqual(summarize_diff(DiffStats()), "No changes since the previous version.")

    def test_plural_sections(self):
        summary = summarize_diff(DiffStats(additions=4, deletions=2, modifications=2))
        self.assertEqual(summary, "Changes since the previous version: +4/-2 lines, 2 modified sections.")


if __name__ == '__main__':
    unittest.main(verbosity=2)
