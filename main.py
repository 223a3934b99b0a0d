#!/usr/bin/env python3
"""
planmark - Plan review toolkit

Command line entry point. Wires the parser, version history, diff engine,
share codec and feedback exporter together for use from a terminal.
"""

import logging
import sys
import argparse
from pathlib import Path
from typing import List, Optional

from pydantic import TypeAdapter

from planmark.annotations import reconcile
from planmark.config import config
from planmark.diff import compute_diff, format_badge, render_raw_diff
from planmark.errors import PlanmarkError
from planmark.export import export_report
from planmark.models import Annotation, TocItem
from planmark.parser import parse, build_outline
from planmark.sharing import encode, build_share_url, extract_token, try_decode
from planmark.versioning import VersionManager, PlanArchive, detect_project_name, generate_slug


ANNOTATION_LIST = TypeAdapter(List[Annotation])


def setup_logging():
    """Configure logging for the application."""
    level = getattr(logging, config.get("logging.level", "INFO").upper())
    format_str = config.get("logging.format", "%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    log_file = config.log_filename

    logging.basicConfig(
        level=level,
        format=format_str,
        handlers=[
            logging.StreamHandler(sys.stderr),
            logging.FileHandler(log_file)
        ]
    )


def read_plan(path: str) -> str:
    """Read a plan file as UTF-8 text."""
    with open(path, 'r', encoding='utf-8', newline='') as f:
        return f.read()


def load_annotations(path: Optional[str]) -> List[Annotation]:
    """Load a JSON list of annotations, or nothing when no file is given."""
    if not path:
        return []
    return ANNOTATION_LIST.validate_json(Path(path).read_bytes())


def plan_identity(plan_path: str, text: str, project: Optional[str]) -> tuple:
    """Resolve (project, slug) for a plan file."""
    if not project:
        project = detect_project_name(Path(plan_path).resolve().parent)
    return project, generate_slug(text)


def cmd_save(args) -> int:
    text = read_plan(args.plan)
    project, slug = plan_identity(args.plan, text, args.project)
    manager = VersionManager(args.history_dir)

    result = manager.save_version(project, slug, text)
    state = "new version" if result.is_new else "unchanged"
    print(f"{project}/{slug} v{result.version} ({state})")

    previous = manager.get_previous_content(project, slug, result.version)
    if previous is not None:
        print(f"Changes since v{result.version - 1}: {format_badge(compute_diff(previous, text).stats)}")
    return 0


def cmd_diff(args) -> int:
    text = read_plan(args.plan)
    project, slug = plan_identity(args.plan, text, args.project)
    manager = VersionManager(args.history_dir)

    if args.against:
        base = manager.get_version(project, slug, args.against)
        label = f"v{args.against}"
    else:
        latest = manager.get_latest_version(project, slug)
        base = latest.content if latest else None
        label = f"v{latest.version}" if latest else ""

    if base is None:
        print("No previous version to diff against.")
        return 1

    diff = compute_diff(base, text)
    print(f"Diff against {label}: {format_badge(diff.stats)} ({diff.stats.modifications} modified)")
    if args.raw:
        print(render_raw_diff(diff.blocks))
    return 0


def cmd_history(args) -> int:
    manager = VersionManager(args.history_dir)
    project = args.project or detect_project_name()

    if args.slug:
        for entry in manager.list_versions(project, args.slug):
            stamp = entry.timestamp.isoformat() if entry.timestamp else "-"
            print(f"v{entry.version}\t{stamp}")
        return 0

    for plan in manager.list_project_plans(project):
        stamp = plan.last_modified.isoformat() if plan.last_modified else "-"
        print(f"{plan.slug}\t{plan.versions} versions\t{stamp}")
    return 0


def _print_outline(items: List[TocItem], depth: int = 0) -> None:
    for item in items:
        print(f"{'  ' * depth}- {item.content}")
        _print_outline(item.children, depth + 1)


def cmd_outline(args) -> int:
    _print_outline(build_outline(parse(read_plan(args.plan))))
    return 0


def cmd_share(args) -> int:
    token = encode(read_plan(args.plan), load_annotations(args.annotations))
    print(build_share_url(token, args.base_url))
    return 0


def cmd_restore(args) -> int:
    payload = try_decode(extract_token(args.token))
    if payload is None:
        print("Nothing to restore: the share link is damaged or incomplete.")
        return 1

    document = read_plan(args.plan) if args.plan else payload.document
    annotations = payload.to_annotations(parse(document))
    orphaned = sum(1 for a in annotations if a.orphaned)
    if orphaned:
        logging.warning(f"{orphaned} shared annotations could not be located in the plan")

    print(export_report(annotations))
    return 0


def cmd_export(args) -> int:
    text = read_plan(args.plan)
    annotations = reconcile(load_annotations(args.annotations), parse(text))

    diff = None
    if args.with_diff:
        project, slug = plan_identity(args.plan, text, args.project)
        manager = VersionManager(args.history_dir)
        latest = manager.get_latest_version(project, slug)
        base = latest.content if latest else None
        if latest is not None and base == text:
            # The plan was already saved; compare with the version before it
            base = manager.get_previous_content(project, slug, latest.version)
        if base is not None:
            diff = compute_diff(base, text)

    report = export_report(annotations, diff)
    if args.status:
        archive = PlanArchive(args.plans_dir)
        path = archive.save_final_snapshot(generate_slug(text), args.status, text, report)
        logging.info(f"Final snapshot written to {path}")
    print(report)
    return 0


def parse_arguments(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="planmark - annotate, version, diff and share Markdown plans",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py save plan.md                          # Store plan.md as the next version
  python main.py diff plan.md --raw                    # Diff plan.md against the latest stored version
  python main.py history --slug 2026-10-17-add-auth    # List versions of one plan
  python main.py share plan.md --annotations notes.json
  python main.py restore 'https://share.planmark.dev/#...'
        """
    )
    parser.add_argument("--history-dir", type=str, default=None, help="Version history root (default from config)")
    parser.add_argument("--version", action="version", version="planmark 0.1.0")

    subparsers = parser.add_subparsers(dest="command", required=True)

    save = subparsers.add_parser("save", help="Save a plan as a new version")
    save.add_argument("plan")
    save.add_argument("--project", type=str, help="Project name (default: detected from git)")
    save.set_defaults(handler=cmd_save)

    diff = subparsers.add_parser("diff", help="Diff a plan against a stored version")
    diff.add_argument("plan")
    diff.add_argument("--project", type=str)
    diff.add_argument("--against", type=int, help="Version to compare with (default: latest)")
    diff.add_argument("--raw", action="store_true", help="Print the line diff")
    diff.set_defaults(handler=cmd_diff)

    history = subparsers.add_parser("history", help="List plans or versions")
    history.add_argument("--project", type=str)
    history.add_argument("--slug", type=str, help="List versions of this plan")
    history.set_defaults(handler=cmd_history)

    outline = subparsers.add_parser("outline", help="Print a plan's heading outline")
    outline.add_argument("plan")
    outline.set_defaults(handler=cmd_outline)

    share = subparsers.add_parser("share", help="Create a share link")
    share.add_argument("plan")
    share.add_argument("--annotations", type=str, help="JSON file with a list of annotations")
    share.add_argument("--base-url", type=str, default=None)
    share.set_defaults(handler=cmd_share)

    restore = subparsers.add_parser("restore", help="Restore annotations from a share link")
    restore.add_argument("token", help="Share URL or bare token")
    restore.add_argument("--plan", type=str, help="Local plan to relocate annotations against")
    restore.set_defaults(handler=cmd_restore)

    export = subparsers.add_parser("export", help="Render a feedback report")
    export.add_argument("plan")
    export.add_argument("--annotations", type=str)
    export.add_argument("--project", type=str)
    export.add_argument("--with-diff", action="store_true", help="Append a summary of changes since the previous version")
    export.add_argument("--status", choices=["approved", "denied"], help="Also archive a final snapshot")
    export.add_argument("--plans-dir", type=str, default=None)
    export.set_defaults(handler=cmd_export)

    return parser.parse_args(argv)


def main(argv=None) -> int:
    """Main entry point."""
    args = parse_arguments(argv)
    setup_logging()

    try:
        return args.handler(args)
    except (PlanmarkError, OSError, ValueError) as e:
        logging.error(f"{args.command} failed: {e}")
        print(f"\n{args.command} failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
