"""
End-to-end tests for the command line entry point.
"""

import json

import pytest

import main
from planmark.versioning import generate_slug


PLAN_V1 = "# Add Auth\n\n## Approach\n\nUse sessions for login.\n\n- [ ] Add logout endpoint\n"
PLAN_V2 = "# Add Auth\n\n## Approach\n\nUse JWTs for login.\n\n- [ ] Add logout endpoint\n"


@pytest.fixture
def workspace(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    plan = tmp_path / "plan.md"
    plan.write_text(PLAN_V1, encoding="utf-8")
    notes = tmp_path / "notes.json"
    notes.write_text(json.dumps([
        {"id": "a1", "type": "comment", "target_text": "login", "note": "Which provider?", "created_at": 1.0},
        {"id": "a2", "type": "global-comment", "note": "Solid plan", "created_at": 2.0},
    ]), encoding="utf-8")
    return tmp_path


def run(workspace, *args):
    return main.main(["--history-dir", str(workspace / "history")] + list(args))


def test_save_and_diff(workspace, capsys):
    plan = workspace / "plan.md"
    slug = generate_slug(PLAN_V1)

    assert run(workspace, "save", str(plan), "--project", "demo") == 0
    assert run(workspace, "save", str(plan), "--project", "demo") == 0
    plan.write_text(PLAN_V2, encoding="utf-8")
    assert run(workspace, "save", str(plan), "--project", "demo") == 0

    out = capsys.readouterr().out
    assert f"demo/{slug} v1 (new version)" in out
    assert f"demo/{slug} v1 (unchanged)" in out
    assert f"demo/{slug} v2 (new version)" in out
    assert "Changes since v1: +1/-1" in out

    assert run(workspace, "diff", str(plan), "--project", "demo", "--against", "1", "--raw") == 0
    out = capsys.readouterr().out
    assert "Diff against v1: +1/-1 (1 modified)" in out
    assert "- Use sessions for login." in out
    assert "+ Use JWTs for login." in out


def test_diff_without_history(workspace, capsys):
    assert run(workspace, "diff", str(workspace / "plan.md"), "--project", "demo") == 1
    assert "No previous version" in capsys.readouterr().out


def test_history(workspace, capsys):
    plan = workspace / "plan.md"
    run(workspace, "save", str(plan), "--project", "demo")
    capsys.readouterr()

    assert run(workspace, "history", "--project", "demo") == 0
    assert f"{generate_slug(PLAN_V1)}\t1 versions" in capsys.readouterr().out

    assert run(workspace, "history", "--project", "demo", "--slug", generate_slug(PLAN_V1)) == 0
    assert capsys.readouterr().out.startswith("v1\t")


def test_outline(workspace, capsys):
    assert run(workspace, "outline", str(workspace / "plan.md")) == 0
    assert capsys.readouterr().out == "- Add Auth\n  - Approach\n"


def test_share_and_restore(workspace, capsys):
    plan = workspace / "plan.md"
    assert run(workspace, "share", str(plan), "--annotations", str(workspace / "notes.json"),
               "--base-url", "https://example.test/") == 0
    url = capsys.readouterr().out.strip()
    assert url.startswith("https://example.test/#")

    assert run(workspace, "restore", url) == 0
    report = capsys.readouterr().out
    assert 'Feedback on: "login"' in report
    assert "> Solid plan" in report


def test_restore_damaged_link(workspace, capsys):
    assert run(workspace, "restore", "https://example.test/#not*valid") == 1
    assert "Nothing to restore" in capsys.readouterr().out


def test_export_with_status(workspace, capsys):
    plans_dir = workspace / "plans"
    assert run(workspace, "export", str(workspace / "plan.md"), "--annotations", str(workspace / "notes.json"),
               "--status", "approved", "--plans-dir", str(plans_dir)) == 0

    report = capsys.readouterr().out
    assert "I've reviewed this plan and have 2 pieces of feedback" in report

    snapshot = (plans_dir / f"{generate_slug(PLAN_V1)}-approved.md").read_text(encoding="utf-8")
    assert snapshot.startswith(PLAN_V1 + "\n\n---\n\n# Plan Feedback")


def test_export_with_diff(workspace, capsys):
    plan = workspace / "plan.md"
    run(workspace, "save", str(plan), "--project", "demo")
    plan.write_text(PLAN_V2, encoding="utf-8")
    run(workspace, "save", str(plan), "--project", "demo")
    capsys.readouterr()

    assert run(workspace, "export", str(plan), "--project", "demo", "--with-diff") == 0
    assert "Changes since the previous version: +1/-1 lines, 1 modified section." in capsys.readouterr().out


def test_invalid_project_fails_cleanly(workspace, capsys):
    assert run(workspace, "save", str(workspace / "plan.md"), "--project", "..") == 1
    assert "save failed" in capsys.readouterr().out
