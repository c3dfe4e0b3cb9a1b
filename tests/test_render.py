from taskmaster.engine.render import render_task_detail, render_task_list, render_validation
from taskmaster.engine.validate import ValidationIssue, ValidationResult


def test_detail_box_has_fixed_width(make_task, monkeypatch):
    monkeypatch.setenv("COLUMNS", "60")
    task = make_task(
        "link_00000001",
        deps=["setup_00000002"],
        title="Follow the link",
        description="https://example.com/" + "a" * 120 + "\nshort line",
    )

    out = render_task_detail(task, color=False)

    lines = out.splitlines()
    assert all(len(ln) == 60 for ln in lines)
    assert "| id: link_00000001" in out
    assert "dependencies: setup_00000002" in out


def test_detail_box_caps_width_at_80(make_task, monkeypatch):
    monkeypatch.setenv("COLUMNS", "200")

    out = render_task_detail(make_task("wide_00000001"), color=False)

    assert {len(ln) for ln in out.splitlines()} == {80}


def test_task_list(make_task):
    done = make_task("a_00000001", "high", done=True, description="first line\nsecond line")
    todo = make_task("b_00000002", "low", deps=["a_00000001"])

    out = render_task_list([done, todo], color=False)

    assert out.splitlines() == [
        "# Tasks (2)",
        "",
        "[x] a 00000001 (high) id: a_00000001",
        "    first line",
        "[ ] b 00000002 (low) id: b_00000002",
        "    Work on b_00000002",
        "    depends on: a_00000001",
    ]


def test_empty_task_list():
    assert render_task_list([], color=False) == "No tasks found."


def test_validation_report():
    ok = ValidationResult(path="main.md", tasks=[], issues=[])
    bad = ValidationResult(
        path="main.md",
        tasks=[],
        issues=[ValidationIssue(code="dependency_unresolved", message="x depends on ghost")],
    )

    assert render_validation(ok) == "main.md: ok (0 tasks)"
    assert render_validation(bad) == "main.md\n  - dependency_unresolved: x depends on ghost"
