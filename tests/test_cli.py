import re
from pathlib import Path

import pytest

from taskmaster.cli import main
from taskmaster.engine.parse import parse_ledger


@pytest.fixture()
def ledger_path(tmp_path: Path, monkeypatch) -> Path:
    monkeypatch.chdir(tmp_path)
    for name in ("TASK_FILE_PATH", "DEFAULT_PRIORITY", "MAX_SUBTASKS", "TASKMASTER_STRICT", "TASKMASTER_CONFIG"):
        monkeypatch.delenv(name, raising=False)
    return tmp_path / "tasks" / "main.md"


def _run(capsys, *argv: str) -> tuple[int, str]:
    code = main(["--no-color", *argv])
    return code, capsys.readouterr().out


def _created_id(out: str) -> str:
    m = re.search(r"Task created with ID: (\S+)", out)
    assert m is not None, out
    return m.group(1)


def test_init_creates_default_ledger(ledger_path: Path, capsys):
    code, out = _run(capsys, "init")

    assert code == 0
    assert ledger_path.is_file()
    assert str(ledger_path.relative_to(ledger_path.parents[1])) in out


def test_full_flow(ledger_path: Path, capsys):
    _run(capsys, "init")

    _, out = _run(capsys, "add", "Design schema", "-d", "tables first", "-p", "medium")
    schema_id = _created_id(out)

    _, out = _run(capsys, "add", "Write API", "-p", "high", "--depends", schema_id)
    api_id = _created_id(out)

    code, out = _run(capsys, "next")
    assert code == 0
    assert schema_id in out

    code, out = _run(capsys, "done", schema_id)
    assert code == 0
    assert "marked as complete" in out

    code, out = _run(capsys, "next")
    assert api_id in out

    code, out = _run(capsys, "list", "--status", "completed")
    assert code == 0
    assert "# Tasks (1)" in out
    assert schema_id in out

    code, out = _run(capsys, "update", api_id, "--title", "Write REST API", "--no-depends")
    assert code == 0

    api = [t for t in parse_ledger(ledger_path) if t.task_id == api_id][0]
    assert api.title == "Write REST API"
    assert api.dependencies == []

    code, out = _run(capsys, "undone", schema_id)
    assert code == 0
    assert "marked as pending" in out


def test_unknown_id_is_soft_failure(ledger_path: Path, capsys):
    _run(capsys, "init")

    code, out = _run(capsys, "done", "ghost")

    assert code == 1
    assert "Task not found: ghost" in out


def test_next_on_empty_ledger(ledger_path: Path, capsys):
    _run(capsys, "init")

    code, out = _run(capsys, "next")

    assert code == 0
    assert "No tasks available" in out


def test_check_reports_unresolved_dependency(ledger_path: Path, capsys):
    _run(capsys, "add", "Orphan", "--depends", "ghost")

    code, out = _run(capsys, "check")

    assert code == 1
    assert "dependency_unresolved" in out


def test_file_option_and_missing_ledger_error(ledger_path: Path, tmp_path: Path, capsys):
    target = tmp_path / "custom.md"

    code, out = _run(capsys, "-f", str(target), "done", "x")

    assert code == 1
    assert out.startswith("Error:")
    assert not target.exists()


def test_strict_mode_surfaces_malformed_blocks(ledger_path: Path, tmp_path: Path, capsys):
    target = tmp_path / "custom.md"
    target.write_text("- [ ] **Broken** `(ID: broken_1)`\n", encoding="utf-8")

    code, out = _run(capsys, "-f", str(target), "list")
    assert code == 0
    assert "No tasks found." in out

    code, out = _run(capsys, "-f", str(target), "--strict", "list")
    assert code == 1
    assert "broken_1" in out


def test_update_with_empty_title_is_rejected(ledger_path: Path, capsys):
    _, out = _run(capsys, "add", "Keep me")
    keep_id = _created_id(out)
    _, out = _run(capsys, "add", "Other")
    other_id = _created_id(out)

    code, out = _run(capsys, "update", keep_id, "--title", "")
    assert code == 1
    assert out.startswith("Error:")

    code, _ = _run(capsys, "update", other_id, "-p", "low")
    assert code == 0

    assert [t.task_id for t in parse_ledger(ledger_path)] == [keep_id, other_id]


def test_add_with_blank_title_is_usage_error(ledger_path: Path, capsys):
    code, out = _run(capsys, "add", "   ")

    assert code == 2
    assert "title is required" in out
