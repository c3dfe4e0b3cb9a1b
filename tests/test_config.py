from pathlib import Path

import pytest

from taskmaster.config import ConfigError, Settings, load_config_file
from taskmaster.engine.model import Priority


def test_defaults(tmp_path: Path, monkeypatch):
    monkeypatch.chdir(tmp_path)

    settings = Settings.from_env(environ={})

    assert settings.task_file_path == Path("tasks/main.md")
    assert settings.default_priority is Priority.MEDIUM
    assert settings.max_subtasks == 5
    assert settings.strict is False


def test_env_values(tmp_path: Path, monkeypatch):
    monkeypatch.chdir(tmp_path)

    settings = Settings.from_env(
        environ={
            "TASK_FILE_PATH": "notes/todo.md",
            "DEFAULT_PRIORITY": "high",
            "MAX_SUBTASKS": "9",
            "TASKMASTER_STRICT": "yes",
        },
    )

    assert settings.task_file_path == Path("notes/todo.md")
    assert settings.default_priority is Priority.HIGH
    assert settings.max_subtasks == 9
    assert settings.strict is True


def test_yaml_file_is_overridden_by_env(tmp_path: Path):
    cfg = tmp_path / "taskmaster.yml"
    cfg.write_text(
        "task_file_path: from_file.md\ndefault_priority: low\nmax_subtasks: 3\n",
        encoding="utf-8",
    )

    settings = Settings.from_env(config_file=cfg, environ={"DEFAULT_PRIORITY": "high"})

    assert settings.task_file_path == Path("from_file.md")
    assert settings.default_priority is Priority.HIGH
    assert settings.max_subtasks == 3


def test_local_config_file_is_picked_up(tmp_path: Path, monkeypatch):
    (tmp_path / ".taskmaster.yml").write_text("strict: true\n", encoding="utf-8")
    monkeypatch.chdir(tmp_path)

    assert Settings.from_env(environ={}).strict is True


def test_invalid_default_priority_falls_back_to_medium():
    settings = Settings.from_mapping({"default_priority": "urgent"})

    assert settings.default_priority is Priority.MEDIUM


def test_bad_max_subtasks_raises():
    with pytest.raises(ConfigError):
        Settings.from_mapping({"max_subtasks": "many"})


def test_yaml_root_must_be_mapping(tmp_path: Path):
    cfg = tmp_path / "bad.yml"
    cfg.write_text("- just\n- a list\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config_file(cfg)


def test_invalid_yaml_raises(tmp_path: Path):
    cfg = tmp_path / "broken.yml"
    cfg.write_text("key: [unclosed\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config_file(cfg)
