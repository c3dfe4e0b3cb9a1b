# src/taskmaster/config.py

"""
Runtime configuration.

Settings come from, in increasing precedence:
- built-in defaults,
- an optional YAML file (TASKMASTER_CONFIG, or ./.taskmaster.yml),
- environment variables.

Settings are built once by the caller and passed to TaskStore; nothing
here is read at import time.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Final, Mapping, Optional

import yaml

from taskmaster.engine.model import Priority

logger = logging.getLogger(__name__)


DEFAULT_TASK_FILE_PATH: Final[str] = "tasks/main.md"
DEFAULT_CONFIG_NAME: Final[str] = ".taskmaster.yml"

ENV_TASK_FILE_PATH: Final[str] = "TASK_FILE_PATH"
ENV_DEFAULT_PRIORITY: Final[str] = "DEFAULT_PRIORITY"
ENV_MAX_SUBTASKS: Final[str] = "MAX_SUBTASKS"
ENV_STRICT: Final[str] = "TASKMASTER_STRICT"
ENV_CONFIG: Final[str] = "TASKMASTER_CONFIG"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


class ConfigError(Exception):
    """Raised when a configuration value cannot be used."""


@dataclass(frozen=True, slots=True)
class Settings:
    """
    Ledger settings.

    `max_subtasks` is read and exposed but not enforced by any operation.
    """

    task_file_path: Path = Path(DEFAULT_TASK_FILE_PATH)
    default_priority: Priority = Priority.MEDIUM
    max_subtasks: int = 5
    strict: bool = False

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "Settings":
        """Build settings from a plain mapping, defaults for missing keys."""
        base = cls()
        return cls(
            task_file_path=Path(str(data.get("task_file_path", base.task_file_path))),
            default_priority=_priority(data.get("default_priority"), base.default_priority),
            max_subtasks=_int("max_subtasks", data.get("max_subtasks", base.max_subtasks)),
            strict=_bool("strict", data.get("strict", base.strict)),
        )

    @classmethod
    def from_env(
        cls,
        config_file: Optional[str | Path] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "Settings":
        """
        Load settings from the YAML config file (if any) and the environment.
        """
        env = os.environ if environ is None else environ

        data: dict[str, Any] = {}
        path = _config_path(config_file, env)
        if path is not None:
            data.update(load_config_file(path))

        overrides = {
            "task_file_path": env.get(ENV_TASK_FILE_PATH),
            "default_priority": env.get(ENV_DEFAULT_PRIORITY),
            "max_subtasks": env.get(ENV_MAX_SUBTASKS),
            "strict": env.get(ENV_STRICT),
        }
        data.update({k: v for k, v in overrides.items() if v is not None})

        return cls.from_mapping(data)


# ---------------------------------------------------------------------
# YAML file
# ---------------------------------------------------------------------

def load_config_file(path: str | Path) -> dict[str, Any]:
    """
    Read a YAML config file. An empty file is an empty mapping.
    """
    p = Path(path)
    try:
        text = p.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"{p}: cannot read config file: {e}") from e

    try:
        data = yaml.safe_load(text) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"{p}: invalid YAML: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"{p}: YAML root must be a mapping")

    logger.debug("Loaded config file %s", p)
    return data


def _config_path(config_file: Optional[str | Path], env: Mapping[str, str]) -> Optional[Path]:
    if config_file is not None:
        return Path(config_file)

    explicit = env.get(ENV_CONFIG)
    if explicit:
        return Path(explicit)

    local = Path.cwd() / DEFAULT_CONFIG_NAME
    return local if local.is_file() else None


# ---------------------------------------------------------------------
# Value coercion
# ---------------------------------------------------------------------

def _priority(value: Any, default: Priority) -> Priority:
    if value is None:
        return default

    priority = Priority.parse(value)
    if priority is None:
        logger.warning("Invalid default priority %r, using %s", value, default.value)
        return default
    return priority


def _int(key: str, value: Any) -> int:
    if isinstance(value, bool):
        raise ConfigError(f"{key} must be an integer, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"{key} must be an integer, got {value!r}") from e


def _bool(key: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value

    s = str(value).strip().lower()
    if s in _TRUE:
        return True
    if s in _FALSE:
        return False
    raise ConfigError(f"{key} must be a boolean, got {value!r}")
