"""Persistent JSON settings for the git query engine.

Stores the git executable, the untracked-files walk mode and the name of the
repository override variable. All access is defensive: malformed or missing
config falls back to defaults.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path

from platformdirs import user_config_dir

logger = logging.getLogger(__name__)

APP_NAME = "lazystatus"
CONFIG_FILENAME = "config.json"
CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME

UNTRACKED_FILES_MODES = ("no", "normal", "all")


@dataclass(frozen=True)
class StatusSettings:
    """Knobs consulted when discovering and walking repositories."""

    git_executable: str = "git"
    untracked_files: str = "all"
    git_dir_variable: str = "GIT_DIR"


DEFAULT_SETTINGS = StatusSettings()


def load_config(config_path: Path | None = None) -> dict[str, object]:
    """Load the persisted JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    path = CONFIG_PATH if config_path is None else config_path
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {}
    except (OSError, ValueError) as exc:
        logger.warning("Ignoring unreadable config %s: %s", path, exc)
        return {}
    return data if isinstance(data, dict) else {}


def _load_string(data: dict[str, object], key: str, default: str) -> str:
    value = data.get(key)
    if not isinstance(value, str):
        return default
    stripped = value.strip()
    return stripped if stripped else default


def load_settings(config_path: Path | None = None) -> StatusSettings:
    """Build ``StatusSettings`` from the config file, keeping defaults for bad keys."""
    data = load_config(config_path)
    untracked = _load_string(data, "untracked_files", DEFAULT_SETTINGS.untracked_files)
    if untracked not in UNTRACKED_FILES_MODES:
        logger.warning("Unknown untracked_files mode %r, using %r", untracked, DEFAULT_SETTINGS.untracked_files)
        untracked = DEFAULT_SETTINGS.untracked_files
    return StatusSettings(
        git_executable=_load_string(data, "git_executable", DEFAULT_SETTINGS.git_executable),
        untracked_files=untracked,
        git_dir_variable=_load_string(data, "git_dir_variable", DEFAULT_SETTINGS.git_dir_variable),
    )
