"""Pytest bootstrap for local source imports and a predictable git environment.

Puts the repository root on ``sys.path`` so ``import lazystatus`` resolves to
the local package, hides the caller's ``GIT_*`` variables so repository
discovery in tests never follows the developer's own checkout, and points the
config file at an empty temp location so user settings never leak in.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parent.parent

if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


@pytest.fixture(autouse=True)
def _isolated_git_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    for name in list(os.environ):
        if name.startswith("GIT_"):
            monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr("lazystatus.config.CONFIG_PATH", tmp_path / "lazystatus-config.json")
