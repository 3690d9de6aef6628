"""Clean/dirty summary and branch name for a directory that is itself a repository.

Independent of ``GitCache``: every call opens and walks the repository again.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from .config import StatusSettings, load_settings
from .engine import DiscoveryMode, discover_repository
from .errors import GitCommandError, RepositoryNotFound
from .flags import GitStatusFlag
from .paths import reorient
from .repository import Discoverer

logger = logging.getLogger(__name__)


class SubdirStatus(enum.Enum):
    CLEAN = "clean"
    DIRTY = "dirty"
    NO_REPOSITORY = "no_repository"


@dataclass(frozen=True)
class SubdirGitRepo:
    status: SubdirStatus | None = None
    branch: str | None = None


def summarize(
    directory: Path,
    want_status: bool,
    *,
    env: Mapping[str, str] | None = None,
    settings: StatusSettings | None = None,
    discover: Discoverer = discover_repository,
) -> SubdirGitRepo:
    """Summarize the repository rooted exactly at ``directory``.

    No upward search is made, so a plain subdirectory of some repository
    reports ``NO_REPOSITORY``. With ``want_status`` false only the branch is
    looked up.
    """
    if settings is None:
        settings = load_settings()
    path = reorient(directory)
    missing = SubdirGitRepo(status=SubdirStatus.NO_REPOSITORY if want_status else None, branch=None)

    try:
        handle = discover(path, DiscoveryMode.NO_SEARCH, env=env, settings=settings)
    except RepositoryNotFound:
        return missing

    branch = handle.current_branch()
    if not want_status:
        return SubdirGitRepo(status=None, branch=branch)

    try:
        entries = handle.full_status()
    except GitCommandError as exc:
        logger.error("Error looking up Git statuses: %s", exc)
        return missing

    if any(flags != GitStatusFlag.IGNORED for _path, flags in entries):
        return SubdirGitRepo(status=SubdirStatus.DIRTY, branch=branch)
    return SubdirGitRepo(status=SubdirStatus.CLEAN, branch=branch)
