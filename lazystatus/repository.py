"""One discovered repository whose statuses are queried at most once.

``GitRepo`` holds either the unopened engine handle or the finished
``StatusTable``, never both. The first ``search`` moves the handle out under
the lock, walks it, and stores the table; every later ``search`` (from any
thread) answers from that table.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Mapping
from pathlib import Path

from .config import DEFAULT_SETTINGS, StatusSettings
from .engine import DiscoveryMode, GitRepositoryHandle, discover_repository
from .errors import GitCommandError, LazyStatusError, RepositoryNotFound
from .flags import GitFileStatus
from .paths import is_nested
from .table import StatusTable

logger = logging.getLogger(__name__)

Discoverer = Callable[..., GitRepositoryHandle]


class GitRepo:
    """A repository found somewhere on the filesystem, plus the paths that led to it."""

    def __init__(self, handle: GitRepositoryHandle, workdir: Path, original_path: Path) -> None:
        self._lock = threading.Lock()
        self._handle: GitRepositoryHandle | None = handle
        self._table: StatusTable | None = None
        self.workdir = workdir
        self.original_path = original_path
        self.extra_paths: list[Path] = []

    @classmethod
    def discover(
        cls,
        path: Path,
        mode: DiscoveryMode,
        *,
        env: Mapping[str, str] | None = None,
        settings: StatusSettings = DEFAULT_SETTINGS,
        discover: Discoverer = discover_repository,
    ) -> GitRepo:
        """Open the repository for ``path``; raises ``RepositoryNotFound`` on a miss.

        A repository without a working directory counts as a miss.
        """
        logger.info("Opening Git repository for %s (%r)", path, mode)
        try:
            handle = discover(path, mode, env=env, settings=settings)
        except RepositoryNotFound as exc:
            logger.error("Error opening Git repository for %s: %s", path, exc.reason)
            raise

        workdir = handle.working_directory()
        if workdir is None:
            logger.warning("Repository %s has no working directory", path)
            raise RepositoryNotFound(path, "repository has no working directory")
        return cls(handle, workdir, path)

    @property
    def computed(self) -> bool:
        with self._lock:
            return self._table is not None

    def has_workdir(self, path: Path) -> bool:
        """Whether this repository has the given working directory."""
        return self.workdir == path

    def has_path(self, path: Path) -> bool:
        """Whether ``path`` is at or under any path that led to this repository."""
        return is_nested(path, self.original_path) or any(is_nested(path, extra) for extra in self.extra_paths)

    def search(self, path: Path, directory_mode: bool) -> GitFileStatus:
        """Return the status of ``path``, walking the repository on first use."""
        with self._lock:
            if self._table is not None:
                logger.debug("Git repo %s has been found in cache", self.workdir)
                return self._table.status(path, directory_mode)

            logger.debug("Querying Git repo %s for the first time", self.workdir)
            handle, self._handle = self._handle, None
            if handle is None:
                raise LazyStatusError(f"repository handle for {self.workdir} was already consumed")
            self._table = _walk(handle, self.workdir)
            return self._table.status(path, directory_mode)


def _walk(handle: GitRepositoryHandle, workdir: Path) -> StatusTable:
    """Consume ``handle`` into a table; a failed walk yields an empty table."""
    logger.info("Getting Git statuses for repo with workdir %s", workdir)
    try:
        entries = handle.full_status()
    except GitCommandError as exc:
        logger.error("Error looking up Git statuses: %s", exc)
        return StatusTable()
    return StatusTable.from_walk(workdir, entries)
