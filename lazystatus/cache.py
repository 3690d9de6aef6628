"""Repository cache assembled from the paths a listing is about to visit.

Lists are used instead of hashed structures: the expected number of
repositories per listing is zero or one, so linear scans win.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Mapping
from pathlib import Path

from .config import StatusSettings, load_settings
from .engine import DiscoveryMode, discover_repository
from .errors import RepositoryNotFound
from .flags import NO_STATUS, GitFileStatus
from .repository import Discoverer, GitRepo

logger = logging.getLogger(__name__)

# Consistent with how git itself treats GIT_DIR.
GIT_DIR_MODE = DiscoveryMode.NO_SEARCH | DiscoveryMode.NO_DOTGIT
PATH_MODE = DiscoveryMode.FROM_ENV


class GitCache:
    """Discovered repositories plus the paths confirmed to have none."""

    def __init__(self) -> None:
        self._repos: list[GitRepo] = []
        self._misses: list[Path] = []

    @property
    def repositories(self) -> tuple[GitRepo, ...]:
        return tuple(self._repos)

    @property
    def misses(self) -> tuple[Path, ...]:
        return tuple(self._misses)

    @classmethod
    def build(
        cls,
        paths: Iterable[Path],
        *,
        env: Mapping[str, str] | None = None,
        settings: StatusSettings | None = None,
        discover: Discoverer = discover_repository,
    ) -> GitCache:
        """Discover the repositories behind ``paths``, one pass, in order.

        ``env`` stands in for the process environment: it supplies the
        repository override variable and is handed to git during discovery.
        """
        environment = os.environ if env is None else env
        if settings is None:
            settings = load_settings()
        cache = cls()

        override = environment.get(settings.git_dir_variable)
        if override:
            cache._try_discover(Path(override), GIT_DIR_MODE, environment, settings, discover)

        for raw_path in paths:
            path = Path(raw_path)
            if path in cache._misses:
                logger.debug("Skipping %s because it already came back Gitless", path)
            elif any(repo.has_path(path) for repo in cache._repos):
                logger.debug("Skipping %s because we already queried it", path)
            else:
                cache._try_discover(path, PATH_MODE, environment, settings, discover)

        return cache

    def _try_discover(
        self,
        path: Path,
        mode: DiscoveryMode,
        env: Mapping[str, str],
        settings: StatusSettings,
        discover: Discoverer,
    ) -> None:
        try:
            repo = GitRepo.discover(path, mode, env=env, settings=settings, discover=discover)
        except RepositoryNotFound:
            self._misses.append(path)
            return

        existing = next((r for r in self._repos if r.has_workdir(repo.workdir)), None)
        if existing is not None:
            logger.debug("Adding to existing repo (workdir matches with %s)", existing.workdir)
            existing.extra_paths.append(repo.original_path)
            return

        logger.debug("Discovered new Git repo at %s", repo.workdir)
        self._repos.append(repo)

    def has_anything_for(self, path: Path) -> bool:
        """Whether any discovered repository claims ``path``."""
        return any(repo.has_path(path) for repo in self._repos)

    def lookup(self, path: Path, directory_mode: bool) -> GitFileStatus:
        """Return the status of ``path`` from the first repository claiming it.

        Paths no repository claims get ``NO_STATUS``.
        """
        for repo in self._repos:
            if repo.has_path(path):
                return repo.search(path, directory_mode)
        return NO_STATUS


def build(
    paths: Iterable[Path],
    *,
    env: Mapping[str, str] | None = None,
    settings: StatusSettings | None = None,
) -> GitCache:
    """Build a ``GitCache`` for ``paths`` using the git command line engine."""
    return GitCache.build(paths, env=env, settings=settings)
