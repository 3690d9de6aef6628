"""Status query engine backed by the ``git`` command line client.

Discovers repositories with ``git rev-parse`` and walks them with
``git status --porcelain=v2 -z``, turning each record into a
``(absolute path, GitStatusFlag)`` pair. Nothing here caches; callers decide
how often a repository is walked.
"""

from __future__ import annotations

import enum
import logging
import os
import subprocess
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .config import DEFAULT_SETTINGS, StatusSettings
from .errors import GitCommandError, RepositoryNotFound
from .flags import GitStatusFlag, decode_xy

logger = logging.getLogger(__name__)

# Variables git consults while locating a repository.
DISCOVERY_VARIABLES = (
    "GIT_DIR",
    "GIT_WORK_TREE",
    "GIT_CEILING_DIRECTORIES",
    "GIT_COMMON_DIR",
    "GIT_DISCOVERY_ACROSS_FILESYSTEM",
    "GIT_INDEX_FILE",
)


class DiscoveryMode(enum.IntFlag):
    """How ``discover_repository`` interprets the path it is given."""

    DEFAULT = 0
    NO_SEARCH = 1 << 0
    NO_DOTGIT = 1 << 1
    FROM_ENV = 1 << 2


def run_git(
    args: Iterable[str],
    *,
    settings: StatusSettings = DEFAULT_SETTINGS,
    env: Mapping[str, str] | None = None,
    raise_on_error: bool = True,
) -> subprocess.CompletedProcess[bytes]:
    """Execute a git command, returning raw bytes output.

    A missing executable is reported as ``GitCommandError`` with return code
    ``-1`` regardless of ``raise_on_error``.
    """
    cmd = [settings.git_executable, *args]
    try:
        proc = subprocess.run(
            cmd,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            env=dict(env) if env is not None else None,
            check=False,
        )
    except OSError as exc:
        raise GitCommandError(cmd, -1, str(exc)) from exc
    if raise_on_error and proc.returncode != 0:
        raise GitCommandError(cmd, proc.returncode, os.fsdecode(proc.stderr).strip())
    return proc


def _stdout_lines(proc: subprocess.CompletedProcess[bytes]) -> list[str]:
    return [line.strip() for line in os.fsdecode(proc.stdout).splitlines() if line.strip()]


def discovery_environment(
    path: Path,
    mode: DiscoveryMode,
    env: Mapping[str, str] | None = None,
) -> dict[str, str]:
    """Return the environment git should run with to honor ``mode``.

    Without ``FROM_ENV`` the caller's discovery variables are dropped, except
    ``GIT_WORK_TREE`` when ``path`` names the repository directory itself.
    """
    result = dict(os.environ if env is None else env)
    if not mode & DiscoveryMode.FROM_ENV:
        for name in DISCOVERY_VARIABLES:
            if name == "GIT_WORK_TREE" and mode & DiscoveryMode.NO_DOTGIT:
                continue
            result.pop(name, None)

    if mode & DiscoveryMode.NO_DOTGIT:
        result["GIT_DIR"] = os.path.abspath(path)
    elif mode & DiscoveryMode.NO_SEARCH:
        result["GIT_CEILING_DIRECTORIES"] = str(Path(os.path.abspath(path)).parent)
    return result


def parse_porcelain_v2(output: bytes) -> list[tuple[str, GitStatusFlag]]:
    """Decode ``git status --porcelain=v2 -z`` output into relative paths and flags.

    Header lines and records of unknown kinds are skipped. Rename and copy
    records carry their origin path in the following NUL-separated token,
    which is consumed and dropped; the destination path is reported.
    """
    records: list[tuple[str, GitStatusFlag]] = []
    tokens = output.split(b"\0")
    index = 0
    while index < len(tokens):
        token = tokens[index]
        index += 1
        if not token:
            continue

        kind = token[:1]
        if kind == b"1":
            parts = token.split(b" ", 8)
            if len(parts) < 9:
                continue
            flags = decode_xy(parts[1].decode("ascii", errors="replace"))
            raw_path = parts[8]
        elif kind == b"2":
            parts = token.split(b" ", 9)
            index += 1
            if len(parts) < 10:
                continue
            flags = decode_xy(parts[1].decode("ascii", errors="replace"))
            raw_path = parts[9]
        elif kind == b"u":
            parts = token.split(b" ", 10)
            if len(parts) < 11:
                continue
            flags = GitStatusFlag.CONFLICTED
            raw_path = parts[10]
        elif kind == b"?":
            flags = GitStatusFlag.WT_NEW
            raw_path = token[2:]
        elif kind == b"!":
            flags = GitStatusFlag.IGNORED
            raw_path = token[2:]
        else:
            continue

        rel_path = os.fsdecode(raw_path).rstrip("/")
        if rel_path:
            records.append((rel_path, flags))
    return records


@dataclass(frozen=True)
class GitRepositoryHandle:
    """An opened, not yet walked repository."""

    git_dir: Path
    workdir: Path | None
    settings: StatusSettings = DEFAULT_SETTINGS
    env: Mapping[str, str] | None = field(default=None, compare=False, repr=False)

    def working_directory(self) -> Path | None:
        return self.workdir

    def _git(self, args: list[str], raise_on_error: bool = True) -> subprocess.CompletedProcess[bytes]:
        location = ["--git-dir", str(self.git_dir)]
        if self.workdir is not None:
            location += ["--work-tree", str(self.workdir)]
        return run_git(
            [*location, *args],
            settings=self.settings,
            env=self.env,
            raise_on_error=raise_on_error,
        )

    def full_status(self) -> list[tuple[Path, GitStatusFlag]]:
        """Walk the repository and return every non-clean path with its flags.

        Raises ``GitCommandError`` when git fails or the repository has no
        working tree to walk.
        """
        if self.workdir is None:
            raise GitCommandError(["status"], -1, f"{self.git_dir} has no working directory")
        proc = self._git(
            [
                "status",
                "--porcelain=v2",
                "-z",
                "--ignored=matching",
                f"--untracked-files={self.settings.untracked_files}",
            ]
        )
        return [(self.workdir / rel_path, flags) for rel_path, flags in parse_porcelain_v2(proc.stdout)]

    def current_branch(self) -> str | None:
        """Return the checked-out branch short name.

        ``None`` for an unborn branch, a detached HEAD, or when git fails.
        """
        try:
            head = self._git(["rev-parse", "--verify", "-q", "HEAD"], raise_on_error=False)
            if head.returncode != 0:
                return None
            ref = self._git(["symbolic-ref", "--short", "-q", "HEAD"], raise_on_error=False)
        except GitCommandError as exc:
            logger.error("Error looking up Git branch: %s", exc)
            return None
        if ref.returncode != 0:
            return None
        lines = _stdout_lines(ref)
        return lines[0] if lines else None


def _search_start(path: Path, mode: DiscoveryMode) -> Path:
    """Return the directory git should start from when looking for ``path``'s repository.

    A rootwards search starting at a file (or a path that no longer exists)
    begins at its nearest existing ancestor directory.
    """
    if mode & DiscoveryMode.NO_SEARCH:
        return path
    start = path
    while not start.is_dir():
        parent = start.parent
        if parent == start:
            break
        start = parent
    return start


def _gitdir_workdir(
    git_dir: Path,
    env: Mapping[str, str],
    settings: StatusSettings,
) -> Path | None:
    """Derive the working tree of a non-bare ``git_dir``.

    Honors ``GIT_WORK_TREE`` and ``core.worktree``, and otherwise takes the
    repository directory's parent.
    """
    top = run_git(
        ["--git-dir", str(git_dir), "-C", str(git_dir.parent), "rev-parse", "--show-toplevel"],
        settings=settings,
        env=env,
        raise_on_error=False,
    )
    lines = _stdout_lines(top) if top.returncode == 0 else []
    return Path(lines[0]).resolve() if lines else None


def discover_repository(
    path: Path,
    mode: DiscoveryMode = DiscoveryMode.FROM_ENV,
    *,
    env: Mapping[str, str] | None = None,
    settings: StatusSettings = DEFAULT_SETTINGS,
) -> GitRepositoryHandle:
    """Open the repository owning ``path``.

    Depending on ``mode`` the path is either the repository directory itself
    (``NO_DOTGIT``), a directory that must hold the repository
    (``NO_SEARCH``), or the start of a rootwards search. Raises
    ``RepositoryNotFound`` when git cannot open anything. A bare repository
    opens successfully but its handle has no working directory.
    """
    run_env = discovery_environment(path, mode, env)
    if mode & DiscoveryMode.NO_DOTGIT:
        location = ["-C", str(Path(run_env["GIT_DIR"]).parent)]
    else:
        location = ["-C", str(_search_start(path, mode))]

    try:
        proc = run_git(
            [*location, "rev-parse", "--absolute-git-dir", "--is-bare-repository"],
            settings=settings,
            env=run_env,
        )
    except GitCommandError as exc:
        raise RepositoryNotFound(path, exc.stderr or "not a git repository") from exc

    lines = _stdout_lines(proc)
    if len(lines) < 2:
        raise RepositoryNotFound(path, "unexpected rev-parse output")
    git_dir = Path(lines[0])
    is_bare = lines[1] == "true"

    workdir: Path | None = None
    if not is_bare:
        top = run_git(
            [*location, "rev-parse", "--show-toplevel"],
            settings=settings,
            env=run_env,
            raise_on_error=False,
        )
        top_lines = _stdout_lines(top) if top.returncode == 0 else []
        if top_lines:
            workdir = Path(top_lines[0]).resolve()
        else:
            # Started inside the repository directory itself.
            workdir = _gitdir_workdir(git_dir, run_env, settings)

    return GitRepositoryHandle(git_dir=git_dir, workdir=workdir, settings=settings, env=run_env)
