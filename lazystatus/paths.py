"""Path canonicalization shared by every status comparison.

The query engine reports absolute, working-directory-rooted paths, so anything
a caller hands us has to be brought into the same form before comparing.
"""

from __future__ import annotations

from pathlib import Path

_EXTENDED_LENGTH_PREFIX = "\\\\?\\"


def _strip_extended_prefix(path: Path) -> Path:
    """Drop the ``\\\\?\\`` prefix Windows adds to canonicalized paths."""
    text = str(path)
    if text.startswith(_EXTENDED_LENGTH_PREFIX):
        return Path(text[len(_EXTENDED_LENGTH_PREFIX):])
    return path


def reorient(path: Path) -> Path:
    """Return ``path`` as an absolute, symlink-resolved path.

    Relative paths are joined onto the current directory first. When the path
    cannot be resolved (missing, dangling symlink, permission error) the
    joined but unresolved path is returned instead of failing.
    """
    try:
        base = Path.cwd()
    except OSError:
        base = Path(".")
    joined = base / path

    try:
        resolved = joined.resolve(strict=True)
    except (OSError, RuntimeError):
        return joined
    return _strip_extended_prefix(resolved)


def is_nested(path: Path, ancestor: Path) -> bool:
    """Return whether ``path`` equals ``ancestor`` or lies beneath it.

    Compares whole components, so ``/repo-two`` is not nested in ``/repo``.
    """
    return path == ancestor or ancestor in path.parents
