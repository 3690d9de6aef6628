"""Raw git status bitsets and their user-facing classification.

``GitStatusFlag`` mirrors the libgit2 status bits so that index and working
tree changes can be unioned across many entries. ``index_status`` and
``working_tree_status`` collapse an aggregate into one ``GitStatus`` each.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass


class GitStatusFlag(enum.IntFlag):
    """Raw per-path status bits reported by the query engine."""

    CURRENT = 0
    INDEX_NEW = 1 << 0
    INDEX_MODIFIED = 1 << 1
    INDEX_DELETED = 1 << 2
    INDEX_RENAMED = 1 << 3
    INDEX_TYPECHANGE = 1 << 4
    WT_NEW = 1 << 7
    WT_MODIFIED = 1 << 8
    WT_DELETED = 1 << 9
    WT_TYPECHANGE = 1 << 10
    WT_RENAMED = 1 << 11
    WT_UNREADABLE = 1 << 12
    IGNORED = 1 << 14
    CONFLICTED = 1 << 15


class GitStatus(enum.Enum):
    NOT_MODIFIED = "not_modified"
    NEW = "new"
    MODIFIED = "modified"
    DELETED = "deleted"
    RENAMED = "renamed"
    TYPE_CHANGE = "type_change"
    IGNORED = "ignored"
    CONFLICTED = "conflicted"


@dataclass(frozen=True)
class GitFileStatus:
    """Staged and unstaged classification for one file or directory.

    ``known`` is ``False`` only for the value returned when no discovered
    repository claims the path, so callers can tell it apart from clean.
    """

    staged: GitStatus = GitStatus.NOT_MODIFIED
    unstaged: GitStatus = GitStatus.NOT_MODIFIED
    known: bool = True

    @classmethod
    def from_flags(cls, flags: GitStatusFlag) -> GitFileStatus:
        return cls(staged=index_status(flags), unstaged=working_tree_status(flags))


NO_STATUS = GitFileStatus(known=False)

# Checked in order; the first bit present wins.
_INDEX_PRIORITY: tuple[tuple[GitStatusFlag, GitStatus], ...] = (
    (GitStatusFlag.INDEX_NEW, GitStatus.NEW),
    (GitStatusFlag.INDEX_MODIFIED, GitStatus.MODIFIED),
    (GitStatusFlag.INDEX_DELETED, GitStatus.DELETED),
    (GitStatusFlag.INDEX_RENAMED, GitStatus.RENAMED),
    (GitStatusFlag.INDEX_TYPECHANGE, GitStatus.TYPE_CHANGE),
)

_WORKING_TREE_PRIORITY: tuple[tuple[GitStatusFlag, GitStatus], ...] = (
    (GitStatusFlag.WT_NEW, GitStatus.NEW),
    (GitStatusFlag.WT_MODIFIED, GitStatus.MODIFIED),
    (GitStatusFlag.WT_DELETED, GitStatus.DELETED),
    (GitStatusFlag.WT_RENAMED, GitStatus.RENAMED),
    (GitStatusFlag.WT_TYPECHANGE, GitStatus.TYPE_CHANGE),
    (GitStatusFlag.IGNORED, GitStatus.IGNORED),
    (GitStatusFlag.CONFLICTED, GitStatus.CONFLICTED),
)


def _first_match(
    flags: GitStatusFlag,
    priority: tuple[tuple[GitStatusFlag, GitStatus], ...],
) -> GitStatus:
    for bit, status in priority:
        if flags & bit:
            return status
    return GitStatus.NOT_MODIFIED


def index_status(flags: GitStatusFlag) -> GitStatus:
    """Return the staged classification; ignored/conflicted never count as staged."""
    return _first_match(flags, _INDEX_PRIORITY)


def working_tree_status(flags: GitStatusFlag) -> GitStatus:
    """Return the unstaged classification of an aggregate flag set."""
    return _first_match(flags, _WORKING_TREE_PRIORITY)


_INDEX_CODES: dict[str, GitStatusFlag] = {
    "A": GitStatusFlag.INDEX_NEW,
    "M": GitStatusFlag.INDEX_MODIFIED,
    "D": GitStatusFlag.INDEX_DELETED,
    "R": GitStatusFlag.INDEX_RENAMED,
    "C": GitStatusFlag.INDEX_NEW,
    "T": GitStatusFlag.INDEX_TYPECHANGE,
}

_WORKING_TREE_CODES: dict[str, GitStatusFlag] = {
    "A": GitStatusFlag.WT_NEW,
    "M": GitStatusFlag.WT_MODIFIED,
    "D": GitStatusFlag.WT_DELETED,
    "R": GitStatusFlag.WT_RENAMED,
    "T": GitStatusFlag.WT_TYPECHANGE,
}


def decode_xy(xy: str) -> GitStatusFlag:
    """Decode a porcelain ``XY`` pair (``.`` meaning unchanged) into flags."""
    if len(xy) != 2:
        return GitStatusFlag.CURRENT
    index_code, worktree_code = xy[0], xy[1]
    flags = GitStatusFlag.CURRENT
    flags |= _INDEX_CODES.get(index_code, GitStatusFlag.CURRENT)
    flags |= _WORKING_TREE_CODES.get(worktree_code, GitStatusFlag.CURRENT)
    return flags
