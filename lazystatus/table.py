"""Frozen snapshot of one repository's status entries and its aggregation rules.

Ignored status propagates downward (a path under an ignored directory is
ignored); every other status propagates upward (a directory reflects the
statuses of everything beneath it).
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from .flags import GitFileStatus, GitStatusFlag
from .paths import is_nested, reorient

METADATA_DIRNAME = ".git"


class StatusTable:
    """Container of git statuses for every interesting path in one repository."""

    def __init__(self, entries: Iterable[tuple[Path, GitStatusFlag]] = ()) -> None:
        self._entries: tuple[tuple[Path, GitStatusFlag], ...] = tuple(entries)

    @classmethod
    def from_walk(cls, workdir: Path, entries: Iterable[tuple[Path, GitStatusFlag]]) -> StatusTable:
        """Wrap walk results, adding the repository's own ``.git`` as ignored.

        The metadata directory is ignored in practice even though git never
        reports it, and listings must not descend into it.
        """
        return cls([*entries, (workdir / METADATA_DIRNAME, GitStatusFlag.IGNORED)])

    @property
    def entries(self) -> tuple[tuple[Path, GitStatusFlag], ...]:
        return self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def status(self, path: Path, directory_mode: bool) -> GitFileStatus:
        """Return the file status of ``path``, or the aggregate beneath it in directory mode."""
        if directory_mode:
            return self.dir_status(path)
        return self.file_status(path)

    def file_status(self, file: Path) -> GitFileStatus:
        """Status applying directly to ``file``, plus ignore inherited from any ancestor."""
        path = reorient(file)
        flags = GitStatusFlag.CURRENT
        for entry_path, entry_flags in self._entries:
            if entry_flags == GitStatusFlag.IGNORED:
                matched = is_nested(path, entry_path)
            else:
                matched = entry_path == path
            if matched:
                flags |= entry_flags
        return GitFileStatus.from_flags(flags)

    def dir_status(self, directory: Path) -> GitFileStatus:
        """Combined status of everything at or under ``directory``.

        A directory is modified if anything under it is modified, but it is
        only ignored if it, or one of its parents, is ignored.
        """
        path = reorient(directory)
        flags = GitStatusFlag.CURRENT
        for entry_path, entry_flags in self._entries:
            if entry_flags == GitStatusFlag.IGNORED:
                matched = is_nested(path, entry_path)
            else:
                matched = is_nested(entry_path, path)
            if matched:
                flags |= entry_flags
        return GitFileStatus.from_flags(flags)
