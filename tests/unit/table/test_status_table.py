"""Tests for status-table aggregation.

Covers downward ignore propagation, upward propagation of every other
status, and the synthetic ignored ``.git`` entry.
"""

from __future__ import annotations

import tempfile
import unittest
from pathlib import Path

from lazystatus.flags import GitStatus, GitStatusFlag
from lazystatus.table import StatusTable


class StatusTableTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name).resolve()

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_ignored_ancestor_propagates_to_files_and_directories(self) -> None:
        table = StatusTable(
            [
                (self.root / "build", GitStatusFlag.IGNORED),
                (self.root / "src" / "main.py", GitStatusFlag.WT_MODIFIED),
            ]
        )

        self.assertEqual(table.file_status(self.root / "build" / "x").unstaged, GitStatus.IGNORED)
        self.assertEqual(table.dir_status(self.root / "build").unstaged, GitStatus.IGNORED)
        self.assertEqual(table.dir_status(self.root / "build" / "deep").unstaged, GitStatus.IGNORED)

    def test_ignored_child_does_not_mark_parent_directory(self) -> None:
        table = StatusTable([(self.root / "build", GitStatusFlag.IGNORED)])
        self.assertEqual(table.dir_status(self.root).unstaged, GitStatus.NOT_MODIFIED)

    def test_directory_aggregates_descendant_statuses(self) -> None:
        table = StatusTable([(self.root / "a" / "b.txt", GitStatusFlag.WT_MODIFIED)])

        self.assertEqual(table.dir_status(self.root / "a").unstaged, GitStatus.MODIFIED)
        self.assertEqual(table.dir_status(self.root).unstaged, GitStatus.MODIFIED)
        self.assertEqual(table.file_status(self.root / "a").unstaged, GitStatus.NOT_MODIFIED)

    def test_directory_aggregation_respects_component_boundaries(self) -> None:
        table = StatusTable([(self.root / "ab" / "c.txt", GitStatusFlag.WT_NEW)])
        self.assertEqual(table.dir_status(self.root / "a").unstaged, GitStatus.NOT_MODIFIED)

    def test_file_status_uses_exact_match_only(self) -> None:
        table = StatusTable(
            [
                (self.root / "one.txt", GitStatusFlag.INDEX_NEW | GitStatusFlag.WT_MODIFIED),
                (self.root / "one.txt.bak", GitStatusFlag.WT_DELETED),
            ]
        )

        status = table.file_status(self.root / "one.txt")
        self.assertEqual(status.staged, GitStatus.NEW)
        self.assertEqual(status.unstaged, GitStatus.MODIFIED)

    def test_directory_mixes_staged_and_unstaged_from_different_children(self) -> None:
        table = StatusTable(
            [
                (self.root / "pkg" / "a.py", GitStatusFlag.INDEX_MODIFIED),
                (self.root / "pkg" / "b.py", GitStatusFlag.WT_NEW),
            ]
        )

        status = table.status(self.root / "pkg", directory_mode=True)
        self.assertEqual(status.staged, GitStatus.MODIFIED)
        self.assertEqual(status.unstaged, GitStatus.NEW)

    def test_metadata_directory_is_always_ignored(self) -> None:
        table = StatusTable.from_walk(self.root, [])

        self.assertEqual(table.file_status(self.root / ".git").unstaged, GitStatus.IGNORED)
        self.assertEqual(table.file_status(self.root / ".git" / "HEAD").unstaged, GitStatus.IGNORED)
        self.assertEqual(table.dir_status(self.root).unstaged, GitStatus.NOT_MODIFIED)

    def test_status_dispatches_on_directory_mode(self) -> None:
        table = StatusTable([(self.root / "d" / "f", GitStatusFlag.WT_DELETED)])
        self.assertEqual(table.status(self.root / "d", directory_mode=False).unstaged, GitStatus.NOT_MODIFIED)
        self.assertEqual(table.status(self.root / "d", directory_mode=True).unstaged, GitStatus.DELETED)

    def test_empty_table_reports_not_modified(self) -> None:
        table = StatusTable()
        self.assertEqual(len(table), 0)
        status = table.file_status(self.root / ".git")
        self.assertEqual(status.staged, GitStatus.NOT_MODIFIED)
        self.assertEqual(status.unstaged, GitStatus.NOT_MODIFIED)


if __name__ == "__main__":
    unittest.main()
