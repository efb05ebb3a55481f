"""
Tests for the backup/restore manager.

Tests cover:
- Saving backups to a chosen or prompted path
- Cancelled dialogs are clean no-ops
- Fatal errors become failed results
- Reading archive info without extracting
"""

import shutil
import tempfile
import unittest
from datetime import datetime
from pathlib import Path
from unittest.mock import MagicMock

from marky.archive import (
    ArchiveManager,
    BackupResult,
    RestoreReport,
    SettingsBundle,
    default_backup_name,
)
from marky.workspace import scan_workspace


class FakeDialogs:
    """Dialogs returning preset answers and recording what was asked."""

    def __init__(self, archive=None, directory=None, save_path=None):
        self.archive = archive
        self.directory = directory
        self.save_path = save_path
        self.asked: list[str] = []

    def pick_archive(self):
        self.asked.append("archive")
        return self.archive

    def pick_directory(self):
        self.asked.append("directory")
        return self.directory

    def pick_save_path(self, default_name):
        self.asked.append(f"save:{default_name}")
        return self.save_path


class TestDefaultBackupName(unittest.TestCase):
    """Tests for default_backup_name."""

    def test_uses_folder_name_and_date(self):
        name = default_backup_name("/home/me/notes", today=datetime(2024, 1, 15))
        self.assertEqual(name, "notes-backup-2024-01-15.zip")

    def test_trailing_separator_and_windows_paths(self):
        today = datetime(2024, 1, 15)
        self.assertEqual(default_backup_name("/home/me/notes/", today), "notes-backup-2024-01-15.zip")
        self.assertEqual(default_backup_name("C:\\Users\\me\\Notes", today), "Notes-backup-2024-01-15.zip")

    def test_fallback_name(self):
        self.assertEqual(default_backup_name("/", datetime(2024, 1, 15)), "workspace-backup-2024-01-15.zip")


class TestArchiveManager(unittest.TestCase):
    """Tests for ArchiveManager."""

    def setUp(self):
        self.temp_dir = Path(tempfile.mkdtemp())
        self.workspace = self.temp_dir / "notes"
        (self.workspace / "daily").mkdir(parents=True)
        (self.workspace / "todo.md").write_text("- [ ] ship it\n", encoding="utf-8")
        (self.workspace / "daily" / "2024-01-15.md").write_text("# Monday\n", encoding="utf-8")
        self.items = scan_workspace(self.workspace)
        self.backup_path = self.temp_dir / "backup.zip"

    def tearDown(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_create_backup_with_path(self):
        dialogs = FakeDialogs()
        manager = ArchiveManager(dialogs)

        result = manager.create_backup(str(self.workspace), self.items, SettingsBundle(), save_path=self.backup_path)

        self.assertIsInstance(result, BackupResult)
        self.assertTrue(result.success)
        self.assertEqual(result.path, self.backup_path)
        self.assertTrue(self.backup_path.exists())
        self.assertEqual(result.size_bytes, self.backup_path.stat().st_size)
        self.assertEqual(result.manifest.note_count, 2)
        self.assertEqual(result.manifest.folder_count, 2)
        self.assertEqual(dialogs.asked, [])

    def test_create_backup_prompts_for_path(self):
        dialogs = FakeDialogs(save_path=str(self.backup_path))

        result = ArchiveManager(dialogs).create_backup(str(self.workspace), self.items)

        self.assertTrue(result.success)
        self.assertEqual(len(dialogs.asked), 1)
        self.assertTrue(dialogs.asked[0].startswith("save:notes-backup-"))
        self.assertTrue(self.backup_path.exists())

    def test_create_backup_cancelled(self):
        result = ArchiveManager(FakeDialogs(save_path=None)).create_backup(str(self.workspace), self.items)

        self.assertIsNone(result)
        self.assertEqual(list(self.temp_dir.glob("*.zip")), [])

    def test_create_backup_without_workspace(self):
        dialogs = FakeDialogs(save_path=str(self.backup_path))

        result = ArchiveManager(dialogs).create_backup(None, self.items)

        self.assertFalse(result.success)
        self.assertIn("No workspace folder is open", result.error)
        self.assertEqual(dialogs.asked, [])
        self.assertFalse(self.backup_path.exists())

    def test_create_backup_write_failure(self):
        result = ArchiveManager(FakeDialogs()).create_backup(
            str(self.workspace),
            self.items,
            save_path=self.temp_dir / "missing-dir" / "backup.zip",
        )

        self.assertFalse(result.success)
        self.assertIn("Could not save backup", result.error)

    def test_restore_round_trip(self):
        manager = ArchiveManager(FakeDialogs())
        manager.create_backup(str(self.workspace), self.items, save_path=self.backup_path)
        target = self.temp_dir / "restored"

        report = manager.restore_backup(zip_path=self.backup_path, target_folder_path=target)

        self.assertIsInstance(report, RestoreReport)
        self.assertTrue(report.success)
        self.assertEqual(report.result.written_count, 3)
        self.assertEqual((target / "todo.md").read_text(encoding="utf-8"), "- [ ] ship it\n")
        self.assertEqual((target / "daily" / "2024-01-15.md").read_text(encoding="utf-8"), "# Monday\n")
        self.assertEqual(report.result.zip_path, str(self.backup_path))
        self.assertIn("Restored 3 files", report.summary())

    def test_restore_prompts_for_paths(self):
        manager = ArchiveManager(FakeDialogs())
        manager.create_backup(str(self.workspace), self.items, save_path=self.backup_path)
        target = self.temp_dir / "restored"
        dialogs = FakeDialogs(archive=str(self.backup_path), directory=str(target))

        report = ArchiveManager(dialogs).restore_backup()

        self.assertTrue(report.success)
        self.assertEqual(dialogs.asked, ["archive", "directory"])
        self.assertTrue((target / "todo.md").exists())

    def test_restore_cancelled_at_archive(self):
        dialogs = FakeDialogs(archive=None, directory=str(self.temp_dir))

        self.assertIsNone(ArchiveManager(dialogs).restore_backup())
        self.assertEqual(dialogs.asked, ["archive"])

    def test_restore_cancelled_at_directory(self):
        fs = MagicMock()
        dialogs = FakeDialogs(archive=str(self.backup_path), directory=None)

        self.assertIsNone(ArchiveManager(dialogs, fs=fs).restore_backup())
        fs.read_file.assert_not_called()
        fs.write_file.assert_not_called()

    def test_restore_corrupt_archive(self):
        self.backup_path.write_bytes(b"definitely not a zip")
        target = self.temp_dir / "restored"

        report = ArchiveManager(FakeDialogs()).restore_backup(zip_path=self.backup_path, target_folder_path=target)

        self.assertFalse(report.success)
        self.assertIsNone(report.result)
        self.assertIn("Not a valid zip archive", report.error)
        self.assertFalse(target.exists())

    def test_restore_missing_archive(self):
        report = ArchiveManager(FakeDialogs()).restore_backup(
            zip_path=self.temp_dir / "nope.zip",
            target_folder_path=self.temp_dir,
        )

        self.assertFalse(report.success)
        self.assertIn("Could not read archive", report.error)

    def test_get_backup_info(self):
        manager = ArchiveManager(FakeDialogs())
        manager.create_backup(str(self.workspace), self.items, save_path=self.backup_path)

        manifest = manager.get_backup_info(self.backup_path)

        self.assertEqual(manifest.note_count, 2)
        self.assertEqual(manifest.root_folder, str(self.workspace))

    def test_get_backup_info_unreadable(self):
        self.backup_path.write_bytes(b"junk")
        manager = ArchiveManager(FakeDialogs())

        self.assertIsNone(manager.get_backup_info(self.backup_path))
        self.assertIsNone(manager.get_backup_info(self.temp_dir / "missing.zip"))


if __name__ == "__main__":
    unittest.main()
