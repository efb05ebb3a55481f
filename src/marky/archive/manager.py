"""
Backup and restore manager for Marky workspaces.

Wraps the exporter and restore coordinator with the steps around them:
asking the user where to save or what to restore, reading and writing the
archive file, and turning fatal errors into result records with an error
message. A cancelled dialog is not an error; the operation returns None.

Operation flow (both directions):

    Idle -> SourceSelected -> DestinationSelected -> Processing -> Completed | Failed
"""

from __future__ import annotations

import logging
import zipfile
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Protocol

from marky.archive.errors import ArchiveError
from marky.archive.exporter import ArchiveExporter
from marky.archive.importer import RestoreCoordinator, RestoreResult, open_archive
from marky.archive.manifest import MANIFEST_ENTRY, Manifest, SettingsBundle, decode_manifest
from marky.archive.paths import normalize_separators
from marky.workspace.filesystem import FileSystem, LocalFileSystem
from marky.workspace.models import WorkspaceItem

logger = logging.getLogger(__name__)

ARCHIVE_EXTENSION = ".zip"


class Dialogs(Protocol):
    """
    File pickers used to choose archive locations.

    Each picker returns a path, or None when the user cancels.
    """

    def pick_archive(self) -> str | None: ...

    def pick_directory(self) -> str | None: ...

    def pick_save_path(self, default_name: str) -> str | None: ...


@dataclass
class BackupResult:
    """Result of a backup operation."""

    success: bool
    path: Path | None = None
    manifest: Manifest | None = None
    size_bytes: int = 0
    skipped_notes: list[str] = field(default_factory=list)
    error: str | None = None


@dataclass
class RestoreReport:
    """Result of a restore operation."""

    success: bool
    result: RestoreResult | None = None
    error: str | None = None

    def summary(self) -> str:
        if self.result is not None:
            return self.result.summary()
        return f"Restore failed: {self.error}"


def default_backup_name(root_folder_path: str, today: datetime | None = None) -> str:
    """Suggested archive file name, e.g. "notes-backup-2024-01-15.zip"."""
    folder_name = normalize_separators(root_folder_path).rstrip("/").split("/")[-1] or "workspace"
    date = (today or datetime.now()).strftime("%Y-%m-%d")
    return f"{folder_name}-backup-{date}{ARCHIVE_EXTENSION}"


class ArchiveManager:
    """
    Manages backup and restore operations for a workspace.

    Backups are zip archives containing every saved note, a manifest
    (.marky-manifest.json) and optionally the user's preferences
    (.marky-settings.json).
    """

    def __init__(self, dialogs: Dialogs, fs: FileSystem | None = None) -> None:
        """
        Initialize archive manager.

        Args:
            dialogs: Pickers used when a path is not supplied.
            fs: Filesystem collaborator (default: local disk).
        """
        self.dialogs = dialogs
        self.fs = fs or LocalFileSystem()
        self.exporter = ArchiveExporter(self.fs)
        self.coordinator = RestoreCoordinator(self.fs)

    def create_backup(
        self,
        root_folder_path: str | None,
        items: Iterable[WorkspaceItem],
        settings: SettingsBundle | None = None,
        save_path: str | Path | None = None,
    ) -> BackupResult | None:
        """
        Export a workspace and save the archive.

        Args:
            root_folder_path: Workspace root folder.
            items: Workspace snapshot to export.
            settings: Optional preferences snapshot to embed.
            save_path: Where to save; the save dialog is shown when omitted.

        Returns:
            BackupResult, or None if the save dialog was cancelled.
        """
        try:
            exported = self.exporter.build(root_folder_path, items, settings)
        except ArchiveError as e:
            return BackupResult(success=False, error=str(e))

        if save_path is None:
            save_path = self.dialogs.pick_save_path(default_backup_name(root_folder_path or ""))
            if not save_path:
                logger.info("Backup cancelled")
                return None

        path = Path(save_path)
        try:
            self.fs.write_file(path, exported.data)
        except OSError as e:
            logger.exception("Backup failed")
            return BackupResult(success=False, error=f"Could not save backup to {path}: {e}")

        logger.info(f"Backup created: {path} ({exported.size_bytes:,} bytes)")

        return BackupResult(
            success=True,
            path=path,
            manifest=exported.manifest,
            size_bytes=exported.size_bytes,
            skipped_notes=exported.skipped_notes,
        )

    def restore_backup(
        self,
        overwrite_existing: bool = False,
        zip_path: str | Path | None = None,
        target_folder_path: str | Path | None = None,
    ) -> RestoreReport | None:
        """
        Restore an archive into a folder.

        Args:
            overwrite_existing: Replace files that already exist.
            zip_path: Archive to restore; the file picker is shown when omitted.
            target_folder_path: Destination; the folder picker is shown when omitted.

        Returns:
            RestoreReport, or None if a picker was cancelled.
        """
        if zip_path is None:
            zip_path = self.dialogs.pick_archive()
            if not zip_path:
                logger.info("Restore cancelled: no archive selected")
                return None

        if target_folder_path is None:
            target_folder_path = self.dialogs.pick_directory()
            if not target_folder_path:
                logger.info("Restore cancelled: no destination selected")
                return None

        try:
            archive_bytes = self.fs.read_file(zip_path)
        except OSError as e:
            return RestoreReport(success=False, error=f"Could not read archive {zip_path}: {e}")

        try:
            result = self.coordinator.restore(
                archive_bytes,
                target_folder_path,
                overwrite_existing=overwrite_existing,
                zip_path=zip_path,
            )
        except ArchiveError as e:
            logger.error(f"Restore from {zip_path} failed: {e}")
            return RestoreReport(success=False, error=str(e))

        return RestoreReport(success=True, result=result)

    def get_backup_info(self, zip_path: str | Path) -> Manifest | None:
        """
        Read the manifest of an archive without extracting it.

        Returns:
            Manifest, or None if the archive or its manifest cannot be read.
        """
        try:
            with open_archive(self.fs.read_file(zip_path)) as zf:
                return decode_manifest(zf.read(MANIFEST_ENTRY))
        except (OSError, KeyError, zipfile.BadZipFile, ArchiveError):
            return None
