"""
Workspace archival for Marky.

This module exports a workspace (its saved notes, a manifest and optionally
the user's preferences) into a portable zip archive, and restores such
archives into a chosen folder without letting crafted entry names escape it.

Usage:
    from marky.archive import ArchiveExporter, RestoreCoordinator

    # Export a workspace snapshot
    data = ArchiveExporter().export(root_folder_path, items, settings)

    # Restore, keeping files that already exist
    result = RestoreCoordinator().restore(data, target_folder, overwrite_existing=False)
    print(result.summary())
"""

from marky.archive.errors import (
    ArchiveCorrupt,
    ArchiveError,
    DestinationWriteError,
    NoteReadError,
    WorkspaceNotOpen,
)
from marky.archive.exporter import (
    ArchiveExporter,
    ExportedArchive,
    archive_entry_name,
    export_workspace,
)
from marky.archive.importer import (
    EntryOutcome,
    RestoreCoordinator,
    RestoreResult,
    is_directory_entry,
    open_archive,
    restore_workspace,
)
from marky.archive.manager import (
    ArchiveManager,
    BackupResult,
    Dialogs,
    RestoreReport,
    default_backup_name,
)
from marky.archive.manifest import (
    MANIFEST_ENTRY,
    MANIFEST_VERSION,
    SETTINGS_ENTRY,
    Manifest,
    SettingsBundle,
    decode_manifest,
    decode_settings,
    encode_manifest,
    encode_settings,
)
from marky.archive.paths import RelativePath, Unsafe, is_safe, sanitize_entry_path

__all__ = [
    # Path sanitization
    "RelativePath",
    "Unsafe",
    "sanitize_entry_path",
    "is_safe",
    # Manifest codec
    "MANIFEST_ENTRY",
    "SETTINGS_ENTRY",
    "MANIFEST_VERSION",
    "Manifest",
    "SettingsBundle",
    "encode_manifest",
    "decode_manifest",
    "encode_settings",
    "decode_settings",
    # Export
    "ArchiveExporter",
    "ExportedArchive",
    "archive_entry_name",
    "export_workspace",
    # Restore
    "RestoreCoordinator",
    "RestoreResult",
    "EntryOutcome",
    "is_directory_entry",
    "open_archive",
    "restore_workspace",
    # Manager
    "ArchiveManager",
    "BackupResult",
    "RestoreReport",
    "Dialogs",
    "default_backup_name",
    # Exceptions
    "ArchiveError",
    "WorkspaceNotOpen",
    "NoteReadError",
    "ArchiveCorrupt",
    "DestinationWriteError",
]
