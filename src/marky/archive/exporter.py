"""
Workspace export.

Packs the saved content of every note in a workspace snapshot, plus a
manifest and an optional settings bundle, into a single zip buffer.

Only content that has been saved to disk is archived. Edits that exist only
in the editor's memory are not part of the export; callers should flush
pending saves first if they want them included.

The exporter is read-only with respect to the workspace: it never writes to
disk and never modifies the items it is given. Persisting the returned bytes
is the caller's job (see ArchiveManager.create_backup).
"""

from __future__ import annotations

import io
import logging
import zipfile
from collections.abc import Iterable
from dataclasses import dataclass, field

from marky.archive.errors import NoteReadError, WorkspaceNotOpen
from marky.archive.manifest import (
    MANIFEST_ENTRY,
    SETTINGS_ENTRY,
    Manifest,
    SettingsBundle,
    encode_manifest,
    encode_settings,
)
from marky.archive.paths import normalize_separators
from marky.workspace.filesystem import FileSystem, LocalFileSystem
from marky.workspace.models import WorkspaceItem

logger = logging.getLogger(__name__)


@dataclass
class ExportedArchive:
    """
    Result of building an archive.

    Attributes:
        data: The zip archive bytes.
        manifest: Manifest written into the archive.
        entry_names: Names of the note entries, in the order written.
        skipped_notes: Paths of notes left out of the archive (unreadable,
            or whose entry name is empty, reserved or already used).
    """

    data: bytes
    manifest: Manifest
    entry_names: list[str] = field(default_factory=list)
    skipped_notes: list[str] = field(default_factory=list)

    @property
    def size_bytes(self) -> int:
        return len(self.data)


def archive_entry_name(file_path: str, root_folder_path: str) -> str:
    """
    Compute the archive entry name for a note.

    The root folder prefix is removed when the note lives under it, separators
    become forward slashes and leading separators are dropped.

    Args:
        file_path: Absolute path of the note on disk.
        root_folder_path: Workspace root folder.

    Returns:
        Entry name such as "projects/todo.md".
    """
    path = normalize_separators(file_path)
    root = normalize_separators(root_folder_path).rstrip("/")

    if root and path.startswith(root) and path[len(root) : len(root) + 1] in ("", "/"):
        path = path[len(root) :]

    return path.lstrip("/")


class ArchiveExporter:
    """
    Builds workspace archives.

    Example:
        exporter = ArchiveExporter()
        data = exporter.export("/home/me/notes", items, settings)
    """

    def __init__(self, fs: FileSystem | None = None) -> None:
        """
        Initialize the exporter.

        Args:
            fs: Filesystem used to read notes (default: local disk).
        """
        self.fs = fs or LocalFileSystem()

    def export(
        self,
        root_folder_path: str | None,
        items: Iterable[WorkspaceItem],
        settings: SettingsBundle | None = None,
    ) -> bytes:
        """
        Export a workspace snapshot as zip bytes.

        Raises:
            WorkspaceNotOpen: If no root folder is given.
        """
        return self.build(root_folder_path, items, settings).data

    def build(
        self,
        root_folder_path: str | None,
        items: Iterable[WorkspaceItem],
        settings: SettingsBundle | None = None,
    ) -> ExportedArchive:
        """
        Export a workspace snapshot and report what was included.

        Args:
            root_folder_path: Workspace root folder.
            items: Workspace items to export. Only notes with a file path are
                archived; folders are counted for the manifest.
            settings: Optional preferences snapshot to embed.

        Returns:
            ExportedArchive with the archive bytes and export details.

        Raises:
            WorkspaceNotOpen: If no root folder is given.
        """
        if not root_folder_path:
            raise WorkspaceNotOpen("No workspace folder is open")

        items = list(items)
        folder_count = sum(1 for item in items if item.is_folder)

        entry_names: list[str] = []
        skipped_notes: list[str] = []
        taken = {MANIFEST_ENTRY, SETTINGS_ENTRY}
        buffer = io.BytesIO()

        with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as zf:
            for note in items:
                if not note.is_note or not note.file_path:
                    continue

                entry_name = archive_entry_name(note.file_path, root_folder_path)
                if not entry_name:
                    logger.warning(f"Skipping note with no name inside the workspace: {note.file_path}")
                    skipped_notes.append(note.file_path)
                    continue
                if entry_name in taken:
                    logger.warning(f"Skipping note {note.file_path}: archive entry {entry_name!r} is already in use")
                    skipped_notes.append(note.file_path)
                    continue

                try:
                    content = self._read_note(note.file_path)
                except NoteReadError as e:
                    logger.warning(f"Skipping note in backup: {e}")
                    skipped_notes.append(note.file_path)
                    continue

                zf.writestr(entry_name, content.encode("utf-8"))
                entry_names.append(entry_name)
                taken.add(entry_name)

            if settings is not None:
                zf.writestr(SETTINGS_ENTRY, encode_settings(settings))

            manifest = Manifest.create(
                note_count=len(entry_names),
                folder_count=folder_count,
                root_folder=root_folder_path,
            )
            zf.writestr(MANIFEST_ENTRY, encode_manifest(manifest))

        data = buffer.getvalue()
        logger.info(
            f"Exported {len(entry_names)} notes and {folder_count} folders "
            f"from {root_folder_path} ({len(data):,} bytes)"
        )
        if skipped_notes:
            logger.warning(f"{len(skipped_notes)} notes were left out of the archive")

        return ExportedArchive(
            data=data,
            manifest=manifest,
            entry_names=entry_names,
            skipped_notes=skipped_notes,
        )

    def _read_note(self, file_path: str) -> str:
        try:
            return self.fs.read_text_file(file_path)
        except (OSError, UnicodeDecodeError) as e:
            raise NoteReadError(file_path, e) from e


def export_workspace(
    root_folder_path: str | None,
    items: Iterable[WorkspaceItem],
    settings: SettingsBundle | None = None,
    fs: FileSystem | None = None,
) -> bytes:
    """Export a workspace snapshot as zip bytes using a one-off exporter."""
    return ArchiveExporter(fs).export(root_folder_path, items, settings)
