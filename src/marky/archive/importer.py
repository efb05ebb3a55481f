"""
Workspace restore.

Reconstitutes files from a workspace archive into a destination folder.
Archives come from outside the application and are treated as hostile:

    - The container is fully checked before anything is written; bytes that
      are not a readable zip raise ArchiveCorrupt and leave the destination
      untouched.
    - Every entry name goes through sanitize_entry_path before any
      filesystem access. Unsafe names are counted and skipped.
    - Existing files are only replaced when overwrite_existing is set.

Each file entry ends in exactly one outcome (written, skipped because it
exists, skipped because its name is unsafe); directory entries are ignored.
Manifest and settings markers are decoded into the result and then restored
like any other file. Markers never gate other writes, so the order entries
appear in the archive does not matter.

There is no rollback. A failure while writing (DestinationWriteError) stops
the restore and files already written stay in place. Two restores into the
same folder at the same time are not supported.
"""

from __future__ import annotations

import io
import logging
import zipfile
import zlib
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from marky.archive.errors import ArchiveCorrupt, DestinationWriteError
from marky.archive.manifest import (
    MANIFEST_ENTRY,
    SETTINGS_ENTRY,
    Manifest,
    SettingsBundle,
    decode_manifest,
    decode_settings,
)
from marky.archive.paths import RelativePath, normalize_separators, sanitize_entry_path
from marky.workspace.filesystem import FileSystem, LocalFileSystem

logger = logging.getLogger(__name__)

_CONTAINER_ERRORS = (
    zipfile.BadZipFile,
    zipfile.LargeZipFile,
    zlib.error,
    EOFError,
    OSError,
    RuntimeError,
    NotImplementedError,
    ValueError,
    TypeError,
)

# MS-DOS directory attribute in the low byte of ZipInfo.external_attr
_DOS_DIRECTORY_ATTR = 0x10


class EntryOutcome(Enum):
    """What happened to a single archive entry."""

    WRITTEN = "written"
    SKIPPED_EXISTING = "skipped_existing"
    SKIPPED_UNSAFE = "skipped_unsafe"


@dataclass(frozen=True)
class RestoreResult:
    """
    Outcome of one restore run.

    Attributes:
        zip_path: Archive the entries came from (for audit/logging).
        target_folder_path: Folder the entries were restored into.
        written_count: Entries written to disk.
        skipped_existing_count: Entries skipped because the file existed.
        skipped_unsafe_count: Entries rejected by path sanitization.
        manifest: Decoded manifest, if present and well formed.
        settings: Decoded settings bundle, if present and well formed.
    """

    zip_path: str
    target_folder_path: str
    written_count: int = 0
    skipped_existing_count: int = 0
    skipped_unsafe_count: int = 0
    manifest: Manifest | None = None
    settings: SettingsBundle | None = None

    @property
    def file_entry_count(self) -> int:
        """Number of file entries processed."""
        return self.written_count + self.skipped_existing_count + self.skipped_unsafe_count

    def summary(self) -> str:
        """One-line human readable summary of the run."""
        parts = [f"Restored {self.written_count} file{'s' if self.written_count != 1 else ''}"]
        if self.skipped_existing_count:
            parts.append(f"skipped {self.skipped_existing_count} existing")
        if self.skipped_unsafe_count:
            parts.append(f"skipped {self.skipped_unsafe_count} unsafe")
        return ", ".join(parts) + f" into {self.target_folder_path}"


def open_archive(archive_bytes: bytes) -> zipfile.ZipFile:
    """
    Open and verify zip bytes.

    Every member is read and CRC-checked so that a damaged archive is
    detected before anything is extracted.

    Raises:
        ArchiveCorrupt: If the bytes are not a readable zip archive.
    """
    if not isinstance(archive_bytes, (bytes, bytearray, memoryview)):
        raise ArchiveCorrupt(f"Archive data must be bytes, got {type(archive_bytes).__name__}")

    try:
        zf = zipfile.ZipFile(io.BytesIO(bytes(archive_bytes)))
    except _CONTAINER_ERRORS as e:
        raise ArchiveCorrupt(f"Not a valid zip archive: {e}") from e

    try:
        bad_member = zf.testzip()
    except _CONTAINER_ERRORS as e:
        zf.close()
        raise ArchiveCorrupt(f"Archive could not be read: {e}") from e

    if bad_member is not None:
        zf.close()
        raise ArchiveCorrupt(f"Archive entry is damaged: {bad_member}")

    return zf


def is_directory_entry(info: zipfile.ZipInfo) -> bool:
    """
    Check whether an archive entry is a directory.

    Covers trailing "/" or "\\" names and archives that only flag directories
    through the MS-DOS attribute bit.
    """
    if info.is_dir() or normalize_separators(info.filename).endswith("/"):
        return True
    return bool(info.external_attr & _DOS_DIRECTORY_ATTR)


class RestoreCoordinator:
    """
    Restores workspace archives into a destination folder.

    Example:
        coordinator = RestoreCoordinator()
        result = coordinator.restore(data, "/home/me/restored", overwrite_existing=False)
        print(result.summary())
    """

    def __init__(self, fs: FileSystem | None = None) -> None:
        """
        Initialize the coordinator.

        Args:
            fs: Filesystem used for directory creation and writes
                (default: local disk).
        """
        self.fs = fs or LocalFileSystem()

    def restore(
        self,
        archive_bytes: bytes,
        target_folder_path: str | Path,
        overwrite_existing: bool = False,
        zip_path: str | Path = "",
    ) -> RestoreResult:
        """
        Restore every entry of an archive into a folder.

        Args:
            archive_bytes: Zip archive contents.
            target_folder_path: Destination folder (created if missing).
            overwrite_existing: Replace files that already exist.
            zip_path: Where the archive came from, recorded in the result.

        Returns:
            RestoreResult with per-outcome counters and decoded metadata.

        Raises:
            ArchiveCorrupt: If the bytes are not a readable zip archive.
            DestinationWriteError: If a directory or file cannot be written.
        """
        target = Path(target_folder_path)
        counts = {outcome: 0 for outcome in EntryOutcome}
        manifest: Manifest | None = None
        settings: SettingsBundle | None = None

        with open_archive(archive_bytes) as zf:
            for info in zf.infolist():
                if is_directory_entry(info):
                    continue

                relative = sanitize_entry_path(info.filename)
                if not isinstance(relative, RelativePath):
                    logger.warning(f"Skipping unsafe archive entry {info.filename!r}: {relative.reason}")
                    counts[EntryOutcome.SKIPPED_UNSAFE] += 1
                    continue

                data = self._read_entry(zf, info)

                if relative == MANIFEST_ENTRY:
                    manifest = decode_manifest(data)
                if relative == SETTINGS_ENTRY:
                    settings = decode_settings(data)

                outcome = self._restore_entry(target, relative, data, overwrite_existing)
                counts[outcome] += 1

        result = RestoreResult(
            zip_path=str(zip_path),
            target_folder_path=str(target_folder_path),
            written_count=counts[EntryOutcome.WRITTEN],
            skipped_existing_count=counts[EntryOutcome.SKIPPED_EXISTING],
            skipped_unsafe_count=counts[EntryOutcome.SKIPPED_UNSAFE],
            manifest=manifest,
            settings=settings,
        )
        logger.info(result.summary())
        return result

    def _read_entry(self, zf: zipfile.ZipFile, info: zipfile.ZipInfo) -> bytes:
        try:
            return zf.read(info)
        except _CONTAINER_ERRORS as e:
            raise ArchiveCorrupt(f"Archive entry could not be read: {info.filename}") from e

    def _restore_entry(
        self,
        target: Path,
        relative: RelativePath,
        data: bytes,
        overwrite_existing: bool,
    ) -> EntryOutcome:
        destination = target.joinpath(*relative.parts)

        try:
            self.fs.mkdir(destination.parent, recursive=True)
        except OSError as e:
            raise DestinationWriteError(str(destination.parent), e) from e

        if not overwrite_existing and self.fs.exists(destination):
            logger.debug(f"Keeping existing file {destination}")
            return EntryOutcome.SKIPPED_EXISTING

        try:
            self.fs.write_file(destination, data)
        except OSError as e:
            raise DestinationWriteError(str(destination), e) from e

        logger.debug(f"Wrote {destination} ({len(data):,} bytes)")
        return EntryOutcome.WRITTEN


def restore_workspace(
    archive_bytes: bytes,
    target_folder_path: str | Path,
    overwrite_existing: bool = False,
    zip_path: str | Path = "",
    fs: FileSystem | None = None,
) -> RestoreResult:
    """Restore an archive into a folder using a one-off coordinator."""
    return RestoreCoordinator(fs).restore(
        archive_bytes,
        target_folder_path,
        overwrite_existing=overwrite_existing,
        zip_path=zip_path,
    )
