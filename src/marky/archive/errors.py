"""
Exception hierarchy for workspace archival.

Only fatal conditions are exceptions. Unsafe entry paths are reported by the
sanitizer as an ``Unsafe`` value and counted, and a cancelled dialog is a
``None`` return from the manager, so neither appears here.
"""

from __future__ import annotations


class ArchiveError(Exception):
    """Base class for archive export and restore errors."""

    pass


class WorkspaceNotOpen(ArchiveError):
    """Raised when an export is requested without a workspace root folder."""

    pass


class NoteReadError(ArchiveError):
    """
    A single note could not be read during export.

    The exporter recovers from this locally: the note is skipped and a
    warning is logged.
    """

    def __init__(self, file_path: str, cause: Exception) -> None:
        self.file_path = file_path
        self.cause = cause
        super().__init__(f"Could not read note {file_path}: {cause}")


class ArchiveCorrupt(ArchiveError):
    """Raised when the supplied bytes are not a readable zip archive."""

    pass


class DestinationWriteError(ArchiveError):
    """Raised when a directory or file cannot be written during restore."""

    def __init__(self, path: str, cause: Exception) -> None:
        self.path = path
        self.cause = cause
        super().__init__(f"Could not write {path}: {cause}")
