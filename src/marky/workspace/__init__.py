"""
Workspace snapshot and filesystem access.

Usage:
    from marky.workspace import LocalFileSystem, scan_workspace

    items = scan_workspace("/home/me/notes")
"""

from marky.workspace.filesystem import FileSystem, LocalFileSystem
from marky.workspace.models import ItemType, WorkspaceItem
from marky.workspace.scanner import NOTE_EXTENSIONS, build_item_id, scan_workspace

__all__ = [
    "FileSystem",
    "LocalFileSystem",
    "ItemType",
    "WorkspaceItem",
    "NOTE_EXTENSIONS",
    "build_item_id",
    "scan_workspace",
]
