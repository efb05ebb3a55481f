"""
Workspace snapshot models.

The live workspace is owned by the application's store. The archive subsystem
receives an explicit list of WorkspaceItem records and only reads them.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ItemType(str, Enum):
    """Kind of workspace tree item."""

    NOTE = "note"
    FOLDER = "folder"


@dataclass(frozen=True)
class WorkspaceItem:
    """
    A single node of the workspace tree.

    Attributes:
        id: Stable identifier, e.g. "note::/home/me/notes/todo.md".
        type: Note or folder.
        name: Display name (notes without their extension).
        file_path: Absolute path on disk, if the item has been saved.
        parent_id: Identifier of the containing folder, None for the root.
    """

    id: str
    type: ItemType
    name: str
    file_path: str | None = None
    parent_id: str | None = None

    @property
    def is_note(self) -> bool:
        return self.type is ItemType.NOTE

    @property
    def is_folder(self) -> bool:
        return self.type is ItemType.FOLDER
