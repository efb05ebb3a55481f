"""
Build a workspace snapshot from a folder on disk.

The scan mirrors what the application shows in its sidebar: the root folder,
every non-hidden sub-folder, and every markdown or text note. Hidden entries
(names starting with ".") are skipped along with everything beneath them.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from marky.archive.errors import WorkspaceNotOpen
from marky.workspace.models import ItemType, WorkspaceItem

logger = logging.getLogger(__name__)

NOTE_EXTENSIONS = (".md", ".markdown", ".txt")


def _normalize(path: str) -> str:
    return path.replace("\\", "/")


def build_item_id(item_type: ItemType, path: str) -> str:
    """Identifier used by the workspace store, e.g. "note::/notes/a.md"."""
    return f"{item_type.value}::{_normalize(path)}"


def strip_note_extension(name: str) -> str:
    """Drop a note extension from a file name, keeping the name if nothing is left."""
    lowered = name.lower()
    for extension in NOTE_EXTENSIONS:
        if lowered.endswith(extension):
            return name[: -len(extension)] or name
    return name


def _collect(directory: Path, entries: list[tuple[Path, bool]]) -> None:
    for entry in directory.iterdir():
        if entry.name.startswith("."):
            continue
        if entry.is_dir():
            entries.append((entry, True))
            _collect(entry, entries)
        elif entry.is_file() and entry.suffix.lower() in NOTE_EXTENSIONS:
            entries.append((entry, False))


def scan_workspace(root_folder_path: str | Path) -> list[WorkspaceItem]:
    """
    Scan a workspace folder into a list of WorkspaceItem records.

    Folders come before notes; within each group entries are ordered by
    case-insensitive path. The root folder is always the first item.

    Args:
        root_folder_path: Workspace root folder.

    Returns:
        Items for the root, its sub-folders and its notes.

    Raises:
        WorkspaceNotOpen: If the folder does not exist or is not a directory.
    """
    if not root_folder_path:
        raise WorkspaceNotOpen("No workspace folder is open")

    root = Path(root_folder_path)
    if not root.exists():
        raise WorkspaceNotOpen(f"Workspace folder does not exist: {root}")
    if not root.is_dir():
        raise WorkspaceNotOpen(f"Workspace path is not a directory: {root}")

    root_path = str(root)
    root_id = build_item_id(ItemType.FOLDER, root_path)
    items = [
        WorkspaceItem(
            id=root_id,
            type=ItemType.FOLDER,
            name=root.name or root_path,
            file_path=root_path,
            parent_id=None,
        )
    ]

    entries: list[tuple[Path, bool]] = []
    _collect(root, entries)
    entries.sort(key=lambda entry: (not entry[1], _normalize(str(entry[0])).lower()))

    path_to_id = {_normalize(root_path): root_id}
    for path, is_dir in entries:
        path_str = str(path)
        parent_id = path_to_id.get(_normalize(os.path.dirname(path_str)), root_id)

        if is_dir:
            folder_id = build_item_id(ItemType.FOLDER, path_str)
            items.append(
                WorkspaceItem(
                    id=folder_id,
                    type=ItemType.FOLDER,
                    name=path.name,
                    file_path=path_str,
                    parent_id=parent_id,
                )
            )
            path_to_id[_normalize(path_str)] = folder_id
        else:
            items.append(
                WorkspaceItem(
                    id=build_item_id(ItemType.NOTE, path_str),
                    type=ItemType.NOTE,
                    name=strip_note_extension(path.name),
                    file_path=path_str,
                    parent_id=parent_id,
                )
            )

    logger.debug(f"Scanned workspace {root}: {len(items)} items")
    return items
