"""
Filesystem access used by export and restore.

Archive code never calls ``open`` directly; it goes through a FileSystem so
callers (and tests) can substitute their own implementation.
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol


class FileSystem(Protocol):
    """Operations the archive subsystem needs from the filesystem."""

    def read_text_file(self, path: str | Path) -> str: ...

    def read_file(self, path: str | Path) -> bytes: ...

    def write_file(self, path: str | Path, data: bytes) -> None: ...

    def exists(self, path: str | Path) -> bool: ...

    def mkdir(self, path: str | Path, recursive: bool = True) -> None: ...


class LocalFileSystem:
    """FileSystem backed by the local disk."""

    def read_text_file(self, path: str | Path) -> str:
        """Read a UTF-8 text file."""
        return Path(path).read_text(encoding="utf-8")

    def read_file(self, path: str | Path) -> bytes:
        return Path(path).read_bytes()

    def write_file(self, path: str | Path, data: bytes) -> None:
        """Create or truncate-overwrite a file with ``data``."""
        with open(path, "wb") as f:
            f.write(data)

    def exists(self, path: str | Path) -> bool:
        return Path(path).exists()

    def mkdir(self, path: str | Path, recursive: bool = True) -> None:
        """Create a directory; an existing directory is not an error."""
        Path(path).mkdir(parents=recursive, exist_ok=True)
