"""
Archive entry path sanitization.

Every entry name read from an archive is untrusted. Before an entry touches
the filesystem its name is passed through :func:`sanitize_entry_path`, which
either returns a canonical :class:`RelativePath` or an :class:`Unsafe`
marker. A ``RelativePath`` can only be obtained from the sanitizer, so holding
one means the name has already been validated.

Rules:
    - Backslashes are treated as separators (archives made on Windows)
    - Absolute names are rejected
    - Empty and "." segments are dropped
    - Any ".." segment is rejected
    - A name with no segments left is rejected
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

_SANITIZER_TOKEN = object()


@dataclass(frozen=True)
class RelativePath:
    """
    A validated, forward-slash delimited path relative to a destination root.

    Attributes:
        value: Canonical path, e.g. "notes/daily/2024-01-15.md".
    """

    value: str
    _token: Any = field(default=None, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self._token is not _SANITIZER_TOKEN:
            raise TypeError("RelativePath can only be created by sanitize_entry_path()")

    @property
    def parts(self) -> tuple[str, ...]:
        """Path segments."""
        return tuple(self.value.split("/"))

    @property
    def name(self) -> str:
        """Final segment."""
        return self.parts[-1]

    def __str__(self) -> str:
        return self.value

    def __eq__(self, other: object) -> bool:
        if isinstance(other, RelativePath):
            return self.value == other.value
        if isinstance(other, str):
            return self.value == other
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.value)


@dataclass(frozen=True)
class Unsafe:
    """Rejected entry name and the reason it was rejected."""

    entry_name: str
    reason: str


def normalize_separators(value: str) -> str:
    """Convert backslashes to forward slashes."""
    return value.replace("\\", "/")


def sanitize_entry_path(entry_name: Any) -> RelativePath | Unsafe:
    """
    Validate and normalize a single archive entry name.

    Never raises: every input produces either a RelativePath or Unsafe.

    Args:
        entry_name: Entry name as stored in the archive.

    Returns:
        RelativePath for a safe name, Unsafe otherwise.
    """
    if not isinstance(entry_name, str):
        return Unsafe(entry_name=repr(entry_name), reason="entry name is not a string")

    normalized = normalize_separators(entry_name)
    if normalized.startswith("/"):
        return Unsafe(entry_name=entry_name, reason="absolute path")

    segments = [segment for segment in normalized.split("/") if segment not in ("", ".")]

    if ".." in segments:
        return Unsafe(entry_name=entry_name, reason="path traversal")
    if not segments:
        return Unsafe(entry_name=entry_name, reason="empty path")

    return RelativePath(value="/".join(segments), _token=_SANITIZER_TOKEN)


def is_safe(entry_name: Any) -> bool:
    """Return True if the entry name sanitizes to a RelativePath."""
    return isinstance(sanitize_entry_path(entry_name), RelativePath)
