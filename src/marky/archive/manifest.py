"""
Manifest and settings records embedded in workspace archives.

Two reserved entries carry metadata rather than note content:

    .marky-manifest.json    provenance of the archive (when/what was exported)
    .marky-settings.json    snapshot of user preferences at export time

Encoding is deterministic JSON. Decoding is best-effort: anything missing or
malformed decodes to None so that a damaged manifest never blocks a restore.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

logger = logging.getLogger(__name__)

MANIFEST_ENTRY = ".marky-manifest.json"
SETTINGS_ENTRY = ".marky-settings.json"

# Bump when the manifest layout changes
MANIFEST_VERSION = "1.0"


@dataclass(frozen=True)
class Manifest:
    """
    Archive provenance record, written once per export.

    Attributes:
        exported_at: ISO-8601 timestamp of the export (UTC).
        note_count: Number of notes included in the archive.
        folder_count: Number of folders in the exported workspace.
        root_folder: Workspace root folder the archive was made from.
        version: Manifest schema version.
    """

    exported_at: str
    note_count: int
    folder_count: int
    root_folder: str
    version: str = MANIFEST_VERSION

    def __post_init__(self) -> None:
        for name in ("note_count", "folder_count"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise ValueError(f"{name} must be a non-negative integer, got {value!r}")

    @classmethod
    def create(cls, note_count: int, folder_count: int, root_folder: str) -> Manifest:
        """Create a manifest stamped with the current time."""
        return cls(
            exported_at=datetime.now(UTC).isoformat(),
            note_count=note_count,
            folder_count=folder_count,
            root_folder=root_folder,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to the on-disk dictionary layout."""
        return {
            "exportedAt": self.exported_at,
            "noteCount": self.note_count,
            "folderCount": self.folder_count,
            "rootFolder": self.root_folder,
            "version": self.version,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Manifest:
        """
        Create from the on-disk dictionary layout.

        Raises:
            KeyError: If a required key is missing.
            ValueError: If a field has the wrong type.
        """
        exported_at = data["exportedAt"]
        root_folder = data["rootFolder"]
        version = data.get("version", MANIFEST_VERSION)
        for key, value in (("exportedAt", exported_at), ("rootFolder", root_folder), ("version", version)):
            if not isinstance(value, str):
                raise ValueError(f"{key} must be a string, got {value!r}")

        return cls(
            exported_at=exported_at,
            note_count=data["noteCount"],
            folder_count=data["folderCount"],
            root_folder=root_folder,
            version=version,
        )


@dataclass(frozen=True)
class SettingsBundle:
    """
    Snapshot of user preferences captured at export time.

    The archive subsystem treats this as opaque beyond serialization. A
    preference that is None was not part of the snapshot and is left out of
    the encoded form; decoding never fills in values the archive did not
    carry. Keys other than the four known preferences can be carried in
    ``extra`` when encoding; unknown keys are dropped when decoding.
    """

    theme_id: str | None = None
    accent_color_id: str | None = None
    vim_mode: bool | None = None
    scroll_sync_enabled: bool | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to the on-disk dictionary layout."""
        known = {
            "themeId": self.theme_id,
            "accentColorId": self.accent_color_id,
            "vimMode": self.vim_mode,
            "scrollSyncEnabled": self.scroll_sync_enabled,
        }
        data = {key: value for key, value in known.items() if value is not None}
        for key, value in self.extra.items():
            if key not in known:
                data[key] = value
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SettingsBundle:
        """
        Create from the on-disk dictionary layout, ignoring unknown keys.

        Missing keys stay None.

        Raises:
            ValueError: If a known key has the wrong type.
        """
        theme_id = data.get("themeId")
        accent_color_id = data.get("accentColorId")
        vim_mode = data.get("vimMode")
        scroll_sync_enabled = data.get("scrollSyncEnabled")

        for key, value in (("themeId", theme_id), ("accentColorId", accent_color_id)):
            if value is not None and not isinstance(value, str):
                raise ValueError(f"{key} must be a string, got {value!r}")
        for key, value in (("vimMode", vim_mode), ("scrollSyncEnabled", scroll_sync_enabled)):
            if value is not None and not isinstance(value, bool):
                raise ValueError(f"{key} must be a boolean, got {value!r}")

        return cls(
            theme_id=theme_id,
            accent_color_id=accent_color_id,
            vim_mode=vim_mode,
            scroll_sync_enabled=scroll_sync_enabled,
        )


def _encode(data: dict[str, Any]) -> bytes:
    return json.dumps(data, indent=2, ensure_ascii=False).encode("utf-8")


def _decode_object(data: bytes | None) -> dict[str, Any] | None:
    if data is None:
        return None
    try:
        parsed = json.loads(data.decode("utf-8"))
    except (UnicodeDecodeError, ValueError, RecursionError):
        return None
    if not isinstance(parsed, dict):
        return None
    return parsed


def encode_manifest(manifest: Manifest) -> bytes:
    """Serialize a manifest to UTF-8 JSON."""
    return _encode(manifest.to_dict())


def decode_manifest(data: bytes | None) -> Manifest | None:
    """
    Parse manifest bytes.

    Args:
        data: Raw entry bytes, or None if the entry was absent.

    Returns:
        Manifest, or None if the bytes are absent or malformed.
    """
    parsed = _decode_object(data)
    if parsed is None:
        logger.debug("Manifest entry is missing or not a JSON object")
        return None
    try:
        return Manifest.from_dict(parsed)
    except (KeyError, TypeError, ValueError) as e:
        logger.debug(f"Ignoring malformed manifest: {e}")
        return None


def encode_settings(settings: SettingsBundle) -> bytes:
    """Serialize a settings bundle to UTF-8 JSON."""
    return _encode(settings.to_dict())


def decode_settings(data: bytes | None) -> SettingsBundle | None:
    """Parse settings bytes; None if absent or malformed."""
    parsed = _decode_object(data)
    if parsed is None:
        return None
    try:
        return SettingsBundle.from_dict(parsed)
    except (TypeError, ValueError) as e:
        logger.debug(f"Ignoring malformed settings: {e}")
        return None
