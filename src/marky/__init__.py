"""
Marky - workspace archival for the Marky note-taking app

Exports a folder of markdown notes into a portable, self-describing zip
archive and restores such archives safely into a chosen folder.

Key Features:
    - Archives saved note content plus a manifest and a preferences snapshot
    - Rejects archive entries that would escape the destination folder
    - Keeps or replaces existing files according to an overwrite flag
    - Reports exactly what was written and what was skipped
"""

__version__ = "0.1.0"
__author__ = ""
__email__ = ""

from marky.config.settings import Settings, load_config

__all__ = [
    "__version__",
    "Settings",
    "load_config",
]
