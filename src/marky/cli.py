"""
Command-line interface for Marky.

Provides commands to back up a workspace folder into a zip archive, restore
an archive into a folder, and inspect an archive's manifest.

Uses Python's argparse module (no external CLI libraries).
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import NoReturn

from marky import __version__
from marky.archive import ArchiveManager, WorkspaceNotOpen, default_backup_name
from marky.config.settings import (
    ConfigurationError,
    Settings,
    get_config_path,
    load_config,
    save_config,
)
from marky.workspace import WorkspaceItem, scan_workspace

# Set up logging
logger = logging.getLogger(__name__)

# Global verbosity settings (set during main() based on args)
_quiet_mode = False
_verbose_level = 0


def set_output_mode(quiet: bool = False, verbose: int = 0) -> None:
    """
    Set the output mode for the CLI.

    Args:
        quiet: If True, suppress non-essential output.
        verbose: Verbosity level (0=normal, 1+=verbose).
    """
    global _quiet_mode, _verbose_level
    _quiet_mode = quiet
    _verbose_level = verbose


def output(message: str = "", force: bool = False) -> None:
    """Print a message to stdout, respecting quiet mode."""
    if force or not _quiet_mode:
        print(message)


def output_verbose(message: str, level: int = 1) -> None:
    """Print a verbose message only if verbosity is high enough."""
    if _verbose_level >= level and not _quiet_mode:
        print(message)


def output_error(message: str) -> None:
    """Print an error message (always shown, even in quiet mode)."""
    print(message, file=sys.stderr)


class PromptDialogs:
    """
    Terminal stand-in for the application's file pickers.

    Each picker prompts for a path; an empty answer cancels.
    """

    def _ask(self, prompt: str) -> str | None:
        answer = input(prompt).strip()
        return answer or None

    def pick_archive(self) -> str | None:
        return self._ask("Archive to restore (empty to cancel): ")

    def pick_directory(self) -> str | None:
        return self._ask("Restore into folder (empty to cancel): ")

    def pick_save_path(self, default_name: str) -> str | None:
        return self._ask(f"Save backup as (e.g. {default_name}, empty to cancel): ")


def create_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser for Marky CLI."""
    parser = argparse.ArgumentParser(
        prog="marky",
        description="Back up and restore Marky note workspaces",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"marky {__version__}",
    )

    parser.add_argument(
        "--config",
        metavar="PATH",
        help="Override config file location (default: ~/.marky/config.yaml)",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase output verbosity (can be repeated)",
    )

    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Suppress non-essential output",
    )

    subparsers = parser.add_subparsers(
        title="commands",
        dest="command",
        metavar="<command>",
    )

    # init command
    init_parser = subparsers.add_parser(
        "init",
        help="Write a default configuration file",
        description="Create the config directory and a config file with default settings.",
    )
    init_parser.add_argument(
        "--force",
        action="store_true",
        help="Overwrite an existing config file",
    )
    init_parser.set_defaults(func=cmd_init)

    # backup command
    backup_parser = subparsers.add_parser(
        "backup",
        help="Back up a workspace into a zip archive",
        description=(
            "Archive every saved note in a workspace, with a manifest and a "
            "snapshot of your preferences. Unsaved editor changes are not included."
        ),
    )
    backup_parser.add_argument(
        "workspace",
        nargs="?",
        metavar="WORKSPACE",
        help="Workspace folder (default: marky.workspace_dir from config)",
    )
    backup_parser.add_argument(
        "--output",
        "-o",
        metavar="PATH",
        help="Archive file or directory to save into (default: backup.output_dir from config)",
    )
    backup_parser.add_argument(
        "--prompt",
        action="store_true",
        help="Ask where to save the archive",
    )
    backup_parser.add_argument(
        "--no-settings",
        action="store_true",
        dest="no_settings",
        help="Do not include preferences in the archive",
    )
    backup_parser.set_defaults(func=cmd_backup)

    # restore command
    restore_parser = subparsers.add_parser(
        "restore",
        help="Restore a workspace archive into a folder",
        description=(
            "Extract a workspace archive into a folder. Entries that would land "
            "outside the folder are skipped. Existing files are kept unless "
            "--overwrite is given."
        ),
    )
    restore_parser.add_argument(
        "archive",
        nargs="?",
        metavar="FILE",
        help="Archive to restore (prompted if omitted)",
    )
    restore_parser.add_argument(
        "target",
        nargs="?",
        metavar="TARGET",
        help="Folder to restore into (prompted if omitted)",
    )
    restore_parser.add_argument(
        "--overwrite",
        action="store_true",
        default=None,
        help="Replace files that already exist",
    )
    restore_parser.add_argument(
        "--force",
        action="store_true",
        help="Skip confirmation prompts",
    )
    restore_parser.set_defaults(func=cmd_restore)

    # inspect command
    inspect_parser = subparsers.add_parser(
        "inspect",
        help="Show the manifest of a workspace archive",
        description="Print when and from where an archive was exported, without extracting it.",
    )
    inspect_parser.add_argument(
        "archive",
        metavar="FILE",
        help="Archive to inspect",
    )
    inspect_parser.add_argument(
        "--json",
        action="store_true",
        help="Output as JSON",
    )
    inspect_parser.set_defaults(func=cmd_inspect)

    return parser


def setup_logging(verbose: int, quiet: bool, log_level: str = "INFO") -> None:
    """
    Configure logging.

    -q and -v take precedence over the configured log level.
    """
    if quiet:
        level = logging.WARNING
    elif verbose > 0:
        level = logging.DEBUG
    else:
        level = getattr(logging, log_level.upper(), logging.INFO)

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def _load_settings(args: argparse.Namespace) -> Settings:
    config_path = Path(args.config) if args.config else None
    return load_config(config_path)


def _configured_log_level(args: argparse.Namespace) -> str:
    """Log level from the config, or the default when the config cannot be loaded."""
    try:
        return _load_settings(args).log_level
    except ConfigurationError:
        # Commands that need the config report the error themselves
        return Settings().log_level


def _resolve_save_path(output_arg: str | None, settings: Settings, workspace: str) -> Path:
    """Archive path from --output (file or directory) or the configured output dir."""
    default_name = default_backup_name(workspace)
    if output_arg is None:
        return Path(settings.backup.output_dir) / default_name

    path = Path(output_arg)
    if path.is_dir() or output_arg.endswith(("/", "\\")):
        return path / default_name
    return path


def cmd_init(args: argparse.Namespace) -> int:
    """Write a default configuration file."""
    config_path = Path(args.config) if args.config else get_config_path()

    if config_path.exists() and not args.force:
        output(f"Config file already exists: {config_path}")
        output("Use --force to overwrite it.")
        return 0

    save_config(Settings(), config_path)
    output(f"Config file written: {config_path}")
    return 0


def cmd_backup(args: argparse.Namespace) -> int:
    """Back up a workspace into a zip archive."""
    settings = _load_settings(args)

    workspace = args.workspace or settings.workspace_dir
    if not workspace:
        output_error("Error: No workspace folder given and marky.workspace_dir is not set.")
        return 1

    output("Marky Backup")
    output("=" * 50)
    output()

    try:
        items: list[WorkspaceItem] = scan_workspace(workspace)
    except WorkspaceNotOpen as e:
        output_error(f"Error: {e}")
        return 1

    note_total = sum(1 for item in items if item.is_note)
    output(f"Workspace: {workspace}")
    output(f"Notes found: {note_total}")
    output("Note: only saved content is archived; unsaved editor changes are not included.")
    output()

    save_path = None if args.prompt else _resolve_save_path(args.output, settings, workspace)
    if save_path is not None:
        save_path.parent.mkdir(parents=True, exist_ok=True)

    bundle = None if args.no_settings or not settings.backup.include_settings else settings.preferences.to_bundle()

    manager = ArchiveManager(dialogs=PromptDialogs())
    result = manager.create_backup(workspace, items, settings=bundle, save_path=save_path)

    if result is None:
        output("Backup cancelled.")
        return 0

    if not result.success:
        output_error(f"Backup failed: {result.error}")
        return 1

    output("Backup created successfully!")
    output()
    output(f"  File: {result.path}")
    output(f"  Size: {result.size_bytes:,} bytes")
    if result.manifest:
        output(f"  Notes: {result.manifest.note_count}")
        output(f"  Folders: {result.manifest.folder_count}")
    if result.skipped_notes:
        output(f"  Skipped notes: {len(result.skipped_notes)}")
        for path in result.skipped_notes:
            output_verbose(f"    - {path}")
    output()
    output("To restore from this backup, run:")
    output(f"  marky restore {result.path} <folder>")
    return 0


def cmd_restore(args: argparse.Namespace) -> int:
    """Restore a workspace archive into a folder."""
    settings = _load_settings(args)
    overwrite = settings.backup.overwrite_existing if args.overwrite is None else args.overwrite

    output("Marky Restore")
    output("=" * 50)
    output()

    dialogs = PromptDialogs()
    archive = args.archive or dialogs.pick_archive()
    if not archive:
        output("Restore cancelled.")
        return 0

    target = args.target or dialogs.pick_directory()
    if not target:
        output("Restore cancelled.")
        return 0

    manager = ArchiveManager(dialogs=dialogs)

    manifest = manager.get_backup_info(archive)
    if manifest:
        output("Backup information:")
        output(f"  Exported: {manifest.exported_at}")
        output(f"  From: {manifest.root_folder}")
        output(f"  Notes: {manifest.note_count}")
        output(f"  Folders: {manifest.folder_count}")
        output()

    if overwrite and not args.force:
        output("WARNING: Existing files in the destination will be overwritten.")
        response = input("Proceed with restore? [y/N]: ").strip().lower()
        if response not in ("y", "yes"):
            output("Restore cancelled.")
            return 0

    output("Restoring...")
    report = manager.restore_backup(
        overwrite_existing=overwrite,
        zip_path=archive,
        target_folder_path=target,
    )

    if report is None:
        output("Restore cancelled.")
        return 0

    if not report.success or report.result is None:
        output_error(f"Restore failed: {report.error}")
        return 1

    result = report.result
    output()
    output(result.summary())
    output()
    output(f"  Written: {result.written_count}")
    output(f"  Skipped (already exist): {result.skipped_existing_count}")
    output(f"  Skipped (unsafe path): {result.skipped_unsafe_count}")
    if result.settings and result.settings.theme_id:
        output_verbose(f"  Preferences in archive: theme={result.settings.theme_id}")
    return 0


def cmd_inspect(args: argparse.Namespace) -> int:
    """Show the manifest of a workspace archive."""
    archive = Path(args.archive)
    if not archive.exists():
        output_error(f"Error: Archive not found: {archive}")
        return 1

    manager = ArchiveManager(dialogs=PromptDialogs())
    manifest = manager.get_backup_info(archive)
    if manifest is None:
        output_error(f"Error: No readable manifest in {archive}")
        return 1

    if args.json:
        output(json.dumps(manifest.to_dict(), indent=2), force=True)
        return 0

    output(f"Archive: {archive}")
    output(f"  Exported: {manifest.exported_at}")
    output(f"  From: {manifest.root_folder}")
    output(f"  Notes: {manifest.note_count}")
    output(f"  Folders: {manifest.folder_count}")
    output(f"  Version: {manifest.version}")
    return 0


def main() -> NoReturn:
    """Main entry point for Marky CLI."""
    parser = create_parser()
    args = parser.parse_args()

    # Set up logging and output mode
    setup_logging(args.verbose, args.quiet, _configured_log_level(args))
    set_output_mode(args.quiet, args.verbose)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    try:
        exit_code = args.func(args)
        sys.exit(exit_code)
    except KeyboardInterrupt:
        output("\nOperation cancelled.")
        sys.exit(130)
    except ConfigurationError as e:
        output_error(f"Configuration error: {e}")
        sys.exit(2)
    except Exception as e:
        if args.verbose > 0:
            raise
        output_error(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
