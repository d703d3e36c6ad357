"""
DirSync CLI Main Entry Point.

Thin command-line wrapper around SyncManager.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click
import humanize
from rich.console import Console
from rich.table import Table

from dirsync import __version__
from dirsync.core.config import DirSyncConfig, load_config
from dirsync.core.errors import DirSyncError
from dirsync.core.logging import setup_logging
from dirsync.core.models import SyncResult
from dirsync.sync.manager import SyncManager

console = Console()
error_console = Console(stderr=True)


def print_error(message: str) -> None:
    error_console.print(
        f"[ERROR] {message}", style="bold red", markup=False, highlight=False, soft_wrap=True
    )


def render_summary(result: SyncResult) -> Table:
    summary = result.summary
    title = "Dry Run Summary" if result.dry_run else "Sync Summary"
    table = Table(title=title)
    table.add_column("Item", style="cyan")
    table.add_column("Value", style="white")

    table.add_row("Source", str(result.source))
    table.add_row("Destination", str(result.destination))
    table.add_row(
        "Source files",
        f"{summary.source_count_before} -> {summary.source_count_after}",
    )
    table.add_row(
        "Destination files",
        f"{summary.destination_count_before} -> {summary.destination_count_after}",
    )
    table.add_row("Directories created", str(summary.directories_created))
    table.add_row(
        "Files copied",
        f"{summary.copied} ({humanize.naturalsize(summary.bytes_copied, binary=True)})",
    )
    table.add_row("Files deleted", str(summary.deleted))
    table.add_row("Deletions skipped", str(summary.skipped_deletions))
    table.add_row("Errors", str(summary.errors))
    if result.duration_seconds is not None:
        table.add_row("Duration", humanize.precisedelta(result.duration_seconds))
    if result.log_file:
        table.add_row("Log file", str(result.log_file))
    return table


@click.command()
@click.version_option(version=__version__, prog_name="DirSync")
@click.argument("source", type=click.Path(path_type=Path))
@click.argument("destination", type=click.Path(path_type=Path))
@click.option(
    "--log",
    "log_file",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Run log file (default: timestamped file in the log directory)",
)
@click.option("--force", "-f", is_flag=True, help="Delete orphaned files without asking")
@click.option("--dry-run", "-n", is_flag=True, help="Log planned actions without changing anything")
@click.option(
    "--compare-content",
    is_flag=True,
    help="Also copy files whose content differs despite matching timestamps",
)
@click.option(
    "--continue-on-error",
    is_flag=True,
    help="Keep copying remaining files after a failed copy",
)
@click.option(
    "--exclude",
    "-x",
    "exclude_patterns",
    multiple=True,
    help="Glob of relative paths to ignore (repeatable)",
)
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to configuration file",
)
@click.option("--verbose", "-v", is_flag=True, help="Show diagnostic logging")
@click.option("--json", "json_output", is_flag=True, help="Output result in JSON format")
def cli(
    source: Path,
    destination: Path,
    log_file: Path | None,
    force: bool,
    dry_run: bool,
    compare_content: bool,
    continue_on_error: bool,
    exclude_patterns: tuple[str, ...],
    config_path: Path | None,
    verbose: bool,
    json_output: bool,
) -> None:
    """
    Make DESTINATION match SOURCE.

    New and modified files are copied from SOURCE; files in DESTINATION with
    no counterpart in SOURCE are deleted after confirmation (or without
    asking under --force). Subfolders in DESTINATION are never removed.
    """
    config = DirSyncConfig.load(config_path) if config_path else load_config()
    apply_overrides(
        config,
        force=force,
        dry_run=dry_run,
        compare_content=compare_content,
        continue_on_copy_error=continue_on_error,
        exclude_patterns=exclude_patterns,
    )
    if verbose:
        config.logging.level = "DEBUG"
    # stdout carries only the JSON document under --json
    run_console = error_console if json_output else console

    setup_logging(config.logging)

    try:
        result = SyncManager(config).run(
            source, destination, log_file=log_file, console=run_console
        )
    except DirSyncError as e:
        print_error(str(e))
        sys.exit(1)

    if json_output:
        click.echo(json.dumps(result.to_dict(), indent=2, default=str))
    else:
        console.print(render_summary(result))

    if not result.success:
        sys.exit(1)


def apply_overrides(config: DirSyncConfig, **overrides: object) -> None:
    """Copy command-line values onto the sync configuration. Unset flags keep the file's value."""
    for key, value in overrides.items():
        if not value:
            continue
        if key == "exclude_patterns":
            value = list(config.sync.exclude_patterns) + list(value)
        setattr(config.sync, key, value)


def main() -> None:
    """Main entry point."""
    try:
        cli()
    except KeyboardInterrupt:
        console.print("\n[yellow]Operation cancelled[/yellow]")
        sys.exit(130)
    except Exception as e:
        print_error(str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
