"""
DirSync sync manager.

Drives a one-way synchronization run: validation, enumeration, planning,
execution and before/after accounting in the run log.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Iterable

from rich.console import Console

from dirsync.core.config import DirSyncConfig, get_default_config
from dirsync.core.errors import DirSyncError, LogSinkError, SyncCancelledError
from dirsync.core.logging import RunLogger, get_logger, open_run_logger
from dirsync.core.models import SyncResult
from dirsync.core.safety import CancellationToken, ConfirmationPolicy, policy_for
from dirsync.sync.executor import SyncExecutor
from dirsync.sync.reconciler import build_plan
from dirsync.sync.scanner import count_files, scan_tree, validate_roots

logger = get_logger(__name__)


@dataclass
class SyncRun:
    """Execution context for one invocation. Closing it closes the run log."""

    source: Path
    destination: Path
    run_logger: RunLogger
    confirmation: ConfirmationPolicy
    cancel_token: CancellationToken = field(default_factory=CancellationToken)
    exclude_patterns: list[str] = field(default_factory=list)

    def count_files(self) -> tuple[int, int]:
        return (
            count_files(self.source, self.exclude_patterns),
            count_files(self.destination, self.exclude_patterns),
        )

    def log_counts(self, source_count: int, destination_count: int) -> None:
        self.run_logger.info(f"Source file count: {source_count}")
        self.run_logger.info(f"Destination file count: {destination_count}")

    def close(self) -> None:
        self.run_logger.close()

    def __enter__(self) -> SyncRun:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()


class SyncManager:
    """Handles one-way synchronization from a source to a destination."""

    def __init__(self, config: DirSyncConfig | None = None) -> None:
        self.config = config or get_default_config()

    def run(
        self,
        source: Path | str,
        destination: Path | str,
        *,
        log_file: Path | None = None,
        confirmation: ConfirmationPolicy | None = None,
        cancel_token: CancellationToken | None = None,
        run_logger: RunLogger | None = None,
        console: Console | None = None,
        exclude_patterns: Iterable[str] | None = None,
    ) -> SyncResult:
        options = self.config.sync
        source_root, destination_root = validate_roots(source, destination)

        if run_logger is None:
            if log_file is None:
                log_file = self.config.get_log_file()
            run_logger = open_run_logger(
                log_file,
                console,
                console_enabled=self.config.logging.console_enabled,
            )

        result = SyncResult(
            source=source_root,
            destination=destination_root,
            started_at=datetime.now(),
            log_file=run_logger.log_file,
            dry_run=options.dry_run,
        )

        sync_run = SyncRun(
            source=source_root,
            destination=destination_root,
            run_logger=run_logger,
            confirmation=confirmation or policy_for(options.force),
            cancel_token=cancel_token or CancellationToken(),
            exclude_patterns=list(exclude_patterns or options.exclude_patterns),
        )

        logger.info(
            "Sync started",
            source=str(source_root),
            destination=str(destination_root),
            dry_run=options.dry_run,
        )

        with sync_run:
            try:
                self._execute(sync_run, result)
            finally:
                self._finish(sync_run, result)

        logger.info("Sync finished", success=result.success, errors=len(result.errors))
        return result

    def _execute(self, sync_run: SyncRun, result: SyncResult) -> None:
        options = self.config.sync
        source_map = scan_tree(sync_run.source, sync_run.exclude_patterns)
        destination_map = scan_tree(sync_run.destination, sync_run.exclude_patterns)

        result.summary.source_count_before = len(source_map)
        result.summary.destination_count_before = len(destination_map)
        sync_run.log_counts(len(source_map), len(destination_map))

        executor = SyncExecutor(
            sync_run.source,
            sync_run.destination,
            sync_run.run_logger,
            sync_run.confirmation,
            continue_on_copy_error=options.continue_on_copy_error,
            dry_run=options.dry_run,
            cancel_token=sync_run.cancel_token,
        )

        try:
            result.plan = build_plan(
                source_map.values(),
                destination_map.values(),
                compare_content=options.compare_content,
            )
            executor.apply(result.plan)
        except LogSinkError:
            raise
        except SyncCancelledError as exc:
            sync_run.run_logger.error(str(exc))
            result.fatal_error = str(exc)
        except DirSyncError as exc:
            # already logged by the executor
            result.fatal_error = str(exc)
        finally:
            report = executor.report
            result.errors.extend(report.errors)
            result.summary.directories_created = report.directories_created
            result.summary.copied = report.copied
            result.summary.bytes_copied = report.bytes_copied
            result.summary.deleted = report.deleted
            result.summary.skipped_deletions = report.skipped_deletions

    def _finish(self, sync_run: SyncRun, result: SyncResult) -> None:
        source_count, destination_count = sync_run.count_files()
        result.summary.source_count_after = source_count
        result.summary.destination_count_after = destination_count
        sync_run.log_counts(source_count, destination_count)

        result.summary.errors = sync_run.run_logger.error_count
        result.ended_at = datetime.now()


def sync_directories(
    source: Path | str,
    destination: Path | str,
    config: DirSyncConfig | None = None,
    **kwargs: Any,
) -> SyncResult:
    """Run a synchronization with the given (or default) configuration."""
    return SyncManager(config).run(source, destination, **kwargs)
