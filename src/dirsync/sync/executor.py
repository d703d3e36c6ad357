"""
Plan execution.

Applies a SyncPlan: creates missing directories, copies files, then deletes
orphaned files. Every action is written to the run logger before the
filesystem is touched.
"""

from __future__ import annotations

import shutil
from dataclasses import dataclass, field
from pathlib import Path

from dirsync.core.errors import CopyError, DeleteError, DirectoryCreateError
from dirsync.core.logging import RunLogger, get_logger
from dirsync.core.models import SyncPlan
from dirsync.core.safety import CancellationToken, ConfirmationPolicy

logger = get_logger(__name__)


@dataclass
class ExecutionReport:
    directories_created: int = 0
    copied: int = 0
    bytes_copied: int = 0
    deleted: int = 0
    skipped_deletions: int = 0
    errors: list[str] = field(default_factory=list)


class SyncExecutor:
    """
    Applies copy and delete decisions to the destination tree.

    Copy failures and directory failures are fatal: the exception is logged
    and re-raised, and nothing else is mutated. With
    ``continue_on_copy_error`` a failed copy is recorded and the next file is
    processed instead. Delete failures never stop the delete phase.
    """

    def __init__(
        self,
        source_root: Path,
        destination_root: Path,
        run_logger: RunLogger,
        confirmation: ConfirmationPolicy,
        *,
        continue_on_copy_error: bool = False,
        dry_run: bool = False,
        cancel_token: CancellationToken | None = None,
    ) -> None:
        self.source_root = source_root
        self.destination_root = destination_root
        self.log = run_logger
        self.confirmation = confirmation
        self.continue_on_copy_error = continue_on_copy_error
        self.dry_run = dry_run
        self.cancel_token = cancel_token or CancellationToken()
        self.report = ExecutionReport()
        self._planned_dirs: set[Path] = set()

    def apply(self, plan: SyncPlan) -> ExecutionReport:
        for relative_path in plan.copy_order():
            self.cancel_token.check()
            self.copy(relative_path)

        for relative_path in plan.delete_order():
            self.cancel_token.check()
            self.delete(relative_path)

        return self.report

    def _missing_directories(self, directory: Path) -> list[Path]:
        missing: list[Path] = []
        current = directory
        while not current.is_dir() and current not in self._planned_dirs:
            missing.append(current)
            if current == current.parent:
                break
            current = current.parent
        missing.reverse()
        return missing

    def ensure_parent(self, destination: Path) -> None:
        """Create every missing ancestor of ``destination``, top-down."""
        for directory in self._missing_directories(destination.parent):
            if self.dry_run:
                self.log.info(f"Would create directory: {directory}")
                self._planned_dirs.add(directory)
                continue

            self.log.info(f"Creating directory: {directory}")
            try:
                directory.mkdir()
            except FileExistsError:
                if not directory.is_dir():
                    error = DirectoryCreateError(
                        directory, FileExistsError("a file is in the way")
                    )
                    self._fail(str(error))
                    raise error
            except OSError as exc:
                error = DirectoryCreateError(directory, exc)
                self._fail(str(error))
                raise error from exc
            else:
                self.report.directories_created += 1

    def copy(self, relative_path: str) -> None:
        source = self.source_root / relative_path
        destination = self.destination_root / relative_path

        self.ensure_parent(destination)

        if self.dry_run:
            self.log.info(f"Would copy {source} -> {destination}")
            return

        self.log.info(f"Copying {source} -> {destination}")
        try:
            if destination.is_dir():
                raise IsADirectoryError("a directory is in the way")
            shutil.copy2(source, destination)
        except OSError as exc:
            error = CopyError(source, destination, exc)
            self._fail(str(error))
            if self.continue_on_copy_error:
                return
            raise error from exc

        self.report.copied += 1
        try:
            self.report.bytes_copied += destination.stat().st_size
        except OSError:
            logger.debug("Could not stat copied file", path=str(destination))

    def delete(self, relative_path: str) -> None:
        target = self.destination_root / relative_path

        self.log.info(f"Orphaned file scheduled for deletion: {target}")

        if self.dry_run:
            self.log.info(f"Would delete: {target}")
            return

        if not self.confirmation.confirm(target):
            self.log.info(f"Skipped deletion: {target}")
            self.report.skipped_deletions += 1
            return

        try:
            target.unlink()
        except OSError as exc:
            self._fail(str(DeleteError(target, exc)))
            return

        self.log.info(f"Deleted: {target}")
        self.report.deleted += 1

    def _fail(self, message: str) -> None:
        self.report.errors.append(message)
        self.log.error(message)
