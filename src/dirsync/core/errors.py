"""
DirSync error taxonomy.

Every failure the synchronizer reports derives from DirSyncError so callers
can catch the whole family at once.
"""

from __future__ import annotations

from pathlib import Path


class DirSyncError(Exception):
    """Base class for all synchronization errors."""

    fatal = True


class InvalidRootError(DirSyncError):
    """Source or destination root is missing or not a directory."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid root {path}: {reason}")


class LogSinkError(DirSyncError):
    """The run log could not be opened or written."""

    def __init__(self, path: Path | None, cause: BaseException) -> None:
        self.path = path
        self.cause = cause
        target = str(path) if path else "log sink"
        super().__init__(f"Cannot write to {target}: {cause}")


class DirectoryCreateError(DirSyncError):
    """A destination directory needed for a copy could not be created."""

    def __init__(self, path: Path, cause: BaseException) -> None:
        self.path = path
        self.cause = cause
        super().__init__(f"Failed to create directory {path}: {cause}")


class CopyError(DirSyncError):
    """A single file could not be copied."""

    def __init__(self, source: Path, destination: Path, cause: BaseException) -> None:
        self.source = source
        self.destination = destination
        self.cause = cause
        super().__init__(f"Failed to copy {source} -> {destination}: {cause}")


class DeleteError(DirSyncError):
    """A single orphaned file could not be deleted."""

    fatal = False

    def __init__(self, path: Path, cause: BaseException) -> None:
        self.path = path
        self.cause = cause
        super().__init__(f"Failed to delete {path}: {cause}")


class SyncCancelledError(DirSyncError):
    """The run was cancelled between file operations."""
