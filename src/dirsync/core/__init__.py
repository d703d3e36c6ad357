"""
DirSync Core - Shared building blocks.

Contains configuration, data models, the error taxonomy, logging and the
safety policies used by the synchronizer.
"""

from dirsync.core.config import DirSyncConfig
from dirsync.core.errors import (
    CopyError,
    DeleteError,
    DirectoryCreateError,
    DirSyncError,
    InvalidRootError,
    LogSinkError,
    SyncCancelledError,
)
from dirsync.core.logging import RunLogger, get_logger, setup_logging
from dirsync.core.models import FileRecord, SyncPlan, SyncResult
from dirsync.core.safety import AutoConfirm, CancellationToken, InteractiveConfirm

__all__ = [
    "DirSyncConfig",
    "DirSyncError",
    "InvalidRootError",
    "LogSinkError",
    "DirectoryCreateError",
    "CopyError",
    "DeleteError",
    "SyncCancelledError",
    "RunLogger",
    "get_logger",
    "setup_logging",
    "FileRecord",
    "SyncPlan",
    "SyncResult",
    "AutoConfirm",
    "InteractiveConfirm",
    "CancellationToken",
]
