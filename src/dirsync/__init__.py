"""
DirSync - One-way directory synchronization.

Makes a destination directory's files match a source directory's by copying
new or modified files and deleting orphaned ones, with every action written
to an audit log.
"""

__version__ = "1.0.0"
__author__ = "DirSync Team"

from dirsync.core.config import DirSyncConfig
from dirsync.sync.manager import SyncManager, sync_directories

__all__ = ["DirSyncConfig", "SyncManager", "sync_directories", "__version__"]
