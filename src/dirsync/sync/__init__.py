"""
DirSync sync module.

Provides tree enumeration, plan reconciliation and plan execution for
one-way synchronization.
"""

from dirsync.sync.executor import SyncExecutor
from dirsync.sync.manager import SyncManager, SyncRun, sync_directories
from dirsync.sync.reconciler import build_plan
from dirsync.sync.scanner import iter_records, scan_tree, validate_root

__all__ = [
    "SyncManager",
    "SyncRun",
    "SyncExecutor",
    "build_plan",
    "iter_records",
    "scan_tree",
    "validate_root",
    "sync_directories",
]
