"""
Plan computation.

Compares source and destination records and decides, per relative path,
whether to copy, skip or delete.
"""

from __future__ import annotations

from typing import Iterable

from dirsync.core.logging import get_logger
from dirsync.core.models import FileRecord, SyncPlan
from dirsync.sync.scanner import hash_file

logger = get_logger(__name__)


def needs_copy(source: FileRecord, destination: FileRecord | None) -> bool:
    """Missing or strictly older destination files are copied; ties are in sync."""
    if destination is None:
        return True
    return destination.last_modified_ns < source.last_modified_ns


def content_differs(source: FileRecord, destination: FileRecord) -> bool:
    if (
        source.size_bytes is not None
        and destination.size_bytes is not None
        and source.size_bytes != destination.size_bytes
    ):
        return True
    return hash_file(source.absolute_path) != hash_file(destination.absolute_path)


def build_plan(
    source_records: Iterable[FileRecord],
    destination_records: Iterable[FileRecord],
    *,
    compare_content: bool = False,
) -> SyncPlan:
    """
    Build the copy and delete sets for one run.

    With ``compare_content`` a pair the timestamp rule considers in sync is
    still copied when its content differs.
    """
    destination_map = {record.relative_path: record for record in destination_records}
    source_paths: set[str] = set()
    to_copy: set[str] = set()

    for record in source_records:
        source_paths.add(record.relative_path)
        existing = destination_map.get(record.relative_path)
        if needs_copy(record, existing):
            to_copy.add(record.relative_path)
        elif compare_content and existing is not None and content_differs(record, existing):
            logger.debug("Content differs", relative_path=record.relative_path)
            to_copy.add(record.relative_path)

    to_delete = {path for path in destination_map if path not in source_paths}

    logger.debug("Plan built", to_copy=len(to_copy), to_delete=len(to_delete))
    return SyncPlan(to_copy=to_copy, to_delete=to_delete)
