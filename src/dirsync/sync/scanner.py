"""
Directory tree enumeration.

Lists every regular file under a root as a FileRecord keyed by its path
relative to that root. Directories are never emitted, so empty directories
are invisible here.
"""

from __future__ import annotations

import fnmatch
import hashlib
import os
from pathlib import Path
from typing import Iterable, Iterator

from dirsync.core.errors import InvalidRootError
from dirsync.core.logging import get_logger
from dirsync.core.models import FileRecord

logger = get_logger(__name__)


def validate_root(path: Path | str, role: str = "root") -> Path:
    """Check that ``path`` exists and is a directory."""
    root = Path(path).expanduser()
    if not root.exists():
        raise InvalidRootError(root, f"{role} directory does not exist")
    if not root.is_dir():
        raise InvalidRootError(root, f"{role} is not a directory")
    return root


def validate_roots(source: Path | str, destination: Path | str) -> tuple[Path, Path]:
    """Validate both roots and make sure neither contains the other."""
    source_root = validate_root(source, "source")
    destination_root = validate_root(destination, "destination")
    resolved_source = source_root.resolve()
    resolved_destination = destination_root.resolve()
    if resolved_source == resolved_destination:
        raise InvalidRootError(
            destination_root, "source and destination are the same directory"
        )
    if resolved_source in resolved_destination.parents:
        raise InvalidRootError(destination_root, "destination is inside the source")
    if resolved_destination in resolved_source.parents:
        raise InvalidRootError(destination_root, "source is inside the destination")
    return source_root, destination_root


def _is_excluded(relative_path: str, patterns: Iterable[str]) -> bool:
    return any(fnmatch.fnmatch(relative_path, pattern) for pattern in patterns)


def _walk_error(error: OSError) -> None:
    logger.warning("Skipping unreadable directory", path=error.filename, error=str(error))


def iter_records(
    root: Path, exclude_patterns: Iterable[str] = ()
) -> Iterator[FileRecord]:
    """Yield a FileRecord for every regular file below ``root``."""
    patterns = list(exclude_patterns)
    for dirpath, dirnames, filenames in os.walk(root, onerror=_walk_error):
        current = Path(dirpath)
        dirnames.sort()
        for filename in sorted(filenames):
            path = current / filename
            if path.is_symlink():
                continue
            relative_path = path.relative_to(root).as_posix()
            if patterns and _is_excluded(relative_path, patterns):
                continue
            try:
                stat = path.stat()
            except OSError:
                # vanished between listing and stat
                continue
            yield FileRecord(
                relative_path=relative_path,
                absolute_path=path,
                last_modified_ns=stat.st_mtime_ns,
                size_bytes=stat.st_size,
            )


def scan_tree(
    root: Path, exclude_patterns: Iterable[str] = ()
) -> dict[str, FileRecord]:
    snapshot = {record.relative_path: record for record in iter_records(root, exclude_patterns)}
    logger.debug("Scanned tree", root=str(root), files=len(snapshot))
    return snapshot


def count_files(root: Path, exclude_patterns: Iterable[str] = ()) -> int:
    return sum(1 for _ in iter_records(root, exclude_patterns))


def hash_file(path: Path, chunk_size: int = 1024 * 1024) -> str:
    """SHA-256 digest of a file's content."""
    digest = hashlib.sha256()
    with path.open("rb") as handle:
        while chunk := handle.read(chunk_size):
            digest.update(chunk)
    return digest.hexdigest()
