"""
DirSync data models.

Defines the records produced by tree enumeration, the plan computed by the
reconciler, and the result reported at the end of a run.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any


@dataclass(frozen=True)
class FileRecord:
    """A regular file discovered under a root directory."""

    relative_path: str
    absolute_path: Path
    last_modified_ns: int
    size_bytes: int | None = None

    @property
    def last_modified(self) -> datetime:
        return datetime.fromtimestamp(self.last_modified_ns / 1_000_000_000)


@dataclass
class SyncPlan:
    """Copy and delete decisions for one run, keyed by relative path."""

    to_copy: set[str] = field(default_factory=set)
    to_delete: set[str] = field(default_factory=set)

    def __post_init__(self) -> None:
        overlap = self.to_copy & self.to_delete
        if overlap:
            raise ValueError(
                f"Paths scheduled for both copy and delete: {sorted(overlap)}"
            )

    @property
    def is_empty(self) -> bool:
        return not self.to_copy and not self.to_delete

    @property
    def total_actions(self) -> int:
        return len(self.to_copy) + len(self.to_delete)

    def copy_order(self) -> list[str]:
        return sorted(self.to_copy)

    def delete_order(self) -> list[str]:
        return sorted(self.to_delete)


@dataclass
class SyncSummary:
    """Counters accumulated over a run."""

    source_count_before: int = 0
    destination_count_before: int = 0
    source_count_after: int | None = None
    destination_count_after: int | None = None
    directories_created: int = 0
    copied: int = 0
    bytes_copied: int = 0
    deleted: int = 0
    skipped_deletions: int = 0
    errors: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "source_count_before": self.source_count_before,
            "destination_count_before": self.destination_count_before,
            "source_count_after": self.source_count_after,
            "destination_count_after": self.destination_count_after,
            "directories_created": self.directories_created,
            "copied": self.copied,
            "bytes_copied": self.bytes_copied,
            "deleted": self.deleted,
            "skipped_deletions": self.skipped_deletions,
            "errors": self.errors,
        }


@dataclass
class SyncResult:
    """Outcome of a complete synchronization run."""

    source: Path
    destination: Path
    started_at: datetime
    log_file: Path | None = None
    dry_run: bool = False
    ended_at: datetime | None = None
    plan: SyncPlan = field(default_factory=SyncPlan)
    summary: SyncSummary = field(default_factory=SyncSummary)
    errors: list[str] = field(default_factory=list)
    fatal_error: str | None = None

    @property
    def success(self) -> bool:
        return self.fatal_error is None and not self.errors

    @property
    def duration_seconds(self) -> float | None:
        if self.ended_at is None:
            return None
        return (self.ended_at - self.started_at).total_seconds()

    def to_dict(self) -> dict[str, Any]:
        return {
            "source": str(self.source),
            "destination": str(self.destination),
            "log_file": str(self.log_file) if self.log_file else None,
            "dry_run": self.dry_run,
            "started_at": self.started_at.isoformat(),
            "ended_at": self.ended_at.isoformat() if self.ended_at else None,
            "duration_seconds": self.duration_seconds,
            "success": self.success,
            "plan": {
                "to_copy": self.plan.copy_order(),
                "to_delete": self.plan.delete_order(),
            },
            "summary": self.summary.to_dict(),
            "errors": self.errors,
            "fatal_error": self.fatal_error,
        }
