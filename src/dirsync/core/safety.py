"""
DirSync safety features.

Confirmation policies gate every deletion, and a cancellation token lets a
caller stop a run between file operations.
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from collections.abc import Callable
from pathlib import Path

import click

from dirsync.core.errors import SyncCancelledError
from dirsync.core.logging import get_logger

logger = get_logger(__name__)


class ConfirmationPolicy(ABC):
    """Decides whether a pending deletion may proceed."""

    @abstractmethod
    def confirm(self, path: Path) -> bool:
        """Return True to delete ``path``, False to keep it."""


class AutoConfirm(ConfirmationPolicy):
    """Force mode: every deletion proceeds."""

    def confirm(self, path: Path) -> bool:
        return True


class InteractiveConfirm(ConfirmationPolicy):
    """
    Ask the user once per file.

    A denial only keeps that one file; the remaining deletions are still
    asked about individually.
    """

    def __init__(self, prompt: Callable[..., bool] | None = None) -> None:
        self._prompt = prompt or click.confirm

    def confirm(self, path: Path) -> bool:
        answer = bool(self._prompt(f"Delete {path}?", default=False))
        logger.debug("Deletion confirmation", path=str(path), approved=answer)
        return answer


class CallbackConfirm(ConfirmationPolicy):
    """Adapts a plain ``Callable[[Path], bool]`` into a policy."""

    def __init__(self, callback: Callable[[Path], bool]) -> None:
        self.callback = callback

    def confirm(self, path: Path) -> bool:
        return bool(self.callback(path))


def policy_for(force: bool) -> ConfirmationPolicy:
    """Pick the policy for force or attended mode."""
    return AutoConfirm() if force else InteractiveConfirm()


class CancellationToken:
    """Cooperative cancellation flag checked between file operations."""

    def __init__(self) -> None:
        self._cancelled = threading.Event()

    @property
    def is_cancelled(self) -> bool:
        return self._cancelled.is_set()

    def cancel(self) -> None:
        """Request cancellation of the run."""
        self._cancelled.set()

    def check(self) -> None:
        """Raise if cancellation was requested."""
        if self._cancelled.is_set():
            raise SyncCancelledError("Synchronization was cancelled")
