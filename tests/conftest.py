"""
Pytest configuration and fixtures for DirSync tests.
"""

import os
import sys
import tempfile
from pathlib import Path
from typing import Callable, Generator

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from dirsync.core.logging import MemoryLogSink, RunLogger  # noqa: E402


def write_file(root: Path, relative_path: str, content: str = "data", mtime: float | None = None) -> Path:
    """Create a file (and its parents) under root, optionally pinning its mtime."""
    path = root / relative_path
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    if mtime is not None:
        os.utime(path, (mtime, mtime))
    return path


def list_files(root: Path) -> set[str]:
    """Relative POSIX paths of every regular file under root."""
    return {p.relative_to(root).as_posix() for p in root.rglob("*") if p.is_file()}


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def source_dir(temp_dir: Path) -> Path:
    path = temp_dir / "source"
    path.mkdir()
    return path


@pytest.fixture
def destination_dir(temp_dir: Path) -> Path:
    path = temp_dir / "destination"
    path.mkdir()
    return path


@pytest.fixture
def make_file() -> Callable[..., Path]:
    return write_file


@pytest.fixture
def tree_files() -> Callable[[Path], set[str]]:
    return list_files


@pytest.fixture
def memory_sink() -> MemoryLogSink:
    return MemoryLogSink()


@pytest.fixture
def run_logger(memory_sink: MemoryLogSink) -> RunLogger:
    """Run logger that keeps every line in memory."""
    return RunLogger([memory_sink])


@pytest.fixture
def sample_config(temp_dir: Path) -> "DirSyncConfig":
    """Configuration that keeps logs inside the temporary directory and never prompts."""
    from dirsync.core.config import DirSyncConfig, LoggingConfig, SyncConfig

    return DirSyncConfig(
        logging=LoggingConfig(log_directory=temp_dir / "logs", console_enabled=False),
        sync=SyncConfig(force=True),
    )


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests")
