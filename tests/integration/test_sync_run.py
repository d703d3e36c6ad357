"""
End-to-end tests for dirsync.sync.manager.
"""

from pathlib import Path

import pytest

from dirsync.core.config import DirSyncConfig
from dirsync.core.errors import InvalidRootError, LogSinkError
from dirsync.core.logging import MemoryLogSink, RunLogger
from dirsync.core.safety import CallbackConfirm, CancellationToken
from dirsync.sync.manager import SyncManager, sync_directories

pytestmark = pytest.mark.integration

EXAMPLE_FILES = ["File1.txt", "File2.txt", "SubFolder1/File3.txt", "SubFolder2/File4.txt"]


@pytest.fixture
def populated_source(source_dir: Path, make_file) -> Path:
    for name in EXAMPLE_FILES:
        make_file(source_dir, name, f"content of {name}")
    return source_dir


@pytest.fixture
def manager(sample_config: DirSyncConfig) -> SyncManager:
    return SyncManager(sample_config)


class TestExampleScenario:
    """The four-file walkthrough: initial copy, then removal of File1.txt."""

    def test_initial_sync_then_delete(
        self,
        manager: SyncManager,
        populated_source: Path,
        destination_dir: Path,
        temp_dir: Path,
        tree_files,
    ) -> None:
        log_file = temp_dir / "first.log"
        result = manager.run(populated_source, destination_dir, log_file=log_file)

        assert result.success
        assert tree_files(destination_dir) == set(EXAMPLE_FILES)
        lines = log_file.read_text().splitlines()
        assert lines[0] == "[INFO] Source file count: 4"
        assert lines[1] == "[INFO] Destination file count: 0"
        assert sum("Creating directory" in line for line in lines) == 2
        assert sum("Copying" in line for line in lines) == 4
        assert lines[-2:] == ["[INFO] Source file count: 4", "[INFO] Destination file count: 4"]

        (populated_source / "File1.txt").unlink()
        second_log = temp_dir / "second.log"
        result = manager.run(populated_source, destination_dir, log_file=second_log)

        assert result.success
        assert tree_files(destination_dir) == set(EXAMPLE_FILES) - {"File1.txt"}
        text = second_log.read_text()
        removed = destination_dir / "File1.txt"
        assert f"[INFO] Orphaned file scheduled for deletion: {removed}" in text
        assert f"[INFO] Deleted: {removed}" in text
        assert result.summary.destination_count_after == 3


class TestProperties:
    """Run-level guarantees."""

    def test_idempotence(
        self, manager: SyncManager, populated_source: Path, destination_dir: Path, temp_dir: Path
    ) -> None:
        manager.run(populated_source, destination_dir, log_file=temp_dir / "one.log")
        mtimes = {p: p.stat().st_mtime_ns for p in destination_dir.rglob("*") if p.is_file()}

        second = manager.run(populated_source, destination_dir, log_file=temp_dir / "two.log")

        assert second.plan.is_empty
        assert second.summary.copied == 0
        assert second.summary.deleted == 0
        assert {p: p.stat().st_mtime_ns for p in mtimes} == mtimes
        lines = (temp_dir / "two.log").read_text().splitlines()
        assert len(lines) == 4

    def test_completeness_and_exclusivity(
        self,
        manager: SyncManager,
        source_dir: Path,
        destination_dir: Path,
        temp_dir: Path,
        make_file,
        tree_files,
    ) -> None:
        make_file(source_dir, "fresh.txt", "new", mtime=2_000_000_000)
        make_file(destination_dir, "fresh.txt", "stale", mtime=1_000_000_000)
        make_file(source_dir, "deep/tree/file.bin", "x")
        make_file(destination_dir, "stray.txt")
        make_file(destination_dir, "gone/with/it.txt")

        result = manager.run(source_dir, destination_dir, log_file=temp_dir / "run.log")

        assert result.success
        assert tree_files(destination_dir) == tree_files(source_dir)
        for relative in tree_files(source_dir):
            assert (destination_dir / relative).stat().st_mtime_ns >= (
                source_dir / relative
            ).stat().st_mtime_ns
        assert (destination_dir / "fresh.txt").read_text() == "new"

    def test_subfolders_never_removed(
        self,
        manager: SyncManager,
        source_dir: Path,
        destination_dir: Path,
        temp_dir: Path,
        make_file,
    ) -> None:
        make_file(destination_dir, "old/nested/only.txt")

        manager.run(source_dir, destination_dir, log_file=temp_dir / "run.log")

        assert (destination_dir / "old" / "nested").is_dir()
        assert not (destination_dir / "old" / "nested" / "only.txt").exists()

    def test_empty_source_folders_not_recreated(
        self, manager: SyncManager, source_dir: Path, destination_dir: Path, temp_dir: Path
    ) -> None:
        (source_dir / "empty").mkdir()
        manager.run(source_dir, destination_dir, log_file=temp_dir / "run.log")
        assert not (destination_dir / "empty").exists()

    def test_confirmation_gating(
        self,
        manager: SyncManager,
        source_dir: Path,
        destination_dir: Path,
        temp_dir: Path,
        make_file,
    ) -> None:
        keep = make_file(destination_dir, "keep.txt")
        drop = make_file(destination_dir, "drop.txt")
        also = make_file(destination_dir, "sub/also.txt")
        asked: list[Path] = []

        def answer(path: Path) -> bool:
            asked.append(path)
            return path != keep

        result = manager.run(
            source_dir,
            destination_dir,
            log_file=temp_dir / "run.log",
            confirmation=CallbackConfirm(answer),
        )

        assert keep.exists()
        assert not drop.exists()
        assert not also.exists()
        assert len(asked) == 3
        assert result.summary.skipped_deletions == 1
        assert result.success


class TestValidationGate:
    """Invalid roots fail before anything else happens."""

    @pytest.mark.parametrize("which", ["source", "destination"])
    def test_missing_root(
        self, manager: SyncManager, source_dir: Path, destination_dir: Path, temp_dir: Path, which: str
    ) -> None:
        log_file = temp_dir / "never.log"
        roots = {"source": source_dir, "destination": destination_dir}
        roots[which] = temp_dir / "missing"

        with pytest.raises(InvalidRootError):
            manager.run(roots["source"], roots["destination"], log_file=log_file)

        assert not log_file.exists()

    def test_file_as_destination(
        self, manager: SyncManager, populated_source: Path, temp_dir: Path
    ) -> None:
        target = temp_dir / "not_a_dir.txt"
        target.write_text("x")

        with pytest.raises(InvalidRootError, match="not a directory"):
            manager.run(populated_source, target, log_file=temp_dir / "never.log")

        assert target.read_text() == "x"
        assert not (temp_dir / "never.log").exists()

    def test_destination_nested_in_source(
        self, manager: SyncManager, populated_source: Path, temp_dir: Path
    ) -> None:
        mirror = populated_source / "mirror"
        mirror.mkdir()

        with pytest.raises(InvalidRootError, match="inside the source"):
            manager.run(populated_source, mirror, log_file=temp_dir / "never.log")

        assert list(mirror.iterdir()) == []
        assert not (temp_dir / "never.log").exists()

    def test_default_log_file_not_created(
        self, sample_config: DirSyncConfig, source_dir: Path, temp_dir: Path
    ) -> None:
        with pytest.raises(InvalidRootError):
            SyncManager(sample_config).run(source_dir, temp_dir / "missing")
        assert not sample_config.logging.log_directory.exists()


class TestFailurePolicies:
    """Fatal and non-fatal errors at run level."""

    def test_copy_failure_still_accounts(
        self,
        manager: SyncManager,
        populated_source: Path,
        destination_dir: Path,
        temp_dir: Path,
        make_file,
        mocker,
    ) -> None:
        orphan = make_file(destination_dir, "orphan.txt")
        mocker.patch("dirsync.sync.executor.shutil.copy2", side_effect=OSError("disk full"))
        log_file = temp_dir / "run.log"

        result = manager.run(populated_source, destination_dir, log_file=log_file)

        assert not result.success
        assert "disk full" in result.fatal_error
        assert orphan.exists()
        lines = log_file.read_text().splitlines()
        assert sum(line.startswith("[ERROR]") for line in lines) == 1
        assert lines[-2:] == ["[INFO] Source file count: 4", "[INFO] Destination file count: 1"]
        assert result.summary.errors == 1

    def test_directory_where_file_belongs(
        self,
        manager: SyncManager,
        source_dir: Path,
        destination_dir: Path,
        temp_dir: Path,
        make_file,
        tree_files,
    ) -> None:
        make_file(source_dir, "report", "quarterly")
        (destination_dir / "report").mkdir()

        result = manager.run(source_dir, destination_dir, log_file=temp_dir / "run.log")

        assert not result.success
        assert "directory is in the way" in result.fatal_error
        assert tree_files(destination_dir) == set()
        assert result.summary.copied == 0
        assert result.summary.bytes_copied == 0

    def test_log_sink_failure_blocks_mutation(
        self,
        manager: SyncManager,
        populated_source: Path,
        destination_dir: Path,
        temp_dir: Path,
        tree_files,
    ) -> None:
        blocker = temp_dir / "blocker"
        blocker.write_text("file where a directory should be")

        with pytest.raises(LogSinkError):
            manager.run(populated_source, destination_dir, log_file=blocker / "run.log")

        assert tree_files(destination_dir) == set()

    def test_cancelled_run(
        self,
        manager: SyncManager,
        populated_source: Path,
        destination_dir: Path,
        temp_dir: Path,
    ) -> None:
        token = CancellationToken()
        token.cancel()

        result = manager.run(
            populated_source, destination_dir, log_file=temp_dir / "run.log", cancel_token=token
        )

        assert result.fatal_error == "Synchronization was cancelled"
        assert result.summary.copied == 0
        assert "[ERROR] Synchronization was cancelled" in (temp_dir / "run.log").read_text()


class TestOptions:
    """Configuration-driven behavior."""

    def test_dry_run(
        self,
        sample_config: DirSyncConfig,
        populated_source: Path,
        destination_dir: Path,
        temp_dir: Path,
        make_file,
        tree_files,
    ) -> None:
        make_file(destination_dir, "orphan.txt")
        sample_config.sync.dry_run = True

        result = SyncManager(sample_config).run(
            populated_source, destination_dir, log_file=temp_dir / "run.log"
        )

        assert result.dry_run
        assert result.plan.total_actions == 5
        assert tree_files(destination_dir) == {"orphan.txt"}

    def test_exclude_patterns_protect_destination(
        self,
        sample_config: DirSyncConfig,
        source_dir: Path,
        destination_dir: Path,
        temp_dir: Path,
        make_file,
        tree_files,
    ) -> None:
        make_file(source_dir, "a.txt")
        make_file(source_dir, "scratch.tmp")
        make_file(destination_dir, "local.tmp")
        sample_config.sync.exclude_patterns = ["*.tmp"]

        SyncManager(sample_config).run(source_dir, destination_dir, log_file=temp_dir / "run.log")

        assert tree_files(destination_dir) == {"a.txt", "local.tmp"}

    def test_custom_run_logger(
        self, sample_config: DirSyncConfig, populated_source: Path, destination_dir: Path
    ) -> None:
        sink = MemoryLogSink()

        result = sync_directories(
            populated_source,
            destination_dir,
            config=sample_config,
            run_logger=RunLogger([sink]),
        )

        assert result.log_file is None
        assert sink.lines[0] == "[INFO] Source file count: 4"
        assert not sample_config.logging.log_directory.exists()

    def test_default_log_file_location(
        self, sample_config: DirSyncConfig, populated_source: Path, destination_dir: Path
    ) -> None:
        result = SyncManager(sample_config).run(populated_source, destination_dir)

        assert result.log_file is not None
        assert result.log_file.parent == sample_config.logging.log_directory
        assert result.log_file.exists()
