"""Tests for retention pruning."""

import os
import shutil
import time
from pathlib import Path

import pytest

from release_archive.archive import (
    PruneReason,
    RetentionOptions,
    RetentionPruner,
    list_snapshot_ids,
    remove_dir_safe,
)
from release_archive.archive import lifecycle

DAY = 24 * 60 * 60


def make_snapshots(version_dir: Path, ids: list[str], age_days: float = 0) -> None:
    """Create snapshot directories with a manifest, aged by modification time."""
    stamp = time.time() - age_days * DAY
    for snapshot_id in ids:
        snapshot_dir = version_dir / snapshot_id
        snapshot_dir.mkdir(parents=True, exist_ok=True)
        (snapshot_dir / "manifest.json").write_text("{}\n", encoding="utf-8")
        os.utime(snapshot_dir, (stamp, stamp))


@pytest.fixture
def version_dir(temp_dir: Path) -> Path:
    """Provide an empty version directory."""
    path = temp_dir / "release-archive" / "9.9.9"
    path.mkdir(parents=True)
    return path


class TestRemoveDirSafe:
    """Tests for the best-effort removal primitive."""

    def test_removes_tree(self, version_dir: Path) -> None:
        """A directory tree is removed."""
        make_snapshots(version_dir, ["20260101_000000"])
        assert remove_dir_safe(version_dir / "20260101_000000") is True
        assert not (version_dir / "20260101_000000").exists()

    def test_missing_counts_as_removed(self, version_dir: Path) -> None:
        """An already-vanished directory counts as removed."""
        assert remove_dir_safe(version_dir / "gone") is True

    def test_failure_returns_false(
        self, version_dir: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """A removal error is swallowed and reported as False."""
        make_snapshots(version_dir, ["20260101_000000"])

        def failing_rmtree(path, *args, **kwargs):
            raise PermissionError("denied")

        monkeypatch.setattr(lifecycle.shutil, "rmtree", failing_rmtree)
        assert remove_dir_safe(version_dir / "20260101_000000") is False
        assert (version_dir / "20260101_000000").exists()


class TestRetentionPruner:
    """Tests for RetentionPruner."""

    def test_default_options(self) -> None:
        """Pruner defaults to the standard retention policy."""
        assert RetentionPruner().options == RetentionOptions()

    def test_keeps_everything_within_policy(self, version_dir: Path) -> None:
        """Nothing is pruned when under both limits."""
        make_snapshots(version_dir, ["20260101_000000", "20260102_000000"])
        pruned = RetentionPruner(RetentionOptions(max_snapshots_per_version=5)).prune(version_dir)
        assert pruned == []
        assert len(list_snapshot_ids(version_dir)) == 2

    def test_overflow_prunes_oldest(self, version_dir: Path) -> None:
        """Snapshots ranked beyond the limit are pruned, oldest ids first to go."""
        ids = ["20260101_000000", "20260102_000000", "20260103_000000", "20260104_000000"]
        make_snapshots(version_dir, ids)

        pruner = RetentionPruner(RetentionOptions(retention_days=3650, max_snapshots_per_version=2))
        pruned = pruner.prune(version_dir)

        assert [p.snapshot_id for p in pruned] == ["20260102_000000", "20260101_000000"]
        assert all(p.reason is PruneReason.MAX_SNAPSHOTS_PER_VERSION for p in pruned)
        assert list_snapshot_ids(version_dir) == ["20260104_000000", "20260103_000000"]

    @pytest.mark.parametrize("existing,limit", [(1, 1), (3, 1), (3, 2), (5, 3), (2, 4)])
    def test_retention_monotonicity(
        self, version_dir: Path, existing: int, limit: int
    ) -> None:
        """Adding one snapshot prunes exactly max(0, existing + 1 - limit) and keeps the new one."""
        make_snapshots(version_dir, [f"20260101_{i:06d}" for i in range(existing)])
        newest = "20260201_000000"
        make_snapshots(version_dir, [newest])

        pruner = RetentionPruner(RetentionOptions(retention_days=3650, max_snapshots_per_version=limit))
        pruned = pruner.prune(version_dir)

        assert len(pruned) == max(0, existing + 1 - limit)
        assert newest in list_snapshot_ids(version_dir)
        assert newest not in [p.snapshot_id for p in pruned]

    def test_age_prunes_old_snapshots(self, version_dir: Path) -> None:
        """Snapshots older than the retention window are pruned by age."""
        make_snapshots(version_dir, ["20250101_000000"], age_days=40)
        make_snapshots(version_dir, ["20260101_000000"], age_days=1)

        pruned = RetentionPruner(RetentionOptions(retention_days=30)).prune(version_dir)

        assert [p.snapshot_id for p in pruned] == ["20250101_000000"]
        assert pruned[0].reason is PruneReason.RETENTION_DAYS
        assert list_snapshot_ids(version_dir) == ["20260101_000000"]

    def test_age_reason_wins_over_overflow(self, version_dir: Path) -> None:
        """A snapshot both too old and overflowing is reported as retention_days."""
        make_snapshots(version_dir, ["20250101_000000"], age_days=40)
        make_snapshots(version_dir, ["20260101_000000"])

        pruner = RetentionPruner(RetentionOptions(retention_days=30, max_snapshots_per_version=1))
        pruned = pruner.prune(version_dir)

        assert pruned[0].reason is PruneReason.RETENTION_DAYS

    def test_injected_now(self, version_dir: Path) -> None:
        """The reference time can be supplied explicitly."""
        make_snapshots(version_dir, ["20260101_000000"])
        pruner = RetentionPruner(RetentionOptions(retention_days=1))

        assert pruner.prune(version_dir, now=time.time()) == []
        pruned = pruner.prune(version_dir, now=time.time() + 2 * DAY)
        assert [p.snapshot_id for p in pruned] == ["20260101_000000"]

    def test_dry_run_removes_nothing(self, version_dir: Path) -> None:
        """Dry run reports candidates without deleting them."""
        make_snapshots(version_dir, ["20260101_000000", "20260102_000000"])
        pruner = RetentionPruner(RetentionOptions(max_snapshots_per_version=1))

        pruned = pruner.prune(version_dir, dry_run=True)

        assert [p.snapshot_id for p in pruned] == ["20260101_000000"]
        assert len(list_snapshot_ids(version_dir)) == 2

    def test_failed_removal_not_reported(
        self, version_dir: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """A snapshot that cannot be removed is left in place and not reported."""
        make_snapshots(version_dir, ["20260101_000000", "20260102_000000", "20260103_000000"])
        stuck = version_dir / "20260101_000000"
        real_rmtree = shutil.rmtree

        def selective_rmtree(path, *args, **kwargs):
            if Path(path) == stuck:
                raise PermissionError("denied")
            return real_rmtree(path, *args, **kwargs)

        monkeypatch.setattr(lifecycle.shutil, "rmtree", selective_rmtree)
        pruned = RetentionPruner(RetentionOptions(max_snapshots_per_version=1)).prune(version_dir)

        assert [p.snapshot_id for p in pruned] == ["20260102_000000"]
        assert stuck.exists()

    def test_kept_snapshot_survives_age(self, version_dir: Path) -> None:
        """The protected snapshot is never evicted for age."""
        make_snapshots(version_dir, ["20260101_000000"], age_days=40)

        pruner = RetentionPruner(RetentionOptions(retention_days=30))
        assert pruner.prune(version_dir, keep="20260101_000000") == []
        assert list_snapshot_ids(version_dir) == ["20260101_000000"]

    def test_kept_snapshot_takes_first_slot(self, version_dir: Path) -> None:
        """The protected snapshot counts toward the limit ahead of newer ids."""
        make_snapshots(version_dir, ["20250101_000000", "20260101_000000", "20260102_000000"])

        pruner = RetentionPruner(RetentionOptions(retention_days=3650, max_snapshots_per_version=2))
        pruned = pruner.prune(version_dir, keep="20250101_000000")

        assert [p.snapshot_id for p in pruned] == ["20260101_000000"]
        assert list_snapshot_ids(version_dir) == ["20260102_000000", "20250101_000000"]

    def test_unknown_keep_ignored(self, version_dir: Path) -> None:
        """A protected id that is not on disk does not shift ranks."""
        make_snapshots(version_dir, ["20260101_000000", "20260102_000000"])

        pruner = RetentionPruner(RetentionOptions(max_snapshots_per_version=1))
        pruned = pruner.prune(version_dir, keep="20990101_000000")

        assert [p.snapshot_id for p in pruned] == ["20260101_000000"]

    def test_missing_version_dir(self, temp_dir: Path) -> None:
        """Pruning a missing version directory is a no-op."""
        assert RetentionPruner().prune(temp_dir / "absent") == []

    def test_ignores_files(self, version_dir: Path) -> None:
        """Files such as latest.json are not treated as snapshots."""
        make_snapshots(version_dir, ["20260101_000000", "20260102_000000"])
        (version_dir / "latest.json").write_text("{}\n", encoding="utf-8")

        pruned = RetentionPruner(RetentionOptions(max_snapshots_per_version=1)).prune(version_dir)

        assert [p.snapshot_id for p in pruned] == ["20260101_000000"]
        assert (version_dir / "latest.json").exists()
