"""
Snapshot lifecycle management.

Applies the retention policy to the snapshots of a version: snapshots older
than the retention window, or ranked beyond the per-version limit, are
removed. Removal is best-effort and never fails the archiving run.
"""

import logging
import shutil
import time
from pathlib import Path

from .index import list_snapshot_ids
from .models import PrunedSnapshot, PruneReason, RetentionOptions

logger = logging.getLogger(__name__)


def remove_dir_safe(path: Path) -> bool:
    """
    Remove a directory tree.

    Returns:
        True if the directory is gone, False if removal failed
    """
    try:
        shutil.rmtree(path)
        return True
    except FileNotFoundError:
        return True
    except OSError as e:
        logger.warning("Failed to prune snapshot directory %s: %s", path, e)
        return False


class RetentionPruner:
    """
    Retention policy enforcement for one version directory.

    Snapshots are ranked newest first by id. A snapshot is evicted when it
    is older than ``retention_days`` (by directory modification time) or
    when its rank is at or beyond ``max_snapshots_per_version``.

    A protected snapshot id (the one the current run wrote) always holds
    rank 0 and is never evicted, whatever its id or modification time.
    """

    def __init__(self, options: RetentionOptions | None = None):
        """
        Initialize pruner.

        Args:
            options: Retention policy (default: 30 days, 20 snapshots)
        """
        self._options = options or RetentionOptions()

    @property
    def options(self) -> RetentionOptions:
        return self._options

    def _reason(self, snapshot_dir: Path, rank: int, now: float) -> PruneReason | None:
        """Return why a snapshot should be evicted, or None to keep it."""
        try:
            age_seconds = now - snapshot_dir.stat().st_mtime
        except FileNotFoundError:
            return None

        if age_seconds > self._options.retention_seconds:
            return PruneReason.RETENTION_DAYS
        if rank >= self._options.max_snapshots_per_version:
            return PruneReason.MAX_SNAPSHOTS_PER_VERSION
        return None

    def candidates(
        self,
        version_dir: Path,
        now: float | None = None,
        keep: str | None = None,
    ) -> list[PrunedSnapshot]:
        """List snapshots the policy would evict, without removing anything."""
        now = time.time() if now is None else now
        snapshot_ids = list_snapshot_ids(version_dir)
        # The protected snapshot occupies the first retained slot
        first_rank = 0
        if keep and keep in snapshot_ids:
            snapshot_ids.remove(keep)
            first_rank = 1

        evicted = []
        for rank, snapshot_id in enumerate(snapshot_ids, start=first_rank):
            reason = self._reason(version_dir / snapshot_id, rank, now)
            if reason is not None:
                evicted.append(PrunedSnapshot(snapshot_id=snapshot_id, reason=reason))
        return evicted

    def prune(
        self,
        version_dir: Path,
        now: float | None = None,
        dry_run: bool = False,
        keep: str | None = None,
    ) -> list[PrunedSnapshot]:
        """
        Evict snapshots according to the retention policy.

        Args:
            version_dir: Version directory holding snapshot directories
            now: Reference time in epoch seconds (default: current time)
            dry_run: If True, report candidates without removing them
            keep: Snapshot id that must survive (the one just written)

        Returns:
            Snapshots that were removed (or would be, in dry-run mode)
        """
        candidates = self.candidates(version_dir, now=now, keep=keep)
        if dry_run:
            return candidates

        pruned = []
        for candidate in candidates:
            if remove_dir_safe(version_dir / candidate.snapshot_id):
                pruned.append(candidate)

        if pruned:
            logger.info(
                "Pruned %d snapshot(s) from %s", len(pruned), version_dir.name
            )
        return pruned
