"""
Release archiving operation.

Runs one archiving pass for a version: snapshot copy and manifest, retention
pruning, then latest pointer and catalog rebuild, strictly in that order.
Callers are expected to serialize runs per version; ``run(lock=True)`` holds
an advisory file lock for the duration when that cannot be guaranteed.
"""

import fcntl
import logging
import os
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Iterator

from release_archive.core.exceptions import ArchiveLockError

from .index import IndexMaintainer
from .lifecycle import RetentionPruner
from .models import (
    ArchiveResult,
    CheckFailure,
    CheckStatus,
    StandardizedResult,
)
from .storage import DEFAULT_SOURCE_FILES, SnapshotWriter

if TYPE_CHECKING:
    from release_archive.config import ArchiveConfig

logger = logging.getLogger(__name__)

LOCK_FILE = ".archive.lock"
NO_SOURCE_FILES_ERROR = "no release artifact files found under artifacts/"


@contextmanager
def version_lock(version_dir: Path) -> Iterator[Path]:
    """
    Hold an exclusive, non-blocking advisory lock on a version directory.

    Raises:
        ArchiveLockError: If another process holds the lock
    """
    version_dir.mkdir(parents=True, exist_ok=True)
    lock_path = version_dir / LOCK_FILE
    fd = os.open(lock_path, os.O_CREAT | os.O_WRONLY)
    try:
        try:
            fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
        except OSError as e:
            raise ArchiveLockError(
                f"Archive for '{version_dir.name}' is locked by another writer",
                lock_path=str(lock_path),
            ) from e
        os.ftruncate(fd, 0)
        os.write(fd, str(os.getpid()).encode())
        try:
            yield lock_path
        finally:
            fcntl.flock(fd, fcntl.LOCK_UN)
    finally:
        os.close(fd)


def build_archive_standardized(result: ArchiveResult) -> StandardizedResult:
    """Normalize an archiving result into the shared standardized block."""
    check_statuses = {
        "sourceArtifacts": CheckStatus.from_ok(len(result.copied_files) > 0),
        "snapshotManifest": CheckStatus.PASS,
        "archiveIndexes": CheckStatus.from_ok(
            bool(result.catalog_path and result.latest_path)
        ),
    }

    failures: list[CheckFailure] = []
    if check_statuses["sourceArtifacts"] is CheckStatus.FAIL:
        failures.append(
            CheckFailure(
                check="sourceArtifacts",
                code="ARCHIVE_SOURCE_FILES_MISSING",
                message=result.error or NO_SOURCE_FILES_ERROR,
            )
        )
    if not result.ok and not failures:
        failures.append(
            CheckFailure(
                check="releaseArchive",
                code="RELEASE_ARCHIVE_FAIL",
                message=result.error or "release archive failed",
            )
        )

    return StandardizedResult.build(
        ok=result.ok,
        ok_code="RELEASE_ARCHIVE_OK",
        fail_code="RELEASE_ARCHIVE_FAIL",
        check_statuses=check_statuses,
        failures=failures,
    )


class ReleaseArchiver:
    """
    Archiving pipeline for a resolved configuration.

    Composes the snapshot writer, retention pruner and index maintainer.
    Each may be injected for testing; defaults are built from the config.
    """

    def __init__(
        self,
        config: "ArchiveConfig",
        source_files: tuple[str, ...] | list[str] = DEFAULT_SOURCE_FILES,
        writer: SnapshotWriter | None = None,
        pruner: RetentionPruner | None = None,
        indexer: IndexMaintainer | None = None,
    ):
        """
        Initialize archiver.

        Args:
            config: Resolved archive configuration
            source_files: Allow-list of report file names
            writer: SnapshotWriter instance
            pruner: RetentionPruner instance
            indexer: IndexMaintainer instance
        """
        self._config = config
        self._writer = writer or SnapshotWriter(
            config.artifacts_dir, config.archive_root, source_files
        )
        self._pruner = pruner or RetentionPruner(config.retention)
        self._indexer = indexer or IndexMaintainer(config.archive_root)

    @property
    def config(self) -> "ArchiveConfig":
        return self._config

    def run(
        self,
        lock: bool = False,
        now: float | None = None,
        dry_run: bool = False,
    ) -> ArchiveResult:
        """
        Archive the configured version.

        Args:
            lock: Hold the per-version advisory lock while running
            now: Reference time for retention, in epoch seconds
            dry_run: Report retention candidates without removing them

        Returns:
            ArchiveResult; ok is True iff at least one file was copied

        Raises:
            ArchiveLockError: If lock is True and the lock is held elsewhere
        """
        if not lock:
            return self._run(now, dry_run)
        with version_lock(self._config.version_dir):
            return self._run(now, dry_run)

    def _run(self, now: float | None, dry_run: bool) -> ArchiveResult:
        config = self._config

        manifest = self._writer.write(
            version=config.version,
            snapshot_id=config.snapshot_id,
            tag=config.tag,
            root=config.root,
            options=config.retention,
        )
        pruned = self._pruner.prune(
            config.version_dir, now=now, dry_run=dry_run, keep=config.snapshot_id
        )
        self._indexer.refresh(config.version)

        ok = len(manifest.copied_files) > 0
        result = ArchiveResult(
            root=str(config.root),
            artifacts_dir=str(config.artifacts_dir),
            archive_root=str(config.archive_root),
            version=config.version,
            tag=config.tag,
            snapshot_id=config.snapshot_id,
            snapshot_dir=manifest.snapshot_dir,
            copied_files=manifest.copied_files,
            missing_files=manifest.missing_files,
            pruned_snapshots=pruned,
            catalog_path=str(self._indexer.catalog_path),
            latest_path=str(self._indexer.latest_path(config.version)),
            options=config.retention,
            dry_run=dry_run,
            ok=ok,
            error="" if ok else NO_SOURCE_FILES_ERROR,
        )
        result.standardized = build_archive_standardized(result)

        if ok:
            logger.info(
                "Archived %s as %s (%d pruned)",
                config.version,
                config.snapshot_id,
                len(pruned),
            )
        else:
            logger.warning("Archive run for %s copied no files", config.version)
        return result
