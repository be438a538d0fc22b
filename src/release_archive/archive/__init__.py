"""
Release Archive Module.

Provides versioned snapshot storage, retention pruning, index maintenance
and read-side queries for release report files.
"""

from .models import (
    ArchiveResult,
    Catalog,
    CatalogEntry,
    CheckFailure,
    CheckStatus,
    CopiedFile,
    FindMode,
    FindResult,
    LatestPointer,
    PresetListResult,
    PrunedSnapshot,
    PruneReason,
    RetentionOptions,
    SnapshotManifest,
    StandardizedResult,
)
from .storage import DEFAULT_SOURCE_FILES, SnapshotWriter, format_snapshot_id
from .lifecycle import RetentionPruner, remove_dir_safe
from .index import IndexMaintainer, list_snapshot_ids, scan_archive_root
from .retrieval import ArchiveReader
from .archiver import ReleaseArchiver, version_lock

__all__ = [
    # Models
    "ArchiveResult",
    "Catalog",
    "CatalogEntry",
    "CheckFailure",
    "CheckStatus",
    "CopiedFile",
    "FindMode",
    "FindResult",
    "LatestPointer",
    "PresetListResult",
    "PrunedSnapshot",
    "PruneReason",
    "RetentionOptions",
    "SnapshotManifest",
    "StandardizedResult",
    # Storage
    "DEFAULT_SOURCE_FILES",
    "SnapshotWriter",
    "format_snapshot_id",
    # Lifecycle
    "RetentionPruner",
    "remove_dir_safe",
    # Index
    "IndexMaintainer",
    "list_snapshot_ids",
    "scan_archive_root",
    # Retrieval
    "ArchiveReader",
    # Archiving
    "ReleaseArchiver",
    "version_lock",
]
