"""
Archive index maintenance.

Derives the per-version latest pointer and the global catalog from a scan
of the archive directory. Both documents are rebuilt in full after every
mutation; nothing here patches an existing index.
"""

import logging
from pathlib import Path

from .models import Catalog, CatalogEntry, LatestPointer
from .storage import CATALOG_FILE, LATEST_FILE, write_json_document

logger = logging.getLogger(__name__)


def list_subdirectory_names(directory: Path) -> list[str]:
    """Return names of sub-directories, newest (greatest) first."""
    try:
        names = [entry.name for entry in directory.iterdir() if entry.is_dir()]
    except (FileNotFoundError, NotADirectoryError):
        return []
    return sorted(names, reverse=True)


def list_snapshot_ids(version_dir: Path) -> list[str]:
    """List snapshot ids of a version, most recent first."""
    return list_subdirectory_names(version_dir)


def scan_archive_root(archive_root: Path) -> Catalog:
    """
    Build the catalog from what is on disk.

    Args:
        archive_root: Archive directory to scan

    Returns:
        Catalog listing every version directory, sorted by name descending
    """
    entries = []
    for version in list_subdirectory_names(archive_root):
        snapshots = list_snapshot_ids(archive_root / version)
        entries.append(
            CatalogEntry(
                version=version,
                latest_snapshot_id=snapshots[0] if snapshots else "",
                snapshot_count=len(snapshots),
                snapshots=snapshots,
            )
        )
    return Catalog(archive_root=str(archive_root), versions=entries)


def build_latest_pointer(archive_root: Path, version: str) -> LatestPointer:
    """Compute the latest pointer for a version from its surviving snapshots."""
    version_dir = archive_root / version
    snapshots = list_snapshot_ids(version_dir)
    latest = snapshots[0] if snapshots else ""
    return LatestPointer(
        version=version,
        latest_snapshot_id=latest,
        latest_snapshot_dir=str(version_dir / latest) if latest else "",
    )


class IndexMaintainer:
    """Writes latest.json and catalog.json for an archive root."""

    def __init__(self, archive_root: Path):
        self._archive_root = archive_root

    @property
    def catalog_path(self) -> Path:
        return self._archive_root / CATALOG_FILE

    def latest_path(self, version: str) -> Path:
        return self._archive_root / version / LATEST_FILE

    def write_latest(self, version: str) -> LatestPointer:
        """Recompute and persist the latest pointer for a version."""
        pointer = build_latest_pointer(self._archive_root, version)
        write_json_document(self.latest_path(version), pointer)
        return pointer

    def write_catalog(self) -> Catalog:
        """Rescan every version directory and persist the catalog."""
        self._archive_root.mkdir(parents=True, exist_ok=True)
        catalog = scan_archive_root(self._archive_root)
        write_json_document(self.catalog_path, catalog)
        logger.debug(
            "Rebuilt catalog with %d versions at %s",
            len(catalog.versions),
            self.catalog_path,
        )
        return catalog

    def refresh(self, version: str) -> tuple[LatestPointer, Catalog]:
        """Update the touched version's pointer, then rebuild the catalog."""
        pointer = self.write_latest(version)
        catalog = self.write_catalog()
        return pointer, catalog
