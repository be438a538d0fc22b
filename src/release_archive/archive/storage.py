"""
Snapshot storage backend.

Copies release report files into timestamp-identified snapshot directories
under the archive root and records a manifest for each snapshot:

- {archive_root}/{version}/{snapshot_id}/
- {archive_root}/{version}/{snapshot_id}/{report files}
- {archive_root}/{version}/{snapshot_id}/manifest.json
"""

import hashlib
import json
import logging
import shutil
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, TypeVar

from pydantic import ValidationError

from release_archive.core.exceptions import ConfigurationError, ManifestError

from .models import (
    ArchiveModel,
    CopiedFile,
    RetentionOptions,
    SnapshotManifest,
)

logger = logging.getLogger(__name__)

ARCHIVE_DIR_NAME = "release-archive"
MANIFEST_FILE = "manifest.json"
LATEST_FILE = "latest.json"
CATALOG_FILE = "catalog.json"

DEFAULT_SOURCE_FILES: tuple[str, ...] = (
    "release-notes.md",
    "release-ready.md",
    "release-ready.json",
    "release-health.md",
    "release-health.json",
    "release-rehearsal.md",
    "release-rehearsal.json",
    "release-summary.md",
    "release-summary.json",
    "release-verify.json",
)

ModelT = TypeVar("ModelT", bound=ArchiveModel)


def format_snapshot_id(moment: datetime | None = None) -> str:
    """Format a UTC timestamp as a sortable snapshot id (YYYYMMDD_HHMMSS)."""
    moment = moment or datetime.now(timezone.utc)
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y%m%d_%H%M%S")


def validate_path_component(value: str, label: str) -> str:
    """Ensure a version or snapshot id names exactly one directory level."""
    value = value.strip()
    if not value or value in (".", "..") or "/" in value or "\\" in value:
        raise ConfigurationError(
            f"invalid {label} '{value}': must be a single path component",
            details={label: value},
        )
    return value


def compute_hash_streaming(file_path: Path) -> str:
    """Compute SHA256 hash of a file with streaming."""
    hasher = hashlib.sha256()
    with open(file_path, "rb") as f:
        for chunk in iter(lambda: f.read(8192), b""):
            hasher.update(chunk)
    return hasher.hexdigest()


def write_json_document(path: Path, document: ArchiveModel) -> None:
    """Write a document as UTF-8, 2-space indented, newline-terminated JSON."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(document.to_json(), encoding="utf-8")


def read_json_document(path: Path, model: type[ModelT]) -> ModelT | None:
    """
    Read a persisted document, treating any failure as absence.

    Returns None when the file is missing, is not valid JSON, is not a
    JSON object, or does not validate against the model.
    """
    try:
        data: Any = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return None
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.debug("Ignoring unreadable document %s: %s", path, e)
        return None

    if not isinstance(data, dict):
        logger.debug("Ignoring non-object document %s", path)
        return None

    try:
        return model.model_validate(data)
    except ValidationError as e:
        logger.debug("Ignoring invalid document %s: %s", path, e.error_count())
        return None


class SnapshotWriter:
    """
    Snapshot writer.

    Copies the allow-listed report files that exist under the artifacts
    directory into a new snapshot directory, hashing each copy, and writes
    the snapshot manifest. Missing files are recorded, never raised.
    """

    def __init__(
        self,
        artifacts_dir: Path,
        archive_root: Path | None = None,
        source_files: tuple[str, ...] | list[str] = DEFAULT_SOURCE_FILES,
    ):
        """
        Initialize snapshot writer.

        Args:
            artifacts_dir: Directory holding the release report files
            archive_root: Archive directory (default: artifacts_dir/release-archive)
            source_files: Allow-list of report file names, in copy order
        """
        self._artifacts_dir = artifacts_dir
        self._archive_root = archive_root or artifacts_dir / ARCHIVE_DIR_NAME
        self._source_files = tuple(source_files)

    @property
    def archive_root(self) -> Path:
        return self._archive_root

    @property
    def source_files(self) -> tuple[str, ...]:
        return self._source_files

    def snapshot_dir(self, version: str, snapshot_id: str) -> Path:
        """Get the directory for a snapshot."""
        return self._archive_root / version / snapshot_id

    def _copy_file(self, name: str, snapshot_dir: Path) -> CopiedFile | None:
        """Copy one report file into the snapshot, or return None if absent."""
        source = self._artifacts_dir / name
        if not source.is_file():
            return None

        target = snapshot_dir / name
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(source, target)

        # Hash the written copy so the manifest reflects what landed on disk
        return CopiedFile(
            file=name,
            size_bytes=target.stat().st_size,
            sha256=compute_hash_streaming(target),
        )

    def write(
        self,
        version: str,
        snapshot_id: str,
        tag: str,
        root: Path,
        options: RetentionOptions | None = None,
    ) -> SnapshotManifest:
        """
        Create a snapshot and write its manifest.

        Args:
            version: Version the snapshot belongs to
            snapshot_id: Snapshot identifier (reuse overwrites)
            tag: Release tag recorded in the manifest
            root: Project root recorded in the manifest
            options: Retention options recorded in the manifest

        Returns:
            The manifest that was written

        Raises:
            ConfigurationError: If version or snapshot_id is not a single path component
            ManifestError: If the manifest cannot be written
        """
        version = validate_path_component(version, "version")
        snapshot_id = validate_path_component(snapshot_id, "snapshot_id")

        snapshot_dir = self.snapshot_dir(version, snapshot_id)
        snapshot_dir.mkdir(parents=True, exist_ok=True)

        copied_files: list[CopiedFile] = []
        missing_files: list[str] = []
        for name in self._source_files:
            copied = self._copy_file(name, snapshot_dir)
            if copied is None:
                missing_files.append(name)
            else:
                copied_files.append(copied)

        manifest = SnapshotManifest(
            root=str(root),
            artifacts_dir=str(self._artifacts_dir),
            archive_root=str(self._archive_root),
            version=version,
            tag=tag,
            snapshot_id=snapshot_id,
            snapshot_dir=str(snapshot_dir),
            copied_files=copied_files,
            missing_files=missing_files,
            options=options or RetentionOptions(),
        )

        manifest_path = snapshot_dir / MANIFEST_FILE
        try:
            write_json_document(manifest_path, manifest)
        except OSError as e:
            raise ManifestError(
                f"Failed to write manifest: {e}", manifest_path=str(manifest_path)
            ) from e

        logger.info(
            "Wrote snapshot %s/%s (%d copied, %d missing)",
            version,
            snapshot_id,
            len(copied_files),
            len(missing_files),
        )
        return manifest
