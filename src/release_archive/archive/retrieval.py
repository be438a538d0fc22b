"""
Archive query and retrieval module.

Answers read-only queries against the persisted catalog, latest pointers and
snapshot manifests. Nothing here writes to the archive; index documents that
are missing or unreadable are treated as absent.
"""

from pathlib import Path

from release_archive.core.exceptions import ConfigurationError

from .index import list_snapshot_ids
from .models import (
    Catalog,
    CheckFailure,
    CheckStatus,
    FindMode,
    FindResult,
    LatestPointer,
    LatestSnapshotRef,
    PresetListResult,
    SnapshotManifest,
    SnapshotSummary,
    StandardizedResult,
)
from .presets import REQUIRED_FILE_PRESETS, get_require_preset_files, list_require_presets
from .storage import (
    CATALOG_FILE,
    LATEST_FILE,
    MANIFEST_FILE,
    read_json_document,
    validate_path_component,
)

DEFAULT_LIMIT = 20


def missing_required_files(required: list[str], copied: list[str]) -> list[str]:
    """Return required file names absent from the copied list, in order."""
    copied_set = set(copied)
    return [name for name in required if name not in copied_set]


def build_find_standardized(result: FindResult) -> StandardizedResult:
    """Normalize a query result into the shared standardized block."""
    check_statuses: dict[str, CheckStatus] = {}
    if result.mode is FindMode.VERSIONS:
        check_statuses["archiveIndex"] = CheckStatus.from_ok(result.ok)
    elif result.mode is FindMode.VERSION_LATEST:
        check_statuses["latestSnapshot"] = CheckStatus.from_ok(result.latest_snapshot is not None)
    elif result.mode is FindMode.SNAPSHOT:
        check_statuses["snapshotManifest"] = CheckStatus.from_ok(result.snapshot is not None)

    missing = result.missing_required_files or []
    if result.required_files:
        check_statuses["requiredFiles"] = CheckStatus.from_ok(not missing)

    failures: list[CheckFailure] = []
    if not result.ok:
        if missing:
            failures.append(
                CheckFailure(
                    check="requiredFiles",
                    code="ARCHIVE_REQUIRED_FILES_MISSING",
                    message=f"missing required files: {','.join(missing)}",
                )
            )
        if result.mode is FindMode.VERSION_LATEST and result.latest_snapshot is None:
            failures.append(
                CheckFailure(
                    check="latestSnapshot",
                    code="ARCHIVE_VERSION_NO_SNAPSHOTS",
                    message=result.error or "version has no snapshots",
                )
            )
        if result.mode is FindMode.SNAPSHOT and result.snapshot is None:
            failures.append(
                CheckFailure(
                    check="snapshotManifest",
                    code="ARCHIVE_MANIFEST_NOT_FOUND",
                    message=result.error or "snapshot manifest not found",
                )
            )
        if not failures:
            failures.append(
                CheckFailure(
                    check="archiveFind",
                    code="RELEASE_ARCHIVE_FIND_FAIL",
                    message=result.error or "release archive find failed",
                )
            )

    return StandardizedResult.build(
        ok=result.ok,
        ok_code="RELEASE_ARCHIVE_FIND_OK",
        fail_code="RELEASE_ARCHIVE_FIND_FAIL",
        check_statuses=check_statuses,
        failures=failures,
    )


class ArchiveReader:
    """
    Read-only query interface over an archive root.

    The query mode is selected by which identifiers are supplied:
    no version lists versions from the catalog, a version alone resolves
    its latest snapshot, and a version with a snapshot id summarizes that
    snapshot's manifest.
    """

    def __init__(self, archive_root: Path):
        """
        Initialize reader.

        Args:
            archive_root: Archive directory to query
        """
        self._archive_root = archive_root

    @property
    def archive_root(self) -> Path:
        return self._archive_root

    def load_catalog(self) -> Catalog:
        """Load catalog.json, falling back to an empty catalog."""
        catalog = read_json_document(self._archive_root / CATALOG_FILE, Catalog)
        return catalog or Catalog(archive_root=str(self._archive_root))

    def load_latest(self, version: str) -> LatestPointer | None:
        """Load a version's latest.json, if present and readable."""
        return read_json_document(self._archive_root / version / LATEST_FILE, LatestPointer)

    def load_manifest(self, version: str, snapshot_id: str) -> SnapshotManifest | None:
        """Load a snapshot's manifest, if present and readable."""
        path = self._archive_root / version / snapshot_id / MANIFEST_FILE
        return read_json_document(path, SnapshotManifest)

    def _resolve_required_files(
        self,
        version: str,
        snapshot_id: str,
        required_files: list[str] | None,
        required_preset: str | None,
    ) -> list[str]:
        """Validate query arguments and resolve the required file list."""
        explicit = [name.strip() for name in required_files or [] if name.strip()]
        preset = (required_preset or "").strip()

        if preset and explicit:
            raise ConfigurationError(
                "cannot combine --require-files with --require-preset",
                option="--require-preset",
            )

        resolved = explicit
        if preset:
            preset_files = get_require_preset_files(preset)
            if preset_files is None:
                raise ConfigurationError(
                    f"unknown require preset '{preset}', expected one of: "
                    f"{','.join(REQUIRED_FILE_PRESETS)}",
                    option="--require-preset",
                )
            resolved = preset_files

        if snapshot_id and not version:
            raise ConfigurationError(
                "--snapshot-id requires --version", option="--snapshot-id"
            )
        if resolved and not version:
            raise ConfigurationError(
                "--require-files/--require-preset requires --version",
                option="--require-files",
            )
        return resolved

    def _apply_required_files(
        self,
        result: FindResult,
        required: list[str],
        preset: str | None,
        manifest: SnapshotManifest | None,
        label: str,
    ) -> None:
        """Check a manifest against required files and record the outcome."""
        copied = manifest.copied_file_names() if manifest else []
        missing = missing_required_files(required, copied)
        result.required_files = required
        if preset:
            result.required_files_preset = preset.strip()
        result.missing_required_files = missing
        if missing:
            result.ok = False
            result.error = f"{label} missing required files: {','.join(missing)}"

    def find(
        self,
        version: str | None = None,
        snapshot_id: str | None = None,
        limit: int = DEFAULT_LIMIT,
        required_files: list[str] | None = None,
        required_preset: str | None = None,
    ) -> FindResult:
        """
        Query the archive.

        Args:
            version: Version to resolve (omit to list versions)
            snapshot_id: Snapshot to summarize (requires version)
            limit: Maximum versions or sibling snapshots to return
            required_files: File names the resolved snapshot must contain
            required_preset: Name of a built-in required-files preset

        Returns:
            FindResult for the selected mode

        Raises:
            ConfigurationError: If the arguments are inconsistent
        """
        version = (version or "").strip()
        snapshot_id = (snapshot_id or "").strip()
        limit = max(1, int(limit))
        required = self._resolve_required_files(
            version, snapshot_id, required_files, required_preset
        )
        if version:
            version = validate_path_component(version, "version")
        if snapshot_id:
            snapshot_id = validate_path_component(snapshot_id, "snapshot_id")

        if not version:
            result = self._find_versions(limit)
        elif not snapshot_id:
            result = self._find_version_latest(version, limit, required, required_preset)
        else:
            result = self._find_snapshot(version, snapshot_id, required, required_preset)

        result.standardized = build_find_standardized(result)
        return result

    def _find_versions(self, limit: int) -> FindResult:
        catalog = self.load_catalog()
        return FindResult(
            archive_root=str(self._archive_root),
            mode=FindMode.VERSIONS,
            versions=catalog.versions[:limit],
        )

    def _find_version_latest(
        self,
        version: str,
        limit: int,
        required: list[str],
        preset: str | None,
    ) -> FindResult:
        result = FindResult(
            archive_root=str(self._archive_root),
            mode=FindMode.VERSION_LATEST,
            version=version,
        )
        latest = self.load_latest(version)
        if latest is None or not latest.latest_snapshot_id:
            result.ok = False
            result.error = f"version '{version}' has no snapshots"
            return result

        result.latest_snapshot = LatestSnapshotRef(
            snapshot_id=latest.latest_snapshot_id,
            snapshot_dir=latest.latest_snapshot_dir,
        )
        result.snapshots = list_snapshot_ids(self._archive_root / version)[:limit]

        if required:
            manifest = self.load_manifest(version, latest.latest_snapshot_id)
            self._apply_required_files(
                result,
                required,
                preset,
                manifest,
                f"latest snapshot '{latest.latest_snapshot_id}'",
            )
        return result

    def _find_snapshot(
        self,
        version: str,
        snapshot_id: str,
        required: list[str],
        preset: str | None,
    ) -> FindResult:
        result = FindResult(
            archive_root=str(self._archive_root),
            mode=FindMode.SNAPSHOT,
            version=version,
            snapshot_id=snapshot_id,
        )
        manifest = self.load_manifest(version, snapshot_id)
        if manifest is None:
            result.ok = False
            result.error = f"manifest not found for {version}/{snapshot_id}"
            return result

        result.snapshot = SnapshotSummary(
            snapshot_dir=manifest.snapshot_dir
            or str(self._archive_root / version / snapshot_id),
            copied_files=len(manifest.copied_files),
            missing_files=len(manifest.missing_files),
            tag=manifest.tag,
        )

        if required:
            self._apply_required_files(
                result, required, preset, manifest, f"snapshot '{snapshot_id}'"
            )
        return result

    def list_presets(self) -> PresetListResult:
        """List the built-in required-file presets."""
        presets = list_require_presets()
        result = PresetListResult(require_presets=presets)
        result.standardized = StandardizedResult.build(
            ok=True,
            ok_code="RELEASE_ARCHIVE_FIND_PRESETS_OK",
            fail_code="RELEASE_ARCHIVE_FIND_PRESETS_FAIL",
            check_statuses={"requirePresets": CheckStatus.from_ok(bool(presets))},
            failures=[],
            metrics={"presetCount": len(presets)},
        )
        return result
