"""
Pydantic models for the release archive.

Defines the persisted documents (manifest, latest pointer, catalog) and the
result records returned by the archiving and query operations. Every model
serializes to camelCase keys and accepts either spelling when reading.
"""

import json
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

SCHEMA_VERSION = 1

DEFAULT_RETENTION_DAYS = 30
DEFAULT_MAX_SNAPSHOTS_PER_VERSION = 20


def utc_now_iso() -> str:
    """Return the current UTC time as an ISO 8601 string."""
    return datetime.now(timezone.utc).isoformat()


class CheckStatus(Enum):
    """Outcome of a single standardized check."""

    PASS = "pass"
    FAIL = "fail"

    @classmethod
    def from_ok(cls, ok: bool) -> "CheckStatus":
        return cls.PASS if ok else cls.FAIL


class FindMode(Enum):
    """Query shape answered by the archive reader."""

    VERSIONS = "versions"
    VERSION_LATEST = "version-latest"
    SNAPSHOT = "snapshot"
    REQUIRE_PRESETS = "require-presets"


class PruneReason(Enum):
    """Why a snapshot was evicted by the retention pruner."""

    RETENTION_DAYS = "retention_days"
    MAX_SNAPSHOTS_PER_VERSION = "max_snapshots_per_version"


class ArchiveModel(BaseModel):
    """Base model for every archive document and result record."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json_dict(self) -> dict[str, Any]:
        """Dump to a JSON-compatible dict with camelCase keys."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    def to_json(self) -> str:
        """Serialize as indented, newline-terminated JSON."""
        return json.dumps(self.to_json_dict(), indent=2) + "\n"


class CopiedFile(ArchiveModel):
    """A report file copied into a snapshot."""

    file: str = Field(default="", description="Path relative to the snapshot directory")
    size_bytes: int = Field(default=0, alias="bytes", description="Size in bytes")
    sha256: str = Field(default="", description="SHA256 of the copied bytes")


class RetentionOptions(ArchiveModel):
    """Retention policy in effect for an archiving run."""

    retention_days: int = Field(
        default=DEFAULT_RETENTION_DAYS, description="Maximum snapshot age in days"
    )
    max_snapshots_per_version: int = Field(
        default=DEFAULT_MAX_SNAPSHOTS_PER_VERSION,
        description="Maximum snapshots kept per version",
    )

    @field_validator("retention_days", "max_snapshots_per_version")
    @classmethod
    def clamp_minimum(cls, v: int) -> int:
        """Both limits are clamped to at least 1."""
        return max(1, v)

    @property
    def retention_seconds(self) -> float:
        return self.retention_days * 24 * 60 * 60


class SnapshotManifest(ArchiveModel):
    """Per-snapshot record of copied and missing files."""

    schema_version: int = Field(default=SCHEMA_VERSION, alias="schema")
    generated_at: str = Field(default_factory=utc_now_iso)
    root: str = ""
    artifacts_dir: str = ""
    archive_root: str = ""
    version: str = ""
    tag: str = ""
    snapshot_id: str = ""
    snapshot_dir: str = ""
    copied_files: list[CopiedFile] = Field(default_factory=list)
    missing_files: list[str] = Field(default_factory=list)
    options: RetentionOptions = Field(default_factory=RetentionOptions)

    @field_validator(
        "root",
        "artifacts_dir",
        "archive_root",
        "version",
        "tag",
        "snapshot_id",
        "snapshot_dir",
        mode="before",
    )
    @classmethod
    def null_to_empty(cls, v):
        return "" if v is None else v

    @field_validator("copied_files", mode="before")
    @classmethod
    def coerce_copied_files(cls, v):
        """Accept bare file names; drop entries that do not validate."""
        if not isinstance(v, list):
            return []
        entries = []
        for item in v:
            if isinstance(item, str):
                item = {"file": item}
            try:
                entries.append(CopiedFile.model_validate(item))
            except ValidationError:
                continue
        return entries

    @field_validator("missing_files", mode="before")
    @classmethod
    def coerce_missing_files(cls, v):
        """Keep only string names; anything else reads as no missing files."""
        if not isinstance(v, list):
            return []
        return [item for item in v if isinstance(item, str)]

    def copied_file_names(self) -> list[str]:
        """Return the non-empty relative names of copied files."""
        return [entry.file.strip() for entry in self.copied_files if entry.file.strip()]


class LatestPointer(ArchiveModel):
    """Per-version pointer at the newest surviving snapshot."""

    schema_version: int = Field(default=SCHEMA_VERSION, alias="schema")
    version: str = ""
    latest_snapshot_id: str = ""
    latest_snapshot_dir: str = ""


class CatalogEntry(ArchiveModel):
    """Catalog row for a single version."""

    version: str
    latest_snapshot_id: str = ""
    snapshot_count: int = 0
    snapshots: list[str] = Field(default_factory=list)


class Catalog(ArchiveModel):
    """Global index of every version and its snapshots, newest first."""

    schema_version: int = Field(default=SCHEMA_VERSION, alias="schema")
    generated_at: str = Field(default_factory=utc_now_iso)
    archive_root: str = ""
    versions: list[CatalogEntry] = Field(default_factory=list)

    @field_validator("versions", mode="before")
    @classmethod
    def drop_malformed_rows(cls, v):
        """Skip rows that do not validate instead of rejecting the catalog."""
        if not isinstance(v, list):
            return []
        rows = []
        for item in v:
            try:
                rows.append(CatalogEntry.model_validate(item))
            except ValidationError:
                continue
        return rows


class PrunedSnapshot(ArchiveModel):
    """A snapshot removed by the retention pruner."""

    snapshot_id: str
    reason: PruneReason


class CheckFailure(ArchiveModel):
    """A failed standardized check."""

    check: str
    code: str
    message: str
    retryable: bool = False


class CheckSummary(ArchiveModel):
    """Counts of standardized check outcomes."""

    total_checks: int = 0
    pass_count: int = 0
    fail_count: int = 0


class StandardizedResult(ArchiveModel):
    """Normalized outcome block shared by every release report."""

    schema_version: int = Field(default=SCHEMA_VERSION, alias="schema")
    status: CheckStatus
    result_code: str
    summary: CheckSummary
    check_statuses: dict[str, CheckStatus] = Field(default_factory=dict)
    failure_codes: list[str] = Field(default_factory=list)
    failures: list[CheckFailure] = Field(default_factory=list)
    metrics: dict[str, Any] | None = None

    @classmethod
    def build(
        cls,
        ok: bool,
        ok_code: str,
        fail_code: str,
        check_statuses: dict[str, CheckStatus],
        failures: list[CheckFailure],
        metrics: dict[str, Any] | None = None,
    ) -> "StandardizedResult":
        """Assemble the block from check outcomes and failures."""
        statuses = list(check_statuses.values())
        return cls(
            status=CheckStatus.from_ok(ok),
            result_code=ok_code if ok else fail_code,
            summary=CheckSummary(
                total_checks=len(statuses),
                pass_count=sum(1 for s in statuses if s is CheckStatus.PASS),
                fail_count=sum(1 for s in statuses if s is CheckStatus.FAIL),
            ),
            check_statuses=check_statuses,
            failure_codes=[f.code for f in failures],
            failures=failures,
            metrics=metrics,
        )


class ArchiveResult(ArchiveModel):
    """Result record of one archiving run."""

    schema_version: int = Field(default=SCHEMA_VERSION, alias="schema")
    generated_at: str = Field(default_factory=utc_now_iso)
    root: str
    artifacts_dir: str
    archive_root: str
    version: str
    tag: str
    snapshot_id: str
    snapshot_dir: str
    copied_files: list[CopiedFile] = Field(default_factory=list)
    missing_files: list[str] = Field(default_factory=list)
    pruned_snapshots: list[PrunedSnapshot] = Field(default_factory=list)
    catalog_path: str = ""
    latest_path: str = ""
    options: RetentionOptions = Field(default_factory=RetentionOptions)
    dry_run: bool = False
    ok: bool = False
    error: str = ""
    standardized: StandardizedResult | None = None


class LatestSnapshotRef(ArchiveModel):
    """Latest snapshot of a version as reported by the reader."""

    snapshot_id: str
    snapshot_dir: str


class SnapshotSummary(ArchiveModel):
    """Manifest summary of a single snapshot as reported by the reader."""

    snapshot_dir: str
    copied_files: int = 0
    missing_files: int = 0
    tag: str = ""


class FindResult(ArchiveModel):
    """Result record of an archive query."""

    schema_version: int = Field(default=SCHEMA_VERSION, alias="schema")
    generated_at: str = Field(default_factory=utc_now_iso)
    archive_root: str
    mode: FindMode
    ok: bool = True
    version: str | None = None
    snapshot_id: str | None = None
    error: str | None = None
    versions: list[CatalogEntry] | None = None
    latest_snapshot: LatestSnapshotRef | None = None
    snapshots: list[str] | None = None
    snapshot: SnapshotSummary | None = None
    required_files: list[str] | None = None
    required_files_preset: str | None = None
    missing_required_files: list[str] | None = None
    standardized: StandardizedResult | None = None


class RequirePreset(ArchiveModel):
    """A named list of files a snapshot must contain."""

    name: str
    files: list[str] = Field(default_factory=list)


class PresetListResult(ArchiveModel):
    """Result record of the preset listing query."""

    schema_version: int = Field(default=SCHEMA_VERSION, alias="schema")
    generated_at: str = Field(default_factory=utc_now_iso)
    mode: FindMode = FindMode.REQUIRE_PRESETS
    ok: bool = True
    require_presets: list[RequirePreset] = Field(default_factory=list)
    standardized: StandardizedResult | None = None
