"""
Archive configuration.

Resolves the inputs of an archiving run (paths, version, tag, snapshot id,
retention policy) from explicit arguments, environment overrides and the
project manifest.

Environment variables:
- RA_RETENTION_DAYS: Default retention window in days
- RA_MAX_SNAPSHOTS_PER_VERSION: Default snapshots kept per version
- RA_LOG_LEVEL: CLI log level (default: WARNING)
"""

import json
import os
import tomllib
from datetime import datetime
from pathlib import Path

from pydantic import BaseModel

from release_archive.archive.models import (
    DEFAULT_MAX_SNAPSHOTS_PER_VERSION,
    DEFAULT_RETENTION_DAYS,
    RetentionOptions,
)
from release_archive.archive.storage import (
    ARCHIVE_DIR_NAME,
    format_snapshot_id,
    validate_path_component,
)
from release_archive.core.exceptions import ConfigurationError

CURRENT_VERSION_SENTINEL = "current"


class ArchiveConfig(BaseModel):
    """Resolved configuration for one archiving run."""

    root: Path
    artifacts_dir: Path
    archive_root: Path
    version: str
    tag: str
    snapshot_id: str
    retention: RetentionOptions

    @property
    def version_dir(self) -> Path:
        return self.archive_root / self.version

    @property
    def snapshot_dir(self) -> Path:
        return self.version_dir / self.snapshot_id


def _env_int(name: str, default: int) -> int:
    """Read an integer environment override."""
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(
            f"{name} must be an integer, got '{raw}'", env_var=name
        ) from None


def read_project_version(root: Path) -> str:
    """
    Read the version field of the project manifest.

    Looks at package.json first, then pyproject.toml ([project].version).
    Returns an empty string when neither yields a version.
    """
    package_json = root / "package.json"
    if package_json.is_file():
        try:
            data = json.loads(package_json.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationError(
                f"unreadable project manifest: {e}", config_file=str(package_json)
            ) from e
        version = data.get("version") if isinstance(data, dict) else None
        return str(version or "").strip()

    pyproject = root / "pyproject.toml"
    if pyproject.is_file():
        try:
            data = tomllib.loads(pyproject.read_text(encoding="utf-8"))
        except (OSError, tomllib.TOMLDecodeError) as e:
            raise ConfigurationError(
                f"unreadable project manifest: {e}", config_file=str(pyproject)
            ) from e
        return str(data.get("project", {}).get("version") or "").strip()

    return ""


def resolve_version(root: Path, version_flag: str | None) -> str:
    """
    Resolve the version to archive.

    An explicit version wins; "current" requires the project manifest's
    version; no version at all falls back to the project manifest.
    """
    flag = (version_flag or "").strip()
    if flag and flag.lower() != CURRENT_VERSION_SENTINEL:
        return flag

    project_version = read_project_version(root)
    if flag:
        if not project_version:
            raise ConfigurationError(
                "--version current requires a project manifest with a valid version field",
                option="--version",
            )
        return project_version

    if not project_version:
        raise ConfigurationError(
            "version is required (--version or project manifest version)",
            option="--version",
        )
    return project_version


def resolve_artifacts_dir(root: Path, artifacts_dir: Path | str | None) -> Path:
    """Resolve the artifacts directory relative to the project root."""
    if artifacts_dir is None or str(artifacts_dir).strip() == "":
        return root / "artifacts"
    return (root / Path(artifacts_dir)).resolve()


def resolve_retention(
    retention_days: int | None = None,
    max_snapshots_per_version: int | None = None,
) -> RetentionOptions:
    """Combine explicit retention arguments with environment defaults."""
    if retention_days is None:
        retention_days = _env_int("RA_RETENTION_DAYS", DEFAULT_RETENTION_DAYS)
    if max_snapshots_per_version is None:
        max_snapshots_per_version = _env_int(
            "RA_MAX_SNAPSHOTS_PER_VERSION", DEFAULT_MAX_SNAPSHOTS_PER_VERSION
        )
    return RetentionOptions(
        retention_days=retention_days,
        max_snapshots_per_version=max_snapshots_per_version,
    )


def resolve_archive_config(
    root: Path | None = None,
    version: str | None = None,
    tag: str | None = None,
    artifacts_dir: Path | str | None = None,
    snapshot_id: str | None = None,
    retention_days: int | None = None,
    max_snapshots_per_version: int | None = None,
    now: datetime | None = None,
) -> ArchiveConfig:
    """
    Resolve the full configuration of an archiving run.

    Args:
        root: Project root (default: current directory)
        version: Version flag; "current" or None reads the project manifest
        tag: Release tag (default: v<version>)
        artifacts_dir: Artifacts directory, relative to root (default: artifacts)
        snapshot_id: Snapshot id (default: current UTC time)
        retention_days: Retention window override
        max_snapshots_per_version: Per-version snapshot limit override
        now: Reference time for the default snapshot id

    Returns:
        ArchiveConfig

    Raises:
        ConfigurationError: If no valid version or snapshot id can be resolved
    """
    root = (root or Path.cwd()).resolve()
    resolved_version = validate_path_component(resolve_version(root, version), "version")
    resolved_artifacts = resolve_artifacts_dir(root, artifacts_dir)
    resolved_snapshot = validate_path_component(
        (snapshot_id or "").strip() or format_snapshot_id(now), "snapshot_id"
    )

    return ArchiveConfig(
        root=root,
        artifacts_dir=resolved_artifacts,
        archive_root=resolved_artifacts / ARCHIVE_DIR_NAME,
        version=resolved_version,
        tag=(tag or "").strip() or f"v{resolved_version}",
        snapshot_id=resolved_snapshot,
        retention=resolve_retention(retention_days, max_snapshots_per_version),
    )


def log_level_from_env(default: str = "WARNING") -> str:
    """Return the log level name configured via RA_LOG_LEVEL."""
    return os.getenv("RA_LOG_LEVEL", default).strip().upper() or default
