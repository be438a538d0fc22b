"""Pytest configuration and fixtures."""

import json
import os
import tempfile
from pathlib import Path
from typing import Generator

import pytest

# Keep environment overrides from leaking into tests
for _name in ("RA_RETENTION_DAYS", "RA_MAX_SNAPSHOTS_PER_VERSION", "RA_LOG_LEVEL"):
    os.environ.pop(_name, None)


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Provide a temporary directory that is cleaned up after the test."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir).resolve()


@pytest.fixture
def project_root(temp_dir: Path) -> Path:
    """Provide a project root with a package.json at version 9.9.9."""
    root = temp_dir / "project"
    (root / "artifacts").mkdir(parents=True)
    (root / "package.json").write_text(
        json.dumps({"name": "x", "version": "9.9.9", "type": "module"}) + "\n",
        encoding="utf-8",
    )
    return root


@pytest.fixture
def artifacts_dir(project_root: Path) -> Path:
    """Provide the artifacts directory with two release reports."""
    artifacts = project_root / "artifacts"
    (artifacts / "release-ready.json").write_text('{"ok": true}\n', encoding="utf-8")
    (artifacts / "release-health.json").write_text('{"ok": true}\n', encoding="utf-8")
    return artifacts


@pytest.fixture
def populated_archive(temp_dir: Path) -> Path:
    """
    Provide a project root whose archive holds two versions.

    1.5.0 has snapshots 20260225_100000 (latest) and 20260225_090000;
    1.4.0 has 20260224_220000. Only the 1.5.0 latest snapshot has a manifest.
    """
    root = temp_dir / "populated"
    archive_root = root / "artifacts" / "release-archive"
    (archive_root / "1.5.0" / "20260225_100000").mkdir(parents=True)
    (archive_root / "1.5.0" / "20260225_090000").mkdir(parents=True)
    (archive_root / "1.4.0" / "20260224_220000").mkdir(parents=True)

    (archive_root / "catalog.json").write_text(
        json.dumps(
            {
                "schema": 1,
                "versions": [
                    {
                        "version": "1.5.0",
                        "latestSnapshotId": "20260225_100000",
                        "snapshotCount": 2,
                        "snapshots": ["20260225_100000", "20260225_090000"],
                    },
                    {
                        "version": "1.4.0",
                        "latestSnapshotId": "20260224_220000",
                        "snapshotCount": 1,
                        "snapshots": ["20260224_220000"],
                    },
                ],
            }
        )
        + "\n",
        encoding="utf-8",
    )
    (archive_root / "1.5.0" / "latest.json").write_text(
        json.dumps(
            {
                "schema": 1,
                "version": "1.5.0",
                "latestSnapshotId": "20260225_100000",
                "latestSnapshotDir": str(archive_root / "1.5.0" / "20260225_100000"),
            }
        )
        + "\n",
        encoding="utf-8",
    )
    (archive_root / "1.5.0" / "20260225_100000" / "manifest.json").write_text(
        json.dumps(
            {
                "schema": 1,
                "version": "1.5.0",
                "tag": "v1.5.0",
                "snapshotDir": str(archive_root / "1.5.0" / "20260225_100000"),
                "copiedFiles": [
                    {"file": "release-health.json"},
                    {"file": "release-ready.json"},
                ],
                "missingFiles": ["release-verify.json"],
            }
        )
        + "\n",
        encoding="utf-8",
    )
    return root
