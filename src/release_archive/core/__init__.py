"""
Release Archive Core Module.

Provides the exception hierarchy shared by the archive and CLI layers.
"""

__all__ = [
    "ReleaseArchiveError",
    "ConfigurationError",
    "ArchiveLockError",
    "ManifestError",
]

from release_archive.core.exceptions import (
    ArchiveLockError,
    ConfigurationError,
    ManifestError,
    ReleaseArchiveError,
)
