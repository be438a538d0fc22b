"""
Release Archive - Versioned snapshots of release reports.

Persists point-in-time copies of release report files indexed by version
and snapshot id, enforces age and count retention, and maintains a catalog
and per-version latest pointers that always reflect what is on disk.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
