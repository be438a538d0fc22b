"""Tests for the exception hierarchy."""

from release_archive.core import (
    ArchiveLockError,
    ConfigurationError,
    ManifestError,
    ReleaseArchiveError,
)


class TestReleaseArchiveError:
    """Tests for the base exception."""

    def test_str_includes_details(self) -> None:
        """Details are appended to the message."""
        error = ReleaseArchiveError("boom", details={"version": "1.0.0"})
        assert str(error) == "boom (version=1.0.0)"

    def test_to_dict(self) -> None:
        """Exceptions serialize with their type name."""
        error = ManifestError("cannot write", manifest_path="/x/manifest.json")
        assert error.to_dict() == {
            "error_type": "ManifestError",
            "code": "ARCHIVE_MANIFEST_WRITE_FAILED",
            "message": "cannot write",
            "details": {"manifest_path": "/x/manifest.json"},
        }

    def test_hierarchy(self) -> None:
        """Every error derives from ReleaseArchiveError."""
        for cls in (ConfigurationError, ArchiveLockError, ManifestError):
            assert issubclass(cls, ReleaseArchiveError)


class TestErrorCodes:
    """Tests for stable error codes."""

    def test_class_codes(self) -> None:
        """Each error class has its own code."""
        assert ReleaseArchiveError("x").code == "RELEASE_ARCHIVE_ERROR"
        assert ConfigurationError("x").code == "ARCHIVE_CONFIG_INVALID"
        assert ArchiveLockError().code == "ARCHIVE_LOCKED"
        assert ManifestError("x").code == "ARCHIVE_MANIFEST_WRITE_FAILED"

    def test_code_override(self) -> None:
        """A code passed at raise time replaces the class code."""
        error = ReleaseArchiveError("x", code="CUSTOM_CODE")
        assert error.code == "CUSTOM_CODE"
        assert error.to_dict()["code"] == "CUSTOM_CODE"
        assert ReleaseArchiveError.code == "RELEASE_ARCHIVE_ERROR"


class TestConfigurationError:
    """Tests for ConfigurationError."""

    def test_context_in_details(self) -> None:
        """Context arguments are recorded but not shown in the message."""
        error = ConfigurationError("bad value", env_var="RA_RETENTION_DAYS", option="--x")
        assert str(error) == "bad value"
        assert error.details == {"env_var": "RA_RETENTION_DAYS", "option": "--x"}


class TestArchiveLockError:
    """Tests for ArchiveLockError."""

    def test_default_message(self) -> None:
        """A default message is provided."""
        error = ArchiveLockError(lock_path="/a/.archive.lock")
        assert error.message == "Archive lock is held by another process"
        assert error.lock_path == "/a/.archive.lock"
