"""
Release Archive Exception Hierarchy.

Defines the custom exceptions raised by the archive core and its
configuration layer. Per-file copy misses, pruning failures and unreadable
index documents are not exceptions; they are recorded in result records.
"""

from typing import Any


class ReleaseArchiveError(Exception):
    """
    Base exception for all release archive errors.

    Each class carries a stable ``code`` in the UPPER_SNAKE style of the
    standardized failure codes; the CLI reports it alongside the message.
    """

    code = "RELEASE_ARCHIVE_ERROR"

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        """
        Initialize a ReleaseArchiveError.

        Args:
            message: Human-readable error message
            code: Override of the class error code
            details: Optional structured data for debugging
        """
        super().__init__(message)
        self.message = message
        if code:
            self.code = code
        self.details = details or {}

    def __str__(self) -> str:
        """Return string representation with details."""
        base = self.message
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{base} ({details_str})"
        return base

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for serialization."""
        return {
            "error_type": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class ConfigurationError(ReleaseArchiveError):
    """
    Errors in configuration resolution or argument validation.

    Raised when:
    - No version can be resolved (flag or project manifest)
    - Environment overrides are not valid integers
    - Query arguments are combined in an unsupported way
    - A version or snapshot id is not a single path component
    """

    code = "ARCHIVE_CONFIG_INVALID"

    def __init__(
        self,
        message: str,
        *,
        config_file: str | None = None,
        env_var: str | None = None,
        option: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        """
        Initialize a ConfigurationError.

        Args:
            message: Human-readable error message
            config_file: Project manifest path if applicable
            env_var: Environment variable name if applicable
            option: Command-line option if applicable
            details: Optional structured data for debugging
        """
        details = details or {}
        if config_file:
            details["config_file"] = config_file
        if env_var:
            details["env_var"] = env_var
        if option:
            details["option"] = option

        super().__init__(message, details=details)
        self.config_file = config_file
        self.env_var = env_var
        self.option = option

    def __str__(self) -> str:
        # Shown verbatim on stderr by the CLI.
        return self.message


class ArchiveLockError(ReleaseArchiveError):
    """Raised when the per-version archive lock is held by another writer."""

    code = "ARCHIVE_LOCKED"

    def __init__(
        self,
        message: str = "Archive lock is held by another process",
        *,
        lock_path: str | None = None,
    ):
        details = {"lock_path": lock_path} if lock_path else None
        super().__init__(message, details=details)
        self.lock_path = lock_path


class ManifestError(ReleaseArchiveError):
    """Raised when a snapshot manifest cannot be written to disk."""

    code = "ARCHIVE_MANIFEST_WRITE_FAILED"

    def __init__(
        self,
        message: str,
        *,
        manifest_path: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        details = details or {}
        if manifest_path:
            details["manifest_path"] = manifest_path
        super().__init__(message, details=details)
        self.manifest_path = manifest_path
