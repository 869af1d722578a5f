"""Exceptions for setup and configuration failures.

Per-file pipeline failures are returned as outcomes, not raised.
"""

from pathlib import Path


class RulewriterError(Exception):
    """Base exception for gemini-rulewriter errors"""  # noqa: D415


class MissingKeyError(RulewriterError):
    """Raised when the API key required by a provider is missing"""  # noqa: D415


class SessionError(RulewriterError):
    """Raised when a scratch completion session cannot be created"""  # noqa: D415


class ConfigFileError(RulewriterError):
    """Raised when configuration file loading fails."""

    def __init__(
        self, file_path: Path, message: str, cause: Exception | None = None
    ) -> None:
        """Initialize with file path, message, and optional cause.

        Args:
            file_path: The file that failed to load
            message: Human-readable error message
            cause: The underlying exception that caused the failure
        """
        self.file_path = file_path
        self.message = message
        self.cause = cause
        super().__init__(f"Config file error in {file_path}: {message}")
