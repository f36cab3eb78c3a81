"""Custom exception definitions for RepoRisk."""

from typing import Any


class RepoRiskError(Exception):
    """Base exception for all RepoRisk errors."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Error message.
            details: Additional error details.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return string representation of the error."""
        if self.details:
            return f"{self.message} - Details: {self.details}"
        return self.message


class ManifestParseError(RepoRiskError):
    """Exception raised when a dependency manifest cannot be decoded."""

    def __init__(
        self,
        message: str,
        source_file: str | None = None,
        ecosystem: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize manifest parse error.

        Args:
            message: Error message.
            source_file: Manifest file that failed to parse.
            ecosystem: Ecosystem of the manifest.
            details: Additional error details.
        """
        details = details or {}
        if source_file:
            details["source_file"] = source_file
        if ecosystem:
            details["ecosystem"] = ecosystem
        super().__init__(message, details)


class ExternalServiceError(RepoRiskError):
    """Exception raised when an external data source fails."""

    def __init__(
        self,
        message: str,
        service: str | None = None,
        status: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize external service error.

        Args:
            message: Error message.
            service: Name of the external service (osv, deps.dev, nvd, ...).
            status: HTTP status code, if any.
            details: Additional error details.
        """
        details = details or {}
        if service:
            details["service"] = service
        if status is not None:
            details["status"] = status
        super().__init__(message, details)
        self.service = service
        self.status = status


class ConfigurationError(RepoRiskError):
    """Exception raised for configuration errors."""

    def __init__(
        self,
        message: str,
        config_key: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize configuration error.

        Args:
            message: Error message.
            config_key: Configuration key that caused the error.
            details: Additional error details.
        """
        details = details or {}
        if config_key:
            details["config_key"] = config_key
        super().__init__(message, details)
