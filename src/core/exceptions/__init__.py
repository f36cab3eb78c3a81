"""Exception definitions module."""

from src.core.exceptions.errors import (
    ConfigurationError,
    ExternalServiceError,
    ManifestParseError,
    RepoRiskError,
)

__all__ = [
    "ConfigurationError",
    "ExternalServiceError",
    "ManifestParseError",
    "RepoRiskError",
]
