"""Secret scanner for hardcoded credentials in text content."""

from src.layers.l1_intelligence.secrets.patterns import (
    SECRET_PATTERNS,
    SecretPattern,
    SecretSeverity,
    get_pattern,
)
from src.layers.l1_intelligence.secrets.scanner import (
    DetectedSecret,
    SecretMetadata,
    SecretScanner,
    group_secrets_by_commit,
    group_secrets_by_file,
    is_placeholder,
    redact_secret,
    scan_for_secrets,
)

__all__ = [
    "SECRET_PATTERNS",
    "DetectedSecret",
    "SecretMetadata",
    "SecretPattern",
    "SecretScanner",
    "SecretSeverity",
    "get_pattern",
    "group_secrets_by_commit",
    "group_secrets_by_file",
    "is_placeholder",
    "redact_secret",
    "scan_for_secrets",
]
