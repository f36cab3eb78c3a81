"""Core components for the vulnerability resolver."""

from src.layers.l1_intelligence.threat_intel.core.base_client import BaseClient
from src.layers.l1_intelligence.threat_intel.core.data_models import (
    AffectedPackage,
    AffectedRange,
    Severity,
    Vulnerability,
    VulnerabilityReference,
    VulnerabilityResult,
)
from src.layers.l1_intelligence.threat_intel.core.rate_limiter import RateLimiter

__all__ = [
    "AffectedPackage",
    "AffectedRange",
    "BaseClient",
    "RateLimiter",
    "Severity",
    "Vulnerability",
    "VulnerabilityReference",
    "VulnerabilityResult",
]
