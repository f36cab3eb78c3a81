"""Vulnerability resolver - OSV lookups, severity derivation and risk scoring."""

from src.layers.l1_intelligence.threat_intel.core.data_models import (
    AffectedPackage,
    AffectedRange,
    Severity,
    Vulnerability,
    VulnerabilityReference,
    VulnerabilityResult,
)
from src.layers.l1_intelligence.threat_intel.resolver import ResolverStats, VulnerabilityResolver
from src.layers.l1_intelligence.threat_intel.scoring import (
    calculate_risk_score,
    cvss_to_severity,
    derive_severity,
)

__all__ = [
    "AffectedPackage",
    "AffectedRange",
    "ResolverStats",
    "Severity",
    "Vulnerability",
    "VulnerabilityReference",
    "VulnerabilityResolver",
    "VulnerabilityResult",
    "calculate_risk_score",
    "cvss_to_severity",
    "derive_severity",
]
