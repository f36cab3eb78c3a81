"""Severity derivation and per-dependency risk scoring."""

from src.core.config.settings import ScoringSettings
from src.layers.l1_intelligence.threat_intel.core.data_models import Severity, Vulnerability

# Database labels that do not match a Severity member verbatim
SEVERITY_ALIASES = {"MODERATE": Severity.MEDIUM}


def cvss_to_severity(score: float) -> Severity:
    """Map a CVSS score onto a severity band."""
    if score >= 9.0:
        return Severity.CRITICAL
    if score >= 7.0:
        return Severity.HIGH
    if score >= 4.0:
        return Severity.MEDIUM
    if score > 0:
        return Severity.LOW
    return Severity.UNKNOWN


def label_to_severity(label: str | None) -> Severity:
    """Map a free-form database severity label onto the enum."""
    if not label:
        return Severity.UNKNOWN
    upper = label.strip().upper()
    if upper in SEVERITY_ALIASES:
        return SEVERITY_ALIASES[upper]
    try:
        return Severity(upper)
    except ValueError:
        return Severity.UNKNOWN


def derive_severity(cvss: float | None, label: str | None = None) -> Severity:
    """Derive a vulnerability severity.

    The CVSS band wins when it yields a known severity; otherwise the
    database label is used.

    Args:
        cvss: CVSS base score, if known.
        label: Database-specific severity label, if any.

    Returns:
        Derived severity.
    """
    severity = cvss_to_severity(cvss) if cvss is not None else Severity.UNKNOWN
    if severity == Severity.UNKNOWN:
        severity = label_to_severity(label)
    return severity


def calculate_risk_score(
    vulnerabilities: list[Vulnerability],
    weights: ScoringSettings | None = None,
) -> float:
    """Calculate a 0-100 risk score for one dependency.

    Each vulnerability adds its severity base points, twice its CVSS score,
    and bonuses for KEV listing and known exploits. The sum is capped and
    not rounded.

    Args:
        vulnerabilities: Vulnerabilities affecting the dependency.
        weights: Scoring weights; defaults apply when omitted.

    Returns:
        Risk score.
    """
    if not vulnerabilities:
        return 0.0

    weights = weights or ScoringSettings()
    score = 0.0

    for vuln in vulnerabilities:
        score += weights.vulnerability_weight(vuln.severity.value)
        if vuln.cvss:
            score += vuln.cvss * weights.cvss_multiplier
        if vuln.cisa_kev:
            score += weights.kev_bonus
        if vuln.exploit_available:
            score += weights.exploit_bonus

    return min(weights.max_score, score)
