"""Aggregate repository risk score."""

import math
from enum import Enum

from src.core.config.settings import ScoringSettings
from src.layers.l1_intelligence.secrets.scanner import DetectedSecret
from src.layers.l1_intelligence.threat_intel.core.data_models import VulnerabilityResult


class RiskLevel(str, Enum):
    """Display label of an aggregate risk score."""

    CRITICAL = "Critical"
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"
    SECURE = "Secure"


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def aggregate_risk_score(
    secrets: list[DetectedSecret],
    results: list[VulnerabilityResult],
    weights: ScoringSettings | None = None,
) -> int:
    """Combine secrets and dependency risk into a 0-100 score.

    Each secret adds its severity weight and each dependency adds half its
    risk score. The total is capped, then rounded half up.

    Args:
        secrets: Detected secrets.
        results: Vulnerability results per dependency.
        weights: Scoring weights; defaults apply when omitted.

    Returns:
        Aggregate risk score.
    """
    weights = weights or ScoringSettings()

    score = sum(weights.secret_weight(s.pattern.severity.value) for s in secrets)
    score += sum(r.risk_score * weights.dependency_factor for r in results)

    return round_half_up(min(weights.max_score, score))


def risk_level(score: float) -> RiskLevel:
    """Map an aggregate score onto its label."""
    if score >= 75:
        return RiskLevel.CRITICAL
    if score >= 50:
        return RiskLevel.HIGH
    if score >= 25:
        return RiskLevel.MEDIUM
    if score > 0:
        return RiskLevel.LOW
    return RiskLevel.SECURE
