"""Risk aggregation and the per-assessment security context."""

from src.layers.l1_intelligence.risk.aggregator import (
    RiskLevel,
    aggregate_risk_score,
    risk_level,
    round_half_up,
)
from src.layers.l1_intelligence.risk.context import SecurityContext, SecuritySnapshot

__all__ = [
    "RiskLevel",
    "SecurityContext",
    "SecuritySnapshot",
    "aggregate_risk_score",
    "risk_level",
    "round_half_up",
]
