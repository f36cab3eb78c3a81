"""Security context holding the results of one repository assessment."""

from pydantic import BaseModel, ConfigDict, Field

from src.core.config.settings import ScoringSettings
from src.core.logger.logger import get_logger
from src.layers.l1_intelligence.dependency_scanner.base_scanner import Dependency
from src.layers.l1_intelligence.risk.aggregator import RiskLevel, aggregate_risk_score, risk_level
from src.layers.l1_intelligence.secrets.patterns import SecretSeverity
from src.layers.l1_intelligence.secrets.scanner import (
    DetectedSecret,
    group_secrets_by_commit,
    group_secrets_by_file,
)
from src.layers.l1_intelligence.supply_chain.health import high_risk_nodes
from src.layers.l1_intelligence.supply_chain.models import DependencyNode, SupplyChainGraph
from src.layers.l1_intelligence.threat_intel.core.data_models import (
    Severity,
    VulnerabilityResult,
)

logger = get_logger(__name__)


class SecuritySnapshot(BaseModel):
    """Read-only export of a security context."""

    model_config = ConfigDict(frozen=True)

    overall_risk_score: int = 0
    risk_level: RiskLevel = RiskLevel.SECURE
    secrets_count: int = 0
    critical_vuln_count: int = 0
    high_vuln_count: int = 0
    secrets: list[DetectedSecret] = Field(default_factory=list)
    dependencies: list[Dependency] = Field(default_factory=list)
    vulnerabilities: list[VulnerabilityResult] = Field(default_factory=list)
    supply_chain: SupplyChainGraph | None = None


class SecurityContext:
    """Mutable container for secrets, dependencies, vulnerabilities and graph.

    Indexes and the aggregate score are derived data. Setters refresh them
    through :meth:`recompute`; callers mutating lists in place must call it
    themselves.
    """

    def __init__(self, weights: ScoringSettings | None = None) -> None:
        """Initialize an empty context.

        Args:
            weights: Scoring weights for the aggregate score.
        """
        self.weights = weights or ScoringSettings()
        self.reset()

    def reset(self) -> None:
        """Clear all data."""
        self.secrets: list[DetectedSecret] = []
        self.dependencies: list[Dependency] = []
        self.vulnerabilities: list[VulnerabilityResult] = []
        self.supply_chain: SupplyChainGraph | None = None

        self.secrets_by_file: dict[str, list[DetectedSecret]] = {}
        self.secrets_by_commit: dict[str, list[DetectedSecret]] = {}
        self.critical_vuln_count = 0
        self.high_vuln_count = 0
        self.overall_risk_score = 0

    def set_secrets(self, secrets: list[DetectedSecret]) -> None:
        self.secrets = list(secrets)
        self.recompute()

    def add_secret(self, secret: DetectedSecret) -> None:
        self.set_secrets([*self.secrets, secret])

    def set_dependencies(self, dependencies: list[Dependency]) -> None:
        self.dependencies = list(dependencies)

    def set_vulnerabilities(self, results: list[VulnerabilityResult]) -> None:
        self.vulnerabilities = list(results)
        self.recompute()

    def set_supply_chain(self, graph: SupplyChainGraph | None) -> None:
        self.supply_chain = graph

    def recompute(self) -> None:
        """Rebuild indexes, severity counts and the aggregate score."""
        self.secrets_by_file = group_secrets_by_file(self.secrets)
        self.secrets_by_commit = group_secrets_by_commit(self.secrets)

        self.critical_vuln_count = 0
        self.high_vuln_count = 0
        for result in self.vulnerabilities:
            for vuln in result.vulnerabilities:
                if vuln.severity == Severity.CRITICAL:
                    self.critical_vuln_count += 1
                elif vuln.severity == Severity.HIGH:
                    self.high_vuln_count += 1

        self.overall_risk_score = aggregate_risk_score(
            self.secrets, self.vulnerabilities, self.weights
        )
        logger.debug(f"Recomputed risk score: {self.overall_risk_score}")

    @property
    def secrets_count(self) -> int:
        return len(self.secrets)

    @property
    def risk_level(self) -> RiskLevel:
        return risk_level(self.overall_risk_score)

    def vulnerable_packages(self) -> list[VulnerabilityResult]:
        """Results with at least one vulnerability."""
        return [r for r in self.vulnerabilities if r.vulnerabilities]

    def critical_secrets(self) -> list[DetectedSecret]:
        return [s for s in self.secrets if s.pattern.severity == SecretSeverity.CRITICAL]

    def high_risk_nodes(self, threshold: float = 50) -> list[DependencyNode]:
        """Graph nodes with a risk score above ``threshold``."""
        if self.supply_chain is None:
            return []
        return high_risk_nodes(self.supply_chain, threshold)

    def snapshot(self) -> SecuritySnapshot:
        """Export the current state as an immutable snapshot."""
        return SecuritySnapshot(
            overall_risk_score=self.overall_risk_score,
            risk_level=self.risk_level,
            secrets_count=self.secrets_count,
            critical_vuln_count=self.critical_vuln_count,
            high_vuln_count=self.high_vuln_count,
            secrets=self.secrets,
            dependencies=self.dependencies,
            vulnerabilities=self.vulnerabilities,
            supply_chain=self.supply_chain,
        )
