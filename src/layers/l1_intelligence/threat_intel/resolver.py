"""Vulnerability resolution for extracted dependencies."""

import asyncio
from typing import Any

from pydantic import BaseModel

from src.core.config.settings import ResolverSettings, ScoringSettings
from src.core.exceptions.errors import ExternalServiceError
from src.core.logger.logger import get_logger
from src.layers.l1_intelligence.dependency_scanner.base_scanner import Dependency
from src.layers.l1_intelligence.threat_intel.core.data_models import (
    Severity,
    Vulnerability,
    VulnerabilityResult,
)
from src.layers.l1_intelligence.threat_intel.scoring import calculate_risk_score
from src.layers.l1_intelligence.threat_intel.sources.advisories.osv_client import OSVClient
from src.layers.l1_intelligence.threat_intel.sources.vulnerabilities.cisa_kev import CISAKEVClient
from src.layers.l1_intelligence.threat_intel.sources.vulnerabilities.nvd_client import NVDClient

logger = get_logger(__name__)


class ResolverStats(BaseModel):
    """Per-item outcome counts of a resolver run."""

    queried: int = 0
    failed: int = 0

    @property
    def succeeded(self) -> int:
        return self.queried - self.failed


class VulnerabilityResolver:
    """Resolves dependencies to known vulnerabilities and risk scores.

    OSV is the primary source. When supplied, a synced CISA KEV client flags
    known-exploited entries and an NVD client backfills missing CVE details.

    Example:
        async with VulnerabilityResolver() as resolver:
            results = await resolver.batch_resolve(dependencies)
    """

    def __init__(
        self,
        osv_client: OSVClient | None = None,
        kev_client: CISAKEVClient | None = None,
        nvd_client: NVDClient | None = None,
        settings: ResolverSettings | None = None,
        weights: ScoringSettings | None = None,
    ) -> None:
        """Initialize the resolver.

        Args:
            osv_client: OSV client. Created from settings if not provided.
            kev_client: Synced KEV client used to set ``cisa_kev``.
            nvd_client: NVD client used by :meth:`enrich`.
            settings: Resolver settings.
            weights: Scoring weights for per-dependency risk scores.
        """
        self.settings = settings or ResolverSettings()
        self.weights = weights or ScoringSettings()
        self.osv = osv_client or OSVClient(
            base_url=self.settings.osv_url,
            timeout=self.settings.timeout,
            max_retries=self.settings.max_retries,
        )
        self.kev = kev_client
        self.nvd = nvd_client
        self.stats = ResolverStats()

    async def __aenter__(self) -> "VulnerabilityResolver":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    async def close(self) -> None:
        """Close all owned HTTP sessions."""
        await self.osv.close()
        if self.kev is not None:
            await self.kev.close()
        if self.nvd is not None:
            await self.nvd.close()

    async def resolve(self, dependency: Dependency) -> VulnerabilityResult:
        """Resolve one dependency.

        Args:
            dependency: Dependency to look up.

        Returns:
            Result with vulnerabilities and risk score. A failed lookup
            yields an empty result and is counted in ``stats.failed``.
        """
        self.stats.queried += 1
        try:
            vulns = await self.osv.fetch_vulnerabilities(dependency)
        except ExternalServiceError as e:
            self.stats.failed += 1
            logger.warning(
                f"Vulnerability lookup failed for {dependency.name}@{dependency.version}: {e}"
            )
            vulns = []

        if self.kev is not None and self.kev.is_synced:
            vulns = [self.kev.flag(v) for v in vulns]

        if self.nvd is not None:
            vulns = [await self.enrich(v) for v in vulns]

        return VulnerabilityResult(
            dependency=dependency,
            vulnerabilities=vulns,
            risk_score=calculate_risk_score(vulns, self.weights),
        )

    async def batch_resolve(
        self,
        dependencies: list[Dependency],
        parallelism: int | None = None,
        batch_delay: float | None = None,
    ) -> list[VulnerabilityResult]:
        """Resolve dependencies in fixed-size concurrent batches.

        Lookups inside a batch run concurrently; results are merged once
        the whole batch completes, and the next batch starts after
        ``batch_delay``. No delay follows the last batch.

        Args:
            dependencies: Dependencies to resolve.
            parallelism: Batch size (defaults to settings, 5).
            batch_delay: Seconds between batches (defaults to settings, 0.1).

        Returns:
            One result per dependency, in input order.
        """
        parallelism = max(1, parallelism or self.settings.parallelism)
        delay = self.settings.batch_delay if batch_delay is None else batch_delay
        results: list[VulnerabilityResult] = []

        logger.info(f"Resolving vulnerabilities for {len(dependencies)} dependencies")

        for start in range(0, len(dependencies), parallelism):
            batch = dependencies[start : start + parallelism]
            batch_results = await asyncio.gather(*(self.resolve(dep) for dep in batch))
            results.extend(batch_results)

            if start + parallelism < len(dependencies) and delay > 0:
                await asyncio.sleep(delay)

        vulnerable = sum(1 for r in results if r.vulnerabilities)
        logger.info(
            f"Resolution complete: {vulnerable} vulnerable of {len(results)} "
            f"({self.stats.failed} lookups failed)"
        )
        return results

    async def enrich(self, vuln: Vulnerability) -> Vulnerability:
        """Backfill missing CVE details from NVD.

        Only empty fields are filled: summary, CVSS, severity (when
        UNKNOWN), published and modified dates.

        Args:
            vuln: Vulnerability to enrich.

        Returns:
            A new record with backfilled fields, or the original if there is
            no NVD client, no CVE id, nothing missing, or no NVD entry.
        """
        if self.nvd is None or not vuln.cve_ids:
            return vuln

        missing = (
            not vuln.summary
            or vuln.cvss is None
            or vuln.severity == Severity.UNKNOWN
            or not vuln.published
            or not vuln.modified
        )
        if not missing:
            return vuln

        detail = await self.nvd.get_cve(vuln.cve_ids[0])
        if detail is None:
            return vuln

        update: dict[str, Any] = {}
        if not vuln.summary and detail.summary:
            update["summary"] = detail.summary
        if vuln.cvss is None and detail.cvss is not None:
            update["cvss"] = detail.cvss
        if vuln.severity == Severity.UNKNOWN and detail.severity != Severity.UNKNOWN:
            update["severity"] = detail.severity
        if not vuln.published and detail.published:
            update["published"] = detail.published
        if not vuln.modified and detail.modified:
            update["modified"] = detail.modified

        return vuln.model_copy(update=update) if update else vuln
