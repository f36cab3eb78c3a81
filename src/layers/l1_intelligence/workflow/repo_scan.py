"""Repository scan workflow combining all risk signals."""

import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from src.core.config.settings import Settings, get_settings
from src.core.exceptions.errors import ExternalServiceError
from src.core.logger.logger import get_logger
from src.layers.l1_intelligence.dependency_scanner.extractor import (
    DependencyExtractor,
    ExtractionResult,
)
from src.layers.l1_intelligence.risk.context import SecurityContext
from src.layers.l1_intelligence.secrets.scanner import SecretScanner
from src.layers.l1_intelligence.supply_chain.graph_builder import (
    GraphBuildStats,
    SupplyChainGraphBuilder,
    annotate_graph,
)
from src.layers.l1_intelligence.threat_intel.resolver import ResolverStats, VulnerabilityResolver
from src.layers.l1_intelligence.threat_intel.sources.vulnerabilities.cisa_kev import CISAKEVClient
from src.layers.l1_intelligence.threat_intel.sources.vulnerabilities.nvd_client import NVDClient


class RepoScanConfig(BaseModel):
    """Options for one repository scan."""

    scan_secrets: bool = True
    resolve_vulnerabilities: bool = True
    build_supply_chain: bool = True
    include_dev_dependencies: bool = True

    max_depth: int | None = Field(default=None, ge=0, description="Overrides supply chain settings")

    # Commit metadata copied onto detected secrets
    commit: str = ""
    author: str = ""
    date: str = ""


@dataclass
class RepoScanResult:
    """Result of a repository scan."""

    success: bool
    context: SecurityContext | None = None
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    source_path: str = ""
    scan_duration_seconds: float = 0.0
    extraction: ExtractionResult | None = None
    resolver_stats: ResolverStats | None = None
    graph_stats: GraphBuildStats | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-compatible dictionary."""
        return {
            "success": self.success,
            "source_path": self.source_path,
            "scan_duration_seconds": self.scan_duration_seconds,
            "errors": self.errors,
            "warnings": self.warnings,
            "files_scanned": self.extraction.files_scanned if self.extraction else [],
            "files_failed": self.extraction.files_failed if self.extraction else [],
            "resolver_stats": self.resolver_stats.model_dump() if self.resolver_stats else None,
            "graph_stats": self.graph_stats.model_dump() if self.graph_stats else None,
            "report": (
                self.context.snapshot().model_dump(mode="json") if self.context else None
            ),
        }


class RepositoryScanner:
    """Runs extraction, secret scanning, resolution and graph building.

    Workflow:
    1. Extract dependencies from all manifests
    2. Scan files for hardcoded secrets
    3. Resolve dependency vulnerabilities through OSV
    4. Expand the supply chain graph through deps.dev
    5. Aggregate everything into a SecurityContext
    """

    def __init__(
        self,
        settings: Settings | None = None,
        config: RepoScanConfig | None = None,
        extractor: DependencyExtractor | None = None,
        secret_scanner: SecretScanner | None = None,
        resolver: VulnerabilityResolver | None = None,
        graph_builder: SupplyChainGraphBuilder | None = None,
    ) -> None:
        """Initialize the repository scanner.

        Args:
            settings: Application settings.
            config: Scan options.
            extractor: Dependency extractor.
            secret_scanner: Secret scanner.
            resolver: Vulnerability resolver. Built from settings if omitted.
            graph_builder: Supply chain graph builder. Built from settings if
                omitted.
        """
        self.logger = get_logger(__name__)
        self.settings = settings or get_settings()
        self.config = config or RepoScanConfig()
        self.extractor = extractor or DependencyExtractor()
        self.secret_scanner = secret_scanner or SecretScanner()
        self._resolver = resolver
        self._graph_builder = graph_builder

    async def _create_resolver(self) -> VulnerabilityResolver:
        resolver_settings = self.settings.resolver

        kev_client = None
        if resolver_settings.enable_kev:
            kev_client = CISAKEVClient()
            try:
                await kev_client.sync()
            except ExternalServiceError as e:
                self.logger.warning(f"KEV catalog unavailable, continuing without it: {e}")

        nvd_client = None
        if resolver_settings.enable_nvd_backfill:
            nvd_client = NVDClient(api_key=resolver_settings.nvd_api_key)

        return VulnerabilityResolver(
            kev_client=kev_client,
            nvd_client=nvd_client,
            settings=resolver_settings,
            weights=self.settings.scoring,
        )

    async def scan(self, source_path: Path) -> RepoScanResult:
        """Assess a repository checkout.

        Args:
            source_path: Repository root directory.

        Returns:
            Scan result. External service failures are reported through the
            stats and warnings; they never fail the scan.
        """
        start_time = time.time()
        self.logger.info(f"Starting repository scan for {source_path}")

        result = RepoScanResult(success=False, source_path=str(source_path))

        if not source_path.exists():
            result.errors.append(f"Source path does not exist: {source_path}")
            return result
        if not source_path.is_dir():
            result.errors.append(f"Source path is not a directory: {source_path}")
            return result

        context = SecurityContext(weights=self.settings.scoring)

        extraction = self.extractor.extract_directory(source_path)
        result.extraction = extraction
        for failed in extraction.files_failed:
            result.warnings.append(f"Could not read manifest: {failed}")

        dependencies = extraction.get_unique_dependencies()
        if not self.config.include_dev_dependencies:
            dependencies = [d for d in dependencies if not d.is_dev]
        context.set_dependencies(dependencies)

        if self.config.scan_secrets:
            context.set_secrets(
                self.secret_scanner.scan_directory(
                    source_path,
                    commit=self.config.commit,
                    author=self.config.author,
                    date=self.config.date,
                )
            )

        if self.config.resolve_vulnerabilities and dependencies:
            resolver = self._resolver or await self._create_resolver()
            try:
                context.set_vulnerabilities(await resolver.batch_resolve(dependencies))
            finally:
                if self._resolver is None:
                    await resolver.close()
            result.resolver_stats = resolver.stats.model_copy()
            if resolver.stats.failed:
                result.warnings.append(
                    f"{resolver.stats.failed} of {resolver.stats.queried} vulnerability lookups failed"
                )

        if self.config.build_supply_chain and dependencies:
            builder = self._graph_builder or SupplyChainGraphBuilder(
                settings=self.settings.supply_chain
            )
            try:
                graph = await builder.build(dependencies, max_depth=self.config.max_depth)
            finally:
                if self._graph_builder is None:
                    await builder.close()
            context.set_supply_chain(annotate_graph(graph, context.vulnerabilities))
            result.graph_stats = builder.stats.model_copy()
            if builder.stats.failed:
                result.warnings.append(f"{builder.stats.failed} package lookups failed")

        context.recompute()
        result.context = context
        result.success = True
        result.scan_duration_seconds = time.time() - start_time

        self.logger.info(
            f"Repository scan complete: risk score {context.overall_risk_score} "
            f"({context.risk_level.value}), {context.secrets_count} secrets, "
            f"{len(context.vulnerable_packages())} vulnerable packages"
        )
        return result
