"""Tests for the repository scan workflow."""

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.core.config.settings import Settings, SupplyChainSettings
from src.core.exceptions.errors import ExternalServiceError
from src.layers.l1_intelligence.risk.aggregator import RiskLevel
from src.layers.l1_intelligence.supply_chain.graph_builder import SupplyChainGraphBuilder
from src.layers.l1_intelligence.supply_chain.models import DependencyNode, PackageInfo
from src.layers.l1_intelligence.threat_intel.resolver import VulnerabilityResolver
from src.layers.l1_intelligence.workflow.repo_scan import RepoScanConfig, RepositoryScanner


@pytest.fixture
def osv(critical_vuln):
    """Fake OSV client reporting one critical vulnerability for lodash."""

    async def fetch(dep):
        if dep.name == "requests":
            raise ExternalServiceError("HTTP 503", service="osv", status=503)
        return [critical_vuln] if dep.name == "lodash" else []

    client = MagicMock()
    client.fetch_vulnerabilities = AsyncMock(side_effect=fetch)
    client.close = AsyncMock()
    return client


@pytest.fixture
def deps_dev():
    """Fake deps.dev client where lodash depends on one package."""

    async def fetch(name, version, ecosystem):
        if name != "lodash":
            return None
        return PackageInfo(
            name=name,
            ecosystem="npm",
            version=version,
            direct_deps=[
                DependencyNode(
                    name="tiny", version="1.0.0", ecosystem="npm", depth=1, path=[name, "tiny"]
                )
            ],
        )

    client = MagicMock()
    client.fetch_package_info = AsyncMock(side_effect=fetch)
    client.close = AsyncMock()
    return client


@pytest.fixture
def scanner_factory(osv, deps_dev):
    def create(**config) -> RepositoryScanner:
        settings = Settings()
        return RepositoryScanner(
            settings=settings,
            config=RepoScanConfig(**config),
            resolver=VulnerabilityResolver(osv_client=osv, weights=settings.scoring),
            graph_builder=SupplyChainGraphBuilder(
                client=deps_dev, settings=SupplyChainSettings(level_delay=0)
            ),
        )

    return create


class TestRepositoryScanner:
    """Tests for RepositoryScanner."""

    @pytest.mark.asyncio
    async def test_full_scan(self, scanner_factory, sample_repo: Path) -> None:
        """Test all signals are combined into one context."""
        result = await scanner_factory().scan(sample_repo)

        assert result.success is True
        context = result.context
        assert [d.name for d in context.dependencies] == ["lodash", "jest", "requests", "flask"]
        assert [s.file for s in context.secrets] == ["src/config.py"]

        # 25 for the secret + half of lodash's 58.2
        assert context.overall_risk_score == 54
        assert context.risk_level == RiskLevel.HIGH
        assert context.critical_vuln_count == 1

        graph = context.supply_chain
        assert graph is not None
        assert graph.nodes["npm:lodash@4.17.15"].is_vulnerable is True
        assert "npm:tiny@1.0.0" in graph.nodes

        assert result.resolver_stats.failed == 1
        assert result.graph_stats.failed == 4
        assert any("vulnerability lookups failed" in w for w in result.warnings)

    @pytest.mark.asyncio
    async def test_prod_only(self, scanner_factory, sample_repo: Path) -> None:
        result = await scanner_factory(include_dev_dependencies=False).scan(sample_repo)
        assert "jest" not in [d.name for d in result.context.dependencies]

    @pytest.mark.asyncio
    async def test_disabled_stages(self, scanner_factory, osv, deps_dev, sample_repo: Path) -> None:
        scanner = scanner_factory(
            scan_secrets=False, resolve_vulnerabilities=False, build_supply_chain=False
        )
        result = await scanner.scan(sample_repo)

        assert result.success is True
        assert result.context.secrets == []
        assert result.context.vulnerabilities == []
        assert result.context.supply_chain is None
        assert result.context.overall_risk_score == 0
        osv.fetch_vulnerabilities.assert_not_awaited()
        deps_dev.fetch_package_info.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_commit_metadata(self, scanner_factory, sample_repo: Path) -> None:
        result = await scanner_factory(commit="abc123", author="dev").scan(sample_repo)

        assert result.context.secrets[0].commit == "abc123"
        assert list(result.context.secrets_by_commit) == ["abc123"]

    @pytest.mark.asyncio
    async def test_missing_path(self, scanner_factory, tmp_path: Path) -> None:
        result = await scanner_factory().scan(tmp_path / "nope")

        assert result.success is False
        assert result.context is None
        assert "does not exist" in result.errors[0]

    @pytest.mark.asyncio
    async def test_file_path_rejected(self, scanner_factory, tmp_path: Path) -> None:
        path = tmp_path / "file.txt"
        path.write_text("x")
        result = await scanner_factory().scan(path)

        assert result.success is False
        assert "not a directory" in result.errors[0]

    @pytest.mark.asyncio
    async def test_to_dict(self, scanner_factory, sample_repo: Path) -> None:
        """Test the JSON report carries redacted secrets only."""
        result = await scanner_factory().scan(sample_repo)
        data = result.to_dict()

        assert data["success"] is True
        assert data["files_scanned"] == ["package.json", "requirements.txt"]
        assert data["resolver_stats"] == {"queried": 4, "failed": 1}
        report = data["report"]
        assert report["overall_risk_score"] == 54
        assert report["risk_level"] == "High"
        assert "match" not in report["secrets"][0]
        assert report["secrets"][0]["redacted_match"].startswith("AKIA")
