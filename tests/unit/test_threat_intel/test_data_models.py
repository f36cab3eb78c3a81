"""Tests for vulnerability data models."""

import pytest
from pydantic import ValidationError

from src.layers.l1_intelligence.threat_intel.core.data_models import (
    Severity,
    Vulnerability,
    VulnerabilityResult,
)


class TestVulnerability:
    """Tests for Vulnerability model."""

    def test_defaults(self) -> None:
        vuln = Vulnerability(id="PYSEC-2023-74")

        assert vuln.severity == Severity.UNKNOWN
        assert vuln.cvss is None
        assert vuln.aliases == []
        assert vuln.cisa_kev is None
        assert vuln.exploit_available is None

    def test_cve_ids(self, critical_vuln: Vulnerability) -> None:
        """Test CVE identifiers are collected from the id and aliases."""
        assert critical_vuln.cve_ids == ["CVE-2019-10744"]
        assert Vulnerability(id="CVE-2021-44228").cve_ids == ["CVE-2021-44228"]

    def test_cvss_bounds(self) -> None:
        with pytest.raises(ValidationError):
            Vulnerability(id="X", cvss=11)

    def test_frozen(self, critical_vuln: Vulnerability) -> None:
        with pytest.raises(ValidationError):
            critical_vuln.cvss = 1.0


class TestVulnerabilityResult:
    """Tests for VulnerabilityResult model."""

    def test_counts(self, lodash, critical_vuln: Vulnerability) -> None:
        result = VulnerabilityResult(
            dependency=lodash,
            vulnerabilities=[critical_vuln, Vulnerability(id="X", severity=Severity.LOW)],
            risk_score=61.2,
        )

        assert result.is_vulnerable is True
        assert result.count_by_severity(Severity.CRITICAL) == 1
        assert result.count_by_severity(Severity.HIGH) == 0

    def test_clean_dependency(self, lodash) -> None:
        result = VulnerabilityResult(dependency=lodash)

        assert result.is_vulnerable is False
        assert result.risk_score == 0.0
