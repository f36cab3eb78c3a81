"""Tests for CVSS parsing, severity derivation and risk scoring."""

import pytest

from src.core.config.settings import ScoringSettings
from src.layers.l1_intelligence.threat_intel.core.data_models import Severity, Vulnerability
from src.layers.l1_intelligence.threat_intel.cvss import base_score, parse_cvss_score, parse_vector
from src.layers.l1_intelligence.threat_intel.scoring import (
    calculate_risk_score,
    cvss_to_severity,
    derive_severity,
    label_to_severity,
)


class TestCVSS:
    """Tests for CVSS v3 vector scoring."""

    @pytest.mark.parametrize(
        ("vector", "expected"),
        [
            ("CVSS:3.1/AV:N/AC:L/PR:N/UI:N/S:U/C:H/I:H/A:H", 9.8),
            ("CVSS:3.1/AV:N/AC:L/PR:N/UI:R/S:C/C:L/I:L/A:N", 6.1),
            ("CVSS:3.0/AV:N/AC:L/PR:N/UI:N/S:U/C:H/I:H/A:H", 9.8),
            ("CVSS:3.1/AV:N/AC:L/PR:N/UI:N/S:U/C:N/I:N/A:N", 0.0),
        ],
    )
    def test_base_score(self, vector: str, expected: float) -> None:
        assert base_score(vector) == expected

    def test_incomplete_vector(self) -> None:
        assert parse_vector("CVSS:3.1/AV:N/AC:L") is None
        assert base_score("CVSS:3.1/AV:N/AC:L") is None

    def test_non_v3_vector(self) -> None:
        assert base_score("AV:N/AC:L/Au:N/C:P/I:P/A:P") is None

    def test_invalid_metric_value(self) -> None:
        assert base_score("CVSS:3.1/AV:X/AC:L/PR:N/UI:N/S:U/C:H/I:H/A:H") is None

    @pytest.mark.parametrize(
        ("score", "expected"),
        [
            (7.5, 7.5),
            (10, 10.0),
            ("5.3", 5.3),
            ("CVSS:3.1/AV:N/AC:L/PR:N/UI:N/S:U/C:H/I:H/A:H", 9.8),
            ("not a score", None),
            ("11", None),
            (-1, None),
            (float("nan"), None),
            (None, None),
            (True, None),
            (["9.8"], None),
            ({"score": 9.8}, None),
        ],
    )
    def test_parse_cvss_score(self, score, expected) -> None:
        assert parse_cvss_score(score) == expected


class TestSeverity:
    """Tests for severity derivation."""

    @pytest.mark.parametrize(
        ("score", "expected"),
        [
            (9.8, Severity.CRITICAL),
            (9.0, Severity.CRITICAL),
            (8.9, Severity.HIGH),
            (7.0, Severity.HIGH),
            (6.9, Severity.MEDIUM),
            (4.0, Severity.MEDIUM),
            (3.9, Severity.LOW),
            (0.1, Severity.LOW),
            (0.0, Severity.UNKNOWN),
        ],
    )
    def test_cvss_to_severity(self, score: float, expected: Severity) -> None:
        assert cvss_to_severity(score) == expected

    def test_label_to_severity(self) -> None:
        assert label_to_severity("MODERATE") == Severity.MEDIUM
        assert label_to_severity("high") == Severity.HIGH
        assert label_to_severity("bogus") == Severity.UNKNOWN
        assert label_to_severity(None) == Severity.UNKNOWN

    def test_cvss_takes_precedence(self) -> None:
        """Test CVSS band wins over a conflicting label."""
        assert derive_severity(9.0, "LOW") == Severity.CRITICAL

    def test_label_fallback(self) -> None:
        assert derive_severity(None, "MODERATE") == Severity.MEDIUM
        assert derive_severity(0.0, "HIGH") == Severity.HIGH
        assert derive_severity(None) == Severity.UNKNOWN


class TestRiskScore:
    """Tests for calculate_risk_score."""

    def test_no_vulnerabilities(self) -> None:
        assert calculate_risk_score([]) == 0.0

    def test_single_critical(self) -> None:
        """Test base points plus twice the CVSS score."""
        vuln = Vulnerability(id="X", severity=Severity.CRITICAL, cvss=9.8)
        assert calculate_risk_score([vuln]) == pytest.approx(59.6)

    def test_unknown_without_cvss(self) -> None:
        vuln = Vulnerability(id="X")
        assert calculate_risk_score([vuln]) == 5.0

    def test_kev_and_exploit_bonus(self) -> None:
        vuln = Vulnerability(
            id="X", severity=Severity.LOW, cvss=2.0, cisa_kev=True, exploit_available=True
        )
        assert calculate_risk_score([vuln]) == pytest.approx(3 + 4 + 20 + 15)

    def test_capped(self) -> None:
        vulns = [Vulnerability(id=str(i), severity=Severity.CRITICAL, cvss=9.8) for i in range(3)]
        assert calculate_risk_score(vulns) == 100.0

    def test_custom_weights(self) -> None:
        weights = ScoringSettings(vuln_high=50, cvss_multiplier=0)
        vuln = Vulnerability(id="X", severity=Severity.HIGH, cvss=7.5)
        assert calculate_risk_score([vuln], weights) == 50.0
