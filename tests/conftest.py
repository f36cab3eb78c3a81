"""Pytest configuration and shared fixtures."""

import json
from pathlib import Path

import pytest

from src.core.config.settings import ScoringSettings
from src.layers.l1_intelligence.dependency_scanner.base_scanner import Dependency, Ecosystem
from src.layers.l1_intelligence.threat_intel.core.data_models import (
    Severity,
    Vulnerability,
    VulnerabilityResult,
)

# Fake credentials assembled at runtime so the repository itself stays clean
AWS_ACCESS_KEY = "AKIA" + "IOSFODNN7ABCDEFG"
GITHUB_TOKEN = "ghp_" + "a1B2c3D4e5F6g7H8i9J0k1L2m3N4o5P6q7R8"


@pytest.fixture
def weights() -> ScoringSettings:
    """Default scoring weights."""
    return ScoringSettings()


@pytest.fixture
def lodash() -> Dependency:
    return Dependency(name="lodash", version="4.17.15", ecosystem=Ecosystem.NPM)


@pytest.fixture
def critical_vuln() -> Vulnerability:
    """A critical vulnerability with a CVSS score."""
    return Vulnerability(
        id="GHSA-jf85-cpcp-j695",
        aliases=["CVE-2019-10744"],
        summary="Prototype Pollution in lodash",
        severity=Severity.CRITICAL,
        cvss=9.1,
    )


@pytest.fixture
def vulnerable_lodash(lodash: Dependency, critical_vuln: Vulnerability) -> VulnerabilityResult:
    return VulnerabilityResult(
        dependency=lodash,
        vulnerabilities=[critical_vuln],
        risk_score=58.2,
    )


@pytest.fixture
def sample_repo(tmp_path: Path) -> Path:
    """Create a small repository with manifests and a leaked key.

    Returns:
        Path to the repository root.
    """
    repo = tmp_path / "repo"
    repo.mkdir()

    (repo / "package.json").write_text(
        json.dumps(
            {
                "name": "demo",
                "dependencies": {"lodash": "^4.17.15"},
                "devDependencies": {"jest": "~29.0.0"},
            }
        )
    )
    (repo / "requirements.txt").write_text("requests==2.28.0\n# comment\nflask>=2.0\n")

    src_dir = repo / "src"
    src_dir.mkdir()
    (src_dir / "config.py").write_text(f'AWS_KEY = "{AWS_ACCESS_KEY}"\n')

    node_modules = repo / "node_modules" / "left-pad"
    node_modules.mkdir(parents=True)
    (node_modules / "package.json").write_text('{"dependencies": {"ignored": "1.0.0"}}')
    (node_modules / "index.js").write_text(f'const key = "{AWS_ACCESS_KEY}";\n')

    return repo
