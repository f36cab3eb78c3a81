"""OSV (Open Source Vulnerabilities) API client.

OSV is a vulnerability database and infrastructure for open source projects.
API Documentation: https://google.github.io/osv.dev/api/
"""

from typing import Any

from pydantic import ValidationError

from src.core.exceptions.errors import ExternalServiceError
from src.core.logger.logger import get_logger
from src.layers.l1_intelligence.dependency_scanner.base_scanner import Dependency, Ecosystem
from src.layers.l1_intelligence.threat_intel.core.base_client import BaseClient
from src.layers.l1_intelligence.threat_intel.core.data_models import (
    AffectedPackage,
    AffectedRange,
    Severity,
    Vulnerability,
    VulnerabilityReference,
)
from src.layers.l1_intelligence.threat_intel.core.rate_limiter import RateLimiter
from src.layers.l1_intelligence.threat_intel.cvss import parse_cvss_score
from src.layers.l1_intelligence.threat_intel.scoring import cvss_to_severity, label_to_severity

logger = get_logger(__name__)


class OSVClient(BaseClient):
    """Client for the OSV vulnerability database.

    Queries vulnerabilities affecting one package version at a time.
    """

    API_URL = "https://api.osv.dev/v1"
    service_name = "osv"

    ECOSYSTEM_MAP = {
        Ecosystem.NPM: "npm",
        Ecosystem.PYPI: "PyPI",
        Ecosystem.GO: "Go",
        Ecosystem.CARGO: "crates.io",
        Ecosystem.RUBYGEMS: "RubyGems",
        Ecosystem.MAVEN: "Maven",
    }

    def __init__(
        self,
        base_url: str | None = None,
        rate_limiter: RateLimiter | None = None,
        timeout: float = 30.0,
        max_retries: int = 1,
    ) -> None:
        """Initialize OSV client.

        Args:
            base_url: API base URL (defaults to the public OSV API).
            rate_limiter: Custom rate limiter.
            timeout: Request timeout in seconds.
            max_retries: Attempts per request.
        """
        super().__init__(
            base_url=base_url or self.API_URL,
            rate_limiter=rate_limiter,
            timeout=timeout,
            max_retries=max_retries,
        )

    def map_ecosystem(self, ecosystem: Ecosystem) -> str:
        """Map an ecosystem onto its OSV name."""
        return self.ECOSYSTEM_MAP[Ecosystem(ecosystem)]

    def build_query(self, dependency: Dependency) -> dict[str, Any]:
        return {
            "package": {
                "name": dependency.name,
                "ecosystem": self.map_ecosystem(dependency.ecosystem),
            },
            "version": dependency.version,
        }

    async def fetch_vulnerabilities(self, dependency: Dependency) -> list[Vulnerability]:
        """Query vulnerabilities for a dependency, raising on failure.

        Args:
            dependency: Dependency to look up.

        Returns:
            Vulnerabilities affecting the dependency version.

        Raises:
            ExternalServiceError: On HTTP failure or a malformed body.
        """
        data = await self.post("query", json_data=self.build_query(dependency))

        if not isinstance(data, dict):
            raise ExternalServiceError(
                "Unexpected OSV response body",
                service=self.service_name,
                details={"package": dependency.name},
            )

        vulns = data.get("vulns") or []
        if not isinstance(vulns, list):
            raise ExternalServiceError(
                "OSV response 'vulns' is not a list",
                service=self.service_name,
                details={"package": dependency.name},
            )

        results = []
        for vuln in vulns:
            try:
                parsed = self.parse_vulnerability(vuln)
            except (ValidationError, AttributeError, KeyError, TypeError, ValueError) as e:
                raise ExternalServiceError(
                    f"Malformed OSV record: {type(e).__name__}",
                    service=self.service_name,
                    details={"package": dependency.name},
                ) from e
            if parsed is not None:
                results.append(parsed)
        return results

    @staticmethod
    def parse_vulnerability(vuln: Any) -> Vulnerability | None:
        """Transform an OSV record into a :class:`Vulnerability`.

        Args:
            vuln: OSV vulnerability dictionary.

        Returns:
            Vulnerability, or None if the record has no id.
        """
        if not isinstance(vuln, dict) or not vuln.get("id"):
            return None

        # Only the first CVSS_V3 entry counts
        cvss: float | None = None
        severity = Severity.UNKNOWN
        for sev in vuln.get("severity") or []:
            if isinstance(sev, dict) and sev.get("type") == "CVSS_V3":
                cvss = parse_cvss_score(sev.get("score"))
                if cvss is not None:
                    severity = cvss_to_severity(cvss)
                break

        if severity == Severity.UNKNOWN:
            db_specific = vuln.get("database_specific")
            if isinstance(db_specific, dict):
                severity = label_to_severity(db_specific.get("severity"))

        references = [
            VulnerabilityReference(type=ref.get("type") or "WEB", url=ref["url"])
            for ref in vuln.get("references") or []
            if isinstance(ref, dict) and ref.get("url")
        ]

        affected = [
            OSVClient._parse_affected(entry)
            for entry in vuln.get("affected") or []
            if isinstance(entry, dict)
        ]

        return Vulnerability(
            id=vuln["id"],
            aliases=[a for a in vuln.get("aliases") or [] if isinstance(a, str)],
            summary=vuln.get("summary") or "",
            details=vuln.get("details") or "",
            severity=severity,
            cvss=cvss,
            published=vuln.get("published") or "",
            modified=vuln.get("modified") or "",
            references=references,
            affected=affected,
        )

    @staticmethod
    def _parse_affected(entry: dict[str, Any]) -> AffectedPackage:
        package = entry.get("package")
        if not isinstance(package, dict):
            package = {}
        ranges = []
        for r in entry.get("ranges") or []:
            if not isinstance(r, dict):
                continue
            events = [e for e in r.get("events") or [] if isinstance(e, dict)]
            ranges.append(
                AffectedRange(
                    introduced=next((e["introduced"] for e in events if e.get("introduced")), None),
                    fixed=next((e["fixed"] for e in events if e.get("fixed")), None),
                )
            )

        return AffectedPackage(
            package=package.get("name") or "",
            ecosystem=package.get("ecosystem") or "",
            versions=[v for v in entry.get("versions") or [] if isinstance(v, str)],
            ranges=ranges,
        )
