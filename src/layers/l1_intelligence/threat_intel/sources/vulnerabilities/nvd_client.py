"""NVD (National Vulnerability Database) API 2.0 client."""

from typing import Any

from pydantic import ValidationError

from src.core.exceptions.errors import ExternalServiceError
from src.core.logger.logger import get_logger
from src.layers.l1_intelligence.threat_intel.core.base_client import BaseClient
from src.layers.l1_intelligence.threat_intel.core.data_models import Severity, Vulnerability
from src.layers.l1_intelligence.threat_intel.core.rate_limiter import RateLimiter
from src.layers.l1_intelligence.threat_intel.scoring import cvss_to_severity

logger = get_logger(__name__)


class NVDClient(BaseClient):
    """NVD API 2.0 client used as a secondary CVE detail lookup.

    API Documentation: https://nvd.nist.gov/developers/vulnerabilities

    Rate Limits:
    - Without API Key: 5 requests per 30 seconds
    - With API Key: 50 requests per 30 seconds
    """

    BASE_URL = "https://services.nvd.nist.gov/rest/json/cves/2.0"
    service_name = "nvd"

    def __init__(
        self,
        api_key: str | None = None,
        rate_limiter: RateLimiter | None = None,
        timeout: float = 60.0,
    ) -> None:
        """Initialize NVD client.

        Args:
            api_key: NVD API key (increases rate limit).
            rate_limiter: Custom rate limiter.
            timeout: Request timeout in seconds; NVD can be slow.
        """
        if rate_limiter is None:
            requests_per_window = 50 if api_key else 5
            rate_limiter = RateLimiter.from_requests_per_window(
                requests_per_window, window_seconds=30.0
            )

        super().__init__(
            base_url=self.BASE_URL,
            rate_limiter=rate_limiter,
            timeout=timeout,
        )
        self._api_key = api_key

    def _get_default_headers(self) -> dict[str, str]:
        headers = super()._get_default_headers()
        if self._api_key:
            headers["apiKey"] = self._api_key
        return headers

    async def get_cve(self, cve_id: str) -> Vulnerability | None:
        """Get CVE details by ID.

        Args:
            cve_id: CVE identifier (e.g., CVE-2024-1234).

        Returns:
            Vulnerability carrying the NVD summary, CVSS, severity and
            dates, or None if not found or the request failed.
        """
        try:
            data = await self.get("", params={"cveId": cve_id})
        except ExternalServiceError as e:
            logger.warning(f"Failed to get CVE {cve_id} from NVD: {e}")
            return None

        if not isinstance(data, dict):
            return None

        vulnerabilities = data.get("vulnerabilities")
        if not isinstance(vulnerabilities, list) or not vulnerabilities:
            return None
        if not isinstance(vulnerabilities[0], dict):
            return None

        cve = vulnerabilities[0].get("cve")
        if not isinstance(cve, dict):
            return None

        try:
            return self.parse_cve(cve_id, cve)
        except (ValidationError, AttributeError, KeyError, TypeError, ValueError) as e:
            logger.warning(f"Malformed NVD record for {cve_id}: {type(e).__name__}")
            return None

    @staticmethod
    def parse_cve(cve_id: str, cve: dict[str, Any]) -> Vulnerability:
        """Parse an NVD ``cve`` object.

        Args:
            cve_id: Requested CVE identifier.
            cve: Raw CVE data from the NVD API.

        Returns:
            Vulnerability with the fields NVD provides.
        """
        summary = next(
            (
                d.get("value") or ""
                for d in cve.get("descriptions") or []
                if isinstance(d, dict) and d.get("lang") == "en"
            ),
            "",
        )

        # CVSS v3.1 first, then v3.0
        cvss: float | None = None
        metrics = cve.get("metrics")
        if not isinstance(metrics, dict):
            metrics = {}
        for key in ("cvssMetricV31", "cvssMetricV30"):
            entries = metrics.get(key)
            if isinstance(entries, list) and entries and isinstance(entries[0], dict):
                data = entries[0].get("cvssData")
                score = data.get("baseScore") if isinstance(data, dict) else None
                if isinstance(score, (int, float)) and not isinstance(score, bool):
                    cvss = float(score)
                break

        return Vulnerability(
            id=cve_id,
            summary=summary,
            severity=cvss_to_severity(cvss) if cvss is not None else Severity.UNKNOWN,
            cvss=cvss,
            published=cve.get("published") or "",
            modified=cve.get("lastModified") or "",
        )
