"""CISA Known Exploited Vulnerabilities (KEV) client."""

from datetime import datetime
from typing import Any

from src.core.exceptions.errors import ExternalServiceError
from src.core.logger.logger import get_logger
from src.layers.l1_intelligence.threat_intel.core.base_client import BaseClient
from src.layers.l1_intelligence.threat_intel.core.data_models import Vulnerability

logger = get_logger(__name__)


class CISAKEVClient(BaseClient):
    """CISA Known Exploited Vulnerabilities catalog client.

    Fetches the KEV catalog once and answers membership lookups from memory.

    Catalog URL: https://www.cisa.gov/known-exploited-vulnerabilities-catalog
    """

    KEV_URL = "https://www.cisa.gov/sites/default/files/feeds/known_exploited_vulnerabilities.json"
    service_name = "cisa-kev"

    def __init__(self, url: str | None = None, timeout: float = 60.0) -> None:
        """Initialize CISA KEV client.

        Args:
            url: Catalog feed URL.
            timeout: Request timeout in seconds.
        """
        super().__init__(timeout=timeout)
        self.url = url or self.KEV_URL
        self._kev_cache: dict[str, dict[str, Any]] = {}
        self._last_sync: datetime | None = None

    async def sync(self) -> int:
        """Download the KEV catalog.

        Returns:
            Number of KEV entries loaded.

        Raises:
            ExternalServiceError: If the catalog cannot be fetched.
        """
        logger.info("Syncing CISA KEV catalog...")
        data = await self.get(self.url)
        if not isinstance(data, dict):
            raise ExternalServiceError("Unexpected KEV catalog body", service=self.service_name)

        count = self.load_catalog(data)
        logger.info(f"Synced {count} KEV entries")
        return count

    def load_catalog(self, data: dict[str, Any]) -> int:
        """Replace the in-memory catalog with a decoded feed.

        Args:
            data: Catalog JSON with a ``vulnerabilities`` list.

        Returns:
            Number of entries loaded.
        """
        self._kev_cache.clear()
        for entry in data.get("vulnerabilities") or []:
            cve_id = entry.get("cveID", "") if isinstance(entry, dict) else ""
            if cve_id:
                self._kev_cache[cve_id] = entry

        self._last_sync = datetime.now()
        return len(self._kev_cache)

    def is_kev(self, cve_id: str) -> bool:
        """Check if a CVE is in the KEV catalog."""
        return cve_id in self._kev_cache

    def is_kev_vulnerability(self, vuln: Vulnerability) -> bool:
        """Check whether a vulnerability's id or any alias is a KEV entry."""
        return any(self.is_kev(i) for i in [vuln.id, *vuln.aliases])

    def get_kev_entry(self, cve_id: str) -> dict[str, Any] | None:
        return self._kev_cache.get(cve_id)

    def flag(self, vuln: Vulnerability) -> Vulnerability:
        """Return the vulnerability with ``cisa_kev`` set from the catalog.

        Args:
            vuln: Vulnerability to check.

        Returns:
            A copy with ``cisa_kev=True`` if listed, else the original.
        """
        if self.is_kev_vulnerability(vuln):
            return vuln.model_copy(update={"cisa_kev": True})
        return vuln

    @property
    def is_synced(self) -> bool:
        return self._last_sync is not None

    @property
    def cache_size(self) -> int:
        """Get number of cached KEV entries."""
        return len(self._kev_cache)

    @property
    def last_sync(self) -> datetime | None:
        """Get last sync timestamp."""
        return self._last_sync
