"""deps.dev API client for package metadata and dependency lists.

API Documentation: https://docs.deps.dev/api/v3/
"""

from typing import Any
from urllib.parse import quote

from pydantic import ValidationError

from src.core.exceptions.errors import ExternalServiceError
from src.core.logger.logger import get_logger
from src.layers.l1_intelligence.dependency_scanner.base_scanner import Ecosystem, node_key
from src.layers.l1_intelligence.supply_chain.models import DependencyNode, PackageInfo
from src.layers.l1_intelligence.supply_chain.package_cache import PackageInfoCache
from src.layers.l1_intelligence.threat_intel.core.base_client import BaseClient
from src.layers.l1_intelligence.threat_intel.core.rate_limiter import RateLimiter

logger = get_logger(__name__)

KNOWN_SYSTEMS = {e.value for e in Ecosystem}


class DepsDevClient(BaseClient):
    """Client for the deps.dev v3 API with a package info cache."""

    API_URL = "https://api.deps.dev/v3"
    service_name = "deps.dev"

    SYSTEM_MAP = {
        Ecosystem.NPM: "npm",
        Ecosystem.PYPI: "pypi",
        Ecosystem.GO: "go",
        Ecosystem.CARGO: "cargo",
        Ecosystem.RUBYGEMS: "rubygems",
        Ecosystem.MAVEN: "maven",
    }

    def __init__(
        self,
        base_url: str | None = None,
        cache: PackageInfoCache | None = None,
        rate_limiter: RateLimiter | None = None,
        timeout: float = 30.0,
        max_retries: int = 1,
    ) -> None:
        """Initialize deps.dev client.

        Args:
            base_url: API base URL (defaults to the public v3 API).
            cache: Package info cache. A default cache is created if omitted.
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
        self.cache = cache if cache is not None else PackageInfoCache()

    def _package_path(self, system: str, name: str) -> str:
        return f"systems/{system}/packages/{quote(name, safe='')}"

    def _version_path(self, system: str, name: str, version: str) -> str:
        return f"{self._package_path(system, name)}/versions/{quote(version, safe='')}"

    async def _get_optional(self, path: str, default: dict[str, Any]) -> dict[str, Any]:
        try:
            data = await self.get(path)
        except ExternalServiceError as e:
            logger.debug(f"deps.dev lookup {path} failed: {e}")
            return default
        return data if isinstance(data, dict) else default

    async def fetch_package_info(
        self,
        name: str,
        version: str,
        ecosystem: Ecosystem | str,
    ) -> PackageInfo | None:
        """Fetch package metadata and its resolved dependencies.

        The version lookup is required; the package and dependency lookups
        degrade to empty data when they fail.

        Args:
            name: Package name.
            version: Package version.
            ecosystem: Package ecosystem.

        Returns:
            Package info, or None if the version lookup failed.
        """
        ecosystem = Ecosystem(ecosystem)
        key = node_key(ecosystem, name, version)
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        system = self.SYSTEM_MAP[ecosystem]

        try:
            version_data = await self.get(self._version_path(system, name, version))
        except ExternalServiceError as e:
            logger.warning(f"deps.dev query failed for {name}@{version}: {e}")
            return None
        if not isinstance(version_data, dict):
            logger.warning(f"deps.dev returned no version data for {name}@{version}")
            return None

        package_data = await self._get_optional(self._package_path(system, name), {})
        deps_data = await self._get_optional(
            f"{self._version_path(system, name, version)}:dependencies", {"nodes": []}
        )

        try:
            info = self.parse_package_info(
                name, version, ecosystem, version_data, package_data, deps_data
            )
        except (ValidationError, AttributeError, KeyError, TypeError, ValueError) as e:
            logger.warning(f"Malformed deps.dev data for {name}@{version}: {type(e).__name__}")
            return None

        self.cache.set(key, info)
        return info

    @classmethod
    def parse_package_info(
        cls,
        name: str,
        version: str,
        ecosystem: Ecosystem,
        version_data: dict[str, Any],
        package_data: dict[str, Any],
        deps_data: dict[str, Any],
    ) -> PackageInfo:
        """Assemble :class:`PackageInfo` from the three deps.dev responses.

        Args:
            name: Queried package name.
            version: Queried version.
            ecosystem: Queried ecosystem.
            version_data: ``/versions/{version}`` response.
            package_data: ``/packages/{name}`` response.
            deps_data: ``/versions/{version}:dependencies`` response.

        Returns:
            Parsed package info.
        """
        direct: list[DependencyNode] = []
        transitive: list[DependencyNode] = []

        nodes = deps_data.get("nodes")
        for node in nodes if isinstance(nodes, list) else []:
            if not isinstance(node, dict):
                continue
            version_key = node.get("versionKey")
            if not isinstance(version_key, dict):
                continue
            child_name = version_key.get("name")
            if not isinstance(child_name, str) or not child_name:
                continue
            # The dependency graph includes the queried package itself
            if child_name == name:
                continue

            is_direct = node.get("relation") == "DIRECT"
            dep_node = DependencyNode(
                name=child_name,
                version=version_key.get("version") or "",
                ecosystem=cls._normalize_system(version_key.get("system"), ecosystem).value,
                depth=1 if is_direct else 2,
                path=[name, child_name],
            )
            (direct if is_direct else transitive).append(dep_node)

        links = [link for link in version_data.get("links") or [] if isinstance(link, dict)]
        licenses = [lic for lic in version_data.get("licenses") or [] if isinstance(lic, str)]
        package = package_data.get("package") or {}

        return PackageInfo(
            name=name,
            ecosystem=cls.SYSTEM_MAP[ecosystem],
            version=version,
            description=package.get("description") if isinstance(package, dict) else None,
            homepage=cls._link(links, "HOMEPAGE"),
            repository=cls._link(links, "SOURCE_REPO"),
            license=", ".join(licenses) if licenses else None,
            published_at=version_data.get("publishedAt"),
            direct_deps=direct,
            transitive_deps=transitive,
        )

    @staticmethod
    def _link(links: list[dict[str, Any]], label: str) -> str | None:
        return next((link.get("url") for link in links if link.get("label") == label), None)

    @staticmethod
    def _normalize_system(system: Any, fallback: Ecosystem) -> Ecosystem:
        # deps.dev reports systems in upper case (NPM, PYPI, ...)
        if isinstance(system, str) and system.lower() in KNOWN_SYSTEMS:
            return Ecosystem(system.lower())
        return fallback
