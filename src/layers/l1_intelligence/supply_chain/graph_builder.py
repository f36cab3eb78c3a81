"""Bounded-depth supply chain graph construction."""

import asyncio
from collections import deque
from typing import Any

from pydantic import BaseModel

from src.core.config.settings import SupplyChainSettings
from src.core.logger.logger import get_logger
from src.layers.l1_intelligence.dependency_scanner.base_scanner import Dependency, Ecosystem
from src.layers.l1_intelligence.supply_chain.deps_dev_client import DepsDevClient
from src.layers.l1_intelligence.supply_chain.health import calculate_package_health
from src.layers.l1_intelligence.supply_chain.models import (
    DependencyEdge,
    DependencyNode,
    GraphStats,
    SupplyChainGraph,
)
from src.layers.l1_intelligence.supply_chain.package_cache import PackageInfoCache
from src.layers.l1_intelligence.threat_intel.core.data_models import VulnerabilityResult

logger = get_logger(__name__)

TRANSITIVE_SOURCE = "transitive"


class GraphBuildStats(BaseModel):
    """Per-item outcome counts of a graph build."""

    fetched: int = 0
    failed: int = 0


def compute_stats(nodes: dict[str, DependencyNode]) -> GraphStats:
    """Compute graph statistics from its nodes.

    Args:
        nodes: Graph nodes.

    Returns:
        Stats; ``avg_risk_score`` averages over vulnerable nodes only and
        ``avg_health_score`` over nodes with a health score (None if none).
    """
    values = list(nodes.values())
    vulnerable = [n for n in values if n.is_vulnerable]
    health = [n.health_score for n in values if n.health_score is not None]

    return GraphStats(
        total_deps=len(values),
        direct_deps=sum(1 for n in values if n.depth == 0),
        transitive_deps=sum(1 for n in values if n.depth > 0),
        max_depth=max((n.depth for n in values), default=0),
        vulnerable_count=len(vulnerable),
        avg_risk_score=(
            sum(n.risk_score or 0 for n in vulnerable) / len(vulnerable) if vulnerable else 0.0
        ),
        avg_health_score=sum(health) / len(health) if health else None,
    )


def annotate_graph(
    graph: SupplyChainGraph,
    results: list[VulnerabilityResult],
) -> SupplyChainGraph:
    """Copy vulnerability results onto matching graph nodes.

    Nodes are matched by ``ecosystem:name@version``. Unmatched nodes are
    left untouched.

    Args:
        graph: Graph to annotate.
        results: Resolved vulnerability results.

    Returns:
        A new graph with node flags set and stats recomputed.
    """
    by_key = {r.dependency.key: r for r in results}
    nodes: dict[str, DependencyNode] = {}

    for key, node in graph.nodes.items():
        result = by_key.get(key)
        if result is None:
            nodes[key] = node
            continue
        nodes[key] = node.model_copy(
            update={
                "is_vulnerable": bool(result.vulnerabilities),
                "vulnerability_count": len(result.vulnerabilities),
                "risk_score": result.risk_score,
            }
        )

    return graph.model_copy(update={"nodes": nodes, "stats": compute_stats(nodes)})


class SupplyChainGraphBuilder:
    """Expands direct dependencies into a transitive graph via deps.dev.

    Expansion proceeds one batch per depth step: each step takes up to
    ``parallelism`` queued packages, fetches them concurrently, and records
    their direct dependencies at the current depth. A discovered package is
    queued at most once and failed fetches are not retried.
    """

    def __init__(
        self,
        client: DepsDevClient | None = None,
        settings: SupplyChainSettings | None = None,
    ) -> None:
        """Initialize the builder.

        Args:
            client: deps.dev client. Created from settings if not provided.
            settings: Supply chain settings.
        """
        self.settings = settings or SupplyChainSettings()
        self.client = client or DepsDevClient(
            base_url=self.settings.deps_dev_url,
            cache=PackageInfoCache(
                ttl=self.settings.cache_ttl,
                max_entries=self.settings.cache_max_entries,
            ),
            timeout=self.settings.timeout,
        )
        self.stats = GraphBuildStats()

    async def __aenter__(self) -> "SupplyChainGraphBuilder":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    async def close(self) -> None:
        await self.client.close()

    async def build(
        self,
        dependencies: list[Dependency],
        max_depth: int | None = None,
        parallelism: int | None = None,
        level_delay: float | None = None,
    ) -> SupplyChainGraph:
        """Build the supply chain graph.

        Args:
            dependencies: Direct dependencies (depth 0).
            max_depth: Maximum expansion depth (defaults to settings, 3).
            parallelism: Packages fetched per step (defaults to settings, 3).
            level_delay: Seconds between steps (defaults to settings, 0.1).

        Returns:
            Graph with nodes in discovery order and stats computed.
        """
        max_depth = self.settings.max_depth if max_depth is None else max_depth
        parallelism = max(1, parallelism or self.settings.parallelism)
        delay = self.settings.level_delay if level_delay is None else level_delay

        nodes: dict[str, DependencyNode] = {}
        edges: list[DependencyEdge] = []

        for dep in dependencies:
            nodes[dep.key] = DependencyNode(
                name=dep.name,
                version=dep.version,
                ecosystem=dep.ecosystem.value,
                depth=0,
                path=[dep.name],
            )

        logger.info(f"Building supply chain graph for {len(dependencies)} dependencies")

        queue: deque[Dependency] = deque(dependencies)
        depth = 0

        while queue and depth < max_depth:
            depth += 1
            batch = [queue.popleft() for _ in range(min(parallelism, len(queue)))]

            infos = await asyncio.gather(
                *(
                    self.client.fetch_package_info(dep.name, dep.version, dep.ecosystem)
                    for dep in batch
                )
            )

            for parent, info in zip(batch, infos):
                if info is None:
                    self.stats.failed += 1
                    continue
                self.stats.fetched += 1

                parent_key = parent.key
                parent_node = nodes.get(parent_key)
                parent_path = parent_node.path if parent_node else [parent.name]
                if parent_node is not None:
                    nodes[parent_key] = parent_node.model_copy(
                        update={"health_score": calculate_package_health(info)}
                    )

                for child in info.direct_deps:
                    child_key = child.key
                    edges.append(DependencyEdge(source=parent_key, target=child_key))

                    if child_key in nodes:
                        continue

                    nodes[child_key] = child.model_copy(
                        update={"depth": depth, "path": [*parent_path, child.name]}
                    )
                    if depth < max_depth:
                        queue.append(
                            Dependency(
                                name=child.name,
                                version=child.version,
                                ecosystem=Ecosystem(child.ecosystem),
                                source=TRANSITIVE_SOURCE,
                            )
                        )

            if queue and depth < max_depth and delay > 0:
                await asyncio.sleep(delay)

        graph = SupplyChainGraph(
            root=dependencies[0].name if dependencies else "root",
            nodes=nodes,
            edges=edges,
            stats=compute_stats(nodes),
        )
        logger.info(
            f"Supply chain graph: {graph.stats.total_deps} nodes, {len(edges)} edges, "
            f"max depth {graph.stats.max_depth} ({self.stats.failed} lookups failed)"
        )
        return graph
