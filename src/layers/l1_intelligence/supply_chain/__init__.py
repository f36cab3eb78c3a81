"""Supply chain graph builder backed by deps.dev."""

from src.layers.l1_intelligence.supply_chain.deps_dev_client import DepsDevClient
from src.layers.l1_intelligence.supply_chain.graph_builder import (
    GraphBuildStats,
    SupplyChainGraphBuilder,
    annotate_graph,
    compute_stats,
)
from src.layers.l1_intelligence.supply_chain.health import (
    calculate_package_health,
    format_dependency_path,
    high_risk_nodes,
)
from src.layers.l1_intelligence.supply_chain.models import (
    DependencyEdge,
    DependencyNode,
    GraphStats,
    Maintainer,
    PackageInfo,
    SupplyChainGraph,
)
from src.layers.l1_intelligence.supply_chain.package_cache import PackageInfoCache

__all__ = [
    "DependencyEdge",
    "DependencyNode",
    "DepsDevClient",
    "GraphBuildStats",
    "GraphStats",
    "Maintainer",
    "PackageInfo",
    "PackageInfoCache",
    "SupplyChainGraph",
    "SupplyChainGraphBuilder",
    "annotate_graph",
    "calculate_package_health",
    "compute_stats",
    "format_dependency_path",
    "high_risk_nodes",
]
