"""Data models for the supply chain dependency graph."""

from pydantic import BaseModel, ConfigDict, Field

from src.layers.l1_intelligence.dependency_scanner.base_scanner import node_key


class DependencyNode(BaseModel):
    """A package version in the supply chain graph."""

    model_config = ConfigDict(frozen=True)

    name: str
    version: str
    ecosystem: str
    depth: int = Field(default=0, ge=0, description="0 for direct dependencies")
    path: list[str] = Field(default_factory=list, description="Package names from the root")

    # Set by annotate_graph from resolved vulnerabilities
    is_vulnerable: bool | None = None
    vulnerability_count: int | None = None
    risk_score: float | None = None

    # Set by the graph builder from fetched package info
    health_score: int | None = Field(default=None, ge=0, le=100)

    @property
    def key(self) -> str:
        return node_key(self.ecosystem, self.name, self.version)


class DependencyEdge(BaseModel):
    """Directed parent -> child edge between node keys."""

    model_config = ConfigDict(frozen=True)

    source: str
    target: str


class GraphStats(BaseModel):
    """Summary statistics of a supply chain graph."""

    model_config = ConfigDict(frozen=True)

    total_deps: int = 0
    direct_deps: int = 0
    transitive_deps: int = 0
    max_depth: int = 0
    vulnerable_count: int = 0
    avg_risk_score: float = 0.0
    avg_health_score: float | None = None


class SupplyChainGraph(BaseModel):
    """Transitive dependency graph.

    ``nodes`` is keyed by ``ecosystem:name@version`` in discovery order;
    every edge endpoint is a key of ``nodes``.
    """

    model_config = ConfigDict(frozen=True)

    root: str = "root"
    nodes: dict[str, DependencyNode] = Field(default_factory=dict)
    edges: list[DependencyEdge] = Field(default_factory=list)
    stats: GraphStats = Field(default_factory=GraphStats)

    def children(self, key: str) -> list[DependencyNode]:
        """Direct children of a node, in edge order."""
        return [self.nodes[e.target] for e in self.edges if e.source == key]

    def parents(self, key: str) -> list[DependencyNode]:
        """Nodes with an edge into ``key``, in edge order."""
        return [self.nodes[e.source] for e in self.edges if e.target == key]


class Maintainer(BaseModel):
    """Package maintainer."""

    name: str
    email: str | None = None


class PackageInfo(BaseModel):
    """Package metadata and dependency lists fetched from deps.dev."""

    model_config = ConfigDict(frozen=True)

    name: str
    ecosystem: str
    version: str
    description: str | None = None
    homepage: str | None = None
    repository: str | None = None
    license: str | None = None
    published_at: str | None = None
    last_updated: str | None = None
    maintainers: list[Maintainer] = Field(default_factory=list)

    direct_deps: list[DependencyNode] = Field(default_factory=list)
    transitive_deps: list[DependencyNode] = Field(default_factory=list)

    @property
    def total_deps(self) -> int:
        return len(self.direct_deps) + len(self.transitive_deps)
