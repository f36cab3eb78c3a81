"""Package health heuristics and graph helpers."""

from datetime import datetime, timezone

from src.layers.l1_intelligence.supply_chain.models import (
    DependencyNode,
    PackageInfo,
    SupplyChainGraph,
)

PATH_SEPARATOR = " → "


def _parse_timestamp(value: str) -> datetime | None:
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def calculate_package_health(info: PackageInfo, now: datetime | None = None) -> int:
    """Score the health of a package between 0 and 100.

    Starts at 50 and adjusts for license, source repository, release
    recency, maintainers and dependency count.

    Args:
        info: Package info from deps.dev.
        now: Reference time for recency (defaults to the current UTC time).

    Returns:
        Health score.
    """
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    score = 50

    if info.license:
        score += 10
    if info.repository:
        score += 10

    updated = info.last_updated or info.published_at
    last_update = _parse_timestamp(updated) if updated else None
    if last_update is not None:
        days = (now - last_update).total_seconds() / 86400
        if days < 30:
            score += 15
        elif days < 90:
            score += 10
        elif days < 365:
            score += 5

    if info.maintainers:
        score += 10

    total = info.total_deps
    if total < 10:
        score += 10
    elif total < 50:
        score += 5
    elif total > 200:
        score -= 10

    return max(0, min(100, score))


def format_dependency_path(path: list[str]) -> str:
    """Render a dependency path, e.g. ``app → express → qs``."""
    return PATH_SEPARATOR.join(path)


def high_risk_nodes(graph: SupplyChainGraph, threshold: float = 50) -> list[DependencyNode]:
    """Nodes whose risk score exceeds ``threshold``, in graph order."""
    return [n for n in graph.nodes.values() if (n.risk_score or 0) > threshold]
