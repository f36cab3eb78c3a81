"""Repository scan workflow module."""

from src.layers.l1_intelligence.workflow.repo_scan import (
    RepoScanConfig,
    RepoScanResult,
    RepositoryScanner,
)

__all__ = [
    "RepoScanConfig",
    "RepoScanResult",
    "RepositoryScanner",
]
