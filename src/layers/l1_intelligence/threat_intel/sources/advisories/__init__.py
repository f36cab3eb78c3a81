"""Advisory data sources."""

from src.layers.l1_intelligence.threat_intel.sources.advisories.osv_client import OSVClient

__all__ = ["OSVClient"]
