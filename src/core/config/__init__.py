"""Configuration management for RepoRisk."""

from src.core.config.loader import ConfigLoader
from src.core.config.settings import (
    LoggingSettings,
    ResolverSettings,
    ScoringSettings,
    Settings,
    SupplyChainSettings,
    get_settings,
)

__all__ = [
    "ConfigLoader",
    "LoggingSettings",
    "ResolverSettings",
    "ScoringSettings",
    "Settings",
    "SupplyChainSettings",
    "get_settings",
]
