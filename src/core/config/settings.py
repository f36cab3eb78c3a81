"""Application settings using Pydantic Settings."""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.core.config.loader import ConfigLoader

DEFAULT_CONFIG_PATH = Path(__file__).parent.parent.parent.parent / "config" / "default.yaml"
CONFIG_SECTIONS = {"logging", "resolver", "supply_chain", "scoring"}


class LoggingSettings(BaseSettings):
    """Logging configuration settings."""

    model_config = SettingsConfigDict(
        env_prefix="REPORISK_LOGGING_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    level: str = Field(
        default="INFO",
        description="Log level",
    )
    format: str = Field(
        default="[%(name)s] %(message)s",
        description="Log format string",
    )
    file: Path | None = Field(
        default=None,
        description="Log file path",
    )
    use_rich: bool = Field(
        default=True,
        description="Use Rich console for output",
    )

    @field_validator("level", mode="before")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v_upper

    @field_validator("file", mode="before")
    @classmethod
    def validate_file(cls, v: str | None) -> Path | None:
        """Validate and convert file to Path."""
        if v is None or v == "":
            return None
        return Path(v)


class ResolverSettings(BaseSettings):
    """Vulnerability resolver settings (OSV, NVD, CISA KEV)."""

    model_config = SettingsConfigDict(
        env_prefix="REPORISK_RESOLVER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    osv_url: str = Field(
        default="https://api.osv.dev/v1",
        description="OSV API base URL",
    )
    parallelism: int = Field(
        default=5,
        ge=1,
        le=50,
        description="Concurrent OSV queries per batch",
    )
    batch_delay: float = Field(
        default=0.1,
        ge=0,
        description="Delay between batches in seconds",
    )
    timeout: float = Field(
        default=30.0,
        gt=0,
        description="Per-request timeout in seconds",
    )
    max_retries: int = Field(
        default=1,
        ge=1,
        le=10,
        description="Attempts per request",
    )
    enable_kev: bool = Field(
        default=False,
        description="Flag vulnerabilities listed in the CISA KEV catalog",
    )
    enable_nvd_backfill: bool = Field(
        default=False,
        description="Backfill missing CVE details from NVD",
    )
    nvd_api_key: str | None = Field(
        default=None,
        description="NVD API key (raises the NVD rate limit)",
    )


class SupplyChainSettings(BaseSettings):
    """Supply chain graph settings (deps.dev)."""

    model_config = SettingsConfigDict(
        env_prefix="REPORISK_SUPPLY_CHAIN_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    deps_dev_url: str = Field(
        default="https://api.deps.dev/v3",
        description="deps.dev API base URL",
    )
    max_depth: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Maximum expansion depth",
    )
    parallelism: int = Field(
        default=3,
        ge=1,
        le=50,
        description="Concurrent package lookups per level",
    )
    level_delay: float = Field(
        default=0.1,
        ge=0,
        description="Delay between depth levels in seconds",
    )
    timeout: float = Field(
        default=30.0,
        gt=0,
        description="Per-request timeout in seconds",
    )
    cache_ttl: int = Field(
        default=3600,
        ge=0,
        description="Package info cache TTL in seconds (0 disables caching)",
    )
    cache_max_entries: int = Field(
        default=1024,
        ge=1,
        description="Maximum cached package info entries",
    )


class ScoringSettings(BaseSettings):
    """Heuristic weights used by the risk formulas."""

    model_config = SettingsConfigDict(
        env_prefix="REPORISK_SCORING_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Per-secret contribution to the aggregate score
    secret_critical: float = 25
    secret_high: float = 15
    secret_medium: float = 8
    secret_low: float = 3

    # Per-vulnerability base points in the dependency risk score
    vuln_critical: float = 40
    vuln_high: float = 25
    vuln_medium: float = 10
    vuln_low: float = 3
    vuln_unknown: float = 5

    cvss_multiplier: float = 2.0
    kev_bonus: float = 20
    exploit_bonus: float = 15

    dependency_factor: float = Field(
        default=0.5,
        ge=0,
        description="Share of each dependency risk score added to the aggregate",
    )
    max_score: float = Field(default=100, gt=0)

    def secret_weight(self, severity: str) -> float:
        """Get the aggregate contribution of one secret.

        Args:
            severity: Secret severity (critical, high, medium, low).

        Returns:
            Weight, or 0 for an unrecognised severity.
        """
        return float(getattr(self, f"secret_{severity.lower()}", 0))

    def vulnerability_weight(self, severity: str) -> float:
        """Get the base points of one vulnerability.

        Args:
            severity: Vulnerability severity (CRITICAL .. UNKNOWN).

        Returns:
            Base points; unrecognised severities count as UNKNOWN.
        """
        return float(getattr(self, f"vuln_{severity.lower()}", self.vuln_unknown))


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_prefix="REPORISK_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    resolver: ResolverSettings = Field(default_factory=ResolverSettings)
    supply_chain: SupplyChainSettings = Field(default_factory=SupplyChainSettings)
    scoring: ScoringSettings = Field(default_factory=ScoringSettings)

    @classmethod
    def from_yaml(cls, *paths: Path) -> "Settings":
        """Load settings from one or more YAML files.

        Later files override earlier ones key by key, so a user file only
        needs the values it changes.

        Args:
            paths: YAML configuration files in priority order.

        Returns:
            Settings instance with values from YAML.

        Raises:
            ConfigurationError: If a file cannot be loaded or has an
                unknown section.
        """
        loader = ConfigLoader(sections=CONFIG_SECTIONS)
        loader.load_all(list(paths))

        return cls(
            logging=LoggingSettings(**loader.get_section("logging")),
            resolver=ResolverSettings(**loader.get_section("resolver")),
            supply_chain=SupplyChainSettings(**loader.get_section("supply_chain")),
            scoring=ScoringSettings(**loader.get_section("scoring")),
        )

    @classmethod
    def load(cls, config_path: Path | None = None) -> "Settings":
        """Load settings from default locations.

        YAML values from config/default.yaml, overlaid with ``config_path``
        when given, take priority over environment variables for the keys
        they set; everything else comes from the environment, .env or the
        field defaults.

        Args:
            config_path: Optional user configuration file.

        Returns:
            Settings instance.
        """
        paths = [DEFAULT_CONFIG_PATH] if DEFAULT_CONFIG_PATH.exists() else []
        if config_path is not None:
            paths.append(config_path)

        if paths:
            return cls.from_yaml(*paths)

        return cls()


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Returns:
        Settings singleton.
    """
    return Settings.load()
