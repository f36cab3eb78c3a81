"""Data models for vulnerability intelligence."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from src.layers.l1_intelligence.dependency_scanner.base_scanner import Dependency


class Severity(str, Enum):
    """Vulnerability severity levels."""

    CRITICAL = "CRITICAL"
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"
    UNKNOWN = "UNKNOWN"


class VulnerabilityReference(BaseModel):
    """Advisory reference link."""

    model_config = ConfigDict(frozen=True)

    type: str = "WEB"
    url: str


class AffectedRange(BaseModel):
    """First introduced/fixed event pair of an OSV range."""

    model_config = ConfigDict(frozen=True)

    introduced: str | None = None
    fixed: str | None = None


class AffectedPackage(BaseModel):
    """Package affected by a vulnerability."""

    model_config = ConfigDict(frozen=True)

    package: str = ""
    ecosystem: str = ""
    versions: list[str] = Field(default_factory=list)
    ranges: list[AffectedRange] = Field(default_factory=list)


class Vulnerability(BaseModel):
    """A known vulnerability affecting a package version.

    Dates are kept as the ISO-8601 strings the source returned.
    """

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "examples": [
                {
                    "id": "GHSA-jf85-cpcp-j695",
                    "aliases": ["CVE-2019-10744"],
                    "summary": "Prototype Pollution in lodash",
                    "severity": "CRITICAL",
                    "cvss": 9.1,
                }
            ]
        },
    )

    id: str = Field(description="Advisory identifier (GHSA-..., PYSEC-..., CVE-...)")
    aliases: list[str] = Field(default_factory=list, description="CVE/GHSA aliases")
    summary: str = ""
    details: str = ""
    severity: Severity = Severity.UNKNOWN
    cvss: float | None = Field(default=None, ge=0, le=10)
    published: str = ""
    modified: str = ""
    references: list[VulnerabilityReference] = Field(default_factory=list)
    affected: list[AffectedPackage] = Field(default_factory=list)

    exploit_available: bool | None = Field(default=None, description="Public exploit exists")
    cisa_kev: bool | None = Field(default=None, description="Listed in CISA KEV catalog")

    @property
    def cve_ids(self) -> list[str]:
        """CVE identifiers among the id and aliases."""
        return [i for i in [self.id, *self.aliases] if i.startswith("CVE-")]


class VulnerabilityResult(BaseModel):
    """Vulnerabilities found for one dependency."""

    model_config = ConfigDict(frozen=True)

    dependency: Dependency
    vulnerabilities: list[Vulnerability] = Field(default_factory=list)
    risk_score: float = Field(default=0.0, ge=0)

    @property
    def is_vulnerable(self) -> bool:
        return bool(self.vulnerabilities)

    def count_by_severity(self, severity: Severity) -> int:
        return sum(1 for v in self.vulnerabilities if v.severity == severity)
