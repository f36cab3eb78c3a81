"""Base dependency scanner and data models."""

from abc import ABC, abstractmethod
from enum import Enum
from pathlib import PurePosixPath

from pydantic import BaseModel, ConfigDict, Field

from src.core.logger.logger import get_logger

logger = get_logger(__name__)


class Ecosystem(str, Enum):
    """Package ecosystem types."""

    NPM = "npm"
    PYPI = "pypi"
    GO = "go"
    CARGO = "cargo"
    RUBYGEMS = "rubygems"
    MAVEN = "maven"


def node_key(ecosystem: "Ecosystem | str", name: str, version: str) -> str:
    """Build the identity key of a package version.

    Args:
        ecosystem: Ecosystem member or name.
        name: Package name.
        version: Package version.

    Returns:
        Key in the form ``ecosystem:name@version``.
    """
    system = ecosystem.value if isinstance(ecosystem, Enum) else ecosystem
    return f"{system}:{name}@{version}"


class Dependency(BaseModel):
    """A dependency declared in a manifest."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Package name")
    version: str = Field(..., description="Declared version, not necessarily semver")
    ecosystem: Ecosystem = Field(..., description="Package ecosystem")
    is_dev: bool = Field(default=False, description="Development-only dependency")
    source: str = Field(default="", description="Originating manifest filename")

    @property
    def key(self) -> str:
        """Identity key ``ecosystem:name@version``."""
        return node_key(self.ecosystem.value, self.name, self.version)


class ParsedDependencies(BaseModel):
    """Dependencies parsed from one manifest."""

    model_config = ConfigDict(frozen=True)

    ecosystem: Ecosystem
    dependencies: list[Dependency] = Field(default_factory=list)
    source: str = ""


class BaseDependencyScanner(ABC):
    """Base class for per-ecosystem manifest parsers.

    Subclasses declare the manifest basenames they understand and implement
    ``parse``. Parsing never raises: malformed content yields an empty
    dependency list so one bad manifest cannot abort a repository scan.
    """

    supported_files: list[str] = []
    ecosystem: Ecosystem

    def __init__(self) -> None:
        """Initialize the scanner."""
        self.logger = get_logger(self.__class__.__name__)

    def can_parse(self, filename: str) -> bool:
        """Check whether a filename is a manifest of this ecosystem.

        Matches the exact basename or a ``/basename`` path suffix,
        case-insensitively.

        Args:
            filename: File name or repository-relative path.

        Returns:
            True if this scanner handles the file.
        """
        name = self._normalize_name(filename)
        return any(
            name == supported or name.endswith(f"/{supported}")
            for supported in self.supported_files
        )

    @abstractmethod
    def parse(self, content: str, filename: str) -> ParsedDependencies:
        """Parse manifest content.

        Args:
            content: Raw manifest text.
            filename: Manifest filename, recorded as the dependency source.

        Returns:
            Parsed dependencies (possibly empty).
        """

    def _normalize_name(self, filename: str) -> str:
        """Lowercase a filename and use forward slashes."""
        return str(PurePosixPath(filename.replace("\\", "/"))).lower()

    def _dependency(
        self,
        name: str,
        version: str,
        filename: str,
        is_dev: bool = False,
    ) -> Dependency:
        """Build a dependency of this scanner's ecosystem."""
        return Dependency(
            name=name,
            version=version,
            ecosystem=self.ecosystem,
            is_dev=is_dev,
            source=filename,
        )

    def _result(self, dependencies: list[Dependency], filename: str) -> ParsedDependencies:
        """Wrap dependencies into a parse result."""
        return ParsedDependencies(
            ecosystem=self.ecosystem,
            dependencies=dependencies,
            source=filename,
        )

    @staticmethod
    def _stripped_lines(content: str) -> list[str]:
        """Split content into whitespace-stripped lines."""
        return [line.strip() for line in content.splitlines()]
