"""Manifest dispatch and repository-wide dependency extraction."""

from pathlib import Path

from pydantic import BaseModel, Field

from src.core.logger.logger import get_logger
from src.layers.l1_intelligence.dependency_scanner.base_scanner import (
    BaseDependencyScanner,
    Dependency,
    Ecosystem,
    ParsedDependencies,
)
from src.layers.l1_intelligence.dependency_scanner.cargo_scanner import CargoScanner
from src.layers.l1_intelligence.dependency_scanner.gem_scanner import GemScanner
from src.layers.l1_intelligence.dependency_scanner.go_scanner import GoScanner
from src.layers.l1_intelligence.dependency_scanner.maven_scanner import MavenScanner
from src.layers.l1_intelligence.dependency_scanner.npm_scanner import NpmScanner
from src.layers.l1_intelligence.dependency_scanner.python_scanner import PythonScanner

logger = get_logger(__name__)

SCANNERS: tuple[BaseDependencyScanner, ...] = (
    NpmScanner(),
    PythonScanner(),
    GoScanner(),
    CargoScanner(),
    GemScanner(),
    MavenScanner(),
)

# Manifests we recognise but do not parse
UNPARSED_MANIFESTS = ("pyproject.toml",)

SKIP_DIRS = {
    "node_modules",
    "venv",
    ".venv",
    "env",
    "__pycache__",
    ".git",
    ".hg",
    ".svn",
    "dist",
    "build",
    "target",
    "vendor",
    ".tox",
    "site-packages",
}


def get_scanner(filename: str) -> BaseDependencyScanner | None:
    """Find the scanner responsible for a manifest filename.

    Args:
        filename: File name or repository-relative path.

    Returns:
        Matching scanner, or None for unrecognised files.
    """
    for scanner in SCANNERS:
        if scanner.can_parse(filename):
            return scanner
    return None


def parse_dependency_file(filename: str, content: str) -> ParsedDependencies | None:
    """Parse a manifest, choosing the ecosystem from its filename.

    Args:
        filename: File name or repository-relative path.
        content: Raw manifest text.

    Returns:
        Parsed dependencies, or None if the filename is not a supported
        manifest.
    """
    scanner = get_scanner(filename)
    if scanner is None:
        return None
    return scanner.parse(content, filename)


def is_dependency_file(filename: str) -> bool:
    """Check whether a filename is a known dependency manifest.

    Args:
        filename: File name or repository-relative path.

    Returns:
        True for parseable manifests and for recognised manifests without a
        parser (pyproject.toml).
    """
    if get_scanner(filename) is not None:
        return True
    name = filename.replace("\\", "/").lower()
    return any(name == m or name.endswith(f"/{m}") for m in UNPARSED_MANIFESTS)


class ExtractionResult(BaseModel):
    """Dependencies extracted from a repository tree."""

    source_path: str = Field(..., description="Scanned root directory")
    dependencies: list[Dependency] = Field(default_factory=list)
    files_scanned: list[str] = Field(default_factory=list)
    files_failed: list[str] = Field(default_factory=list)

    @property
    def total_dependencies(self) -> int:
        """Number of dependency records (duplicates across manifests included)."""
        return len(self.dependencies)

    def get_dependencies_by_ecosystem(self, ecosystem: Ecosystem) -> list[Dependency]:
        """Get dependencies filtered by ecosystem.

        Args:
            ecosystem: Ecosystem to filter by.

        Returns:
            List of dependencies in the ecosystem.
        """
        return [d for d in self.dependencies if d.ecosystem == ecosystem]

    def get_unique_dependencies(self) -> list[Dependency]:
        """Get dependencies with duplicate ``ecosystem:name@version`` keys removed.

        Returns:
            First occurrence of each key, in discovery order.
        """
        seen: set[str] = set()
        unique: list[Dependency] = []
        for dep in self.dependencies:
            if dep.key not in seen:
                seen.add(dep.key)
                unique.append(dep)
        return unique


class DependencyExtractor:
    """Walks a repository and parses every recognised manifest."""

    def __init__(self, skip_dirs: set[str] | None = None) -> None:
        """Initialize the extractor.

        Args:
            skip_dirs: Directory names never descended into.
        """
        self.logger = get_logger(__name__)
        self.skip_dirs = skip_dirs if skip_dirs is not None else SKIP_DIRS

    def find_manifests(self, root: Path) -> list[Path]:
        """Find parseable manifests below a directory.

        Args:
            root: Repository root.

        Returns:
            Sorted manifest paths.
        """
        found: list[Path] = []
        for path in root.rglob("*"):
            if not path.is_file():
                continue
            relative = path.relative_to(root)
            if any(part in self.skip_dirs for part in relative.parts[:-1]):
                continue
            if get_scanner(relative.as_posix()) is not None:
                found.append(path)
        return sorted(found)

    def extract_directory(self, root: Path) -> ExtractionResult:
        """Extract dependencies from all manifests in a repository.

        Args:
            root: Repository root.

        Returns:
            Extraction result. Unreadable files are listed in
            ``files_failed`` and otherwise ignored.
        """
        result = ExtractionResult(source_path=str(root))
        self.logger.info(f"Extracting dependencies in {root}")

        for path in self.find_manifests(root):
            relative = path.relative_to(root).as_posix()
            try:
                content = path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as e:
                self.logger.warning(f"Failed to read {relative}: {e}")
                result.files_failed.append(relative)
                continue

            parsed = parse_dependency_file(relative, content)
            if parsed is None:
                continue

            result.files_scanned.append(relative)
            result.dependencies.extend(parsed.dependencies)
            self.logger.debug(
                f"{relative}: {len(parsed.dependencies)} {parsed.ecosystem.value} dependencies"
            )

        self.logger.info(
            f"Extraction complete: {result.total_dependencies} dependencies from "
            f"{len(result.files_scanned)} files"
        )
        return result
