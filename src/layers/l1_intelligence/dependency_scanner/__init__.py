"""Dependency scanner module for parsing package manifests."""

from src.layers.l1_intelligence.dependency_scanner.base_scanner import (
    BaseDependencyScanner,
    Dependency,
    Ecosystem,
    ParsedDependencies,
    node_key,
)
from src.layers.l1_intelligence.dependency_scanner.cargo_scanner import CargoScanner
from src.layers.l1_intelligence.dependency_scanner.extractor import (
    DependencyExtractor,
    ExtractionResult,
    get_scanner,
    is_dependency_file,
    parse_dependency_file,
)
from src.layers.l1_intelligence.dependency_scanner.gem_scanner import GemScanner
from src.layers.l1_intelligence.dependency_scanner.go_scanner import GoScanner
from src.layers.l1_intelligence.dependency_scanner.maven_scanner import MavenScanner
from src.layers.l1_intelligence.dependency_scanner.npm_scanner import NpmScanner
from src.layers.l1_intelligence.dependency_scanner.python_scanner import PythonScanner

__all__ = [
    "BaseDependencyScanner",
    "CargoScanner",
    "Dependency",
    "DependencyExtractor",
    "Ecosystem",
    "ExtractionResult",
    "GemScanner",
    "GoScanner",
    "MavenScanner",
    "NpmScanner",
    "ParsedDependencies",
    "PythonScanner",
    "get_scanner",
    "is_dependency_file",
    "node_key",
    "parse_dependency_file",
]
