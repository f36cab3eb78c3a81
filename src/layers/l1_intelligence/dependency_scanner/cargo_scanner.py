"""Cargo dependency scanner for Cargo.toml files."""

import re

from src.layers.l1_intelligence.dependency_scanner.base_scanner import (
    BaseDependencyScanner,
    Dependency,
    Ecosystem,
    ParsedDependencies,
)


class CargoScanner(BaseDependencyScanner):
    """Scanner for Rust Cargo.toml manifests.

    The manifest is scanned line by line while tracking the current section,
    so it tolerates files a strict TOML parser would reject.
    """

    supported_files = ["cargo.toml"]
    ecosystem = Ecosystem.CARGO

    SECTIONS = {
        "[dependencies]": False,
        "[dev-dependencies]": True,
    }

    # serde = "1.0"
    SIMPLE_PATTERN = re.compile(r'^(?P<name>[A-Za-z0-9_-]+)\s*=\s*"(?P<version>[^"]+)"')

    # tokio = { version = "1", features = ["full"] }
    INLINE_TABLE_PATTERN = re.compile(
        r'^(?P<name>[A-Za-z0-9_-]+)\s*=\s*\{.*version\s*=\s*"(?P<version>[^"]+)"'
    )

    def parse(self, content: str, filename: str = "Cargo.toml") -> ParsedDependencies:
        """Parse Cargo.toml content.

        Args:
            content: Raw Cargo.toml text.
            filename: Manifest filename.

        Returns:
            Parsed crates.io dependencies.
        """
        dependencies: list[Dependency] = []
        # None outside a dependency section, otherwise the section's is_dev flag
        section_is_dev: bool | None = None

        for line in self._stripped_lines(content):
            if line in self.SECTIONS:
                section_is_dev = self.SECTIONS[line]
                continue

            if line.startswith("["):
                section_is_dev = None
                continue

            if section_is_dev is None:
                continue

            match = self.SIMPLE_PATTERN.match(line) or self.INLINE_TABLE_PATTERN.match(line)
            if match:
                dependencies.append(
                    self._dependency(
                        name=match.group("name"),
                        version=match.group("version"),
                        filename=filename,
                        is_dev=section_is_dev,
                    )
                )

        return self._result(dependencies, filename)
