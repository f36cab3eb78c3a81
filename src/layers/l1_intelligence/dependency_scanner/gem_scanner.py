"""RubyGems dependency scanner for Gemfile files."""

import re

from src.layers.l1_intelligence.dependency_scanner.base_scanner import (
    BaseDependencyScanner,
    Dependency,
    Ecosystem,
    ParsedDependencies,
)


class GemScanner(BaseDependencyScanner):
    """Scanner for Bundler Gemfiles."""

    supported_files = ["gemfile"]
    ecosystem = Ecosystem.RUBYGEMS

    DEV_GROUP_PATTERN = re.compile(r"group\s*:(?:development|test)")

    # gem 'rails', '7.0.4'
    GEM_PATTERN = re.compile(
        r"""gem\s+['"](?P<name>[^'"]+)['"]\s*(?:,\s*['"](?P<version>[^'"]*)['"])?"""
    )

    def parse(self, content: str, filename: str = "Gemfile") -> ParsedDependencies:
        """Parse Gemfile content.

        Args:
            content: Raw Gemfile text.
            filename: Manifest filename.

        Returns:
            Parsed RubyGems dependencies.
        """
        dependencies: list[Dependency] = []
        in_dev_group = False

        for line in self._stripped_lines(content):
            if line.startswith("#"):
                continue

            if self.DEV_GROUP_PATTERN.search(line):
                in_dev_group = True
            if line == "end" and in_dev_group:
                in_dev_group = False

            match = self.GEM_PATTERN.search(line)
            if match:
                dependencies.append(
                    self._dependency(
                        name=match.group("name"),
                        version=match.group("version") or "*",
                        filename=filename,
                        is_dev=in_dev_group,
                    )
                )

        return self._result(dependencies, filename)
