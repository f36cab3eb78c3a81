"""Go dependency scanner for go.mod files."""

import re

from src.layers.l1_intelligence.dependency_scanner.base_scanner import (
    BaseDependencyScanner,
    Dependency,
    Ecosystem,
    ParsedDependencies,
)


class GoScanner(BaseDependencyScanner):
    """Scanner for Go module files (go.mod)."""

    supported_files = ["go.mod"]
    ecosystem = Ecosystem.GO

    # require module/path v1.2.3 // optional comment
    SINGLE_REQUIRE_PATTERN = re.compile(r"^require\s+(?P<path>\S+)\s+v?(?P<version>\S+)")

    # module/path v1.2.3 // optional comment (inside a require block)
    BLOCK_REQUIRE_PATTERN = re.compile(r"^(?P<path>\S+)\s+v?(?P<version>\S+)")

    BLOCK_START_PATTERN = re.compile(r"^require\s*\($")

    COMMENT_PATTERN = re.compile(r"//.*")

    def parse(self, content: str, filename: str = "go.mod") -> ParsedDependencies:
        """Parse go.mod content.

        Args:
            content: Raw go.mod text.
            filename: Manifest filename.

        Returns:
            Parsed Go dependencies.
        """
        dependencies: list[Dependency] = []
        in_require_block = False

        for line in self._stripped_lines(content):
            if self.BLOCK_START_PATTERN.match(line):
                in_require_block = True
                continue

            if line == ")":
                in_require_block = False
                continue

            match = self.SINGLE_REQUIRE_PATTERN.match(line)
            if not match and in_require_block:
                match = self.BLOCK_REQUIRE_PATTERN.match(line)
                if match and match.group("path").startswith("//"):
                    continue

            if not match:
                continue

            version = self._strip_comment(match.group("version"))
            if not version:
                continue

            dependencies.append(
                self._dependency(
                    name=match.group("path"),
                    version=version,
                    filename=filename,
                )
            )

        return self._result(dependencies, filename)

    def _strip_comment(self, version: str) -> str:
        """Remove a trailing ``//`` comment glued to a version token."""
        return self.COMMENT_PATTERN.sub("", version).strip()
