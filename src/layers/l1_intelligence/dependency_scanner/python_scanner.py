"""Python dependency scanner for pip requirements files."""

import re

from src.layers.l1_intelligence.dependency_scanner.base_scanner import (
    BaseDependencyScanner,
    Dependency,
    Ecosystem,
    ParsedDependencies,
)


class PythonScanner(BaseDependencyScanner):
    """Scanner for pip requirements files.

    Besides ``requirements.txt`` any ``.txt`` file whose path mentions
    ``requirements`` is accepted (``requirements-dev.txt``,
    ``requirements/test.txt``).
    """

    supported_files = ["requirements.txt"]
    ecosystem = Ecosystem.PYPI

    # name, optional comparator, optional version starting with a digit
    REQUIREMENT_PATTERN = re.compile(
        r"^(?P<name>[A-Za-z0-9_-]+)\s*(?:[=<>!~]+\s*)?(?P<version>[0-9][^\s,;#]*)?"
    )

    DEV_MARKERS = ("dev", "test")

    def can_parse(self, filename: str) -> bool:
        """Check whether a filename is a requirements file."""
        name = self._normalize_name(filename)
        if super().can_parse(filename):
            return True
        return "requirements" in name and name.endswith(".txt")

    def parse(self, content: str, filename: str = "requirements.txt") -> ParsedDependencies:
        """Parse requirements file content.

        Args:
            content: Raw requirements text.
            filename: Manifest filename; ``dev``/``test`` in it marks every
                dependency as development-only.

        Returns:
            Parsed PyPI dependencies.
        """
        is_dev = any(marker in filename for marker in self.DEV_MARKERS)
        dependencies: list[Dependency] = []

        for line in self._stripped_lines(content):
            # Skip empty lines, comments and pip options (-r, -e, --index-url)
            if not line or line.startswith("#") or line.startswith("-"):
                continue

            match = self.REQUIREMENT_PATTERN.match(line)
            if not match:
                continue

            dependencies.append(
                self._dependency(
                    name=match.group("name").lower(),
                    version=match.group("version") or "*",
                    filename=filename,
                    is_dev=is_dev,
                )
            )

        return self._result(dependencies, filename)
