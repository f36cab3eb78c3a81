"""NPM dependency scanner for package.json files."""

import json
import re

from src.core.exceptions.errors import ManifestParseError
from src.layers.l1_intelligence.dependency_scanner.base_scanner import (
    BaseDependencyScanner,
    Dependency,
    Ecosystem,
    ParsedDependencies,
)


class NpmScanner(BaseDependencyScanner):
    """Scanner for npm package.json files."""

    supported_files = ["package.json"]
    ecosystem = Ecosystem.NPM

    # Sections read from package.json and whether they are dev-only
    DEPENDENCY_SECTIONS = [
        ("dependencies", False),
        ("devDependencies", True),
        ("peerDependencies", False),
    ]

    RANGE_PREFIX = re.compile(r"^[\^~>=<]")

    def parse(self, content: str, filename: str = "package.json") -> ParsedDependencies:
        """Parse package.json content.

        Args:
            content: Raw package.json text.
            filename: Manifest filename.

        Returns:
            Parsed npm dependencies.
        """
        try:
            data = self._load(content, filename)
        except ManifestParseError as e:
            self.logger.warning(str(e))
            return self._result([], filename)

        dependencies: list[Dependency] = []
        for section, is_dev in self.DEPENDENCY_SECTIONS:
            entries = data.get(section)
            if not isinstance(entries, dict):
                continue

            for name, version in entries.items():
                if not isinstance(version, str):
                    continue
                dependencies.append(
                    self._dependency(
                        name=name,
                        version=self.clean_version(version),
                        filename=filename,
                        is_dev=is_dev,
                    )
                )

        return self._result(dependencies, filename)

    def _load(self, content: str, filename: str) -> dict:
        """Decode package.json into a mapping.

        Raises:
            ManifestParseError: If the content is not a JSON object.
        """
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise ManifestParseError(
                f"Failed to parse {filename}: {e}",
                source_file=filename,
                ecosystem=self.ecosystem.value,
            ) from e

        if not isinstance(data, dict):
            raise ManifestParseError(
                f"Failed to parse {filename}: top-level value is not an object",
                source_file=filename,
                ecosystem=self.ecosystem.value,
            )
        return data

    @classmethod
    def clean_version(cls, version: str) -> str:
        """Normalize an npm version range.

        Strips a single leading range operator and truncates at the first
        space, so ``^4.17.15`` becomes ``4.17.15`` and ``>=1.0 <2.0``
        becomes ``=1.0``.

        Args:
            version: Raw version string.

        Returns:
            Cleaned version string.
        """
        return cls.RANGE_PREFIX.sub("", version, count=1).split(" ")[0]
