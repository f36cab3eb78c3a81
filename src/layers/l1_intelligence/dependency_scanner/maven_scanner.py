"""Maven dependency scanner for pom.xml files."""

import re

from src.layers.l1_intelligence.dependency_scanner.base_scanner import (
    BaseDependencyScanner,
    Dependency,
    Ecosystem,
    ParsedDependencies,
)


class MavenScanner(BaseDependencyScanner):
    """Scanner for Maven pom.xml files.

    Uses a sequential pattern scan over ``<dependency>`` elements instead of
    a full XML parse, so partially broken POMs still yield their
    well-formed dependencies.
    """

    supported_files = ["pom.xml"]
    ecosystem = Ecosystem.MAVEN

    DEPENDENCY_PATTERN = re.compile(
        r"<dependency>\s*"
        r"<groupId>(?P<group>[^<]+)</groupId>\s*"
        r"<artifactId>(?P<artifact>[^<]+)</artifactId>\s*"
        r"(?:<version>(?P<version>[^<]+)</version>)?"
    )

    SCOPE_PATTERN = re.compile(r"<scope>\s*(?P<scope>[^<]+?)\s*</scope>")

    # Scopes that never reach the packaged artifact
    DEV_SCOPES = {"test"}

    def parse(self, content: str, filename: str = "pom.xml") -> ParsedDependencies:
        """Parse pom.xml content.

        Args:
            content: Raw POM text.
            filename: Manifest filename.

        Returns:
            Parsed Maven dependencies named ``groupId:artifactId``. Test
            scoped entries are marked as dev dependencies.
        """
        dependencies: list[Dependency] = []

        for match in self.DEPENDENCY_PATTERN.finditer(content):
            group_id = match.group("group").strip()
            artifact_id = match.group("artifact").strip()
            version = (match.group("version") or "").strip() or "*"

            element_end = self._element_end(content, match.end())
            scope = self.SCOPE_PATTERN.search(content, match.end(), element_end)
            is_dev = scope is not None and scope.group("scope").lower() in self.DEV_SCOPES

            dependencies.append(
                self._dependency(
                    name=f"{group_id}:{artifact_id}",
                    version=version,
                    filename=filename,
                    is_dev=is_dev,
                )
            )

        return self._result(dependencies, filename)

    @staticmethod
    def _element_end(content: str, start: int) -> int:
        """Find where the current ``<dependency>`` element stops."""
        ends = [
            pos
            for pos in (content.find("</dependency>", start), content.find("<dependency>", start))
            if pos != -1
        ]
        return min(ends, default=len(content))
