"""Tests for Go module scanner."""

import pytest

from src.layers.l1_intelligence.dependency_scanner.base_scanner import Ecosystem
from src.layers.l1_intelligence.dependency_scanner.go_scanner import GoScanner

GO_MOD = """module github.com/example/app

go 1.21

require github.com/pkg/errors v0.9.1

require (
\tgithub.com/gin-gonic/gin v1.9.1
\tgolang.org/x/net v0.17.0 // indirect
\t// github.com/commented/out v1.0.0
)
"""


class TestGoScanner:
    """Tests for GoScanner."""

    @pytest.fixture
    def scanner(self):
        return GoScanner()

    def test_ecosystem(self, scanner):
        assert scanner.ecosystem == Ecosystem.GO

    def test_can_parse(self, scanner):
        assert scanner.can_parse("go.mod") is True
        assert scanner.can_parse("services/api/go.mod") is True
        assert scanner.can_parse("go.sum") is False

    def test_parse_single_and_block_requires(self, scanner):
        """Test single-line and block require directives."""
        result = scanner.parse(GO_MOD, "go.mod")

        assert [(d.name, d.version) for d in result.dependencies] == [
            ("github.com/pkg/errors", "0.9.1"),
            ("github.com/gin-gonic/gin", "1.9.1"),
            ("golang.org/x/net", "0.17.0"),
        ]

    def test_ignores_lines_outside_require(self, scanner):
        result = scanner.parse("module foo\n\ngo 1.21\n", "go.mod")
        assert result.dependencies == []
