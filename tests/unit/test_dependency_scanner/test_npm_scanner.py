"""Tests for NPM dependency scanner."""

import json

import pytest

from src.layers.l1_intelligence.dependency_scanner.base_scanner import Ecosystem
from src.layers.l1_intelligence.dependency_scanner.npm_scanner import NpmScanner


class TestNpmScanner:
    """Tests for NpmScanner."""

    @pytest.fixture
    def scanner(self):
        """Create scanner instance."""
        return NpmScanner()

    def test_ecosystem(self, scanner):
        """Test scanner ecosystem."""
        assert scanner.ecosystem == Ecosystem.NPM

    def test_can_parse_package_json(self, scanner):
        assert scanner.can_parse("package.json") is True
        assert scanner.can_parse("frontend/package.json") is True
        assert scanner.can_parse("Package.JSON") is True

    def test_can_parse_rejects_other_files(self, scanner):
        assert scanner.can_parse("package-lock.json") is False
        assert scanner.can_parse("mypackage.json") is False

    def test_parse_empty_object(self, scanner):
        """Test parsing an empty package.json."""
        result = scanner.parse("{}", "package.json")
        assert result.dependencies == []
        assert result.ecosystem == Ecosystem.NPM

    def test_parse_dependency_sections(self, scanner):
        """Test dependencies, devDependencies and peerDependencies."""
        content = json.dumps(
            {
                "dependencies": {"express": "^4.18.0", "lodash": "4.17.21"},
                "devDependencies": {"jest": "~29.0.0"},
                "peerDependencies": {"react": ">=17.0.0"},
            }
        )
        result = scanner.parse(content, "package.json")

        deps = {d.name: d for d in result.dependencies}
        assert list(deps) == ["express", "lodash", "jest", "react"]
        assert deps["express"].version == "4.18.0"
        assert deps["lodash"].version == "4.17.21"
        assert deps["jest"].version == "29.0.0"
        assert deps["jest"].is_dev is True
        assert deps["react"].version == "=17.0.0"
        assert deps["react"].is_dev is False
        assert all(d.source == "package.json" for d in result.dependencies)

    def test_parse_invalid_json(self, scanner):
        """Test malformed content yields no dependencies."""
        result = scanner.parse("{not json", "package.json")
        assert result.dependencies == []

    def test_parse_non_object(self, scanner):
        result = scanner.parse("[1, 2, 3]", "package.json")
        assert result.dependencies == []

    def test_parse_skips_non_string_versions(self, scanner):
        content = json.dumps({"dependencies": {"a": "1.0.0", "b": {"version": "2"}}})
        result = scanner.parse(content, "package.json")
        assert [d.name for d in result.dependencies] == ["a"]

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("^4.17.15", "4.17.15"),
            ("~1.2.3", "1.2.3"),
            (">=1.0 <2.0", "=1.0"),
            ("1.0.0", "1.0.0"),
            ("latest", "latest"),
        ],
    )
    def test_clean_version(self, raw, expected):
        """Test version range normalization."""
        assert NpmScanner.clean_version(raw) == expected
