"""Tests for the Gemfile scanner."""

from src.layers.l1_intelligence.dependency_scanner.gem_scanner import GemScanner

GEMFILE = """source 'https://rubygems.org'

gem 'rails', '7.0.4'
gem "puma"
# gem 'commented'

group :development, :test do
  gem 'rspec', '3.12.0'
end

gem 'pg', '1.5.0'
"""


class TestGemScanner:
    """Tests for GemScanner."""

    def test_can_parse(self) -> None:
        scanner = GemScanner()
        assert scanner.can_parse("Gemfile") is True
        assert scanner.can_parse("Gemfile.lock") is False

    def test_parse_gems_and_groups(self) -> None:
        """Test versions, defaults and development groups."""
        result = GemScanner().parse(GEMFILE, "Gemfile")

        assert [(d.name, d.version, d.is_dev) for d in result.dependencies] == [
            ("rails", "7.0.4", False),
            ("puma", "*", False),
            ("rspec", "3.12.0", True),
            ("pg", "1.5.0", False),
        ]
