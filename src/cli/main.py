"""Main CLI entry point for RepoRisk."""

import asyncio
import json
from pathlib import Path

import click

from src.cli.display import console, create_progress, show_banner, show_error, show_warnings
from src.cli.scan_display import (
    show_graph_stats,
    show_pattern_table,
    show_risk_summary,
    show_secrets_table,
    show_vulnerability_table,
)
from src.core.config.settings import Settings, get_settings
from src.core.exceptions.errors import ConfigurationError
from src.core.logger.logger import set_level, setup_logging
from src.layers.l1_intelligence.secrets.patterns import SECRET_PATTERNS
from src.layers.l1_intelligence.workflow.repo_scan import (
    RepoScanConfig,
    RepoScanResult,
    RepositoryScanner,
)

__version__ = "0.1.0"


def load_settings(config_path: str | None) -> Settings:
    """Load default settings, overlaid with an explicit YAML file if given."""
    if config_path:
        return Settings.load(Path(config_path))
    return get_settings()


@click.group()
@click.version_option(__version__, "--version", "-V", prog_name="reporisk")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    help="YAML configuration file",
)
@click.pass_context
def main(ctx: click.Context, verbose: bool, config_path: str | None) -> None:
    """RepoRisk - Repository security risk aggregation.

    Combines hardcoded secrets, known dependency vulnerabilities and the
    supply chain graph into a single 0-100 risk score.
    """
    try:
        settings = load_settings(config_path)
    except ConfigurationError as e:
        raise click.ClickException(str(e)) from e

    setup_logging(settings.logging)
    if verbose:
        set_level("DEBUG")

    ctx.obj = settings


@main.command()
@click.argument("path", type=click.Path(exists=True, file_okay=False))
@click.option("--depth", "-d", type=click.IntRange(min=0), help="Supply chain expansion depth")
@click.option("--no-vulns", is_flag=True, help="Skip vulnerability resolution")
@click.option("--no-graph", is_flag=True, help="Skip supply chain graph")
@click.option("--no-secrets", is_flag=True, help="Skip secret scanning")
@click.option("--prod-only", is_flag=True, help="Ignore development dependencies")
@click.option("--json", "as_json", is_flag=True, help="Print the report as JSON")
@click.pass_obj
def scan(
    settings: Settings,
    path: str,
    depth: int | None,
    no_vulns: bool,
    no_graph: bool,
    no_secrets: bool,
    prod_only: bool,
    as_json: bool,
) -> None:
    """Assess the security risk of a repository checkout.

    Example:
        reporisk scan ./my-project
        reporisk scan . --depth 2 --json > report.json
    """
    config = RepoScanConfig(
        scan_secrets=not no_secrets,
        resolve_vulnerabilities=not no_vulns,
        build_supply_chain=not no_graph,
        include_dev_dependencies=not prod_only,
        max_depth=depth,
    )
    scanner = RepositoryScanner(settings=settings, config=config)

    if as_json:
        result = asyncio.run(scanner.scan(Path(path)))
        click.echo(json.dumps(result.to_dict(), indent=2))
        if not result.success:
            raise SystemExit(1)
        return

    show_banner()
    with create_progress() as progress:
        progress.add_task("[cyan]Scanning repository...", total=None)
        result = asyncio.run(scanner.scan(Path(path)))

    show_scan_result(result)
    if not result.success:
        raise SystemExit(1)


def show_scan_result(result: RepoScanResult) -> None:
    """Render a scan result to the console."""
    if not result.success or result.context is None:
        show_error("Scan Failed", "\n".join(result.errors) or "Unknown error")
        return

    context = result.context
    show_risk_summary(context, result.source_path)
    show_secrets_table(context)
    show_vulnerability_table(context)
    show_graph_stats(context.supply_chain, context)
    show_warnings(result.warnings)
    console.print(f"\n[dim]Completed in {result.scan_duration_seconds:.1f}s[/]")


@main.command()
def patterns() -> None:
    """List the secret detection patterns."""
    show_pattern_table(SECRET_PATTERNS)


if __name__ == "__main__":
    main()
