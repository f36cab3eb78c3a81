"""Display components for repository scan results."""

from rich.columns import Columns
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from src.cli.display import console
from src.layers.l1_intelligence.risk.aggregator import RiskLevel
from src.layers.l1_intelligence.risk.context import SecurityContext
from src.layers.l1_intelligence.secrets.patterns import SecretPattern, SecretSeverity
from src.layers.l1_intelligence.supply_chain.health import format_dependency_path
from src.layers.l1_intelligence.supply_chain.models import SupplyChainGraph
from src.layers.l1_intelligence.threat_intel.core.data_models import Severity

SEVERITY_STYLES = {
    "CRITICAL": "bold red",
    "HIGH": "bold orange1",
    "MEDIUM": "bold yellow",
    "LOW": "bold green",
    "UNKNOWN": "bold bright_black",
}

LEVEL_COLORS = {
    RiskLevel.CRITICAL: "red",
    RiskLevel.HIGH: "orange1",
    RiskLevel.MEDIUM: "yellow",
    RiskLevel.LOW: "green",
    RiskLevel.SECURE: "green",
}


def get_severity_badge(severity: Severity | SecretSeverity) -> str:
    """Get colored badge for a vulnerability or secret severity.

    Args:
        severity: Severity value.

    Returns:
        Rich markup badge.
    """
    label = severity.value.upper()
    style = SEVERITY_STYLES.get(label, "bold")
    return f"[{style}]{label}[/]"


def show_risk_summary(context: SecurityContext, source_path: str) -> None:
    """Display the aggregate score and headline counts.

    Args:
        context: Completed security context.
        source_path: Scanned repository path.
    """
    level = context.risk_level
    color = LEVEL_COLORS[level]

    console.print()
    console.print(
        Panel(
            f"[bold]Repository Risk Assessment[/]\n[dim]{escape(source_path)}[/]",
            border_style=color,
        )
    )

    score_text = Text()
    score_text.append(f"{context.overall_risk_score}", style=f"bold {color}")
    score_text.append(" / 100\n")
    score_text.append(level.value, style=color)

    secrets_text = Text()
    secrets_text.append(f"{context.secrets_count}", style="bold red" if context.secrets else "bold green")
    secrets_text.append(" secrets\n")
    secrets_text.append(f"{len(context.critical_secrets())} critical", style="dim")

    vuln_text = Text()
    vulnerable = len(context.vulnerable_packages())
    vuln_text.append(f"{vulnerable}", style="bold red" if vulnerable else "bold green")
    vuln_text.append(f" of {len(context.dependencies)} packages\n")
    vuln_text.append(
        f"{context.critical_vuln_count} critical, {context.high_vuln_count} high", style="dim"
    )

    console.print(
        Columns(
            [
                Panel(score_text, title="[bold]Risk Score[/]", border_style=color),
                Panel(secrets_text, title="[bold]Secrets[/]", border_style="blue"),
                Panel(vuln_text, title="[bold]Vulnerable[/]", border_style="blue"),
            ],
            equal=True,
            expand=True,
        )
    )


def show_secrets_table(context: SecurityContext, limit: int = 50) -> None:
    """Display detected secrets with redacted values."""
    if not context.secrets:
        return

    table = Table(title="[bold]Detected Secrets[/]", show_lines=False)
    table.add_column("Severity", no_wrap=True)
    table.add_column("Type", style="cyan")
    table.add_column("Location", style="white")
    table.add_column("Value", style="dim")

    for secret in context.secrets[:limit]:
        table.add_row(
            get_severity_badge(secret.pattern.severity),
            escape(secret.pattern.name),
            escape(f"{secret.file}:{secret.line}:{secret.column}"),
            escape(secret.redacted_match),
        )

    console.print()
    console.print(table)
    if len(context.secrets) > limit:
        console.print(f"[dim]... and {len(context.secrets) - limit} more[/]")


def show_vulnerability_table(context: SecurityContext, limit: int = 50) -> None:
    """Display vulnerable packages, highest risk first."""
    vulnerable = sorted(context.vulnerable_packages(), key=lambda r: r.risk_score, reverse=True)
    if not vulnerable:
        return

    table = Table(title="[bold]Vulnerable Dependencies[/]")
    table.add_column("Package", style="cyan")
    table.add_column("Version")
    table.add_column("Ecosystem", style="dim")
    table.add_column("Vulns", justify="right")
    table.add_column("Worst", no_wrap=True)
    table.add_column("Risk", justify="right")
    table.add_column("IDs", style="dim")

    order = list(Severity)
    for result in vulnerable[:limit]:
        worst = min((v.severity for v in result.vulnerabilities), key=order.index)
        ids = ", ".join(v.id for v in result.vulnerabilities[:3])
        if len(result.vulnerabilities) > 3:
            ids += ", ..."
        table.add_row(
            escape(result.dependency.name),
            escape(result.dependency.version),
            result.dependency.ecosystem.value,
            str(len(result.vulnerabilities)),
            get_severity_badge(worst),
            f"{result.risk_score:.0f}",
            escape(ids),
        )

    console.print()
    console.print(table)


def show_graph_stats(graph: SupplyChainGraph | None, context: SecurityContext) -> None:
    """Display supply chain graph statistics and high-risk paths."""
    if graph is None:
        return

    stats = graph.stats
    table = Table(title="[bold]Supply Chain[/]", show_header=False, box=None)
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="white")
    table.add_row("Root", escape(graph.root))
    table.add_row("Total packages", str(stats.total_deps))
    table.add_row("Direct", str(stats.direct_deps))
    table.add_row("Transitive", str(stats.transitive_deps))
    table.add_row("Max depth", str(stats.max_depth))
    table.add_row("Vulnerable", str(stats.vulnerable_count))
    table.add_row("Avg risk (vulnerable)", f"{stats.avg_risk_score:.1f}")
    if stats.avg_health_score is not None:
        table.add_row("Avg health", f"{stats.avg_health_score:.0f}/100")

    risky = context.high_risk_nodes()
    if risky:
        table.add_section()
        for node in risky[:10]:
            table.add_row(
                f"[red]{escape(node.name)}@{escape(node.version)}[/]",
                escape(format_dependency_path(node.path)),
            )

    console.print()
    console.print(Panel(table, border_style="blue"))


def show_pattern_table(patterns: tuple[SecretPattern, ...]) -> None:
    """Display the secret pattern table."""
    table = Table(title=f"[bold]Secret Patterns ({len(patterns)})[/]")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Name")
    table.add_column("Severity", no_wrap=True)
    table.add_column("Description", style="dim")

    for pattern in patterns:
        table.add_row(
            pattern.id,
            pattern.name,
            get_severity_badge(pattern.severity),
            pattern.description,
        )

    console.print(table)
