"""Display components for CLI using Rich."""

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn

console = Console()

BANNER = r"""
[bold cyan]
    ____                   ____  _      __
   / __ \___  ____  ____  / __ \(_)____/ /__
  / /_/ / _ \/ __ \/ __ \/ /_/ / / ___/ //_/
 / _, _/  __/ /_/ / /_/ / _, _/ (__  ) ,<
/_/ |_|\___/ .___/\____/_/ |_/_/____/_/|_|
          /_/
[/bold cyan]
[dim]Repository Security Risk Aggregation[/dim]
"""


def show_banner() -> None:
    """Display the RepoRisk banner."""
    console.print()
    console.print(Panel(BANNER, border_style="cyan", padding=(0, 2)))
    console.print()


def show_error(title: str, message: str) -> None:
    """Display an error message."""
    console.print()
    console.print(
        Panel(
            f"[bold red]{escape(message)}[/]",
            title=f"[bold]{escape(title)}[/]",
            border_style="red",
        )
    )


def show_warnings(warnings: list[str]) -> None:
    """Display non-fatal scan warnings."""
    if not warnings:
        return
    console.print()
    console.print(
        Panel(
            "\n".join(f"[yellow]•[/] {escape(w)}" for w in warnings),
            title="[bold]Warnings[/]",
            border_style="yellow",
        )
    )


def create_progress() -> Progress:
    """Create a spinner for long-running steps."""
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        transient=True,
    )
