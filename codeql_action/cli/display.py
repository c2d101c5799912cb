"""Display components for CLI using Rich."""

from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from codeql_action.actions.init import InitResult

console = Console()


def show_success(title: str, message: str) -> None:
    """Display a success message."""
    console.print()
    console.print(
        Panel(
            f"[bold green]{escape(message)}[/]",
            title=f"[bold]{escape(title)}[/]",
            border_style="green",
        )
    )


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


def show_info(title: str, message: str) -> None:
    """Display an info message."""
    console.print()
    console.print(
        Panel(
            escape(message),
            title=f"[bold]{escape(title)}[/]",
            border_style="blue",
        )
    )


def show_init_result(result: InitResult) -> None:
    """Display what the init stage set up.

    Args:
        result: Outcome of the init stage.
    """
    console.print()

    table = Table(title="[bold]Init Summary[/]", show_header=False, box=None)
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="white")

    table.add_row("Traced Languages", ", ".join(result.traced_languages) or "none")
    table.add_row("Scanned Languages", ", ".join(result.scanned_languages) or "none")
    table.add_row("Database Folder", escape(str(result.database_dir or "N/A")))

    if result.compound is not None:
        table.add_section()
        table.add_row("Tracer Spec", escape(str(result.compound.spec_path)))
        table.add_row("Tracer Environment", escape(str(result.compound.environment_path)))
        table.add_row("Exported Variables", str(len(result.compound.env)))
    else:
        table.add_row("Build Tracing", "[dim]not needed[/]")

    console.print(Panel(table, border_style="green"))


def show_sarif_files(sarif_files: list[Path]) -> None:
    """Display the SARIF files produced by the finish stage."""
    console.print()

    table = Table(title="[bold]Analysis Results[/]")
    table.add_column("Database", style="cyan")
    table.add_column("SARIF File", style="white")

    for sarif_file in sarif_files:
        table.add_row(sarif_file.stem, escape(str(sarif_file)))

    console.print(Panel(table, border_style="green"))
