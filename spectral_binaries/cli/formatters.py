"""
Functions for formatting and displaying data in the console using Rich.
"""

from pathlib import Path

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from spectral_binaries.models.config import PackagerConfig
from spectral_binaries.models.release import Release
from spectral_binaries.models.stats import RunStats
from spectral_binaries.utils.formatting import format_duration, format_size


def format_error_with_suggestions(
    error: Exception, context: dict | None = None
) -> Panel:
    """Formats an error with actionable suggestions into a Rich Panel."""
    error_type = type(error).__name__
    error_msg = str(error)

    suggestions_map = {
        "MissingArgumentsError": [
            "• Pass one or more release tags, e.g. `spectral-binaries build v6.11.1`.",
            "• Use `latest` for the most recently published release.",
        ],
        "ListingFetchError": [
            "• GitHub may be rate-limiting anonymous requests.",
            "• Set GITHUB_TOKEN or pass --token to authenticate.",
        ],
        "UnresolvedVersionsError": [
            "• Check the tag spelling against the upstream releases page.",
            "• Run without --strict to package the versions that were found.",
        ],
        "RedirectLimitExceededError": [
            "• The download host is redirecting in a loop.",
            "• Raise `max_redirects` in the config if the chain is legitimate.",
        ],
        "SizeMismatchError": [
            "• The asset may have been replaced upstream; try again later.",
            "• A proxy may be altering the download.",
        ],
        "TransportError": [
            "• A network connection issue occurred.",
            "• Check your internet connection and try again.",
        ],
        "ConfigurationError": [
            "• Run `spectral-binaries validate` to inspect the configuration.",
            "• Run `spectral-binaries init --force` to write fresh defaults.",
        ],
    }

    suggestions = suggestions_map.get(
        error_type, ["• Run the command with -vv for detailed logs."]
    )

    error_text = Text()
    error_text.append(f"{error_type}: ", style="bold red")
    error_text.append(error_msg)

    content = Table.grid(padding=(1, 0))
    content.add_row(error_text)
    content.add_row()
    content.add_row(Text("Suggestions", style="bold yellow"))
    content.add_row(Text("\n".join(suggestions)))

    if context:
        content.add_row()
        content.add_row(Text(f"Context: {context}", style="dim"))

    return Panel(
        content,
        title="[bold red]An Error Occurred[/bold red]",
        border_style="red",
        expand=False,
    )


def print_config(config_path: Path, config: PackagerConfig):
    """Displays the effective configuration, hiding the token."""
    console = Console()
    content = ""
    for key, value in config.model_dump().items():
        if key == "github_token":
            value = "[hidden]" if value else "(not set)"
        content += f"{key} = {value}\n"

    console.print(
        Panel(
            content.strip(),
            title=f"Configuration ([dim]{config_path}[/dim])",
            border_style="cyan",
        )
    )


def print_release_info(release: Release):
    """Displays a release and its assets."""
    console = Console()
    table = Table(box=box.ROUNDED, title=f"[bold]{release.display_name}[/bold]")
    table.add_column("Asset", style="cyan", no_wrap=True)
    table.add_column("Size", justify="right", style="green")
    for asset in release.assets:
        table.add_row(asset.name, format_size(asset.size))

    console.print(f"[bold]Tag:[/] {release.tag}")
    console.print(f"[bold]URL:[/] [dim]{release.html_url}[/dim]")
    console.print(table)


def print_summary_panel(stats: RunStats):
    """Displays the final summary of a packaging run."""
    console = Console()

    stats_table = Table(show_header=False, box=None, padding=(0, 2))
    stats_table.add_column(style="bold cyan", justify="right", width=16)
    stats_table.add_column(style="white", justify="left")

    stats_table.add_row(
        "✓ Packaged:",
        f"[bold green]{', '.join(stats.materialized) or '-'}[/bold green]",
    )
    if stats.unresolved:
        stats_table.add_row(
            "○ Not Found:", f"[yellow]{', '.join(stats.unresolved)}[/yellow]"
        )
    if stats.failed:
        stats_table.add_row(
            "✗ Failed:", f"[bold red]{', '.join(stats.failed)}[/bold red]"
        )

    stats_table.add_row("", "")
    stats_table.add_row("Assets:", f"[cyan]{stats.assets_downloaded}[/cyan]")
    stats_table.add_row(
        "Total Size:", f"[cyan]{format_size(stats.bytes_downloaded)}[/cyan]"
    )
    stats_table.add_row(
        "Time Elapsed:", f"[blue]{format_duration(stats.duration)}[/blue]"
    )

    if stats.succeeded:
        title = "📦 [bold]Packaging Complete![/bold]"
        border_color = "green"
    else:
        title = "⚠ [bold]Packaging Finished With Errors[/bold]"
        border_color = "red"

    console.print()
    console.print(
        Panel(
            stats_table,
            title=title,
            border_style=border_color,
            box=box.DOUBLE,
            expand=False,
            padding=(1, 2),
        )
    )
