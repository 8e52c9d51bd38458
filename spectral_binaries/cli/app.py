"""
Defines the command-line interface for the application using Typer.
"""

import asyncio
import logging
import os
from pathlib import Path
from typing import Any

import typer
from rich.console import Console
from rich.logging import RichHandler

from spectral_binaries import __version__
from spectral_binaries.api.client import GitHubReleasesClient
from spectral_binaries.core.orchestrator import RunOrchestrator, parse_requested_versions
from spectral_binaries.core.resolver import ReleaseResolver
from spectral_binaries.exceptions import (
    MissingArgumentsError,
    SpectralBinariesError,
)
from spectral_binaries.models.config import PackagerConfig
from spectral_binaries.models.release import LATEST
from spectral_binaries.models.stats import RunStats
from spectral_binaries.storage.config_manager import ConfigManager

from .formatters import (
    format_error_with_suggestions,
    print_config,
    print_release_info,
    print_summary_panel,
)

console = Console(stderr=True)

logging.basicConfig(
    level="INFO",
    format="%(message)s",
    datefmt="[%X]",
    handlers=[
        RichHandler(
            console=console,
            rich_tracebacks=True,
            show_path=False,
            show_level=False,
            markup=True,
        )
    ],
)
log = logging.getLogger("spectral_binaries")

app = typer.Typer(
    name="spectral-binaries",
    help=(
        "Repackage upstream GitHub release binaries as versioned npm packages."
        " Use 'spectral-binaries <command> --help' for more info."
    ),
    rich_markup_mode="rich",
    pretty_exceptions_show_locals=False,
    add_completion=False,
)


def get_config_dir() -> Path:
    if os.name == "nt":
        base_dir = Path(os.getenv("APPDATA", "~\\AppData\\Roaming"))
    else:
        base_dir = Path(os.getenv("XDG_CONFIG_HOME", "~/.config"))
    return base_dir.expanduser() / "spectral-binaries"


CONFIG_DIR = get_config_dir()
CONFIG_FILE = CONFIG_DIR / "config.ini"


def _load_config(cli_options: dict[str, Any] | None = None) -> PackagerConfig:
    try:
        return ConfigManager(CONFIG_FILE).load_config(cli_options)
    except SpectralBinariesError as e:
        console.print(format_error_with_suggestions(e))
        raise typer.Exit(code=1) from e


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Increase logging verbosity (-vv for debug).",
    ),
    version: bool = typer.Option(
        False, "--version", help="Show version and exit.", is_eager=True
    ),
    show_config: bool = typer.Option(
        False, "--show-config", help="Display the effective configuration."
    ),
):
    """Spectral Binaries CLI"""
    if version:
        console.print(
            f"[bold]spectral-binaries[/bold] version [cyan]{__version__}[/cyan]"
        )
        raise typer.Exit()

    log_level = "INFO"
    if verbose >= 2:
        log_level = "DEBUG"
    logging.getLogger("spectral_binaries").setLevel(log_level)

    if show_config:
        print_config(CONFIG_FILE, _load_config())
        raise typer.Exit()

    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())


def _run_build(versions: list[str] | None, cli_options: dict[str, Any]) -> None:
    """Shared body of the `build` and `latest` commands."""
    try:
        requested = parse_requested_versions(versions)
    except MissingArgumentsError as e:
        console.print(format_error_with_suggestions(e))
        raise typer.Exit(code=2) from e

    config = _load_config(
        {key: value for key, value in cli_options.items() if value is not None}
    )

    async def _build_async() -> RunStats:
        orchestrator = RunOrchestrator(config)
        try:
            return await orchestrator.run(requested)
        finally:
            await orchestrator.close()

    console.print(
        f"[bold cyan]📦 Packaging {', '.join(requested)} "
        f"from {config.owner}/{config.repo}...[/bold cyan]"
    )
    try:
        stats = asyncio.run(_build_async())
    except SpectralBinariesError as e:
        console.print(format_error_with_suggestions(e))
        raise typer.Exit(code=1) from e
    except Exception as e:
        console.print(format_error_with_suggestions(e, {"type": "Unexpected"}))
        log.debug("Full traceback:", exc_info=True)
        raise typer.Exit(code=1) from e

    print_summary_panel(stats)
    if not stats.succeeded:
        raise typer.Exit(code=1)


@app.command(name="build")
def build_command(
    versions: list[str] | None = typer.Argument(  # noqa: B008
        None,
        help='Release tags to package; "latest" means the newest release.',
        metavar="VERSION...",
    ),
    output_dir: str | None = typer.Option(
        None, "-o", "--output", help="Directory that receives one folder per release."
    ),
    concurrency: int | None = typer.Option(
        None,
        "-c",
        "--concurrency",
        help="Number of simultaneous asset downloads (default 1).",
    ),
    token: str | None = typer.Option(
        None, "--token", help="GitHub token for API requests (or set GITHUB_TOKEN)."
    ),
    strict: bool | None = typer.Option(
        None,
        "--strict/--no-strict",
        help="Fail when a requested version does not exist upstream.",
    ),
):
    """Package one or more upstream releases."""
    _run_build(
        versions,
        {
            "output_dir": output_dir,
            "max_concurrent_downloads": concurrency,
            "github_token": token,
            "strict": strict,
        },
    )


@app.command(name="latest")
def latest_command(
    output_dir: str | None = typer.Option(
        None, "-o", "--output", help="Directory that receives the release folder."
    ),
    token: str | None = typer.Option(
        None, "--token", help="GitHub token for API requests (or set GITHUB_TOKEN)."
    ),
):
    """Package the most recently published release."""
    _run_build([LATEST], {"output_dir": output_dir, "github_token": token})


@app.command()
def info(
    version: str | None = typer.Argument(
        None, help="Release tag to show; defaults to the latest release."
    ),
):
    """Show an upstream release and its assets."""
    config = _load_config()

    async def _info_async():
        client = GitHubReleasesClient(config)
        try:
            if version is None:
                return await client.fetch_latest_release()
            resolved = await ReleaseResolver(client).resolve([version])
            return resolved.get(version)
        finally:
            await client.close()

    try:
        release = asyncio.run(_info_async())
    except SpectralBinariesError as e:
        console.print(format_error_with_suggestions(e))
        raise typer.Exit(code=1) from e

    if release is None:
        console.print(f"[red]✗ No release found for '{version}'.[/red]")
        raise typer.Exit(code=1)
    print_release_info(release)


@app.command()
def init(
    force: bool = typer.Option(
        False, "--force", "-f", help="Overwrite an existing file without asking."
    ),
):
    """Write a configuration file with default settings."""
    if (
        CONFIG_FILE.exists()
        and not force
        and not typer.confirm("Configuration file already exists. Overwrite it?")
    ):
        raise typer.Abort()

    try:
        ConfigManager(CONFIG_FILE).save_new_config()
    except SpectralBinariesError as e:
        console.print(format_error_with_suggestions(e))
        raise typer.Exit(code=1) from e
    console.print(f"[bold green]✓ Configuration saved to '{CONFIG_FILE}'[/bold green]")


@app.command()
def validate():
    """Validate the current configuration."""
    config = _load_config()
    console.print("[green]✓ Configuration is valid.[/green]")
    print_config(CONFIG_FILE, config)
