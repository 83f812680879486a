"""Command line interface of the solution installer."""

import sys
from importlib import metadata
from pathlib import Path
from typing import Optional

import typer
from pydantic import BaseModel, Field
from rich.console import Console
from rich.table import Table

from .. import __version__
from ..core.config import load_config
from ..core.errors import InstallerError
from ..core.log import add_file_logging, configure_logging, get_logger, shutdown_logging
from ..deployment.repo_structure import detect_repo_structure
from .commands.env import env_app
from .commands.install import install
from .commands.solutions import solutions_app

console = Console()
logger = get_logger(__name__)

_VERBOSITY_LEVELS = {0: "WARNING", 1: "INFO"}
_REPORTED_PACKAGES = ("pydantic", "typer", "rich", "requests", "psutil", "PyYAML")


class GlobalCliOptions(BaseModel):
    """Options of the top-level callback, stored in ``ctx.obj["cli_options"]``."""

    verbose: int = Field(0, description="Verbosity count from -v flags")
    config_file: Optional[Path] = Field(None, description="YAML configuration file")
    log_level: str = Field("WARNING", description="Resolved console log level")
    log_file: Optional[Path] = Field(None, description="JSON-lines log file")


app = typer.Typer(
    name="solution-installer",
    help="Clone and deploy containerized solutions",
    no_args_is_help=True,
    rich_markup_mode="markdown",
)
app.command()(install)
app.add_typer(solutions_app, name="solutions", help="Inspect the solution registry")
app.add_typer(env_app, name="env", help="Work with env files")


def _resolve_log_level(verbose: int, log_level: Optional[str]) -> str:
    if log_level is not None:
        return log_level.upper()
    return _VERBOSITY_LEVELS.get(verbose, "DEBUG")


@app.callback()
def main(
    ctx: typer.Context,
    verbose: int = typer.Option(
        0, "--verbose", "-v", count=True, help="More output (-vv for debug)"
    ),
    log_level: Optional[str] = typer.Option(
        None, "--log-level", help="Explicit log level (DEBUG, INFO, WARNING, ERROR)"
    ),
    config_file: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Configuration file (YAML)"
    ),
    log_file: Optional[Path] = typer.Option(
        None, "--log-file", help="Also write JSON log lines to this file"
    ),
) -> None:
    """Solution Installer: clone, reconcile env files, deploy with Docker."""
    if verbose and log_level is not None:
        console.print("[red]Error: --verbose and --log-level are mutually exclusive[/red]")
        raise typer.Exit(1)

    options = GlobalCliOptions(
        verbose=verbose,
        config_file=config_file,
        log_level=_resolve_log_level(verbose, log_level),
        log_file=log_file,
    )
    ctx.ensure_object(dict)
    ctx.obj["cli_options"] = options

    configure_logging(level=options.log_level, enable_console=True, enable_json=False)
    if options.log_file is not None:
        add_file_logging(options.log_file)


@app.command()
def version() -> None:
    """Show installer and dependency versions."""
    table = Table(title="Solution Installer Versions")
    table.add_column("Component", style="cyan")
    table.add_column("Version", style="green")
    table.add_row("solution-installer", __version__)
    for package in _REPORTED_PACKAGES:
        try:
            table.add_row(package, metadata.version(package))
        except metadata.PackageNotFoundError:
            table.add_row(package, "[red]not installed[/red]")
    console.print(table)


@app.command()
def config(ctx: typer.Context) -> None:
    """Show the effective configuration (file, environment and defaults)."""
    options: GlobalCliOptions = ctx.obj["cli_options"]
    try:
        current = load_config(config_file=options.config_file)
    except InstallerError as e:
        console.print(f"[red]Error getting configuration: {e}[/red]")
        raise typer.Exit(1)

    settings = current.deployment_settings()
    rows = [
        ("Workspace Directory", str(current.workspace_dir)),
        ("Root Env File", str(settings.root_env_file)),
        ("Registry File", str(current.registry_file or "-")),
        ("Inline Solutions", str(len(current.solutions))),
        ("Docker Network", settings.network_name),
        ("Working Env File", settings.working_env_name),
        ("Example Env File", settings.example_env_name),
        ("Temp Env File", settings.temp_env_name),
        ("Compose Version", current.compose.version),
        ("Compose Install Path", str(current.compose.install_path)),
        (
            "Command Timeout",
            f"{current.command_timeout}s" if current.command_timeout else "none",
        ),
    ]
    table = Table(title="Solution Installer Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")
    for name, value in rows:
        table.add_row(name, value)
    console.print(table)


@app.command()
def detect(
    repo_path: Path = typer.Argument(..., help="Checked-out repository directory"),
) -> None:
    """Show how a checkout would be deployed."""
    if not repo_path.is_dir():
        console.print(f"[red]Not a directory: {repo_path}[/red]")
        raise typer.Exit(1)

    structure = detect_repo_structure(repo_path)
    table = Table(title=f"Repository Structure: {repo_path}")
    table.add_column("Descriptor", style="cyan")
    table.add_column("Found", style="green")
    table.add_row("Compose descriptor", structure.compose_file_name or "no")
    table.add_row("Dockerfile", "yes" if structure.has_dockerfile else "no")
    console.print(table)

    if not structure.is_deployable:
        console.print("[red]No deployable descriptor found[/red]")
        raise typer.Exit(1)


def cli_main() -> None:
    """Console script entry point."""
    try:
        app()
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/yellow]")
        sys.exit(130)
    except (RuntimeError, OSError, ValueError) as e:
        logger.error("Unexpected error: %s", e)
        console.print(f"[red]Unexpected error: {e}[/red]")
        sys.exit(1)
    finally:
        shutdown_logging()


if __name__ == "__main__":
    cli_main()
