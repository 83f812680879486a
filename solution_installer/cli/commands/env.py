"""Env file CLI commands."""

from pathlib import Path
import typer
from rich.console import Console
from rich.table import Table
from ...core.errors import InstallerError
from ...deployment.env_merger import load_env_file, merge_files

console = Console()
env_app = typer.Typer(help="Work with env files")


@env_app.command("merge")
def merge_env(
    root_env: Path = typer.Argument(..., help="Root env file (wins on shared keys)"),
    local_env: Path = typer.Argument(..., help="Repository env file"),
    output: Path = typer.Argument(..., help="Where to write the merged file"),
) -> None:
    """Merge a root and a local env file into a new file."""
    try:
        merged = merge_files(root_env, local_env, output)
    except InstallerError as e:
        console.print(f"[red]Merge failed: {e}[/red]")
        raise typer.Exit(1)
    console.print(f"[green]Wrote {len(merged)} variables to {output}[/green]")


@env_app.command("show")
def show_env(
    env_file: Path = typer.Argument(..., help="Env file to parse"),
    reveal: bool = typer.Option(False, "--reveal", help="Print values unmasked"),
) -> None:
    """Show the variables an env file defines, values masked by default."""
    try:
        variables = load_env_file(env_file)
    except InstallerError as e:
        console.print(f"[red]Cannot read {env_file}: {e}[/red]")
        raise typer.Exit(1)

    table = Table(title=str(env_file))
    table.add_column("Key", style="cyan")
    table.add_column("Value", style="green")
    for key, value in variables.items():
        if reveal or not value:
            shown = value
        else:
            shown = "***"
        table.add_row(key, shown)
    console.print(table)
