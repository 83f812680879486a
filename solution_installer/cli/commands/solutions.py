"""Solution registry CLI commands."""

from pathlib import Path
from typing import Optional
import typer
from rich.console import Console
from rich.table import Table
from ...core.config import load_config
from ...core.errors import InstallerError
from ...deployment.solution_registry import SolutionRegistry

console = Console()
solutions_app = typer.Typer(help="Inspect the solution registry")


def _load_registry(ctx: typer.Context, registry_file: Optional[Path]) -> SolutionRegistry:
    cli_options = (ctx.obj or {}).get("cli_options")
    config_file = cli_options.config_file if cli_options else None
    try:
        config = load_config(config_file=config_file, registry_file=registry_file)
        return SolutionRegistry.from_config(config)
    except InstallerError as e:
        console.print(f"[red]Failed to load solutions: {e}[/red]")
        raise typer.Exit(1)


@solutions_app.command("list")
def list_solutions(
    ctx: typer.Context,
    registry_file: Optional[Path] = typer.Option(
        None, "--registry", "-r", help="YAML solution registry file"
    ),
) -> None:
    """List installable solutions."""
    registry = _load_registry(ctx, registry_file)
    if not len(registry):
        console.print("[yellow]No solutions configured[/yellow]")
        return

    table = Table(title="Available Solutions")
    table.add_column("Solution", style="cyan")
    table.add_column("Install Type", style="green")
    table.add_column("Port", style="yellow")
    table.add_column("Repository")
    for name in registry:
        solution = registry.get(name)
        table.add_row(
            name,
            solution.install_type.value,
            str(solution.port),
            f"{solution.repo_url} ({solution.branch_name})",
        )
    console.print(table)


@solutions_app.command("show")
def show_solution(
    ctx: typer.Context,
    solution_type: str = typer.Argument(..., help="Solution type"),
    registry_file: Optional[Path] = typer.Option(
        None, "--registry", "-r", help="YAML solution registry file"
    ),
) -> None:
    """Show the configuration of one solution."""
    registry = _load_registry(ctx, registry_file)
    try:
        solution = registry.get(solution_type)
    except InstallerError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    table = Table(title=f"Solution: {solution_type}")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Repository", solution.repo_url)
    table.add_row("Branch", solution.branch_name)
    table.add_row("Checkout Directory", solution.repo_name)
    table.add_row("Install Type", solution.install_type.value)
    table.add_row("Container", solution.container_name)
    table.add_row("Image", solution.image_name)
    table.add_row("Port", str(solution.port))
    table.add_row(
        "Additional Ports",
        ", ".join(str(p) for p in sorted(solution.additional_ports)) or "-",
    )
    table.add_row("Example Env File", solution.env_file or "-")
    console.print(table)
