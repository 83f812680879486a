"""Install CLI command."""

from pathlib import Path
from typing import Any, Dict, Optional
import typer
from pydantic import BaseModel, Field, field_validator
from rich.console import Console
from ...core.config import load_config
from ...core.errors import InstallerError
from ...core.log import get_logger
from ...deployment.installation_orchestrator import InstallationOrchestrator

console = Console()
logger = get_logger(__name__)

_HELP = {
    "solution_type": "Solution type to install (a key of the solution registry)",
    "workspace": "Directory that holds checkouts and the root env file",
    "registry": "YAML file mapping solution types to their configuration",
    "root_env": "Root env file whose values override each repository's",
    "network": "Docker network single containers are attached to",
    "timeout": "Kill any external command running longer than this (seconds)",
}


class InstallOptions(BaseModel):
    """Options of the install command."""

    solution_type: str = Field(..., description=_HELP["solution_type"])
    workspace: Optional[Path] = Field(None, description=_HELP["workspace"])
    registry: Optional[Path] = Field(None, description=_HELP["registry"])
    root_env: Optional[Path] = Field(None, description=_HELP["root_env"])
    network: Optional[str] = Field(None, description=_HELP["network"])
    timeout: Optional[float] = Field(None, description=_HELP["timeout"])

    @field_validator("timeout")
    @classmethod
    def validate_timeout(cls, v):
        if v is not None and v <= 0:
            raise ValueError("Timeout must be positive")
        return v

    def config_overrides(self) -> Dict[str, Any]:
        return {
            "workspace_dir": self.workspace,
            "registry_file": self.registry,
            "root_env_file": self.root_env,
            "network_name": self.network,
            "command_timeout": self.timeout,
        }


def install(
    ctx: typer.Context,
    solution_type: str = typer.Argument(..., help=_HELP["solution_type"]),
    workspace: Optional[Path] = typer.Option(
        None, "--workspace", "-w", help=_HELP["workspace"]
    ),
    registry: Optional[Path] = typer.Option(
        None, "--registry", "-r", help=_HELP["registry"]
    ),
    root_env: Optional[Path] = typer.Option(None, "--root-env", help=_HELP["root_env"]),
    network: Optional[str] = typer.Option(None, "--network", help=_HELP["network"]),
    timeout: Optional[float] = typer.Option(None, "--timeout", help=_HELP["timeout"]),
) -> None:
    """Clone a solution and deploy it with Docker."""
    try:
        options = InstallOptions(
            solution_type=solution_type,
            workspace=workspace,
            registry=registry,
            root_env=root_env,
            network=network,
            timeout=timeout,
        )
    except ValueError as e:
        console.print(f"[red]Invalid options: {e}[/red]")
        raise typer.Exit(1)

    cli_options = (ctx.obj or {}).get("cli_options")
    config_file = cli_options.config_file if cli_options else None

    try:
        config = load_config(config_file=config_file, **options.config_overrides())
        orchestrator = InstallationOrchestrator.from_config(config)
        result = orchestrator.install(options.solution_type)
    except InstallerError as e:
        logger.debug("Install command failed", exc_info=True)
        console.print(f"[red]Installation failed: {e}[/red]")
        raise typer.Exit(1)

    console.print(
        f"[green]{result.solution_type} is running on port {result.port}[/green]"
    )
