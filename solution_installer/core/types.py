"""Core type definitions for the solution installer."""

from pathlib import Path
from typing import Dict, FrozenSet, Optional, Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from .enums import InstallType, INSTALL_TYPE_ALIASES

# Variable name -> value, in insertion order.
EnvironmentMap = Dict[str, str]

DEFAULT_NETWORK_NAME = "weam_app-network"
DEFAULT_TEMP_ENV_SUFFIX = ".temp"
WORKING_ENV_NAME = ".env"
EXAMPLE_ENV_NAME = ".env.example"


class SolutionConfig(BaseModel):
    """Registry entry describing one deployable solution.

    Accepts snake_case field names as well as the camelCase keys used by
    existing registry files (``repoUrl``, ``branchName``, ...).
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    repo_url: str
    branch_name: str = "main"
    repo_name: str
    install_type: InstallType
    container_name: str
    image_name: str
    port: int
    additional_ports: FrozenSet[int] = Field(default_factory=frozenset)
    env_file: Optional[str] = None

    @field_validator("install_type", mode="before")
    @classmethod
    def normalize_install_type(cls, value: Any) -> Any:
        """Map legacy ``docker``/``docker-compose`` spellings onto InstallType."""
        if isinstance(value, str):
            return INSTALL_TYPE_ALIASES.get(value.lower(), value.lower())
        return value

    @field_validator("port")
    @classmethod
    def validate_port(cls, value: int) -> int:
        if not 0 < value < 65536:
            raise ValueError(f"Port out of range: {value}")
        return value

    @field_validator("repo_name")
    @classmethod
    def validate_repo_name(cls, value: str) -> str:
        """Repo name becomes a directory under the workspace."""
        if not value or "/" in value or value in (".", ".."):
            raise ValueError(f"Invalid repository name: {value!r}")
        return value


class DeploymentResult(BaseModel):
    """Terminal output of a successful installation."""

    success: bool
    port: int
    solution_type: str


class DeploymentSettings(BaseModel):
    """Fixed names shared by the single- and multi-container paths."""

    model_config = ConfigDict(frozen=True)

    root_env_file: Path
    network_name: str = DEFAULT_NETWORK_NAME
    temp_env_suffix: str = DEFAULT_TEMP_ENV_SUFFIX
    working_env_name: str = WORKING_ENV_NAME
    example_env_name: str = EXAMPLE_ENV_NAME

    @property
    def temp_env_name(self) -> str:
        return f"{self.working_env_name}{self.temp_env_suffix}"


class ComposeToolConfig(BaseModel):
    """Where to fetch a compose binary from when none is installed."""

    version: str = "v2.20.2"
    install_path: Path = Path("/usr/local/bin/docker-compose")
    download_url_template: str = (
        "https://github.com/docker/compose/releases/download/"
        "{version}/docker-compose-{system}-{machine}"
    )
    download_timeout: float = 120.0


class InstallerConfig(BaseModel):
    """Main installer configuration."""

    workspace_dir: Path = Path("/workspace")
    root_env_file: Optional[Path] = None
    registry_file: Optional[Path] = None
    solutions: Dict[str, SolutionConfig] = Field(default_factory=dict)

    network_name: str = DEFAULT_NETWORK_NAME
    temp_env_suffix: str = DEFAULT_TEMP_ENV_SUFFIX
    working_env_name: str = WORKING_ENV_NAME
    example_env_name: str = EXAMPLE_ENV_NAME
    compose: ComposeToolConfig = Field(default_factory=ComposeToolConfig)

    # None means commands may run forever
    command_timeout: Optional[float] = None

    log_level: str = "INFO"
    log_file: Optional[Path] = None

    @model_validator(mode="after")
    def validate_config(self) -> "InstallerConfig":
        """Validate configuration without touching the filesystem."""
        from .errors import ConfigurationError

        if self.command_timeout is not None and self.command_timeout <= 0:
            raise ConfigurationError("Command timeout must be positive")
        if not self.network_name.strip():
            raise ConfigurationError("Network name cannot be empty")
        if not self.temp_env_suffix:
            raise ConfigurationError("Temp env suffix cannot be empty")
        if self.working_env_name == self.example_env_name:
            raise ConfigurationError(
                "Working env file and example env file must differ"
            )
        return self

    @property
    def effective_root_env_file(self) -> Path:
        return self.root_env_file or self.workspace_dir / WORKING_ENV_NAME

    def deployment_settings(self) -> DeploymentSettings:
        """Build the settings object handed to deployment strategies."""
        return DeploymentSettings(
            root_env_file=self.effective_root_env_file,
            network_name=self.network_name,
            temp_env_suffix=self.temp_env_suffix,
            working_env_name=self.working_env_name,
            example_env_name=self.example_env_name,
        )
