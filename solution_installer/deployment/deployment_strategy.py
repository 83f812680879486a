"""Single- and multi-container deployment strategies.

Both strategies share one env-file discipline: the working env file is
reset from its example, a merged copy is written to a side file and swapped
in only for the duration of the build, and the working file is restored to
pristine content once the deployment command succeeded.
"""

import shlex
from pathlib import Path
from typing import List, Optional, Protocol

from ..core.enums import InstallPhase, InstallType
from ..core.errors import ConfigurationError, StructureError
from ..core.log import get_logger
from ..core.protocols import CommandRunner
from ..core.types import DeploymentSettings, SolutionConfig
from ..utils import print_status
from ..utils.filesystem import (
    atomic_write,
    copy_file,
    force_remove,
    list_files,
    read_text_if_exists,
)
from .compose_tool import ComposeToolResolver
from .env_merger import merge_files
from .progress import InstallProgress
from .repo_structure import RepoStructureDetector

logger = get_logger(__name__)


def build_image_command(image_name: str, repo_path: Path) -> str:
    return f"docker build -t {shlex.quote(image_name)} {shlex.quote(str(repo_path))}"


def run_container_command(config: SolutionConfig, network_name: str) -> str:
    return (
        f"docker run -d --name {shlex.quote(config.container_name)} "
        f"--network {shlex.quote(network_name)} "
        f"-p {config.port}:{config.port} {shlex.quote(config.image_name)}"
    )


def compose_up_command(compose_tool: str) -> str:
    # Run in the checkout so compose also picks up its override files
    return f"{compose_tool} up -d --build"


class DeploymentStrategy(Protocol):
    """Strategy interface for one install type."""

    def deploy(
        self,
        config: SolutionConfig,
        repo_path: Path,
        progress: Optional[InstallProgress] = None,
    ) -> None:
        """Deploy the checkout at ``repo_path``."""


class _EnvFiles:
    """Paths of the env files of one checkout."""

    def __init__(self, repo_path: Path, settings: DeploymentSettings) -> None:
        self.repo_path = Path(repo_path)
        self.settings = settings
        self.working = self.repo_path / settings.working_env_name
        self.temp = self.repo_path / settings.temp_env_name

    def merge_into_temp(self) -> None:
        merge_files(self.settings.root_env_file, self.working, self.temp)

    def swap_in_temp(self) -> None:
        copy_file(self.temp, self.working)

    def drop_temp(self) -> None:
        force_remove(self.temp)

    def example_files(self) -> List[Path]:
        """Every example env file anywhere under the checkout."""
        return list_files(
            self.repo_path, self.settings.example_env_name, recursive=True
        )

    def reset_all_from_examples(self) -> int:
        """Copy each example env file over its sibling working env file."""
        examples = self.example_files()
        for example in examples:
            copy_file(example, example.with_name(self.settings.working_env_name))
        logger.debug("Reset %d env file(s) from examples", len(examples))
        return len(examples)

    def snapshot_working(self) -> Optional[str]:
        return read_text_if_exists(self.working)

    def restore_working(self, snapshot: Optional[str]) -> None:
        if snapshot is None:
            force_remove(self.working)
        else:
            atomic_write(self.working, snapshot)


class SingleContainerStrategy:
    """Builds one image from the Dockerfile and runs it as one container."""

    def __init__(self, runner: CommandRunner, settings: DeploymentSettings) -> None:
        self._runner = runner
        self._settings = settings

    def deploy(
        self,
        config: SolutionConfig,
        repo_path: Path,
        progress: Optional[InstallProgress] = None,
    ) -> None:
        """Build and run the solution image.

        Without an ``env_file`` in the config, the working env file's
        pre-merge content (or absence) is what gets restored.
        """
        progress = progress or InstallProgress(config.repo_name)
        print_status("Installing Docker service...", prefix="🐳")
        env = _EnvFiles(repo_path, self._settings)

        example = Path(repo_path) / config.env_file if config.env_file else None
        snapshot: Optional[str] = None
        if example is not None:
            copy_file(example, env.working)
        else:
            snapshot = env.snapshot_working()

        env.merge_into_temp()
        env.swap_in_temp()

        progress.enter(InstallPhase.DEPLOYING)
        print_status("Building Docker image...", prefix="🔨")
        self._runner.run(build_image_command(config.image_name, repo_path))
        print_status("Starting container...", prefix="🚀")
        self._runner.run(run_container_command(config, self._settings.network_name))

        progress.enter(InstallPhase.RESTORING)
        if example is not None:
            copy_file(example, env.working)
        else:
            env.restore_working(snapshot)
        env.drop_temp()


class MultiContainerStrategy:
    """Runs compose for repositories with a compose descriptor.

    Falls back to the single-container path for a bare Dockerfile.
    """

    def __init__(
        self,
        runner: CommandRunner,
        settings: DeploymentSettings,
        detector: Optional[RepoStructureDetector] = None,
        compose_resolver: Optional[ComposeToolResolver] = None,
        single_strategy: Optional[SingleContainerStrategy] = None,
    ) -> None:
        self._runner = runner
        self._settings = settings
        self._detector = detector or RepoStructureDetector()
        self._compose = compose_resolver or ComposeToolResolver(runner)
        self._single = single_strategy or SingleContainerStrategy(runner, settings)

    def deploy(
        self,
        config: SolutionConfig,
        repo_path: Path,
        progress: Optional[InstallProgress] = None,
    ) -> None:
        progress = progress or InstallProgress(config.repo_name)
        print_status("Installing Docker Compose service...", prefix="🐳")
        env = _EnvFiles(repo_path, self._settings)

        env.reset_all_from_examples()
        # Only matters when the checkout has no top-level example to reset from
        snapshot = env.snapshot_working()
        env.merge_into_temp()

        progress.enter(InstallPhase.DETECTING_STRUCTURE)
        structure = self._detector.detect(repo_path)

        if structure.has_compose_descriptor:
            print_status(
                f"Using Docker Compose ({structure.compose_file_name})...", prefix="📦"
            )
            compose_tool = self._compose.ensure_available()
            env.swap_in_temp()

            progress.enter(InstallPhase.DEPLOYING)
            self._runner.run(
                compose_up_command(compose_tool),
                cwd=Path(repo_path),
            )

            progress.enter(InstallPhase.RESTORING)
            env.reset_all_from_examples()
            if not (Path(repo_path) / self._settings.example_env_name).is_file():
                env.restore_working(snapshot)
            env.drop_temp()

        elif structure.has_dockerfile:
            print_status("Using Dockerfile...", prefix="📦")
            self._single.deploy(config, repo_path, progress)

        else:
            raise StructureError(
                "No Docker configuration found in repository",
                repo_path=str(repo_path),
            )


class DeploymentStrategySelector:
    """Picks exactly one strategy per install type."""

    def __init__(
        self,
        runner: CommandRunner,
        settings: DeploymentSettings,
        detector: Optional[RepoStructureDetector] = None,
        compose_resolver: Optional[ComposeToolResolver] = None,
    ) -> None:
        self._single = SingleContainerStrategy(runner, settings)
        self._multi = MultiContainerStrategy(
            runner,
            settings,
            detector=detector,
            compose_resolver=compose_resolver,
            single_strategy=self._single,
        )

    def select(self, config: SolutionConfig) -> DeploymentStrategy:
        if config.install_type is InstallType.SINGLE:
            return self._single
        if config.install_type is InstallType.MULTI:
            return self._multi
        raise ConfigurationError(
            f"Unsupported installation type: {config.install_type}"
        )
