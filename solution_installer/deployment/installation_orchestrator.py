"""Top-level installation sequence: fetch, clean, deploy, report."""

import shlex
import time
from pathlib import Path
from typing import Optional

from ..core.log import get_logger, log_context, log_install_event
from ..core.process import create_runner
from ..core.protocols import CommandRunner
from ..core.types import DeploymentResult, DeploymentSettings, InstallerConfig, SolutionConfig
from ..core.enums import InstallPhase
from ..utils import print_error, print_status
from ..utils.filesystem import force_remove
from .compose_tool import ComposeToolResolver
from .container_lifecycle import ContainerLifecycleManager
from .deployment_strategy import DeploymentStrategySelector
from .progress import InstallProgress
from .solution_registry import SolutionRegistry

logger = get_logger(__name__)


def clone_command(config: SolutionConfig, repo_path: Path) -> str:
    return (
        f"git clone -b {shlex.quote(config.branch_name)} "
        f"{shlex.quote(config.repo_url)} {shlex.quote(str(repo_path))}"
    )


class InstallationOrchestrator:
    """Installs one solution per call, strictly sequentially.

    Concurrent calls for the same solution share a checkout path and a
    container name and must be serialized by the caller.
    """

    def __init__(
        self,
        registry: SolutionRegistry,
        runner: CommandRunner,
        settings: DeploymentSettings,
        workspace_dir: Path,
        selector: Optional[DeploymentStrategySelector] = None,
        lifecycle: Optional[ContainerLifecycleManager] = None,
    ) -> None:
        self._registry = registry
        self._runner = runner
        self._settings = settings
        self._workspace_dir = Path(workspace_dir)
        self._selector = selector or DeploymentStrategySelector(runner, settings)
        self._lifecycle = lifecycle or ContainerLifecycleManager(runner)
        self._last_progress: Optional[InstallProgress] = None

    @classmethod
    def from_config(
        cls,
        config: InstallerConfig,
        registry: Optional[SolutionRegistry] = None,
        runner: Optional[CommandRunner] = None,
    ) -> "InstallationOrchestrator":
        """Wire an orchestrator from installer configuration.

        Solutions from ``registry_file`` override inline ``solutions``;
        an explicit ``registry`` overrides both.
        """
        if registry is None:
            registry = SolutionRegistry.from_config(config)
        runner = runner or create_runner(config.command_timeout)
        settings = config.deployment_settings()
        selector = DeploymentStrategySelector(
            runner,
            settings,
            compose_resolver=ComposeToolResolver(runner, config.compose),
        )
        return cls(
            registry,
            runner,
            settings,
            config.workspace_dir,
            selector=selector,
        )

    @property
    def registry(self) -> SolutionRegistry:
        return self._registry

    @property
    def last_progress(self) -> Optional[InstallProgress]:
        """Phase history of the most recent install call."""
        return self._last_progress

    def repo_path(self, config: SolutionConfig) -> Path:
        return self._workspace_dir / config.repo_name

    def install(self, solution_type: str) -> DeploymentResult:
        """Install ``solution_type`` and return where it is running.

        Every step's failure aborts the rest. Cleanup of old containers is
        the only step whose errors are swallowed.

        Raises:
            ConfigurationError: Unknown solution type or unsupported install type
            ExecutionError: A git/docker/compose command failed
            StructureError: The checkout has nothing deployable
            FilesystemError: An env file or checkout path could not be handled

        Errors of any other kind from the runner or a strategy are re-raised
        unchanged, after the progress is marked failed.
        """
        progress = InstallProgress(solution_type)
        self._last_progress = progress
        start_time = time.time()

        with log_context(solution_type=solution_type):
            try:
                config = self._registry.get(solution_type)
                strategy = self._selector.select(config)
                repo_path = self.repo_path(config)

                log_install_event(
                    logger,
                    "start",
                    solution_type,
                    install_type=config.install_type.value,
                    repo_path=str(repo_path),
                )
                print_status(
                    f"Installing solution: {solution_type} ({config.install_type.value})",
                    prefix="✅",
                )

                progress.enter(InstallPhase.FETCHING)
                print_status("Cleaning up existing repository...", prefix="🧹")
                force_remove(repo_path)
                print_status("Cloning repository...", prefix="📥")
                self._runner.run(clone_command(config, repo_path))

                progress.enter(InstallPhase.CLEANING_UP)
                self._lifecycle.cleanup(config)

                strategy.deploy(config, repo_path, progress)
                progress.enter(InstallPhase.DONE)
            except Exception as e:
                progress.fail()
                logger.error("Installation of %s failed: %s", solution_type, e)
                print_error(f"Installation failed: {e}")
                raise

            log_install_event(
                logger,
                "done",
                solution_type,
                port=config.port,
                duration=time.time() - start_time,
            )

        print_status(
            f"Installation completed! Solution running at http://localhost:{config.port}",
            prefix="✅",
        )
        return DeploymentResult(
            success=True, port=config.port, solution_type=solution_type
        )
