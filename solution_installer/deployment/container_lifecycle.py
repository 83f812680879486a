"""Best-effort removal of containers left over from earlier deployments."""

import shlex
from dataclasses import dataclass, field
from typing import List

from ..core.log import get_logger
from ..core.protocols import CommandRunner
from ..core.types import SolutionConfig
from ..utils import print_status

logger = get_logger(__name__)


@dataclass
class CleanupReport:
    """Outcome of a cleanup pass.

    Cleanup never fails the installation, so ``success`` is always True;
    swallowed errors are listed in ``failures``.
    """

    commands: List[str] = field(default_factory=list)
    failures: List[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return True

    @property
    def clean(self) -> bool:
        return not self.failures


def remove_container_command(container_name: str) -> str:
    # "|| true": a missing container counts as removed
    return f"docker rm -f {shlex.quote(container_name)} || true"


def stop_port_publishers_command(port: int) -> str:
    return (
        f"docker ps -q --filter {shlex.quote(f'publish={int(port)}')} "
        "| xargs -r docker stop || true"
    )


class ContainerLifecycleManager:
    """Removes the solution's container and frees its additional ports."""

    def __init__(self, runner: CommandRunner) -> None:
        self._runner = runner

    def cleanup(self, config: SolutionConfig) -> CleanupReport:
        """Remove prior deployments of ``config``. Never raises."""
        print_status("Cleaning up existing containers...", prefix="🧹")
        report = CleanupReport()

        commands = [remove_container_command(config.container_name)]
        commands.extend(
            stop_port_publishers_command(port)
            for port in sorted(config.additional_ports)
        )

        for command in commands:
            report.commands.append(command)
            try:
                self._runner.run(command)
            except Exception as e:  # pylint: disable=broad-exception-caught
                logger.warning("Cleanup step failed (ignored): %s: %s", command, e)
                report.failures.append(f"{command}: {e}")

        if report.clean:
            logger.info("Existing containers cleaned up for %s", config.container_name)
        else:
            logger.warning(
                "Cleanup for %s finished with %d ignored failure(s)",
                config.container_name,
                len(report.failures),
            )
        return report
