"""External command execution for git, docker and compose invocations."""

import subprocess
import time
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

import psutil

from .errors import ExecutionError, ProcessTimeoutError
from .log import get_logger, log_command_event

logger = get_logger(__name__)

SHELL = "sh"


@dataclass(frozen=True)
class CommandResult:
    """Result of a successful command."""

    command: str
    exit_code: int
    duration: float


class ProcessRunner:
    """Runs shell commands one at a time with live, unbuffered output.

    The child inherits this process's stdout and stderr. A non-zero exit
    raises ExecutionError with the exit code; a command that cannot be
    started raises ExecutionError carrying the spawn failure. There are no
    retries at this layer.
    """

    def run(self, command: str, cwd: Optional[Path] = None) -> CommandResult:
        """Run a shell command and wait for it to finish."""
        start_time = time.time()
        log_command_event(
            logger, "exec.start", command=command, cwd=str(cwd) if cwd else None
        )
        try:
            process = subprocess.Popen(self._argv(command), cwd=cwd)
        except (OSError, subprocess.SubprocessError, ValueError) as e:
            log_command_event(logger, "exec.spawn_failed", command=command, error=str(e))
            raise ExecutionError(
                f"Failed to start command: {command}: {e}",
                command=command,
                spawn_failure=str(e),
            ) from e

        exit_code = self._wait(process, command)
        duration = time.time() - start_time

        if exit_code != 0:
            log_command_event(
                logger,
                "exec.failed",
                command=command,
                exit_code=exit_code,
                duration=duration,
            )
            raise ExecutionError(
                f"Command failed with exit code {exit_code}: {command}",
                command=command,
                exit_code=exit_code,
                details={"duration": duration},
            )

        log_command_event(logger, "exec.ok", command=command, duration=duration)
        return CommandResult(command=command, exit_code=exit_code, duration=duration)

    def _argv(self, command: str) -> List[str]:
        return [SHELL, "-c", command]

    def _wait(self, process: subprocess.Popen, command: str) -> int:
        return process.wait()


class BoundedProcessRunner(ProcessRunner):
    """ProcessRunner that kills the command's process tree after a timeout."""

    def __init__(self, timeout: float, kill_grace: float = 5.0) -> None:
        if timeout <= 0:
            raise ValueError(f"Timeout must be positive: {timeout}")
        self._timeout = timeout
        self._kill_grace = kill_grace

    @property
    def timeout(self) -> float:
        return self._timeout

    def _wait(self, process: subprocess.Popen, command: str) -> int:
        try:
            return process.wait(timeout=self._timeout)
        except subprocess.TimeoutExpired as e:
            log_command_event(
                logger, "exec.timeout", command=command, timeout=self._timeout
            )
            kill_process_tree(process.pid, timeout=self._kill_grace)
            try:
                process.wait(timeout=self._kill_grace)
            except subprocess.TimeoutExpired:
                logger.error("Process %s survived SIGKILL", process.pid)
            raise ProcessTimeoutError(
                f"Command timed out after {self._timeout}s: {command}",
                command=command,
                timeout=self._timeout,
            ) from e


def kill_process_tree(root_pid: int, timeout: float = 5.0) -> bool:
    """Kill a process and all of its descendants.

    Returns:
        True if every process in the tree is gone
    """
    try:
        root = psutil.Process(root_pid)
        procs = [root] + root.children(recursive=True)
    except psutil.NoSuchProcess:
        return True
    except psutil.Error as e:
        logger.error("Cannot inspect process tree rooted at %s: %s", root_pid, e)
        return False

    logger.debug("Killing %d process(es) rooted at PID %s", len(procs), root_pid)
    for proc in procs:
        try:
            proc.kill()
        except psutil.NoSuchProcess:
            pass
        except psutil.AccessDenied as e:
            logger.warning("Access denied killing PID %s: %s", proc.pid, e)

    _, alive = psutil.wait_procs(procs, timeout=timeout)
    if alive:
        logger.warning(
            "Processes still alive after kill: %s", [p.pid for p in alive]
        )
    return not alive


def create_runner(command_timeout: Optional[float] = None) -> ProcessRunner:
    """Create the runner matching the configured timeout policy."""
    if command_timeout is None:
        return ProcessRunner()
    return BoundedProcessRunner(command_timeout)
