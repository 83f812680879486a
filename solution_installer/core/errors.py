"""Error hierarchy for the solution installer."""

from typing import Optional, Dict, Any


class InstallerError(Exception):
    """Base exception for all installer errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


# Configuration Errors
class ConfigurationError(InstallerError):
    """Unknown solution type, unsupported install type or invalid settings."""


# Process Errors
class ExecutionError(InstallerError):
    """External command exited non-zero or could not be started."""

    def __init__(self, message: str, command: str, exit_code: Optional[int] = None,
                 spawn_failure: Optional[str] = None,
                 details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, details)
        self.command = command
        self.exit_code = exit_code
        self.spawn_failure = spawn_failure

    @property
    def spawned(self) -> bool:
        """Whether the process started at all."""
        return self.spawn_failure is None


class ProcessTimeoutError(ExecutionError):
    """External command exceeded its time budget and was killed."""

    def __init__(self, message: str, command: str, timeout: float,
                 details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, command, details=details)
        self.timeout = timeout


# Repository Errors
class StructureError(InstallerError):
    """Repository has no deployable descriptor."""

    def __init__(self, message: str, repo_path: Optional[str] = None,
                 details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, details)
        self.repo_path = repo_path


# Filesystem and IO Errors
class FilesystemError(InstallerError):
    """Filesystem operation error."""


class PathError(FilesystemError):
    """Path resolution or validation error."""


class AtomicWriteError(FilesystemError):
    """Atomic write operation failed."""
