"""Protocol definitions for collaborator interfaces.

Protocols describe what a collaborator does so that deployment code can be
driven by the real process runner in production and by recording fakes in
tests.
"""

from pathlib import Path
from typing import Optional, Protocol

from .process import CommandResult


class CommandRunner(Protocol):
    """Runs one shell command to completion."""

    def run(self, command: str, cwd: Optional[Path] = None) -> CommandResult:
        """Run ``command`` and return its result.

        Raises:
            ExecutionError: On non-zero exit or when the command cannot start
        """
