"""Phase tracking for a single installation attempt."""

import time
from typing import List, Optional, Tuple

from ..core.enums import InstallPhase
from ..core.log import get_logger, set_log_context

logger = get_logger(__name__)

_TERMINAL_PHASES = frozenset({InstallPhase.DONE, InstallPhase.FAILED})


class InstallProgress:
    """Records the phases an installation moves through.

    The current phase is mirrored into the logging context so every log line
    emitted during a phase carries it.
    """

    def __init__(self, solution_type: Optional[str] = None) -> None:
        self.solution_type = solution_type
        self._history: List[Tuple[InstallPhase, float]] = []

    @property
    def phase(self) -> Optional[InstallPhase]:
        return self._history[-1][0] if self._history else None

    @property
    def phases(self) -> List[InstallPhase]:
        """Phases entered so far, in order (copy)."""
        return [phase for phase, _ in self._history]

    @property
    def finished(self) -> bool:
        return self.phase in _TERMINAL_PHASES

    def enter(self, phase: InstallPhase) -> None:
        """Move to ``phase``. Terminal phases cannot be left."""
        if self.finished:
            raise RuntimeError(
                f"Installation already finished in phase {self.phase.value}"
            )
        self._history.append((phase, time.time()))
        set_log_context(phase=phase.value)
        logger.debug("Installation %s entered phase %s", self.solution_type, phase.value)

    def fail(self) -> None:
        """Mark the attempt failed unless it already finished."""
        if not self.finished:
            self.enter(InstallPhase.FAILED)
