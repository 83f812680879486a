"""Core enumerations for the solution installer.

Kept apart from types.py so that low-level modules can import them without
pulling in pydantic models.
"""

from enum import Enum


class InstallType(Enum):
    """How a solution is deployed."""

    SINGLE = "single"
    MULTI = "multi"


class InstallPhase(Enum):
    """States an installation attempt moves through."""

    FETCHING = "fetching"
    CLEANING_UP = "cleaning_up"
    DETECTING_STRUCTURE = "detecting_structure"
    DEPLOYING = "deploying"
    RESTORING = "restoring"
    DONE = "done"
    FAILED = "failed"


# Spellings used by older solution registries.
INSTALL_TYPE_ALIASES = {
    "docker": InstallType.SINGLE,
    "docker-compose": InstallType.MULTI,
}
