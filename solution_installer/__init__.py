"""
Solution Installer: clone-and-run deployment of containerized solutions.

Clones a solution's repository, reconciles its env files with a shared root
env file, removes leftovers of earlier deployments and starts it either as a
single container or through compose.
"""

__version__ = "1.0.0"

from .core.enums import InstallType, InstallPhase
from .core.types import (
    DeploymentResult,
    InstallerConfig,
    SolutionConfig,
)
from .core.value_objects import RepoStructure

__all__ = [
    "__version__",
    "InstallType",
    "InstallPhase",
    "DeploymentResult",
    "InstallerConfig",
    "SolutionConfig",
    "RepoStructure",
]
