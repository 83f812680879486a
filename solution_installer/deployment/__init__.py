"""Solution deployment: env reconciliation, structure detection and strategies."""

from .container_lifecycle import CleanupReport, ContainerLifecycleManager
from .deployment_strategy import (
    DeploymentStrategySelector,
    MultiContainerStrategy,
    SingleContainerStrategy,
)
from .installation_orchestrator import InstallationOrchestrator
from .repo_structure import RepoStructureDetector
from .solution_registry import SolutionRegistry

__all__ = [
    "CleanupReport",
    "ContainerLifecycleManager",
    "DeploymentStrategySelector",
    "InstallationOrchestrator",
    "MultiContainerStrategy",
    "RepoStructureDetector",
    "SingleContainerStrategy",
    "SolutionRegistry",
]
