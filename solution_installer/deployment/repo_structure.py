"""Classification of a checkout's deployment shape."""

from pathlib import Path
from typing import Optional, Sequence

from ..core.log import get_logger
from ..core.value_objects import RepoStructure

logger = get_logger(__name__)

# Checked in this order; the first match wins.
COMPOSE_FILE_NAMES = (
    "docker-compose.yml",
    "docker-compose.yaml",
    "compose.yml",
    "compose.yaml",
)
BUILD_DESCRIPTOR_NAME = "Dockerfile"


class RepoStructureDetector:
    """Detects compose and Dockerfile descriptors at a repository root."""

    def __init__(
        self,
        compose_file_names: Sequence[str] = COMPOSE_FILE_NAMES,
        build_descriptor_name: str = BUILD_DESCRIPTOR_NAME,
    ) -> None:
        self.compose_file_names = tuple(compose_file_names)
        self.build_descriptor_name = build_descriptor_name

    def detect(self, directory: Path) -> RepoStructure:
        """Inspect ``directory`` and return its structure.

        A structure with neither descriptor is returned as-is; callers decide
        whether that is an error.
        """
        directory = Path(directory)
        compose_file = self._find_compose_file(directory)
        has_dockerfile = (directory / self.build_descriptor_name).is_file()

        structure = RepoStructure(
            has_compose_descriptor=compose_file is not None,
            has_dockerfile=has_dockerfile,
            compose_file_name=compose_file,
        )
        logger.debug("Detected repository structure %s in %s", structure, directory)
        return structure

    def _find_compose_file(self, directory: Path) -> Optional[str]:
        for name in self.compose_file_names:
            if (directory / name).is_file():
                return name
        return None


_detector = RepoStructureDetector()


def detect_repo_structure(directory: Path) -> RepoStructure:
    """Detect the deployment shape of ``directory`` with default descriptor names."""
    return _detector.detect(directory)
