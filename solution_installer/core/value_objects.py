"""Domain primitives derived from inspecting a checkout."""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class RepoStructure:
    """Deployment shape of a checked-out repository.

    Computed fresh for every installation attempt; the repository contents
    can change between runs.
    """

    has_compose_descriptor: bool = False
    has_dockerfile: bool = False
    compose_file_name: Optional[str] = None

    def __post_init__(self) -> None:
        if self.has_compose_descriptor != (self.compose_file_name is not None):
            raise ValueError(
                "compose_file_name must be set exactly when a compose descriptor exists"
            )

    @property
    def is_deployable(self) -> bool:
        return self.has_compose_descriptor or self.has_dockerfile

    def __str__(self) -> str:
        if self.has_compose_descriptor:
            return f"compose[{self.compose_file_name}]"
        if self.has_dockerfile:
            return "dockerfile"
        return "none"
