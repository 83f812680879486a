"""Lookup of solution configurations by solution type."""

from pathlib import Path
from typing import Any, Dict, Iterator, List, Mapping, Optional

import yaml
from pydantic import ValidationError

from ..core.errors import ConfigurationError
from ..core.log import get_logger
from ..core.types import InstallerConfig, SolutionConfig

logger = get_logger(__name__)


class SolutionRegistry:
    """Immutable mapping of solution type to SolutionConfig."""

    def __init__(self, solutions: Optional[Mapping[str, SolutionConfig]] = None) -> None:
        self._solutions: Dict[str, SolutionConfig] = dict(solutions or {})

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "SolutionRegistry":
        """Build a registry from raw (e.g. YAML-loaded) entries."""
        solutions: Dict[str, SolutionConfig] = {}
        for solution_type, entry in data.items():
            if isinstance(entry, SolutionConfig):
                solutions[str(solution_type)] = entry
                continue
            if not isinstance(entry, Mapping):
                raise ConfigurationError(
                    f"Solution {solution_type!r} must be a mapping, got {type(entry).__name__}"
                )
            try:
                solutions[str(solution_type)] = SolutionConfig.model_validate(entry)
            except ValidationError as e:
                raise ConfigurationError(
                    f"Invalid configuration for solution {solution_type!r}: {e}",
                    details={"solution_type": solution_type},
                ) from e
        return cls(solutions)

    @classmethod
    def from_file(cls, registry_file: Path) -> "SolutionRegistry":
        """Load a YAML file mapping solution type to its configuration.

        A top-level ``solutions`` key is accepted as a wrapper.
        """
        try:
            with open(registry_file, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(
                f"Failed to load solution registry {registry_file}: {e}"
            ) from e
        if isinstance(data, Mapping) and isinstance(data.get("solutions"), Mapping):
            data = data["solutions"]
        if not isinstance(data, Mapping):
            raise ConfigurationError(
                f"Solution registry {registry_file} must contain a mapping"
            )
        registry = cls.from_mapping(data)
        logger.debug("Loaded %d solution(s) from %s", len(registry), registry_file)
        return registry

    @classmethod
    def from_config(cls, config: InstallerConfig) -> "SolutionRegistry":
        """Inline ``solutions`` overridden by the entries of ``registry_file``."""
        registry = cls(config.solutions)
        if config.registry_file is not None:
            registry = registry.merged_with(cls.from_file(config.registry_file))
        return registry

    def merged_with(self, other: "SolutionRegistry") -> "SolutionRegistry":
        """New registry with ``other``'s entries overriding this one's."""
        return SolutionRegistry({**self._solutions, **other._solutions})

    def get(self, solution_type: str) -> SolutionConfig:
        """Resolve a solution type.

        Raises:
            ConfigurationError: For a missing or unknown solution type
        """
        if not solution_type:
            raise ConfigurationError("Solution type is required")
        try:
            return self._solutions[solution_type]
        except KeyError:
            raise ConfigurationError(
                f"Unknown solution type: {solution_type}",
                details={"known": self.names()},
            ) from None

    def names(self) -> List[str]:
        return sorted(self._solutions)

    def __contains__(self, solution_type: object) -> bool:
        return solution_type in self._solutions

    def __iter__(self) -> Iterator[str]:
        return iter(self.names())

    def __len__(self) -> int:
        return len(self._solutions)
