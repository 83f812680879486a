"""Core installer components."""

from .value_objects import RepoStructure

__all__ = ["RepoStructure"]
