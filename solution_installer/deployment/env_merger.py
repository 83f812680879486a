"""Reconciliation of a root env file with a repository's own env file.

Merge policy: a key present in the root source always keeps the root value,
even when that value is empty. Keys only present in the local source are
carried through unchanged. The result lists root keys first in root order,
then local-only keys in local order.

Root-wins-even-when-empty must change together with the env restore logic
in deployment_strategy, never on its own.
"""

from pathlib import Path
from typing import Mapping

from ..core.errors import FilesystemError
from ..core.log import get_logger, log_event
from ..core.types import EnvironmentMap
from ..utils.filesystem import atomic_write, read_text_if_exists

logger = get_logger(__name__)


def parse_env(text: str) -> EnvironmentMap:
    """Parse ``KEY=VALUE`` lines.

    Blank lines, ``#`` comments and lines without ``=`` are skipped. Only the
    first ``=`` separates key from value, so values may contain ``=``.
    """
    variables: EnvironmentMap = {}
    for line in text.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#") or "=" not in stripped:
            continue
        key, _, value = stripped.partition("=")
        variables[key.strip()] = value.strip()
    return variables


def merge(
    root_source: Mapping[str, str], local_source: Mapping[str, str]
) -> EnvironmentMap:
    """Merge two environment maps without modifying either."""
    merged: EnvironmentMap = dict(root_source)
    for key, value in local_source.items():
        if key not in root_source:
            merged[key] = value
    return merged


def render_env(variables: Mapping[str, str]) -> str:
    """Render an environment map as newline-joined ``KEY=VALUE`` lines."""
    return "\n".join(f"{key}={value}" for key, value in variables.items())


def load_env_file(path: Path) -> EnvironmentMap:
    """Parse an env file; a missing file is an empty map."""
    content = read_text_if_exists(path)
    if content is None:
        logger.debug("Env file %s not found, treating as empty", path)
        return {}
    return parse_env(content)


def merge_files(root_path: Path, local_path: Path, output_path: Path) -> EnvironmentMap:
    """Merge two env files into a side file.

    The output must be a path distinct from both sources; the sources are
    only read.

    Returns:
        The merged environment map that was written
    """
    output = Path(output_path).resolve()
    if output in (Path(root_path).resolve(), Path(local_path).resolve()):
        raise FilesystemError(
            f"Merge output {output_path} must differ from its sources",
            details={"root": str(root_path), "local": str(local_path)},
        )

    root_vars = load_env_file(root_path)
    local_vars = load_env_file(local_path)
    merged = merge(root_vars, local_vars)
    atomic_write(output, render_env(merged))

    overridden = sum(1 for key in local_vars if key in root_vars)
    log_event(
        logger,
        "env",
        f"Merged {len(merged)} environment variables "
        f"({overridden} taken from root over local)",
        merged_count=len(merged),
        overridden_count=overridden,
        output=str(output_path),
    )
    return merged
