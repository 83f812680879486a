"""Locating, and if needed installing, a compose-capable tool."""

import platform
from pathlib import Path
from typing import Optional, Tuple

import requests

from ..core.errors import ExecutionError
from ..core.log import get_logger
from ..core.protocols import CommandRunner
from ..core.types import ComposeToolConfig
from ..utils import print_status
from ..utils.filesystem import safe_remove

logger = get_logger(__name__)

# (probe command, tool invocation) in probe order
COMPOSE_PROBES: Tuple[Tuple[str, str], ...] = (
    ("docker-compose --version", "docker-compose"),
    ("docker compose version", "docker compose"),
)
DEFAULT_COMPOSE_TOOL = "docker-compose"


class ComposeToolResolver:
    """Finds a working compose command, installing the standalone binary if none."""

    def __init__(
        self,
        runner: CommandRunner,
        config: Optional[ComposeToolConfig] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self._runner = runner
        self._config = config or ComposeToolConfig()
        # Without an injected session, each install opens and closes its own
        self._session = session

    def probe(self) -> Optional[str]:
        """Return the first compose invocation that answers, or None."""
        for probe_command, tool in COMPOSE_PROBES:
            try:
                self._runner.run(probe_command)
            except ExecutionError as e:
                logger.debug("Compose probe %r failed: %s", probe_command, e)
                continue
            logger.debug("Compose tool available as %r", tool)
            return tool
        return None

    def ensure_available(self) -> str:
        """Return the compose invocation to use.

        When no variant answers, an install is attempted; its failure is
        tolerated and the standalone ``docker-compose`` name is returned so
        the subsequent ``up`` surfaces the real error.
        """
        tool = self.probe()
        if tool is not None:
            return tool
        if not self.install():
            logger.warning(
                "No compose tool found and installation failed; trying %r anyway",
                DEFAULT_COMPOSE_TOOL,
            )
        return DEFAULT_COMPOSE_TOOL

    def download_url(self) -> str:
        return self._config.download_url_template.format(
            version=self._config.version,
            system=platform.system(),
            machine=platform.machine(),
        )

    def install(self) -> bool:
        """Download the standalone compose binary. Never raises."""
        url = self.download_url()
        target = Path(self._config.install_path)
        partial = target.with_name(f"{target.name}.download")
        print_status("Installing Docker Compose...", prefix="📦")
        logger.info("Downloading compose %s from %s", self._config.version, url)
        try:
            if self._session is not None:
                self._download(self._session, url, partial)
            else:
                with requests.Session() as session:
                    self._download(session, url, partial)
            partial.chmod(0o755)
            partial.replace(target)
        except (requests.RequestException, OSError) as e:
            safe_remove(partial)
            logger.warning("Docker Compose installation failed, continuing: %s", e)
            return False

        print_status("Docker Compose installed successfully", prefix="✅")
        return True

    def _download(self, session: requests.Session, url: str, partial: Path) -> None:
        with session.get(
            url, stream=True, timeout=self._config.download_timeout
        ) as response:
            response.raise_for_status()
            partial.parent.mkdir(parents=True, exist_ok=True)
            with open(partial, "wb") as fh:
                for chunk in response.iter_content(chunk_size=1 << 16):
                    if chunk:
                        fh.write(chunk)
