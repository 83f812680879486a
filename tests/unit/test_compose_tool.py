"""Tests for compose tool discovery and installation."""

import os
import stat

import requests
from pathlib import Path
from unittest.mock import MagicMock, patch

from solution_installer.core.types import ComposeToolConfig
from solution_installer.deployment.compose_tool import (
    DEFAULT_COMPOSE_TOOL,
    ComposeToolResolver,
)
from tests.conftest_helpers import RecordingRunner


def _session_returning(chunks):
    response = MagicMock()
    response.iter_content.return_value = chunks
    response.__enter__.return_value = response
    session = MagicMock()
    session.get.return_value = response
    return session, response


class TestProbe:
    """Test compose tool probing."""

    def test_standalone_binary_preferred(self) -> None:
        """Test docker-compose is used when it answers."""
        runner = RecordingRunner()

        tool = ComposeToolResolver(runner, session=MagicMock()).probe()

        assert tool == "docker-compose"
        assert runner.commands == ["docker-compose --version"]

    def test_falls_back_to_plugin(self) -> None:
        """Test docker compose plugin is used when the binary is missing."""
        runner = RecordingRunner(fail_on=["docker-compose --version"])

        tool = ComposeToolResolver(runner, session=MagicMock()).probe()

        assert tool == "docker compose"
        assert runner.commands == ["docker-compose --version", "docker compose version"]

    def test_nothing_available(self) -> None:
        """Test None when no variant answers."""
        runner = RecordingRunner(fail_on=["docker-compose", "docker compose"])

        assert ComposeToolResolver(runner, session=MagicMock()).probe() is None


class TestInstall:
    """Test installing the standalone compose binary."""

    def test_download_url(self, tmp_path: Path) -> None:
        """Test the release URL is built from version and platform."""
        config = ComposeToolConfig(version="v2.20.2", install_path=tmp_path / "dc")
        resolver = ComposeToolResolver(RecordingRunner(), config, session=MagicMock())

        with patch("platform.system", return_value="Linux"), patch(
            "platform.machine", return_value="x86_64"
        ):
            url = resolver.download_url()

        assert url == (
            "https://github.com/docker/compose/releases/download/"
            "v2.20.2/docker-compose-Linux-x86_64"
        )

    def test_install_writes_executable(self, tmp_path: Path) -> None:
        """Test a successful download lands executable at the install path."""
        target = tmp_path / "bin" / "docker-compose"
        config = ComposeToolConfig(install_path=target, download_timeout=5)
        session, response = _session_returning([b"#!/bin/sh\n", b"", b"exit 0\n"])

        installed = ComposeToolResolver(RecordingRunner(), config, session).install()

        assert installed is True
        assert target.read_bytes() == b"#!/bin/sh\nexit 0\n"
        assert os.stat(target).st_mode & stat.S_IXUSR
        assert not (tmp_path / "bin" / "docker-compose.download").exists()
        response.raise_for_status.assert_called_once()
        assert session.get.call_args.kwargs == {"stream": True, "timeout": 5}

    def test_install_closes_its_own_session(self, tmp_path: Path) -> None:
        """Test a session opened for the download is closed afterwards."""
        target = tmp_path / "docker-compose"
        config = ComposeToolConfig(install_path=target)
        session, _ = _session_returning([b"bin"])
        session.__enter__.return_value = session

        with patch(
            "solution_installer.deployment.compose_tool.requests.Session",
            return_value=session,
        ) as session_cls:
            installed = ComposeToolResolver(RecordingRunner(), config).install()

        assert installed is True
        assert target.read_bytes() == b"bin"
        session_cls.assert_called_once_with()
        session.__exit__.assert_called_once()

    def test_install_failure_is_tolerated(self, tmp_path: Path) -> None:
        """Test HTTP errors are swallowed and reported as False."""
        target = tmp_path / "docker-compose"
        config = ComposeToolConfig(install_path=target)
        session = MagicMock()
        session.get.side_effect = requests.ConnectionError("offline")

        installed = ComposeToolResolver(RecordingRunner(), config, session).install()

        assert installed is False
        assert not target.exists()

    def test_http_status_failure_leaves_no_partial_file(self, tmp_path: Path) -> None:
        """Test a bad status code does not leave a partial download."""
        target = tmp_path / "docker-compose"
        config = ComposeToolConfig(install_path=target)
        session, response = _session_returning([])
        response.raise_for_status.side_effect = requests.HTTPError("404")

        installed = ComposeToolResolver(RecordingRunner(), config, session).install()

        assert installed is False
        assert list(tmp_path.iterdir()) == []


class TestEnsureAvailable:
    """Test ensure_available."""

    def test_returns_probed_tool_without_installing(self) -> None:
        """Test no download happens when a tool answers."""
        session = MagicMock()
        resolver = ComposeToolResolver(RecordingRunner(), session=session)

        assert resolver.ensure_available() == "docker-compose"
        session.get.assert_not_called()

    def test_installs_when_missing(self, tmp_path: Path) -> None:
        """Test a missing tool triggers installation."""
        runner = RecordingRunner(fail_on=["docker-compose", "docker compose"])
        config = ComposeToolConfig(install_path=tmp_path / "docker-compose")
        session, _ = _session_returning([b"bin"])

        tool = ComposeToolResolver(runner, config, session).ensure_available()

        assert tool == DEFAULT_COMPOSE_TOOL
        assert (tmp_path / "docker-compose").exists()

    def test_install_failure_still_returns_default(self, tmp_path: Path) -> None:
        """Test a failed installation falls through to the default tool."""
        runner = RecordingRunner(fail_on=["docker-compose", "docker compose"])
        config = ComposeToolConfig(install_path=tmp_path / "docker-compose")
        session = MagicMock()
        session.get.side_effect = requests.Timeout("slow")

        tool = ComposeToolResolver(runner, config, session).ensure_available()

        assert tool == DEFAULT_COMPOSE_TOOL
