"""Test configuration and fixtures for installer tests."""

import pytest
from pathlib import Path
from unittest.mock import patch

from solution_installer.core.enums import InstallType
from solution_installer.core.types import DeploymentSettings, SolutionConfig
from tests.conftest_helpers import RecordingRunner


@pytest.fixture
def runner():
    """Recording command runner that never executes anything."""
    return RecordingRunner()


@pytest.fixture
def workspace(tmp_path):
    """Workspace directory with an empty root env file."""
    root = tmp_path / "workspace"
    root.mkdir()
    (root / ".env").write_text("", encoding="utf-8")
    return root


@pytest.fixture
def settings(workspace):
    """Deployment settings rooted at the test workspace."""
    return DeploymentSettings(root_env_file=workspace / ".env")


@pytest.fixture
def single_config():
    """Single-container solution."""
    return SolutionConfig(
        repo_url="https://example.com/acme/agent.git",
        branch_name="main",
        repo_name="agent",
        install_type=InstallType.SINGLE,
        container_name="agent",
        image_name="agent-image",
        port=8001,
        additional_ports=frozenset({9001}),
        env_file=".env.example",
    )


@pytest.fixture
def multi_config():
    """Multi-container solution."""
    return SolutionConfig(
        repo_url="https://example.com/acme/stack.git",
        branch_name="release",
        repo_name="stack",
        install_type=InstallType.MULTI,
        container_name="stack",
        image_name="stack-image",
        port=8002,
        additional_ports=frozenset({5432, 6379}),
    )


@pytest.fixture
def clean_env():
    """Run with no SOLUTION_INSTALLER_* variables set."""
    with patch.dict("os.environ", {}, clear=True):
        yield
