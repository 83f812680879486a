"""End-to-end installation flows against a real temporary workspace.

External commands are recorded instead of executed; everything touching
the filesystem (checkout replacement, env reconciliation, restore) is real.
"""

import pytest
from pathlib import Path
from unittest.mock import MagicMock

from solution_installer.core.enums import InstallPhase
from solution_installer.core.errors import ExecutionError
from solution_installer.core.types import InstallerConfig
from solution_installer.deployment.compose_tool import ComposeToolResolver
from solution_installer.deployment.deployment_strategy import DeploymentStrategySelector
from solution_installer.deployment.installation_orchestrator import InstallationOrchestrator
from solution_installer.deployment.solution_registry import SolutionRegistry
from tests.conftest_helpers import RecordingRunner, fake_clone

pytestmark = pytest.mark.integration

REGISTRY_YAML = """\
solutions:
  weam-agent:
    repoUrl: https://example.com/acme/agent.git
    repoName: agent
    installType: docker
    containerName: agent
    imageName: agent-image
    port: 8001
    envFile: .env.example
  weam-stack:
    repoUrl: https://example.com/acme/stack.git
    branchName: release
    repoName: stack
    installType: docker-compose
    containerName: stack
    imageName: stack-image
    port: 8002
    additionalPorts: [6379, 5432]
"""

STACK_FILES = {
    "docker-compose.yml": "services:\n  api:\n    build: ./api\n",
    ".env.example": "# stack defaults\nOPENAI_API_KEY=\nDB_URL=postgres://db:5432/app?ssl=off\n",
    "api/.env.example": "API_PORT=9000\n",
    "api/Dockerfile": "FROM scratch\n",
}


@pytest.fixture
def installer(tmp_path: Path):
    """Build an orchestrator from a YAML config the way the CLI does."""
    workspace = tmp_path / "workspace"
    workspace.mkdir()
    (workspace / ".env").write_text("OPENAI_API_KEY=sk-root\nSHARED=1\n")
    registry_file = tmp_path / "solutions.yaml"
    registry_file.write_text(REGISTRY_YAML)
    config = InstallerConfig(workspace_dir=workspace, registry_file=registry_file)

    def _build(runner: RecordingRunner) -> InstallationOrchestrator:
        settings = config.deployment_settings()
        selector = DeploymentStrategySelector(
            runner,
            settings,
            compose_resolver=ComposeToolResolver(runner, config.compose, MagicMock()),
        )
        return InstallationOrchestrator(
            SolutionRegistry.from_file(registry_file),
            runner,
            settings,
            workspace,
            selector=selector,
        )

    return workspace, _build


def test_compose_install_end_to_end(installer) -> None:
    """Test a compose solution from clone to restored env files."""
    workspace, build = installer
    seen = {}

    def _capture(command, cwd):
        seen["root"] = (cwd / ".env").read_text()
        seen["api"] = (cwd / "api" / ".env").read_text()

    runner = RecordingRunner(hooks=[fake_clone(STACK_FILES), ("up -d", _capture)])
    orchestrator = build(runner)

    result = orchestrator.install("weam-stack")

    repo = workspace / "stack"
    assert result.success is True
    assert result.port == 8002
    assert runner.commands[0] == (
        f"git clone -b release https://example.com/acme/stack.git {repo}"
    )
    assert runner.commands[2:4] == [
        "docker ps -q --filter publish=5432 | xargs -r docker stop || true",
        "docker ps -q --filter publish=6379 | xargs -r docker stop || true",
    ]
    assert runner.commands[-1] == "docker-compose up -d --build"
    assert seen["root"] == (
        "OPENAI_API_KEY=sk-root\nSHARED=1\nDB_URL=postgres://db:5432/app?ssl=off"
    )
    assert seen["api"] == "API_PORT=9000\n"
    assert (repo / ".env").read_text() == STACK_FILES[".env.example"]
    assert not (repo / ".env.temp").exists()
    assert orchestrator.last_progress.phase is InstallPhase.DONE


def test_reinstall_starts_from_a_fresh_checkout(installer) -> None:
    """Test installing twice leaves the same end state."""
    workspace, build = installer
    agent_files = {".env.example": "PORT=8001\nOPENAI_API_KEY=\n", "Dockerfile": "FROM scratch\n"}

    for _ in range(2):
        runner = RecordingRunner(hooks=[fake_clone(agent_files)])
        build(runner).install("weam-agent")
        (workspace / "agent" / "scratch.log").write_text("left behind")

    runner = RecordingRunner(hooks=[fake_clone(agent_files)])
    result = build(runner).install("weam-agent")

    repo = workspace / "agent"
    assert result.port == 8001
    assert not (repo / "scratch.log").exists()
    assert (repo / ".env").read_text() == agent_files[".env.example"]
    assert (workspace / ".env").read_text() == "OPENAI_API_KEY=sk-root\nSHARED=1\n"


def test_failed_build_keeps_merged_env_for_inspection(installer) -> None:
    """Test a failed deployment leaves the merged env in place."""
    workspace, build = installer
    agent_files = {".env.example": "OPENAI_API_KEY=\n", "Dockerfile": "FROM scratch\n"}
    runner = RecordingRunner(
        fail_on=["docker build"], hooks=[fake_clone(agent_files)]
    )
    orchestrator = build(runner)

    with pytest.raises(ExecutionError):
        orchestrator.install("weam-agent")

    repo = workspace / "agent"
    assert (repo / ".env").read_text() == "OPENAI_API_KEY=sk-root\nSHARED=1"
    assert orchestrator.last_progress.phases[-2:] == [
        InstallPhase.DEPLOYING,
        InstallPhase.FAILED,
    ]
