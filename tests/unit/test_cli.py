"""
Fast unit tests for CLI functionality.

Deployment itself is mocked; these tests cover argument handling, option
validation and exit codes.
"""

from pathlib import Path
from unittest.mock import patch

from typer.testing import CliRunner

from solution_installer.cli.main import app
from solution_installer.core.errors import ConfigurationError
from solution_installer.core.types import DeploymentResult
from tests.conftest_helpers import write_files

REGISTRY_YAML = """\
agent:
  repoUrl: https://example.com/acme/agent.git
  repoName: agent
  installType: docker
  containerName: agent
  imageName: agent-image
  port: 8001
"""


class TestCLIBasics:
    """Test basic CLI functionality."""

    def setup_method(self):
        """Set up test environment."""
        self.runner = CliRunner()

    def test_help_command(self):
        """Test CLI help command works."""
        result = self.runner.invoke(app, ["--help"])

        assert result.exit_code == 0
        assert "install" in result.output

    def test_version_command(self):
        """Test version command prints the package version."""
        result = self.runner.invoke(app, ["version"])

        assert result.exit_code == 0
        assert "1.0.0" in result.output

    def test_verbose_and_log_level_conflict(self):
        """Test --verbose and --log-level are mutually exclusive."""
        result = self.runner.invoke(app, ["-v", "--log-level", "DEBUG", "version"])

        assert result.exit_code == 1

    def test_invalid_command(self):
        """Test behavior with invalid command."""
        result = self.runner.invoke(app, ["nonexistent-command"])

        assert result.exit_code != 0

    def test_config_command(self, clean_env):
        """Test config command shows effective settings."""
        result = self.runner.invoke(app, ["config"])

        assert result.exit_code == 0
        assert "Docker Network" in result.output


class TestInstallCommand:
    """Test the install command."""

    def setup_method(self):
        """Set up test environment."""
        self.runner = CliRunner()

    def test_install_success(self, clean_env, tmp_path: Path):
        """Test a successful install reports the port."""
        with patch(
            "solution_installer.cli.commands.install.InstallationOrchestrator"
        ) as mock_orchestrator:
            mock_orchestrator.from_config.return_value.install.return_value = (
                DeploymentResult(success=True, port=8001, solution_type="agent")
            )
            result = self.runner.invoke(
                app, ["install", "agent", "--workspace", str(tmp_path), "--timeout", "30"]
            )

        assert result.exit_code == 0
        assert "8001" in result.output
        config = mock_orchestrator.from_config.call_args.args[0]
        assert config.workspace_dir == tmp_path
        assert config.command_timeout == 30
        mock_orchestrator.from_config.return_value.install.assert_called_once_with("agent")

    def test_install_failure_exits_non_zero(self, clean_env, tmp_path: Path):
        """Test installer errors become exit code 1."""
        with patch(
            "solution_installer.cli.commands.install.InstallationOrchestrator"
        ) as mock_orchestrator:
            mock_orchestrator.from_config.return_value.install.side_effect = (
                ConfigurationError("Unknown solution type: nope")
            )
            result = self.runner.invoke(
                app, ["install", "nope", "--workspace", str(tmp_path)]
            )

        assert result.exit_code == 1
        assert "Unknown solution type" in result.output

    def test_install_rejects_non_positive_timeout(self, clean_env):
        """Test option validation."""
        result = self.runner.invoke(app, ["install", "agent", "--timeout", "0"])

        assert result.exit_code == 1

    def test_install_unknown_solution_end_to_end(self, clean_env, tmp_path: Path):
        """Test an empty registry fails without running anything."""
        with patch("subprocess.Popen") as mock_popen:
            result = self.runner.invoke(
                app, ["install", "agent", "--workspace", str(tmp_path)]
            )

        assert result.exit_code == 1
        mock_popen.assert_not_called()


class TestSolutionsCommands:
    """Test solutions subcommands."""

    def setup_method(self):
        """Set up test environment."""
        self.runner = CliRunner()

    def test_list(self, clean_env, tmp_path: Path):
        """Test listing solutions from a registry file."""
        registry = tmp_path / "solutions.yaml"
        registry.write_text(REGISTRY_YAML)

        result = self.runner.invoke(app, ["solutions", "list", "--registry", str(registry)])

        assert result.exit_code == 0
        assert "agent" in result.output
        assert "8001" in result.output

    def test_list_empty(self, clean_env):
        """Test listing without any solutions."""
        result = self.runner.invoke(app, ["solutions", "list"])

        assert result.exit_code == 0
        assert "No solutions configured" in result.output

    def test_show(self, clean_env, tmp_path: Path):
        """Test showing one solution."""
        registry = tmp_path / "solutions.yaml"
        registry.write_text(REGISTRY_YAML)

        result = self.runner.invoke(
            app, ["solutions", "show", "agent", "--registry", str(registry)]
        )

        assert result.exit_code == 0
        assert "agent-image" in result.output

    def test_show_unknown(self, clean_env, tmp_path: Path):
        """Test showing an unknown solution."""
        registry = tmp_path / "solutions.yaml"
        registry.write_text(REGISTRY_YAML)

        result = self.runner.invoke(
            app, ["solutions", "show", "nope", "--registry", str(registry)]
        )

        assert result.exit_code == 1


class TestEnvAndDetectCommands:
    """Test env and detect commands."""

    def setup_method(self):
        """Set up test environment."""
        self.runner = CliRunner()

    def test_env_merge(self, tmp_path: Path):
        """Test merging two env files from the command line."""
        root = tmp_path / "root.env"
        local = tmp_path / "local.env"
        output = tmp_path / "merged.env"
        root.write_text("A=1\n")
        local.write_text("A=\nB=2\n")

        result = self.runner.invoke(app, ["env", "merge", str(root), str(local), str(output)])

        assert result.exit_code == 0
        assert output.read_text() == "A=1\nB=2"

    def test_env_merge_refuses_source_as_output(self, tmp_path: Path):
        """Test the output cannot overwrite a source."""
        root = tmp_path / "root.env"
        local = tmp_path / "local.env"
        root.write_text("A=1\n")
        local.write_text("B=2\n")

        result = self.runner.invoke(app, ["env", "merge", str(root), str(local), str(local)])

        assert result.exit_code == 1
        assert local.read_text() == "B=2\n"

    def test_env_show_masks_values(self, tmp_path: Path):
        """Test values are masked unless --reveal is given."""
        env_file = tmp_path / ".env"
        env_file.write_text("TOKEN=hunter2\n")

        masked = self.runner.invoke(app, ["env", "show", str(env_file)])
        revealed = self.runner.invoke(app, ["env", "show", str(env_file), "--reveal"])

        assert masked.exit_code == 0
        assert "hunter2" not in masked.output
        assert "***" in masked.output
        assert "hunter2" in revealed.output

    def test_detect(self, tmp_path: Path):
        """Test detect reports a deployable checkout."""
        write_files(tmp_path, {"compose.yml": "services: {}\n"})

        result = self.runner.invoke(app, ["detect", str(tmp_path)])

        assert result.exit_code == 0
        assert "compose.yml" in result.output

    def test_detect_nothing_deployable(self, tmp_path: Path):
        """Test detect exits non-zero for an empty checkout."""
        result = self.runner.invoke(app, ["detect", str(tmp_path)])

        assert result.exit_code == 1
