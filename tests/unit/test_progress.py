"""Tests for installation phase tracking."""

import pytest

from solution_installer.core.enums import InstallPhase
from solution_installer.core.log import clear_log_context, get_log_context
from solution_installer.deployment.progress import InstallProgress


class TestInstallProgress:
    """Test InstallProgress."""

    def teardown_method(self) -> None:
        """Clean up test environment."""
        clear_log_context()

    def test_starts_without_phase(self) -> None:
        """Test a fresh tracker."""
        progress = InstallProgress("agent")

        assert progress.phase is None
        assert progress.phases == []
        assert progress.finished is False

    def test_records_phases_in_order(self) -> None:
        """Test phases are recorded and mirrored into the log context."""
        progress = InstallProgress("agent")

        progress.enter(InstallPhase.FETCHING)
        progress.enter(InstallPhase.CLEANING_UP)

        assert progress.phases == [InstallPhase.FETCHING, InstallPhase.CLEANING_UP]
        assert progress.phase is InstallPhase.CLEANING_UP
        assert get_log_context()["phase"] == "cleaning_up"

    def test_terminal_phase_cannot_be_left(self) -> None:
        """Test DONE is final."""
        progress = InstallProgress("agent")
        progress.enter(InstallPhase.DONE)

        with pytest.raises(RuntimeError):
            progress.enter(InstallPhase.DEPLOYING)

    def test_fail_is_idempotent(self) -> None:
        """Test fail after finishing changes nothing."""
        progress = InstallProgress("agent")
        progress.enter(InstallPhase.DEPLOYING)

        progress.fail()
        progress.fail()

        assert progress.phases == [InstallPhase.DEPLOYING, InstallPhase.FAILED]
        assert progress.finished is True
