"""Tests for logging helpers."""

import pytest

from codeql_action.core.logger.logger import log_group, running_in_github_actions


class TestLogGroup:
    """Tests for log_group."""

    def test_workflow_commands_in_actions(
        self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture
    ) -> None:
        """Test group markers are printed inside GitHub Actions."""
        monkeypatch.setenv("GITHUB_ACTIONS", "true")

        with log_group("Building"):
            print("inside")

        assert capsys.readouterr().out == "::group::Building\ninside\n::endgroup::\n"

    def test_group_closed_on_error(
        self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture
    ) -> None:
        """Test the group is closed when the block raises."""
        monkeypatch.setenv("GITHUB_ACTIONS", "true")

        with pytest.raises(RuntimeError):
            with log_group("Building"):
                raise RuntimeError("boom")

        assert capsys.readouterr().out.endswith("::endgroup::\n")

    def test_no_workflow_commands_elsewhere(self, capsys: pytest.CaptureFixture) -> None:
        """Test no group markers reach stdout outside GitHub Actions."""
        assert running_in_github_actions() is False

        with log_group("Building"):
            pass

        assert "::group::" not in capsys.readouterr().out
