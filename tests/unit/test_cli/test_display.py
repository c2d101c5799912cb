"""Tests for CLI display module."""

from pathlib import Path
from unittest.mock import patch

from codeql_action.actions.init import InitResult
from codeql_action.cli.display import (
    show_error,
    show_info,
    show_init_result,
    show_sarif_files,
    show_success,
)
from codeql_action.models.tracer import CompoundTracerConfig


class TestDisplayFunctions:
    """Test display functions."""

    def test_show_messages(self) -> None:
        """Test message panels."""
        with patch("codeql_action.cli.display.console") as mock_console:
            show_success("Title", "done [ok]")
            show_error("Title", "failed")
            show_info("Title", "info")

        assert mock_console.print.call_count == 6

    def test_show_init_result_with_tracing(self) -> None:
        """Test the init summary with a compound configuration."""
        result = InitResult(
            traced_languages=["cpp"],
            scanned_languages=["python"],
            compound=CompoundTracerConfig(
                spec_path=Path("/w/compound-spec"),
                environment_path=Path("/w/compound-spec.environment"),
                env={"X": "1"},
            ),
            database_dir=Path("/w/codeql_results/db"),
        )

        with patch("codeql_action.cli.display.console") as mock_console:
            show_init_result(result)

        assert mock_console.print.called

    def test_show_init_result_without_tracing(self) -> None:
        """Test the init summary without traced languages."""
        with patch("codeql_action.cli.display.console") as mock_console:
            show_init_result(InitResult(scanned_languages=["python"]))

        assert mock_console.print.called

    def test_show_sarif_files(self) -> None:
        """Test the results table."""
        with patch("codeql_action.cli.display.console") as mock_console:
            show_sarif_files([Path("/out/cpp.sarif")])

        assert mock_console.print.called
