"""Unit tests for main CLI entry point (main.py).

Tests the Typer CLI application using CliRunner.
"""

import logging
from unittest.mock import MagicMock, Mock, patch

from typer.testing import CliRunner

from src.cli.main import app, _configure_logging, __version__
from src.cli.models import ExitCode
from src.tree_mirror.errors import ConfigError


runner = CliRunner()


class TestConfigureLogging:
    """Test cases for _configure_logging function."""

    def test_verbosity_0_sets_warning_level(self):
        """Verbosity 0 sets logging to WARNING level."""
        with patch('logging.getLogger') as mock_get_logger:
            mock_logger = MagicMock()
            mock_get_logger.return_value = mock_logger

            _configure_logging(0)

            mock_get_logger.assert_called_with("src")
            mock_logger.setLevel.assert_called_with(logging.WARNING)

    def test_verbosity_1_sets_info_level(self):
        """Verbosity 1 sets logging to INFO level."""
        with patch('logging.getLogger') as mock_get_logger:
            mock_logger = MagicMock()
            mock_get_logger.return_value = mock_logger

            _configure_logging(1)

            mock_logger.setLevel.assert_called_with(logging.INFO)

    def test_verbosity_2_sets_debug_level(self):
        """Verbosity 2+ sets logging to DEBUG level."""
        with patch('logging.getLogger') as mock_get_logger:
            mock_logger = MagicMock()
            mock_get_logger.return_value = mock_logger

            _configure_logging(2)

            mock_logger.setLevel.assert_called_with(logging.DEBUG)

    def test_logdir_creates_log_file(self, tmp_path):
        """--logdir writes a timestamped log file."""
        app_logger = logging.getLogger("src")
        handlers_before = list(app_logger.handlers)
        try:
            _configure_logging(1, str(tmp_path / "logs"))
            files = list((tmp_path / "logs").iterdir())
            assert len(files) == 1
            assert files[0].name.startswith("notion-vault-sync_")
            assert files[0].suffix == ".log"
        finally:
            for handler in list(app_logger.handlers):
                if handler not in handlers_before:
                    app_logger.removeHandler(handler)
                    handler.close()


@patch('src.cli.main._configure_logging')
class TestMainCommand:
    """Test cases for the sync command."""

    @patch('src.cli.main.SyncCommand')
    @patch('src.cli.main.ConfigLoader')
    def test_default_run(self, mock_loader, mock_sync_cmd, mock_logging):
        """No options: config from environment, sync runs, exit code passed through."""
        config = Mock()
        mock_loader.load.return_value = config
        mock_sync_cmd.return_value.run.return_value = ExitCode.SUCCESS

        result = runner.invoke(app, [])

        assert result.exit_code == ExitCode.SUCCESS
        mock_loader.load.assert_called_once_with(
            config_path=None,
            overrides={
                'root_page_id': None,
                'vault_path': None,
                'collision_policy': None,
                'dry_run': False,
            },
        )
        assert mock_sync_cmd.call_args.args[0] is config
        mock_sync_cmd.return_value.run.assert_called_once_with()

    @patch('src.cli.main.SyncCommand')
    @patch('src.cli.main.ConfigLoader')
    def test_options_become_overrides(self, mock_loader, mock_sync_cmd, mock_logging):
        mock_sync_cmd.return_value.run.return_value = ExitCode.SUCCESS

        result = runner.invoke(app, [
            "--root", "598337872cf94fdf8782e53db20768a5",
            "--vault", "/tmp/v",
            "--collision-policy", "suffix",
            "--config", "sync.yaml",
            "--dry-run",
        ])

        assert result.exit_code == ExitCode.SUCCESS
        mock_loader.load.assert_called_once_with(
            config_path="sync.yaml",
            overrides={
                'root_page_id': "598337872cf94fdf8782e53db20768a5",
                'vault_path': "/tmp/v",
                'collision_policy': "suffix",
                'dry_run': True,
            },
        )

    @patch('src.cli.main.SyncCommand')
    @patch('src.cli.main.ConfigLoader')
    def test_dryrun_alias(self, mock_loader, mock_sync_cmd, mock_logging):
        mock_sync_cmd.return_value.run.return_value = ExitCode.SUCCESS

        runner.invoke(app, ["--dryrun"])

        assert mock_loader.load.call_args.kwargs["overrides"]["dry_run"] is True

    @patch('src.cli.main.SyncCommand')
    @patch('src.cli.main.ConfigLoader')
    def test_sync_exit_code_propagates(self, mock_loader, mock_sync_cmd, mock_logging):
        mock_sync_cmd.return_value.run.return_value = ExitCode.AUTH_ERROR

        result = runner.invoke(app, [])

        assert result.exit_code == ExitCode.AUTH_ERROR

    @patch('src.cli.main.SyncCommand')
    @patch('src.cli.main.ConfigLoader')
    def test_config_error_exits_general_error(self, mock_loader, mock_sync_cmd, mock_logging):
        """Missing settings stop the run before any sync starts."""
        mock_loader.load.side_effect = ConfigError("Missing required settings: NOTION_TOKEN")

        result = runner.invoke(app, ["--no-color"])

        assert result.exit_code == ExitCode.GENERAL_ERROR
        assert "NOTION_TOKEN" in result.output
        mock_sync_cmd.assert_not_called()

    @patch('src.cli.main.SyncCommand')
    @patch('src.cli.main.OutputHandler')
    @patch('src.cli.main.ConfigLoader')
    def test_verbosity_and_color_passed_to_output(self, mock_loader, mock_output, mock_sync_cmd, mock_logging):
        mock_sync_cmd.return_value.run.return_value = ExitCode.SUCCESS

        runner.invoke(app, ["-v", "2", "--no-color", "--logdir", "logs"])

        mock_output.assert_called_once_with(verbosity=2, no_color=True)
        mock_logging.assert_called_once_with(2, "logs")

    def test_version(self, mock_logging):
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert f"notion-vault-sync version {__version__}" in result.output
        mock_logging.assert_not_called()

    def test_help(self, mock_logging):
        result = runner.invoke(app, ["--help"])

        assert result.exit_code == 0
        assert "--dry-run" in result.output
        assert "--collision-policy" in result.output
