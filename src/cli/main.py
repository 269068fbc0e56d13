"""Main CLI entry point for notion-vault-sync command.

This module provides the Typer application that serves as the entry point
for the notion-vault-sync command-line tool. A single command mirrors the
configured Notion page tree into the vault.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

import typer

from src.cli.models import ExitCode
from src.cli.output import OutputHandler
from src.cli.sync_command import SyncCommand
from src.tree_mirror.config_loader import ConfigLoader
from src.tree_mirror.errors import VaultError

__version__ = "0.1.0"

app = typer.Typer(
    name="notion-vault-sync",
    help="""Mirror a Notion page tree into a folder of Markdown files.

Every page becomes a folder named after its title containing an index.md;
the root page's index.md sits at the top of the vault.

QUICK START:
  export NOTION_TOKEN=secret_...
  export NOTION_ROOT_PAGE_ID=<page id or URL>
  export OBSIDIAN_VAULT_PATH=~/Obsidian/Wiki
  notion-vault-sync                 # Sync
  notion-vault-sync --dry-run       # Preview file locations""",
    add_completion=False,
    rich_markup_mode=None,
    no_args_is_help=False,
)

logger = logging.getLogger(__name__)


def _configure_logging(verbosity: int, logdir: Optional[str] = None) -> None:
    """Configure logging based on verbosity level.

    Configures only the 'src' namespace logger to avoid affecting third-party
    libraries. The root logger is left unchanged.

    Args:
        verbosity: Verbosity level (0=WARNING, 1=INFO, 2=DEBUG)
        logdir: Optional directory for log files (creates timestamped log file)
    """
    if verbosity == 0:
        level = logging.WARNING
    elif verbosity == 1:
        level = logging.INFO
    else:  # verbosity >= 2
        level = logging.DEBUG

    app_logger = logging.getLogger("src")
    app_logger.setLevel(level)

    log_format = "%(asctime)s [%(levelname)8s] %(message)s"
    date_format = "%Y-%m-%d %H:%M:%S"
    formatter = logging.Formatter(log_format, datefmt=date_format)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    app_logger.addHandler(console_handler)

    if logdir:
        log_path = Path(logdir)
        log_path.mkdir(parents=True, exist_ok=True)

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_file = log_path / f"notion-vault-sync_{timestamp}.log"

        file_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        file_formatter = logging.Formatter(file_format, datefmt=date_format)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(file_formatter)
        app_logger.addHandler(file_handler)

        logger.info(f"Logging to file: {log_file}")


@app.command()
def main_command(
    root_page_id: Optional[str] = typer.Option(
        None,
        "--root-page-id",
        "--root",
        help="Notion page id or URL to mirror (overrides NOTION_ROOT_PAGE_ID)",
        metavar="ID",
    ),
    vault: Optional[str] = typer.Option(
        None,
        "--vault",
        help="Destination folder (overrides OBSIDIAN_VAULT_PATH)",
        metavar="FOLDER",
    ),
    collision_policy: Optional[str] = typer.Option(
        None,
        "--collision-policy",
        help="When sibling titles map to the same folder: 'overwrite' (last "
             "write wins, reported) or 'suffix' (append the page id)",
        metavar="POLICY",
    ),
    config_file: Optional[str] = typer.Option(
        None,
        "--config",
        help="Optional YAML file with settings (environment variables win)",
        metavar="FILE",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        "--dryrun",
        help="Discover pages and show where they would be written, without writing",
    ),
    logdir: Optional[str] = typer.Option(
        None,
        "--logdir",
        help="Directory for log files (creates timestamped log file)",
    ),
    verbosity: int = typer.Option(
        0,
        "--verbosity",
        "-v",
        help="Verbosity level: 0=summary, 1=info, 2=debug",
    ),
    no_color: bool = typer.Option(
        False,
        "--no-color",
        help="Disable colored output",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version and exit",
    ),
) -> None:
    """Mirror a Notion page tree into a folder of Markdown files."""
    if version:
        typer.echo(f"notion-vault-sync version {__version__}")
        raise typer.Exit()

    _configure_logging(verbosity, logdir)
    output = OutputHandler(verbosity=verbosity, no_color=no_color)

    try:
        config = ConfigLoader.load(
            config_path=config_file,
            overrides={
                'root_page_id': root_page_id,
                'vault_path': vault,
                'collision_policy': collision_policy,
                'dry_run': dry_run,
            },
        )
    except VaultError as e:
        logger.error(f"Configuration failed: {e}")
        output.error(str(e))
        raise typer.Exit(ExitCode.GENERAL_ERROR)

    exit_code = SyncCommand(config, output_handler=output).run()
    raise typer.Exit(exit_code)


def main() -> None:
    """Main entry point for the CLI application.

    This function is called when the module is executed directly or
    when the console script is invoked.
    """
    app()


# Allow running as: python -m src.cli.main
if __name__ == "__main__":
    main()
