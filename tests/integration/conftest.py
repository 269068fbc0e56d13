"""Pytest configuration and fixtures for integration tests.

Integration tests run the whole pipeline (discovery, conversion, writing)
against FakeNotionAPI and a real vault directory under tmp_path.
"""

from datetime import datetime, timedelta, UTC
from pathlib import Path
from typing import Callable
from unittest.mock import MagicMock

import pytest

from src.cli.models import ExitCode
from src.cli.sync_command import SyncCommand
from src.tree_mirror.models import SyncConfig
from tests.fixtures.notion_pages import FakeNotionAPI, pid


class TickingClock:
    """Clock that advances one second per call, so every write differs."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        current = self.now
        self.now += timedelta(seconds=1)
        return current


@pytest.fixture
def vault(tmp_path) -> Path:
    return tmp_path / "vault"


@pytest.fixture
def run_sync(vault) -> Callable[..., ExitCode]:
    """Run one sync of pid(1) into the vault; returns the exit code.

    Keyword arguments override SyncConfig fields; ``clock`` replaces the
    timestamp source.
    """
    def _run(api: FakeNotionAPI, clock=None, **config_fields) -> ExitCode:
        config = SyncConfig(
            notion_token="secret_integration_token",
            root_page_id=pid(1),
            vault_path=str(vault),
            **config_fields,
        )
        command = SyncCommand(
            config,
            output_handler=MagicMock(),
            api=api,
            clock=clock or TickingClock(datetime(2026, 10, 19, 8, 0, 0, tzinfo=UTC)),
        )
        return command.run()

    return _run
