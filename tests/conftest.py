"""Root pytest configuration for all tests.

This conftest applies to all test types (unit, integration).
"""

import logging

import pytest

from src.tree_mirror.models import SyncConfig
from tests.fixtures.notion_pages import FakeNotionAPI, build_sample_workspace, pid

# urllib3 logs every retry/connection at DEBUG; keep test output readable
logging.getLogger("urllib3").setLevel(logging.WARNING)


@pytest.fixture
def sample_api() -> FakeNotionAPI:
    """Five-page workspace rooted at pid(1); see build_sample_workspace."""
    return build_sample_workspace()


@pytest.fixture
def sync_config(tmp_path) -> SyncConfig:
    """SyncConfig pointing at pid(1) and a fresh vault under tmp_path."""
    return SyncConfig(
        notion_token="secret_test_token_123456",
        root_page_id=pid(1),
        vault_path=str(tmp_path / "vault"),
    )
