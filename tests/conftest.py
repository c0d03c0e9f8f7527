"""Root pytest configuration for all tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from agentteams.config import Config, HooksConfig, LockConfig
from agentteams.workspace import Workspace


@pytest.fixture
def hooks_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "hooks"
    directory.mkdir()
    return directory


@pytest.fixture
def config(hooks_dir: Path) -> Config:
    """Defaults, with a short retry interval to keep contention tests fast."""
    return Config(
        lock=LockConfig(max_retries=200, retry_interval=0.01, stale_after=30.0),
        hooks=HooksConfig(directory=str(hooks_dir)),
    )


@pytest.fixture
def workspace(tmp_path: Path, config: Config) -> Workspace:
    ws = Workspace(config, root=tmp_path / "state")
    ws.ensure_dirs()
    return ws


@pytest.fixture
def team(workspace: Workspace) -> str:
    """A team with only its lead."""
    workspace.teams.create_team("test-team", "session-1", "lead-agent-id", description="Test")
    return "test-team"
