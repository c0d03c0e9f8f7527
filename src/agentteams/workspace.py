"""Wiring of the stores from configuration.

A Workspace is the object an agent process creates once at startup: it
resolves the state root, lock tuning and hook directory from Config and
hands every store the same layout and lock settings.
"""

from __future__ import annotations

from pathlib import Path

from agentteams.config import Config, ConfigLoader, default_state_root
from agentteams.hooks import HookRunner
from agentteams.storage.lock import LockSettings
from agentteams.storage.messaging import MessageStore
from agentteams.storage.paths import StateLayout
from agentteams.storage.runtime import RuntimeStatusStore
from agentteams.storage.tasks import TaskStore
from agentteams.storage.teams import TeamStore


class Workspace:
    """All stores for one state root."""

    def __init__(self, config: Config | None = None, *, root: str | Path | None = None) -> None:
        """Initialize the workspace.

        Args:
            config: Loaded configuration; defaults are used when omitted.
            root: State root override, taking precedence over config.state.root.
        """
        self.config = config or Config()

        state_root = root or self.config.state.root or default_state_root()
        self.layout = StateLayout(state_root)

        lock = self.config.lock
        self.lock_settings = LockSettings(
            max_retries=lock.max_retries,
            retry_interval=lock.retry_interval,
            stale_after=lock.stale_after,
        )

        hooks = self.config.hooks
        self.hooks = HookRunner(
            hooks.directory, team_env_var=hooks.team_env_var, timeout=hooks.timeout
        )

        self.teams = TeamStore(self.layout, self.lock_settings)
        self.tasks = TaskStore(self.layout, self.teams, self.hooks, self.lock_settings)
        self.messages = MessageStore(self.layout, self.teams, self.lock_settings)
        self.runtime = RuntimeStatusStore(self.layout, self.lock_settings)

    @classmethod
    def load(cls, project_root: str | None = None) -> Workspace:
        """Build a workspace from the merged YAML/env configuration."""
        return cls(ConfigLoader(project_root).load())

    def ensure_dirs(self) -> None:
        self.layout.ensure_dirs()

    async def close(self) -> None:
        """Wait for background hooks before the process exits."""
        await self.tasks.wait_for_hooks()
