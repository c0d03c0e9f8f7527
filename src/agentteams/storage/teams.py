"""Team roster store.

Each team has one config.json holding its description and member list.
Roster changes are read-modify-write cycles on the whole file, always
under the config file's lock.
"""

from __future__ import annotations

import os
import shutil
from collections.abc import Callable, Mapping
from typing import Any

from agentteams.errors import TeamNotFoundError
from agentteams.logging import get_logger
from agentteams.storage.jsonio import read_json, write_json
from agentteams.storage.lock import FileLock, LockSettings, lock_path_for
from agentteams.storage.paths import StateLayout
from agentteams.storage.schema import AgentType, Member, TeamConfig, apply_updates

log = get_logger("teams")

LEAD_MEMBER_NAME = "team-lead"


class TeamStore:
    """CRUD over per-team roster files."""

    def __init__(self, layout: StateLayout, lock_settings: LockSettings | None = None) -> None:
        self._layout = layout
        self._lock_settings = lock_settings or LockSettings()

    @property
    def layout(self) -> StateLayout:
        return self._layout

    def team_exists(self, team_name: str) -> bool:
        """Best-effort existence check, taken without the lock."""
        return self._layout.config_path(team_name).exists()

    def list_teams(self) -> list[str]:
        """Names of all teams that have a config file."""
        teams_dir = self._layout.teams_dir
        if not teams_dir.is_dir():
            return []
        return sorted(
            entry.name
            for entry in teams_dir.iterdir()
            if entry.is_dir() and (entry / "config.json").exists()
        )

    def create_team(
        self,
        name: str,
        session_id: str,
        lead_agent_id: str,
        description: str = "",
        default_model: str | None = None,
        separate_windows: bool | None = None,
    ) -> TeamConfig:
        """Create the team and task directories and write the initial roster.

        Not lock-protected and not idempotent: a second call overwrites the
        existing config.
        """
        self._layout.team_dir(name).mkdir(parents=True, exist_ok=True)
        self._layout.task_dir(name).mkdir(parents=True, exist_ok=True)

        lead = Member(
            agent_id=lead_agent_id,
            name=LEAD_MEMBER_NAME,
            agent_type=AgentType.LEAD,
            tmux_pane_id=os.environ.get("TMUX_PANE", ""),
            cwd=os.getcwd(),
            subscriptions=[],
        )
        config = TeamConfig(
            name=name,
            description=description,
            lead_agent_id=lead_agent_id,
            lead_session_id=session_id,
            members=[lead],
            default_model=default_model,
            separate_windows=separate_windows,
        )
        write_json(self._layout.config_path(name), config.to_dict())
        log.info("Created team %s (lead %s)", name, lead_agent_id)
        return config

    def delete_team(self, team_name: str) -> bool:
        """Remove the team directory tree and its task directory.

        Returns:
            True if anything was removed.
        """
        removed = False
        for directory in (self._layout.task_dir(team_name), self._layout.team_dir(team_name)):
            if directory.exists():
                shutil.rmtree(directory)
                removed = True
        try:
            os.unlink(lock_path_for(self._layout.task_dir(team_name)))
        except OSError:
            pass  # No directory lock left behind
        if removed:
            log.info("Deleted team %s", team_name)
        return removed

    async def read_config(self, team_name: str) -> TeamConfig:
        """Read the roster under its lock.

        Raises:
            TeamNotFoundError: If the team has no config file.
        """
        path = self._layout.config_path(team_name)
        if not path.exists():
            raise TeamNotFoundError(team_name)
        async with FileLock(path, settings=self._lock_settings):
            return self._load(team_name)

    async def get_member(self, team_name: str, agent_name: str) -> Member | None:
        config = await self.read_config(team_name)
        return config.find_member(agent_name)

    async def add_member(self, team_name: str, member: Member) -> None:
        def modify(config: TeamConfig) -> bool:
            config.members.append(member)
            return True

        await self._update(team_name, modify)
        log.debug("Added %s to team %s", member.name, team_name)

    async def remove_member(self, team_name: str, agent_name: str) -> None:
        def modify(config: TeamConfig) -> bool:
            config.members = [m for m in config.members if m.name != agent_name]
            return True

        await self._update(team_name, modify)
        log.debug("Removed %s from team %s", agent_name, team_name)

    async def update_member(
        self, team_name: str, agent_name: str, updates: Mapping[str, Any]
    ) -> None:
        """Merge updates into a member. Absent members are silently ignored."""

        def modify(config: TeamConfig) -> bool:
            for i, member in enumerate(config.members):
                if member.name == agent_name:
                    config.members[i] = apply_updates(member, updates)
                    return True
            return False

        await self._update(team_name, modify)

    def _load(self, team_name: str) -> TeamConfig:
        path = self._layout.config_path(team_name)
        try:
            return TeamConfig.from_dict(read_json(path))
        except FileNotFoundError:
            raise TeamNotFoundError(team_name) from None

    async def _update(self, team_name: str, modifier: Callable[[TeamConfig], bool]) -> None:
        """Read-modify-write with file locking. modifier returns False to skip the write."""
        path = self._layout.config_path(team_name)
        if not path.exists():
            raise TeamNotFoundError(team_name)
        async with FileLock(path, settings=self._lock_settings):
            config = self._load(team_name)
            if modifier(config):
                write_json(path, config.to_dict())
