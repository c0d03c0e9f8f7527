"""Agent runtime status store.

One liveness record per agent, kept apart from roster and task state so
heartbeats never contend with roster edits. Writes always merge over the
stored record.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from agentteams.storage.jsonio import read_json, write_json
from agentteams.storage.lock import FileLock, LockSettings
from agentteams.storage.paths import StateLayout
from agentteams.storage.schema import AgentRuntimeStatus, apply_updates, now_ms


class RuntimeStatusStore:
    def __init__(self, layout: StateLayout, lock_settings: LockSettings | None = None) -> None:
        self._layout = layout
        self._lock_settings = lock_settings or LockSettings()

    async def write_status(
        self, team_name: str, agent_name: str, updates: Mapping[str, Any]
    ) -> AgentRuntimeStatus:
        """Merge updates into the agent's record and return the result.

        Fields absent from updates (or None) keep their stored values. The
        team and agent names always come from the arguments.
        """
        path = self._layout.runtime_status_path(team_name, agent_name)
        path.parent.mkdir(parents=True, exist_ok=True)

        async with FileLock(path, settings=self._lock_settings):
            if path.exists():
                current = AgentRuntimeStatus.from_dict(read_json(path))
            else:
                current = AgentRuntimeStatus(team_name=team_name, agent_name=agent_name)

            merged = apply_updates(current, updates)
            merged.team_name = team_name
            merged.agent_name = agent_name
            write_json(path, merged.to_dict())

        return merged

    async def read_status(self, team_name: str, agent_name: str) -> AgentRuntimeStatus | None:
        path = self._layout.runtime_status_path(team_name, agent_name)
        if not path.exists():
            return None

        async with FileLock(path, settings=self._lock_settings):
            if not path.exists():
                return None
            return AgentRuntimeStatus.from_dict(read_json(path))

    async def heartbeat(
        self, team_name: str, agent_name: str, at_ms: int | None = None
    ) -> AgentRuntimeStatus:
        return await self.write_status(
            team_name, agent_name, {"last_heartbeat_at": at_ms if at_ms is not None else now_ms()}
        )
