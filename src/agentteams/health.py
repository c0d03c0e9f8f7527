"""Teammate health classification.

Combines three independent signals: whether the launcher still sees the
teammate's pane, the runtime status record the teammate maintains, and
whether mail is piling up in its inbox.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

from agentteams.errors import MemberNotFoundError
from agentteams.launcher import ProcessLauncher, is_member_alive
from agentteams.storage.schema import AgentRuntimeStatus, Member, now_ms

if TYPE_CHECKING:
    from agentteams.workspace import Workspace

HEARTBEAT_STALE_MS = 90_000
STARTUP_STALL_MS = 60_000


class TeammateHealth(Enum):
    DEAD = "dead"  # Pane or window is gone
    STALLED = "stalled"  # Alive with unread mail, never became ready
    HEALTHY = "healthy"  # Ready with a recent heartbeat
    IDLE = "idle"  # Ready, heartbeat is stale
    STARTING = "starting"  # Alive, not ready yet


@dataclass
class HealthReport:
    alive: bool
    unread_count: int
    health: TeammateHealth
    agent_loop_ready: bool
    has_recent_heartbeat: bool
    startup_stalled: bool
    runtime: AgentRuntimeStatus | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "alive": self.alive,
            "unreadCount": self.unread_count,
            "health": self.health.value,
            "agentLoopReady": self.agent_loop_ready,
            "hasRecentHeartbeat": self.has_recent_heartbeat,
            "startupStalled": self.startup_stalled,
            "runtime": self.runtime.to_dict() if self.runtime else None,
        }


def assess_health(
    alive: bool,
    member: Member,
    status: AgentRuntimeStatus | None,
    unread_count: int,
    now: int,
    heartbeat_stale_ms: int = HEARTBEAT_STALE_MS,
    startup_stall_ms: int = STARTUP_STALL_MS,
) -> HealthReport:
    """Classify a teammate from its liveness, runtime status and inbox.

    Args:
        alive: Whether the launcher reports the pane as alive
        member: The roster entry (joined_at drives stall detection)
        status: Runtime status record, or None if never written
        unread_count: Unread messages waiting in the inbox
        now: Current time in epoch milliseconds
    """
    ready = bool(status and status.ready)
    last_heartbeat = status.last_heartbeat_at if status else None
    has_recent_heartbeat = last_heartbeat is not None and now - last_heartbeat <= heartbeat_stale_ms
    startup_stalled = (
        alive and unread_count > 0 and now - member.joined_at > startup_stall_ms and not ready
    )

    if not alive:
        health = TeammateHealth.DEAD
    elif startup_stalled:
        health = TeammateHealth.STALLED
    elif ready:
        health = TeammateHealth.HEALTHY if has_recent_heartbeat else TeammateHealth.IDLE
    else:
        health = TeammateHealth.STARTING

    return HealthReport(
        alive=alive,
        unread_count=unread_count,
        health=health,
        agent_loop_ready=ready,
        has_recent_heartbeat=has_recent_heartbeat,
        startup_stalled=startup_stalled,
        runtime=status,
    )


async def check_teammate(
    workspace: Workspace,
    team_name: str,
    agent_name: str,
    launcher: ProcessLauncher | None,
    now: int | None = None,
) -> HealthReport:
    """Gather the signals for one teammate and classify it.

    The inbox is read without marking anything as read.

    Raises:
        MemberNotFoundError: If the agent is not on the roster.
    """
    member = await workspace.teams.get_member(team_name, agent_name)
    if member is None:
        raise MemberNotFoundError(team_name, agent_name)

    alive = launcher is not None and is_member_alive(
        launcher, member.tmux_pane_id, member.window_id
    )

    unread = await workspace.messages.unread_count(team_name, agent_name)
    status = await workspace.runtime.read_status(team_name, agent_name)

    health_config = workspace.config.health
    return assess_health(
        alive,
        member,
        status,
        unread,
        now if now is not None else now_ms(),
        heartbeat_stale_ms=int(health_config.heartbeat_stale_seconds * 1000),
        startup_stall_ms=int(health_config.startup_stall_seconds * 1000),
    )
