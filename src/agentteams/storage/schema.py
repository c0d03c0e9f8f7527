"""Data schemas for the shared team state.

Python attributes are snake_case; the JSON written to disk uses the
camelCase keys other agent processes expect. Optional fields left as None
are omitted on write, and absence and null are read back the same way.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, TypeVar

from agentteams.storage.jsonio import drop_none

R = TypeVar("R")


def now_ms() -> int:
    return int(datetime.now(timezone.utc).timestamp() * 1000)


def utc_now_iso() -> str:
    """ISO-8601 UTC timestamp with milliseconds and a Z suffix."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def apply_updates(record: R, updates: Mapping[str, Any]) -> R:
    """Shallow-merge updates over a dataclass record.

    Keys whose value is None are treated as "not set" and skipped.

    Raises:
        ValueError: If a key is not a field of the record.
    """
    known = {f.name for f in dataclasses.fields(record)}  # type: ignore[arg-type]
    unknown = set(updates) - known
    if unknown:
        raise ValueError(f"Unknown field(s) for {type(record).__name__}: {sorted(unknown)}")
    changes = {k: v for k, v in updates.items() if v is not None}
    return dataclasses.replace(record, **changes)  # type: ignore[type-var]


class AgentType(Enum):
    LEAD = "lead"
    TEAMMATE = "teammate"


class TaskStatus(Enum):
    """Task lifecycle.

    pending -> planning -> in_progress -> completed. DELETED is not stored;
    moving a task to it removes the task file.
    """

    PENDING = "pending"
    PLANNING = "planning"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    DELETED = "deleted"


@dataclass
class Member:
    """A lead or teammate on a team roster."""

    agent_id: str
    name: str  # Unique within the team
    agent_type: AgentType = AgentType.TEAMMATE
    joined_at: int = field(default_factory=now_ms)  # Epoch milliseconds
    tmux_pane_id: str = ""
    cwd: str = ""
    subscriptions: list[str] = field(default_factory=list)
    model: str | None = None
    window_id: str | None = None
    prompt: str | None = None
    color: str | None = None
    thinking: str | None = None
    plan_mode_required: bool | None = None
    backend_type: str | None = None
    is_active: bool | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.agent_type, AgentType):
            self.agent_type = AgentType(self.agent_type)

    def to_dict(self) -> dict[str, Any]:
        return drop_none(
            {
                "agentId": self.agent_id,
                "name": self.name,
                "agentType": self.agent_type.value,
                "model": self.model,
                "joinedAt": self.joined_at,
                "tmuxPaneId": self.tmux_pane_id,
                "windowId": self.window_id,
                "cwd": self.cwd,
                "subscriptions": list(self.subscriptions),
                "prompt": self.prompt,
                "color": self.color,
                "thinking": self.thinking,
                "planModeRequired": self.plan_mode_required,
                "backendType": self.backend_type,
                "isActive": self.is_active,
            }
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Member:
        return cls(
            agent_id=data["agentId"],
            name=data["name"],
            agent_type=AgentType(data.get("agentType", "teammate")),
            joined_at=data.get("joinedAt", 0),
            tmux_pane_id=data.get("tmuxPaneId") or "",
            cwd=data.get("cwd") or "",
            subscriptions=list(data.get("subscriptions") or []),
            model=data.get("model"),
            window_id=data.get("windowId"),
            prompt=data.get("prompt"),
            color=data.get("color"),
            thinking=data.get("thinking"),
            plan_mode_required=data.get("planModeRequired"),
            backend_type=data.get("backendType"),
            is_active=data.get("isActive"),
        )


@dataclass
class TeamConfig:
    """The per-team roster file."""

    name: str
    lead_agent_id: str
    lead_session_id: str
    description: str = ""
    created_at: int = field(default_factory=now_ms)
    members: list[Member] = field(default_factory=list)
    default_model: str | None = None
    separate_windows: bool | None = None

    def find_member(self, agent_name: str) -> Member | None:
        for member in self.members:
            if member.name == agent_name:
                return member
        return None

    def to_dict(self) -> dict[str, Any]:
        return drop_none(
            {
                "name": self.name,
                "description": self.description,
                "createdAt": self.created_at,
                "leadAgentId": self.lead_agent_id,
                "leadSessionId": self.lead_session_id,
                "members": [m.to_dict() for m in self.members],
                "defaultModel": self.default_model,
                "separateWindows": self.separate_windows,
            }
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TeamConfig:
        return cls(
            name=data["name"],
            description=data.get("description") or "",
            created_at=data.get("createdAt", 0),
            lead_agent_id=data.get("leadAgentId", ""),
            lead_session_id=data.get("leadSessionId", ""),
            members=[Member.from_dict(m) for m in data.get("members") or []],
            default_model=data.get("defaultModel"),
            separate_windows=data.get("separateWindows"),
        )


@dataclass
class TaskFile:
    """One task, stored as <task_dir>/<id>.json."""

    id: str
    subject: str
    description: str
    status: TaskStatus = TaskStatus.PENDING
    active_form: str | None = None
    plan: str | None = None
    plan_feedback: str | None = None
    blocks: list[str] = field(default_factory=list)
    blocked_by: list[str] = field(default_factory=list)
    owner: str | None = None
    metadata: dict[str, Any] | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.status, TaskStatus):
            self.status = TaskStatus(self.status)

    def to_dict(self) -> dict[str, Any]:
        return drop_none(
            {
                "id": self.id,
                "subject": self.subject,
                "description": self.description,
                "activeForm": self.active_form,
                "status": self.status.value,
                "plan": self.plan,
                "planFeedback": self.plan_feedback,
                "blocks": list(self.blocks),
                "blockedBy": list(self.blocked_by),
                "owner": self.owner,
                "metadata": self.metadata,
            }
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TaskFile:
        return cls(
            id=str(data["id"]),
            subject=data.get("subject", ""),
            description=data.get("description", ""),
            status=TaskStatus(data.get("status", "pending")),
            active_form=data.get("activeForm"),
            plan=data.get("plan"),
            plan_feedback=data.get("planFeedback"),
            blocks=list(data.get("blocks") or []),
            blocked_by=list(data.get("blockedBy") or []),
            owner=data.get("owner"),
            metadata=data.get("metadata"),
        )


@dataclass
class InboxMessage:
    """A message in an agent's inbox. Only `read` changes after delivery."""

    sender: str  # Serialized as "from"
    text: str
    timestamp: str = field(default_factory=utc_now_iso)
    read: bool = False
    summary: str | None = None
    color: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return drop_none(
            {
                "from": self.sender,
                "text": self.text,
                "timestamp": self.timestamp,
                "read": self.read,
                "summary": self.summary,
                "color": self.color,
            }
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> InboxMessage:
        return cls(
            sender=data["from"],
            text=data.get("text", ""),
            timestamp=data.get("timestamp", ""),
            read=bool(data.get("read", False)),
            summary=data.get("summary"),
            color=data.get("color"),
        )


@dataclass
class AgentRuntimeStatus:
    """Liveness record for one agent process. Times are epoch milliseconds."""

    team_name: str
    agent_name: str
    pid: int | None = None
    started_at: int | None = None
    last_heartbeat_at: int | None = None
    last_inbox_read_at: int | None = None
    ready: bool | None = None
    last_error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return drop_none(
            {
                "teamName": self.team_name,
                "agentName": self.agent_name,
                "pid": self.pid,
                "startedAt": self.started_at,
                "lastHeartbeatAt": self.last_heartbeat_at,
                "lastInboxReadAt": self.last_inbox_read_at,
                "ready": self.ready,
                "lastError": self.last_error,
            }
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AgentRuntimeStatus:
        return cls(
            team_name=data.get("teamName", ""),
            agent_name=data.get("agentName", ""),
            pid=data.get("pid"),
            started_at=data.get("startedAt"),
            last_heartbeat_at=data.get("lastHeartbeatAt"),
            last_inbox_read_at=data.get("lastInboxReadAt"),
            ready=data.get("ready"),
            last_error=data.get("lastError"),
        )
