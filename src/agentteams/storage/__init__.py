"""Concurrency-safe shared state for agent teams.

All state is plain JSON under a single root directory, guarded by
advisory lock files so independent agent processes can share it.
"""

from agentteams.storage.lock import FileLock, LockSettings, with_lock
from agentteams.storage.messaging import BroadcastResult, MessageStore
from agentteams.storage.paths import StateLayout, sanitize_name
from agentteams.storage.runtime import RuntimeStatusStore
from agentteams.storage.schema import (
    AgentRuntimeStatus,
    AgentType,
    InboxMessage,
    Member,
    TaskFile,
    TaskStatus,
    TeamConfig,
)
from agentteams.storage.tasks import PlanAction, TaskStore
from agentteams.storage.teams import LEAD_MEMBER_NAME, TeamStore

__all__ = [
    "AgentRuntimeStatus",
    "AgentType",
    "BroadcastResult",
    "FileLock",
    "InboxMessage",
    "LEAD_MEMBER_NAME",
    "LockSettings",
    "Member",
    "MessageStore",
    "PlanAction",
    "RuntimeStatusStore",
    "StateLayout",
    "TaskFile",
    "TaskStatus",
    "TaskStore",
    "TeamConfig",
    "TeamStore",
    "sanitize_name",
    "with_lock",
]
