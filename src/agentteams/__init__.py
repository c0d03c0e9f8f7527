"""agentteams: shared filesystem state for teams of cooperating agent processes."""

__version__ = "0.1.0"

from agentteams.config import Config, ConfigLoader, load_config
from agentteams.errors import (
    AgentTeamsError,
    EmptyPlanError,
    EmptySubjectError,
    FeedbackRequiredError,
    InvalidNameError,
    InvalidTaskStateError,
    LockAcquisitionError,
    MemberNotFoundError,
    NoPlanSubmittedError,
    TaskNotFoundError,
    TeamNotFoundError,
)
from agentteams.storage import (
    AgentRuntimeStatus,
    InboxMessage,
    Member,
    PlanAction,
    TaskFile,
    TaskStatus,
    TeamConfig,
)
from agentteams.workspace import Workspace

__all__ = [
    # Entry point
    "Workspace",
    # Config
    "Config",
    "ConfigLoader",
    "load_config",
    # Records
    "AgentRuntimeStatus",
    "InboxMessage",
    "Member",
    "PlanAction",
    "TaskFile",
    "TaskStatus",
    "TeamConfig",
    # Errors
    "AgentTeamsError",
    "EmptyPlanError",
    "EmptySubjectError",
    "FeedbackRequiredError",
    "InvalidNameError",
    "InvalidTaskStateError",
    "LockAcquisitionError",
    "MemberNotFoundError",
    "NoPlanSubmittedError",
    "TaskNotFoundError",
    "TeamNotFoundError",
]
