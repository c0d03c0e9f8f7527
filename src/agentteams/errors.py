"""Exception taxonomy for the shared team state layer.

Every error raised by the stores derives from AgentTeamsError so callers
can catch the whole family at once. Validation errors are raised before
the filesystem is touched; LockAcquisitionError is the only timeout signal.
"""

from __future__ import annotations


class AgentTeamsError(Exception):
    """Base class for all agentteams errors."""


class InvalidNameError(AgentTeamsError, ValueError):
    """A team, agent or task identifier contains disallowed characters."""

    def __init__(self, name: str) -> None:
        super().__init__(
            f'Invalid name: "{name}". Only alphanumeric characters, '
            "hyphens, and underscores are allowed."
        )
        self.name = name


class TeamNotFoundError(AgentTeamsError):
    """The team has no config file."""

    def __init__(self, team_name: str) -> None:
        super().__init__(f"Team {team_name} not found")
        self.team_name = team_name


class TaskNotFoundError(AgentTeamsError):
    """The task file does not exist."""

    def __init__(self, team_name: str, task_id: str) -> None:
        super().__init__(f"Task {task_id} not found in team {team_name}")
        self.team_name = team_name
        self.task_id = task_id


class MemberNotFoundError(AgentTeamsError):
    """The named agent is not on the team roster."""

    def __init__(self, team_name: str, agent_name: str) -> None:
        super().__init__(f"Teammate {agent_name} not found in team {team_name}")
        self.team_name = team_name
        self.agent_name = agent_name


class EmptySubjectError(AgentTeamsError):
    """A task was created with a blank subject."""

    def __init__(self) -> None:
        super().__init__("Task subject must not be empty")


class EmptyPlanError(AgentTeamsError):
    """A blank plan was submitted."""

    def __init__(self) -> None:
        super().__init__("Plan must not be empty")


class InvalidTaskStateError(AgentTeamsError):
    """A plan was evaluated on a task that is not in planning."""

    def __init__(self, task_id: str, status: str) -> None:
        super().__init__(f"Task {task_id} is not in 'planning' status (current: {status})")
        self.task_id = task_id
        self.status = status


class NoPlanSubmittedError(AgentTeamsError):
    """A plan evaluation was requested but no plan is on file."""

    def __init__(self, task_id: str) -> None:
        super().__init__(f"Task {task_id} has no submitted plan")
        self.task_id = task_id


class FeedbackRequiredError(AgentTeamsError):
    """A plan was rejected without feedback."""

    def __init__(self) -> None:
        super().__init__("Feedback is required when rejecting a plan")


class LockAcquisitionError(AgentTeamsError):
    """The retry budget ran out before the lock file could be created."""

    def __init__(self, path: str, attempts: int) -> None:
        super().__init__(f"Could not acquire lock on {path} after {attempts} attempts")
        self.path = path
        self.attempts = attempts
