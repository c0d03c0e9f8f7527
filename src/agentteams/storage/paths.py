"""Filesystem layout of the shared team state.

Everything lives under one state root:

    <root>/teams/<team>/config.json
    <root>/teams/<team>/inboxes/<agent>.json
    <root>/teams/<team>/runtime/<agent>.json
    <root>/tasks/<team>/<id>.json

Every user-supplied segment is passed through sanitize_name() before it
is joined, so names like "../etc" never reach the filesystem.
"""

from __future__ import annotations

import re
from pathlib import Path

from agentteams.errors import InvalidNameError

_VALID_NAME = re.compile(r"[A-Za-z0-9_-]+")


def sanitize_name(name: str) -> str:
    """Return name unchanged if it only uses [A-Za-z0-9_-].

    Raises:
        InvalidNameError: For any other input, including the empty string.
    """
    if not isinstance(name, str) or _VALID_NAME.fullmatch(name) is None:
        raise InvalidNameError(str(name))
    return name


class StateLayout:
    """Path construction under a fixed state root.

    Only ensure_dirs() touches the filesystem; all other methods are pure.
    """

    def __init__(self, root: str | Path) -> None:
        self._root = Path(root).expanduser()

    @property
    def root(self) -> Path:
        return self._root

    @property
    def teams_dir(self) -> Path:
        return self._root / "teams"

    @property
    def tasks_dir(self) -> Path:
        return self._root / "tasks"

    def ensure_dirs(self) -> None:
        """Create the state root and its teams/ and tasks/ subdirectories."""
        self.teams_dir.mkdir(parents=True, exist_ok=True)
        self.tasks_dir.mkdir(parents=True, exist_ok=True)

    def team_dir(self, team_name: str) -> Path:
        return self.teams_dir / sanitize_name(team_name)

    def task_dir(self, team_name: str) -> Path:
        return self.tasks_dir / sanitize_name(team_name)

    def config_path(self, team_name: str) -> Path:
        return self.team_dir(team_name) / "config.json"

    def inbox_dir(self, team_name: str) -> Path:
        return self.team_dir(team_name) / "inboxes"

    def inbox_path(self, team_name: str, agent_name: str) -> Path:
        return self.inbox_dir(team_name) / f"{sanitize_name(agent_name)}.json"

    def runtime_dir(self, team_name: str) -> Path:
        return self.team_dir(team_name) / "runtime"

    def runtime_status_path(self, team_name: str, agent_name: str) -> Path:
        return self.runtime_dir(team_name) / f"{sanitize_name(agent_name)}.json"

    def task_path(self, team_name: str, task_id: str) -> Path:
        return self.task_dir(team_name) / f"{sanitize_name(task_id)}.json"

    def __repr__(self) -> str:
        return f"StateLayout(root={str(self._root)!r})"
