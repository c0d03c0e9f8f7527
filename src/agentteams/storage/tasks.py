"""Task store and plan approval workflow.

Tasks live one per file under the team's task directory, named by a
numeric id. Two kinds of lock are used:

- the task directory lock (tasks/<team>.lock) for operations that depend
  on the set of files: id allocation, listing, bulk owner reset
- the task file lock (tasks/<team>/<id>.json.lock) for single-task reads
  and read-modify-write cycles

Locks are always taken directory first, then file, never the reverse.

Status flow:

    pending -> planning -> in_progress -> completed
                  ^  |
                  +--+  (plan rejected, feedback recorded)

Any status may move to "deleted", which removes the task file.
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from enum import Enum
from pathlib import Path
from typing import Any

from agentteams.errors import (
    EmptyPlanError,
    EmptySubjectError,
    FeedbackRequiredError,
    InvalidTaskStateError,
    NoPlanSubmittedError,
    TaskNotFoundError,
    TeamNotFoundError,
)
from agentteams.hooks import TASK_COMPLETED, HookRunner
from agentteams.logging import get_logger
from agentteams.storage.jsonio import read_json, write_json
from agentteams.storage.lock import FileLock, LockSettings
from agentteams.storage.paths import StateLayout
from agentteams.storage.schema import TaskFile, TaskStatus, apply_updates
from agentteams.storage.teams import TeamStore

log = get_logger("tasks")


class PlanAction(Enum):
    APPROVE = "approve"
    REJECT = "reject"


def _numeric_task_files(task_dir: Path) -> list[tuple[int, Path]]:
    """(id, path) for every <digits>.json file in the directory."""
    found: list[tuple[int, Path]] = []
    for entry in task_dir.iterdir():
        if entry.suffix == ".json" and entry.stem.isdigit():
            found.append((int(entry.stem), entry))
    return found


def _merge_metadata(
    current: dict[str, Any] | None, update: Mapping[str, Any]
) -> dict[str, Any]:
    """Shallow-merge metadata keys; a None value removes the key."""
    merged = dict(current or {})
    for key, value in update.items():
        if value is None:
            merged.pop(key, None)
        else:
            merged[key] = value
    return merged


class TaskStore:
    """CRUD and lifecycle operations over a team's task files."""

    def __init__(
        self,
        layout: StateLayout,
        teams: TeamStore,
        hooks: HookRunner | None = None,
        lock_settings: LockSettings | None = None,
    ) -> None:
        """Initialize the task store.

        Args:
            layout: State directory layout
            teams: Team store, used to check that a team exists
            hooks: Runner for the task_completed hook; None disables hooks
            lock_settings: Retry and stale-lock tuning
        """
        self._layout = layout
        self._teams = teams
        self._hooks = hooks
        self._lock_settings = lock_settings or LockSettings()
        self._pending_hooks: set[asyncio.Task[bool]] = set()

    # =========================================================================
    # Creation and lookup
    # =========================================================================

    def next_task_id(self, team_name: str) -> str:
        """Max existing numeric id + 1, or "1". Call only under the directory lock."""
        task_dir = self._layout.task_dir(team_name)
        ids = [task_id for task_id, _ in _numeric_task_files(task_dir)] if task_dir.is_dir() else []
        return str(max(ids) + 1) if ids else "1"

    async def create_task(
        self,
        team_name: str,
        subject: str,
        description: str,
        active_form: str = "",
        metadata: dict[str, Any] | None = None,
    ) -> TaskFile:
        """Create a pending task with the next free id.

        Raises:
            EmptySubjectError: If subject is blank.
            TeamNotFoundError: If the team does not exist.
        """
        if not subject or not subject.strip():
            raise EmptySubjectError()
        if not self._teams.team_exists(team_name):
            raise TeamNotFoundError(team_name)

        task_dir = self._layout.task_dir(team_name)
        task_dir.mkdir(parents=True, exist_ok=True)

        # Id allocation and the write must happen under one directory lock
        async with FileLock(task_dir, settings=self._lock_settings):
            task = TaskFile(
                id=self.next_task_id(team_name),
                subject=subject,
                description=description,
                active_form=active_form,
                status=TaskStatus.PENDING,
                metadata=metadata,
            )
            write_json(self._layout.task_path(team_name, task.id), task.to_dict())

        log.debug("Created task %s in team %s: %s", task.id, team_name, subject)
        return task

    async def read_task(
        self, team_name: str, task_id: str, retries: int | None = None
    ) -> TaskFile:
        """Read one task under its file lock.

        Raises:
            TaskNotFoundError: If the task file does not exist.
        """
        path = self._layout.task_path(team_name, task_id)
        if not path.exists():
            raise TaskNotFoundError(team_name, task_id)
        async with FileLock(path, max_retries=retries, settings=self._lock_settings):
            return self._load(team_name, task_id)

    async def list_tasks(self, team_name: str) -> list[TaskFile]:
        """All tasks of a team, ordered by numeric id."""
        task_dir = self._layout.task_dir(team_name)
        if not task_dir.is_dir():
            return []

        tasks: list[tuple[int, TaskFile]] = []
        async with FileLock(task_dir, settings=self._lock_settings):
            for task_id, path in _numeric_task_files(task_dir):
                try:
                    task = TaskFile.from_dict(read_json(path))
                except FileNotFoundError:
                    # Deleted by update_task, which holds only the file lock
                    continue
                if task.status is not TaskStatus.DELETED:
                    tasks.append((task_id, task))

        tasks.sort(key=lambda item: item[0])
        return [task for _, task in tasks]

    # =========================================================================
    # Updates
    # =========================================================================

    async def update_task(
        self,
        team_name: str,
        task_id: str,
        updates: Mapping[str, Any],
        retries: int | None = None,
    ) -> TaskFile:
        """Merge updates into a task.

        Keys are TaskFile field names; None values are skipped. A metadata
        update is merged key by key into the existing metadata. Moving to
        DELETED removes the file and returns the merged record. Every update
        that sets the status to COMPLETED starts the task_completed hook in
        the background, including one on a task that is already completed.

        Raises:
            TaskNotFoundError: If the task file does not exist.
            ValueError: For unknown fields or an invalid status.
        """
        path = self._layout.task_path(team_name, task_id)
        if not path.exists():
            raise TaskNotFoundError(team_name, task_id)

        updates = dict(updates)
        metadata_update = updates.pop("metadata", None)
        requested_status = updates.get("status")
        completion_requested = (
            requested_status is not None and TaskStatus(requested_status) is TaskStatus.COMPLETED
        )

        async with FileLock(path, max_retries=retries, settings=self._lock_settings):
            task = self._load(team_name, task_id)
            updated = apply_updates(task, updates)
            if metadata_update is not None:
                updated.metadata = _merge_metadata(task.metadata, metadata_update)

            if updated.status is TaskStatus.DELETED:
                path.unlink()
                log.debug("Deleted task %s in team %s", task_id, team_name)
                return updated

            write_json(path, updated.to_dict())

        if completion_requested and updated.status is TaskStatus.COMPLETED:
            self._schedule_completion_hook(team_name, updated)
        return updated

    async def submit_plan(self, team_name: str, task_id: str, plan: str) -> TaskFile:
        """Attach a plan and move the task to planning.

        Raises:
            EmptyPlanError: If plan is blank or whitespace.
        """
        if not plan or not plan.strip():
            raise EmptyPlanError()
        return await self.update_task(
            team_name, task_id, {"status": TaskStatus.PLANNING, "plan": plan}
        )

    async def evaluate_plan(
        self,
        team_name: str,
        task_id: str,
        action: PlanAction | str,
        feedback: str | None = None,
        retries: int | None = None,
    ) -> TaskFile:
        """Approve or reject a submitted plan.

        Approval moves the task to in_progress and clears the feedback.
        Rejection keeps it in planning with the feedback recorded, so the
        owner can resubmit.

        Raises:
            FeedbackRequiredError: If rejecting without feedback.
            InvalidTaskStateError: If the task is not in planning.
            NoPlanSubmittedError: If the task has no plan.
            TaskNotFoundError: If the task file does not exist.
        """
        action = PlanAction(action)
        if action is PlanAction.REJECT and (not feedback or not feedback.strip()):
            raise FeedbackRequiredError()

        path = self._layout.task_path(team_name, task_id)
        if not path.exists():
            raise TaskNotFoundError(team_name, task_id)

        # The checks depend on the stored state, so read-check-write under one lock
        async with FileLock(path, max_retries=retries, settings=self._lock_settings):
            task = self._load(team_name, task_id)
            if task.status is not TaskStatus.PLANNING:
                raise InvalidTaskStateError(task_id, task.status.value)
            if not task.plan or not task.plan.strip():
                raise NoPlanSubmittedError(task_id)

            if action is PlanAction.APPROVE:
                task.status = TaskStatus.IN_PROGRESS
                task.plan_feedback = ""
            else:
                task.plan_feedback = feedback

            write_json(path, task.to_dict())

        log.debug("Plan for task %s in team %s: %s", task_id, team_name, action.value)
        return task

    async def reset_owner_tasks(self, team_name: str, agent_name: str) -> list[str]:
        """Release every task owned by an agent.

        Owner is cleared and status returns to pending, except for
        completed tasks which keep their status.

        Returns:
            Ids of the tasks that were released.
        """
        task_dir = self._layout.task_dir(team_name)
        if not task_dir.is_dir():
            return []

        released: list[str] = []
        async with FileLock(task_dir, settings=self._lock_settings):
            for _, path in sorted(_numeric_task_files(task_dir)):
                async with FileLock(path, settings=self._lock_settings):
                    try:
                        task = TaskFile.from_dict(read_json(path))
                    except FileNotFoundError:
                        continue
                    if task.owner != agent_name:
                        continue
                    task.owner = None
                    if task.status is not TaskStatus.COMPLETED:
                        task.status = TaskStatus.PENDING
                    write_json(path, task.to_dict())
                    released.append(task.id)

        if released:
            log.info("Released tasks %s owned by %s in team %s", released, agent_name, team_name)
        return released

    # =========================================================================
    # Hooks
    # =========================================================================

    async def wait_for_hooks(self) -> None:
        """Wait for every background hook started so far."""
        while self._pending_hooks:
            await asyncio.gather(*list(self._pending_hooks))

    def _schedule_completion_hook(self, team_name: str, task: TaskFile) -> None:
        if self._hooks is None:
            return
        hook_task = asyncio.create_task(self._run_completion_hook(team_name, task))
        self._pending_hooks.add(hook_task)
        hook_task.add_done_callback(self._pending_hooks.discard)

    async def _run_completion_hook(self, team_name: str, task: TaskFile) -> bool:
        assert self._hooks is not None
        try:
            ok = await self._hooks.run(team_name, TASK_COMPLETED, task.to_dict())
        except Exception:
            # The update already committed; a hook must never undo it
            log.exception("Completion hook crashed for task %s in team %s", task.id, team_name)
            return False
        if not ok:
            log.warning("Completion hook failed for task %s in team %s", task.id, team_name)
        return ok

    def _load(self, team_name: str, task_id: str) -> TaskFile:
        try:
            return TaskFile.from_dict(read_json(self._layout.task_path(team_name, task_id)))
        except FileNotFoundError:
            raise TaskNotFoundError(team_name, task_id) from None
