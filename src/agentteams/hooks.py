"""Task lifecycle hook scripts.

A hook is an executable at <hooks_dir>/<hook_name>.sh. It is run without
a shell, with the JSON-encoded payload as its only argument and the team
name exported in an environment variable. A missing hook counts as
success; any failure is logged and reported as False, never raised.
"""

from __future__ import annotations

import asyncio
import json
import os
from pathlib import Path
from typing import Any

from agentteams.logging import get_logger

log = get_logger("hooks")

TASK_COMPLETED = "task_completed"


class HookRunner:
    """Runs hook scripts from one directory."""

    def __init__(
        self,
        hooks_dir: str | Path,
        *,
        team_env_var: str = "AGENTTEAMS_TEAM",
        timeout: float | None = 30.0,
    ) -> None:
        """Initialize the hook runner.

        Args:
            hooks_dir: Directory holding hook scripts. Relative paths are
                resolved against the working directory at run time.
            team_env_var: Environment variable carrying the team name.
            timeout: Seconds before a hook is killed. None disables it.
        """
        self._hooks_dir = Path(hooks_dir)
        self._team_env_var = team_env_var
        self._timeout = timeout

    def hook_path(self, hook_name: str) -> Path:
        hooks_dir = self._hooks_dir
        if not hooks_dir.is_absolute():
            hooks_dir = Path.cwd() / hooks_dir
        return hooks_dir / f"{hook_name}.sh"

    async def run(self, team_name: str, hook_name: str, payload: Any) -> bool:
        """Run a hook if it exists.

        Returns:
            True if the hook is absent or exits with status 0.
        """
        path = self.hook_path(hook_name)
        if not path.exists():
            return True

        env = os.environ.copy()
        env[self._team_env_var] = team_name

        try:
            process = await asyncio.create_subprocess_exec(
                str(path),
                json.dumps(payload),
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                env=env,
            )
        except OSError as e:
            log.error("Hook %s could not be started: %s", hook_name, e)
            return False

        try:
            _, stderr = await asyncio.wait_for(process.communicate(), timeout=self._timeout)
        except asyncio.TimeoutError:
            process.kill()
            await process.wait()
            log.error("Hook %s timed out after %ss", hook_name, self._timeout)
            return False

        if process.returncode != 0:
            log.error(
                "Hook %s failed with exit code %s: %s",
                hook_name,
                process.returncode,
                stderr.decode("utf-8", errors="replace").strip(),
            )
            return False

        log.debug("Hook %s succeeded for team %s", hook_name, team_name)
        return True
