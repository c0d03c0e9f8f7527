"""Advisory cross-process file lock.

A resource at PATH is locked by atomically creating PATH.lock with
O_CREAT | O_EXCL and writing the holder's PID into it. Whoever creates the
file owns the resource until the file is removed. There is no shared memory
between agent processes, so the lock file is the sole arbiter.

Lock files older than the stale threshold are presumed abandoned by a
crashed holder and are removed before the next attempt. Reclamation is a
best-effort liveness aid, not a correctness guarantee: two late arrivals
can both decide the same file is stale, and the unlink race between them
is tolerated by ignoring FileNotFoundError.

Locks are not reentrant. Acquiring the same path twice from one process
contends with itself until the retry budget runs out.
"""

from __future__ import annotations

import asyncio
import os
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from pathlib import Path
from types import TracebackType
from typing import TypeVar

from agentteams.errors import LockAcquisitionError
from agentteams.logging import get_logger

log = get_logger("lock")

T = TypeVar("T")

LOCK_SUFFIX = ".lock"
DEFAULT_MAX_RETRIES = 50
DEFAULT_RETRY_INTERVAL = 0.1
DEFAULT_STALE_AFTER = 30.0


@dataclass(frozen=True)
class LockSettings:
    """Retry and stale-lock tuning shared by every lock a store takes."""

    max_retries: int = DEFAULT_MAX_RETRIES
    retry_interval: float = DEFAULT_RETRY_INTERVAL  # Seconds
    stale_after: float = DEFAULT_STALE_AFTER  # Seconds


def lock_path_for(path: str | Path) -> Path:
    """Sibling lock file for a protected resource."""
    return Path(f"{os.fspath(path)}{LOCK_SUFFIX}")


class FileLock:
    """Exclusive advisory lock over one resource path.

    Usage:
        async with FileLock(config_path):
            ...  # read-modify-write config_path
    """

    def __init__(
        self,
        path: str | Path,
        *,
        max_retries: int | None = None,
        settings: LockSettings | None = None,
    ) -> None:
        self._settings = settings or LockSettings()
        self._path = Path(path)
        self._lock_path = lock_path_for(path)
        self._max_retries = max_retries if max_retries is not None else self._settings.max_retries
        self._held = False

    @property
    def path(self) -> Path:
        return self._path

    @property
    def lock_path(self) -> Path:
        return self._lock_path

    @property
    def held(self) -> bool:
        return self._held

    async def acquire(self) -> None:
        """Create the lock file, waiting between attempts.

        Raises:
            LockAcquisitionError: When the retry budget is exhausted. A budget
                of zero fails without attempting to create the lock file.
            OSError: For failures other than the lock file already existing.
        """
        remaining = self._max_retries
        while remaining > 0:
            if self._try_create() or (self._reclaim_if_stale() and self._try_create()):
                self._held = True
                return

            await asyncio.sleep(self._settings.retry_interval)
            remaining -= 1

        log.debug("Giving up on %s after %d attempts", self._lock_path, self._max_retries)
        raise LockAcquisitionError(str(self._path), self._max_retries)

    def release(self) -> None:
        """Remove the lock file. Content is not checked."""
        self._held = False
        try:
            os.unlink(self._lock_path)
        except OSError:
            pass  # Already gone

    def _try_create(self) -> bool:
        try:
            fd = os.open(self._lock_path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o644)
        except FileExistsError:
            return False
        try:
            os.write(fd, str(os.getpid()).encode("ascii"))
        finally:
            os.close(fd)
        return True

    def _reclaim_if_stale(self) -> bool:
        """Remove an abandoned lock file. True means retry right away."""
        try:
            mtime = os.stat(self._lock_path).st_mtime
        except FileNotFoundError:
            # Released between our create attempt and the stat
            return True

        age = time.time() - mtime
        if age <= self._settings.stale_after:
            return False

        try:
            os.unlink(self._lock_path)
        except FileNotFoundError:
            pass  # Another process reclaimed it first
        log.info("Reclaimed stale lock %s (age %.1fs)", self._lock_path, age)
        return True

    async def __aenter__(self) -> FileLock:
        await self.acquire()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.release()


async def with_lock(
    path: str | Path,
    fn: Callable[[], Awaitable[T]],
    max_retries: int | None = None,
    *,
    settings: LockSettings | None = None,
) -> T:
    """Run fn() while holding the lock on path and return its result.

    The lock file is removed even if fn() raises.
    """
    async with FileLock(path, max_retries=max_retries, settings=settings):
        return await fn()
