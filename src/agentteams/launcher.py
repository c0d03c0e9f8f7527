"""Process launcher protocol.

Teammates run in terminal panes or windows opened by a multiplexer
adapter (tmux, iTerm2, WezTerm, Zellij, ...). The adapters live outside
this package; the shared state layer only needs to ask whether a
teammate's pane or window is still alive.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable


@dataclass
class SpawnOptions:
    """Options for spawning a new teammate pane."""

    name: str  # Pane name, usually the agent name
    cwd: str
    command: str
    env: dict[str, str] = field(default_factory=dict)
    team_name: str | None = None


class ProcessLauncher(Protocol):
    """Protocol for terminal multiplexer adapters.

    spawn() returns an opaque pane or window id used by the other calls.
    kill() must be idempotent.
    """

    def spawn(self, options: SpawnOptions) -> str: ...

    def kill(self, process_id: str) -> None: ...

    def is_alive(self, process_id: str) -> bool: ...

    def set_title(self, title: str) -> None: ...


@runtime_checkable
class WindowLauncher(ProcessLauncher, Protocol):
    """A launcher that can also open teammates in separate windows.

    Adapters for multiplexers without separate windows implement only
    ProcessLauncher.
    """

    def spawn_window(self, options: SpawnOptions) -> str: ...

    def is_window_alive(self, window_id: str) -> bool: ...


def is_member_alive(launcher: ProcessLauncher, pane_id: str, window_id: str | None) -> bool:
    """Liveness of a teammate's window if it has one, else of its pane."""
    if window_id:
        if isinstance(launcher, WindowLauncher):
            return launcher.is_window_alive(window_id)
        return launcher.is_alive(window_id)
    if pane_id:
        return launcher.is_alive(pane_id)
    return False
