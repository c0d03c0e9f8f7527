"""Configuration schema dataclasses for agentteams.

All fields have defaults so partial YAML files merge cleanly.

Example config.yaml:
    state:
      root: ~/.agentteams
    lock:
      max_retries: 50
      retry_interval: 0.1
      stale_after: 30
    hooks:
      directory: .agentteams/hooks
    logging:
      verbose: 3
      file: ~/agentteams.log
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class StateConfig:
    """Where the shared team state lives."""

    root: str | None = None  # Default: ~/.agentteams


@dataclass
class LockConfig:
    """Advisory file lock tuning.

    The defaults give roughly five seconds of waiting before a
    LockAcquisitionError is raised.
    """

    max_retries: int = 50
    retry_interval: float = 0.1  # Seconds between attempts
    stale_after: float = 30.0  # Lock files older than this are reclaimed


@dataclass
class HooksConfig:
    """Task lifecycle hook scripts."""

    directory: str = ".agentteams/hooks"  # Relative paths resolve against cwd
    team_env_var: str = "AGENTTEAMS_TEAM"
    timeout: float = 30.0


@dataclass
class HealthConfig:
    """Thresholds used when classifying teammate health."""

    heartbeat_stale_seconds: float = 90.0
    startup_stall_seconds: float = 60.0


@dataclass
class LoggingConfig:
    level: str | None = None  # DEBUG, INFO, WARNING, ERROR
    verbose: int | None = None  # 0..4, takes precedence over level
    file: str | None = None


@dataclass
class Config:
    """Root configuration object."""

    state: StateConfig = field(default_factory=StateConfig)
    lock: LockConfig = field(default_factory=LockConfig)
    hooks: HooksConfig = field(default_factory=HooksConfig)
    health: HealthConfig = field(default_factory=HealthConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    # Unknown top-level sections are preserved for extensions
    extra: dict[str, Any] = field(default_factory=dict)
