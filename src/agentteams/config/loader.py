"""Configuration file loading.

Handles:
- YAML file parsing
- Cascading merge (system -> user -> project -> environment)
- Conversion from dict to typed Config dataclass
- Time-bounded caching through an explicit ConfigLoader object
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import yaml

from agentteams.cache import TTLCache
from agentteams.config.paths import get_config_paths
from agentteams.config.schema import (
    Config,
    HealthConfig,
    HooksConfig,
    LockConfig,
    LoggingConfig,
    StateConfig,
)

_log = logging.getLogger("agentteams.config")

_KNOWN_SECTIONS = {"state", "lock", "hooks", "health", "logging"}


def load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a YAML file, returning an empty dict if missing or invalid."""
    if not path.exists():
        return {}

    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
            return data if isinstance(data, dict) else {}
    except yaml.YAMLError as e:
        _log.warning("Invalid YAML in %s: %s", path, e)
        return {}
    except PermissionError:
        _log.debug("Permission denied reading %s", path)
        return {}
    except OSError as e:
        _log.warning("Error reading %s: %s", path, e)
        return {}


def env_overrides() -> dict[str, Any]:
    """Build a config dict from AGENTTEAMS_* environment variables."""
    overrides: dict[str, Any] = {}

    home = os.environ.get("AGENTTEAMS_HOME")
    if home:
        overrides.setdefault("state", {})["root"] = home

    log_path = os.environ.get("AGENTTEAMS_LOG")
    if log_path:
        overrides.setdefault("logging", {})["file"] = log_path

    return overrides


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Merge override into a copy of base.

    Nested dicts merge recursively, lists and scalars are replaced, and a
    None in override leaves the base value in place.
    """
    result = base.copy()
    for key, value in override.items():
        if value is None:
            continue
        current = result.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            result[key] = deep_merge(current, value)
        else:
            result[key] = value
    return result


def merge_configs(*configs: dict[str, Any]) -> dict[str, Any]:
    """Merge configs in order, later ones winning."""
    result: dict[str, Any] = {}
    for config in configs:
        if config:
            result = deep_merge(result, config)
    return result


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    value = data.get(name)
    return value if isinstance(value, dict) else {}


def dict_to_config(data: dict[str, Any]) -> Config:
    """Convert a merged dict to the typed Config dataclass."""
    state_data = _section(data, "state")
    state = StateConfig(root=state_data.get("root"))

    lock_data = _section(data, "lock")
    lock_defaults = LockConfig()
    lock = LockConfig(
        max_retries=int(lock_data.get("max_retries", lock_defaults.max_retries)),
        retry_interval=float(lock_data.get("retry_interval", lock_defaults.retry_interval)),
        stale_after=float(lock_data.get("stale_after", lock_defaults.stale_after)),
    )

    hooks_data = _section(data, "hooks")
    hooks_defaults = HooksConfig()
    hooks = HooksConfig(
        directory=hooks_data.get("directory", hooks_defaults.directory),
        team_env_var=hooks_data.get("team_env_var", hooks_defaults.team_env_var),
        timeout=float(hooks_data.get("timeout", hooks_defaults.timeout)),
    )

    health_data = _section(data, "health")
    health_defaults = HealthConfig()
    health = HealthConfig(
        heartbeat_stale_seconds=float(
            health_data.get("heartbeat_stale_seconds", health_defaults.heartbeat_stale_seconds)
        ),
        startup_stall_seconds=float(
            health_data.get("startup_stall_seconds", health_defaults.startup_stall_seconds)
        ),
    )

    log_data = _section(data, "logging")
    logging_config = LoggingConfig(
        level=log_data.get("level"),
        verbose=log_data.get("verbose"),
        file=log_data.get("file"),
    )

    extra = {k: v for k, v in data.items() if k not in _KNOWN_SECTIONS}

    return Config(
        state=state,
        lock=lock,
        hooks=hooks,
        health=health,
        logging=logging_config,
        extra=extra,
    )


class ConfigLoader:
    """Loads and caches the merged configuration for one project root.

    Priority order (highest to lowest):
    1. Environment variables
    2. Project config ($project_root/.agentteams/config.yaml)
    3. User config
    4. System config
    """

    def __init__(
        self,
        project_root: str | None = None,
        *,
        cache: TTLCache[Config] | None = None,
        ttl: float = 60.0,
    ) -> None:
        self._project_root = project_root
        self._cache: TTLCache[Config] = cache if cache is not None else TTLCache(ttl=ttl)

    @property
    def cache(self) -> TTLCache[Config]:
        return self._cache

    def load(self, reload: bool = False) -> Config:
        """Return the cached config, re-reading files when stale or forced."""
        if reload:
            self._cache.invalidate()
        return self._cache.get_or_fetch(self._read)

    def _read(self) -> Config:
        configs: list[dict[str, Any]] = []
        for path in get_config_paths(self._project_root):
            config_data = load_yaml_file(path)
            if config_data:
                _log.debug("Loaded config from %s", path)
                configs.append(config_data)

        env_config = env_overrides()
        if env_config:
            configs.append(env_config)

        return dict_to_config(merge_configs(*configs))


def load_config(project_root: str | None = None) -> Config:
    """Read the configuration once, without caching."""
    return ConfigLoader(project_root).load()
