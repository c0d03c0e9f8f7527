"""Configuration management for agentteams.

Hierarchical YAML configuration with:
- System-level config (/etc/agentteams/ or %PROGRAMDATA%)
- User-level config (~/.config/agentteams/, ~/.agentteams/ or %APPDATA%)
- Project-level config ($project_root/.agentteams/)
- Environment variable overrides (highest priority)

Example usage:
    from agentteams.config import ConfigLoader

    loader = ConfigLoader(project_root="/path/to/project")
    config = loader.load()
    print(config.lock.max_retries)
"""

from agentteams.config.loader import (
    ConfigLoader,
    deep_merge,
    dict_to_config,
    load_config,
    merge_configs,
)
from agentteams.config.paths import (
    default_state_root,
    get_config_paths,
    get_project_config_path,
    get_system_config_path,
    get_user_config_path,
)
from agentteams.config.schema import (
    Config,
    HealthConfig,
    HooksConfig,
    LockConfig,
    LoggingConfig,
    StateConfig,
)

__all__ = [
    "Config",
    "ConfigLoader",
    "load_config",
    "deep_merge",
    "merge_configs",
    "dict_to_config",
    "StateConfig",
    "LockConfig",
    "HooksConfig",
    "HealthConfig",
    "LoggingConfig",
    "default_state_root",
    "get_config_paths",
    "get_system_config_path",
    "get_user_config_path",
    "get_project_config_path",
]
