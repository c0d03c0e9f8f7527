"""Tests for configuration loading and merging."""

from __future__ import annotations

from pathlib import Path

import pytest

from agentteams.cache import TTLCache
from agentteams.config import Config, ConfigLoader, deep_merge, dict_to_config, merge_configs
from agentteams.config.loader import env_overrides, load_yaml_file


@pytest.fixture
def isolated_env(tmp_path: Path, monkeypatch) -> Path:
    """Point user config at an empty directory and clear AGENTTEAMS_* vars."""
    xdg = tmp_path / "xdg"
    xdg.mkdir()
    monkeypatch.setenv("XDG_CONFIG_HOME", str(xdg))
    monkeypatch.delenv("AGENTTEAMS_HOME", raising=False)
    monkeypatch.delenv("AGENTTEAMS_LOG", raising=False)
    return xdg


def write_project_config(project: Path, text: str) -> None:
    config_dir = project / ".agentteams"
    config_dir.mkdir(parents=True, exist_ok=True)
    (config_dir / "config.yaml").write_text(text)


class TestDeepMerge:
    def test_nested(self) -> None:
        base = {"lock": {"max_retries": 50, "retry_interval": 0.1}, "x": 1}
        override = {"lock": {"max_retries": 10}}

        assert deep_merge(base, override) == {
            "lock": {"max_retries": 10, "retry_interval": 0.1},
            "x": 1,
        }

    def test_none_keeps_base(self) -> None:
        assert deep_merge({"a": 1}, {"a": None}) == {"a": 1}

    def test_does_not_mutate(self) -> None:
        base = {"a": {"b": 1}}
        deep_merge(base, {"a": {"b": 2}})
        assert base == {"a": {"b": 1}}

    def test_merge_configs_order(self) -> None:
        assert merge_configs({"a": 1}, {}, {"a": 2}, {"b": 3}) == {"a": 2, "b": 3}


class TestDictToConfig:
    def test_defaults(self) -> None:
        config = dict_to_config({})

        assert config.state.root is None
        assert config.lock.max_retries == 50
        assert config.lock.retry_interval == 0.1
        assert config.lock.stale_after == 30.0
        assert config.hooks.directory == ".agentteams/hooks"
        assert config.health.heartbeat_stale_seconds == 90.0

    def test_values_and_extra(self) -> None:
        config = dict_to_config(
            {
                "state": {"root": "/srv/teams"},
                "lock": {"max_retries": "5"},
                "hooks": {"timeout": 2},
                "logging": {"level": "debug"},
                "custom": {"key": "value"},
            }
        )

        assert config.state.root == "/srv/teams"
        assert config.lock.max_retries == 5
        assert config.hooks.timeout == 2.0
        assert config.logging.level == "debug"
        assert config.extra == {"custom": {"key": "value"}}

    def test_non_dict_section_ignored(self) -> None:
        assert dict_to_config({"lock": "fast"}).lock.max_retries == 50


class TestLoading:
    def test_invalid_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text("lock: [unclosed")
        assert load_yaml_file(path) == {}

    def test_missing_file(self, tmp_path: Path) -> None:
        assert load_yaml_file(tmp_path / "nope.yaml") == {}

    def test_env_overrides(self, isolated_env: Path, monkeypatch) -> None:
        monkeypatch.setenv("AGENTTEAMS_HOME", "/tmp/state")
        monkeypatch.setenv("AGENTTEAMS_LOG", "/tmp/agentteams.log")

        assert env_overrides() == {
            "state": {"root": "/tmp/state"},
            "logging": {"file": "/tmp/agentteams.log"},
        }

    def test_project_overrides_user(self, isolated_env: Path, tmp_path: Path) -> None:
        user_dir = isolated_env / "agentteams"
        user_dir.mkdir()
        (user_dir / "config.yaml").write_text("lock:\n  max_retries: 7\n  stale_after: 10\n")
        project = tmp_path / "project"
        write_project_config(project, "lock:\n  max_retries: 3\n")

        config = ConfigLoader(str(project)).load()

        assert config.lock.max_retries == 3
        assert config.lock.stale_after == 10.0

    def test_env_overrides_project(
        self, isolated_env: Path, tmp_path: Path, monkeypatch
    ) -> None:
        project = tmp_path / "project"
        write_project_config(project, "state:\n  root: /from/project\n")
        monkeypatch.setenv("AGENTTEAMS_HOME", "/from/env")

        assert ConfigLoader(str(project)).load().state.root == "/from/env"


class TestConfigLoaderCache:
    def test_cached_until_ttl(self, isolated_env: Path, tmp_path: Path) -> None:
        project = tmp_path / "project"
        write_project_config(project, "lock:\n  max_retries: 1\n")
        now = [0.0]
        loader = ConfigLoader(str(project), cache=TTLCache(ttl=60.0, clock=lambda: now[0]))

        first = loader.load()
        write_project_config(project, "lock:\n  max_retries: 2\n")

        assert loader.load() is first

        now[0] = 61.0
        assert loader.load().lock.max_retries == 2

    def test_reload_forces_read(self, isolated_env: Path, tmp_path: Path) -> None:
        project = tmp_path / "project"
        write_project_config(project, "lock:\n  max_retries: 1\n")
        loader = ConfigLoader(str(project))
        loader.load()
        write_project_config(project, "lock:\n  max_retries: 2\n")

        assert loader.load(reload=True).lock.max_retries == 2

    def test_prefilled_cache(self) -> None:
        cache: TTLCache[Config] = TTLCache(ttl=60.0)
        config = Config()
        cache.put(config)

        assert ConfigLoader(cache=cache).load() is config
