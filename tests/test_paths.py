"""Tests for name sanitization and the state directory layout."""

from __future__ import annotations

from pathlib import Path

import pytest

from agentteams.errors import InvalidNameError
from agentteams.storage.paths import StateLayout, sanitize_name


class TestSanitizeName:
    @pytest.mark.parametrize(
        "name",
        ["team", "Team-1", "worker_2", "a", "ABC-def_123", "-", "_", "42"],
    )
    def test_valid_names_unchanged(self, name: str) -> None:
        assert sanitize_name(name) == name

    @pytest.mark.parametrize(
        "name",
        [
            "",
            "..",
            "../etc",
            "a/b",
            "a\\b",
            "with space",
            "dot.name",
            "tab\t",
            "new\nline",
            "ünïcode",
            "../../../.ssh/id_rsa",
            "/abs",
        ],
    )
    def test_invalid_names_rejected(self, name: str) -> None:
        with pytest.raises(InvalidNameError):
            sanitize_name(name)

    def test_invalid_name_is_value_error(self) -> None:
        with pytest.raises(ValueError, match="Invalid name"):
            sanitize_name("a/b")


class TestStateLayout:
    def test_bit_exact_layout(self, tmp_path: Path) -> None:
        layout = StateLayout(tmp_path)
        assert layout.config_path("t") == tmp_path / "teams" / "t" / "config.json"
        assert layout.inbox_path("t", "a") == tmp_path / "teams" / "t" / "inboxes" / "a.json"
        assert layout.runtime_status_path("t", "a") == tmp_path / "teams" / "t" / "runtime" / "a.json"
        assert layout.task_dir("t") == tmp_path / "tasks" / "t"
        assert layout.task_path("t", "7") == tmp_path / "tasks" / "t" / "7.json"

    def test_path_functions_have_no_side_effects(self, tmp_path: Path) -> None:
        layout = StateLayout(tmp_path / "root")
        layout.inbox_path("t", "a")
        layout.task_path("t", "1")
        assert not (tmp_path / "root").exists()

    def test_ensure_dirs(self, tmp_path: Path) -> None:
        layout = StateLayout(tmp_path / "root")
        layout.ensure_dirs()
        layout.ensure_dirs()
        assert (tmp_path / "root" / "teams").is_dir()
        assert (tmp_path / "root" / "tasks").is_dir()

    @pytest.mark.parametrize(
        "call",
        [
            lambda layout: layout.team_dir("../../etc"),
            lambda layout: layout.inbox_path("audit-team", "../../../.ssh/id_rsa"),
            lambda layout: layout.runtime_status_path("audit-team", "x/y"),
            lambda layout: layout.task_path("audit-team", "../../../etc/passwd"),
            lambda layout: layout.config_path(""),
        ],
    )
    def test_traversal_rejected(self, tmp_path: Path, call) -> None:
        with pytest.raises(InvalidNameError):
            call(StateLayout(tmp_path))
