"""Tests for the team roster store."""

from __future__ import annotations

import json
import os

import pytest

from agentteams.errors import InvalidNameError, TeamNotFoundError
from agentteams.storage import AgentType, Member
from agentteams.storage.lock import lock_path_for
from agentteams.workspace import Workspace


def make_member(name: str, **kwargs) -> Member:
    return Member(agent_id=f"{name}@test-team", name=name, cwd="/work", **kwargs)


class TestCreateTeam:
    def test_creates_config_and_directories(self, workspace: Workspace, monkeypatch) -> None:
        monkeypatch.setenv("TMUX_PANE", "%3")

        config = workspace.teams.create_team(
            "alpha", "session-1", "lead-1", description="Alpha", default_model="sonnet"
        )

        layout = workspace.layout
        assert layout.team_dir("alpha").is_dir()
        assert layout.task_dir("alpha").is_dir()
        assert workspace.teams.team_exists("alpha")

        assert len(config.members) == 1
        lead = config.members[0]
        assert lead.name == "team-lead"
        assert lead.agent_type is AgentType.LEAD
        assert lead.agent_id == "lead-1"
        assert lead.tmux_pane_id == "%3"
        assert lead.cwd == os.getcwd()

    def test_on_disk_format(self, workspace: Workspace) -> None:
        workspace.teams.create_team("alpha", "session-1", "lead-1")

        raw = workspace.layout.config_path("alpha").read_text(encoding="utf-8")
        data = json.loads(raw)

        assert raw.startswith('{\n  "name"')
        assert data["leadAgentId"] == "lead-1"
        assert data["leadSessionId"] == "session-1"
        assert data["members"][0]["agentType"] == "lead"
        assert data["members"][0]["subscriptions"] == []
        assert "defaultModel" not in data

    def test_second_create_overwrites(self, workspace: Workspace) -> None:
        workspace.teams.create_team("alpha", "session-1", "lead-1", description="first")
        workspace.teams.create_team("alpha", "session-2", "lead-2", description="second")

        data = json.loads(workspace.layout.config_path("alpha").read_text())
        assert data["description"] == "second"
        assert data["leadAgentId"] == "lead-2"

    def test_invalid_name(self, workspace: Workspace) -> None:
        with pytest.raises(InvalidNameError):
            workspace.teams.create_team("../evil", "s", "l")
        assert not (workspace.layout.root / "evil").exists()


class TestReadConfig:
    @pytest.mark.asyncio
    async def test_read(self, workspace: Workspace, team: str) -> None:
        config = await workspace.teams.read_config(team)
        assert config.name == team
        assert config.description == "Test"

    @pytest.mark.asyncio
    async def test_missing_team(self, workspace: Workspace) -> None:
        with pytest.raises(TeamNotFoundError):
            await workspace.teams.read_config("nope")

    def test_exists_false_for_missing(self, workspace: Workspace) -> None:
        assert not workspace.teams.team_exists("nope")


class TestMembers:
    @pytest.mark.asyncio
    async def test_add_member(self, workspace: Workspace, team: str) -> None:
        await workspace.teams.add_member(team, make_member("worker-1", model="haiku"))

        config = await workspace.teams.read_config(team)
        assert [m.name for m in config.members] == ["team-lead", "worker-1"]
        assert config.find_member("worker-1").model == "haiku"

    @pytest.mark.asyncio
    async def test_remove_member(self, workspace: Workspace, team: str) -> None:
        await workspace.teams.add_member(team, make_member("worker-1"))
        await workspace.teams.add_member(team, make_member("worker-2"))

        await workspace.teams.remove_member(team, "worker-1")

        config = await workspace.teams.read_config(team)
        assert [m.name for m in config.members] == ["team-lead", "worker-2"]

    @pytest.mark.asyncio
    async def test_update_member_merges(self, workspace: Workspace, team: str) -> None:
        await workspace.teams.add_member(team, make_member("worker-1", model="haiku", color="red"))

        await workspace.teams.update_member(
            team, "worker-1", {"is_active": True, "color": None, "window_id": "@4"}
        )

        member = await workspace.teams.get_member(team, "worker-1")
        assert member.is_active is True
        assert member.window_id == "@4"
        assert member.color == "red"
        assert member.model == "haiku"

    @pytest.mark.asyncio
    async def test_update_missing_member_is_noop(self, workspace: Workspace, team: str) -> None:
        before = workspace.layout.config_path(team).read_text()

        await workspace.teams.update_member(team, "ghost", {"is_active": False})

        assert workspace.layout.config_path(team).read_text() == before

    @pytest.mark.asyncio
    async def test_update_member_unknown_field(self, workspace: Workspace, team: str) -> None:
        with pytest.raises(ValueError, match="Unknown field"):
            await workspace.teams.update_member(team, "team-lead", {"nickname": "boss"})

    @pytest.mark.asyncio
    async def test_member_ops_on_missing_team(self, workspace: Workspace) -> None:
        with pytest.raises(TeamNotFoundError):
            await workspace.teams.add_member("nope", make_member("worker-1"))

    @pytest.mark.asyncio
    async def test_concurrent_adds_are_all_kept(self, workspace: Workspace, team: str) -> None:
        import asyncio

        await asyncio.gather(
            *(workspace.teams.add_member(team, make_member(f"worker-{i}")) for i in range(10))
        )

        config = await workspace.teams.read_config(team)
        assert len(config.members) == 11
        assert not lock_path_for(workspace.layout.config_path(team)).exists()


class TestListAndDelete:
    def test_list_teams(self, workspace: Workspace) -> None:
        workspace.teams.create_team("beta", "s", "l")
        workspace.teams.create_team("alpha", "s", "l")
        (workspace.layout.teams_dir / "no-config").mkdir()

        assert workspace.teams.list_teams() == ["alpha", "beta"]

    @pytest.mark.asyncio
    async def test_delete_team(self, workspace: Workspace, team: str) -> None:
        await workspace.tasks.create_task(team, "Task", "Desc")

        assert workspace.teams.delete_team(team) is True

        assert not workspace.layout.team_dir(team).exists()
        assert not workspace.layout.task_dir(team).exists()
        assert not workspace.teams.team_exists(team)
        assert workspace.teams.delete_team(team) is False
