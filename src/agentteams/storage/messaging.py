"""Per-agent inbox store.

Each agent has one inbox file per team holding a JSON array of messages
in delivery order. Delivery order is the order in which senders win the
inbox lock, not the order in which they called send.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field

from agentteams.logging import get_logger
from agentteams.storage.jsonio import read_json, write_json
from agentteams.storage.lock import FileLock, LockSettings
from agentteams.storage.paths import StateLayout
from agentteams.storage.schema import InboxMessage
from agentteams.storage.teams import TeamStore

log = get_logger("messaging")


@dataclass
class BroadcastResult:
    """Outcome of a broadcast. Failed deliveries map recipient to error text."""

    delivered: list[str] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failed


class MessageStore:
    """Append-only inboxes with read tracking."""

    def __init__(
        self,
        layout: StateLayout,
        teams: TeamStore,
        lock_settings: LockSettings | None = None,
    ) -> None:
        self._layout = layout
        self._teams = teams
        self._lock_settings = lock_settings or LockSettings()

    async def append_message(
        self, team_name: str, agent_name: str, message: InboxMessage
    ) -> None:
        path = self._layout.inbox_path(team_name, agent_name)
        path.parent.mkdir(parents=True, exist_ok=True)

        async with FileLock(path, settings=self._lock_settings):
            messages = read_json(path) if path.exists() else []
            messages.append(message.to_dict())
            write_json(path, messages)

    async def send_plain_message(
        self,
        team_name: str,
        sender: str,
        recipient: str,
        text: str,
        summary: str,
        color: str | None = None,
    ) -> InboxMessage:
        message = InboxMessage(sender=sender, text=text, read=False, summary=summary, color=color)
        await self.append_message(team_name, recipient, message)
        return message

    async def read_inbox(
        self,
        team_name: str,
        agent_name: str,
        unread_only: bool = False,
        mark_as_read: bool = True,
    ) -> list[InboxMessage]:
        """Return inbox messages, optionally only unread ones.

        When mark_as_read is set, exactly the returned messages are flipped
        to read; messages excluded by unread_only are left untouched.
        """
        path = self._layout.inbox_path(team_name, agent_name)
        if not path.exists():
            return []

        async with FileLock(path, settings=self._lock_settings):
            raw_messages = read_json(path)
            selected = [
                i for i, m in enumerate(raw_messages) if not unread_only or not m.get("read")
            ]
            result = [InboxMessage.from_dict(raw_messages[i]) for i in selected]

            if mark_as_read and selected:
                for i in selected:
                    raw_messages[i]["read"] = True
                write_json(path, raw_messages)

        return result

    async def unread_count(self, team_name: str, agent_name: str) -> int:
        """Number of unread messages, without marking anything read."""
        unread = await self.read_inbox(team_name, agent_name, unread_only=True, mark_as_read=False)
        return len(unread)

    async def broadcast_message(
        self,
        team_name: str,
        sender: str,
        text: str,
        summary: str,
        color: str | None = None,
    ) -> BroadcastResult:
        """Send a message to every team member except the sender.

        Deliveries run concurrently. A failed delivery is logged and
        recorded in the result; it never aborts the others and never raises.

        Raises:
            TeamNotFoundError: If the team does not exist.
        """
        config = await self._teams.read_config(team_name)
        recipients = [m.name for m in config.members if m.name != sender]

        outcomes = await asyncio.gather(
            *(
                self.send_plain_message(team_name, sender, name, text, summary, color)
                for name in recipients
            ),
            return_exceptions=True,
        )

        result = BroadcastResult()
        for name, outcome in zip(recipients, outcomes):
            if isinstance(outcome, BaseException):
                log.warning("Broadcast from %s to %s failed: %s", sender, name, outcome)
                result.failed[name] = str(outcome)
            else:
                result.delivered.append(name)

        if result.failed:
            log.warning(
                "Broadcast in team %s reached %d of %d members",
                team_name,
                len(result.delivered),
                len(recipients),
            )
        return result
