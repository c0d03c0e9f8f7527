"""Read-only inspection of shared team state.

Usage:
    python -m agentteams teams
    python -m agentteams tasks my-team
    python -m agentteams inbox my-team worker-1 --unread
    python -m agentteams status my-team worker-1

Output is JSON on stdout. Nothing is modified; inbox messages are not
marked as read.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from typing import Any

from agentteams.config import ConfigLoader
from agentteams.errors import AgentTeamsError
from agentteams.logging import get_logger, setup_logging
from agentteams.workspace import Workspace

log = get_logger()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="agentteams", description=__doc__.splitlines()[0])
    parser.add_argument("--root", help="State root (overrides config and AGENTTEAMS_HOME)")
    parser.add_argument("--project", help="Project directory for .agentteams/config.yaml")

    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("teams", help="List teams")

    tasks = sub.add_parser("tasks", help="List a team's tasks")
    tasks.add_argument("team")

    inbox = sub.add_parser("inbox", help="Show an agent's inbox")
    inbox.add_argument("team")
    inbox.add_argument("agent")
    inbox.add_argument("--unread", action="store_true", help="Only unread messages")

    status = sub.add_parser("status", help="Show an agent's runtime status")
    status.add_argument("team")
    status.add_argument("agent")

    return parser


async def run(args: argparse.Namespace, workspace: Workspace) -> Any:
    if args.command == "teams":
        return workspace.teams.list_teams()
    if args.command == "tasks":
        return [t.to_dict() for t in await workspace.tasks.list_tasks(args.team)]
    if args.command == "inbox":
        messages = await workspace.messages.read_inbox(
            args.team, args.agent, unread_only=args.unread, mark_as_read=False
        )
        return [m.to_dict() for m in messages]
    if args.command == "status":
        status = await workspace.runtime.read_status(args.team, args.agent)
        return status.to_dict() if status else None
    raise ValueError(f"Unknown command: {args.command}")


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    config = ConfigLoader(args.project).load()
    setup_logging(config.logging)

    workspace = Workspace(config, root=args.root)
    try:
        result = asyncio.run(run(args, workspace))
    except AgentTeamsError as e:
        log.debug("Command %s failed", args.command, exc_info=True)
        print(f"error: {e}", file=sys.stderr)
        return 1

    json.dump(result, sys.stdout, ensure_ascii=False, indent=2)
    sys.stdout.write("\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
