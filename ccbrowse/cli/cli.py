from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, List

from ccbrowse import config as ccb_config
from ccbrowse.core.grouping import group_by_date
from ccbrowse.core.messages import (
    Message,
    ScanLimits,
    find_message,
    get_received_messages,
    get_sent_messages,
    normal_search,
)
from ccbrowse.modules import changelog as changelog_module
from ccbrowse.modules import library as library_module
from ccbrowse.tools import validators
from ccbrowse.tools.changelog import parse_changelog
from ccbrowse.tools.reporting import (
    format_code_block,
    format_content_markdown,
    format_grouped_report,
    format_message_markdown,
)
from ccbrowse.tools.web_fetch import FetchFailed, WebFetcher

logger = logging.getLogger("ccbrowse")


def _settings() -> dict:
    return ccb_config.load_settings(Path.cwd())


def _print(data: Any, as_json: bool) -> None:  # noqa: ANN401
    if as_json:
        print(json.dumps(data, ensure_ascii=False))
    else:
        if isinstance(data, str):
            print(data)
        else:
            print(json.dumps(data, ensure_ascii=False, indent=2))


def cmd_changelog(args: argparse.Namespace) -> None:
    validators.require_non_negative("--limit", args.limit)
    if args.file:
        entries = parse_changelog(Path(args.file).read_text(encoding="utf-8"))
    else:
        settings = _settings()
        url = args.url or settings["changelog"]["url"]
        validators.validate_url(url)
        fetcher = WebFetcher(timeout=float(settings["changelog"]["timeout"]))
        entries = changelog_module.fetch_changelog(url, fetcher=fetcher)

    if args.version:
        entry = changelog_module.find_version(entries, args.version)
        if entry is None:
            raise ValueError(f"Version not found in changelog: {args.version}")
        if args.json:
            _print(entry.to_dict(), True)
            return
        print(changelog_module.version_markdown(entry))
        return

    if args.limit is not None:
        entries = entries[: args.limit]
    if args.json:
        _print([e.to_dict() for e in entries], True)
        return
    for entry in entries:
        print(f"{entry.version}  ({changelog_module.change_count_text(entry)})")


def _describe(message: Message) -> str:
    return f"[{message.timestamp.strftime('%H:%M')}] {message.preview}"


def _show_message(args: argparse.Namespace, messages: List[Message], sent: bool) -> None:
    kind = "sent" if sent else "received"
    if args.id:
        message = find_message(messages, args.id)
        if message is None:
            raise ValueError(f"No such message: {args.id}")
    elif messages:
        message = messages[0]
    else:
        print(f"No {kind} messages found.")
        return
    if args.json:
        _print(
            {
                "id": message.message_id,
                "timestamp": message.timestamp.isoformat(),
                "sessionId": message.session_id,
                "projectPath": message.project_path,
                "content": message.content,
            },
            True,
        )
        return
    print(format_message_markdown(f"{kind.capitalize()} Message", message.content, message.timestamp))


def _messages_command(args: argparse.Namespace, sent: bool) -> None:
    settings = _settings()
    claude_dir = ccb_config.claude_dir(settings)
    limits = ScanLimits.from_settings(settings)
    messages: List[Message] = (get_sent_messages if sent else get_received_messages)(claude_dir, limits=limits)
    if args.search:
        messages = normal_search(messages, args.search)
    if args.latest or args.id:
        _show_message(args, messages, sent)
        return
    groups = group_by_date(messages)
    if args.json:
        data = [
            {
                "title": g.title,
                "category": g.label,
                "sortKey": g.sort_key,
                "messages": [
                    {
                        "id": m.message_id,
                        "timestamp": m.timestamp.isoformat(),
                        "sessionId": m.session_id,
                        "projectPath": m.project_path,
                        "preview": m.preview,
                    }
                    for m in g.items
                ],
            }
            for g in groups
        ]
        _print(data, True)
        return
    if not groups:
        print("No messages found.")
        return
    print(format_grouped_report(groups, _describe))


def cmd_sent(args: argparse.Namespace) -> None:
    _messages_command(args, sent=True)


def cmd_received(args: argparse.Namespace) -> None:
    _messages_command(args, sent=False)


def _library_command(args: argparse.Namespace, kind: str) -> None:
    claude_dir = ccb_config.claude_dir(_settings())
    if args.id:
        getter = library_module.get_agent if kind == "agents" else library_module.get_slash_command
        item = getter(claude_dir, args.id)
        if item is None:
            raise ValueError(f"No such {kind[:-1]}: {args.id}")
        if args.json:
            _print({"id": item.id, "name": item.name, "path": str(item.file_path), "content": item.content}, True)
            return
        print(format_content_markdown(item.name, format_code_block(item.content)))
        return
    lister = library_module.get_agents if kind == "agents" else library_module.get_slash_commands
    items = lister(claude_dir)
    if args.json:
        _print([{"id": i.id, "name": i.name, "path": str(i.file_path)} for i in items], True)
        return
    for item in items:
        print(f"{item.id}\t{item.name}")


def cmd_agents(args: argparse.Namespace) -> None:
    _library_command(args, "agents")


def cmd_commands(args: argparse.Namespace) -> None:
    _library_command(args, "commands")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="ccbrowse", description="Browse Claude Code changelog, messages, agents and commands")
    parser.add_argument("--json", action="store_true", help="Emit machine-readable JSON output")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log debug details to stderr")
    sub = parser.add_subparsers(dest="command")

    cl = sub.add_parser("changelog", help="List Claude Code releases or show one version")
    cl.add_argument("--url", help="Raw changelog URL (defaults to settings)")
    cl.add_argument("--file", help="Read changelog text from a local file instead of fetching")
    cl.add_argument("--version", help="Show the changes of a single version")
    cl.add_argument("--limit", type=int, default=None, help="Only list the first N versions")
    cl.add_argument("--json", action="store_true", default=argparse.SUPPRESS, help="Emit machine-readable JSON output")
    cl.set_defaults(func=cmd_changelog)

    sent = sub.add_parser("sent", help="Messages you sent, grouped by date")
    sent.add_argument("id", nargs="?", help="Show the full message with this id")
    sent.add_argument("--latest", action="store_true", help="Show the most recent message in full")
    sent.add_argument("--search", help="Keep messages containing this text")
    sent.add_argument("--json", action="store_true", default=argparse.SUPPRESS, help="Emit machine-readable JSON output")
    sent.set_defaults(func=cmd_sent)

    received = sub.add_parser("received", help="Messages Claude sent back, grouped by date")
    received.add_argument("id", nargs="?", help="Show the full message with this id")
    received.add_argument("--latest", action="store_true", help="Show the most recent message in full")
    received.add_argument("--search", help="Keep messages containing this text")
    received.add_argument("--json", action="store_true", default=argparse.SUPPRESS, help="Emit machine-readable JSON output")
    received.set_defaults(func=cmd_received)

    agents = sub.add_parser("agents", help="List agents or show one")
    agents.add_argument("id", nargs="?")
    agents.add_argument("--json", action="store_true", default=argparse.SUPPRESS, help="Emit machine-readable JSON output")
    agents.set_defaults(func=cmd_agents)

    commands = sub.add_parser("commands", help="List slash commands or show one")
    commands.add_argument("id", nargs="?")
    commands.add_argument("--json", action="store_true", default=argparse.SUPPRESS, help="Emit machine-readable JSON output")
    commands.set_defaults(func=cmd_commands)

    return parser


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not getattr(args, "command", None):
        parser.print_help()
        return
    _configure_logging(args.verbose)
    try:
        args.func(args)
    except Exception as exc:  # noqa: BLE001
        logger.debug("Command %s failed", args.command, exc_info=True)
        payload: dict = {"error": str(exc)}
        if isinstance(exc, FetchFailed):
            payload["status"] = exc.status
        if getattr(args, "json", False):
            print(json.dumps(payload, ensure_ascii=False), file=sys.stderr)
        else:
            print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
