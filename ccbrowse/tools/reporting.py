from __future__ import annotations

from datetime import datetime
from typing import Callable, Iterable

from ccbrowse.core.grouping import Group


def format_content_markdown(title: str, content: str) -> str:
    return f"# {title}\n---\n{content}"


def format_code_block(code: str, language: str = "markdown") -> str:
    # Four backticks so fenced blocks inside the content survive.
    return f"````{language}\n{code}\n````"


def format_grouped_report(groups: Iterable[Group], describe: Callable[[object], str]) -> str:
    lines = []
    for group in groups:
        lines.append(f"## {group.title}")
        lines.append("")
        for item in group.items:
            lines.append(f"- {describe(item)}")
        lines.append("")
    return "\n".join(lines).rstrip()


def format_message_markdown(heading: str, content: str, timestamp: datetime) -> str:
    return format_content_markdown(heading, f"{content}\n\n---\n\n**{timestamp.strftime('%Y-%m-%d %H:%M')}**")
