from __future__ import annotations

from typing import List, Optional

from ccbrowse.config import DEFAULTS
from ccbrowse.tools.changelog import VersionEntry, parse_changelog
from ccbrowse.tools.reporting import format_content_markdown
from ccbrowse.tools.web_fetch import WebFetcher

CHANGELOG_URL: str = DEFAULTS["changelog"]["url"]
CHANGELOG_PAGE_URL = "https://github.com/anthropics/claude-code/blob/main/CHANGELOG.md"


def fetch_changelog(
    url: str = CHANGELOG_URL,
    timeout: Optional[float] = None,
    fetcher: Optional[WebFetcher] = None,
) -> List[VersionEntry]:
    """Download the raw changelog and parse it.

    ``FetchFailed`` and ``NetworkError`` from the fetcher are not caught here.
    """
    fetcher = fetcher or WebFetcher()
    return parse_changelog(fetcher.fetch_text(url, timeout=timeout))


def find_version(entries: List[VersionEntry], version: str) -> Optional[VersionEntry]:
    for entry in entries:
        if entry.version == version:
            return entry
    return None


def change_count_text(entry: VersionEntry) -> str:
    n = len(entry.changes)
    return f"{n} {'change' if n == 1 else 'changes'}"


def format_version_changes(entry: VersionEntry) -> str:
    return "\n".join(f"- {change}" for change in entry.changes)


def version_markdown(entry: VersionEntry) -> str:
    return format_content_markdown(f"Version {entry.version}", "## Changes\n\n" + format_version_changes(entry))
