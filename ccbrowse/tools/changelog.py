from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import List, Optional, Tuple


# "## [1.2.3]" or "## 1.2.3"; deeper headings ("### Added") never match.
_VERSION_HEADER = re.compile(r"^##\s+(?:\[(?P<bracketed>[^\]]+)\]|(?P<bare>\S+))")
_BULLET_MARKERS = ("-", "*")


@dataclass(frozen=True)
class VersionEntry:
    version: str
    changes: Tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict:
        return {"version": self.version, "changes": list(self.changes)}


@dataclass
class _OpenVersion:
    version: str
    changes: List[str] = field(default_factory=list)

    def close(self) -> VersionEntry:
        return VersionEntry(version=self.version, changes=tuple(self.changes))


def _header_version(line: str) -> Optional[str]:
    m = _VERSION_HEADER.match(line)
    if not m:
        return None
    token = m.group("bracketed") if m.group("bracketed") is not None else m.group("bare")
    return token.strip()


def _bullet_text(line: str) -> Optional[str]:
    ls = line.strip()
    if not ls.startswith(_BULLET_MARKERS):
        return None
    return ls[1:].strip()


def parse_changelog(markdown: str) -> List[VersionEntry]:
    """Split release notes into version entries, in document order.

    Scanning is a two-state machine: with no open version every line is
    dropped; once a ``## <version>`` header opens an entry, bullets are
    collected into it until the next header (or end of text) flushes it.
    Never raises; unrecognised lines are ignored.
    """
    versions: List[VersionEntry] = []
    current: Optional[_OpenVersion] = None

    for line in markdown.split("\n"):
        version = _header_version(line)
        if version is not None:
            if current is not None:
                versions.append(current.close())
            current = _OpenVersion(version=version)
            continue
        if current is None:
            continue
        change = _bullet_text(line)
        if change:
            current.changes.append(change)

    if current is not None:
        versions.append(current.close())
    return versions
