from __future__ import annotations

import hashlib
import json
import logging
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from .buckets import Clock, system_clock

logger = logging.getLogger(__name__)

USER = "user"
ASSISTANT = "assistant"

# Markers of slash-command plumbing and aborted turns, not real prompts.
_SENT_NOISE = ("<command-message>", "<command-name>", "[Request interrupted")


@dataclass(frozen=True)
class Message:
    role: str
    content: str
    timestamp: datetime
    session_id: str
    project_path: str = ""
    preview: str = ""

    @property
    def message_id(self) -> str:
        millis = int(self.timestamp.timestamp() * 1000)
        return hashlib.md5(f"{self.content}-{millis}-{self.session_id}".encode("utf-8")).hexdigest()


@dataclass
class ScanLimits:
    max_projects: int = 5
    max_files_per_project: int = 5
    max_per_file: int = 10
    limit: int = 50
    preview_length: int = 100

    @classmethod
    def from_settings(cls, settings: Dict[str, Any]) -> "ScanLimits":
        m = settings.get("messages", {})
        return cls(
            max_projects=int(m.get("maxProjects", cls.max_projects)),
            max_files_per_project=int(m.get("maxFilesPerProject", cls.max_files_per_project)),
            max_per_file=int(m.get("maxPerFile", cls.max_per_file)),
            limit=int(m.get("limit", cls.limit)),
            preview_length=int(m.get("previewLength", cls.preview_length)),
        )


def make_preview(content: str, length: int = 100) -> str:
    return content[:length] + ("..." if len(content) > length else "")


def parse_timestamp(value: Any, clock: Clock = system_clock) -> datetime:  # noqa: ANN401
    """ISO-8601 text or epoch milliseconds; anything else means "now"."""
    try:
        if isinstance(value, bool):
            raise TypeError(value)
        if isinstance(value, (int, float)):
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc).astimezone()
        if isinstance(value, str) and value.strip():
            text = value.strip()
            if text.endswith("Z"):
                text = text[:-1] + "+00:00"
            return datetime.fromisoformat(text).astimezone()
    except (TypeError, ValueError, OverflowError, OSError):
        logger.debug("Unparseable timestamp %r, using current time", value)
    return clock().astimezone()


def _text_content(content: Any) -> str:  # noqa: ANN401
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        return "\n".join(
            str(part.get("text") or "")
            for part in content
            if isinstance(part, dict) and part.get("type") == "text"
        )
    return ""


def parse_log_line(
    line: str,
    role: str,
    session_id: str,
    project_path: str = "",
    clock: Clock = system_clock,
) -> Optional[Message]:
    if not line.strip():
        return None
    try:
        data = json.loads(line)
    except ValueError as exc:
        logger.debug("Skipping malformed log line in %s: %s", session_id, exc)
        return None
    if not isinstance(data, dict):
        return None
    message = data.get("message")
    if not isinstance(message, dict) or message.get("role") != role:
        return None
    content = _text_content(message.get("content"))
    if not content.strip():
        return None
    if role == USER and any(marker in content for marker in _SENT_NOISE):
        return None
    return Message(
        role=role,
        content=content,
        timestamp=parse_timestamp(data.get("timestamp"), clock=clock),
        session_id=session_id,
        project_path=project_path,
    )


def _newest_first(messages: List[Message]) -> List[Message]:
    return sorted(messages, key=lambda m: m.timestamp, reverse=True)


def read_log_file(
    path: Path,
    role: str,
    project_path: str = "",
    max_messages: int = 10,
    clock: Clock = system_clock,
) -> List[Message]:
    """Newest ``max_messages`` messages of ``role`` from one session log."""
    session_id = path.stem
    found: List[Message] = []
    try:
        with path.open("r", encoding="utf-8", errors="replace") as fh:
            for line in fh:
                msg = parse_log_line(line, role, session_id, project_path, clock=clock)
                if msg is not None:
                    found.append(msg)
    except OSError as exc:
        logger.warning("Error reading log file %s: %s", path, exc)
        return []
    return _newest_first(found)[:max_messages]


def _most_recent(paths: List[Path], count: int) -> List[Path]:
    stamped = []
    for p in paths:
        try:
            stamped.append((p.stat().st_mtime, p))
        except OSError as exc:
            logger.debug("Cannot stat %s: %s", p, exc)
    stamped.sort(key=lambda pair: pair[0], reverse=True)
    return [p for _, p in stamped[:count]]


def collect_messages(
    claude_dir: Path,
    role: str,
    limits: Optional[ScanLimits] = None,
    clock: Clock = system_clock,
) -> List[Message]:
    limits = limits or ScanLimits()
    projects_dir = claude_dir / "projects"
    if not projects_dir.is_dir():
        logger.info("No Claude projects directory at %s", projects_dir)
        return []

    projects = _most_recent([p for p in projects_dir.iterdir() if p.is_dir()], limits.max_projects)
    logger.debug("Scanning projects: %s", ", ".join(p.name for p in projects))

    collected: List[Message] = []
    for project in projects:
        try:
            logs = [p for p in project.iterdir() if p.suffix == ".jsonl" and p.is_file()]
        except OSError as exc:
            logger.warning("Error listing project %s: %s", project, exc)
            continue
        for log in _most_recent(logs, limits.max_files_per_project):
            collected.extend(read_log_file(log, role, str(project), limits.max_per_file, clock=clock))

    newest = _newest_first(collected)[: limits.limit]
    logger.info("Found %d %s messages in %d projects", len(newest), role, len(projects))
    return [replace(m, preview=make_preview(m.content, limits.preview_length)) for m in newest]


def get_sent_messages(claude_dir: Path, limits: Optional[ScanLimits] = None, clock: Clock = system_clock) -> List[Message]:
    return collect_messages(claude_dir, USER, limits=limits, clock=clock)


def get_received_messages(claude_dir: Path, limits: Optional[ScanLimits] = None, clock: Clock = system_clock) -> List[Message]:
    return collect_messages(claude_dir, ASSISTANT, limits=limits, clock=clock)


def normal_search(messages: List[Message], text: str) -> List[Message]:
    if not text.strip():
        return messages
    query = text.lower()
    return [m for m in messages if query in m.content.lower() or query in m.preview.lower()]


def find_message(messages: List[Message], message_id: str) -> Optional[Message]:
    for message in messages:
        if message.message_id == message_id:
            return message
    return None
