from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional


@dataclass(frozen=True)
class LibraryItem:
    id: str
    name: str
    content: str
    file_path: Path


def display_name(stem: str) -> str:
    """``anthropic-docs-expert`` -> ``Anthropic Docs Expert``."""
    return " ".join(word[:1].upper() + word[1:] for word in stem.split("-"))


def _load(path: Path) -> LibraryItem:
    return LibraryItem(
        id=path.stem,
        name=display_name(path.stem),
        content=path.read_text(encoding="utf-8"),
        file_path=path,
    )


def list_items(directory: Path) -> List[LibraryItem]:
    try:
        files = [p for p in directory.iterdir() if p.suffix == ".md" and p.is_file()]
    except FileNotFoundError:
        return []
    return sorted((_load(p) for p in files), key=lambda item: item.name)


def get_item(directory: Path, item_id: str) -> Optional[LibraryItem]:
    try:
        return _load(directory / f"{item_id}.md")
    except FileNotFoundError:
        return None


def get_agents(claude_dir: Path) -> List[LibraryItem]:
    return list_items(claude_dir / "agents")


def get_agent(claude_dir: Path, agent_id: str) -> Optional[LibraryItem]:
    return get_item(claude_dir / "agents", agent_id)


def get_slash_commands(claude_dir: Path) -> List[LibraryItem]:
    return list_items(claude_dir / "commands")


def get_slash_command(claude_dir: Path, command_id: str) -> Optional[LibraryItem]:
    return get_item(claude_dir / "commands", command_id)
