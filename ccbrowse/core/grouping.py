from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from .buckets import Category, Clock, classify, system_clock


TimestampOf = Callable[[Any], datetime]


def _timestamp_attr(item: Any) -> datetime:  # noqa: ANN401
    return item.timestamp


def format_section_title(category: str, count: int) -> str:
    """Section heading such as ``"Today (5)"`` or ``"2023 (12)"``."""
    return f"{category} ({count})"


@dataclass(frozen=True)
class Group:
    category: Category
    items: Tuple[Any, ...]

    @property
    def label(self) -> str:
        return self.category.label

    @property
    def sort_key(self) -> int:
        return self.category.sort_key

    @property
    def title(self) -> str:
        return format_section_title(self.category.label, len(self.items))


def group_by_date(
    items: Iterable[Any],
    now: Optional[datetime] = None,
    clock: Clock = system_clock,
    timestamp_of: TimestampOf = _timestamp_attr,
) -> List[Group]:
    """Group items into date sections, most recent section first.

    The reference instant is taken once for the whole batch. Items keep
    their input order inside each section.
    """
    reference = now if now is not None else clock()
    buckets: Dict[Category, List[Any]] = {}
    for item in items:
        category = classify(timestamp_of(item), now=reference)
        buckets.setdefault(category, []).append(item)
    groups = [Group(category=c, items=tuple(members)) for c, members in buckets.items()]
    return sorted(groups, key=lambda g: g.sort_key)
