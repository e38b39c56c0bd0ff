from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Callable, Optional


Clock = Callable[[], datetime]

TODAY = "Today"
YESTERDAY = "Yesterday"
THIS_WEEK = "This Week"
THIS_MONTH = "This Month"

_RELATIVE_ORDER = (TODAY, YESTERDAY, THIS_WEEK, THIS_MONTH)
_FIRST_YEAR_KEY = len(_RELATIVE_ORDER)


def system_clock() -> datetime:
    return datetime.now()


@dataclass(frozen=True)
class Category:
    """A relative-time bucket; lower ``sort_key`` sorts first (more recent)."""

    label: str
    sort_key: int


def _local_date(moment: datetime) -> date:
    # Aware values are moved onto the local calendar; naive ones already are.
    if moment.tzinfo is not None:
        try:
            moment = moment.astimezone()
        except (OverflowError, OSError):
            # Shifting would leave the datetime range (year 1 / 9999).
            return moment.date()
    return moment.date()


def _relative(label: str) -> Category:
    return Category(label=label, sort_key=_RELATIVE_ORDER.index(label))


def classify(timestamp: datetime, now: Optional[datetime] = None, clock: Clock = system_clock) -> Category:
    """Bucket ``timestamp`` relative to ``now`` on calendar days.

    Weeks start on Monday. Dates after the reference day count as Today.
    Anything older than the current month is bucketed by its year, and
    year buckets sort after This Month, newest year first.
    """
    reference = now if now is not None else clock()
    today = _local_date(reference)
    day = _local_date(timestamp)

    if day >= today:
        return _relative(TODAY)
    yesterday = today - timedelta(days=1)
    if day == yesterday:
        return _relative(YESTERDAY)
    start_of_week = today - timedelta(days=today.weekday())
    if start_of_week <= day < yesterday:
        return _relative(THIS_WEEK)
    if (day.year, day.month) == (today.year, today.month):
        return _relative(THIS_MONTH)
    return Category(label=f"{day.year:04d}", sort_key=_FIRST_YEAR_KEY + (today.year - day.year))
