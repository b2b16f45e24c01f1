"""Daily secret word selection.

The word for a day is a pure function of the calendar date in one canonical
time zone, so every server agrees on when the word changes.
"""
from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
from typing import Optional, Sequence
from zoneinfo import ZoneInfo

DEFAULT_TIMEZONE = "America/Denver"
EPOCH = date(2025, 1, 1)

WORD_LIST: tuple[str, ...] = (
    "elephant",
    "computer",
    "guitar",
    "rainbow",
    "pizza",
    "astronaut",
    "mountain",
    "butterfly",
    "telephone",
    "umbrella",
    "chocolate",
    "dinosaur",
    "symphony",
    "volcano",
    "penguin",
    "telescope",
    "hurricane",
    "champagne",
    "submarine",
    "kangaroo",
)


def word_index(day: date, epoch: date = EPOCH, length: int = len(WORD_LIST)) -> int:
    if length <= 0:
        raise ValueError("word list is empty")
    # Python's modulo keeps days before the epoch in range.
    return (day - epoch).days % length


def word_for_date(day: date, words: Sequence[str] = WORD_LIST, epoch: date = EPOCH) -> str:
    return words[word_index(day, epoch, len(words))]


def today(tz: str = DEFAULT_TIMEZONE, now: Optional[datetime] = None) -> date:
    """Return the canonical calendar day.

    ``now`` may be naive (treated as UTC) or aware in any zone.
    """

    zone = ZoneInfo(tz)
    if now is None:
        return datetime.now(zone).date()
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(zone).date()


def time_until_next_word(tz: str = DEFAULT_TIMEZONE, now: Optional[datetime] = None) -> timedelta:
    """Time left until local midnight in the canonical zone."""

    zone = ZoneInfo(tz)
    if now is None:
        now = datetime.now(zone)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    local = now.astimezone(zone)
    next_midnight = datetime.combine(local.date() + timedelta(days=1), time.min, tzinfo=zone)
    return next_midnight.astimezone(timezone.utc) - local.astimezone(timezone.utc)
