"""Watering schedule invariants.

Pure functions with no I/O. Every mutating use-case runs its input
through these validators before touching storage, and
compute_next_watering is the only producer of next_watering_date.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta

from src.core.errors import IntervalInvalid, LastWateringInFuture, TitleEmpty, TitleTooLong

TITLE_MAX_LENGTH = 50
ALLOWED_INTERVALS: tuple[int, ...] = (1, 2, 3, 4, 5, 6, 7, 10, 14, 18, 21, 30)
NO_DESCRIPTION = "➖"
DATE_FORMAT = "%d.%m.%Y"


def compute_next_watering(last: date, interval: int) -> date:
    """Next watering date: last watering plus the interval in days."""
    return last + timedelta(days=interval)


def validate_title(title: str) -> str:
    """Strip and check a group or plant title. Returns the cleaned title."""
    cleaned = (title or "").strip()
    if not cleaned:
        raise TitleEmpty()
    if len(cleaned) > TITLE_MAX_LENGTH:
        raise TitleTooLong(TITLE_MAX_LENGTH)
    return cleaned


# Groups and plants share the same title rules.
validate_group_title = validate_title
validate_plant_title = validate_title


def validate_interval(interval: int) -> int:
    if interval not in ALLOWED_INTERVALS:
        raise IntervalInvalid()
    return interval


def validate_last_watering(last: date, now: datetime | date) -> date:
    """The last watering cannot be later than today."""
    today = now.date() if isinstance(now, datetime) else now
    if last > today:
        raise LastWateringInFuture()
    return last


def normalize_description(description: str | None) -> str:
    cleaned = (description or "").strip()
    return cleaned or NO_DESCRIPTION


def pluralize_days(n: int) -> str:
    """Russian plural form of "день" for n.

    1, 21, 31 ... -> "день"; 2-4, 22-24 ... -> "дня"; 11-14 and the rest -> "дней".
    """
    n = abs(n)
    if n % 10 == 1 and n % 100 != 11:
        return "день"
    if 2 <= n % 10 <= 4 and not 12 <= n % 100 <= 14:
        return "дня"
    return "дней"


def format_interval(n: int) -> str:
    return f"{n} {pluralize_days(n)}"


def format_date(d: date | None) -> str:
    return d.strftime(DATE_FORMAT) if d else NO_DESCRIPTION
