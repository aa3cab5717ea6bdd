from __future__ import annotations

from collections.abc import Iterable
from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from birthday_notifier.errors import ConfigurationError
from birthday_notifier.models import BirthdayRecord


def resolve_timezone(timezone_name: str) -> ZoneInfo:
    try:
        return ZoneInfo(timezone_name)
    except (ZoneInfoNotFoundError, ValueError, OSError) as exc:
        raise ConfigurationError(f"Unknown timezone: {timezone_name!r}") from exc


def now_in_timezone(timezone_name: str) -> datetime:
    return datetime.now(resolve_timezone(timezone_name))


def daily_target_date(now: datetime, lookahead_days: int) -> date:
    return now.date() + timedelta(days=lookahead_days)


def report_month(now: datetime, target_month: int = 0) -> date:
    """First day of the month a monthly summary covers.

    Without an explicit ``target_month`` this is the calendar month after
    ``now``, found by stepping the month number rather than adding days.
    """
    if 1 <= target_month <= 12:
        return date(now.year, target_month, 1)
    if now.month == 12:
        return date(now.year + 1, 1, 1)
    return date(now.year, now.month + 1, 1)


def find_on_date(records: Iterable[BirthdayRecord], month: int, day: int) -> list[BirthdayRecord]:
    return [record for record in records if record.month == month and record.day == day]


def find_in_month(records: Iterable[BirthdayRecord], month: int) -> list[BirthdayRecord]:
    matches = [record for record in records if record.month == month]
    matches.sort(key=lambda record: record.day)
    return matches
