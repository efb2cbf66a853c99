"""
Leaderboard period windows.

Windows are closed intervals in the reference time zone, stored as naive
datetimes:
- daily:   00:00:00 .. 23:59:59 today
- weekly:  Monday 00:00:00 .. Sunday 23:59:59 of this week
- monthly: 1st 00:00:00 .. last day 23:59:59 of this month
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import datetime, time, timedelta
from zoneinfo import ZoneInfo

from kotoba.core.enums import PeriodType

_DAY_START = time(0, 0, 0)
_DAY_END = time(23, 59, 59)


@dataclass(frozen=True)
class PeriodWindow:
    period_type: PeriodType
    start: datetime
    end: datetime

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment <= self.end


def period_window(period_type: PeriodType | str, now: datetime) -> PeriodWindow:
    """Window of ``period_type`` containing ``now`` (naive, already in the reference zone)."""
    period_type = PeriodType(period_type)
    today = now.date()

    if period_type is PeriodType.DAILY:
        first, last = today, today
    elif period_type is PeriodType.WEEKLY:
        first = today - timedelta(days=today.weekday())
        last = first + timedelta(days=6)
    else:
        days_in_month = calendar.monthrange(today.year, today.month)[1]
        first = today.replace(day=1)
        last = today.replace(day=days_in_month)

    return PeriodWindow(
        period_type=period_type,
        start=datetime.combine(first, _DAY_START),
        end=datetime.combine(last, _DAY_END),
    )


def current_windows(now: datetime) -> list[PeriodWindow]:
    """Daily, weekly and monthly windows containing ``now``."""
    return [period_window(period_type, now) for period_type in PeriodType]


def reference_now(tz_name: str) -> datetime:
    """Wall-clock time in ``tz_name`` as a naive datetime."""
    return datetime.now(ZoneInfo(tz_name)).replace(tzinfo=None)
