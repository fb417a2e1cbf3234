"""Reporting-period selection and date helpers."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Any, Mapping, Optional

import pandas as pd

from .exceptions import ValidationError

PERIOD_TYPES = ('all', 'year', 'month', 'custom')


@dataclass(frozen=True)
class Period:
    """A reporting window: all time, the current year, the current month or a custom range."""

    type: str = 'month'
    start: Optional[str] = None
    end: Optional[str] = None

    def __post_init__(self) -> None:
        if self.type not in PERIOD_TYPES:
            raise ValidationError(f"Unknown period type '{self.type}'")

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> 'Period':
        if not data:
            return cls()
        return cls(
            type=str(data.get('type') or 'month'),
            start=data.get('start') or None,
            end=data.get('end') or None,
        )

    def to_dict(self) -> dict:
        payload = {'type': self.type}
        if self.start:
            payload['start'] = self.start
        if self.end:
            payload['end'] = self.end
        return payload


def parse_date(value: Any) -> Optional[datetime]:
    """Parse a stored date/datetime value into a naive datetime, or None."""
    if value is None or value == '':
        return None
    if isinstance(value, datetime):
        ts = pd.Timestamp(value)
    elif isinstance(value, date):
        return datetime.combine(value, time.min)
    else:
        ts = pd.to_datetime(str(value).strip(), errors='coerce')
    if ts is None or pd.isna(ts):
        return None
    if ts.tzinfo is not None:
        ts = ts.tz_convert('UTC').tz_localize(None)
    return ts.to_pydatetime()


def start_of_day(moment: datetime) -> datetime:
    return datetime.combine(moment.date(), time.min)


def end_of_day(moment: datetime) -> datetime:
    return datetime.combine(moment.date(), time.max)


def is_in_period(date_str: Any, period: Period, now: Optional[datetime] = None) -> bool:
    """Whether a date falls inside the reporting window.

    Unparsable or missing dates are never in any period.  ``year`` and
    ``month`` are relative to ``now`` (the real clock by default); custom
    bounds are inclusive from the start day's midnight to the end day's last
    instant, and an unset bound does not constrain that side.
    """
    moment = parse_date(date_str)
    if moment is None:
        return False
    if period.type == 'all':
        return True
    now = now or datetime.now()
    if period.type == 'year':
        return moment.year == now.year
    if period.type == 'month':
        return moment.year == now.year and moment.month == now.month

    start = parse_date(period.start) if period.start else None
    if start is not None and moment < start_of_day(start):
        return False
    end = parse_date(period.end) if period.end else None
    if end is not None and moment > end_of_day(end):
        return False
    return True


def is_today_or_later(moment: Optional[datetime], now: Optional[datetime] = None) -> bool:
    if moment is None:
        return False
    return moment >= start_of_day(now or datetime.now())


def date_key(day: date) -> str:
    return f"{day.year:04d}-{day.month:02d}-{day.day:02d}"
