"""Calendar projection of contracts.

Contracts are expanded into one calendar event per booked service, grouped
by day and laid out on a Sunday-first month grid for the admin calendar.
"""

from __future__ import annotations

import calendar
import re
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

import pandas as pd

from .contracts import Contract, normalize_contract, resolve_service_source

EVENT_ID_SEPARATOR = '__'
MAX_EVENTS_PER_CELL = 3

STATUS_COLORS = {
    'cancelled': '#ef4444',
    'released': '#e5e7eb',
    'delivered': '#16a34a',
    'pending_payment': '#9ca3af',
    'pending_approval': '#f97316',
    'confirmed': '#2563eb',
    'default': '#eab308',
}

_NON_DIGITS = re.compile(r'\D')


@dataclass
class CalendarEvent:
    id: str
    contract_id: str
    client_name: str
    event_date: str
    event_time: str
    event_location: str
    package_duration: str
    event_type: str
    status: str
    raw_status: Optional[str]
    deposit_paid: Optional[bool]
    final_payment_paid: Optional[bool]
    event_completed: bool
    phone: str
    contract: Contract = field(repr=False)

    @property
    def minutes(self) -> int:
        return time_to_minutes(self.event_time)


@dataclass
class MonthCell:
    day: Optional[date]
    key: str
    is_today: bool = False
    events: List[CalendarEvent] = field(default_factory=list)

    @property
    def event_count(self) -> int:
        return len(self.events)

    @property
    def has_events(self) -> bool:
        return bool(self.events)

    @property
    def visible_events(self) -> List[CalendarEvent]:
        return self.events[:MAX_EVENTS_PER_CELL]

    @property
    def overflow(self) -> int:
        return max(0, len(self.events) - MAX_EVENTS_PER_CELL)


def base_contract_id(event_id: str) -> str:
    return str(event_id or '').split(EVENT_ID_SEPARATOR)[0]


def _phone_of(record: Mapping[str, Any]) -> str:
    snapshot = record.get('formSnapshot') if isinstance(record.get('formSnapshot'), Mapping) else {}
    return str(record.get('phone') or snapshot.get('phone') or '')


def _event(record: Mapping[str, Any], contract: Contract, **overrides: Any) -> CalendarEvent:
    values = {
        'id': contract.id,
        'contract_id': contract.id,
        'client_name': contract.client_name,
        'event_date': str(record.get('eventDate') or ''),
        'event_time': str(record.get('eventTime') or ''),
        'event_location': str(record.get('eventLocation') or ''),
        'package_duration': str(record.get('packageDuration') or ''),
        'event_type': str(record.get('eventType') or ''),
        'status': contract.status,
        'raw_status': record.get('status') or None,
        'deposit_paid': contract.deposit_paid,
        'final_payment_paid': contract.final_payment_paid,
        'event_completed': contract.event_completed,
        'phone': _phone_of(record),
        'contract': contract,
    }
    values.update(overrides)
    return CalendarEvent(**values)


def expand_contract_events(records: Iterable[Mapping[str, Any]]) -> List[CalendarEvent]:
    """One event per service line (or one per contract without lines).

    Per-line date, time and location come from the booking form snapshot
    (``date_<i>``, ``time_<i>``, ``eventLocation_<i>``) when present.
    """
    events: List[CalendarEvent] = []
    for record in records:
        contract = normalize_contract(record)
        source = resolve_service_source(record)
        if not source.has_lines:
            events.append(_event(record, contract))
            continue
        snapshot = record.get('formSnapshot') if isinstance(record.get('formSnapshot'), Mapping) else {}
        for index, item in enumerate(source.items):
            name = item.get('name')
            events.append(_event(
                record,
                contract,
                id=f"{contract.id}{EVENT_ID_SEPARATOR}{index}",
                event_date=str(snapshot.get(f'date_{index}') or record.get('eventDate') or ''),
                event_time=str(snapshot.get(f'time_{index}') or record.get('eventTime') or ''),
                event_location=str(snapshot.get(f'eventLocation_{index}') or record.get('eventLocation') or ''),
                package_duration=str(item.get('duration') or record.get('packageDuration') or ''),
                event_type=str(item.get('type') or record.get('eventType') or ''),
                client_name=f"{contract.client_name} — {name}" if name else contract.client_name,
            ))
    return events


def to_local_date(value: Optional[str]) -> Optional[date]:
    """Parse a ``YYYY-MM-DD`` event date; anything else is None."""
    if not value:
        return None
    parts = str(value).split('-')
    if len(parts) < 3:
        return None
    try:
        year, month, day = (int(p) for p in parts[:3])
    except ValueError:
        return None
    if not year or not month or not day:
        return None
    try:
        return date(year, month, day)
    except ValueError:
        return None


def time_to_minutes(value: Optional[str]) -> int:
    """``HH:mm`` to minutes past midnight; missing or garbled parts count as 0."""
    if not value:
        return 0
    parts = str(value).split(':')

    def _part(index: int) -> int:
        try:
            return int(parts[index])
        except (IndexError, ValueError):
            return 0

    return _part(0) * 60 + _part(1)


def digits_only(value: Any) -> str:
    return _NON_DIGITS.sub('', str(value or ''))


def filter_events(
    events: Iterable[CalendarEvent],
    month: int,
    year: int,
    status: str = 'all',
    phone: str = '',
) -> List[CalendarEvent]:
    """Events of one month (1-12) matching a status and a phone-digits fragment."""
    wanted_phone = digits_only(phone) if phone.strip() else ''
    result = []
    for event in events:
        day = to_local_date(event.event_date)
        if day is None or day.month != month or day.year != year:
            continue
        if status != 'all' and event.status != status:
            continue
        if phone.strip() and wanted_phone not in digits_only(event.phone):
            continue
        result.append(event)
    return result


def events_by_day(events: Iterable[CalendarEvent]) -> Dict[str, List[CalendarEvent]]:
    """Group events by their date string, ordered by time then client name."""
    buckets: Dict[str, List[CalendarEvent]] = {}
    for event in events:
        if not event.event_date:
            continue
        buckets.setdefault(event.event_date, []).append(event)
    for key, bucket in buckets.items():
        bucket.sort(key=lambda ev: (ev.minutes, ev.client_name or ''))
    return buckets


def month_grid(year: int, month: int) -> List[Optional[date]]:
    """Sunday-first grid: blanks before day 1, then every day of the month."""
    first_weekday, total_days = calendar.monthrange(year, month)
    leading = (first_weekday + 1) % 7
    cells: List[Optional[date]] = [None] * leading
    cells.extend(date(year, month, d) for d in range(1, total_days + 1))
    return cells


def build_month_cells(
    year: int,
    month: int,
    by_day: Mapping[str, List[CalendarEvent]],
    today: date,
) -> List[MonthCell]:
    cells = []
    for index, day in enumerate(month_grid(year, month)):
        if day is None:
            cells.append(MonthCell(day=None, key=f'empty-{index}'))
            continue
        key = day.isoformat()
        cells.append(MonthCell(
            day=day,
            key=key,
            is_today=is_same_day(day, today),
            events=list(by_day.get(key, [])),
        ))
    return cells


def calendar_weeks(cells: List[MonthCell]) -> List[List[MonthCell]]:
    """Split grid cells into Sunday-first weeks, padding the last week with blanks."""
    padded = list(cells)
    while len(padded) % 7:
        padded.append(MonthCell(day=None, key=f'empty-{len(padded)}'))
    return [padded[start:start + 7] for start in range(0, len(padded), 7)]


def is_same_day(a: date, b: date) -> bool:
    return (a.year, a.month, a.day) == (b.year, b.month, b.day)


def shift_month(year: int, month: int, delta: int) -> Tuple[int, int]:
    """Move a (year, month 1-12) pair by ``delta`` months, wrapping the year."""
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def year_options(today: date, span: int = 3) -> List[int]:
    return list(range(today.year - span, today.year + span + 1))


def event_summary(events: Iterable[CalendarEvent]) -> Dict[str, int]:
    """Counts of events awaiting deposit, awaiting editing and finished."""
    pending = editing = completed = all_total = 0
    for event in events:
        all_total += 1
        if event.deposit_paid is not True:
            pending += 1
        elif event.final_payment_paid is True and event.event_completed is not True:
            editing += 1
        elif event.final_payment_paid is True and event.event_completed is True:
            completed += 1
    return {
        'pending': pending,
        'editing': editing,
        'completed': completed,
        'all_total': all_total,
        'total': pending + editing + completed,
    }


def event_color(event: CalendarEvent) -> str:
    status = event.raw_status
    if status == 'cancelled':
        return STATUS_COLORS['cancelled']
    if status == 'released':
        return STATUS_COLORS['released']
    if status == 'delivered' or (event.event_completed and event.final_payment_paid):
        return STATUS_COLORS['delivered']
    if status == 'pending_payment' or event.deposit_paid is False:
        return STATUS_COLORS['pending_payment']
    if status == 'pending_approval':
        return STATUS_COLORS['pending_approval']
    if status == 'confirmed' or (event.deposit_paid and not event.event_completed):
        return STATUS_COLORS['confirmed']
    return STATUS_COLORS['default']


def event_completion(event: CalendarEvent) -> str:
    return 'completed' if event.status in ('delivered', 'released') else 'pending'


def daily_sheet_frame(events: List[CalendarEvent]) -> pd.DataFrame:
    """Printable list of one day's events with their payment summary."""
    rows = []
    for position, event in enumerate(events, start=1):
        amounts = event.contract.amounts
        rows.append({
            '#': position,
            'Cliente': event.client_name or 'Evento sin nombre',
            'Hora': event.event_time or '-',
            'Tipo': event.event_type or '-',
            'Teléfono': event.phone or '-',
            'Duración': event.package_duration or '-',
            'Ubicación': event.event_location or '-',
            'Total': amounts.total_amount,
            'Depósito': amounts.deposit_amount,
            'Restante': amounts.remaining_amount,
            'Depósito pagado': bool(event.deposit_paid),
            'Pago final': bool(event.final_payment_paid),
        })
    return pd.DataFrame(rows)
