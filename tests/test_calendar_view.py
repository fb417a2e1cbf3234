from datetime import date

from studio_dashboard.calendar_view import (
    MAX_EVENTS_PER_CELL,
    STATUS_COLORS,
    base_contract_id,
    build_month_cells,
    calendar_weeks,
    daily_sheet_frame,
    event_color,
    event_completion,
    event_summary,
    events_by_day,
    expand_contract_events,
    filter_events,
    month_grid,
    shift_month,
    time_to_minutes,
    to_local_date,
    year_options,
)


def booking(cid, when, time='10:00', client='Cliente', **extra):
    record = {'id': cid, 'clientName': client, 'eventDate': when, 'eventTime': time}
    record.update(extra)
    return record


def test_one_event_per_service_line_with_per_line_schedule():
    record = booking(
        'c1', '2024-06-01', client='Ana',
        services=[{'name': 'Boda', 'price': 100}, {'name': 'Ensayo', 'price': 50, 'duration': '2h'}],
        formSnapshot={'date_1': '2024-06-10', 'time_1': '15:30', 'eventLocation_1': 'Parque'},
    )
    first, second = expand_contract_events([record])
    assert first.id == 'c1__0'
    assert first.event_date == '2024-06-01'
    assert first.client_name == 'Ana — Boda'
    assert second.id == 'c1__1'
    assert second.event_date == '2024-06-10'
    assert second.event_time == '15:30'
    assert second.event_location == 'Parque'
    assert second.package_duration == '2h'
    assert base_contract_id(second.id) == 'c1'


def test_contract_without_lines_is_a_single_event():
    events = expand_contract_events([booking('c2', '2024-06-02')])
    assert [e.id for e in events] == ['c2']


def test_events_by_day_orders_by_time_then_client():
    events = expand_contract_events([
        booking('a', '2024-06-01', time='14:00', client='Zoe'),
        booking('b', '2024-06-01', time='09:15', client='Bia'),
        booking('c', '2024-06-01', time='09:15', client='Ana'),
        booking('d', '2024-06-02', time=''),
        booking('e', '', time='08:00'),
    ])
    by_day = events_by_day(events)
    assert [e.id for e in by_day['2024-06-01']] == ['c', 'b', 'a']
    assert [e.id for e in by_day['2024-06-02']] == ['d']
    assert '' not in by_day


def test_time_to_minutes_tolerates_missing_parts():
    assert time_to_minutes('09:15') == 555
    assert time_to_minutes('7') == 420
    assert time_to_minutes('') == 0
    assert time_to_minutes('xx:yy') == 0


def test_to_local_date_is_strict():
    assert to_local_date('2024-02-29') == date(2024, 2, 29)
    assert to_local_date('2024-02-30') is None
    assert to_local_date('02/03/2024') is None
    assert to_local_date(None) is None


def test_month_grid_is_sunday_first():
    cells = month_grid(2024, 6)  # June 1st 2024 is a Saturday
    assert cells[:6] == [None] * 6
    assert cells[6] == date(2024, 6, 1)
    assert len([c for c in cells if c]) == 30
    september = month_grid(2024, 9)  # starts on a Sunday
    assert september[0] == date(2024, 9, 1)


def test_month_cells_cap_visible_events():
    records = [booking(f'x{i}', '2024-06-03', time=f'{10 + i}:00') for i in range(MAX_EVENTS_PER_CELL + 2)]
    by_day = events_by_day(expand_contract_events(records))
    cells = build_month_cells(2024, 6, by_day, today=date(2024, 6, 3))
    cell = next(c for c in cells if c.key == '2024-06-03')
    assert cell.is_today
    assert cell.event_count == MAX_EVENTS_PER_CELL + 2
    assert len(cell.visible_events) == MAX_EVENTS_PER_CELL
    assert cell.overflow == 2


def test_filter_by_month_status_and_phone():
    events = expand_contract_events([
        booking('a', '2024-06-01', phone='(11) 98765-4321', status='confirmed'),
        booking('b', '2024-06-05', formSnapshot={'phone': '11 5555 0000'}),
        booking('c', '2024-07-01', phone='11987654321'),
    ])
    assert [e.id for e in filter_events(events, 6, 2024)] == ['a', 'b']
    assert [e.id for e in filter_events(events, 6, 2024, status='confirmed')] == ['a']
    assert [e.id for e in filter_events(events, 6, 2024, phone='8765-43')] == ['a']
    assert [e.id for e in filter_events(events, 6, 2024, phone='5555')] == ['b']


def test_event_summary_counts_workflow_stages():
    events = expand_contract_events([
        booking('p', '2024-06-01', depositPaid=False),
        booking('q', '2024-06-01'),
        booking('e', '2024-06-01', depositPaid=True, finalPaymentPaid=True),
        booking('d', '2024-06-01', depositPaid=True, finalPaymentPaid=True, eventCompleted=True),
        booking('w', '2024-06-01', depositPaid=True),
    ])
    summary = event_summary(events)
    assert summary == {'pending': 2, 'editing': 1, 'completed': 1, 'all_total': 5, 'total': 4}


def test_event_color_and_completion():
    cancelled, delivered, unpaid = expand_contract_events([
        booking('a', '2024-06-01', status='cancelled'),
        booking('b', '2024-06-01', eventCompleted=True, finalPaymentPaid=True),
        booking('c', '2024-06-01', depositPaid=False),
    ])
    assert event_color(cancelled) == STATUS_COLORS['cancelled']
    assert event_color(delivered) == STATUS_COLORS['delivered']
    assert event_color(unpaid) == STATUS_COLORS['pending_payment']
    assert event_completion(delivered) == 'completed'
    assert event_completion(unpaid) == 'pending'


def test_month_navigation_wraps_years():
    assert shift_month(2024, 1, -1) == (2023, 12)
    assert shift_month(2024, 12, 1) == (2025, 1)
    assert shift_month(2024, 6, 0) == (2024, 6)
    assert year_options(date(2024, 6, 1)) == [2021, 2022, 2023, 2024, 2025, 2026, 2027]


def test_daily_sheet_lists_payment_summary():
    events = expand_contract_events([
        booking('a', '2024-06-01', client='Ana', services=[{'price': 'R$ 1.000'}], travelFee=100),
    ])
    sheet = daily_sheet_frame(events)
    row = sheet.iloc[0]
    assert row['#'] == 1
    assert row['Total'] == 1100
    assert row['Depósito'] == 200
    assert row['Restante'] == 900


def test_calendar_weeks_pad_the_last_week():
    by_day = events_by_day(expand_contract_events([booking('a', '2024-06-03')]))
    weeks = calendar_weeks(build_month_cells(2024, 6, by_day, today=date(2024, 6, 3)))

    assert len(weeks) == 6  # 6 leading blanks + 30 days
    assert all(len(week) == 7 for week in weeks)
    assert weeks[0][6].day == date(2024, 6, 1)
    assert weeks[-1][0].day == date(2024, 6, 30)
    assert all(cell.day is None for cell in weeks[-1][1:])
    monday = weeks[1][1]
    assert monday.is_today and monday.has_events
