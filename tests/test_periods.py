from datetime import datetime

import pytest

from studio_dashboard.exceptions import ValidationError
from studio_dashboard.periods import Period, is_in_period, parse_date

NOW = datetime(2024, 5, 15, 10, 30)


def test_custom_range_includes_last_day_and_excludes_next():
    period = Period(type='custom', start='2024-01-01', end='2024-01-31')
    assert is_in_period('2024-01-31', period, now=NOW)
    assert is_in_period('2024-01-31T23:59:59', period, now=NOW)
    assert not is_in_period('2024-02-01', period, now=NOW)
    assert is_in_period('2024-01-01', period, now=NOW)
    assert not is_in_period('2023-12-31', period, now=NOW)


def test_custom_range_with_open_bounds():
    assert is_in_period('1999-01-01', Period(type='custom', end='2024-01-31'), now=NOW)
    assert is_in_period('2099-01-01', Period(type='custom', start='2024-01-01'), now=NOW)
    assert is_in_period('2024-03-03', Period(type='custom'), now=NOW)


def test_year_and_month_are_relative_to_now():
    assert is_in_period('2024-01-10', Period(type='year'), now=NOW)
    assert not is_in_period('2023-05-10', Period(type='year'), now=NOW)
    assert is_in_period('2024-05-01', Period(type='month'), now=NOW)
    assert not is_in_period('2024-04-30', Period(type='month'), now=NOW)
    assert not is_in_period('2023-05-20', Period(type='month'), now=NOW)


def test_all_accepts_any_parsable_date():
    assert is_in_period('1990-06-01', Period(type='all'), now=NOW)


@pytest.mark.parametrize('value', ['', None, 'not a date', '2024-13-45'])
def test_unparsable_dates_are_never_in_period(value):
    for period_type in ('all', 'year', 'month', 'custom'):
        assert not is_in_period(value, Period(type=period_type), now=NOW)


def test_filtering_twice_is_the_same_as_once():
    period = Period(type='custom', start='2024-02-01', end='2024-03-31')
    dates = ['2024-01-31', '2024-02-01', '2024-02-29', '2024-03-31', '2024-04-01', 'garbage']
    once = [d for d in dates if is_in_period(d, period, now=NOW)]
    twice = [d for d in once if is_in_period(d, period, now=NOW)]
    assert once == twice == ['2024-02-01', '2024-02-29', '2024-03-31']


def test_unknown_period_type_is_rejected():
    with pytest.raises(ValidationError):
        Period(type='quarter')


def test_period_round_trips_through_session_mapping():
    period = Period(type='custom', start='2024-01-01', end='2024-01-31')
    assert Period.from_mapping(period.to_dict()) == period
    assert Period.from_mapping(None) == Period(type='month')


def test_parse_date_drops_timezone():
    parsed = parse_date('2024-01-31T23:00:00-03:00')
    assert parsed == datetime(2024, 2, 1, 2, 0)
    assert parsed.tzinfo is None
