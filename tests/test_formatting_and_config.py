from datetime import date

import pandas as pd

from studio_dashboard.pages.config import get_config_value, get_studio_config
from studio_dashboard.pages.lib.common import (
    daily_sheet_filename,
    escape_dollar_for_markdown,
    format_currency,
    format_signed_amount,
    safe_filename,
    write_csv_export,
)


def test_format_currency():
    assert format_currency(1234.5) == 'R$ 1,234.50'
    assert format_currency(1100, decimals=0) == 'R$ 1,100'
    assert format_currency(-50, include_sign=False) == '-50.00'


def test_signed_amounts_and_markdown_escape():
    assert format_signed_amount(200, True) == '+ R$ 200.00'
    assert format_signed_amount(-200, False) == '- R$ 200.00'
    assert escape_dollar_for_markdown('R$ 5') == 'R\\$ 5'


def test_safe_filename():
    assert safe_filename('Agenda  del día!') == 'Agenda_del_día'
    assert safe_filename('???', default='agenda') == 'agenda'
    assert safe_filename('abcdef', max_length=3) == 'abc'
    assert daily_sheet_filename(date(2024, 5, 10)) == 'eventos_2024-05-10.csv'


def test_write_csv_export_keeps_accents(tmp_path):
    frame = pd.DataFrame([{'Cliente': 'João', 'Total': 100.0}])
    path = write_csv_export(frame, 'eventos.csv', tmp_path / 'exports')
    assert path.exists()
    assert path.read_bytes().startswith(b'\xef\xbb\xbf')
    assert pd.read_csv(path, encoding='utf-8-sig').loc[0, 'Cliente'] == 'João'


def test_studio_config_shape():
    config = get_studio_config()
    for key in ('status_labels', 'period_labels', 'calendar', 'bookings', 'budget'):
        assert key in config
    assert get_config_value('studio', 'calendar', 'year_span') == 3
    assert get_config_value('studio', 'budget', 'missing', default='x') == 'x'
    assert get_config_value('nonexistent', 'a', default=1) == 1
