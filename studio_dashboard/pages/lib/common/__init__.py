"""Common utilities shared across all page files.

This module provides formatting and file export utilities that are used by
multiple pages.
"""

from .formatting import (
    escape_dollar_for_markdown,
    format_currency,
    format_currency_markdown,
    format_percent,
    format_signed_amount,
)
from .file_operations import daily_sheet_filename, safe_filename, write_csv_export

__all__ = [
    'escape_dollar_for_markdown',
    'format_currency',
    'format_currency_markdown',
    'format_percent',
    'format_signed_amount',
    'daily_sheet_filename',
    'safe_filename',
    'write_csv_export',
]
