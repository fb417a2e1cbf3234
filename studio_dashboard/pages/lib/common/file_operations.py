"""File operation utilities for export filenames and CSV exports."""

from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import Optional

import pandas as pd


def safe_filename(name: str, default: str = 'export', max_length: Optional[int] = None) -> str:
    """Create a safe filename stem from a user-provided name.

    Keeps alphanumeric characters, underscores and hyphens; spaces become
    underscores and runs of underscores collapse to one.

    Example:
        >>> safe_filename("Eventos del día 2024-05-10")
        'Eventos_del_día_2024-05-10'
        >>> safe_filename("", default="agenda")
        'agenda'
    """
    if not name:
        return default

    cleaned = ''.join(c for c in name if c.isalnum() or c in {' ', '_', '-'})
    cleaned = cleaned.strip().replace(' ', '_')
    while '__' in cleaned:
        cleaned = cleaned.replace('__', '_')

    if max_length is not None and len(cleaned) > max_length:
        cleaned = cleaned[:max_length]

    cleaned = cleaned.rstrip('_')
    return cleaned if cleaned else default


def daily_sheet_filename(day: date) -> str:
    return f"{safe_filename(f'eventos {day.isoformat()}')}.csv"


def write_csv_export(frame: pd.DataFrame, filename: str, directory: Path) -> Path:
    """Write a DataFrame as UTF-8 CSV (with BOM, so spreadsheet apps keep accents).

    Raises:
        OSError: If the directory cannot be created or the file written
    """
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / filename
    frame.to_csv(path, index=False, encoding='utf-8-sig')
    return path
