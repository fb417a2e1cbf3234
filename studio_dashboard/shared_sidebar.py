"""Shared sidebar components for multi-page dashboard.

This module provides common sidebar functionality that should be available
across all pages of the dashboard: the reporting period selector, the
refresh button and the toast messages published by write operations.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Dict, List, Optional

import streamlit as st

from . import db
from .bookings import load_contracts
from .config import INVESTMENT_INSTALLMENTS, ensure_data_directories
from .events import ContractsChanged, Toast, app_events
from .logging_config import setup_logging
from .pages.config import get_studio_config
from .periods import PERIOD_TYPES, Period

logger = logging.getLogger(__name__)

PERIOD_STATE_KEY = 'period'
TOAST_STATE_KEY = '_pending_toasts'
TOAST_ICONS = {'success': '✅', 'info': 'ℹ️', 'error': '❌'}


def _queue_toast(toast: Toast) -> None:
    st.session_state.setdefault(TOAST_STATE_KEY, []).append(toast)


def _invalidate_contracts(_: ContractsChanged) -> None:
    load_contracts_cached.clear()


def bootstrap() -> None:
    """One-time process setup: logging, data directories, store schema and subscribers."""
    setup_logging()
    ensure_data_directories()
    db.init_db()
    app_events.toast.connect(_queue_toast)
    app_events.contracts_changed.connect(_invalidate_contracts)


@st.cache_data(show_spinner=False)
def load_contracts_cached() -> List[Dict[str, Any]]:
    return load_contracts()


@st.cache_data(show_spinner=False)
def load_installments_cached() -> List[Dict[str, Any]]:
    return db.fetch_collection_safe(INVESTMENT_INSTALLMENTS)


def render_period_selector() -> Period:
    """Global / this year / this month / custom range, kept in session state."""
    labels = get_studio_config()['period_labels']
    current = Period.from_mapping(st.session_state.get(PERIOD_STATE_KEY))

    st.sidebar.subheader("📅 Período")
    period_type = st.sidebar.radio(
        "Período",
        options=list(PERIOD_TYPES),
        index=PERIOD_TYPES.index(current.type),
        format_func=lambda key: labels.get(key, key),
        label_visibility="collapsed",
    )

    start: Optional[str] = None
    end: Optional[str] = None
    if period_type == 'custom':
        col1, col2 = st.sidebar.columns(2)
        start_value = col1.date_input("Desde", value=_as_date(current.start), format="YYYY-MM-DD")
        end_value = col2.date_input("Hasta", value=_as_date(current.end), format="YYYY-MM-DD")
        start = start_value.isoformat() if start_value else None
        end = end_value.isoformat() if end_value else None

    period = Period(type=period_type, start=start, end=end)
    st.session_state[PERIOD_STATE_KEY] = period.to_dict()
    return period


def _as_date(value: Optional[str]) -> Optional[date]:
    if not value:
        return None
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        return None


def render_refresh_button() -> None:
    if st.sidebar.button("🔄 Actualizar datos", help="Volver a leer contratos y cuotas"):
        load_contracts_cached.clear()
        load_installments_cached.clear()
        st.rerun()


def flush_toasts() -> None:
    """Show and clear the toasts queued since the last render."""
    for toast in st.session_state.pop(TOAST_STATE_KEY, []):
        st.toast(toast.message, icon=TOAST_ICONS.get(toast.kind))


def render_shared_sidebar() -> Dict[str, Any]:
    """Render shared sidebar elements available on all pages.

    Returns:
        Dict with keys: 'period', 'contracts', 'installments'
    """
    bootstrap()
    st.sidebar.title("📸 Studio Admin")
    period = render_period_selector()
    render_refresh_button()
    flush_toasts()
    return {
        'period': period,
        'contracts': load_contracts_cached(),
        'installments': load_installments_cached(),
    }
