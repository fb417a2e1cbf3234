"""Studio back-office home page.

Shows a short overview of the selected period and the upcoming events;
the detailed views live in the pages/ directory.
"""

from __future__ import annotations

from datetime import date

import streamlit as st

from .calendar_view import events_by_day, expand_contract_events, to_local_date
from .financial_metrics import StudioFinanceAnalytics
from .pages.lib.common.formatting import format_currency, format_percent
from .shared_sidebar import render_shared_sidebar

UPCOMING_DAYS = 7


def main():
    """Main entry point for the studio dashboard."""
    st.set_page_config(
        page_title="Studio Admin",
        page_icon="📸",
        layout="wide",
        initial_sidebar_state="expanded"
    )

    sidebar_data = render_shared_sidebar()
    contracts = sidebar_data['contracts']

    st.title("📸 Panel del estudio")
    if not contracts:
        _render_welcome_screen()
        return

    analytics = StudioFinanceAnalytics(contracts, sidebar_data['installments'], period=sidebar_data['period'])
    metrics = analytics.calculate_metrics()

    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Ingresos realizados", format_currency(metrics.current_month_revenue, decimals=0))
    col2.metric("Gastos", format_currency(metrics.current_month_expenses, decimals=0))
    col3.metric("Ganancia neta", format_currency(metrics.current_month_net_profit, decimals=0))
    col4.metric("Margen", format_percent(metrics.profit_margin))

    _render_upcoming_events(contracts, date.today())


def _render_upcoming_events(contracts, today: date) -> None:
    st.subheader(f"🗓️ Próximos {UPCOMING_DAYS} días")
    by_day = events_by_day(expand_contract_events(contracts))
    upcoming = []
    for key in sorted(by_day):
        day = to_local_date(key)
        if day is not None and 0 <= (day - today).days < UPCOMING_DAYS:
            upcoming.append(key)
    if not upcoming:
        st.info("No hay eventos en los próximos días.")
        return
    for key in upcoming:
        st.markdown(f"**{key}**")
        for event in by_day[key]:
            st.write(f"• {event.event_time or '--:--'} {event.client_name or 'Evento sin nombre'} ({event.event_type or '-'})")


def _render_welcome_screen() -> None:
    """Render welcome screen when the store has no contracts yet."""
    st.markdown("""
    ## Bienvenido al panel del estudio

    Usa las páginas de la barra lateral:
    - 📅 **Calendario**: eventos por mes, estados y hoja diaria
    - 💰 **Panel financiero**: ingresos, gastos, cobros pendientes y mejores clientes
    - 📋 **Presupuesto**: sobres, ingresos y gastos
    - 📸 **Fotos**: acceso a la galería de un contrato

    Para probar con datos de ejemplo ejecuta `python scripts/seed_demo_data.py`.
    """)
