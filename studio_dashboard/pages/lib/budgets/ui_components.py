"""UI components for the budget planner page.

This module provides the Streamlit rendering functions for the envelope
budget: totals, envelope cards, the income and expense forms, the envelope
editor and the transaction history.
"""

from __future__ import annotations

from typing import Any, Dict

import streamlit as st

from studio_dashboard.budget_ledger import INCOME, BudgetLedger, BudgetSummary, progress_band
from studio_dashboard.events import app_events
from studio_dashboard.exceptions import DomainError, StoreError
from studio_dashboard.pages.config import get_studio_config
from studio_dashboard.visualization import create_envelope_progress_chart

from ..common.formatting import escape_dollar_for_markdown, format_currency, format_percent, format_signed_amount

BAND_ICONS = {'green': '🟢', 'yellow': '🟡', 'red': '🔴'}


def _budget_config() -> Dict[str, Any]:
    return get_studio_config().get('budget', {})


def _band(percent: float) -> str:
    cfg = _budget_config()
    return progress_band(
        percent,
        warning=float(cfg.get('progress_warning', 50)),
        danger=float(cfg.get('progress_danger', 80)),
    )


def _run_action(action, success_message: str) -> bool:
    """Run a ledger write; validation problems become inline alerts."""
    try:
        action()
    except StoreError:
        # already logged and announced through the toast channel
        return False
    except DomainError as exc:
        st.warning(str(exc))
        return False
    app_events.notify(success_message, "success")
    return True


# ============================================================================
# Totals and envelopes
# ============================================================================

def render_budget_totals(summary: BudgetSummary) -> None:
    st.markdown("#### Disponible para asignar")
    st.metric("Disponible", format_currency(summary.total_available))
    cols = st.columns(2)
    cols[0].metric("Total asignado", format_currency(summary.total_allocated))
    cols[1].metric("Total gastado", format_currency(summary.total_spent))


def render_envelope_cards(summary: BudgetSummary) -> None:
    """One card per envelope with allocated / spent / available and a progress bar."""
    if not summary.envelopes:
        st.info("No hay sobres presupuestarios. Crea uno abajo.")
        return

    st.markdown("### Sobres presupuestarios")
    for envelope in summary.envelopes:
        percent = envelope.progress_percent
        with st.container(border=True):
            st.markdown(f"**{envelope.name}** · {format_percent(envelope.percentage, 0)}")
            cols = st.columns(3)
            cols[0].caption(f"Asignado: {format_currency(envelope.allocated)}")
            cols[1].caption(f"Gastado: {format_currency(envelope.spent)}")
            cols[2].caption(f"Disponible: {format_currency(envelope.available)}")
            st.progress(min(percent, 100.0) / 100.0, text=f"{BAND_ICONS[_band(percent)]} {percent:.0f}%")

    st.plotly_chart(create_envelope_progress_chart(summary.envelopes), use_container_width=True)


def render_envelope_editor(ledger: BudgetLedger, summary: BudgetSummary) -> None:
    with st.expander("✏️ Crear o editar sobre"):
        options = {'': '➕ Nuevo sobre'}
        options.update({e.id: e.name for e in summary.envelopes})
        selected = st.selectbox("Sobre", options=list(options), format_func=options.get, key="envelope_editor_select")
        current = summary.envelope(selected) if selected else None

        name = st.text_input("Nombre", value=current.name if current else "", key=f"envelope_name_{selected}")
        allocated = st.number_input(
            "Asignado (R$)",
            min_value=0.0,
            value=float(current.allocated) if current else 0.0,
            step=50.0,
            key=f"envelope_allocated_{selected}",
        )
        percentage = st.number_input(
            "Porcentaje",
            min_value=0.0,
            max_value=100.0,
            value=float(current.percentage) if current else 0.0,
            step=1.0,
            key=f"envelope_percentage_{selected}",
        )

        col_save, col_delete = st.columns(2)
        if col_save.button("💾 Guardar sobre", use_container_width=True):
            if _run_action(
                lambda: ledger.save_envelope(name, allocated, percentage, envelope_id=selected or None),
                "Sobre guardado",
            ):
                st.rerun()
        if current and col_delete.button("🗑️ Eliminar sobre", use_container_width=True):
            if _run_action(lambda: ledger.delete_envelope(current.id), "Sobre eliminado"):
                st.rerun()


# ============================================================================
# Forms
# ============================================================================

def render_income_form(ledger: BudgetLedger) -> None:
    st.markdown("#### 💵 Agregar ingreso")
    with st.form("add_income_form", clear_on_submit=True):
        amount = st.text_input("Monto", placeholder="0.00")
        submitted = st.form_submit_button("Agregar ingreso")
    if submitted and _run_action(lambda: ledger.add_income(amount), "Ingreso agregado"):
        st.rerun()


def render_expense_form(ledger: BudgetLedger, summary: BudgetSummary) -> None:
    st.markdown("#### 🧾 Registrar gasto")
    if not summary.envelopes:
        st.caption("Crea un sobre para registrar gastos.")
        return
    names = {e.id: e.name for e in summary.envelopes}
    with st.form("add_expense_form", clear_on_submit=True):
        envelope_id = st.selectbox("Sobre", options=[''] + list(names), format_func=lambda key: names.get(key, 'Selecciona un sobre'))
        amount = st.text_input("Monto", placeholder="0.00")
        description = st.text_input("Descripción", placeholder="Gasto")
        submitted = st.form_submit_button("Registrar gasto")
    if submitted and _run_action(lambda: ledger.add_expense(envelope_id, amount, description), "Gasto registrado"):
        st.rerun()


# ============================================================================
# History
# ============================================================================

def render_transaction_history(ledger: BudgetLedger, summary: BudgetSummary) -> None:
    st.markdown("### Historial de transacciones")
    if not summary.transactions:
        st.info("Sin transacciones todavía.")
        return

    for transaction in summary.transactions:
        cols = st.columns([2, 3, 2, 2, 1])
        cols[0].write(transaction.date)
        cols[1].write(transaction.description or '-')
        cols[2].caption(transaction.category)
        amount_text = format_signed_amount(transaction.amount, transaction.type == INCOME)
        cols[3].markdown(f":{'green' if transaction.type == INCOME else 'red'}[{escape_dollar_for_markdown(amount_text)}]")
        if cols[4].button("🗑️", key=f"delete_tx_{transaction.id}", help="Eliminar transacción"):
            if _run_action(lambda tx_id=transaction.id: ledger.delete_transaction(tx_id), "Transacción eliminada"):
                st.rerun()
