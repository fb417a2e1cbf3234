"""UI components for the admin calendar page."""

from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Optional, Tuple

import pandas as pd
import streamlit as st

from studio_dashboard import bookings
from studio_dashboard.calendar_view import (
    CalendarEvent,
    MonthCell,
    base_contract_id,
    calendar_weeks,
    daily_sheet_frame,
    event_color,
    event_completion,
    shift_month,
    year_options,
)
from studio_dashboard.config import EXPORTS_DIR
from studio_dashboard.contracts import CONTRACT_STATUSES, to_number
from studio_dashboard.events import ContractDeleted, OpenContractEditor, app_events
from studio_dashboard.exceptions import DomainError, StoreError
from studio_dashboard.pages.config import get_studio_config

from ..common.file_operations import daily_sheet_filename, write_csv_export
from ..common.formatting import format_currency

YEAR_KEY = 'calendar_year'
MONTH_KEY = 'calendar_month'
DAY_KEY = 'calendar_selected_day'
EVENT_KEY = 'calendar_selected_event'

WORKFLOW_LABELS = {
    'depositPaid': '✓ Depósito realizado',
    'finalPaymentPaid': '✓ Pago final',
    'isEditing': 'En edición',
    'eventCompleted': 'Evento completado',
}


def _calendar_config() -> Dict[str, Any]:
    return get_studio_config()['calendar']


def current_month(today: date) -> Tuple[int, int]:
    st.session_state.setdefault(YEAR_KEY, today.year)
    st.session_state.setdefault(MONTH_KEY, today.month)
    return st.session_state[YEAR_KEY], st.session_state[MONTH_KEY]


def _set_month(year: int, month: int) -> None:
    st.session_state[YEAR_KEY] = year
    st.session_state[MONTH_KEY] = month
    st.session_state.pop(DAY_KEY, None)


def render_month_navigation(today: date) -> Tuple[int, int]:
    """Previous / today / next buttons plus month and year pickers."""
    cfg = _calendar_config()
    year, month = current_month(today)

    cols = st.columns([1, 1, 1, 3, 2])
    if cols[0].button("◀", help="Mes anterior"):
        _set_month(*shift_month(year, month, -1))
        st.rerun()
    if cols[1].button("Hoy"):
        _set_month(today.year, today.month)
        st.rerun()
    if cols[2].button("▶", help="Mes siguiente"):
        _set_month(*shift_month(year, month, 1))
        st.rerun()

    month_names = cfg['month_names']
    picked_month = cols[3].selectbox(
        "Mes", options=list(range(1, 13)), index=month - 1,
        format_func=lambda m: month_names[m - 1], label_visibility="collapsed",
    )
    years = year_options(today, span=int(cfg.get('year_span', 3)))
    if year not in years:
        years = sorted(set(years) | {year})
    picked_year = cols[4].selectbox("Año", options=years, index=years.index(year), label_visibility="collapsed")
    if (picked_year, picked_month) != (year, month):
        _set_month(picked_year, picked_month)
        st.rerun()
    return year, month


def render_filters() -> Tuple[str, str]:
    labels = get_studio_config()['status_labels']
    cols = st.columns(2)
    status = cols[0].selectbox(
        "Estado",
        options=['all', *CONTRACT_STATUSES],
        format_func=lambda key: 'Todos' if key == 'all' else labels.get(key, key),
    )
    phone = cols[1].text_input("Teléfono", placeholder="Buscar por teléfono")
    return status, phone


def render_summary(summary: Dict[str, int]) -> None:
    cols = st.columns(4)
    cols[0].metric("Pendientes", summary['pending'])
    cols[1].metric("Por editar", summary['editing'])
    cols[2].metric("Eventos finalizados", summary['completed'])
    cols[3].metric("Eventos totales", summary['all_total'])


def _event_chip(event: CalendarEvent) -> str:
    color = event_color(event)
    label = f"{event.event_time or '00:00'} {event.client_name or 'Evento sin nombre'}"
    return f"<div style='border-left:4px solid {color};padding-left:4px;font-size:0.8em'>{label}</div>"


def render_month_grid(cells: List[MonthCell]) -> None:
    """Seven-column grid, Sunday first; a click on a day opens its list."""
    weekdays = _calendar_config()['weekday_labels']
    header = st.columns(7)
    for col, label in zip(header, weekdays):
        col.markdown(f"**{label}**")

    for start in range(0, len(cells), 7):
        row = st.columns(7)
        for col, cell in zip(row, cells[start:start + 7]):
            if cell.day is None:
                col.write("")
                continue
            label = f"**{cell.day.day}**" if cell.is_today else str(cell.day.day)
            if cell.has_events:
                label += f" · {cell.event_count}"
            if col.button(label, key=f"day_{cell.key}", use_container_width=True):
                st.session_state[DAY_KEY] = cell.key
                st.session_state.pop(EVENT_KEY, None)
            for event in cell.visible_events:
                col.markdown(_event_chip(event), unsafe_allow_html=True)
            if cell.overflow:
                col.caption(f"+{cell.overflow} más")


def render_mini_month(cells: List[MonthCell], year: int, month: int) -> None:
    """Compact sidebar month: today in bold, a colored dot under days with events."""
    config = _calendar_config()
    header = ''.join(f"<th>{label[0]}</th>" for label in config['weekday_labels'])
    rows = []
    for week in calendar_weeks(cells):
        tds = []
        for cell in week:
            if cell.day is None:
                tds.append("<td></td>")
                continue
            number = f"<b>{cell.day.day}</b>" if cell.is_today else str(cell.day.day)
            dot = f"<br><span style='color:{event_color(cell.events[0])}'>●</span>" if cell.has_events else ""
            tds.append(f"<td style='text-align:center'>{number}{dot}</td>")
        rows.append(f"<tr>{''.join(tds)}</tr>")
    st.sidebar.markdown(f"**{config['month_names'][month - 1]} {year}**")
    st.sidebar.markdown(
        f"<table style='font-size:0.75em;width:100%'><tr>{header}</tr>{''.join(rows)}</table>",
        unsafe_allow_html=True,
    )


def selected_day() -> Optional[str]:
    return st.session_state.get(DAY_KEY)


def render_day_panel(day_key: str, events: List[CalendarEvent]) -> None:
    """Events of one day, the daily sheet export and the event detail panel."""
    st.markdown(f"### Eventos - {day_key}")
    if not events:
        st.info("Sin eventos para este día.")
        return

    for position, event in enumerate(events, start=1):
        status = '✓ Evento completado' if event_completion(event) == 'completed' else ''
        cols = st.columns([4, 1])
        cols[0].markdown(f"{position}. **{event.client_name or 'Evento sin nombre'}** · {event.event_time or '-'} {status}")
        if cols[1].button("Ver", key=f"open_{event.id}"):
            st.session_state[EVENT_KEY] = event.id

    sheet = daily_sheet_frame(events)
    st.dataframe(sheet, hide_index=True, use_container_width=True)
    filename = daily_sheet_filename(date.fromisoformat(day_key))
    col_download, col_save = st.columns(2)
    col_download.download_button(
        "⬇️ Descargar hoja del día",
        data=sheet.to_csv(index=False).encode('utf-8-sig'),
        file_name=filename,
        mime='text/csv',
    )
    if col_save.button("💾 Guardar en exportaciones"):
        try:
            path = write_csv_export(sheet, filename, EXPORTS_DIR)
        except OSError as exc:
            st.error(f"No se pudo guardar la hoja: {exc}")
        else:
            st.success(f"Hoja guardada en {path}")

    chosen = next((e for e in events if e.id == st.session_state.get(EVENT_KEY)), None)
    if chosen is not None:
        render_event_detail(chosen)


def _run(action) -> bool:
    try:
        action()
    except StoreError:
        return False
    except DomainError as exc:
        st.warning(str(exc))
        return False
    return True


@st.cache_data(show_spinner=False, ttl=300)
def _dress_options() -> List[Dict[str, str]]:
    keywords = get_studio_config()['bookings']['dress_keywords']
    return bookings.load_dress_options(keywords)


def render_event_detail(event: CalendarEvent) -> None:
    labels = get_studio_config()['status_labels']
    amounts = event.contract.amounts
    raw = event.contract.raw

    with st.container(border=True):
        st.markdown(f"#### {event.client_name or 'Evento sin nombre'}")
        st.write(f"📅 {event.event_date} {event.event_time} · 📍 {event.event_location or '-'}")
        st.write(f"🎬 {event.event_type or '-'} · ⏱️ {event.package_duration or '-'} · 📞 {event.phone or '-'}")
        st.write(f"Método de pago: {raw.get('paymentMethod') or '-'}")
        cols = st.columns(3)
        cols[0].metric("Total", format_currency(amounts.total_amount, decimals=0))
        cols[1].metric("Depósito", 'Pago' if event.deposit_paid else f"Pendiente ({format_currency(amounts.deposit_amount, decimals=0)})")
        cols[2].metric("Saldo", 'Pago' if event.final_payment_paid else f"Pendiente ({format_currency(amounts.remaining_amount, decimals=0)})")

        statuses = list(CONTRACT_STATUSES)
        if event.status not in statuses:
            statuses.insert(0, event.status)
        status = st.selectbox(
            "Estado",
            options=statuses,
            index=statuses.index(event.status),
            format_func=lambda key: labels.get(key, key),
            key=f"status_{event.id}",
        )
        if status != event.status and _run(lambda: bookings.update_status(event.contract_id, status)):
            st.rerun()

        st.markdown("**Progreso del evento**")
        flag_cols = st.columns(len(WORKFLOW_LABELS))
        for col, (flag, label) in zip(flag_cols, WORKFLOW_LABELS.items()):
            current = bool(raw.get(flag))
            if col.checkbox(label, value=current, key=f"{flag}_{event.id}") != current:
                if _run(lambda f=flag, v=not current: bookings.update_workflow(event.contract_id, {f: v})):
                    st.rerun()

        dresses = bookings.selected_dresses(raw, _dress_options())
        if dresses:
            st.markdown("**Vestidos seleccionados**")
            dress_cols = st.columns(min(len(dresses), 4))
            for index, dress in enumerate(dresses):
                with dress_cols[index % len(dress_cols)]:
                    if dress['image']:
                        st.image(dress['image'], width=96)
                    st.caption(f"{dress['name']} {dress['color']}".strip())

        col_edit, col_delete = st.columns(2)
        if col_edit.button("📝 Abrir contrato", key=f"edit_{event.id}"):
            bookings.open_contract(event.contract_id)
            st.rerun()
        if col_delete.button("🗑️ Eliminar evento", key=f"delete_{event.id}", help="También se eliminará el contrato"):
            if _run(lambda: bookings.delete_contract(event.contract_id)):
                st.session_state.pop(EVENT_KEY, None)
                st.rerun()


def render_add_event_form() -> None:
    payment_methods = get_studio_config()['bookings']['payment_methods']
    with st.expander("➕ Agregar evento"):
        with st.form("add_event_form", clear_on_submit=True):
            col1, col2 = st.columns(2)
            form = {
                'clientName': col1.text_input("Cliente"),
                'clientEmail': col2.text_input("Email"),
                'eventType': col1.text_input("Tipo de evento", placeholder="Evento"),
                'eventDate': col2.date_input("Fecha", value=None),
                'eventTime': col1.text_input("Hora", placeholder="00:00"),
                'eventLocation': col2.text_input("Ubicación"),
                'phone': col1.text_input("Teléfono"),
                'paymentMethod': col2.selectbox("Método de pago", options=payment_methods),
                'totalAmount': col1.number_input("Total (R$)", min_value=0.0, step=50.0),
                'travelFee': col2.number_input("Traslado (R$)", min_value=0.0, step=10.0),
            }
            submitted = st.form_submit_button("Crear evento")
        if submitted:
            if form['eventDate'] is not None:
                form['eventDate'] = form['eventDate'].isoformat()
            if _run(lambda: bookings.add_event(form)):
                st.rerun()


def render_sync_button() -> None:
    sources = get_studio_config()['bookings']['source_collections']
    if st.button("🔁 Sincronizar reservas", help="Crear contratos para reservas sin contrato"):
        if _run(lambda: bookings.sync_calendar_with_contracts(sources)):
            st.rerun()


def events_frame(events: List[CalendarEvent]) -> pd.DataFrame:
    labels = get_studio_config()['status_labels']
    return pd.DataFrame([
        {
            'Fecha': e.event_date,
            'Hora': e.event_time,
            'Cliente': e.client_name,
            'Tipo': e.event_type,
            'Estado': labels.get(e.status, e.status),
        }
        for e in events
    ])


# ============================================================================
# Contract editor
# ============================================================================

EDITOR_KEY = 'calendar_editing_contract'


def _open_editor(payload: OpenContractEditor) -> None:
    st.session_state[EDITOR_KEY] = payload.contract_id


def _forget_contract(payload: ContractDeleted) -> None:
    if st.session_state.get(EDITOR_KEY) == payload.contract_id:
        st.session_state.pop(EDITOR_KEY, None)
    selected = st.session_state.get(EVENT_KEY)
    if selected and base_contract_id(selected) == payload.contract_id:
        st.session_state.pop(EVENT_KEY, None)


def connect_calendar_handlers() -> None:
    app_events.open_contract_editor.connect(_open_editor)
    app_events.contract_deleted.connect(_forget_contract)


def render_contract_editor(contracts: List[Dict[str, Any]]) -> None:
    """Edit the client and booking fields of the contract asked for through the event channel."""
    contract_id = st.session_state.get(EDITOR_KEY)
    if not contract_id:
        return
    contract = next((c for c in contracts if c.get('id') == contract_id), None)
    if contract is None:
        st.session_state.pop(EDITOR_KEY, None)
        return

    payment_methods = get_studio_config()['bookings']['payment_methods']
    method = contract.get('paymentMethod') or payment_methods[0]
    st.markdown("### 📝 Contrato")
    with st.form(f"contract_editor_{contract_id}"):
        col1, col2 = st.columns(2)
        fields = {
            'clientName': col1.text_input("Cliente", value=contract.get('clientName') or ''),
            'clientEmail': col2.text_input("Email", value=contract.get('clientEmail') or ''),
            'phone': col1.text_input("Teléfono", value=contract.get('phone') or ''),
            'eventType': col2.text_input("Tipo de evento", value=contract.get('eventType') or ''),
            'eventDate': col1.text_input("Fecha (AAAA-MM-DD)", value=contract.get('eventDate') or ''),
            'eventTime': col2.text_input("Hora", value=contract.get('eventTime') or ''),
            'eventLocation': col1.text_input("Ubicación", value=contract.get('eventLocation') or ''),
            'paymentMethod': col2.selectbox(
                "Método de pago",
                options=sorted(set(payment_methods) | {method}),
                index=sorted(set(payment_methods) | {method}).index(method),
            ),
            'totalAmount': col1.number_input("Total (R$)", min_value=0.0, value=to_number(contract.get('totalAmount')), step=50.0),
            'travelFee': col2.number_input("Traslado (R$)", min_value=0.0, value=to_number(contract.get('travelFee')), step=10.0),
        }
        col_save, col_close = st.columns(2)
        saved = col_save.form_submit_button("💾 Guardar")
        closed = col_close.form_submit_button("Cerrar")
    if saved and _run(lambda: bookings.update_contract(contract_id, fields)):
        st.session_state.pop(EDITOR_KEY, None)
        st.rerun()
    if closed:
        st.session_state.pop(EDITOR_KEY, None)
        st.rerun()
