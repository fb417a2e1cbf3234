"""Plotly visualisation helpers for the studio dashboard.

Each function accepts the plain data produced by
:mod:`financial_metrics`, :mod:`budget_ledger` or :mod:`calendar_view` and
returns an interactive Plotly figure that Streamlit renders via
``st.plotly_chart``.  Labels are in Spanish to match the rest of the
back-office.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, Mapping, Sequence

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

BAND_COLORS = {
    'green': '#16a34a',
    'yellow': '#eab308',
    'red': '#dc2626',
}


def _empty_figure(title: str = "Sin datos para mostrar") -> go.Figure:
    fig = go.Figure()
    fig.update_layout(title=title)
    return fig


def create_monthly_performance_chart(monthly: pd.DataFrame, title: str | None = None) -> go.Figure:
    """Income and expenses per month as grouped bars with profit as a line.

    Parameters
    ----------
    monthly : pandas.DataFrame
        Twelve rows with ``month``, ``income``, ``expenses`` and ``profit``
        columns, as returned by ``StudioFinanceAnalytics.monthly_frame``.
    title : str, optional
        Chart title.

    Returns
    -------
    plotly.graph_objects.Figure
        Combined bar and line chart.
    """
    if monthly.empty or not monthly[['income', 'expenses']].abs().to_numpy().any():
        return _empty_figure()
    fig = go.Figure()
    fig.add_trace(go.Bar(x=monthly['month'], y=monthly['income'], name='Ingresos', marker_color='#16a34a'))
    fig.add_trace(go.Bar(x=monthly['month'], y=monthly['expenses'], name='Gastos', marker_color='#dc2626'))
    fig.add_trace(go.Scatter(x=monthly['month'], y=monthly['profit'], name='Ganancia', mode='lines+markers'))
    fig.update_layout(
        title=title or "Rendimiento mensual",
        barmode='group',
        xaxis_title="Mes",
        yaxis_title="R$",
    )
    return fig


def create_earned_forecast_chart(monthly: pd.DataFrame, title: str | None = None) -> go.Figure:
    """Stacked bars of revenue already earned versus revenue still expected."""
    if monthly.empty or not monthly[['earned', 'forecast']].abs().to_numpy().any():
        return _empty_figure()
    long_df = monthly.melt(
        id_vars='month',
        value_vars=['earned', 'forecast'],
        var_name='Tipo',
        value_name='Monto',
    )
    long_df['Tipo'] = long_df['Tipo'].map({'earned': 'Realizado', 'forecast': 'Previsto'})
    fig = px.bar(long_df, x='month', y='Monto', color='Tipo', barmode='stack')
    fig.update_layout(title=title or "Ingresos realizados y previstos", xaxis_title="Mes", yaxis_title="R$")
    return fig


def create_expense_pie_chart(expenses_by_category: Sequence[Mapping[str, Any]], title: str | None = None) -> go.Figure:
    """Pie chart of the expense buckets."""
    if not expenses_by_category:
        return _empty_figure()
    df = pd.DataFrame(list(expenses_by_category))
    fig = px.pie(df, names='category', values='amount')
    fig.update_layout(title=title or "Gastos por categoría")
    return fig


def create_top_clients_chart(top_clients: Iterable[Any], title: str | None = None) -> go.Figure:
    """Horizontal bar chart of the highest-value clients.

    Parameters
    ----------
    top_clients : iterable
        ``TopClient`` objects, best client first.
    """
    rows = [{'Cliente': c.client_name, 'Total': c.total_value} for c in top_clients]
    if not rows:
        return _empty_figure()
    df = pd.DataFrame(rows).iloc[::-1]
    fig = px.bar(df, x='Total', y='Cliente', orientation='h')
    fig.update_layout(title=title or "Mejores clientes", xaxis_title="R$", yaxis_title="")
    return fig


def create_envelope_progress_chart(envelopes: Iterable[Any], title: str | None = None) -> go.Figure:
    """Spent versus allocated per envelope, coloured by progress band."""
    envelopes = list(envelopes)
    if not envelopes:
        return _empty_figure("No hay sobres presupuestarios")
    names = [e.name for e in envelopes]
    fig = go.Figure()
    fig.add_trace(go.Bar(x=names, y=[e.allocated for e in envelopes], name='Asignado', marker_color='#e5e7eb'))
    fig.add_trace(go.Bar(
        x=names,
        y=[e.spent for e in envelopes],
        name='Gastado',
        marker_color=[BAND_COLORS[e.progress_band] for e in envelopes],
        text=[f"{e.progress_percent:.0f}%" for e in envelopes],
        textposition='outside',
    ))
    fig.update_layout(title=title or "Progreso de los sobres", barmode='overlay', yaxis_title="R$")
    return fig


def create_event_summary_chart(summary: Dict[str, int], title: str | None = None) -> go.Figure:
    """Bar chart of the calendar's pending / editing / completed counts."""
    labels = {
        'pending': 'Pendientes',
        'editing': 'En edición',
        'completed': 'Finalizados',
    }
    df = pd.DataFrame([{'Estado': labels[k], 'Eventos': summary.get(k, 0)} for k in labels])
    if not df['Eventos'].any():
        return _empty_figure()
    fig = px.bar(df, x='Estado', y='Eventos')
    fig.update_layout(title=title or "Eventos del mes", xaxis_title="", yaxis_title="Eventos")
    return fig
