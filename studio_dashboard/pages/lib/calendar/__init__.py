"""Admin calendar page components."""

from .ui_components import (
    connect_calendar_handlers,
    current_month,
    events_frame,
    render_add_event_form,
    render_contract_editor,
    render_day_panel,
    render_filters,
    render_month_grid,
    render_month_navigation,
    render_mini_month,
    render_summary,
    render_sync_button,
    selected_day,
)

__all__ = [
    'connect_calendar_handlers',
    'current_month',
    'events_frame',
    'render_add_event_form',
    'render_contract_editor',
    'render_day_panel',
    'render_filters',
    'render_month_grid',
    'render_month_navigation',
    'render_mini_month',
    'render_summary',
    'render_sync_button',
    'selected_day',
]
