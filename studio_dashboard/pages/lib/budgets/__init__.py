"""Budget planner page components.

The ledger itself lives in :mod:`studio_dashboard.budget_ledger`; this
package only renders it.
"""

from .ui_components import (
    render_budget_totals,
    render_envelope_cards,
    render_envelope_editor,
    render_expense_form,
    render_income_form,
    render_transaction_history,
)

__all__ = [
    'render_budget_totals',
    'render_envelope_cards',
    'render_envelope_editor',
    'render_expense_form',
    'render_income_form',
    'render_transaction_history',
]
