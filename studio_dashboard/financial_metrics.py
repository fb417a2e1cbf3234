"""Financial analytics over contracts and investment installments.

This module turns the raw ``contracts`` and ``investment_installments``
collections into the figures shown on the financial dashboard: top-line
KPIs for the selected period, the twelve-month performance table, a rough
expense breakdown, the receivables list and the best clients.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

import pandas as pd

from .contracts import Contract, normalize_contract, to_number
from .periods import Period, is_in_period, is_today_or_later, parse_date

MONTH_LABELS = ['Ene', 'Feb', 'Mar', 'Abr', 'May', 'Jun', 'Jul', 'Ago', 'Sep', 'Oct', 'Nov', 'Dic']

INVESTMENTS_LABEL = 'Inversiones'
OTHER_EXPENSES_LABEL = 'Otros Gastos'
OTHER_EXPENSES_RATE = 0.10
INVOICE_PENDING = 'Pendiente'
MAX_OUTSTANDING_INVOICES = 10
MAX_TOP_CLIENTS = 5


@dataclass
class OutstandingInvoice:
    id: str
    client_name: str
    due_date: str
    amount: int
    status: str = INVOICE_PENDING


@dataclass
class TopClient:
    client_name: str
    total_value: float


@dataclass
class FinancialMetrics:
    current_month_revenue: float = 0.0
    current_month_expenses: float = 0.0
    current_month_net_profit: float = 0.0
    profit_margin: float = 0.0
    current_cash_balance: float = 0.0
    total_revenue: float = 0.0
    future_revenue: float = 0.0
    monthly_data: List[Dict[str, Any]] = field(default_factory=list)
    expenses_by_category: List[Dict[str, Any]] = field(default_factory=list)
    outstanding_invoices: List[OutstandingInvoice] = field(default_factory=list)
    top_clients: List[TopClient] = field(default_factory=list)

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


ContractLike = Union[Contract, Mapping[str, Any]]


def _as_contract(record: ContractLike) -> Contract:
    return record if isinstance(record, Contract) else normalize_contract(record)


def empty_months() -> List[Dict[str, Any]]:
    return [
        {'key': i, 'month': label, 'income': 0.0, 'expenses': 0.0, 'profit': 0.0, 'earned': 0.0, 'forecast': 0.0}
        for i, label in enumerate(MONTH_LABELS)
    ]


class StudioFinanceAnalytics:
    """Period-scoped financial calculations for the studio."""

    def __init__(
        self,
        contracts: Iterable[ContractLike],
        installments: Iterable[Mapping[str, Any]] = (),
        period: Optional[Period] = None,
        now: Optional[datetime] = None,
    ):
        self.contracts = [_as_contract(c) for c in contracts]
        self.installments = [dict(i) for i in installments]
        self.period = period or Period()
        self.now = now or datetime.now()

    def in_period(self, date_str: Any) -> bool:
        return is_in_period(date_str, self.period, now=self.now)

    def filtered_contracts(self) -> List[Contract]:
        return [c for c in self.contracts if self.in_period(c.effective_date)]

    def _period_installments(self) -> List[tuple]:
        """(due datetime, amount) for each installment inside the period."""
        rows = []
        for inst in self.installments:
            due = str(inst.get('dueDate') or '')
            if not due or not self.in_period(due):
                continue
            moment = parse_date(due)
            if moment is None:
                continue
            rows.append((moment, to_number(inst.get('amount') or 0)))
        return rows

    def calculate_monthly_data(self) -> List[Dict[str, Any]]:
        """Twelve month rows for the current year.

        The month slot comes from the record's own calendar month even when
        the record belongs to another year (possible with the ``all`` and
        ``custom`` periods), so several years fold into one row.
        """
        months = empty_months()
        for contract in self.filtered_contracts():
            moment = parse_date(contract.effective_date)
            if moment is None:
                continue
            row = months[moment.month - 1]
            amount = contract.amounts.total_amount
            row['income'] += amount
            if contract.event_completed:
                row['earned'] += amount
                row['profit'] += amount
            elif is_today_or_later(moment, self.now):
                row['forecast'] += amount

        for moment, amount in self._period_installments():
            row = months[moment.month - 1]
            row['expenses'] += amount
            row['profit'] -= amount
        return months

    def calculate_expenses(self) -> float:
        return sum(amount for _, amount in self._period_installments())

    def calculate_metrics(self) -> FinancialMetrics:
        total_revenue = 0.0
        completed_revenue = 0.0
        future_revenue = 0.0
        invoices: List[OutstandingInvoice] = []
        client_totals: Dict[str, float] = {}

        for contract in self.filtered_contracts():
            amount = contract.amounts.total_amount
            date_str = contract.effective_date or ''
            total_revenue += amount
            if contract.event_completed:
                completed_revenue += amount
            elif is_today_or_later(parse_date(date_str), self.now):
                future_revenue += amount
                invoices.append(OutstandingInvoice(
                    id=contract.id,
                    client_name=contract.display_client,
                    due_date=date_str or self.now.date().isoformat(),
                    amount=amount,
                ))
            client = contract.display_client
            client_totals[client] = client_totals.get(client, 0.0) + amount

        invoices.sort(key=lambda inv: parse_date(inv.due_date) or self.now)
        top_clients = sorted(
            (TopClient(client_name=name, total_value=value) for name, value in client_totals.items()),
            key=lambda tc: -tc.total_value,
        )[:MAX_TOP_CLIENTS]

        expenses = self.calculate_expenses()
        net_profit = completed_revenue - expenses
        profit_margin = (net_profit / completed_revenue * 100) if completed_revenue > 0 else 0.0

        return FinancialMetrics(
            current_month_revenue=completed_revenue,
            current_month_expenses=expenses,
            current_month_net_profit=net_profit,
            profit_margin=profit_margin,
            current_cash_balance=completed_revenue,
            total_revenue=total_revenue,
            future_revenue=future_revenue,
            monthly_data=self.calculate_monthly_data(),
            expenses_by_category=expense_breakdown(expenses, completed_revenue),
            outstanding_invoices=invoices[:MAX_OUTSTANDING_INVOICES],
            top_clients=top_clients,
        )

    def monthly_frame(self) -> pd.DataFrame:
        return pd.DataFrame(self.calculate_monthly_data())

    def contracts_frame(self) -> pd.DataFrame:
        """Period contracts with their derived amounts, newest first."""
        rows = []
        for contract in self.filtered_contracts():
            amounts = contract.amounts
            rows.append({
                'id': contract.id,
                'Cliente': contract.display_client,
                'Fecha': contract.effective_date,
                'Estado': contract.status,
                'Servicios': amounts.services_total,
                'Tienda': amounts.store_total,
                'Traslado': amounts.travel,
                'Total': amounts.total_amount,
                'Depósito': amounts.deposit_amount,
                'Saldo': amounts.remaining_amount,
                'Completado': contract.event_completed,
            })
        if not rows:
            return pd.DataFrame()
        frame = pd.DataFrame(rows)
        frame['_sort'] = pd.to_datetime(frame['Fecha'], errors='coerce', utc=True)
        return frame.sort_values('_sort', ascending=False).drop(columns='_sort').reset_index(drop=True)


def expense_breakdown(expenses: float, completed_revenue: float) -> List[Dict[str, Any]]:
    """Investments plus a flat 10%-of-revenue placeholder for other costs."""
    buckets = [
        {'category': INVESTMENTS_LABEL, 'amount': expenses},
        {'category': OTHER_EXPENSES_LABEL, 'amount': max(0.0, completed_revenue * OTHER_EXPENSES_RATE)},
    ]
    return [bucket for bucket in buckets if bucket['amount'] > 0]
