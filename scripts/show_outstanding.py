#!/usr/bin/env python3
"""Show outstanding invoices and the period KPIs from the command line."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

import pandas as pd

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from studio_dashboard import db
from studio_dashboard.bookings import load_contracts
from studio_dashboard.config import INVESTMENT_INSTALLMENTS
from studio_dashboard.financial_metrics import StudioFinanceAnalytics
from studio_dashboard.periods import PERIOD_TYPES, Period


def main(period: Period) -> None:
    contracts = load_contracts()
    if not contracts:
        print("No contracts in the store.")
        return

    installments = db.fetch_collection_safe(INVESTMENT_INSTALLMENTS)
    metrics = StudioFinanceAnalytics(contracts, installments, period=period).calculate_metrics()

    print(f"Period: {period.type}" + (f" ({period.start or '...'} - {period.end or '...'})" if period.type == 'custom' else ''))
    print(f"Revenue (completed): R$ {metrics.current_month_revenue:,.0f}")
    print(f"Expenses:            R$ {metrics.current_month_expenses:,.0f}")
    print(f"Net profit:          R$ {metrics.current_month_net_profit:,.0f}")
    print(f"Profit margin:       {metrics.profit_margin:.1f}%")

    if not metrics.outstanding_invoices:
        print("\nNo outstanding invoices. 🎉")
        return

    frame = pd.DataFrame([
        {'Client': inv.client_name, 'Due': inv.due_date, 'Amount': inv.amount, 'Status': inv.status}
        for inv in metrics.outstanding_invoices
    ])
    print(f"\nOutstanding invoices ({len(frame)}):")
    print(frame.to_string(index=False))

    if metrics.top_clients:
        print("\nTop clients:")
        for client in metrics.top_clients:
            print(f"  {client.client_name}: R$ {client.total_value:,.0f}")


if __name__ == '__main__':
    parser = argparse.ArgumentParser(description='Show outstanding invoices and KPIs.')
    parser.add_argument('--period', choices=PERIOD_TYPES, default='month', help='Reporting period')
    parser.add_argument('--start', help='Custom period start (YYYY-MM-DD)')
    parser.add_argument('--end', help='Custom period end (YYYY-MM-DD)')
    args = parser.parse_args()
    main(Period(type=args.period, start=args.start, end=args.end))
