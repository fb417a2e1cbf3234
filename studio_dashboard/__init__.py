"""Top-level package for the photography studio back-office dashboard.

The domain modules can be used without Streamlit:

* ``contracts`` - contract normalization and derived amounts
* ``periods`` - reporting-period filter
* ``financial_metrics`` - KPIs, monthly table, receivables, top clients
* ``calendar_view`` - calendar events, day buckets and the month grid
* ``budget_ledger`` - envelope budget with atomic expense commands
* ``bookings`` - contract actions used by the admin calendar
* ``db`` - SQLite-backed document store

To run the dashboard from the command line you can execute:

```bash
python run_dashboard.py
```
"""

__version__ = "0.1.0"
