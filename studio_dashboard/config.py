"""Configuration management for the studio dashboard.

This module centralizes all configuration values including paths,
defaults, and environment variable overrides.
"""

from __future__ import annotations

import os
from pathlib import Path

# Base project root - assumes this file is in studio_dashboard/
_PROJECT_ROOT = Path(__file__).parent.parent.resolve()

# Data directories
DATA_DIR = Path(os.getenv("STUDIO_DATA_DIR", _PROJECT_ROOT / "data"))
EXPORTS_DIR = DATA_DIR / "exports"
LOG_DIR = Path(os.getenv("STUDIO_LOG_DIR", DATA_DIR / "logs"))

# Document store
DB_PATH = Path(
    os.getenv("STUDIO_DB_PATH", DATA_DIR / "studio.db")
).resolve()

# Collections read and written by the dashboard pages
CONTRACTS = "contracts"
INVESTMENT_INSTALLMENTS = "investment_installments"
BUDGET_ENVELOPES = "budget_envelopes"
BUDGET_TRANSACTIONS = "budget_transactions"
PRODUCTS = "products"


def ensure_data_directories() -> None:
    """Create all required data directories if they don't exist."""
    for directory in [DATA_DIR, EXPORTS_DIR, LOG_DIR]:
        directory.mkdir(parents=True, exist_ok=True)
