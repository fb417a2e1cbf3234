from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from studio_dashboard import db as db_mod
from studio_dashboard.events import AppEvents


@pytest.fixture
def store(tmp_path):
    """Point the document store at a fresh SQLite file."""
    db_path = tmp_path / "studio.db"
    # Own MonkeyPatch so a test's ``monkeypatch.undo()`` keeps the temp DB.
    with pytest.MonkeyPatch.context() as mp:
        mp.setattr(db_mod, "DB_PATH", str(db_path))
        db_mod.init_db()
        yield db_mod


@pytest.fixture
def events():
    """A private event bus that records every toast."""
    bus = AppEvents()
    bus.toasts = []
    bus.toast.connect(bus.toasts.append)
    return bus
