"""Configuration management for CashHeal.

This module centralizes all configuration values including paths,
storage backend selection, seed data and environment variable overrides.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

# Base project root - assumes this file is in cashheal/
_PROJECT_ROOT = Path(__file__).parent.parent.resolve()

# Data directories
DATA_DIR = Path(os.getenv("CASHHEAL_DATA_DIR", _PROJECT_ROOT / "data"))

# Storage files
DB_PATH = Path(os.getenv("CASHHEAL_DB_PATH", DATA_DIR / "cashheal.db")).resolve()
LEDGER_JSON_PATH = Path(os.getenv("CASHHEAL_LEDGER_JSON", DATA_DIR / "ledger.json")).resolve()
KV_JSON_PATH = Path(os.getenv("CASHHEAL_KV_JSON", DATA_DIR / "preferences.json")).resolve()

# Either "sqlite" (relational, native transactions) or "json" (flat file fallback)
STORAGE_BACKENDS = ("sqlite", "json")
STORAGE_BACKEND = os.getenv("CASHHEAL_STORAGE_BACKEND", "sqlite").strip().lower()

LOG_LEVEL = os.getenv("CASHHEAL_LOG_LEVEL", "INFO")
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# Seed data written on first initialization
DEFAULT_BALANCE_TOTAL = 350.0
DEFAULT_BALANCE_CURRENT = 150.0
SEED_CATEGORIES = (
    # key, label, amount, color, emoji
    ("food", "Food", 20.0, "#10b981", "🍕"),
    ("fun", "Leisure", 50.0, "#22c55e", "🎮"),
    ("clothes", "Clothes", 30.0, "#16a34a", "👕"),
    ("transport", "Transport", 15.0, "#15803d", "🚌"),
)

# Budget advisor
FIXED_CHARGES_RATE = 0.10
DAYS_PER_MONTH = 30
WEEKS_PER_MONTH = 4
FORTNIGHTS_PER_MONTH = 2

# Manually edited per-period targets
DEFAULT_BUDGET_TARGETS = {
    "day": 60.0,
    "two_weeks": 400.0,
    "month": 900.0,
}

# Preferences
DEFAULT_CURRENCY = "EUR"
DEFAULT_LANGUAGE = "fr"
RECENT_TRANSACTIONS_LIMIT = 50

_logging_configured = False


def ensure_data_directories() -> None:
    """Create all required data directories if they don't exist."""
    for directory in [DATA_DIR, DB_PATH.parent, LEDGER_JSON_PATH.parent, KV_JSON_PATH.parent]:
        directory.mkdir(parents=True, exist_ok=True)


def get_db_path() -> str:
    """Get the database path as a string."""
    return str(DB_PATH)


def get_storage_backend(override: Optional[str] = None) -> str:
    """Return the configured storage backend name, validating it."""
    name = (override or STORAGE_BACKEND).strip().lower()
    if name not in STORAGE_BACKENDS:
        raise ValueError(
            f"Unknown storage backend '{name}'. Expected one of: {', '.join(STORAGE_BACKENDS)}"
        )
    return name


def configure_logging(level: Optional[str] = None) -> None:
    """Configure root logging once for scripts and the dashboard."""
    global _logging_configured
    if _logging_configured:
        return
    logging.basicConfig(level=(level or LOG_LEVEL).upper(), format=LOG_FORMAT)
    _logging_configured = True
