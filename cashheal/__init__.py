"""Top‑level package for CashHeal, an offline personal finance tracker.

The primary modules are:

* ``budget_engine`` – the budget advisor calculation
* ``ledger`` – balance, category and transaction storage
* ``recorder`` – the income/expense write path
* ``plan_storage`` – saved advisor plan and per-period budget targets
* ``app`` – wiring of the above with an explicit open/close lifecycle

To run the dashboard from the command line you can execute:

```bash
streamlit run cashheal/dashboard.py
```
"""

from . import budget_engine  # noqa: F401  # re-exported for convenience
from .app import AppContext, app_session, open_app  # noqa: F401
from .errors import (  # noqa: F401
    CashHealError,
    CategoryNotFound,
    CategoryRequired,
    InvalidAmount,
    StorageFailure,
)

__all__ = [
    "budget_engine",
    "AppContext",
    "app_session",
    "open_app",
    "CashHealError",
    "CategoryNotFound",
    "CategoryRequired",
    "InvalidAmount",
    "StorageFailure",
]
