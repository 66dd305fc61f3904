"""Read-side summaries of the ledger as pandas objects.

These helpers take the plain records returned by :class:`cashheal.ledger.LedgerStore`
and never touch storage themselves.
"""

from __future__ import annotations

from dataclasses import asdict
from typing import Dict, Iterable, Optional

import numpy as np
import pandas as pd

from .ledger import now_ms
from .models import BudgetPeriod, Category, Transaction, TransactionType

MS_PER_DAY = 24 * 60 * 60 * 1000

TRANSACTION_COLUMNS = ['id', 'type', 'category_key', 'amount', 'created_at', 'timestamp']
CATEGORY_COLUMNS = ['key', 'label', 'amount', 'color', 'emoji', 'share']


def transactions_frame(transactions: Iterable[Transaction]) -> pd.DataFrame:
    """Tabulate transactions; ``timestamp`` is the UTC datetime of ``created_at``."""
    rows = []
    for txn in transactions:
        row = asdict(txn)
        row['type'] = TransactionType(txn.type).value
        rows.append(row)
    if not rows:
        return pd.DataFrame(columns=TRANSACTION_COLUMNS)
    df = pd.DataFrame(rows)
    df['amount'] = df['amount'].astype(float)
    df['timestamp'] = pd.to_datetime(df['created_at'], unit='ms', utc=True)
    return df[TRANSACTION_COLUMNS]


def period_spending(
    transactions: Iterable[Transaction],
    now: Optional[int] = None,
) -> Dict[BudgetPeriod, float]:
    """Total expenses in the trailing window of each budget period.

    Windows are 1, 14 and 30 days ending at ``now`` (epoch ms), both ends inclusive.
    """
    now = now_ms() if now is None else int(now)
    df = transactions_frame(transactions)
    result: Dict[BudgetPeriod, float] = {}
    if df.empty:
        return {period: 0.0 for period in BudgetPeriod}
    expenses = df[df['type'] == TransactionType.EXPENSE.value]
    for period in BudgetPeriod:
        start = now - period.days * MS_PER_DAY
        mask = (expenses['created_at'] >= start) & (expenses['created_at'] <= now)
        result[period] = float(expenses.loc[mask, 'amount'].sum())
    return result


def category_breakdown(categories: Iterable[Category]) -> pd.DataFrame:
    """Category amounts with each category's share of the total spend."""
    df = pd.DataFrame([asdict(c) for c in categories])
    if df.empty:
        return pd.DataFrame(columns=CATEGORY_COLUMNS)
    df['amount'] = df['amount'].astype(float)
    total = df['amount'].sum()
    df['share'] = df['amount'] / total if total > 0 else 0.0
    return df[CATEGORY_COLUMNS]


def daily_cash_flow(transactions: Iterable[Transaction]) -> pd.DataFrame:
    """Income, expenses and net per calendar day (UTC), oldest first."""
    df = transactions_frame(transactions)
    if df.empty:
        return pd.DataFrame(columns=['Income', 'Expenses', 'Net'])
    df['Day'] = df['timestamp'].dt.date
    df['Income'] = np.where(df['type'] == TransactionType.INCOME.value, df['amount'], 0.0)
    df['Expenses'] = np.where(df['type'] == TransactionType.EXPENSE.value, df['amount'], 0.0)
    daily = df.groupby('Day')[['Income', 'Expenses']].sum().sort_index()
    daily['Net'] = daily['Income'] - daily['Expenses']
    return daily
