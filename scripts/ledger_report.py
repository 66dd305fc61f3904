#!/usr/bin/env python3
"""Print the ledger state: balance, category totals and recent transactions."""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Optional

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from cashheal import analytics
from cashheal.app import app_session, period_overview
from cashheal.config import configure_logging
from cashheal.formatting import format_currency
from cashheal.models import BudgetPeriod


async def report(limit: int, backend: Optional[str] = None) -> None:
    async with app_session(backend) as ctx:
        currency = await ctx.settings.get_currency()
        balance = await ctx.store.get_balance()
        print(f"Balance: {format_currency(balance.current, currency)} "
              f"(total added {format_currency(balance.total, currency)})")

        breakdown = analytics.category_breakdown(await ctx.store.get_categories())
        print("\nCategories:")
        if breakdown.empty:
            print("  (none)")
        else:
            breakdown['amount'] = breakdown['amount'].map(lambda v: format_currency(v, currency))
            breakdown['share'] = breakdown['share'].map(lambda v: f"{v:.0%}")
            print(breakdown[['emoji', 'label', 'amount', 'share']].to_string(index=False))

        print("\nBudgets:")
        for period in BudgetPeriod:
            overview = await period_overview(ctx, period)
            print(f"  {period.value:<10} spent {format_currency(overview.spent, currency)} "
                  f"of {format_currency(overview.budget, currency)}, "
                  f"{format_currency(overview.remaining, currency)} left")

        recent = analytics.transactions_frame(await ctx.store.get_recent_transactions(limit))
        print(f"\nLast {limit} transactions:")
        if recent.empty:
            print("  No transactions recorded yet.")
        else:
            print(recent[['timestamp', 'type', 'category_key', 'amount']].to_string(index=False))


if __name__ == '__main__':
    parser = argparse.ArgumentParser(description='Show the CashHeal ledger.')
    parser.add_argument('--limit', type=int, default=20, help='How many recent transactions to show')
    parser.add_argument('--backend', choices=['sqlite', 'json'], default=None,
                        help='Storage backend (defaults to CASHHEAL_STORAGE_BACKEND)')
    args = parser.parse_args()
    configure_logging()
    asyncio.run(report(limit=args.limit, backend=args.backend))
