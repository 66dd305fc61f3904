"""Streamlit app for CashHeal.

The page opens the application context, renders the balance, categories,
budget advisor and recent transactions, and routes form submissions to the
ledger and plan stores. Every write goes through the async handlers below,
which reload state from the store afterwards instead of patching what is
on screen.

To run the dashboard from the command line::

    streamlit run cashheal/dashboard.py
"""

from __future__ import annotations

import asyncio
import os
import sys
from typing import Any, Optional, Tuple

import streamlit as st

if __package__:
    from . import analytics
    from . import visualization as viz
    from .app import AppContext, app_session, period_overview, submit_questionnaire
    from .config import configure_logging
    from .errors import CategoryNotFound, CategoryRequired, InvalidAmount, StorageFailure
    from .formatting import format_currency
    from .models import BudgetPeriod, SavingsStrategy
    from .plan_storage import SavedPlan
else:
    # Allow ``streamlit run cashheal/dashboard.py`` without installing the package.
    CURRENT_DIR = os.path.dirname(os.path.abspath(__file__))
    PARENT_DIR = os.path.dirname(CURRENT_DIR)
    if PARENT_DIR not in sys.path:
        sys.path.insert(0, PARENT_DIR)
    from cashheal import analytics  # type: ignore
    from cashheal import visualization as viz  # type: ignore
    from cashheal.app import AppContext, app_session, period_overview, submit_questionnaire  # type: ignore
    from cashheal.config import configure_logging  # type: ignore
    from cashheal.errors import CategoryNotFound, CategoryRequired, InvalidAmount, StorageFailure  # type: ignore
    from cashheal.formatting import format_currency  # type: ignore
    from cashheal.models import BudgetPeriod, SavingsStrategy  # type: ignore
    from cashheal.plan_storage import SavedPlan  # type: ignore

STRATEGY_LABELS = {
    SavingsStrategy.CONSERVATIVE: "Conservative (30% savings)",
    SavingsStrategy.BALANCED: "Balanced (20% savings)",
    SavingsStrategy.AGGRESSIVE: "Invest more (10% savings)",
}


async def handle_transaction(
    ctx: AppContext,
    kind: str,
    amount_text: Any,
    category_key: Optional[str] = None,
) -> Tuple[bool, str]:
    """Record an income or expense and return ``(ok, message)`` for display."""
    try:
        if kind == 'income':
            result = await ctx.recorder.record_income(amount_text)
        else:
            result = await ctx.recorder.record_expense(amount_text, category_key)
    except InvalidAmount:
        return False, "Enter a valid amount."
    except CategoryRequired:
        return False, "Choose a category for this expense."
    except CategoryNotFound as exc:
        return False, f"Unknown category '{exc.key}'."
    except StorageFailure:
        return False, "Could not save the transaction. Please try again."
    currency = await ctx.settings.get_currency()
    amount = format_currency(result.transaction.amount, currency)
    if kind == 'income':
        return True, f"Income of {amount} added."
    return True, f"Expense of {amount} added."


async def handle_questionnaire(
    ctx: AppContext,
    monthly_income: Any,
    rent: Any,
    daily_spending: Any,
    strategy: SavingsStrategy,
) -> Tuple[Optional[SavedPlan], str]:
    """Compute and store a plan; returns ``(saved_plan, message)``."""
    try:
        saved = await submit_questionnaire(ctx, monthly_income, rent, daily_spending, strategy)
    except InvalidAmount:
        return None, "Please enter positive values (rent and daily spending may be zero)."
    except StorageFailure:
        return None, "Could not save the budget plan."
    return saved, "Budget plan saved."


def _render_balance(balance, currency: str) -> None:
    col1, col2 = st.columns(2)
    col1.metric("Current balance", format_currency(balance.current, currency))
    col2.metric("Total added", format_currency(balance.total, currency))


def _render_plan(saved: Optional[SavedPlan], currency: str) -> None:
    if saved is None:
        st.info("Answer the budget questionnaire to get a personalised plan.")
        return
    plan = saved.plan
    st.markdown(
        f"**Fixed charges:** {format_currency(plan.fixed_charges, currency)}  \n"
        f"**Savings ({plan.savings_percentage:.0f}%):** {format_currency(plan.savings_amount, currency)}  \n"
        f"**Available for spending:** {format_currency(plan.available_for_spending, currency)}"
    )
    col1, col2, col3 = st.columns(3)
    col1.metric("Per day", format_currency(plan.daily_budget, currency))
    col2.metric("Per week", format_currency(plan.weekly_budget, currency))
    col3.metric("Per 2 weeks", format_currency(plan.biweekly_budget, currency))


async def _render(ctx: AppContext) -> None:
    currency = await ctx.settings.get_currency()

    st.sidebar.header("Record")
    categories = await ctx.store.get_categories()
    with st.sidebar.form("transaction_form", clear_on_submit=True):
        kind = st.radio("Type", ["expense", "income"], horizontal=True)
        amount_text = st.text_input("Amount")
        category_key = st.selectbox(
            "Category",
            [c.key for c in categories],
            format_func=lambda key: next((f"{c.emoji} {c.label}" for c in categories if c.key == key), key),
        )
        if st.form_submit_button("Save"):
            ok, message = await handle_transaction(ctx, kind, amount_text, category_key)
            (st.success if ok else st.error)(message)

    balance = await ctx.store.get_balance()
    _render_balance(balance, currency)

    categories = await ctx.store.get_categories()
    breakdown = analytics.category_breakdown(categories)
    st.plotly_chart(viz.create_category_donut(breakdown), use_container_width=True)

    overviews = {period: await period_overview(ctx, period) for period in BudgetPeriod}
    st.plotly_chart(
        viz.create_period_progress_chart(
            {p: o.spent for p, o in overviews.items()},
            {p: o.budget for p, o in overviews.items()},
        ),
        use_container_width=True,
    )
    for period, overview in overviews.items():
        st.progress(overview.progress, text=(
            f"{viz.PERIOD_LABELS[period]}: {format_currency(overview.remaining, currency)} left"
        ))

    st.header("Budget advisor")
    with st.form("questionnaire_form"):
        income = st.text_input("Monthly income")
        rent = st.text_input("Rent", value="0")
        daily = st.text_input("Daily spending", value="0")
        strategy = st.radio(
            "Savings goal",
            list(SavingsStrategy),
            index=list(SavingsStrategy).index(SavingsStrategy.BALANCED),
            format_func=lambda s: STRATEGY_LABELS[s],
        )
        if st.form_submit_button("See results"):
            saved, message = await handle_questionnaire(ctx, income, rent, daily, strategy)
            (st.success if saved else st.error)(message)
    _render_plan(await ctx.plans.load_plan(), currency)

    st.header("Recent transactions")
    recent = await ctx.store.get_recent_transactions()
    st.dataframe(analytics.transactions_frame(recent), use_container_width=True)
    st.plotly_chart(viz.create_cash_flow_chart(analytics.daily_cash_flow(recent)), use_container_width=True)


async def _main_async() -> None:
    async with app_session() as ctx:
        await _render(ctx)


def main() -> None:
    """Entry point for the Streamlit app."""
    configure_logging()
    st.set_page_config(page_title="CashHeal", layout="wide")
    st.title("CashHeal")
    asyncio.run(_main_async())


if __name__ == "__main__":
    main()
