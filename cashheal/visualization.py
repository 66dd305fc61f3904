"""Plotly visualisation helpers for the CashHeal dashboard.

Each function takes the pandas objects produced by :mod:`cashheal.analytics`
(or plain numbers) and returns a ``plotly.graph_objects.Figure`` that
Streamlit can render via ``st.plotly_chart``.
"""

from __future__ import annotations

from typing import Mapping

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

from .models import BudgetPeriod

PERIOD_LABELS = {
    BudgetPeriod.DAY: "Today",
    BudgetPeriod.TWO_WEEKS: "2 weeks",
    BudgetPeriod.MONTH: "Month",
}


def _empty_figure(title: str = "No data to display") -> go.Figure:
    fig = go.Figure()
    fig.update_layout(title=title)
    return fig


def create_category_donut(breakdown: pd.DataFrame, title: str | None = None) -> go.Figure:
    """Donut chart of spend per category.

    Parameters
    ----------
    breakdown : pandas.DataFrame
        Output of :func:`cashheal.analytics.category_breakdown`.
    title : str, optional
        Chart title.
    """
    if breakdown.empty or breakdown['amount'].sum() <= 0:
        return _empty_figure()
    labels = [f"{emoji} {label}" for emoji, label in zip(breakdown['emoji'], breakdown['label'])]
    fig = go.Figure(
        go.Pie(
            labels=labels,
            values=breakdown['amount'].tolist(),
            marker=dict(colors=breakdown['color'].tolist()),
            hole=0.6,
            sort=False,
        )
    )
    fig.update_layout(title=title or "Spending by category", showlegend=True)
    return fig


def create_period_progress_chart(
    spent: Mapping[BudgetPeriod, float],
    budgets: Mapping[BudgetPeriod, float],
    title: str | None = None,
) -> go.Figure:
    """Grouped bars comparing spend with budget for each period."""
    rows = []
    for period in BudgetPeriod:
        label = PERIOD_LABELS[period]
        rows.append({"Period": label, "Kind": "Budget", "Amount": float(budgets.get(period, 0.0))})
        rows.append({"Period": label, "Kind": "Spent", "Amount": float(spent.get(period, 0.0))})
    df = pd.DataFrame(rows)
    fig = px.bar(df, x="Period", y="Amount", color="Kind", barmode="group")
    fig.update_layout(title=title or "Budget vs spent", yaxis_title="Amount")
    return fig


def create_cash_flow_chart(daily: pd.DataFrame, title: str | None = None) -> go.Figure:
    """Income and expense bars per day with a net line."""
    if daily.empty:
        return _empty_figure()
    df = daily.reset_index()
    day_col = df.columns[0]
    fig = go.Figure()
    fig.add_bar(x=df[day_col], y=df['Income'], name="Income")
    fig.add_bar(x=df[day_col], y=-df['Expenses'], name="Expenses")
    fig.add_scatter(x=df[day_col], y=df['Net'], name="Net", mode="lines+markers")
    fig.update_layout(title=title or "Daily cash flow", barmode="relative", xaxis_title="Day")
    return fig
