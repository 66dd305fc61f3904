import pandas as pd
import plotly.graph_objects as go
import pytest

from cashheal import analytics
from cashheal import visualization as viz
from cashheal.analytics import MS_PER_DAY
from cashheal.models import BudgetPeriod, Category, Transaction, TransactionType

NOW = 1_700_000_000_000


def _txn(id, kind, amount, days_ago, category='food'):
    return Transaction(
        id=id,
        type=TransactionType(kind),
        category_key=category if kind == 'expense' else None,
        amount=amount,
        created_at=NOW - int(days_ago * MS_PER_DAY),
    )


def _categories():
    return [
        Category(key='food', label='Food', amount=30.0, color='#10b981', emoji='🍕'),
        Category(key='fun', label='Leisure', amount=10.0, color='#22c55e', emoji='🎮'),
    ]


def test_transactions_frame_columns():
    df = analytics.transactions_frame([_txn(1, 'expense', 5, 0)])
    assert list(df.columns) == analytics.TRANSACTION_COLUMNS
    assert df.loc[0, 'type'] == 'expense'
    assert df.loc[0, 'timestamp'] == pd.Timestamp(NOW, unit='ms', tz='UTC')


def test_transactions_frame_empty():
    df = analytics.transactions_frame([])
    assert df.empty
    assert list(df.columns) == analytics.TRANSACTION_COLUMNS


def test_period_spending_windows():
    transactions = [
        _txn(1, 'expense', 10, 0.5),
        _txn(2, 'expense', 20, 3),
        _txn(3, 'expense', 40, 20),
        _txn(4, 'expense', 80, 45),
        _txn(5, 'income', 500, 0.1),
    ]
    spent = analytics.period_spending(transactions, now=NOW)
    assert spent[BudgetPeriod.DAY] == pytest.approx(10)
    assert spent[BudgetPeriod.TWO_WEEKS] == pytest.approx(30)
    assert spent[BudgetPeriod.MONTH] == pytest.approx(70)


def test_period_spending_empty():
    assert analytics.period_spending([], now=NOW) == {p: 0.0 for p in BudgetPeriod}


def test_category_breakdown_shares():
    df = analytics.category_breakdown(_categories())
    assert df.set_index('key')['share'].to_dict() == {'food': 0.75, 'fun': 0.25}


def test_category_breakdown_zero_total():
    cats = [Category(key='food', label='Food', amount=0.0, color='#000', emoji='🍕')]
    assert analytics.category_breakdown(cats)['share'].tolist() == [0.0]


def test_daily_cash_flow_net():
    transactions = [
        _txn(1, 'income', 100, 1),
        _txn(2, 'expense', 30, 1),
        _txn(3, 'expense', 5, 0),
    ]
    daily = analytics.daily_cash_flow(transactions)
    assert daily['Net'].tolist() == [70.0, -5.0]


def test_category_donut_uses_category_colors():
    fig = viz.create_category_donut(analytics.category_breakdown(_categories()))
    assert isinstance(fig, go.Figure)
    pie = fig.data[0]
    assert list(pie.values) == [30.0, 10.0]
    assert list(pie.marker.colors) == ['#10b981', '#22c55e']
    assert pie.labels[0] == '🍕 Food'


def test_category_donut_without_spend():
    fig = viz.create_category_donut(analytics.category_breakdown([]))
    assert len(fig.data) == 0
    assert fig.layout.title.text == 'No data to display'


def test_period_progress_chart_has_budget_and_spent():
    spent = {BudgetPeriod.DAY: 5.0, BudgetPeriod.TWO_WEEKS: 50.0, BudgetPeriod.MONTH: 300.0}
    budgets = {BudgetPeriod.DAY: 60.0, BudgetPeriod.TWO_WEEKS: 400.0, BudgetPeriod.MONTH: 900.0}
    fig = viz.create_period_progress_chart(spent, budgets)
    names = sorted(trace.name for trace in fig.data)
    assert names == ['Budget', 'Spent']


def test_cash_flow_chart_traces():
    daily = analytics.daily_cash_flow([_txn(1, 'income', 100, 1), _txn(2, 'expense', 30, 0)])
    fig = viz.create_cash_flow_chart(daily)
    assert [trace.name for trace in fig.data] == ['Income', 'Expenses', 'Net']
