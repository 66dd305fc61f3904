"""Budget plan and period target persistence."""

from __future__ import annotations

import pytest

from cashheal.budget_engine import compute
from cashheal.errors import InvalidAmount
from cashheal.models import BudgetPeriod, BudgetQuestionnaireInput, SavingsStrategy
from cashheal.plan_storage import PLAN_KEY, TARGET_KEY_PREFIX, BudgetPlanStore


def _plan():
    return compute(BudgetQuestionnaireInput(3000, 1000, 50, 20))


@pytest.mark.asyncio
async def test_load_plan_empty(kv):
    await kv.open()
    assert await BudgetPlanStore(kv).load_plan() is None


@pytest.mark.asyncio
async def test_save_and_load_plan(kv):
    await kv.open()
    plans = BudgetPlanStore(kv)
    await plans.save_plan(_plan(), timestamp=1_700_000_000_000, strategy='balanced')

    saved = await plans.load_plan()
    assert saved.plan == _plan()
    assert saved.timestamp == 1_700_000_000_000
    assert saved.strategy is SavingsStrategy.BALANCED


@pytest.mark.asyncio
async def test_new_plan_replaces_previous(kv):
    await kv.open()
    plans = BudgetPlanStore(kv)
    await plans.save_plan(_plan(), timestamp=1)
    other = compute(BudgetQuestionnaireInput(5000, 0, 10, 30))
    await plans.save_plan(other, timestamp=2)
    saved = await plans.load_plan()
    assert saved.plan == other
    assert saved.timestamp == 2
    assert saved.strategy is None


@pytest.mark.asyncio
async def test_corrupted_plan_is_ignored(kv):
    await kv.open()
    await kv.set(PLAN_KEY, '{"plan": {"rent": "lots"}')
    assert await BudgetPlanStore(kv).load_plan() is None


@pytest.mark.asyncio
async def test_clear_plan(kv):
    await kv.open()
    plans = BudgetPlanStore(kv)
    await plans.save_plan(_plan())
    await plans.clear_plan()
    assert await plans.load_plan() is None


@pytest.mark.asyncio
async def test_budget_targets_default(kv):
    await kv.open()
    targets = await BudgetPlanStore(kv).get_budget_targets()
    assert targets == {
        BudgetPeriod.DAY: 60.0,
        BudgetPeriod.TWO_WEEKS: 400.0,
        BudgetPeriod.MONTH: 900.0,
    }


@pytest.mark.asyncio
async def test_set_budget_target(kv):
    await kv.open()
    plans = BudgetPlanStore(kv)
    assert await plans.set_budget_target('day', "75,5") == 75.5
    assert await plans.get_budget_target(BudgetPeriod.DAY) == 75.5
    assert await plans.get_budget_target(BudgetPeriod.MONTH) == 900.0
    await plans.set_budget_target(BudgetPeriod.MONTH, 0)
    assert await plans.get_budget_target('month') == 0.0


@pytest.mark.asyncio
async def test_targets_and_plan_are_independent(kv):
    await kv.open()
    plans = BudgetPlanStore(kv)
    await plans.set_budget_target('two_weeks', 123)
    await plans.save_plan(_plan())
    assert await plans.get_budget_target('two_weeks') == 123.0
    await plans.clear_plan()
    assert await plans.get_budget_target('two_weeks') == 123.0


@pytest.mark.asyncio
async def test_invalid_targets_rejected(kv):
    await kv.open()
    plans = BudgetPlanStore(kv)
    with pytest.raises(InvalidAmount):
        await plans.set_budget_target('day', -1)
    with pytest.raises(ValueError, match="Unknown budget period"):
        await plans.set_budget_target('week', 10)
    with pytest.raises(ValueError, match="Unknown budget period"):
        await plans.get_budget_target('year')


@pytest.mark.asyncio
async def test_unreadable_target_falls_back_to_default(kv):
    await kv.open()
    await kv.set(TARGET_KEY_PREFIX + 'day', 'not json')
    assert await BudgetPlanStore(kv).get_budget_target('day') == 60.0
