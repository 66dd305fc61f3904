"""Unit tests for cashheal.budget_engine."""

from __future__ import annotations

from dataclasses import replace

import pytest

from cashheal.budget_engine import (
    build_questionnaire_input,
    compute,
    progress_ratio,
    remaining_budget,
    savings_percentage_for,
)
from cashheal.errors import InvalidAmount
from cashheal.models import BudgetPeriod, BudgetPlan, BudgetQuestionnaireInput, SavingsStrategy


def _answers(**overrides) -> BudgetQuestionnaireInput:
    base = BudgetQuestionnaireInput(monthly_income=3000, rent=1000, daily_spending=50, savings_percentage=20)
    return replace(base, **overrides)


def test_compute_reference_plan() -> None:
    plan = compute(_answers())
    assert plan.fixed_charges == pytest.approx(1300)
    assert plan.savings_amount == pytest.approx(600)
    assert plan.available_for_spending == pytest.approx(1100)
    assert plan.daily_budget == pytest.approx(36.6667, rel=1e-4)
    assert plan.weekly_budget == pytest.approx(275)
    assert plan.biweekly_budget == pytest.approx(550)
    assert plan.monthly_spending == pytest.approx(1100)
    assert plan.weekly_spending == pytest.approx(350)
    assert plan.biweekly_spending == pytest.approx(700)
    assert plan.daily_spending == pytest.approx(50)


def test_spending_fields_follow_daily_habit_not_income() -> None:
    low = compute(_answers(monthly_income=1500))
    high = compute(_answers(monthly_income=9000))
    assert low.weekly_spending == high.weekly_spending == pytest.approx(350)
    assert low.weekly_budget != high.weekly_budget


def test_compute_clamps_available_at_zero() -> None:
    plan = compute(_answers(monthly_income=100, rent=200, daily_spending=0, savings_percentage=30))
    assert plan.available_for_spending == 0
    assert plan.daily_budget == 0
    assert plan.weekly_budget == 0
    assert plan.biweekly_budget == 0
    assert plan.monthly_spending == 0


def test_compute_is_deterministic_and_does_not_mutate_input() -> None:
    answers = _answers()
    snapshot = replace(answers)
    first = compute(answers)
    second = compute(answers)
    assert first == second
    assert answers == snapshot


@pytest.mark.parametrize(
    "strategy, percentage",
    [
        (SavingsStrategy.AGGRESSIVE, 10),
        (SavingsStrategy.BALANCED, 20),
        (SavingsStrategy.CONSERVATIVE, 30),
        ("conservative", 30),
    ],
)
def test_savings_strategy_lookup(strategy, percentage) -> None:
    assert savings_percentage_for(strategy) == percentage


def test_unknown_strategy_rejected() -> None:
    with pytest.raises(ValueError, match="Unknown savings strategy"):
        savings_percentage_for("yolo")


def test_build_questionnaire_input_parses_text() -> None:
    answers = build_questionnaire_input("3 000", "1000,00", "0", "aggressive")
    assert answers == BudgetQuestionnaireInput(3000.0, 1000.0, 0.0, 10.0)


@pytest.mark.parametrize("income", ["0", "abc", -10, None, ""])
def test_build_questionnaire_input_rejects_bad_income(income) -> None:
    with pytest.raises(InvalidAmount):
        build_questionnaire_input(income, 0, 0)


def test_build_questionnaire_input_rejects_negative_rent() -> None:
    with pytest.raises(InvalidAmount):
        build_questionnaire_input(1000, -1, 0)


def test_plan_budget_for_period() -> None:
    plan = compute(_answers())
    assert plan.budget_for(BudgetPeriod.DAY) == plan.daily_budget
    assert plan.budget_for("two_weeks") == plan.biweekly_budget
    assert plan.budget_for(BudgetPeriod.MONTH) == plan.available_for_spending


def test_plan_dict_conversion_keeps_every_field() -> None:
    plan = compute(_answers())
    assert BudgetPlan.from_dict(plan.to_dict()) == plan
    data = plan.to_dict()
    del data['weekly_budget']
    with pytest.raises(KeyError):
        BudgetPlan.from_dict(data)


def test_remaining_budget_never_negative() -> None:
    assert remaining_budget(60, 24.25) == pytest.approx(35.75)
    assert remaining_budget(60, 80) == 0


def test_progress_ratio_is_capped() -> None:
    assert progress_ratio(400, 100) == pytest.approx(0.25)
    assert progress_ratio(400, 1000) == 1
    # Budgets below 1 count as 1
    assert progress_ratio(0, 0.5) == pytest.approx(0.5)
