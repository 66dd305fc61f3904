"""Budget advisor calculations.

:func:`compute` turns the answers of the budget questionnaire into a
monthly/weekly/daily breakdown. It is pure: no I/O, no mutation of its
input, and identical output for identical input. Input validation lives in
:func:`build_questionnaire_input`, which callers run first.
"""

from __future__ import annotations

from typing import Any, Union

from .amounts import parse_amount
from .config import DAYS_PER_MONTH, FIXED_CHARGES_RATE, FORTNIGHTS_PER_MONTH, WEEKS_PER_MONTH
from .errors import InvalidAmount
from .models import (
    SAVINGS_PERCENTAGES,
    BudgetPlan,
    BudgetQuestionnaireInput,
    SavingsStrategy,
)


def savings_percentage_for(strategy: Union[SavingsStrategy, str]) -> float:
    """Look up the savings percentage of a named strategy.

    Example:
        >>> savings_percentage_for("balanced")
        20.0
    """
    try:
        return SAVINGS_PERCENTAGES[SavingsStrategy(strategy)]
    except ValueError as exc:
        choices = ', '.join(s.value for s in SavingsStrategy)
        raise ValueError(f"Unknown savings strategy '{strategy}'. Expected one of: {choices}") from exc


def build_questionnaire_input(
    monthly_income: Any,
    rent: Any,
    daily_spending: Any,
    strategy: Union[SavingsStrategy, str] = SavingsStrategy.BALANCED,
) -> BudgetQuestionnaireInput:
    """Validate raw questionnaire answers.

    ``monthly_income`` must be strictly positive; ``rent`` and
    ``daily_spending`` may be zero. Raises :class:`InvalidAmount` otherwise
    and ``ValueError`` for an unknown strategy.
    """
    return BudgetQuestionnaireInput(
        monthly_income=parse_amount(monthly_income),
        rent=parse_amount(rent, allow_zero=True),
        daily_spending=parse_amount(daily_spending, allow_zero=True),
        savings_percentage=savings_percentage_for(strategy),
    )


def compute(data: BudgetQuestionnaireInput) -> BudgetPlan:
    """Compute the budget plan for validated questionnaire answers.

    Fixed charges are the rent plus a flat 10% of income. When fixed charges
    and savings exceed the income the spendable amount is clamped to zero.

    Example:
        >>> plan = compute(BudgetQuestionnaireInput(3000, 1000, 50, 20))
        >>> plan.available_for_spending, plan.weekly_budget
        (1100.0, 275.0)
    """
    income = float(data.monthly_income)
    rent = float(data.rent)
    daily = float(data.daily_spending)
    percentage = float(data.savings_percentage)

    fixed_charges = rent + income * FIXED_CHARGES_RATE
    savings_amount = income * (percentage / 100)
    available = max(0.0, income - fixed_charges - savings_amount)

    return BudgetPlan(
        monthly_income=income,
        rent=rent,
        savings_percentage=percentage,
        fixed_charges=fixed_charges,
        savings_amount=savings_amount,
        available_for_spending=available,
        daily_budget=available / DAYS_PER_MONTH,
        weekly_budget=available / WEEKS_PER_MONTH,
        biweekly_budget=available / FORTNIGHTS_PER_MONTH,
        monthly_spending=available,
        daily_spending=daily,
        weekly_spending=daily * 7,
        biweekly_spending=daily * 14,
    )


def remaining_budget(budget: float, spent: float) -> float:
    """Amount left in a period budget, never negative."""
    return max(float(budget) - float(spent), 0.0)


def progress_ratio(budget: float, spent: float) -> float:
    """Share of the budget consumed, capped at 1.

    Budgets below 1 are treated as 1 so an empty budget does not divide by zero.
    """
    if spent < 0:
        raise InvalidAmount(spent, "spent must not be negative")
    return min(float(spent) / max(float(budget), 1.0), 1.0)
