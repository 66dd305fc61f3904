"""Data model for the ledger and the budget advisor.

Amounts are plain floats in a single implicit currency; the currency code
is a display setting only (see :mod:`cashheal.formatting`).
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from enum import Enum
from typing import Any, Dict, Optional


class TransactionType(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"


class SavingsStrategy(str, Enum):
    """The three savings presets offered by the budget questionnaire."""

    AGGRESSIVE = "aggressive"
    BALANCED = "balanced"
    CONSERVATIVE = "conservative"

    @property
    def percentage(self) -> float:
        return SAVINGS_PERCENTAGES[self]


SAVINGS_PERCENTAGES: Dict[SavingsStrategy, float] = {
    SavingsStrategy.AGGRESSIVE: 10.0,
    SavingsStrategy.BALANCED: 20.0,
    SavingsStrategy.CONSERVATIVE: 30.0,
}


class BudgetPeriod(str, Enum):
    DAY = "day"
    TWO_WEEKS = "two_weeks"
    MONTH = "month"

    @property
    def days(self) -> int:
        return {"day": 1, "two_weeks": 14, "month": 30}[self.value]


@dataclass(frozen=True)
class Balance:
    total: float = 0.0
    current: float = 0.0


@dataclass(frozen=True)
class Category:
    key: str
    label: str
    amount: float
    color: str
    emoji: str
    id: Optional[int] = None


@dataclass(frozen=True)
class Transaction:
    id: int
    type: TransactionType
    category_key: Optional[str]
    amount: float
    created_at: int  # epoch milliseconds


@dataclass(frozen=True)
class BudgetQuestionnaireInput:
    monthly_income: float
    rent: float
    daily_spending: float
    savings_percentage: float


@dataclass(frozen=True)
class BudgetPlan:
    """Output of :func:`cashheal.budget_engine.compute`.

    The ``*_budget`` fields answer "what can I afford" and derive from the
    income left after fixed charges and savings. The ``*_spending`` fields
    (except ``monthly_spending``) answer "what do I currently spend" and
    scale the stated daily habit linearly.
    """

    monthly_income: float
    rent: float
    savings_percentage: float
    fixed_charges: float
    savings_amount: float
    available_for_spending: float
    daily_budget: float
    weekly_budget: float
    biweekly_budget: float
    monthly_spending: float
    daily_spending: float
    weekly_spending: float
    biweekly_spending: float

    def budget_for(self, period: BudgetPeriod) -> float:
        period = BudgetPeriod(period)
        if period is BudgetPeriod.DAY:
            return self.daily_budget
        if period is BudgetPeriod.TWO_WEEKS:
            return self.biweekly_budget
        return self.available_for_spending

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BudgetPlan":
        """Build a plan from a stored mapping; missing or non-numeric fields raise."""
        values = {}
        for field in fields(cls):
            if field.name not in data:
                raise KeyError(field.name)
            values[field.name] = float(data[field.name])
        return cls(**values)
