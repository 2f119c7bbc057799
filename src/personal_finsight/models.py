# Personal FinSight - Financial Advisory & Projection Engine
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Data model for Personal FinSight.

Everything here is transient: values are computed fresh on every call and
never persisted by the engine.

Inputs
------
- FinancialSnapshot: normalized view of one user's finances, consumed by the
  advice engine. Construction is the validation boundary: non-numeric values
  raise ``InvalidInput`` and negative amounts are clamped to zero.
- MarketContext: optional reference prices, carried but not used by the
  allocation policy.

Outputs
-------
- Advice, AllocationPlan, SpendingFocus, Trend, BudgetSummary, AdviceReport
  for the advice engine.
- CalculatorResult, EmiResult, EmergencyFundPlan for the calculators.

Each output exposes ``to_dict()`` returning a JSON-ready dictionary keyed by
the public (camelCase) field names used by the display layer.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Union

import structlog

from .errors import InvalidInput
from .validation import as_number, clamp_non_negative

logger = structlog.get_logger(__name__)


class RiskLevel(str, Enum):
    """Three-level scale used for risk tolerance and income stability."""

    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"

    @classmethod
    def parse(cls, field_name: str, value: Any) -> "RiskLevel":
        """Accept a RiskLevel or a case-insensitive 'low'/'medium'/'high'."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            for level in cls:
                if level.value.lower() == value.strip().lower():
                    return level
        raise InvalidInput(field_name, "must be one of Low, Medium, High")


class Priority(str, Enum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


@dataclass(frozen=True)
class CategoryAmount:
    """Total spent in one expense category."""

    category: str
    amount: float

    def to_dict(self) -> dict[str, Any]:
        return {"category": self.category, "amount": self.amount}


@dataclass(frozen=True)
class PeriodTotal:
    """Total spent during one labelled period (typically a calendar month)."""

    label: str
    total: float

    def to_dict(self) -> dict[str, Any]:
        return {"periodLabel": self.label, "totalAmount": self.total}


@dataclass(frozen=True)
class MarketContext:
    """Reference market prices. Accepted for context; unused by allocation."""

    gold_price: Optional[float] = None
    stock_index: Optional[float] = None
    mutual_fund_nav: Optional[float] = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "MarketContext":
        def _opt(key: str) -> Optional[float]:
            value = data.get(key)
            return None if value is None else as_number(f"market.{key}", value)

        return cls(
            gold_price=_opt("goldPrice"),
            stock_index=_opt("stockIndex"),
            mutual_fund_nav=_opt("mutualFundNAV"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "goldPrice": self.gold_price,
            "stockIndex": self.stock_index,
            "mutualFundNAV": self.mutual_fund_nav,
        }


CategoryInput = Union[CategoryAmount, Mapping[str, Any], tuple]
PeriodInput = Union[PeriodTotal, Mapping[str, Any], tuple]


def to_category_amount(index: int, item: CategoryInput) -> CategoryAmount:
    """Normalize one expense category entry (dataclass, mapping or pair)."""
    where = f"monthlyExpenseCategories[{index}]"
    if isinstance(item, CategoryAmount):
        name, amount = item.category, item.amount
    elif isinstance(item, Mapping):
        name = item.get("category", item.get("name"))
        amount = item.get("amount")
    elif isinstance(item, tuple) and len(item) == 2:
        name, amount = item
    else:
        raise InvalidInput(where, "must be a (category, amount) pair")

    if not isinstance(name, str):
        raise InvalidInput(f"{where}.category", "must be a string")
    return CategoryAmount(
        category=name,
        amount=clamp_non_negative(f"{where}.amount", amount),
    )


def to_period_total(index: int, item: PeriodInput) -> PeriodTotal:
    """Normalize one expense history point (dataclass, mapping or pair)."""
    where = f"expenseHistory[{index}]"
    if isinstance(item, PeriodTotal):
        label, total = item.label, item.total
    elif isinstance(item, Mapping):
        label = item.get("periodLabel", item.get("label", item.get("month")))
        total = item.get("totalAmount", item.get("total"))
    elif isinstance(item, tuple) and len(item) == 2:
        label, total = item
    else:
        raise InvalidInput(where, "must be a (label, total) pair")

    return PeriodTotal(label=str(label), total=as_number(f"{where}.total", total))


@dataclass
class FinancialSnapshot:
    """
    Normalized financial snapshot consumed by the advice engine.

    ``monthly_savings`` is supplied by the caller (income minus expenses in
    spirit) and is not recomputed or capped at ``monthly_income``.
    ``existing_investments`` is a cumulative amount, not a monthly one.
    """

    age: int
    monthly_income: float
    monthly_savings: float
    risk_tolerance: RiskLevel
    monthly_expense_categories: list[CategoryAmount] = field(default_factory=list)
    existing_investments: float = 0.0
    expense_history: list[PeriodTotal] = field(default_factory=list)
    income_stability: RiskLevel = RiskLevel.MEDIUM
    market: Optional[MarketContext] = None

    def __post_init__(self) -> None:
        self.age = int(clamp_non_negative("age", self.age))
        self.monthly_income = clamp_non_negative("monthlyIncome", self.monthly_income)
        self.monthly_savings = clamp_non_negative(
            "monthlySavings", self.monthly_savings
        )
        self.existing_investments = clamp_non_negative(
            "existingInvestments", self.existing_investments
        )
        self.risk_tolerance = RiskLevel.parse("riskTolerance", self.risk_tolerance)
        self.income_stability = RiskLevel.parse(
            "incomeStability", self.income_stability
        )
        self.monthly_expense_categories = [
            to_category_amount(i, item)
            for i, item in enumerate(self.monthly_expense_categories or [])
        ]
        self.expense_history = [
            to_period_total(i, item)
            for i, item in enumerate(self.expense_history or [])
        ]
        if self.market is not None and not isinstance(self.market, MarketContext):
            if not isinstance(self.market, Mapping):
                raise InvalidInput("market", "must be a mapping of reference prices")
            self.market = MarketContext.from_mapping(self.market)

        if self.monthly_savings > self.monthly_income:
            logger.debug(
                "snapshot.savings_exceed_income",
                monthly_income=self.monthly_income,
                monthly_savings=self.monthly_savings,
            )

    @property
    def total_expenses(self) -> float:
        return sum(c.amount for c in self.monthly_expense_categories)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "FinancialSnapshot":
        """
        Build a snapshot from a JSON-like mapping using the wire field names.

        Required keys: age, monthlyIncome, monthlySavings, riskTolerance.
        Optional keys: monthlyExpenseCategories, existingInvestments,
        expenseHistory, incomeStability, market.
        """
        if not isinstance(data, Mapping):
            raise InvalidInput("snapshot", "must be a mapping")

        for required in ("age", "monthlyIncome", "monthlySavings", "riskTolerance"):
            if required not in data:
                raise InvalidInput(required, "is required")

        categories = data.get("monthlyExpenseCategories") or []
        history = data.get("expenseHistory") or []
        if not isinstance(categories, Iterable) or isinstance(categories, str):
            raise InvalidInput("monthlyExpenseCategories", "must be a list")
        if not isinstance(history, Iterable) or isinstance(history, str):
            raise InvalidInput("expenseHistory", "must be a list")

        return cls(
            age=data["age"],
            monthly_income=data["monthlyIncome"],
            monthly_savings=data["monthlySavings"],
            risk_tolerance=data["riskTolerance"],
            monthly_expense_categories=[
                tuple(c) if isinstance(c, list) else c for c in categories
            ],
            existing_investments=data.get("existingInvestments", 0),
            expense_history=[tuple(h) if isinstance(h, list) else h for h in history],
            income_stability=data.get("incomeStability", RiskLevel.MEDIUM),
            market=data.get("market"),
        )


@dataclass(frozen=True)
class Advice:
    """One prioritized action item."""

    title: str
    description: str
    priority: Priority
    action: str
    timeframe: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "description": self.description,
            "priority": self.priority.value,
            "action": self.action,
            "timeframe": self.timeframe,
        }


@dataclass(frozen=True)
class AllocationPlan:
    """Recommended asset split, in integer percentages."""

    equity: int
    debt: int
    gold: int
    mutual_funds: int

    @property
    def total(self) -> int:
        return self.equity + self.debt + self.gold + self.mutual_funds

    def to_dict(self) -> dict[str, Any]:
        return {
            "equity": self.equity,
            "debt": self.debt,
            "gold": self.gold,
            "mutualFunds": self.mutual_funds,
        }


NO_EXPENSES_RECORDED = "no_expenses_recorded"


@dataclass(frozen=True)
class SpendingFocus:
    """
    Top expense categories by amount.

    ``state`` is 'ok' when at least one category exists, or
    'no_expenses_recorded' when the category list was empty.
    """

    top_categories: list[CategoryAmount]
    total: float
    state: str = "ok"

    @property
    def has_expenses(self) -> bool:
        return self.state != NO_EXPENSES_RECORDED

    def to_dict(self) -> dict[str, Any]:
        return {
            "state": self.state,
            "total": self.total,
            "topCategories": [c.to_dict() for c in self.top_categories],
        }


@dataclass(frozen=True)
class Trend:
    """Direction of the last period-over-period change in spending."""

    direction: str  # 'up', 'down' or 'flat'
    change_percent: float

    def to_dict(self) -> dict[str, Any]:
        return {"direction": self.direction, "changePercent": self.change_percent}


@dataclass(frozen=True)
class BudgetSummary:
    """Savings and expense ratios (percent of income) with a budget status."""

    savings_ratio: float
    expense_ratio: float
    status: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "savingsRatio": self.savings_ratio,
            "expenseRatio": self.expense_ratio,
            "status": self.status,
        }


@dataclass(frozen=True)
class AdviceReport:
    """Everything the advice engine returns for one snapshot."""

    allocation: AllocationPlan
    actions: list[Advice]
    spending_focus: SpendingFocus
    summary: BudgetSummary
    trend: Optional[Trend] = None
    safe_invest_amount: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "allocation": self.allocation.to_dict(),
            "actions": [a.to_dict() for a in self.actions],
            "spendingFocus": self.spending_focus.to_dict(),
            "summary": self.summary.to_dict(),
            "trend": self.trend.to_dict() if self.trend else None,
            "safeInvestAmount": self.safe_invest_amount,
        }


@dataclass(frozen=True)
class CalculatorResult:
    """
    Projection of an investment.

    ``invested_amount + total_returns == future_value`` holds to the cent.
    """

    invested_amount: float
    total_returns: float
    future_value: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "investedAmount": self.invested_amount,
            "totalReturns": self.total_returns,
            "futureValue": self.future_value,
        }


@dataclass(frozen=True)
class EmiResult:
    """Installment and cost breakdown of an amortizing loan."""

    principal: float
    emi: float
    months: int
    total_interest_payable: float
    total_payment: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "principal": self.principal,
            "emiAmount": self.emi,
            "months": self.months,
            "totalInterestPayable": self.total_interest_payable,
            "totalPayment": self.total_payment,
        }


@dataclass(frozen=True)
class EmergencyFundPlan:
    """Progress towards an emergency fund of N months of expenses."""

    target_fund: float
    current_savings: float
    progress_percent: float
    remaining: float
    suggested_monthly_contribution: float
    status: str  # 'healthy', 'building' or 'at_risk'

    def to_dict(self) -> dict[str, Any]:
        return {
            "targetFund": self.target_fund,
            "currentSavings": self.current_savings,
            "progressPercent": self.progress_percent,
            "remaining": self.remaining,
            "suggestedMonthlyContribution": self.suggested_monthly_contribution,
            "status": self.status,
        }
