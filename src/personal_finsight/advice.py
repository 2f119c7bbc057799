# Personal FinSight - Financial Advisory & Projection Engine
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Rule-based advice engine for Personal FinSight.

``generate_advice(snapshot)`` turns a FinancialSnapshot into an AdviceReport:

1. Allocation
   ----------
   A recommended split between equity, debt, gold and mutual funds. It is a
   function of the risk tolerance only, read from the policy's allocation
   table (see config.py). Every tier sums to 100; equity grows and debt
   shrinks as risk tolerance increases.

2. Actions
   -------
   An ordered list of prioritized action items produced by ADVICE_RULES.
   Each rule is a (predicate, builder) pair evaluated in table order and
   appends at most one item, so several rules can fire for the same
   snapshot. When none fires, a single low-priority "on track" item is
   returned: the action list is never empty.

       savings_rate        savings below 20% of income          High
       no_investments      nothing invested yet, savings > 0    High/Medium
       overspend_category  largest category above 30% of income Medium
       income_stability    unstable income                      High
       early_investing     under 30, investments < 24x income   High

   New rules are appended to the table; existing ones keep their position.

3. Spending focus, budget summary, trend
   -------------------------------------
   The largest expense categories, the savings and expense ratios with a
   budget status, the month-over-month expense trend and the amount that can
   safely be invested each month.

The engine is a pure function of the snapshot and the policy. Snapshot
construction is where invalid input is rejected; once built, no rule raises.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Callable, Optional, Union

import structlog

from .config import AdvicePolicy
from .expenses import trend as expense_trend
from .models import (
    NO_EXPENSES_RECORDED,
    Advice,
    AdviceReport,
    AllocationPlan,
    BudgetSummary,
    CategoryAmount,
    FinancialSnapshot,
    Priority,
    RiskLevel,
    SpendingFocus,
)
from .rounding import percent, round_half_up, to_cents

logger = structlog.get_logger(__name__)

DEFAULT_POLICY = AdvicePolicy()


@dataclass(frozen=True)
class AdviceRule:
    """
    One entry of the rule table.

    Attributes:
        name: Identifier used in logs.
        predicate: Returns True when the rule applies to the snapshot.
        builder: Builds the advice item; only called when the predicate holds.
    """

    name: str
    predicate: Callable[[FinancialSnapshot, AdvicePolicy], bool]
    builder: Callable[[FinancialSnapshot, AdvicePolicy], Advice]


# ---------------------------------------------------------------------------
# Shared computations
# ---------------------------------------------------------------------------


def savings_rate(snapshot: FinancialSnapshot) -> float:
    """Savings as a percentage of income; 0 when there is no income."""
    if snapshot.monthly_income <= 0:
        return 0.0
    return snapshot.monthly_savings / snapshot.monthly_income * 100


def largest_category(snapshot: FinancialSnapshot) -> Optional[CategoryAmount]:
    """Largest expense category; the first one listed wins a tie."""
    largest: Optional[CategoryAmount] = None
    for item in snapshot.monthly_expense_categories:
        if largest is None or item.amount > largest.amount:
            largest = item
    return largest


def _as_percent_label(fraction: float) -> str:
    return f"{round_half_up(fraction * 100, 1):g}%"


# ---------------------------------------------------------------------------
# Rules
# ---------------------------------------------------------------------------


def _low_savings(snapshot: FinancialSnapshot, policy: AdvicePolicy) -> bool:
    return (
        snapshot.monthly_savings
        < policy.savings_rate_threshold * snapshot.monthly_income
    )


def _build_emergency_fund(snapshot: FinancialSnapshot, policy: AdvicePolicy) -> Advice:
    rate = round_half_up(savings_rate(snapshot), 1)
    target = _as_percent_label(policy.savings_rate_threshold)
    return Advice(
        title="Build Your Emergency Fund",
        description=(
            f"You should aim to save at least {target} of your income. "
            f"Currently at {rate:.1f}%."
        ),
        priority=Priority.HIGH,
        action="Increase monthly savings to reach 3-6 months of expenses",
        timeframe="6-12 months",
    )


def _no_investments(snapshot: FinancialSnapshot, policy: AdvicePolicy) -> bool:
    return snapshot.existing_investments == 0 and snapshot.monthly_savings > 0


def _build_start_investing(snapshot: FinancialSnapshot, policy: AdvicePolicy) -> Advice:
    conservative = snapshot.risk_tolerance is RiskLevel.LOW
    return Advice(
        title="Consider Investing",
        description=(
            "You have savings but no investments yet. Consider diversifying "
            "into investments based on your risk tolerance."
        ),
        priority=Priority.MEDIUM if conservative else Priority.HIGH,
        action=(
            "Explore conservative investments like bonds and fixed deposits"
            if conservative
            else "Consider a diversified portfolio of stocks and bonds"
        ),
        timeframe="3-6 months",
    )


def _overspend(snapshot: FinancialSnapshot, policy: AdvicePolicy) -> bool:
    largest = largest_category(snapshot)
    if largest is None:
        return False
    return largest.amount > policy.category_share_threshold * snapshot.monthly_income


def _build_overspend(snapshot: FinancialSnapshot, policy: AdvicePolicy) -> Advice:
    largest = largest_category(snapshot)
    if largest is None:
        raise ValueError("overspend advice needs at least one expense category.")
    name = largest.category

    if snapshot.monthly_income > 0:
        share = percent(largest.amount, snapshot.monthly_income)
        description = f"Your {name} spending represents {share:.1f}% of your income."
    else:
        description = (
            f"Your {name} spending of {largest.amount:,.2f} is not covered by "
            "any recorded income."
        )

    return Advice(
        title=f"Review Your {name} Spending",
        description=description,
        priority=Priority.MEDIUM,
        action=f"Look for ways to reduce {name.lower()} expenses",
        timeframe="1-3 months",
    )


def _unstable_income(snapshot: FinancialSnapshot, policy: AdvicePolicy) -> bool:
    return snapshot.income_stability is RiskLevel.LOW


def _build_stabilize_income(
    snapshot: FinancialSnapshot, policy: AdvicePolicy
) -> Advice:
    return Advice(
        title="Stabilize Your Income",
        description="Your income appears unstable. Build a larger emergency fund.",
        priority=Priority.HIGH,
        action="Aim for 6-12 months of expenses in savings",
        timeframe="12+ months",
    )


def _young_investor(snapshot: FinancialSnapshot, policy: AdvicePolicy) -> bool:
    return snapshot.age < policy.young_age and (
        snapshot.existing_investments
        < policy.investment_income_multiple * snapshot.monthly_income
    )


def _build_invest_early(snapshot: FinancialSnapshot, policy: AdvicePolicy) -> Advice:
    return Advice(
        title="Leverage Your Youth",
        description=(
            "You have time for compound growth. Start investing early for "
            "long-term wealth."
        ),
        priority=Priority.HIGH,
        action="Set up a long-term investment plan",
        timeframe="Ongoing",
    )


ADVICE_RULES: tuple[AdviceRule, ...] = (
    AdviceRule("savings_rate", _low_savings, _build_emergency_fund),
    AdviceRule("no_investments", _no_investments, _build_start_investing),
    AdviceRule("overspend_category", _overspend, _build_overspend),
    AdviceRule("income_stability", _unstable_income, _build_stabilize_income),
    AdviceRule("early_investing", _young_investor, _build_invest_early),
)

ON_TRACK = Advice(
    title="You're On Track",
    description="Your finances look healthy. Keep up your current savings rate.",
    priority=Priority.LOW,
    action="Continue current financial habits",
)


def evaluate_rules(
    snapshot: FinancialSnapshot,
    policy: AdvicePolicy = DEFAULT_POLICY,
    rules: tuple[AdviceRule, ...] = ADVICE_RULES,
) -> list[Advice]:
    """
    Run the rule table in order and return the resulting action items.

    The result is never empty: the "on track" item is returned when no rule
    fires.
    """
    actions: list[Advice] = []
    for rule in rules:
        if rule.predicate(snapshot, policy):
            item = rule.builder(snapshot, policy)
            logger.debug(
                "advice.rule_fired", rule=rule.name, priority=item.priority.value
            )
            actions.append(item)

    if not actions:
        actions.append(ON_TRACK)
    return actions


# ---------------------------------------------------------------------------
# Allocation, spending focus and summary
# ---------------------------------------------------------------------------


def allocation_for(
    risk_tolerance: Union[RiskLevel, str], policy: AdvicePolicy = DEFAULT_POLICY
) -> AllocationPlan:
    """Return the recommended allocation for a risk tier."""
    tier = RiskLevel.parse("riskTolerance", risk_tolerance)
    row = policy.allocations[tier.value]
    return AllocationPlan(
        equity=int(row["equity"]),
        debt=int(row["debt"]),
        gold=int(row["gold"]),
        mutual_funds=int(row["mutual_funds"]),
    )


def spending_focus(
    categories: list[CategoryAmount], size: int = DEFAULT_POLICY.spending_focus_size
) -> SpendingFocus:
    """
    Rank categories by descending amount (stable for ties) and keep the top
    ``size`` entries verbatim.

    An empty category list yields an explicit 'no_expenses_recorded' state.
    """
    if not categories:
        return SpendingFocus(top_categories=[], total=0.0, state=NO_EXPENSES_RECORDED)

    ranked = sorted(categories, key=lambda c: -c.amount)
    top = ranked[:size]
    return SpendingFocus(
        top_categories=top,
        total=to_cents(sum(c.amount for c in top)),
    )


def budget_summary(snapshot: FinancialSnapshot) -> BudgetSummary:
    """
    Savings and expense ratios (percent of income, one decimal) and a budget
    status: 'Healthy surplus', 'Tight budget' or 'Deficit'.
    """
    income = snapshot.monthly_income
    expenses_total = snapshot.total_expenses
    savings_ratio = percent(snapshot.monthly_savings, income)
    expense_ratio = percent(expenses_total, income)

    if income > expenses_total:
        status = "Healthy surplus" if savings_ratio >= 20 else "Tight budget"
    else:
        status = "Deficit"

    return BudgetSummary(
        savings_ratio=savings_ratio,
        expense_ratio=expense_ratio,
        status=status,
    )


def safe_invest_amount(snapshot: FinancialSnapshot) -> float:
    """
    Monthly amount that can be invested while keeping a buffer of the larger
    of 20% of savings or 10% of income.
    """
    savings = snapshot.monthly_savings
    buffer = max(savings * 0.2, snapshot.monthly_income * 0.1)
    return to_cents(max(0.0, savings - buffer))


def generate_advice(
    snapshot: Union[FinancialSnapshot, Mapping],
    policy: Optional[AdvicePolicy] = None,
) -> AdviceReport:
    """
    Produce the full advisory report for one financial snapshot.

    Args:
        snapshot: A FinancialSnapshot, or a JSON-like mapping using the wire
            field names (validated through FinancialSnapshot.from_mapping).
        policy: Thresholds and allocation table; the built-in policy is used
            when omitted.

    Returns:
        An AdviceReport with the allocation, the ordered action list (never
        empty), the spending focus, the budget summary, the expense trend
        (None when indeterminate) and the safe monthly investment amount.

    Raises:
        InvalidInput: if a mapping snapshot contains non-numeric values or
            unknown risk levels.
    """
    if not isinstance(snapshot, FinancialSnapshot):
        snapshot = FinancialSnapshot.from_mapping(snapshot)
    policy = policy or DEFAULT_POLICY

    report = AdviceReport(
        allocation=allocation_for(snapshot.risk_tolerance, policy),
        actions=evaluate_rules(snapshot, policy),
        spending_focus=spending_focus(
            snapshot.monthly_expense_categories, policy.spending_focus_size
        ),
        summary=budget_summary(snapshot),
        trend=expense_trend(snapshot.expense_history),
        safe_invest_amount=safe_invest_amount(snapshot),
    )

    logger.debug(
        "advice.generated",
        risk_tolerance=snapshot.risk_tolerance.value,
        actions=len(report.actions),
        status=report.summary.status,
    )
    return report
