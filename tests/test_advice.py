import pytest

from personal_finsight.advice import (
    ADVICE_RULES,
    ON_TRACK,
    allocation_for,
    budget_summary,
    generate_advice,
    safe_invest_amount,
    spending_focus,
)
from personal_finsight.config import AdvicePolicy
from personal_finsight.errors import InvalidInput
from personal_finsight.models import (
    NO_EXPENSES_RECORDED,
    CategoryAmount,
    FinancialSnapshot,
    Priority,
    RiskLevel,
    Trend,
)


def _snapshot(**overrides) -> FinancialSnapshot:
    """A snapshot on which no rule fires, adjusted by ``overrides``."""
    values = dict(
        age=40,
        monthly_income=100_000,
        monthly_savings=30_000,
        risk_tolerance=RiskLevel.MEDIUM,
        monthly_expense_categories=[("Rent", 20_000), ("Food", 10_000)],
        existing_investments=5_000_000,
        income_stability=RiskLevel.MEDIUM,
    )
    values.update(overrides)
    return FinancialSnapshot(**values)


def _titles(report) -> list[str]:
    return [a.title for a in report.actions]


def test_low_savings_rate_triggers_emergency_fund_advice() -> None:
    """Income 50000 with savings 5000 (10%) gets a High emergency-fund item."""
    report = generate_advice(_snapshot(monthly_income=50_000, monthly_savings=5_000))

    item = report.actions[0]
    assert item.title == "Build Your Emergency Fund"
    assert item.priority is Priority.HIGH
    assert "Currently at 10.0%" in item.description
    assert "at least 20%" in item.description


def test_large_category_triggers_overspend_advice() -> None:
    """Rent at 40% of income is above the 30% threshold and is named."""
    report = generate_advice(
        _snapshot(monthly_expense_categories=[("Rent", 40_000)])
    )

    assert _titles(report) == ["Review Your Rent Spending"]
    item = report.actions[0]
    assert item.priority is Priority.MEDIUM
    assert "40.0%" in item.description
    assert item.action == "Look for ways to reduce rent expenses"


def test_young_user_without_investments_gets_both_items_in_order() -> None:
    """Age 25 with no investments: invest item first, then the age-based item."""
    report = generate_advice(_snapshot(age=25, existing_investments=0))

    assert _titles(report) == ["Consider Investing", "Leverage Your Youth"]
    assert report.actions[0].priority is Priority.HIGH


def test_low_risk_investor_gets_conservative_investing_advice() -> None:
    report = generate_advice(
        _snapshot(existing_investments=0, risk_tolerance=RiskLevel.LOW)
    )

    item = report.actions[0]
    assert item.title == "Consider Investing"
    assert item.priority is Priority.MEDIUM
    assert "conservative" in item.action


def test_unstable_income_advice() -> None:
    report = generate_advice(_snapshot(income_stability="low"))
    assert _titles(report) == ["Stabilize Your Income"]
    assert report.actions[0].timeframe == "12+ months"


def test_rules_fire_independently_in_table_order() -> None:
    """Several rules can fire; items follow the rule table order."""
    report = generate_advice(
        _snapshot(
            age=22,
            monthly_savings=1_000,
            existing_investments=0,
            monthly_expense_categories=[("Rent", 45_000)],
            income_stability=RiskLevel.LOW,
        )
    )

    assert _titles(report) == [
        "Build Your Emergency Fund",
        "Consider Investing",
        "Review Your Rent Spending",
        "Stabilize Your Income",
        "Leverage Your Youth",
    ]
    assert [r.name for r in ADVICE_RULES] == [
        "savings_rate",
        "no_investments",
        "overspend_category",
        "income_stability",
        "early_investing",
    ]


def test_fallback_when_no_rule_fires() -> None:
    """A healthy snapshot yields exactly one Low-priority 'on track' item."""
    report = generate_advice(_snapshot())

    assert report.actions == [ON_TRACK]
    assert report.actions[0].priority is Priority.LOW
    assert report.actions[0].timeframe is None


@pytest.mark.parametrize(
    "overrides",
    [
        {"monthly_savings": 19_999},
        {"existing_investments": 0},
        {"monthly_expense_categories": [("Travel", 30_001)]},
        {"income_stability": RiskLevel.LOW},
        {"age": 29, "existing_investments": 2_399_999},
    ],
)
def test_fallback_is_absent_when_any_rule_fires(overrides) -> None:
    """The 'on track' item appears only when no other rule fired."""
    report = generate_advice(_snapshot(**overrides))

    assert len(report.actions) == 1
    assert report.actions[0] != ON_TRACK


@pytest.mark.parametrize(
    "overrides",
    [
        {"monthly_savings": 20_000},
        {"monthly_expense_categories": [("Travel", 30_000)]},
        {"age": 30, "existing_investments": 1_000},
        {"age": 29, "existing_investments": 2_400_000},
    ],
)
def test_thresholds_are_strict(overrides) -> None:
    """Values exactly at a threshold do not trigger the rule."""
    report = generate_advice(_snapshot(**overrides))
    assert report.actions == [ON_TRACK]


def test_zero_income_does_not_divide_by_zero() -> None:
    """With no income, ratios are 0 and the overspend text avoids a percent."""
    snapshot = _snapshot(
        monthly_income=0,
        monthly_savings=0,
        monthly_expense_categories=[("Food", 100)],
    )

    report = generate_advice(snapshot)

    assert _titles(report) == ["Review Your Food Spending"]
    assert "not covered" in report.actions[0].description
    assert report.summary.savings_ratio == 0.0
    assert report.summary.expense_ratio == 0.0
    assert report.summary.status == "Deficit"
    assert report.safe_invest_amount == 0.0


@pytest.mark.parametrize("risk", ["Low", "Medium", "High"])
def test_allocation_sums_to_100(risk) -> None:
    assert allocation_for(risk).total == 100


def test_allocation_equity_increases_with_risk() -> None:
    low, medium, high = (allocation_for(r) for r in RiskLevel)

    assert low.equity < medium.equity < high.equity
    assert low.debt > medium.debt > high.debt


def test_allocation_depends_only_on_risk_tolerance() -> None:
    a = generate_advice(_snapshot(risk_tolerance="high"))
    b = generate_advice(
        _snapshot(risk_tolerance="high", monthly_income=1, existing_investments=0)
    )
    assert a.allocation == b.allocation == allocation_for(RiskLevel.HIGH)


def test_spending_focus_keeps_top_three_by_amount() -> None:
    categories = [
        CategoryAmount("Food", 300),
        CategoryAmount("Rent", 900),
        CategoryAmount("Bills", 300),
        CategoryAmount("Fun", 50),
        CategoryAmount("Travel", 400),
    ]

    focus = spending_focus(categories)

    assert [c.category for c in focus.top_categories] == ["Rent", "Travel", "Food"]
    assert focus.total == 1_600
    assert focus.has_expenses


def test_spending_focus_without_expenses_is_explicit() -> None:
    focus = spending_focus([])

    assert focus.state == NO_EXPENSES_RECORDED
    assert not focus.has_expenses
    assert focus.top_categories == []


@pytest.mark.parametrize(
    "savings, status",
    [(30_000, "Healthy surplus"), (10_000, "Tight budget")],
)
def test_budget_summary_status(savings, status) -> None:
    summary = budget_summary(_snapshot(monthly_savings=savings))

    assert summary.expense_ratio == 30.0
    assert summary.status == status


def test_budget_summary_deficit_when_expenses_exceed_income() -> None:
    summary = budget_summary(
        _snapshot(monthly_income=10_000, monthly_expense_categories=[("Rent", 12_000)])
    )
    assert summary.status == "Deficit"
    assert summary.expense_ratio == 120.0


def test_safe_invest_amount_keeps_a_buffer() -> None:
    """The buffer is the larger of 20% of savings or 10% of income."""
    assert safe_invest_amount(_snapshot()) == 20_000
    assert safe_invest_amount(_snapshot(monthly_savings=5_000)) == 0


def test_report_includes_expense_trend() -> None:
    report = generate_advice(
        _snapshot(expense_history=[("Sep 2025", 20_000), ("Oct 2025", 30_000)])
    )
    assert report.trend == Trend("up", 50.0)


def test_report_trend_is_none_without_history() -> None:
    assert generate_advice(_snapshot()).trend is None


def test_generate_advice_accepts_wire_mapping() -> None:
    report = generate_advice(
        {
            "age": 25,
            "monthlyIncome": 100_000,
            "monthlySavings": 30_000,
            "riskTolerance": "Medium",
            "existingInvestments": 0,
            "monthlyExpenseCategories": [{"category": "Rent", "amount": 20_000}],
        }
    )

    payload = report.to_dict()
    assert [a["title"] for a in payload["actions"]] == [
        "Consider Investing",
        "Leverage Your Youth",
    ]
    assert payload["allocation"] == {
        "equity": 40,
        "debt": 30,
        "gold": 10,
        "mutualFunds": 20,
    }
    assert payload["spendingFocus"]["topCategories"] == [
        {"category": "Rent", "amount": 20_000}
    ]


def test_generate_advice_rejects_non_numeric_values() -> None:
    with pytest.raises(InvalidInput) as excinfo:
        generate_advice(
            {
                "age": 30,
                "monthlyIncome": "a lot",
                "monthlySavings": 100,
                "riskTolerance": "Low",
            }
        )
    assert excinfo.value.field == "monthlyIncome"


def test_custom_policy_thresholds() -> None:
    """A lower savings threshold silences the emergency-fund item."""
    snapshot = _snapshot(monthly_income=50_000, monthly_savings=5_000)
    policy = AdvicePolicy(savings_rate_threshold=0.05)

    report = generate_advice(snapshot, policy)

    assert "Build Your Emergency Fund" not in _titles(report)


def test_overspend_builder_requires_an_expense_category() -> None:
    """Calling the overspend builder on its own without categories is an error."""
    rule = next(r for r in ADVICE_RULES if r.name == "overspend_category")
    snapshot = _snapshot(monthly_expense_categories=[])

    assert rule.predicate(snapshot, AdvicePolicy()) is False
    with pytest.raises(ValueError, match="at least one expense category"):
        rule.builder(snapshot, AdvicePolicy())
