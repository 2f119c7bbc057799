import pytest

from personal_finsight.errors import InvalidInput
from personal_finsight.models import (
    CategoryAmount,
    FinancialSnapshot,
    MarketContext,
    PeriodTotal,
    RiskLevel,
)


def test_snapshot_clamps_negative_amounts_to_zero() -> None:
    snapshot = FinancialSnapshot(
        age=35,
        monthly_income=-10,
        monthly_savings=-5,
        risk_tolerance="medium",
        monthly_expense_categories=[("Food", -20)],
        existing_investments=-1,
    )

    assert snapshot.monthly_income == 0
    assert snapshot.monthly_savings == 0
    assert snapshot.existing_investments == 0
    assert snapshot.monthly_expense_categories == [CategoryAmount("Food", 0.0)]


def test_snapshot_accepts_savings_above_income() -> None:
    """Savings larger than income are kept as supplied."""
    snapshot = FinancialSnapshot(
        age=35, monthly_income=1_000, monthly_savings=5_000, risk_tolerance="Low"
    )
    assert snapshot.monthly_savings == 5_000


@pytest.mark.parametrize(
    "overrides, field",
    [
        ({"monthly_income": "1000"}, "monthlyIncome"),
        ({"monthly_savings": None}, "monthlySavings"),
        ({"age": True}, "age"),
        ({"risk_tolerance": "aggressive"}, "riskTolerance"),
        ({"income_stability": 3}, "incomeStability"),
        (
            {"monthly_expense_categories": [("Food", "ten")]},
            "monthlyExpenseCategories[0].amount",
        ),
        (
            {"monthly_expense_categories": [(12, 10)]},
            "monthlyExpenseCategories[0].category",
        ),
    ],
)
def test_snapshot_rejects_invalid_values(overrides, field) -> None:
    values = dict(
        age=35, monthly_income=1_000, monthly_savings=100, risk_tolerance="Low"
    )
    values.update(overrides)

    with pytest.raises(InvalidInput) as excinfo:
        FinancialSnapshot(**values)
    assert excinfo.value.field == field


def test_risk_level_parse_is_case_insensitive() -> None:
    assert RiskLevel.parse("riskTolerance", " HIGH ") is RiskLevel.HIGH
    assert RiskLevel.parse("riskTolerance", RiskLevel.LOW) is RiskLevel.LOW


def test_snapshot_from_mapping_uses_wire_names() -> None:
    snapshot = FinancialSnapshot.from_mapping(
        {
            "age": 28,
            "monthlyIncome": 80_000,
            "monthlySavings": 12_000,
            "riskTolerance": "High",
            "monthlyExpenseCategories": [
                ["Rent", 25_000],
                {"name": "Food", "amount": 8_000},
            ],
            "expenseHistory": [{"month": "Sep 2025", "total": 31_000}],
            "incomeStability": "Low",
            "market": {"goldPrice": 6_200.5, "mutualFundNAV": 45},
        }
    )

    assert snapshot.monthly_expense_categories == [
        CategoryAmount("Rent", 25_000.0),
        CategoryAmount("Food", 8_000.0),
    ]
    assert snapshot.expense_history == [PeriodTotal("Sep 2025", 31_000.0)]
    assert snapshot.income_stability is RiskLevel.LOW
    assert snapshot.existing_investments == 0
    assert snapshot.market == MarketContext(gold_price=6_200.5, mutual_fund_nav=45.0)


def test_snapshot_from_mapping_requires_core_fields() -> None:
    with pytest.raises(InvalidInput) as excinfo:
        FinancialSnapshot.from_mapping({"age": 28, "monthlyIncome": 1})
    assert str(excinfo.value) == "monthlySavings: is required"


def test_to_dict_uses_public_field_names() -> None:
    assert PeriodTotal("Oct 2025", 12.5).to_dict() == {
        "periodLabel": "Oct 2025",
        "totalAmount": 12.5,
    }
    assert MarketContext(stock_index=22_000).to_dict() == {
        "goldPrice": None,
        "stockIndex": 22_000,
        "mutualFundNAV": None,
    }
