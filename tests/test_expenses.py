from datetime import date
from pathlib import Path

import pandas as pd
import pytest

from personal_finsight.errors import InvalidInput
from personal_finsight.expenses import (
    build_snapshot,
    monthly_category_totals,
    monthly_totals,
    normalize_expenses,
    read_expenses,
    trend,
)
from personal_finsight.models import CategoryAmount, PeriodTotal, RiskLevel, Trend

REF = date(2025, 10, 15)


def test_monthly_category_totals_sums_current_month_only() -> None:
    """Only records dated in the reference month are aggregated, largest first."""
    records = [
        ("2025-10-01", 500, "Food"),
        ("2025-10-03", 1200, "Rent"),
        ("2025-10-20", 300, "Food"),
        ("2025-09-30", 999, "Rent"),
        ("2025-11-01", 50, "Food"),
    ]

    totals = monthly_category_totals(records, REF)

    assert totals == [
        CategoryAmount("Rent", 1200.0),
        CategoryAmount("Food", 800.0),
    ]


def test_monthly_category_totals_keeps_first_seen_order_on_ties() -> None:
    """Equal totals keep the order in which categories first appear."""
    records = [
        {"date": "2025-10-01", "amount": 100, "category": "Transport"},
        {"date": "2025-10-02", "amount": 100, "category": "Bills"},
        {"date": "2025-10-03", "amount": 250, "category": "Shopping"},
    ]

    totals = monthly_category_totals(records, REF)

    assert [t.category for t in totals] == ["Shopping", "Transport", "Bills"]


def test_monthly_category_totals_defaults_category_and_drops_undated() -> None:
    """Missing or blank categories become 'Other'; undated records are left out."""
    records = [
        {"date": "2025-10-05", "amount": 40},
        {"date": "2025-10-06", "amount": 60, "category": "   "},
        {"amount": 25, "category": "Misc"},
    ]

    totals = monthly_category_totals(records, REF)

    assert totals == [CategoryAmount("Other", 100.0)]


def test_undated_records_agree_across_aggregations() -> None:
    """An undated record is counted neither by category nor in the history."""
    records = [(None, 500.0, "Misc")]
    ref = date(2020, 1, 15)

    assert monthly_category_totals(records, ref) == []
    assert monthly_totals(records, ref, months=1) == [PeriodTotal("Jan 2020", 0.0)]


def test_monthly_category_totals_includes_last_day_of_month() -> None:
    """The end of the month is inclusive, whatever the time of day."""
    df = pd.DataFrame(
        {
            "date": ["2025-10-31 23:30:00", "2025-11-01 00:00:00"],
            "amount": [10.0, 99.0],
            "category": ["Food", "Food"],
        }
    )

    assert monthly_category_totals(df, REF) == [CategoryAmount("Food", 10.0)]


def test_monthly_category_totals_empty_window() -> None:
    """No record in the month gives an empty list, not an error."""
    assert monthly_category_totals([("2025-01-01", 10, "Food")], REF) == []
    assert monthly_category_totals([], REF) == []


def test_normalize_expenses_rejects_non_numeric_amounts() -> None:
    """An amount that is present but not a number is invalid input."""
    with pytest.raises(InvalidInput) as excinfo:
        normalize_expenses([{"date": "2025-10-01", "amount": "lots"}])
    assert excinfo.value.field == "amount"


def test_normalize_expenses_rejects_unparsable_dates() -> None:
    with pytest.raises(InvalidInput) as excinfo:
        normalize_expenses([("2025-10-01", 1.0), ("not-a-date", 2.0)])
    assert excinfo.value.field == "date"


def test_normalize_expenses_missing_amount_counts_as_zero() -> None:
    df = normalize_expenses([{"date": "2025-10-01", "category": "Food"}])
    assert df["amount"].tolist() == [0.0]
    assert list(df.columns) == ["date", "amount", "category", "description"]


def test_monthly_totals_reports_every_month_oldest_first() -> None:
    """Months without records are reported with a zero total."""
    records = [
        ("2025-08-10", 100, "Food"),
        ("2025-10-01", 50, "Food"),
        ("2025-10-02", 25, "Bills"),
        ("2025-11-05", 999, "Food"),
    ]

    series = monthly_totals(records, REF, months=3)

    assert series == [
        PeriodTotal("Aug 2025", 100.0),
        PeriodTotal("Sep 2025", 0.0),
        PeriodTotal("Oct 2025", 75.0),
    ]


def test_monthly_totals_rejects_non_positive_window() -> None:
    with pytest.raises(InvalidInput):
        monthly_totals([], REF, months=0)


@pytest.mark.parametrize(
    "series, expected",
    [
        ([("Sep", 100), ("Oct", 125)], Trend("up", 25.0)),
        ([("Sep", 200), ("Oct", 150)], Trend("down", -25.0)),
        ([("Sep", 80), ("Oct", 80)], Trend("flat", 0.0)),
        ([("Sep", 400), ("Oct", 401)], Trend("up", 0.3)),
        ([("Aug", 999), ("Sep", 100), ("Oct", 50)], Trend("down", -50.0)),
    ],
)
def test_trend_compares_last_two_points(series, expected) -> None:
    """Change is (last - previous) / previous, rounded half-up to 1 decimal."""
    assert trend(series) == expected


def test_trend_is_none_when_indeterminate() -> None:
    """Single point, empty series or a zero previous total give None."""
    assert trend([]) is None
    assert trend([("Oct", 120)]) is None
    assert trend([("Sep", 0), ("Oct", 120)]) is None


def test_trend_accepts_period_totals_and_mappings() -> None:
    series = [
        PeriodTotal("Sep 2025", 100.0),
        {"periodLabel": "Oct 2025", "totalAmount": 90.0},
    ]
    assert trend(series) == Trend("down", -10.0)


def test_read_expenses_from_csv(tmp_path: Path) -> None:
    """CSV headers are case-insensitive and 'label' maps to description."""
    csv_path = tmp_path / "expenses.csv"
    csv_path.write_text(
        "Date,Amount,Category,Label\n"
        "2025-10-01,1200,Rent,October rent\n"
        "2025-10-04,85.5,Food,Groceries\n"
        "2025-10-09,40,,Misc\n",
        encoding="utf-8",
    )

    df = read_expenses(csv_path)

    assert len(df) == 3
    assert df["category"].tolist() == ["Rent", "Food", "Other"]
    assert df["description"].tolist()[0] == "October rent"
    assert df["amount"].sum() == pytest.approx(1325.5)


def test_read_expenses_requires_date_and_amount(tmp_path: Path) -> None:
    csv_path = tmp_path / "bad.csv"
    csv_path.write_text("when,value\n2025-10-01,10\n", encoding="utf-8")

    with pytest.raises(ValueError, match="missing: amount, date"):
        read_expenses(csv_path)


def test_build_snapshot_from_raw_records() -> None:
    """Category breakdown and history are derived from the same records."""
    records = [
        ("2025-09-03", 800, "Rent"),
        ("2025-10-01", 1000, "Rent"),
        ("2025-10-12", 300, "Food"),
    ]

    snapshot = build_snapshot(
        records,
        age=31,
        monthly_income=5000,
        monthly_savings=900,
        risk_tolerance="high",
        reference_date=REF,
        history_months=2,
    )

    assert snapshot.risk_tolerance is RiskLevel.HIGH
    assert snapshot.monthly_expense_categories == [
        CategoryAmount("Rent", 1000.0),
        CategoryAmount("Food", 300.0),
    ]
    assert snapshot.expense_history == [
        PeriodTotal("Sep 2025", 800.0),
        PeriodTotal("Oct 2025", 1300.0),
    ]
    assert snapshot.total_expenses == pytest.approx(1300.0)


def test_aggregated_amounts_round_half_up_to_cents() -> None:
    records = [("2025-10-01", 0.125, "Fees")]

    assert monthly_category_totals(records, REF) == [CategoryAmount("Fees", 0.13)]
    assert monthly_totals(records, REF, months=1) == [PeriodTotal("Oct 2025", 0.13)]
