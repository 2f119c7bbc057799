# Personal FinSight - Financial Advisory & Projection Engine
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Command-Line Interface (CLI) for Personal FinSight.

This module wires together the main building blocks of Personal FinSight:

- configuration (advice policy, display options),
- calculators (SIP, lumpsum, FD, EMI, CAGR, emergency fund, amortization),
- expense aggregation from a CSV file,
- the advice engine,
- view helpers (tabular rendering, JSON payloads).

The CLI is intentionally thin: it does not implement any financial logic
itself. It parses arguments, calls the engine and renders the results.


Commands
--------

calc
    Run one calculator and print its result:

        python -m personal_finsight.cli calc sip --monthly-contribution 5000 \\
            --rate 12 --years 10
        python -m personal_finsight.cli calc lumpsum --principal 100000 \\
            --rate 8 --years 5
        python -m personal_finsight.cli calc fd --principal 100000 --rate 7 \\
            --years 3 --compounding 4
        python -m personal_finsight.cli calc emi --principal 500000 --rate 9 \\
            --months 60
        python -m personal_finsight.cli calc cagr --initial 100000 \\
            --final 180000 --years 5
        python -m personal_finsight.cli calc emergency-fund \\
            --monthly-expenses 30000 --months 6 --savings 90000
        python -m personal_finsight.cli calc amortization --principal 500000 \\
            --rate 9 --months 60 --start-date 2025-01-01 --yearly

expenses
    Aggregate an expenses CSV (date, amount[, category, description]) for the
    month of ``--month`` (today by default) and the trailing history:

        python -m personal_finsight.cli expenses --expenses data/expenses.csv

advise
    Produce an advice report, either from explicit figures (optionally
    combined with an expenses CSV) or from a JSON snapshot file using the
    public field names (age, monthlyIncome, monthlySavings, riskTolerance,
    monthlyExpenseCategories, existingInvestments, expenseHistory,
    incomeStability):

        python -m personal_finsight.cli advise --income 80000 --savings 10000 \\
            --age 28 --risk medium --expenses data/expenses.csv
        python -m personal_finsight.cli advise --snapshot snapshot.json


Display modes and output
------------------------

``--display-mode`` overrides ``display.mode`` from the configuration file:

- ``table``: text tables on stdout (pandas.DataFrame.to_string),
- ``json``:  one JSON document on stdout, using the public field names,
- ``csv``:   CSV files written to ``--output DIR`` (``data/output`` by
             default) with a timestamp-based name.

Logs are written to stderr; ``--log-level`` (or the ``LOG_LEVEL``
environment variable) controls their verbosity.


Errors
------

Invalid inputs are reported as ``error: <field>: <constraint>`` on stderr and
the process exits with status 2.
"""

import argparse
import json
import sys
from datetime import date, datetime
from pathlib import Path
from typing import Any, Optional

import pandas as pd
import structlog

from . import __version__
from .advice import generate_advice
from .calculators import (
    FD_COMPOUNDING_CHOICES,
    amortization_schedule,
    cagr,
    emergency_fund,
    emi,
    fd,
    lumpsum,
    sip,
    yearly_amortization,
)
from .config import DISPLAY_MODES, AppConfig, load_app_config
from .errors import InvalidInput
from .expenses import (
    build_snapshot,
    monthly_category_totals,
    monthly_totals,
    read_expenses,
    trend,
)
from .logging_setup import configure_logging
from .models import FinancialSnapshot, RiskLevel
from .views import (
    advice_to_dataframe,
    allocation_to_dataframe,
    category_totals_to_dataframe,
    history_to_dataframe,
    projection_to_dataframe,
    report_to_dict,
)

logger = structlog.get_logger(__name__)

RISK_CHOICES = ["low", "medium", "high"]


def _build_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser for the CLI."""
    ap = argparse.ArgumentParser(
        prog="python -m personal_finsight.cli",
        description=(
            "Personal FinSight - Financial Advisory & Projection Engine. "
            "Projects investments and loans, aggregates expenses and produces "
            "rule-based financial advice."
        ),
    )

    # Generic options
    ap.add_argument(
        "--version",
        action="store_true",
        help="Show the installed version of personal_finsight and exit.",
    )
    ap.add_argument(
        "--config",
        dest="config_path",
        help=(
            "Path to the TOML configuration file. If omitted, "
            "'personal_finsight_config.toml' in the current directory is used "
            "when present, otherwise built-in defaults apply."
        ),
    )
    ap.add_argument(
        "--display-mode",
        dest="display_mode",
        choices=list(DISPLAY_MODES),
        help=(
            "Override the display.mode setting from the configuration file. "
            "'table' prints text tables, 'json' prints a JSON document, "
            "'csv' writes CSV files."
        ),
    )
    ap.add_argument(
        "--output",
        dest="output_dir",
        help=(
            "Output directory for CSV files when the display mode is 'csv'. "
            "If omitted, 'data/output' is used."
        ),
    )
    ap.add_argument(
        "--log-level",
        dest="log_level",
        help="Log level (DEBUG, INFO, WARNING, ...). Defaults to $LOG_LEVEL.",
    )

    subparsers = ap.add_subparsers(dest="command", metavar="command")

    # ------------------------------------------------------------------
    # calc
    # ------------------------------------------------------------------
    calc_parser = subparsers.add_parser(
        "calc", help="Run an investment or loan calculator."
    )
    calc_sub = calc_parser.add_subparsers(dest="calculator", metavar="calculator")

    p = calc_sub.add_parser("sip", help="Systematic investment plan projection.")
    p.add_argument("--monthly-contribution", type=float, required=True)
    p.add_argument("--rate", type=float, required=True, help="Annual rate (%%).")
    horizon = p.add_mutually_exclusive_group(required=True)
    horizon.add_argument("--years", type=int)
    horizon.add_argument("--months", type=int)

    p = calc_sub.add_parser("lumpsum", help="Single investment projection.")
    p.add_argument("--principal", type=float, required=True)
    p.add_argument("--rate", type=float, required=True, help="Annual rate (%%).")
    p.add_argument("--years", type=float, required=True)

    p = calc_sub.add_parser("fd", help="Fixed deposit projection.")
    p.add_argument("--principal", type=float, required=True)
    p.add_argument("--rate", type=float, required=True, help="Annual rate (%%).")
    p.add_argument("--years", type=float, required=True)
    p.add_argument(
        "--compounding",
        type=int,
        choices=list(FD_COMPOUNDING_CHOICES),
        default=1,
        help="Compounding periods per year (default: 1, annual).",
    )

    p = calc_sub.add_parser("emi", help="Loan installment (EMI).")
    p.add_argument("--principal", type=float, required=True)
    p.add_argument("--rate", type=float, required=True, help="Annual rate (%%).")
    horizon = p.add_mutually_exclusive_group(required=True)
    horizon.add_argument("--months", type=int)
    horizon.add_argument("--years", type=int)

    p = calc_sub.add_parser("cagr", help="Compound annual growth rate.")
    p.add_argument("--initial", type=float, required=True)
    p.add_argument("--final", type=float, required=True)
    p.add_argument("--years", type=float, required=True)

    p = calc_sub.add_parser("emergency-fund", help="Emergency fund progress.")
    p.add_argument("--monthly-expenses", type=float, required=True)
    p.add_argument(
        "--months", type=int, default=6, help="Months of coverage (default: 6)."
    )
    p.add_argument("--savings", type=float, required=True)

    p = calc_sub.add_parser("amortization", help="Loan amortization schedule.")
    p.add_argument("--principal", type=float, required=True)
    p.add_argument("--rate", type=float, required=True, help="Annual rate (%%).")
    p.add_argument("--months", type=int, required=True)
    p.add_argument(
        "--start-date",
        dest="start_date",
        help="Date of the first installment (YYYY-MM-DD).",
    )
    p.add_argument(
        "--yearly",
        action="store_true",
        help="Also render the yearly roll-up of the schedule.",
    )

    # ------------------------------------------------------------------
    # expenses
    # ------------------------------------------------------------------
    p = subparsers.add_parser(
        "expenses", help="Aggregate expenses by category and by month."
    )
    p.add_argument(
        "--expenses",
        dest="expenses_path",
        required=True,
        metavar="CSV_PATH",
        help="CSV file with date, amount[, category, description] columns.",
    )
    p.add_argument(
        "--month",
        help="Any date in the month to report (YYYY-MM-DD). Defaults to today.",
    )
    p.add_argument(
        "--history-months",
        dest="history_months",
        type=int,
        help="Months of history to aggregate (default from config: 6).",
    )

    # ------------------------------------------------------------------
    # advise
    # ------------------------------------------------------------------
    p = subparsers.add_parser("advise", help="Generate financial advice.")
    p.add_argument(
        "--snapshot",
        dest="snapshot_path",
        metavar="JSON_PATH",
        help="JSON file holding a complete financial snapshot.",
    )
    p.add_argument("--income", type=float, help="Monthly income.")
    p.add_argument("--savings", type=float, help="Monthly savings.")
    p.add_argument("--age", type=int)
    p.add_argument("--risk", choices=RISK_CHOICES, help="Risk tolerance.")
    p.add_argument(
        "--investments",
        type=float,
        default=0.0,
        help="Existing investments (cumulative amount).",
    )
    p.add_argument(
        "--stability",
        choices=RISK_CHOICES,
        default="medium",
        help="Income stability (default: medium).",
    )
    p.add_argument(
        "--expenses",
        dest="expenses_path",
        metavar="CSV_PATH",
        help="Optional expenses CSV used for categories and history.",
    )
    p.add_argument(
        "--month",
        help="Any date in the month to analyse (YYYY-MM-DD). Defaults to today.",
    )

    return ap


def _parse_optional_date(value: Optional[str]) -> Optional[date]:
    """
    Parse an optional CLI date argument (YYYY-MM-DD).

    Raises
    ------
    SystemExit
        If the date format is invalid.
    """
    if value is None:
        return None

    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        msg = f"Invalid date format: {value!r}. Expected YYYY-MM-DD."
        raise SystemExit(msg) from exc


def _render(
    sections: list[tuple[str, pd.DataFrame]],
    payload: Any,
    display_mode: str,
    output_dir: Optional[str],
) -> None:
    """
    Render titled DataFrames as tables or CSV files, or ``payload`` as JSON.

    CSV file names are derived from the section titles plus a timestamp.
    """
    if display_mode == "json":
        print(json.dumps(payload, indent=2, ensure_ascii=False))
        return

    if display_mode == "table":
        for title, df in sections:
            print()
            print(f"=== {title} ===")
            print(df.to_string(index=False))
        return

    out = Path(output_dir) if output_dir else Path("data/output")
    out.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y-%m-%d-%H-%M-%S")
    for title, df in sections:
        slug = "_".join(title.lower().replace("(", "").replace(")", "").split())
        path = out / f"{slug}_{timestamp}.csv"
        df.to_csv(path, index=False)
        print(f"Wrote {path} ({len(df)} rows)")


def _handle_calc(
    args: argparse.Namespace, parser: argparse.ArgumentParser, config: AppConfig
) -> tuple[list[tuple[str, pd.DataFrame]], Any]:
    """Run the requested calculator and return (sections, json payload)."""
    decimals = config.display.decimals
    currency = config.display.currency
    name = args.calculator

    if name == "sip":
        result = sip(
            args.monthly_contribution, args.rate, years=args.years, months=args.months
        )
        title = f"SIP projection ({currency})"
    elif name == "lumpsum":
        result = lumpsum(args.principal, args.rate, args.years)
        title = f"Lumpsum projection ({currency})"
    elif name == "fd":
        result = fd(args.principal, args.rate, args.years, args.compounding)
        title = f"Fixed deposit projection ({currency})"
    elif name == "emi":
        result = emi(args.principal, args.rate, months=args.months, years=args.years)
        title = f"Loan EMI ({currency})"
    elif name == "emergency-fund":
        result = emergency_fund(args.monthly_expenses, args.months, args.savings)
        title = f"Emergency fund ({currency})"
    elif name == "cagr":
        rate = cagr(args.initial, args.final, args.years)
        df = pd.DataFrame([{"field": "cagrPercent", "value": rate}])
        return [("CAGR", df)], {"cagrPercent": rate}
    elif name == "amortization":
        schedule = amortization_schedule(
            args.principal,
            args.rate,
            args.months,
            start_date=_parse_optional_date(args.start_date),
        )
        sections = [(f"Amortization schedule ({currency})", schedule)]
        payload: dict[str, Any] = {"schedule": schedule.to_dict(orient="records")}
        if args.yearly:
            yearly = yearly_amortization(schedule)
            sections.append((f"Yearly amortization ({currency})", yearly))
            payload["yearly"] = yearly.to_dict(orient="records")
        return sections, payload
    else:
        parser.error(
            "No calculator specified. Available calculators are: 'sip', "
            "'lumpsum', 'fd', 'emi', 'cagr', 'emergency-fund', 'amortization'."
        )

    return [(title, projection_to_dataframe(result, decimals))], result.to_dict()


def _handle_expenses(
    args: argparse.Namespace, parser: argparse.ArgumentParser, config: AppConfig
) -> tuple[list[tuple[str, pd.DataFrame]], Any]:
    """Aggregate an expenses CSV for one month plus its trailing history."""
    csv_path = Path(args.expenses_path)
    if not csv_path.is_file():
        parser.error(f"Expenses CSV file not found: {csv_path}")

    reference = _parse_optional_date(args.month)
    history_months = args.history_months or config.history_months

    df = read_expenses(csv_path)
    categories = monthly_category_totals(df, reference)
    history = monthly_totals(df, reference, history_months)
    change = trend(history)

    decimals = config.display.decimals
    sections = [
        ("Expenses by category", category_totals_to_dataframe(categories, decimals)),
        ("Monthly expenses", history_to_dataframe(history, decimals)),
    ]
    if change is not None:
        sections.append(("Trend", pd.DataFrame([change.to_dict()])))

    payload = {
        "categories": [c.to_dict() for c in categories],
        "history": [h.to_dict() for h in history],
        "trend": change.to_dict() if change else None,
    }
    return sections, payload


def _snapshot_from_args(
    args: argparse.Namespace, parser: argparse.ArgumentParser, config: AppConfig
) -> FinancialSnapshot:
    """Build the snapshot for 'advise' from a JSON file or explicit options."""
    if args.snapshot_path:
        path = Path(args.snapshot_path)
        if not path.is_file():
            parser.error(f"Snapshot file not found: {path}")
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            parser.error(f"Invalid JSON in snapshot file {path}: {exc}")
        return FinancialSnapshot.from_mapping(data)

    missing = [
        f"--{opt}"
        for opt in ("income", "savings", "age", "risk")
        if getattr(args, opt) is None
    ]
    if missing:
        parser.error(
            "advise requires either --snapshot or all of: " + ", ".join(missing)
        )

    profile = dict(
        age=args.age,
        monthly_income=args.income,
        monthly_savings=args.savings,
        risk_tolerance=RiskLevel.parse("riskTolerance", args.risk),
        existing_investments=args.investments,
        income_stability=RiskLevel.parse("incomeStability", args.stability),
    )

    if not args.expenses_path:
        return FinancialSnapshot(**profile)

    csv_path = Path(args.expenses_path)
    if not csv_path.is_file():
        parser.error(f"Expenses CSV file not found: {csv_path}")
    return build_snapshot(
        read_expenses(csv_path),
        reference_date=_parse_optional_date(args.month),
        history_months=config.history_months,
        **profile,
    )


def _handle_advise(
    args: argparse.Namespace, parser: argparse.ArgumentParser, config: AppConfig
) -> tuple[list[tuple[str, pd.DataFrame]], Any]:
    """Generate the advice report and its tabular sections."""
    snapshot = _snapshot_from_args(args, parser, config)
    report = generate_advice(snapshot, config.policy)

    summary = report.summary
    summary_df = pd.DataFrame(
        [
            {"field": "status", "value": summary.status},
            {"field": "savingsRatio", "value": summary.savings_ratio},
            {"field": "expenseRatio", "value": summary.expense_ratio},
            {"field": "safeInvestAmount", "value": report.safe_invest_amount},
        ]
    )
    if report.trend is not None:
        summary_df.loc[len(summary_df)] = [
            "trend",
            f"{report.trend.direction} ({report.trend.change_percent:+.1f}%)",
        ]

    sections = [
        ("Budget summary", summary_df),
        ("Recommended allocation (%)", allocation_to_dataframe(report.allocation)),
        ("Action items", advice_to_dataframe(report)),
    ]
    if report.spending_focus.has_expenses:
        sections.append(
            (
                "Spending focus",
                category_totals_to_dataframe(
                    report.spending_focus.top_categories, config.display.decimals
                ),
            )
        )
    return sections, report_to_dict(report)


def main(argv: Optional[list[str]] = None) -> None:
    """Entry point for the Personal FinSight CLI.

    This function parses command-line arguments, configures logging, loads
    the configuration, dispatches to the selected command and renders its
    results as tables, JSON or CSV files.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    # --version: short-circuit and exit early.
    if args.version:
        print(f"personal_finsight version {__version__}")
        return

    configure_logging(args.log_level)

    if args.command is None:
        parser.print_help()
        return

    try:
        config = load_app_config(args.config_path)
    except (FileNotFoundError, ValueError) as exc:
        parser.exit(2, f"error: {exc}\n")

    handlers = {
        "calc": _handle_calc,
        "expenses": _handle_expenses,
        "advise": _handle_advise,
    }

    try:
        sections, payload = handlers[args.command](args, parser, config)
    except InvalidInput as exc:
        logger.info("cli.invalid_input", field=exc.field, constraint=exc.constraint)
        parser.exit(2, f"error: {exc}\n")
    except ValueError as exc:
        parser.exit(2, f"error: {exc}\n")

    display_mode = args.display_mode or config.display.mode
    _render(sections, payload, display_mode, args.output_dir)


if __name__ == "__main__":
    main(sys.argv[1:])
