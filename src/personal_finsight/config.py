# Personal FinSight - Financial Advisory & Projection Engine
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Configuration helpers for Personal FinSight.

This module is responsible for:
- loading the application configuration from a TOML file,
- exposing the advice policy (rule thresholds and allocation table) and the
  display options as typed dataclasses used by the rest of the application.

Every setting has a built-in default, so the engine works without any
configuration file. The threshold defaults are the product's policy values;
the file only makes them explicit and adjustable.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import structlog
import tomllib  # Python 3.11+

logger = structlog.get_logger(__name__)

DEFAULT_CONFIG_FILENAME = "personal_finsight_config.toml"

# Tier order matters: equity must increase and debt decrease along it.
RISK_TIERS: tuple[str, ...] = ("Low", "Medium", "High")

ALLOCATION_FIELDS: tuple[str, ...] = ("equity", "debt", "gold", "mutual_funds")

DEFAULT_ALLOCATIONS: dict[str, dict[str, int]] = {
    "Low": {"equity": 20, "debt": 50, "gold": 15, "mutual_funds": 15},
    "Medium": {"equity": 40, "debt": 30, "gold": 10, "mutual_funds": 20},
    "High": {"equity": 60, "debt": 15, "gold": 5, "mutual_funds": 20},
}

DISPLAY_MODES: tuple[str, ...] = ("table", "json", "csv")


@dataclass(frozen=True)
class AdvicePolicy:
    """
    Thresholds and allocation table used by the advice engine.

    Attributes:
        savings_rate_threshold: Savings below this fraction of income trigger
            the emergency-fund advice.
        category_share_threshold: A single category above this fraction of
            income triggers the overspend advice.
        young_age: Below this age the early-investing advice may fire.
        investment_income_multiple: Early-investing advice fires while
            investments are below this many months of income.
        spending_focus_size: Number of categories reported in the spending
            focus summary.
        allocations: Allocation percentages per risk tier ('Low', 'Medium',
            'High'), each a mapping of equity/debt/gold/mutual_funds.
    """

    savings_rate_threshold: float = 0.2
    category_share_threshold: float = 0.3
    young_age: int = 30
    investment_income_multiple: float = 24
    spending_focus_size: int = 3
    allocations: Mapping[str, Mapping[str, int]] = field(
        default_factory=lambda: {k: dict(v) for k, v in DEFAULT_ALLOCATIONS.items()}
    )


@dataclass(frozen=True)
class DisplayConfig:
    """Presentation options for the CLI."""

    mode: str = "table"
    currency: str = "INR"
    decimals: int = 2


@dataclass(frozen=True)
class AppConfig:
    """
    Application-wide configuration for Personal FinSight.

    This aggregates:
    - the advice policy (thresholds, allocation table),
    - display options for tables and JSON output,
    - the default number of months of expense history to aggregate.
    """

    policy: AdvicePolicy = field(default_factory=AdvicePolicy)
    display: DisplayConfig = field(default_factory=DisplayConfig)
    history_months: int = 6


def _load_toml(path: Path) -> dict[str, Any]:
    """
    Load a TOML file and return its content as a dictionary.

    Raises:
        FileNotFoundError: if the file does not exist.
        ValueError: if the TOML content cannot be parsed or is not a table.
    """
    if not path.is_file():
        raise FileNotFoundError(f"Config file not found: {path}")

    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        raise ValueError(f"Failed to parse TOML config file: {path}") from exc

    if not isinstance(data, dict):
        raise ValueError(f"Invalid TOML root type in {path}, expected a table.")

    return data


def _section(raw: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    """Return a sub-table, treating a missing or malformed one as empty."""
    section = raw.get(name) or {}
    if not isinstance(section, Mapping):
        logger.warning("config.section_ignored", section=name)
        return {}
    return section


def _number(
    section: Mapping[str, Any], key: str, default: float, where: str
) -> float:
    value = section.get(key, default)
    if isinstance(value, bool):
        raise ValueError(f"Invalid value for '{where}.{key}': expected a number.")
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(
            f"Invalid value for '{where}.{key}' in the configuration. "
            "Expected a number."
        ) from exc


def _integer(section: Mapping[str, Any], key: str, default: int, where: str) -> int:
    value = _number(section, key, default, where)
    if not value.is_integer():
        raise ValueError(
            f"Invalid value for '{where}.{key}' in the configuration. "
            "Expected an integer."
        )
    return int(value)


def _parse_allocations(raw: Mapping[str, Any]) -> dict[str, dict[str, int]]:
    """
    Merge [allocation.<tier>] overrides into the default allocation table and
    validate the result.

    Raises:
        ValueError: if a percentage is not a non-negative integer, a tier does
            not sum to 100, or equity/debt are not monotonic across tiers.
    """
    allocations = {k: dict(v) for k, v in DEFAULT_ALLOCATIONS.items()}
    section = _section(raw, "allocation")

    for tier_key, overrides in section.items():
        tier = str(tier_key).strip().capitalize()
        if tier not in allocations:
            raise ValueError(
                f"Unknown risk tier [allocation.{tier_key}], "
                f"expected one of: {', '.join(t.lower() for t in RISK_TIERS)}."
            )
        if not isinstance(overrides, Mapping):
            raise ValueError(f"[allocation.{tier_key}] must be a table.")

        for key, value in overrides.items():
            if key not in ALLOCATION_FIELDS:
                logger.warning(
                    "config.key_ignored", section=f"allocation.{tier_key}", key=key
                )
                continue
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise ValueError(
                    f"Invalid value for 'allocation.{tier_key}.{key}': "
                    "expected a non-negative integer percentage."
                )
            allocations[tier][key] = value

    for tier in RISK_TIERS:
        total = sum(allocations[tier].values())
        if total != 100:
            raise ValueError(
                f"Allocation for risk tier '{tier}' sums to {total}, expected 100."
            )

    for lower, higher in zip(RISK_TIERS, RISK_TIERS[1:]):
        if allocations[higher]["equity"] <= allocations[lower]["equity"]:
            raise ValueError(
                f"Equity share must increase from '{lower}' to '{higher}' risk."
            )
        if allocations[higher]["debt"] >= allocations[lower]["debt"]:
            raise ValueError(
                f"Debt share must decrease from '{lower}' to '{higher}' risk."
            )

    return allocations


def _parse_policy(raw: Mapping[str, Any]) -> AdvicePolicy:
    defaults = AdvicePolicy()
    section = _section(raw, "advice")

    savings_rate = _number(
        section, "savings_rate_threshold", defaults.savings_rate_threshold, "advice"
    )
    category_share = _number(
        section,
        "category_share_threshold",
        defaults.category_share_threshold,
        "advice",
    )
    young_age = _integer(section, "young_age", defaults.young_age, "advice")
    multiple = _number(
        section,
        "investment_income_multiple",
        defaults.investment_income_multiple,
        "advice",
    )
    focus_size = _integer(
        section, "spending_focus_size", defaults.spending_focus_size, "advice"
    )

    if not 0 <= savings_rate <= 1 or not 0 <= category_share <= 1:
        raise ValueError("Advice thresholds must be fractions between 0 and 1.")
    if young_age < 0 or multiple < 0:
        raise ValueError("'advice.young_age' and multiples must be >= 0.")
    if focus_size < 1:
        raise ValueError("'advice.spending_focus_size' must be a positive integer.")

    return AdvicePolicy(
        savings_rate_threshold=savings_rate,
        category_share_threshold=category_share,
        young_age=young_age,
        investment_income_multiple=multiple,
        spending_focus_size=focus_size,
        allocations=_parse_allocations(raw),
    )


def _parse_display(raw: Mapping[str, Any]) -> DisplayConfig:
    section = _section(raw, "display")

    mode = str(section.get("mode", "table"))
    if mode not in DISPLAY_MODES:
        raise ValueError(
            f"Invalid display.mode {mode!r}, expected one of: "
            f"{', '.join(DISPLAY_MODES)}."
        )

    currency = str(section.get("currency") or "INR")
    decimals = _integer(section, "decimals", 2, "display")
    if decimals < 0:
        raise ValueError("'display.decimals' must be >= 0.")

    return DisplayConfig(mode=mode, currency=currency, decimals=decimals)


def load_app_config(config_path: Optional[str] = None) -> AppConfig:
    """
    Load the Personal FinSight configuration from a TOML file.

    Expected top-level sections in the TOML file (all optional)
    ------------------------------------------------------------
    [advice]
        Rule thresholds: savings_rate_threshold, category_share_threshold,
        young_age, investment_income_multiple, spending_focus_size.

    [allocation.low] / [allocation.medium] / [allocation.high]
        Overrides of the allocation table (equity, debt, gold, mutual_funds).
        Each tier must sum to 100 and equity/debt must stay monotonic.

    [history]
        months: number of months of expense history to aggregate.

    [display]
        mode ("table" | "json" | "csv"), currency, decimals.

    Parameters
    ----------
    config_path : str, optional
        Path to the TOML configuration file. When omitted,
        'personal_finsight_config.toml' in the current directory is used if
        it exists; otherwise the built-in defaults are returned.

    Returns
    -------
    AppConfig
        Parsed and validated application configuration.
    """
    if config_path is None:
        config_file = Path(DEFAULT_CONFIG_FILENAME).resolve()
        if not config_file.is_file():
            return AppConfig()
    else:
        config_file = Path(config_path).resolve()

    raw = _load_toml(config_file)

    history_section = _section(raw, "history")
    history_months = _integer(history_section, "months", 6, "history")
    if history_months < 2:
        raise ValueError("'history.months' must be at least 2 to compute a trend.")

    return AppConfig(
        policy=_parse_policy(raw),
        display=_parse_display(raw),
        history_months=history_months,
    )
