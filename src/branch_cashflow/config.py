# Branch Cashflow - Multi-branch cash-flow tracking & analytics
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Configuration helpers for Branch Cashflow.

This module is responsible for:
- loading the application configuration from a TOML file,
- providing defaults when no configuration file exists,
- exposing typed dataclasses used by the rest of the application.
"""

import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from .db import DatabaseConfig
from .periods import DEFAULT_SELECTOR, PERIOD_CHOICES
from .profit_first import ProfitFirstTargets

DEFAULT_CONFIG_FILE = "branch_cashflow_config.toml"
DEFAULT_DATABASE_PATH = "data/db/branch_cashflow.sqlite"
DISPLAY_MODES: tuple[str, ...] = ("table", "csv", "both")


@dataclass(frozen=True)
class BranchSeed:
    """A branch created automatically when the store holds no branch yet."""

    id: str
    name: str
    display_name: str
    currency: str = "PHP"
    fiscal_year_start: int = 1


DEFAULT_SEED_BRANCHES: tuple[BranchSeed, ...] = (
    BranchSeed("erjem-glass", "ERJEM Glass", "ERJEM Glass"),
    BranchSeed("erjem-machine-shop", "ERJEM Machine Shop", "ERJEM Machine Shop"),
)


@dataclass(frozen=True)
class AppConfig:
    """
    Application-wide configuration for Branch Cashflow.

    This aggregates:
    - the database configuration (where branches and transactions live),
    - the branch defaults (currency, default branch, branches to seed),
    - the analytics options (default period, top categories, savings rate),
    - the Profit-First target percentages,
    - display options for tables and exports.
    """

    database: DatabaseConfig
    currency: str = "PHP"
    default_branch: Optional[str] = None
    seed_branches: tuple[BranchSeed, ...] = DEFAULT_SEED_BRANCHES
    default_period: str = DEFAULT_SELECTOR
    top_categories: int = 5
    savings_rate: float = 0.5
    profit_first_targets: ProfitFirstTargets = field(default_factory=ProfitFirstTargets)
    display_mode: str = "table"
    percent_decimals: int = 1
    source_path: Optional[Path] = None


def _load_toml(path: Path) -> dict[str, Any]:
    """
    Load a TOML file and return its content as a dictionary.

    Raises:
        FileNotFoundError: if the file does not exist.
        ValueError: if the TOML content cannot be parsed.
    """
    if not path.is_file():
        raise FileNotFoundError(f"Config file not found: {path}")

    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        raise ValueError(f"Failed to parse TOML config file: {path}") from exc


def _section(raw: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    value = raw.get(name) or {}
    if not isinstance(value, Mapping):
        raise ValueError(f"[{name}] must be a table in the configuration file.")
    return value


def _as_float(section: Mapping[str, Any], key: str, default: float, where: str) -> float:
    raw = section.get(key, default)
    try:
        return float(raw)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Invalid value for '{where}.{key}': expected a number.") from exc


def _as_int(section: Mapping[str, Any], key: str, default: int, where: str) -> int:
    raw = section.get(key, default)
    try:
        return int(raw)
    except (TypeError, ValueError) as exc:
        raise ValueError(
            f"Invalid value for '{where}.{key}': expected an integer."
        ) from exc


def _parse_seed_branches(
    branches_section: Mapping[str, Any],
    currency: str,
) -> tuple[BranchSeed, ...]:
    """
    Parse [[branches.seed]] entries.

    When the key is absent the built-in branches are used; an explicit empty
    list disables seeding.
    """
    if "seed" not in branches_section:
        return DEFAULT_SEED_BRANCHES

    raw_seeds = branches_section["seed"]
    if not isinstance(raw_seeds, list):
        raise ValueError("[[branches.seed]] must be an array of tables.")

    seeds: list[BranchSeed] = []
    for item in raw_seeds:
        if not isinstance(item, Mapping) or not item.get("id"):
            raise ValueError("Each [[branches.seed]] entry needs an 'id'.")
        branch_id = str(item["id"])
        name = str(item.get("name") or branch_id)
        seeds.append(
            BranchSeed(
                id=branch_id,
                name=name,
                display_name=str(item.get("display_name") or name),
                currency=str(item.get("currency") or currency),
                fiscal_year_start=_as_int(item, "fiscal_year_start", 1, "branches.seed"),
            )
        )
    return tuple(seeds)


def load_app_config(config_path: Optional[str] = None) -> AppConfig:
    """
    Load the Branch Cashflow application configuration from a TOML file.

    Expected top-level sections in the TOML file
    --------------------------------------------
    [database]
        engine ("sqlite") and path of the SQLite file.

    [branches]
        currency, default (branch id selected when none is given) and an
        optional array of [[branches.seed]] tables (id, name, display_name,
        currency, fiscal_year_start) created when the store is empty.

    [analytics]
        default_period ("3months", "6months", "1year" or "custom"),
        top_categories and savings_rate (share of profit counted as savings).

    [profit_first]
        Target percentages: profit, owner_pay, opex, tax.

    [display]
        mode ("table", "csv" or "both") and percent_decimals.

    Notes
    -----
    - All file paths in the TOML are resolved relative to the directory of
      the TOML file itself.
    - When `config_path` is None and ./branch_cashflow_config.toml does not
      exist, built-in defaults are returned. An explicit path that does not
      exist raises FileNotFoundError.

    Parameters
    ----------
    config_path : str, optional
        Path to the TOML configuration file.

    Returns
    -------
    AppConfig
        Parsed and validated application configuration.
    """
    if config_path is None:
        config_file = Path(DEFAULT_CONFIG_FILE).resolve()
        if not config_file.is_file():
            return AppConfig(
                database=DatabaseConfig(
                    engine="sqlite",
                    path=(config_file.parent / DEFAULT_DATABASE_PATH).resolve(),
                )
            )
    else:
        config_file = Path(config_path).resolve()

    raw = _load_toml(config_file)
    base_dir = config_file.parent

    # 1) Database section
    database_section = _section(raw, "database")
    db_engine = str(database_section.get("engine") or "sqlite")
    db_path_raw = database_section.get("path") or DEFAULT_DATABASE_PATH
    database_config = DatabaseConfig(
        engine=db_engine,
        path=(base_dir / str(db_path_raw)).resolve(),
    )

    # 2) Branches
    branches_section = _section(raw, "branches")
    currency = str(branches_section.get("currency") or "PHP")
    default_branch = branches_section.get("default") or None
    seed_branches = _parse_seed_branches(branches_section, currency)

    # 3) Analytics options
    analytics_section = _section(raw, "analytics")
    default_period = str(analytics_section.get("default_period") or DEFAULT_SELECTOR)
    if default_period not in PERIOD_CHOICES:
        choices = ", ".join(PERIOD_CHOICES)
        raise ValueError(
            f"Invalid analytics.default_period {default_period!r} "
            f"(expected one of: {choices})."
        )
    top_categories = _as_int(analytics_section, "top_categories", 5, "analytics")
    if top_categories < 1:
        raise ValueError("analytics.top_categories must be at least 1.")
    savings_rate = _as_float(analytics_section, "savings_rate", 0.5, "analytics")

    # 4) Profit-First targets
    pf_section = _section(raw, "profit_first")
    defaults = ProfitFirstTargets()
    targets = ProfitFirstTargets(
        profit=_as_float(pf_section, "profit", defaults.profit, "profit_first"),
        owner_pay=_as_float(pf_section, "owner_pay", defaults.owner_pay, "profit_first"),
        opex=_as_float(pf_section, "opex", defaults.opex, "profit_first"),
        tax=_as_float(pf_section, "tax", defaults.tax, "profit_first"),
    )

    # 5) Display options
    display_section = _section(raw, "display")
    display_mode = str(display_section.get("mode", "table"))
    if display_mode not in DISPLAY_MODES:
        raise ValueError(f"Invalid display.mode {display_mode!r}.")
    try:
        percent_decimals = int(display_section.get("percent_decimals", 1))
    except (TypeError, ValueError):
        percent_decimals = 1

    return AppConfig(
        database=database_config,
        currency=currency,
        default_branch=str(default_branch) if default_branch else None,
        seed_branches=seed_branches,
        default_period=default_period,
        top_categories=top_categories,
        savings_rate=savings_rate,
        profit_first_targets=targets,
        display_mode=display_mode,
        percent_decimals=percent_decimals,
        source_path=config_file,
    )
