# Branch Cashflow - Multi-branch cash-flow tracking & analytics
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.


"""
High-level services for branches, transactions and reports.

This module sits between:
- the low-level database helpers in `db.py` and the file readers in `io.py`,
- the pure computations (`analytics.py`, `comparison.py`), and
- user-facing layers such as the CLI.

Responsibilities
----------------
1) Branch selection
   - Build an explicit `BranchContext` (configuration + selected branch)
     instead of relying on any global "current branch" state.
   - Seed the configured default branches when the store has none.

2) Transactions
   - Fetch the full transaction set of a branch (the engine filters it).
   - Add and delete single transactions.
   - Import CSV / Excel files, including multi-branch files and the daily
     ledger layout.

3) Reports
   - Analytics for a reporting period.
   - Month-to-month and year-to-year comparisons.
   - Personal expense report of a month.

Design notes
------------
- Store errors (`sqlite3.Error`) are not caught here: they propagate to the
  caller, which reports them and does not run any computation.
- Reports always load the full transaction set of the branch and filter in
  memory, so every report sees the same data for the same branch.
"""

import logging
import os
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Optional, Union

import pandas as pd

from . import db
from .analytics import AnalyticsResult, compute_analytics
from .comparison import (
    PeriodComparison,
    PersonalExpenseReport,
    compare_months,
    compare_years,
    personal_expense_report,
)
from .config import AppConfig
from .db import Branch, ImportStats, NewTransaction, Transaction
from .io import read_daily_sheet, read_transactions
from .periods import Period, filter_transactions_by_period

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BranchContext:
    """
    Explicit application state for one selected branch.

    Every service below takes the context as its first argument; nothing in
    the package reads a global "current branch".
    """

    config: AppConfig
    branch: Branch

    @property
    def branch_id(self) -> str:
        return self.branch.id


# ---------------------------------------------------------------------------
# Branches
# ---------------------------------------------------------------------------


def seed_default_branches(
    app_config: AppConfig,
    *,
    created_by: str = "system",
) -> list[Branch]:
    """
    Create the configured seed branches if the store holds no branch at all.

    Returns the branches that were created (an empty list when the store
    already had branches).
    """
    if db.list_branches(app_config.database, include_inactive=True):
        return []

    created = []
    for seed in app_config.seed_branches:
        created.append(
            db.create_branch(
                app_config.database,
                seed.id,
                seed.name,
                display_name=seed.display_name,
                created_by=created_by,
                currency=seed.currency,
                fiscal_year_start=seed.fiscal_year_start,
            )
        )
    if created:
        logger.info("Seeded %d default branch(es)", len(created))
    return created


def list_branches(app_config: AppConfig) -> list[Branch]:
    """Active branches, seeding the defaults first when the store is empty."""
    seed_default_branches(app_config)
    return db.list_branches(app_config.database)


def create_branch(
    app_config: AppConfig,
    branch_id: str,
    name: str,
    *,
    display_name: Optional[str] = None,
    currency: Optional[str] = None,
    fiscal_year_start: int = 1,
    created_by: str = "cli",
) -> Branch:
    return db.create_branch(
        app_config.database,
        branch_id,
        name,
        display_name=display_name,
        created_by=created_by,
        currency=currency or app_config.currency,
        fiscal_year_start=fiscal_year_start,
    )


def resolve_branch_context(
    app_config: AppConfig,
    preferred_branch_id: Optional[str] = None,
) -> BranchContext:
    """
    Select the branch to work on.

    Order of preference:
        1. `preferred_branch_id` (e.g. the --branch CLI option),
        2. the configured default branch, when it exists,
        3. the first active branch (ordered by name).

    Raises
    ------
    LookupError
        If the preferred branch does not exist, or no branch is available.
    """
    branches = list_branches(app_config)

    if preferred_branch_id:
        branch = db.get_branch(app_config.database, preferred_branch_id)
        if branch is None:
            raise LookupError(f"Unknown branch: {preferred_branch_id!r}")
        return BranchContext(config=app_config, branch=branch)

    if app_config.default_branch:
        branch = db.get_branch(app_config.database, app_config.default_branch)
        if branch is not None:
            return BranchContext(config=app_config, branch=branch)
        logger.warning(
            "Configured default branch %r does not exist; using the first branch.",
            app_config.default_branch,
        )

    if not branches:
        raise LookupError("No branch available. Create one with 'branches create'.")
    return BranchContext(config=app_config, branch=branches[0])


# ---------------------------------------------------------------------------
# Transactions
# ---------------------------------------------------------------------------


def fetch_transactions(ctx: BranchContext) -> pd.DataFrame:
    """Load the full transaction set of the selected branch."""
    return db.load_transactions(ctx.config.database, ctx.branch_id)


def list_transactions(
    ctx: BranchContext,
    period: Optional[Period] = None,
) -> pd.DataFrame:
    """Transactions of the selected branch, optionally restricted to a period."""
    df = fetch_transactions(ctx)
    if period is None:
        return df
    return filter_transactions_by_period(df, period)


def add_transaction(
    ctx: BranchContext,
    *,
    tx_date: date,
    tx_type: str,
    amount: float,
    category: str = db.UNCATEGORIZED,
    description: Optional[str] = None,
    source: Optional[str] = None,
    is_personal: bool = False,
) -> Transaction:
    """Record one manual transaction for the selected branch."""
    new_tx = NewTransaction(
        branch_id=ctx.branch_id,
        date=tx_date,
        type=tx_type,
        amount=amount,
        category=category,
        description=description,
        source=source,
        is_personal=is_personal,
        entry_method="manual",
    )
    return db.insert_transaction(ctx.config.database, new_tx)


def delete_transaction(ctx: BranchContext, transaction_id: int) -> Transaction:
    """
    Delete a transaction of the selected branch and return what was removed.

    Raises
    ------
    LookupError
        If the transaction does not exist or belongs to another branch.
    """
    existing = db.get_transaction(ctx.config.database, transaction_id)
    if existing is None or existing.branch_id != ctx.branch_id:
        raise LookupError(
            f"Transaction #{transaction_id} not found in branch {ctx.branch_id!r}."
        )
    db.delete_transaction(ctx.config.database, transaction_id)
    return existing


def import_file(
    app_config: AppConfig,
    path: Union[str, "os.PathLike[str]"],
    *,
    branch_id: Optional[str] = None,
    daily: bool = False,
    created_by: str = "import",
) -> ImportStats:
    """
    Import a CSV / Excel file into the store.

    Rows carrying their own branch id go to that branch (created if
    missing); other rows go to `branch_id`. With `daily=True` the file is
    read as a daily ledger (see `io.read_daily_sheet`); otherwise the layout
    is detected from the columns.

    Raises
    ------
    ValueError
        If the file cannot be normalized or some rows have no branch.
    """
    file_path = Path(path)
    if daily:
        df = read_daily_sheet(file_path, branch_id=branch_id)
        entry_method = "daily-upload"
    else:
        df = read_transactions(file_path, branch_id=branch_id)
        entry_method = "bulk"

    source_type = "csv" if file_path.suffix.lower() == ".csv" else "excel"

    stats = db.import_transactions(
        df,
        app_config.database,
        source_type=source_type,
        source_label=str(file_path),
        branch_id=branch_id,
        entry_method=entry_method,
        created_by=created_by,
    )
    if len(stats.branches) > 1:
        logger.info(
            "Imported %s into %d branches: %s",
            file_path.name,
            len(stats.branches),
            ", ".join(stats.branches),
        )
    return stats


# ---------------------------------------------------------------------------
# Reports
# ---------------------------------------------------------------------------


def analyze_branch(ctx: BranchContext, period: Period) -> AnalyticsResult:
    """Run the analytics engine on the selected branch for a period."""
    df = fetch_transactions(ctx)
    return compute_analytics(
        df,
        period,
        top_n=ctx.config.top_categories,
        profit_first_targets=ctx.config.profit_first_targets,
    )


def monthly_comparison_for_branch(
    ctx: BranchContext,
    first: tuple[int, int],
    second: tuple[int, int],
) -> PeriodComparison:
    return compare_months(
        fetch_transactions(ctx),
        first,
        second,
        savings_rate=ctx.config.savings_rate,
    )


def year_comparison_for_branch(
    ctx: BranchContext,
    first: int,
    second: int,
) -> PeriodComparison:
    return compare_years(
        fetch_transactions(ctx),
        first,
        second,
        savings_rate=ctx.config.savings_rate,
    )


def personal_report_for_branch(
    ctx: BranchContext,
    year: int,
    month: int,
) -> PersonalExpenseReport:
    return personal_expense_report(fetch_transactions(ctx), year, month)
