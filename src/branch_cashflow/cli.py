# Branch Cashflow - Multi-branch cash-flow tracking & analytics
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Command-Line Interface (CLI) for Branch Cashflow.

This module wires together the main building blocks of Branch Cashflow:

- global configuration (database, branches, analytics and display options),
- branch selection (an explicit BranchContext built from --branch or config),
- transaction import & database access,
- the analytics engine and the comparison reports,
- view helpers (tabular rendering and CSV export).

The CLI is intentionally thin: it does not implement any financial logic
itself. It orchestrates the underlying modules based on command-line
arguments and the configuration file.


Commands
--------

    branches list
    branches create ID NAME [--display-name ...] [--currency ...]
    transactions list      [period options] [--limit N]
    transactions add       --date YYYY-MM-DD --type income|expense --amount X
    transactions delete    ID
    transactions import    PATH [--daily]
    analytics              [period options] [--display-mode ...] [--output DIR]
    compare months         YYYY-MM YYYY-MM
    compare years          YEAR YEAR
    personal               --year YYYY --month M

Global options (before the command): --config, --branch, --log-level,
--version.


Period options
--------------

    --period {3months,6months,1year,custom}
    --from-date YYYY-MM-DD / --to-date YYYY-MM-DD
    --month M / --year YYYY

Priority: --month/--year, then --from-date/--to-date, then --period, then
analytics.default_period from the configuration. A custom range with a
single bound falls back to the default 6-month window (a warning is logged).


CSV export
----------

When the display mode includes 'csv', the analytics command writes one file
per table with a timestamp-based name into the output directory
(``data/output`` by default):

    analytics_summary_<timestamp>.csv
    analytics_monthly_<timestamp>.csv
    analytics_categories_<timestamp>.csv
    analytics_category_trends_<timestamp>.csv
    analytics_expansion_<timestamp>.csv
    analytics_profit_first_<timestamp>.csv


Error handling
--------------

Expected failures (unknown branch or transaction, invalid files, invalid
configuration) are reported as a one-line message and exit with a non-zero
status. Database errors are reported the same way; no report is computed
from a failed fetch.
"""

import argparse
import logging
import sqlite3
from datetime import date, datetime
from pathlib import Path
from typing import Optional

import pandas as pd

from . import __version__
from .config import DISPLAY_MODES, AppConfig, load_app_config
from .db import TRANSACTION_TYPES, UNCATEGORIZED, has_transactions, init_database
from .periods import PERIOD_CHOICES, determine_period_from_args
from .transactions_service import (
    BranchContext,
    add_transaction,
    analyze_branch,
    create_branch,
    delete_transaction,
    import_file,
    list_branches,
    list_transactions,
    monthly_comparison_for_branch,
    personal_report_for_branch,
    resolve_branch_context,
    year_comparison_for_branch,
)
from .views import (
    categories_to_dataframe,
    category_trends_to_dataframe,
    comparison_to_dataframe,
    expansion_to_dataframe,
    format_currency,
    format_percentage,
    monthly_metrics_to_dataframe,
    personal_report_to_dataframe,
    profit_first_to_dataframe,
    summary_to_dataframe,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------


def _add_period_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--period",
        choices=list(PERIOD_CHOICES),
        help=(
            "Reporting window: trailing 3 months, 6 months, 1 year, or "
            "'custom' with --from-date/--to-date. Defaults to "
            "analytics.default_period from the configuration."
        ),
    )
    parser.add_argument(
        "--from-date",
        dest="from_date",
        help="Custom period start date (YYYY-MM-DD), inclusive.",
    )
    parser.add_argument(
        "--to-date",
        dest="to_date",
        help="Custom period end date (YYYY-MM-DD), inclusive.",
    )
    parser.add_argument(
        "--month",
        type=int,
        choices=range(1, 13),
        metavar="M",
        help="Single calendar month (1-12). Uses --year or the current year.",
    )
    parser.add_argument(
        "--year",
        type=int,
        help="Calendar year. Alone, selects the full year.",
    )


def _build_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser for the CLI."""
    ap = argparse.ArgumentParser(
        prog="branch-cashflow",
        description=(
            "Branch Cashflow - Multi-branch cash-flow tracking & analytics. "
            "Imports income and expense transactions per branch and reports "
            "monthly metrics, expansion readiness and Profit-First allocation."
        ),
    )

    ap.add_argument(
        "--version",
        action="store_true",
        help="Show the installed version of branch_cashflow and exit.",
    )
    ap.add_argument(
        "--config",
        dest="config_path",
        help=(
            "Path to the TOML configuration file. If omitted, "
            "'branch_cashflow_config.toml' in the current directory is used "
            "when it exists."
        ),
    )
    ap.add_argument(
        "--branch",
        dest="branch_id",
        help=(
            "Branch to work on. Defaults to branches.default from the "
            "configuration, then to the first branch."
        ),
    )
    ap.add_argument(
        "--log-level",
        dest="log_level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default: WARNING).",
    )

    subparsers = ap.add_subparsers(dest="command", metavar="command")

    # ------------------------------------------------------------------
    # branches
    # ------------------------------------------------------------------
    branches_parser = subparsers.add_parser("branches", help="List or create branches.")
    branches_sub = branches_parser.add_subparsers(
        dest="branches_command", metavar="subcommand"
    )
    branches_sub.add_parser("list", help="List active branches.")
    branches_create = branches_sub.add_parser("create", help="Create a branch.")
    branches_create.add_argument("new_branch_id", metavar="ID", help="Branch id (slug).")
    branches_create.add_argument("name", help="Branch name.")
    branches_create.add_argument("--display-name", dest="display_name")
    branches_create.add_argument(
        "--currency",
        help="Currency code (defaults to branches.currency from the configuration).",
    )
    branches_create.add_argument(
        "--fiscal-year-start",
        dest="fiscal_year_start",
        type=int,
        default=1,
        help="First month of the fiscal year (1-12, default: 1).",
    )

    # ------------------------------------------------------------------
    # transactions
    # ------------------------------------------------------------------
    tx_parser = subparsers.add_parser(
        "transactions",
        help="List, add, delete or import transactions of the selected branch.",
    )
    tx_sub = tx_parser.add_subparsers(dest="transactions_command", metavar="subcommand")

    tx_list = tx_sub.add_parser("list", help="List transactions for a period.")
    _add_period_arguments(tx_list)
    tx_list.add_argument(
        "--all",
        dest="all_dates",
        action="store_true",
        help="Ignore period options and list every transaction.",
    )
    tx_list.add_argument("--limit", type=int, help="Show at most N rows (newest last).")

    tx_add = tx_sub.add_parser("add", help="Record a single transaction.")
    tx_add.add_argument("--date", dest="tx_date", required=True, help="YYYY-MM-DD")
    tx_add.add_argument(
        "--type", dest="tx_type", required=True, choices=list(TRANSACTION_TYPES)
    )
    tx_add.add_argument("--amount", type=float, required=True)
    tx_add.add_argument("--category", default=UNCATEGORIZED)
    tx_add.add_argument("--description")
    tx_add.add_argument("--source")
    tx_add.add_argument(
        "--personal",
        dest="is_personal",
        action="store_true",
        help="Mark an expense as a personal draw.",
    )

    tx_delete = tx_sub.add_parser("delete", help="Permanently delete a transaction.")
    tx_delete.add_argument("transaction_id", type=int, metavar="ID")

    tx_import = tx_sub.add_parser(
        "import",
        help="Import a CSV / Excel file (.csv, .xlsx, .xlsm).",
    )
    tx_import.add_argument("path", help="File to import.")
    tx_import.add_argument(
        "--daily",
        action="store_true",
        help="Read the file as a daily ledger (income / expenses / personal columns).",
    )

    # ------------------------------------------------------------------
    # analytics
    # ------------------------------------------------------------------
    analytics_parser = subparsers.add_parser(
        "analytics", help="Compute the analytics report for a period."
    )
    _add_period_arguments(analytics_parser)
    analytics_parser.add_argument(
        "--display-mode",
        dest="display_mode",
        choices=list(DISPLAY_MODES),
        help=(
            "Override display.mode from the configuration. 'table' prints to "
            "stdout, 'csv' writes CSV files only, 'both' does both."
        ),
    )
    analytics_parser.add_argument(
        "--output",
        dest="output_dir",
        help="Output directory for CSV files (default: data/output).",
    )

    # ------------------------------------------------------------------
    # compare
    # ------------------------------------------------------------------
    compare_parser = subparsers.add_parser("compare", help="Compare two months or years.")
    compare_sub = compare_parser.add_subparsers(dest="compare_command", metavar="subcommand")
    compare_months_p = compare_sub.add_parser("months", help="Compare two months.")
    compare_months_p.add_argument("first", metavar="YYYY-MM")
    compare_months_p.add_argument("second", metavar="YYYY-MM")
    compare_years_p = compare_sub.add_parser("years", help="Compare two years.")
    compare_years_p.add_argument("first", type=int, metavar="YEAR")
    compare_years_p.add_argument("second", type=int, metavar="YEAR")

    # ------------------------------------------------------------------
    # personal
    # ------------------------------------------------------------------
    personal_parser = subparsers.add_parser(
        "personal", help="Personal expenses of one month."
    )
    personal_parser.add_argument("--year", type=int, required=True)
    personal_parser.add_argument(
        "--month", type=int, required=True, choices=range(1, 13), metavar="M"
    )

    return ap


def _parse_date(value: str) -> date:
    """Parse a YYYY-MM-DD CLI argument, exiting with a message when invalid."""
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise SystemExit(f"Invalid date format: {value!r}. Expected YYYY-MM-DD.") from exc


def _parse_year_month(value: str) -> tuple[int, int]:
    try:
        parsed = datetime.strptime(value, "%Y-%m")
    except ValueError as exc:
        raise SystemExit(f"Invalid month: {value!r}. Expected YYYY-MM.") from exc
    return parsed.year, parsed.month


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------


def _handle_branches(args: argparse.Namespace, config: AppConfig) -> None:
    if args.branches_command == "create":
        branch = create_branch(
            config,
            args.new_branch_id,
            args.name,
            display_name=args.display_name,
            currency=args.currency,
            fiscal_year_start=args.fiscal_year_start,
        )
        print(f"Created branch {branch.id} ({branch.display_name}, {branch.currency}).")
        return

    branches = list_branches(config)
    if not branches:
        print("No branches found.")
        return

    rows = [
        {
            "id": b.id,
            "display_name": b.display_name,
            "currency": b.currency,
            "fiscal_year_start": b.fiscal_year_start,
            "created_at": b.created_at.date().isoformat() if b.created_at else "",
        }
        for b in branches
    ]
    print(pd.DataFrame(rows).to_string(index=False))


def _handle_transactions(args: argparse.Namespace, ctx: BranchContext) -> None:
    subcmd = args.transactions_command
    config = ctx.config

    if subcmd == "import":
        path = Path(args.path)
        if not path.is_file():
            raise SystemExit(f"File to import not found: {path}")
        print(f"Importing transactions from {path}...")
        stats = import_file(config, path, branch_id=ctx.branch_id, daily=args.daily)
        print(
            f"Imported batch #{stats.batch_id}: "
            f"{stats.rows_inserted} transactions, "
            f"{stats.duplicates_skipped} duplicates skipped."
        )
        if stats.branches:
            print(f"Branches: {', '.join(stats.branches)}")
        return

    if subcmd == "add":
        tx = add_transaction(
            ctx,
            tx_date=_parse_date(args.tx_date),
            tx_type=args.tx_type,
            amount=args.amount,
            category=args.category,
            description=args.description,
            source=args.source,
            is_personal=args.is_personal,
        )
        print(
            f"Added transaction #{tx.id}: {tx.date.isoformat()} {tx.type} "
            f"{tx.category} {format_currency(tx.amount, ctx.branch.currency)}"
        )
        return

    if subcmd == "delete":
        tx = delete_transaction(ctx, args.transaction_id)
        print(
            f"Deleted transaction #{tx.id}: {tx.date.isoformat()} {tx.type} "
            f"{tx.category} {tx.amount:.2f}"
        )
        return

    if subcmd == "list":
        if args.all_dates:
            period = None
            print(f"Branch: {ctx.branch.display_name} | all dates")
        else:
            period = determine_period_from_args(args, config.default_period)
            print(
                f"Branch: {ctx.branch.display_name} | {period.label} "
                f"({period.start.isoformat()} → {period.end.isoformat()})"
            )
        df = list_transactions(ctx, period)
        if df.empty:
            print("No transactions found for the given criteria.")
            return
        if args.limit is not None:
            df = df.tail(args.limit)
        df_display = df.drop(columns=["branch_id"]).copy()
        df_display["date"] = df_display["date"].dt.date.astype(str)
        print()
        print(df_display.to_string(index=False))
        return

    print(
        "No transactions subcommand specified. "
        "Available subcommands are: 'list', 'add', 'delete', 'import'."
    )


def _write_csv(df: pd.DataFrame, output_dir: Path, name: str, timestamp: str) -> None:
    path = output_dir / f"{name}_{timestamp}.csv"
    df.to_csv(path, index=False)
    print(f"Wrote {path} ({len(df)} rows)")


def _handle_analytics(args: argparse.Namespace, ctx: BranchContext) -> None:
    config = ctx.config
    period = determine_period_from_args(args, config.default_period)
    result = analyze_branch(ctx, period)
    decimals = config.percent_decimals
    currency = ctx.branch.currency

    tables = {
        "analytics_summary": summary_to_dataframe(result, decimals),
        "analytics_monthly": monthly_metrics_to_dataframe(result.monthly_metrics, decimals),
        "analytics_categories": categories_to_dataframe(result.top_categories),
        "analytics_category_trends": category_trends_to_dataframe(
            result.category_trends, decimals
        ),
        "analytics_expansion": expansion_to_dataframe(result.expansion, decimals),
        "analytics_profit_first": profit_first_to_dataframe(result.profit_first, decimals),
    }

    display_mode = args.display_mode or config.display_mode

    print(
        f"Branch: {ctx.branch.display_name} | {period.label} "
        f"({period.start.isoformat()} → {period.end.isoformat()})"
    )
    print(f"Transactions in period: {result.transaction_count}")
    if result.transaction_count == 0:
        print("Warning: no transactions were found for the selected period.")

    if display_mode in {"table", "both"}:
        print()
        print(
            f"Income {format_currency(result.income, currency)} | "
            f"Expenses {format_currency(result.expenses, currency)} | "
            f"Profit {format_currency(result.gross_profit, currency)} | "
            f"Margin {result.gross_margin:.{decimals}f}% | "
            f"Growth {format_percentage(result.revenue_growth, decimals)}"
        )
        print(
            f"Expansion readiness: {result.expansion.score}/100 "
            f"grade {result.expansion.grade} ({result.expansion.status})"
        )
        titles = {
            "analytics_summary": "Summary",
            "analytics_monthly": "Monthly metrics",
            "analytics_categories": "Top expense categories",
            "analytics_category_trends": "Category trends",
            "analytics_expansion": "Expansion readiness",
            "analytics_profit_first": "Profit First",
        }
        for key, df in tables.items():
            print()
            print(f"=== {titles[key]} ===")
            if df.empty:
                print("(no data)")
            else:
                print(df.to_string(index=False))

    if display_mode in {"csv", "both"}:
        output_dir = Path(args.output_dir) if args.output_dir else Path("data/output")
        output_dir.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now().strftime("%Y-%m-%d-%H-%M-%S")
        for name, df in tables.items():
            _write_csv(df, output_dir, name, timestamp)


def _handle_compare(args: argparse.Namespace, ctx: BranchContext) -> None:
    if args.compare_command == "months":
        comparison = monthly_comparison_for_branch(
            ctx, _parse_year_month(args.first), _parse_year_month(args.second)
        )
    elif args.compare_command == "years":
        comparison = year_comparison_for_branch(ctx, args.first, args.second)
    else:
        print("No compare subcommand specified. Use 'months' or 'years'.")
        return

    print(
        f"Branch: {ctx.branch.display_name} | "
        f"{comparison.current.period.label} (current) vs "
        f"{comparison.previous.period.label} (previous)"
    )
    print()
    print(comparison_to_dataframe(comparison, ctx.config.percent_decimals).to_string(index=False))

    if args.compare_command == "years":
        for summary in (comparison.current, comparison.previous):
            print()
            print(f"=== {summary.period.label} by month ===")
            monthly = monthly_metrics_to_dataframe(summary.monthly_metrics)
            print("(no data)" if monthly.empty else monthly.to_string(index=False))


def _handle_personal(args: argparse.Namespace, ctx: BranchContext) -> None:
    report = personal_report_for_branch(ctx, args.year, args.month)
    currency = ctx.branch.currency

    print(f"Branch: {ctx.branch.display_name} | {report.period.label}")
    print(
        f"Personal expenses {format_currency(report.total_personal, currency)} | "
        f"Income {format_currency(report.total_income, currency)} | "
        f"Ratio {report.personal_ratio:.1f}%"
    )
    if report.transactions.empty:
        print("No personal expenses recorded for this month.")
        return

    print()
    print("=== By category ===")
    print(personal_report_to_dataframe(report).to_string(index=False))

    print()
    print("=== Transactions ===")
    df_display = report.transactions[["id", "date", "category", "amount", "description"]].copy()
    df_display["date"] = df_display["date"].dt.date.astype(str)
    print(df_display.to_string(index=False))


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main(argv: Optional[list[str]] = None) -> None:
    """Entry point for the Branch Cashflow CLI.

    Parses command-line arguments, configures logging, loads the
    configuration, initializes the database, selects the branch and runs the
    requested command.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(f"branch_cashflow version {__version__}")
        return

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command is None:
        parser.print_help()
        return

    try:
        config = load_app_config(args.config_path)
    except (FileNotFoundError, ValueError) as exc:
        parser.error(str(exc))

    try:
        init_database(config.database)

        if args.command == "branches":
            _handle_branches(args, config)
            return

        ctx = resolve_branch_context(config, args.branch_id)

        if args.command != "transactions" and not has_transactions(
            config.database, ctx.branch_id
        ):
            print(
                f"Warning: branch {ctx.branch_id!r} has no transactions yet; "
                "use 'transactions import' to load data."
            )

        if args.command == "transactions":
            _handle_transactions(args, ctx)
        elif args.command == "analytics":
            _handle_analytics(args, ctx)
        elif args.command == "compare":
            _handle_compare(args, ctx)
        elif args.command == "personal":
            _handle_personal(args, ctx)
    except (LookupError, ValueError) as exc:
        raise SystemExit(f"Error: {exc}") from exc
    except sqlite3.Error as exc:
        logger.exception("Database error")
        raise SystemExit(f"Database error: {exc}") from exc


if __name__ == "__main__":
    main()
