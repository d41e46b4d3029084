# Branch Cashflow - Multi-branch cash-flow tracking & analytics
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
I/O module for Branch Cashflow.

This module reads transactions from CSV or Excel files and normalizes them
into the single transaction layout consumed by the store and the analytics
engine. It is the only place where raw spreadsheet values are interpreted:
the engine never parses dates, amounts or categories.

Supported input layouts
-----------------------

1) Transaction list (one row per transaction)
   ------------------------------------------
       date, type, category, amount, description, source, is_personal,
       branch_id

   Only ``date`` and ``amount`` are required. Column names are
   case-insensitive and the following aliases are accepted:

   - ``branch`` / ``branchid``         → ``branch_id``
   - ``ispersonal`` / ``personal``     → ``is_personal``
   - ``label`` / ``details``           → ``description``

2) Daily ledger (wide layout, one row per day)
   -------------------------------------------
       Date, Income details, Income Amount, Expenses details,
       Expenses Amount, Personal Details, Personal Expenses

   Each row expands into up to three transactions (income, business expense,
   personal expense). Zero amounts are skipped.

Normalization rules
-------------------
- ``date``: ISO strings, ``datetime`` values and Excel serial numbers are
  all converted to a ``datetime64[ns]`` calendar date. Timezone-aware values
  keep their wall-clock date. Bare numbers are read as Excel serials only
  in the five-digit range; others (e.g. "2024") are invalid. Unparsable or
  missing dates raise ValueError.
- ``type``: lowercased; missing values default to ``"expense"``; unknown
  values are treated as expenses (with a warning).
- ``category``: blank values become ``"Uncategorized"``.
- ``amount``: thousands separators and the peso sign are stripped; values
  that are not numbers, or are negative, become ``0.0``.
- ``is_personal``: True for booleans True, numbers equal to 1 and the
  strings "true", "yes", "y", "1" (case-insensitive).
"""

import logging
import os
import re
from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Optional, Union

import pandas as pd

from .db import TRANSACTION_TYPES, UNCATEGORIZED

logger = logging.getLogger(__name__)

# Excel's day zero once its 1900 leap-year bug is accounted for.
EXCEL_EPOCH = date(1899, 12, 30)

NORMALIZED_COLUMNS: list[str] = [
    "branch_id",
    "date",
    "type",
    "category",
    "amount",
    "description",
    "source",
    "is_personal",
]

_COLUMN_ALIASES = {
    "branch": "branch_id",
    "branchid": "branch_id",
    "branch id": "branch_id",
    "ispersonal": "is_personal",
    "personal": "is_personal",
    "is personal": "is_personal",
    "label": "description",
    "details": "description",
}

_DAILY_SHEET_COLUMNS = {
    "date",
    "income details",
    "income amount",
    "expenses details",
    "expenses amount",
    "personal details",
    "personal expenses",
}

_TRUE_STRINGS = {"true", "yes", "y", "1"}
_AMOUNT_NOISE = re.compile(r"[,\s₱]|PHP", flags=re.IGNORECASE)
_NUMBER_STRING = re.compile(r"^\d{1,6}(\.\d+)?$")

# Five-digit serials (1927 to 2173). Bare numbers outside that range,
# such as a year like "2024", are not dates.
MIN_EXCEL_SERIAL = 10_000
MAX_EXCEL_SERIAL = 99_999


def excel_serial_to_date(serial: float) -> date:
    """Convert an Excel serial day number into a calendar date."""
    return EXCEL_EPOCH + timedelta(days=int(float(serial)))


def _is_missing(value) -> bool:
    if value is None:
        return True
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def _serial_date(serial: float) -> Optional[pd.Timestamp]:
    if not MIN_EXCEL_SERIAL <= serial <= MAX_EXCEL_SERIAL:
        return None
    return pd.Timestamp(excel_serial_to_date(serial))


def _parse_date_value(value) -> Optional[pd.Timestamp]:
    """Parse one raw date cell. Returns None when the value cannot be parsed."""
    if _is_missing(value):
        return None

    if isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        return _serial_date(float(value))

    if isinstance(value, (datetime, date)):
        ts = pd.Timestamp(value)
    else:
        text = str(value).strip()
        if not text:
            return None
        if _NUMBER_STRING.match(text):
            return _serial_date(float(text))
        try:
            ts = pd.Timestamp(text)
        except (ValueError, TypeError):
            return None

    if ts is pd.NaT:
        return None
    if ts.tzinfo is not None:
        ts = ts.tz_localize(None)
    return ts.normalize()


def _parse_amount(value) -> float:
    """Parse a raw amount cell; anything that is not a non-negative number is 0."""
    if _is_missing(value) or isinstance(value, bool):
        return 0.0

    if isinstance(value, (int, float)):
        amount = float(value)
    else:
        text = _AMOUNT_NOISE.sub("", str(value))
        try:
            amount = float(text)
        except ValueError:
            return 0.0

    if amount != amount or amount < 0:  # NaN or negative
        return 0.0
    return amount


def _parse_bool(value) -> bool:
    if _is_missing(value):
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return float(value) == 1.0
    return str(value).strip().lower() in _TRUE_STRINGS


def _parse_type(value) -> str:
    if _is_missing(value) or not str(value).strip():
        return "expense"
    tx_type = str(value).strip().lower()
    if tx_type not in TRANSACTION_TYPES:
        logger.warning("Unknown transaction type %r treated as expense", value)
        return "expense"
    return tx_type


def _parse_text(value) -> str:
    if _is_missing(value):
        return ""
    return str(value).strip()


def _normalize_column_names(df: pd.DataFrame) -> pd.DataFrame:
    """Lowercase/strip column names and apply aliases (without overwriting)."""
    d = df.copy()
    d.columns = [str(c).strip().lower() for c in d.columns]
    renames = {}
    for col in d.columns:
        target = _COLUMN_ALIASES.get(col)
        if target and target not in d.columns and target not in renames.values():
            renames[col] = target
    if renames:
        d = d.rename(columns=renames)
    return d


def normalize_transactions(
    df: pd.DataFrame,
    *,
    branch_id: Optional[str] = None,
) -> pd.DataFrame:
    """
    Normalize raw transaction rows into the canonical transaction layout.

    Parameters
    ----------
    df:
        Raw rows, typically read from a spreadsheet. Column names are matched
        case-insensitively (see module docstring for accepted aliases).
    branch_id:
        Branch to assign to rows that carry no branch id of their own.

    Returns
    -------
    pandas.DataFrame
        A DataFrame with exactly these columns, in this order:
        branch_id, date, type, category, amount, description, source,
        is_personal.

    Raises
    ------
    ValueError
        If the ``date`` or ``amount`` column is missing, or if any date
        cannot be parsed.
    """
    d = _normalize_column_names(df)
    cols = set(d.columns)

    if not {"date", "amount"}.issubset(cols):
        raise ValueError(
            "Invalid transactions structure. Expected at least the columns "
            "'date' and 'amount' (optional: type, category, description, "
            "source, is_personal, branch_id; names are case-insensitive)."
        )

    n = len(d)

    def _column(name: str) -> pd.Series:
        if name in d.columns:
            return d[name]
        return pd.Series([None] * n, index=d.index, dtype="object")

    dates = [_parse_date_value(v) for v in d["date"]]
    bad_rows = [i for i, ts in enumerate(dates) if ts is None]
    if bad_rows:
        shown = ", ".join(str(i + 1) for i in bad_rows[:10])
        raise ValueError(f"Invalid values in 'date' column (data rows: {shown}).")

    branch_values = [_parse_text(v) or (branch_id or "") for v in _column("branch_id")]
    categories = [_parse_text(v) or UNCATEGORIZED for v in _column("category")]

    out = pd.DataFrame(
        {
            "branch_id": branch_values,
            "date": pd.to_datetime(pd.Series(dates, dtype="object")),
            "type": [_parse_type(v) for v in _column("type")],
            "category": categories,
            "amount": [_parse_amount(v) for v in d["amount"]],
            "description": [_parse_text(v) for v in _column("description")],
            "source": [_parse_text(v) for v in _column("source")],
            "is_personal": [_parse_bool(v) for v in _column("is_personal")],
        }
    )
    out["amount"] = out["amount"].astype(float)
    out["is_personal"] = out["is_personal"].astype(bool)

    zero_rows = int((out["amount"] == 0.0).sum())
    if zero_rows:
        logger.warning("%d row(s) have a zero or unreadable amount", zero_rows)

    return out[NORMALIZED_COLUMNS]


def _read_table(path: Union[str, "os.PathLike[str]"]) -> pd.DataFrame:
    """Read a CSV or Excel workbook (first sheet) into a raw DataFrame."""
    suffix = Path(path).suffix.lower()
    if suffix == ".csv":
        return pd.read_csv(path)
    if suffix in {".xlsx", ".xlsm"}:
        return pd.read_excel(path, engine="openpyxl")
    raise ValueError(
        f"Unsupported file type {suffix!r}. Expected .csv, .xlsx or .xlsm."
    )


def is_daily_sheet(df: pd.DataFrame) -> bool:
    """Return True if the raw columns follow the daily-ledger layout."""
    cols = {str(c).strip().lower() for c in df.columns}
    return {"date", "income amount", "expenses amount"}.issubset(cols)


def expand_daily_sheet(
    df: pd.DataFrame,
    *,
    branch_id: Optional[str] = None,
) -> pd.DataFrame:
    """
    Expand daily-ledger rows into normalized transactions.

    Each raw row produces:
    - an income transaction (category "Income") if ``Income Amount`` > 0,
    - an expense transaction (category "Expense") if ``Expenses Amount`` > 0,
    - a personal expense (category "Personal", is_personal=True) if
      ``Personal Expenses`` > 0.

    The detail columns are used both as description and source.
    """
    d = df.copy()
    d.columns = [str(c).strip().lower() for c in d.columns]
    missing = {"date", "income amount", "expenses amount"}.difference(d.columns)
    if missing:
        cols = ", ".join(sorted(missing))
        raise ValueError(f"Daily sheet is missing required column(s): {cols}")

    layout = (
        ("income amount", "income details", "income", "Income", False),
        ("expenses amount", "expenses details", "expense", "Expense", False),
        ("personal expenses", "personal details", "expense", "Personal", True),
    )

    records = []
    for _, row in d.iterrows():
        for amount_col, details_col, tx_type, category, personal in layout:
            amount = _parse_amount(row.get(amount_col))
            if amount <= 0:
                continue
            details = _parse_text(row.get(details_col))
            records.append(
                {
                    "branch_id": branch_id or "",
                    "date": row["date"],
                    "type": tx_type,
                    "category": category,
                    "amount": amount,
                    "description": details,
                    "source": details,
                    "is_personal": personal,
                }
            )

    if not records:
        return normalize_transactions(
            pd.DataFrame(columns=NORMALIZED_COLUMNS), branch_id=branch_id
        )

    return normalize_transactions(pd.DataFrame(records), branch_id=branch_id)


def read_transactions(
    path: Union[str, "os.PathLike[str]"],
    *,
    branch_id: Optional[str] = None,
) -> pd.DataFrame:
    """
    Read transactions from a CSV or Excel file and normalize them.

    Both the transaction-list layout and the daily-ledger layout are
    accepted; the layout is detected from the column names.

    Returns
    -------
    pandas.DataFrame
        Normalized transactions (see `normalize_transactions`).

    Raises
    ------
    ValueError
        If the file type or structure is not supported, or dates are invalid.
    """
    raw = _read_table(path)
    if is_daily_sheet(raw):
        logger.info("Reading %s as a daily ledger sheet", path)
        return expand_daily_sheet(raw, branch_id=branch_id)
    return normalize_transactions(raw, branch_id=branch_id)


def read_daily_sheet(
    path: Union[str, "os.PathLike[str]"],
    *,
    branch_id: Optional[str] = None,
) -> pd.DataFrame:
    """Read a daily-ledger CSV/Excel file and expand it into transactions."""
    return expand_daily_sheet(_read_table(path), branch_id=branch_id)


def transactions_to_frame(records: list[dict]) -> pd.DataFrame:
    """Normalize a list of transaction-shaped dicts (e.g. JSON payloads)."""
    if not records:
        return normalize_transactions(pd.DataFrame(columns=NORMALIZED_COLUMNS))
    return normalize_transactions(pd.DataFrame.from_records(records))
