# Branch Cashflow - Multi-branch cash-flow tracking & analytics
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.


"""
Database layer for Branch Cashflow.

This module provides all low-level accessors for the SQLite database that
stores branches and their income/expense transactions. It is responsible for:

- Initializing the database schema.
- Managing branches (create, upsert, list, lookup).
- Managing import batches (CSV / Excel files, manual entry, daily uploads).
- Inserting transactions in bulk during an import, skipping exact duplicates.
- Exposing single-transaction operations (insert, lookup, delete).
- Loading the full transaction set of a branch for the analytics engine.

The database is the single source of truth for transactions across all
reports (analytics, monthly and yearly comparisons, personal expenses).

------------------------------------------------------------------------------
Schema Overview
------------------------------------------------------------------------------

1) branches
   One row per business branch (e.g. a shop or a workshop).

   - id                TEXT PRIMARY KEY   -- slug such as "erjem-glass"
   - name              TEXT NOT NULL
   - display_name      TEXT NOT NULL
   - created_at        TEXT NOT NULL      -- ISO datetime, UTC
   - created_by        TEXT NOT NULL
   - is_active         INTEGER NOT NULL DEFAULT 1
   - currency          TEXT NOT NULL DEFAULT 'PHP'
   - fiscal_year_start INTEGER NOT NULL DEFAULT 1  -- month number

2) import_batches
   One row per import (file import, manual entry batch, daily upload).

   - id             INTEGER PRIMARY KEY AUTOINCREMENT
   - created_at     TEXT    NOT NULL (ISO datetime, UTC)
   - source_type    TEXT    NOT NULL  -- "csv" | "excel" | "manual"
   - source_label   TEXT    NOT NULL  -- file path, UI label, etc.
   - rows_inserted  INTEGER NOT NULL
   - notes          TEXT

3) transactions
   - id              INTEGER PRIMARY KEY AUTOINCREMENT
   - branch_id       TEXT    NOT NULL  -- foreign key to branches.id
   - date            TEXT    NOT NULL  -- ISO date "YYYY-MM-DD"
   - type            TEXT    NOT NULL  -- "income" | "expense"
   - category        TEXT    NOT NULL
   - amount_cents    INTEGER NOT NULL  -- non-negative amount in minor units
   - description     TEXT
   - source          TEXT
   - is_personal     INTEGER NOT NULL DEFAULT 0
   - entry_method    TEXT    NOT NULL  -- "bulk" | "manual" | "daily-upload"
   - import_batch_id INTEGER           -- NULL for single manual entries
   - created_at      TEXT    NOT NULL
   - updated_at      TEXT    NOT NULL

------------------------------------------------------------------------------
SQLite Notes
------------------------------------------------------------------------------

- All timestamps are stored as ISO-8601 text (UTC).
- Amounts are stored as integer minor units and converted back to floats
  (amount_cents / 100) when loaded.
- Foreign key enforcement is explicitly enabled.
"""

from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Literal

import pandas as pd

logger = logging.getLogger(__name__)

# Canonical catch-all category for transactions imported without a label.
UNCATEGORIZED = "Uncategorized"

TRANSACTION_TYPES: tuple[str, ...] = ("income", "expense")

# Column layout of the transaction frames consumed by the analytics engine.
TRANSACTION_COLUMNS: list[str] = [
    "id",
    "branch_id",
    "date",
    "type",
    "category",
    "amount",
    "description",
    "source",
    "is_personal",
]

# ---------------------------------------------------------------------------
# Dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DatabaseConfig:
    """
    Database configuration for Branch Cashflow.

    Attributes
    ----------
    engine:
        Database engine identifier. Only "sqlite" is supported.
    path:
        Path to the SQLite database file.
    """

    engine: str
    path: Path


@dataclass(frozen=True)
class ImportStats:
    """
    Summary of an import of transactions into the database.

    Attributes
    ----------
    batch_id:
        Identifier of the batch row in `import_batches`.
    rows_inserted:
        Number of rows inserted into `transactions`.
    duplicates_skipped:
        Number of rows ignored because an identical transaction already
        existed for the same branch.
    branches:
        Branch ids touched by the import, in first-seen order.
    """

    batch_id: int
    rows_inserted: int
    duplicates_skipped: int
    branches: tuple[str, ...] = ()


SourceType = Literal["csv", "excel", "manual"]
EntryMethod = Literal["bulk", "manual", "daily-upload"]
TransactionType = Literal["income", "expense"]


@dataclass(frozen=True)
class Branch:
    """A business branch that scopes all transactions and reporting."""

    id: str
    name: str
    display_name: str
    created_at: datetime
    created_by: str
    is_active: bool
    currency: str
    fiscal_year_start: int


@dataclass(frozen=True)
class Transaction:
    """
    Stored income or expense transaction.

    All timestamps are stored in UTC in the database and converted back to
    timezone-aware `datetime` objects when materializing a `Transaction`.
    """

    id: int
    branch_id: str
    date: date
    type: TransactionType
    category: str
    amount: float
    description: str | None
    source: str | None
    is_personal: bool
    entry_method: EntryMethod
    import_batch_id: int | None
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class NewTransaction:
    """Data required to create a single transaction."""

    branch_id: str
    date: date
    type: TransactionType
    amount: float
    category: str = UNCATEGORIZED
    description: str | None = None
    source: str | None = None
    is_personal: bool = False
    entry_method: EntryMethod = "manual"


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _ensure_sqlite(cfg: DatabaseConfig) -> None:
    """Raise if the configuration does not refer to a supported engine."""
    if cfg.engine.lower() != "sqlite":
        msg = (
            f"Unsupported database engine: {cfg.engine!r}. "
            "Only 'sqlite' is supported for now."
        )
        raise ValueError(msg)


def _connect(cfg: DatabaseConfig) -> sqlite3.Connection:
    """
    Open a SQLite connection with foreign keys enabled.

    The caller is responsible for closing the connection.
    """
    _ensure_sqlite(cfg)
    conn = sqlite3.connect(cfg.path)
    conn.execute("PRAGMA foreign_keys = ON;")
    return conn


def _create_schema_if_needed(conn: sqlite3.Connection) -> None:
    """
    Create tables and indexes if they do not exist yet.

    This function is idempotent and can be called multiple times safely.
    """
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS branches (
            id                TEXT    PRIMARY KEY,
            name              TEXT    NOT NULL,
            display_name      TEXT    NOT NULL,
            created_at        TEXT    NOT NULL,
            created_by        TEXT    NOT NULL,
            is_active         INTEGER NOT NULL DEFAULT 1,
            currency          TEXT    NOT NULL DEFAULT 'PHP',
            fiscal_year_start INTEGER NOT NULL DEFAULT 1
        );
        """
    )

    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS import_batches (
            id            INTEGER PRIMARY KEY AUTOINCREMENT,
            created_at    TEXT    NOT NULL,
            source_type   TEXT    NOT NULL,
            source_label  TEXT    NOT NULL,
            rows_inserted INTEGER NOT NULL DEFAULT 0,
            notes         TEXT
        );
        """
    )

    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS transactions (
            id              INTEGER PRIMARY KEY AUTOINCREMENT,
            branch_id       TEXT    NOT NULL,
            date            TEXT    NOT NULL,  -- ISO date 'YYYY-MM-DD'
            type            TEXT    NOT NULL CHECK (type IN ('income', 'expense')),
            category        TEXT    NOT NULL,
            amount_cents    INTEGER NOT NULL,
            description     TEXT,
            source          TEXT,
            is_personal     INTEGER NOT NULL DEFAULT 0,
            entry_method    TEXT    NOT NULL DEFAULT 'manual',
            import_batch_id INTEGER,
            created_at      TEXT    NOT NULL,
            updated_at      TEXT    NOT NULL,

            FOREIGN KEY (branch_id) REFERENCES branches(id),
            FOREIGN KEY (import_batch_id) REFERENCES import_batches(id)
        );
        """
    )

    conn.execute(
        """
        CREATE INDEX IF NOT EXISTS idx_transactions_branch_date
            ON transactions(branch_id, date);
        """
    )

    conn.commit()


def _to_iso_date(value) -> str:
    """Convert a date-like value to ISO 'YYYY-MM-DD' string."""
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return date.fromisoformat(str(value)[:10]).isoformat()


def _now_utc_iso() -> str:
    """Return the current UTC datetime as ISO string."""
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


def _parse_utc(value: str | None) -> datetime | None:
    """Parse an ISO timestamp stored in UTC into an aware datetime."""
    if value is None:
        return None
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _to_cents(amount: float) -> int:
    """Convert a monetary amount into integer minor units."""
    return int(round(float(amount) * 100))


def _optional_text(value) -> str | None:
    """Return None for missing/blank values, the stripped string otherwise."""
    if value is None:
        return None
    try:
        if pd.isna(value):
            return None
    except (TypeError, ValueError):
        pass
    text = str(value).strip()
    return text or None


def _empty_transactions_frame() -> pd.DataFrame:
    """Return an empty transaction frame with the engine's column dtypes."""
    return pd.DataFrame(
        {
            "id": pd.Series(dtype="int64"),
            "branch_id": pd.Series(dtype="object"),
            "date": pd.Series(dtype="datetime64[ns]"),
            "type": pd.Series(dtype="object"),
            "category": pd.Series(dtype="object"),
            "amount": pd.Series(dtype="float64"),
            "description": pd.Series(dtype="object"),
            "source": pd.Series(dtype="object"),
            "is_personal": pd.Series(dtype="bool"),
        }
    )


def _insert_branch_if_missing(
    cur: sqlite3.Cursor,
    branch_id: str,
    *,
    name: str | None = None,
    display_name: str | None = None,
    created_by: str = "system",
    currency: str = "PHP",
    fiscal_year_start: int = 1,
) -> bool:
    """Insert a branch row unless it already exists. Return True if inserted."""
    cur.execute(
        """
        INSERT OR IGNORE INTO branches (
            id, name, display_name, created_at, created_by,
            is_active, currency, fiscal_year_start
        )
        VALUES (?, ?, ?, ?, ?, 1, ?, ?);
        """,
        (
            branch_id,
            name or branch_id,
            display_name or name or branch_id,
            _now_utc_iso(),
            created_by,
            currency,
            int(fiscal_year_start),
        ),
    )
    return cur.rowcount > 0


_BRANCH_SELECT = """
    SELECT id, name, display_name, created_at, created_by,
           is_active, currency, fiscal_year_start
      FROM branches
"""


def _row_to_branch(row: tuple) -> Branch:
    (
        branch_id,
        name,
        display_name,
        created_at,
        created_by,
        is_active,
        currency,
        fiscal_year_start,
    ) = row
    return Branch(
        id=str(branch_id),
        name=str(name),
        display_name=str(display_name),
        created_at=_parse_utc(created_at),
        created_by=str(created_by),
        is_active=bool(is_active),
        currency=str(currency),
        fiscal_year_start=int(fiscal_year_start),
    )


_TRANSACTION_SELECT = """
    SELECT id, branch_id, date, type, category, amount_cents,
           description, source, is_personal, entry_method,
           import_batch_id, created_at, updated_at
      FROM transactions
"""


def _row_to_transaction(row: tuple) -> Transaction:
    (
        tx_id,
        branch_id,
        date_str,
        tx_type,
        category,
        amount_cents,
        description,
        source,
        is_personal,
        entry_method,
        import_batch_id,
        created_at,
        updated_at,
    ) = row
    return Transaction(
        id=int(tx_id),
        branch_id=str(branch_id),
        date=date.fromisoformat(date_str),
        type=tx_type,
        category=str(category),
        amount=float(amount_cents) / 100.0,
        description=description,
        source=source,
        is_personal=bool(is_personal),
        entry_method=entry_method,
        import_batch_id=int(import_batch_id) if import_batch_id is not None else None,
        created_at=_parse_utc(created_at),
        updated_at=_parse_utc(updated_at),
    )


# ---------------------------------------------------------------------------
# Public API: schema & branches
# ---------------------------------------------------------------------------


def init_database(cfg: DatabaseConfig) -> None:
    """
    Initialize the database schema if needed.

    - Creates the SQLite file (and its parent directory) if it does not exist.
    - Creates tables and indexes if they are missing.
    - This function is idempotent: calling it multiple times is safe.

    Raises
    ------
    ValueError
        If cfg.engine is not supported.
    sqlite3.Error
        If schema creation fails.
    """
    _ensure_sqlite(cfg)
    cfg.path.parent.mkdir(parents=True, exist_ok=True)

    conn = _connect(cfg)
    try:
        _create_schema_if_needed(conn)
    finally:
        conn.close()


def create_branch(
    cfg: DatabaseConfig,
    branch_id: str,
    name: str,
    *,
    display_name: str | None = None,
    created_by: str = "system",
    currency: str = "PHP",
    fiscal_year_start: int = 1,
) -> Branch:
    """
    Create a new branch.

    Raises
    ------
    ValueError
        If the id is empty, the fiscal year start is not a month number,
        or a branch with the same id already exists.
    """
    branch_id = branch_id.strip()
    if not branch_id:
        raise ValueError("Branch id cannot be empty.")
    if not 1 <= int(fiscal_year_start) <= 12:
        raise ValueError("fiscal_year_start must be a month number (1-12).")

    init_database(cfg)

    conn = _connect(cfg)
    try:
        cur = conn.cursor()
        inserted = _insert_branch_if_missing(
            cur,
            branch_id,
            name=name,
            display_name=display_name,
            created_by=created_by,
            currency=currency,
            fiscal_year_start=fiscal_year_start,
        )
        if not inserted:
            raise ValueError(f"Branch {branch_id!r} already exists.")
        conn.commit()
    finally:
        conn.close()

    logger.info("Created branch %s", branch_id)

    branch = get_branch(cfg, branch_id)
    if branch is None:
        msg = f"Branch {branch_id!r} was just created but could not be reloaded."
        raise RuntimeError(msg)
    return branch


def ensure_branch(
    cfg: DatabaseConfig,
    branch_id: str,
    *,
    created_by: str = "system",
) -> Branch:
    """
    Return the branch with the given id, creating a bare one if missing.

    Used by imports: transactions referencing an unknown branch id create the
    branch on the fly with name = display_name = id.
    """
    init_database(cfg)

    conn = _connect(cfg)
    try:
        cur = conn.cursor()
        if _insert_branch_if_missing(cur, branch_id, created_by=created_by):
            logger.info("Created branch %s on first use", branch_id)
        conn.commit()
    finally:
        conn.close()

    branch = get_branch(cfg, branch_id)
    if branch is None:
        msg = f"Branch {branch_id!r} could not be loaded after upsert."
        raise RuntimeError(msg)
    return branch


def get_branch(cfg: DatabaseConfig, branch_id: str) -> Branch | None:
    """Load a branch by id, or None if it does not exist."""
    init_database(cfg)

    conn = _connect(cfg)
    try:
        cur = conn.cursor()
        cur.execute(_BRANCH_SELECT + " WHERE id = ?;", (branch_id,))
        row = cur.fetchone()
    finally:
        conn.close()

    if row is None:
        return None
    return _row_to_branch(row)


def list_branches(cfg: DatabaseConfig, *, include_inactive: bool = False) -> list[Branch]:
    """Return branches ordered by name (active ones only by default)."""
    init_database(cfg)

    query = _BRANCH_SELECT
    if not include_inactive:
        query += " WHERE is_active = 1"
    query += " ORDER BY name ASC, id ASC;"

    conn = _connect(cfg)
    try:
        cur = conn.cursor()
        cur.execute(query)
        rows = cur.fetchall()
    finally:
        conn.close()

    return [_row_to_branch(row) for row in rows]


# ---------------------------------------------------------------------------
# Public API: transactions
# ---------------------------------------------------------------------------


def import_transactions(
    df: pd.DataFrame,
    cfg: DatabaseConfig,
    *,
    source_type: SourceType = "csv",
    source_label: str,
    branch_id: str | None = None,
    entry_method: EntryMethod = "bulk",
    created_by: str = "import",
    imported_at: datetime | None = None,
) -> ImportStats:
    """
    Import a batch of normalized transactions into the database.

    Parameters
    ----------
    df:
        Normalized transactions (see `io.normalize_transactions`) with at
        least: date, type, category, amount, description, source,
        is_personal. A `branch_id` column, when present and non-empty,
        takes precedence over the `branch_id` argument for that row.
    cfg:
        Database configuration.
    source_type, source_label:
        Stored in import_batches (origin of the batch).
    branch_id:
        Branch used for rows that do not carry their own branch id.
    entry_method:
        Stored on every inserted transaction ("bulk", "daily-upload", ...).
    created_by:
        Recorded on branches created on the fly by this import.
    imported_at:
        Timestamp of the import. Defaults to the current UTC time.

    Behavior
    --------
    - Creates a new row in import_batches.
    - Creates missing branches referenced by the rows.
    - Skips rows identical to a transaction stored before this batch for the
      same branch (date, type, category, amount, description). Matching is
      by count: a file holding N identical rows, imported where M such rows
      already exist, skips min(N, M) and inserts the rest. Identical rows
      within one file are therefore all kept on a first import.
    - Updates import_batches.rows_inserted.

    Raises
    ------
    ValueError
        If required columns are missing or a row has no branch id.
    sqlite3.Error
        If database operations fail.
    """
    required = {"date", "type", "category", "amount"}
    missing = required.difference(df.columns)
    if missing:
        cols = ", ".join(sorted(missing))
        raise ValueError(f"DataFrame is missing required column(s): {cols}")

    init_database(cfg)

    if imported_at is None:
        imported_at_iso = _now_utc_iso()
    else:
        imported_at_iso = imported_at.isoformat(timespec="seconds")

    conn = _connect(cfg)
    try:
        cur = conn.cursor()

        cur.execute(
            """
            INSERT INTO import_batches (
                created_at, source_type, source_label, rows_inserted
            )
            VALUES (?, ?, ?, 0);
            """,
            (imported_at_iso, source_type, source_label),
        )
        batch_id = cur.lastrowid

        rows_inserted = 0
        duplicates_skipped = 0
        branches_seen: list[str] = []
        # Earlier rows matched per duplicate key during this batch.
        matched: dict[tuple, int] = {}

        for _, row in df.iterrows():
            row_branch = _optional_text(row.get("branch_id")) or branch_id
            if not row_branch:
                raise ValueError(
                    "A transaction has no branch id and no default branch was given."
                )
            if row_branch not in branches_seen:
                branches_seen.append(row_branch)
                if _insert_branch_if_missing(cur, row_branch, created_by=created_by):
                    logger.info("Import created branch %s", row_branch)

            iso_date = _to_iso_date(row["date"])
            tx_type = str(row["type"])
            category = _optional_text(row["category"]) or UNCATEGORIZED
            amount_cents = _to_cents(row["amount"])
            description = _optional_text(row.get("description"))
            source = _optional_text(row.get("source"))
            is_personal = 1 if bool(row.get("is_personal", False)) else 0

            key = (row_branch, iso_date, tx_type, category, amount_cents, description or "")
            cur.execute(
                """
                SELECT COUNT(*) FROM transactions
                 WHERE branch_id = ?
                   AND date = ?
                   AND type = ?
                   AND category = ?
                   AND amount_cents = ?
                   AND COALESCE(description, '') = COALESCE(?, '')
                   AND COALESCE(import_batch_id, -1) != ?;
                """,
                (row_branch, iso_date, tx_type, category, amount_cents, description, batch_id),
            )
            (existing,) = cur.fetchone()
            if matched.get(key, 0) < existing:
                matched[key] = matched.get(key, 0) + 1
                duplicates_skipped += 1
                continue

            cur.execute(
                """
                INSERT INTO transactions (
                    branch_id, date, type, category, amount_cents,
                    description, source, is_personal, entry_method,
                    import_batch_id, created_at, updated_at
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?);
                """,
                (
                    row_branch,
                    iso_date,
                    tx_type,
                    category,
                    amount_cents,
                    description,
                    source,
                    is_personal,
                    entry_method,
                    batch_id,
                    imported_at_iso,
                    imported_at_iso,
                ),
            )
            rows_inserted += 1

        cur.execute(
            """
            UPDATE import_batches
               SET rows_inserted = ?
             WHERE id = ?;
            """,
            (rows_inserted, batch_id),
        )

        conn.commit()
    finally:
        conn.close()

    logger.info(
        "Import batch #%s from %s: %d inserted, %d duplicates skipped",
        batch_id,
        source_label,
        rows_inserted,
        duplicates_skipped,
    )

    return ImportStats(
        batch_id=batch_id,
        rows_inserted=rows_inserted,
        duplicates_skipped=duplicates_skipped,
        branches=tuple(branches_seen),
    )


def get_transaction(cfg: DatabaseConfig, transaction_id: int) -> Transaction | None:
    """Load a single transaction by id, or None if not found."""
    init_database(cfg)

    conn = _connect(cfg)
    try:
        cur = conn.cursor()
        cur.execute(_TRANSACTION_SELECT + " WHERE id = ?;", (transaction_id,))
        row = cur.fetchone()
    finally:
        conn.close()

    if row is None:
        return None
    return _row_to_transaction(row)


def insert_transaction(cfg: DatabaseConfig, new_tx: NewTransaction) -> Transaction:
    """
    Insert a single transaction.

    Raises
    ------
    ValueError
        If the type is unknown, the amount is negative or the branch does
        not exist.
    """
    if new_tx.type not in TRANSACTION_TYPES:
        raise ValueError(f"Unknown transaction type: {new_tx.type!r}")
    if new_tx.amount < 0:
        raise ValueError("Transaction amount cannot be negative.")

    init_database(cfg)

    now_iso = _now_utc_iso()

    conn = _connect(cfg)
    try:
        cur = conn.cursor()
        try:
            cur.execute(
                """
                INSERT INTO transactions (
                    branch_id, date, type, category, amount_cents,
                    description, source, is_personal, entry_method,
                    import_batch_id, created_at, updated_at
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, NULL, ?, ?);
                """,
                (
                    new_tx.branch_id,
                    _to_iso_date(new_tx.date),
                    new_tx.type,
                    _optional_text(new_tx.category) or UNCATEGORIZED,
                    _to_cents(new_tx.amount),
                    _optional_text(new_tx.description),
                    _optional_text(new_tx.source),
                    1 if new_tx.is_personal else 0,
                    new_tx.entry_method,
                    now_iso,
                    now_iso,
                ),
            )
        except sqlite3.IntegrityError as exc:
            raise ValueError(f"Unknown branch: {new_tx.branch_id!r}") from exc
        tx_id = cur.lastrowid
        conn.commit()
    finally:
        conn.close()

    result = get_transaction(cfg, tx_id)
    if result is None:
        msg = f"Transaction #{tx_id} was just inserted but could not be reloaded."
        raise RuntimeError(msg)
    return result


def delete_transaction(cfg: DatabaseConfig, transaction_id: int) -> bool:
    """
    Permanently delete a transaction.

    Returns
    -------
    bool
        True if a row was deleted, False if no transaction had this id.
    """
    init_database(cfg)

    conn = _connect(cfg)
    try:
        cur = conn.cursor()
        cur.execute("DELETE FROM transactions WHERE id = ?;", (transaction_id,))
        deleted = cur.rowcount > 0
        conn.commit()
    finally:
        conn.close()

    return deleted


def load_transactions(
    cfg: DatabaseConfig,
    branch_id: str,
    start: date | None = None,
    end: date | None = None,
) -> pd.DataFrame:
    """
    Load the transactions of a branch as a DataFrame for the analytics engine.

    Parameters
    ----------
    cfg:
        Database configuration.
    branch_id:
        Branch whose transactions are loaded.
    start, end:
        Optional inclusive date bounds. The analytics pages always load the
        full set and filter in memory.

    Returns
    -------
    pandas.DataFrame
        Columns: id, branch_id, date (datetime64[ns]), type, category,
        amount (float, from amount_cents / 100), description, source,
        is_personal (bool). Sorted by date then id. An empty frame with the
        same columns is returned when nothing matches.
    """
    init_database(cfg)

    query = """
        SELECT id, branch_id, date, type, category, amount_cents,
               description, source, is_personal
          FROM transactions
         WHERE branch_id = ?
    """
    params: list = [branch_id]
    if start is not None:
        query += " AND date >= ?"
        params.append(start.isoformat())
    if end is not None:
        query += " AND date <= ?"
        params.append(end.isoformat())
    query += " ORDER BY date, id;"

    conn = _connect(cfg)
    try:
        cur = conn.cursor()
        cur.execute(query, params)
        rows = cur.fetchall()
    finally:
        conn.close()

    logger.debug("Loaded %d transactions for branch %s", len(rows), branch_id)

    if not rows:
        return _empty_transactions_frame()

    df = pd.DataFrame(
        rows,
        columns=[
            "id",
            "branch_id",
            "date",
            "type",
            "category",
            "amount_cents",
            "description",
            "source",
            "is_personal",
        ],
    )
    df["date"] = pd.to_datetime(df["date"], format="%Y-%m-%d")
    df["amount"] = df["amount_cents"].astype(float) / 100.0
    df["description"] = df["description"].fillna("")
    df["source"] = df["source"].fillna("")
    df["is_personal"] = df["is_personal"].astype(bool)
    return df[TRANSACTION_COLUMNS]


def has_transactions(cfg: DatabaseConfig, branch_id: str | None = None) -> bool:
    """Return True if the database (or the given branch) holds any transaction."""
    init_database(cfg)

    conn = _connect(cfg)
    try:
        cur = conn.cursor()
        if branch_id is None:
            cur.execute("SELECT 1 FROM transactions LIMIT 1;")
        else:
            cur.execute(
                "SELECT 1 FROM transactions WHERE branch_id = ? LIMIT 1;",
                (branch_id,),
            )
        return cur.fetchone() is not None
    finally:
        conn.close()


def list_import_batches(cfg: DatabaseConfig) -> pd.DataFrame:
    """
    Return the list of import batches stored in the database, newest first.

    Columns: id, created_at, source_type, source_label, rows_inserted
    """
    init_database(cfg)

    columns = ["id", "created_at", "source_type", "source_label", "rows_inserted"]

    conn = _connect(cfg)
    try:
        cur = conn.cursor()
        cur.execute(
            """
            SELECT id, created_at, source_type, source_label, rows_inserted
              FROM import_batches
             ORDER BY id DESC;
            """
        )
        rows = cur.fetchall()
    finally:
        conn.close()

    if not rows:
        return pd.DataFrame(columns=columns)

    df = pd.DataFrame(rows, columns=columns)
    df["created_at"] = pd.to_datetime(df["created_at"])
    return df
