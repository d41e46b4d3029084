from datetime import date

import pandas as pd
import pytest

from branch_cashflow.db import (
    TRANSACTION_COLUMNS,
    UNCATEGORIZED,
    DatabaseConfig,
    NewTransaction,
    create_branch,
    delete_transaction,
    ensure_branch,
    get_branch,
    get_transaction,
    has_transactions,
    import_transactions,
    init_database,
    insert_transaction,
    list_branches,
    list_import_batches,
    load_transactions,
)
from branch_cashflow.io import expand_daily_sheet


def make_tmp_db_cfg(tmp_path) -> DatabaseConfig:
    """Helper to build a DatabaseConfig pointing to a temporary SQLite file."""
    db_path = tmp_path / "db" / "test_db.sqlite"
    return DatabaseConfig(engine="sqlite", path=db_path)


def sample_frame() -> pd.DataFrame:
    return pd.DataFrame(
        [
            {
                "date": pd.Timestamp("2025-01-01"),
                "type": "income",
                "category": "Sales",
                "amount": 1000.10,
                "description": "Sale A",
                "source": "",
                "is_personal": False,
            },
            {
                "date": pd.Timestamp("2025-01-15"),
                "type": "expense",
                "category": "",
                "amount": 300.0,
                "description": "Groceries",
                "source": "",
                "is_personal": True,
            },
        ]
    )


def test_init_database_creates_file_and_schema(tmp_path):
    """init_database should create the SQLite file (and folder) and an empty schema."""
    cfg = make_tmp_db_cfg(tmp_path)

    assert not cfg.path.exists()
    init_database(cfg)
    assert cfg.path.exists()

    assert has_transactions(cfg) is False
    assert list_branches(cfg) == []


def test_unsupported_engine_is_rejected(tmp_path):
    cfg = DatabaseConfig(engine="postgres", path=tmp_path / "x.sqlite")

    with pytest.raises(ValueError):
        init_database(cfg)


def test_create_and_list_branches(tmp_path):
    cfg = make_tmp_db_cfg(tmp_path)

    glass = create_branch(cfg, "erjem-glass", "ERJEM Glass", created_by="tests")
    create_branch(cfg, "erjem-machine-shop", "ERJEM Machine Shop", display_name="Machine Shop")

    assert glass.display_name == "ERJEM Glass"
    assert glass.currency == "PHP"
    assert glass.is_active is True
    assert glass.created_at.tzinfo is not None
    assert [b.id for b in list_branches(cfg)] == ["erjem-glass", "erjem-machine-shop"]
    assert get_branch(cfg, "erjem-machine-shop").display_name == "Machine Shop"
    assert get_branch(cfg, "unknown") is None


def test_create_branch_validation(tmp_path):
    cfg = make_tmp_db_cfg(tmp_path)
    create_branch(cfg, "erjem-glass", "ERJEM Glass")

    with pytest.raises(ValueError, match="already exists"):
        create_branch(cfg, "erjem-glass", "Other")
    with pytest.raises(ValueError):
        create_branch(cfg, "   ", "Blank")
    with pytest.raises(ValueError):
        create_branch(cfg, "new", "New", fiscal_year_start=13)


def test_ensure_branch_is_idempotent(tmp_path):
    cfg = make_tmp_db_cfg(tmp_path)

    first = ensure_branch(cfg, "pop-up")
    second = ensure_branch(cfg, "pop-up")

    assert first == second
    assert first.name == "pop-up"
    assert len(list_branches(cfg)) == 1


def test_import_and_load_transactions_basic_flow(tmp_path):
    """Round-trip: import transactions, then load them back for the branch."""
    cfg = make_tmp_db_cfg(tmp_path)
    create_branch(cfg, "erjem-glass", "ERJEM Glass")

    stats = import_transactions(
        sample_frame(), cfg, source_type="csv", source_label="test.csv", branch_id="erjem-glass"
    )

    assert stats.rows_inserted == 2
    assert stats.duplicates_skipped == 0
    assert stats.branches == ("erjem-glass",)
    assert has_transactions(cfg, "erjem-glass") is True
    assert has_transactions(cfg, "other") is False

    loaded = load_transactions(cfg, "erjem-glass")
    assert list(loaded.columns) == TRANSACTION_COLUMNS
    assert len(loaded) == 2
    assert pd.api.types.is_datetime64_any_dtype(loaded["date"])

    # Amounts are rebuilt from integer cents
    assert loaded.loc[0, "amount"] == pytest.approx(1000.10)
    assert loaded.loc[1, "category"] == UNCATEGORIZED
    assert bool(loaded.loc[1, "is_personal"]) is True


def test_load_transactions_with_bounds(tmp_path):
    cfg = make_tmp_db_cfg(tmp_path)
    import_transactions(sample_frame(), cfg, source_label="test.csv", branch_id="erjem-glass")

    loaded = load_transactions(cfg, "erjem-glass", date(2025, 1, 10), date(2025, 1, 31))

    assert len(loaded) == 1
    assert loaded.loc[0, "description"] == "Groceries"


def test_reimport_skips_duplicates(tmp_path):
    """Importing the same file twice should not duplicate transactions."""
    cfg = make_tmp_db_cfg(tmp_path)

    import_transactions(sample_frame(), cfg, source_label="a.csv", branch_id="erjem-glass")
    stats = import_transactions(sample_frame(), cfg, source_label="a.csv", branch_id="erjem-glass")

    assert stats.rows_inserted == 0
    assert stats.duplicates_skipped == 2
    assert len(load_transactions(cfg, "erjem-glass")) == 2

    batches = list_import_batches(cfg)
    assert list(batches["rows_inserted"]) == [0, 2]


def test_identical_rows_in_one_file_are_all_kept(tmp_path):
    """Two same-day walk-in sales of the same amount are two transactions."""
    cfg = make_tmp_db_cfg(tmp_path)
    raw = pd.DataFrame(
        {
            "Date": ["2024-01-15", "2024-01-15"],
            "Income details": [None, None],
            "Income Amount": [500, 500],
            "Expenses details": [None, None],
            "Expenses Amount": [0, 0],
        }
    )
    df = expand_daily_sheet(raw, branch_id="erjem-glass")
    assert df["amount"].sum() == pytest.approx(1000.0)

    stats = import_transactions(
        df, cfg, source_label="daily.xlsx", branch_id="erjem-glass", entry_method="daily-upload"
    )

    assert stats.rows_inserted == 2
    assert stats.duplicates_skipped == 0
    assert load_transactions(cfg, "erjem-glass")["amount"].sum() == pytest.approx(1000.0)

    again = import_transactions(df, cfg, source_label="daily.xlsx", branch_id="erjem-glass")
    assert again.rows_inserted == 0
    assert again.duplicates_skipped == 2


def test_reimport_skips_only_as_many_rows_as_already_stored(tmp_path):
    cfg = make_tmp_db_cfg(tmp_path)
    one = sample_frame().iloc[[0]]
    two = pd.concat([one, one], ignore_index=True)

    import_transactions(one, cfg, source_label="first.csv", branch_id="erjem-glass")
    stats = import_transactions(two, cfg, source_label="second.csv", branch_id="erjem-glass")

    assert stats.duplicates_skipped == 1
    assert stats.rows_inserted == 1
    assert len(load_transactions(cfg, "erjem-glass")) == 2


def test_import_routes_rows_to_their_branch(tmp_path):
    cfg = make_tmp_db_cfg(tmp_path)
    df = sample_frame()
    df["branch_id"] = ["erjem-machine-shop", ""]

    stats = import_transactions(df, cfg, source_label="mixed.csv", branch_id="erjem-glass")

    assert stats.branches == ("erjem-machine-shop", "erjem-glass")
    assert len(load_transactions(cfg, "erjem-machine-shop")) == 1
    assert len(load_transactions(cfg, "erjem-glass")) == 1
    assert {b.id for b in list_branches(cfg)} == {"erjem-glass", "erjem-machine-shop"}


def test_import_requires_a_branch(tmp_path):
    cfg = make_tmp_db_cfg(tmp_path)

    with pytest.raises(ValueError, match="branch"):
        import_transactions(sample_frame(), cfg, source_label="x.csv")


def test_import_requires_columns(tmp_path):
    cfg = make_tmp_db_cfg(tmp_path)

    with pytest.raises(ValueError, match="amount"):
        import_transactions(
            pd.DataFrame({"date": [date(2025, 1, 1)], "type": ["income"], "category": ["x"]}),
            cfg,
            source_label="x.csv",
            branch_id="b",
        )


def test_insert_get_and_delete_transaction(tmp_path):
    cfg = make_tmp_db_cfg(tmp_path)
    create_branch(cfg, "erjem-glass", "ERJEM Glass")

    tx = insert_transaction(
        cfg,
        NewTransaction(
            branch_id="erjem-glass",
            date=date(2025, 3, 2),
            type="expense",
            amount=49.99,
            category="  ",
            description="Cutting oil",
        ),
    )

    assert tx.id > 0
    assert tx.date == date(2025, 3, 2)
    assert tx.amount == pytest.approx(49.99)
    assert tx.category == UNCATEGORIZED
    assert tx.entry_method == "manual"
    assert tx.import_batch_id is None
    assert get_transaction(cfg, tx.id) == tx

    assert delete_transaction(cfg, tx.id) is True
    assert delete_transaction(cfg, tx.id) is False
    assert get_transaction(cfg, tx.id) is None


def test_insert_transaction_validation(tmp_path):
    cfg = make_tmp_db_cfg(tmp_path)
    create_branch(cfg, "erjem-glass", "ERJEM Glass")

    with pytest.raises(ValueError, match="type"):
        insert_transaction(
            cfg, NewTransaction(branch_id="erjem-glass", date=date(2025, 1, 1), type="refund", amount=1)
        )
    with pytest.raises(ValueError, match="negative"):
        insert_transaction(
            cfg, NewTransaction(branch_id="erjem-glass", date=date(2025, 1, 1), type="income", amount=-1)
        )
    with pytest.raises(ValueError, match="Unknown branch"):
        insert_transaction(
            cfg, NewTransaction(branch_id="nowhere", date=date(2025, 1, 1), type="income", amount=1)
        )


def test_load_transactions_empty_frame_is_typed(tmp_path):
    cfg = make_tmp_db_cfg(tmp_path)

    loaded = load_transactions(cfg, "erjem-glass")

    assert loaded.empty
    assert list(loaded.columns) == TRANSACTION_COLUMNS
    assert pd.api.types.is_datetime64_any_dtype(loaded["date"])
    assert loaded["amount"].dtype == float
