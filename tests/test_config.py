from pathlib import Path

import pytest

from branch_cashflow.config import (
    DEFAULT_DATABASE_PATH,
    DEFAULT_SEED_BRANCHES,
    load_app_config,
)
from branch_cashflow.profit_first import ProfitFirstTargets


def write_config(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "branch_cashflow_config.toml"
    path.write_text(text, encoding="utf-8")
    return path


def test_defaults_when_no_config_file(tmp_path, monkeypatch):
    """Without a config file in the working directory, built-in defaults apply."""
    monkeypatch.chdir(tmp_path)

    cfg = load_app_config()

    assert cfg.source_path is None
    assert cfg.database.engine == "sqlite"
    assert cfg.database.path == (tmp_path / DEFAULT_DATABASE_PATH).resolve()
    assert cfg.seed_branches == DEFAULT_SEED_BRANCHES
    assert cfg.default_period == "6months"
    assert cfg.top_categories == 5
    assert cfg.savings_rate == 0.5
    assert cfg.profit_first_targets == ProfitFirstTargets()


def test_explicit_missing_path_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_app_config(str(tmp_path / "missing.toml"))


def test_full_config_is_parsed_relative_to_file(tmp_path):
    path = write_config(
        tmp_path,
        """
[database]
path = "store/cash.sqlite"

[branches]
currency = "USD"
default = "north"

[[branches.seed]]
id = "north"
name = "North Shop"

[[branches.seed]]
id = "south"
display_name = "South"
currency = "PHP"
fiscal_year_start = 4

[analytics]
default_period = "1year"
top_categories = 3
savings_rate = 0.3

[profit_first]
profit = 5
owner_pay = 50

[display]
mode = "both"
percent_decimals = 2
""",
    )

    cfg = load_app_config(str(path))

    assert cfg.source_path == path.resolve()
    assert cfg.database.path == (tmp_path / "store" / "cash.sqlite").resolve()
    assert cfg.currency == "USD"
    assert cfg.default_branch == "north"

    north, south = cfg.seed_branches
    assert (north.name, north.display_name, north.currency) == ("North Shop", "North Shop", "USD")
    assert (south.name, south.display_name, south.fiscal_year_start) == ("south", "South", 4)
    assert south.currency == "PHP"

    assert cfg.default_period == "1year"
    assert cfg.top_categories == 3
    assert cfg.savings_rate == pytest.approx(0.3)
    assert cfg.profit_first_targets == ProfitFirstTargets(profit=5, owner_pay=50, opex=40, tax=15)
    assert cfg.display_mode == "both"
    assert cfg.percent_decimals == 2


def test_empty_seed_list_disables_seeding(tmp_path):
    path = write_config(tmp_path, "[branches]\nseed = []\n")

    assert load_app_config(str(path)).seed_branches == ()


@pytest.mark.parametrize(
    "text",
    [
        '[analytics]\ndefault_period = "2weeks"\n',
        "[analytics]\ntop_categories = 0\n",
        '[analytics]\nsavings_rate = "half"\n',
        '[display]\nmode = "html"\n',
        "[[branches.seed]]\nname = 'no id'\n",
        "[database\npath = 1\n",
    ],
)
def test_invalid_values_raise_value_error(tmp_path, text):
    path = write_config(tmp_path, text)

    with pytest.raises(ValueError):
        load_app_config(str(path))
