# Branch Cashflow - Multi-branch cash-flow tracking & analytics
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Profit-First allocation check.

Profit First budgets every peso of income into fixed buckets. This module
compares the actual share of income that went to each bucket over a period
with the target percentages:

    bucket       target   actual amount used
    ----------   ------   ---------------------------------------------
    profit        10 %    gross profit (income - expenses)
    owner_pay     40 %    personal draws (expenses flagged is_personal)
    opex          40 %    business expenses (expenses - personal draws)
    tax           15 %    not tracked, always 0

Actual percentages are ``amount / income * 100`` and 0 when income is 0.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class ProfitFirstTargets:
    """Target allocation percentages (of income) for each bucket."""

    profit: float = 10.0
    owner_pay: float = 40.0
    opex: float = 40.0
    tax: float = 15.0


DEFAULT_TARGETS = ProfitFirstTargets()


@dataclass(frozen=True)
class AllocationLine:
    """Target vs actual share of income for one bucket."""

    key: str
    label: str
    target_pct: float
    actual_pct: float
    actual_amount: float

    @property
    def variance_pct(self) -> float:
        """Actual minus target, in percentage points."""
        return self.actual_pct - self.target_pct


@dataclass(frozen=True)
class ProfitFirstAllocation:
    income: float
    lines: tuple[AllocationLine, ...]

    def line(self, key: str) -> AllocationLine:
        for item in self.lines:
            if item.key == key:
                return item
        raise KeyError(key)


def _share(amount: float, income: float) -> float:
    return amount / income * 100 if income != 0 else 0.0


def allocate(
    income: float,
    gross_profit: float,
    owner_pay: float,
    operating_expenses: float,
    targets: ProfitFirstTargets = DEFAULT_TARGETS,
) -> ProfitFirstAllocation:
    """
    Compare actual income allocation against Profit-First targets.

    Args:
        income: Total income of the period.
        gross_profit: Gross profit of the period.
        owner_pay: Personal draws of the period.
        operating_expenses: Business expenses of the period.
        targets: Target percentages for each bucket.

    Returns:
        A ProfitFirstAllocation with one line per bucket, in the order
        profit, owner_pay, opex, tax.
    """
    buckets = (
        ("profit", "Profit", targets.profit, gross_profit),
        ("owner_pay", "Owner Pay", targets.owner_pay, owner_pay),
        ("opex", "Operating Expenses", targets.opex, operating_expenses),
        ("tax", "Tax", targets.tax, 0.0),
    )

    lines = tuple(
        AllocationLine(
            key=key,
            label=label,
            target_pct=float(target),
            actual_pct=_share(amount, income),
            actual_amount=float(amount),
        )
        for key, label, target, amount in buckets
    )
    return ProfitFirstAllocation(income=float(income), lines=lines)
