# Branch Cashflow - Multi-branch cash-flow tracking & analytics
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Expansion-readiness scoring.

Four business-health factors are each mapped to 25 / 15 / 5 points
("good" / "okay" / "poor") using fixed thresholds:

    factor               input                        good    okay
    ------------------   --------------------------   -----   -----
    profit_consistency   % of profitable months       >= 80   >= 60
    gross_margin         gross margin of the window   >= 50   >= 30
    revenue_growth       average monthly growth %     >= 5    >= 0
    margin_stability     lowest monthly margin %      >= 30   >= 10

The total (20-100) is mapped to a letter grade:

    >= 85  A  Ready
    >= 70  B  Almost Ready
    >= 55  C  Almost Ready
    >= 40  D  Not Yet
    else   F  Not Yet

Everything here is a pure function of its inputs.
"""

from dataclasses import dataclass

FACTOR_MAX = 25

POINTS: dict[str, int] = {"good": 25, "okay": 15, "poor": 5}


@dataclass(frozen=True)
class FactorRule:
    key: str
    label: str
    good: float
    okay: float


FACTOR_RULES: tuple[FactorRule, ...] = (
    FactorRule("profit_consistency", "Profit consistency", good=80.0, okay=60.0),
    FactorRule("gross_margin", "Gross margin", good=50.0, okay=30.0),
    FactorRule("revenue_growth", "Revenue growth", good=5.0, okay=0.0),
    FactorRule("margin_stability", "Margin stability", good=30.0, okay=10.0),
)

GRADES: tuple[tuple[int, str, str], ...] = (
    (85, "A", "Ready"),
    (70, "B", "Almost Ready"),
    (55, "C", "Almost Ready"),
    (40, "D", "Not Yet"),
)


@dataclass(frozen=True)
class ExpansionFactor:
    """Score of one factor. `value` is the raw input the score was derived from."""

    key: str
    label: str
    value: float
    score: int
    status: str
    max: int = FACTOR_MAX


@dataclass(frozen=True)
class ExpansionReadiness:
    score: int
    grade: str
    status: str
    factors: tuple[ExpansionFactor, ...]

    def factor(self, key: str) -> ExpansionFactor:
        for item in self.factors:
            if item.key == key:
                return item
        raise KeyError(key)


def factor_status(value: float, good: float, okay: float) -> str:
    """Classify a value as 'good', 'okay' or 'poor' (thresholds inclusive)."""
    if value >= good:
        return "good"
    if value >= okay:
        return "okay"
    return "poor"


def score_factor(rule: FactorRule, value: float) -> ExpansionFactor:
    status = factor_status(value, rule.good, rule.okay)
    return ExpansionFactor(
        key=rule.key,
        label=rule.label,
        value=float(value),
        score=POINTS[status],
        status=status,
    )


def grade_for_score(score: int) -> tuple[str, str]:
    """Return (letter grade, readiness status) for a total score."""
    for minimum, grade, status in GRADES:
        if score >= minimum:
            return grade, status
    return "F", "Not Yet"


def assess_expansion_readiness(
    profit_consistency: float,
    gross_margin: float,
    average_revenue_growth: float,
    lowest_margin: float,
) -> ExpansionReadiness:
    """
    Score the four expansion factors and grade the total.

    Args:
        profit_consistency: Percentage of months with a positive gross profit.
        gross_margin: Gross margin of the whole window, in percent.
        average_revenue_growth: Mean month-over-month revenue growth, in percent.
        lowest_margin: Lowest monthly gross margin of the window, in percent.
    """
    values = {
        "profit_consistency": profit_consistency,
        "gross_margin": gross_margin,
        "revenue_growth": average_revenue_growth,
        "margin_stability": lowest_margin,
    }
    factors = tuple(score_factor(rule, values[rule.key]) for rule in FACTOR_RULES)
    score = sum(f.score for f in factors)
    grade, status = grade_for_score(score)
    return ExpansionReadiness(score=score, grade=grade, status=status, factors=factors)
