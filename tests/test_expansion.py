import pytest

from branch_cashflow.engine import MonthlyMetric
from branch_cashflow.expansion import (
    FACTOR_RULES,
    POINTS,
    assess_expansion_readiness,
    factor_status,
    grade_for_score,
    score_factor,
)
from branch_cashflow.metrics import profit_consistency


def test_eighty_percent_consistency_is_good() -> None:
    """4 profitable months out of 5 is exactly on the 'good' threshold."""
    monthly = [
        MonthlyMetric(f"2024-0{i}", 100.0, expenses, 100.0 - expenses, 0.0)
        for i, expenses in enumerate([10.0, 20.0, 30.0, 150.0, 40.0], start=1)
    ]
    consistency = profit_consistency(monthly)
    rule = next(r for r in FACTOR_RULES if r.key == "profit_consistency")

    factor = score_factor(rule, consistency)

    assert consistency == pytest.approx(80.0)

    assert factor.status == "good"
    assert factor.score == 25


@pytest.mark.parametrize(
    ("key", "value", "expected"),
    [
        ("profit_consistency", 79.99, "okay"),
        ("profit_consistency", 60.0, "okay"),
        ("profit_consistency", 59.9, "poor"),
        ("gross_margin", 50.0, "good"),
        ("gross_margin", 30.0, "okay"),
        ("gross_margin", 29.0, "poor"),
        ("revenue_growth", 5.0, "good"),
        ("revenue_growth", 0.0, "okay"),
        ("revenue_growth", -0.1, "poor"),
        ("margin_stability", 30.0, "good"),
        ("margin_stability", 10.0, "okay"),
        ("margin_stability", 9.99, "poor"),
    ],
)
def test_factor_thresholds_are_inclusive(key: str, value: float, expected: str) -> None:
    rule = next(r for r in FACTOR_RULES if r.key == key)
    assert factor_status(value, rule.good, rule.okay) == expected


def test_scoring_is_monotonic_in_each_factor() -> None:
    values = [-50.0, -1.0, 0.0, 4.9, 5.0, 9.9, 10.0, 29.9, 30.0, 50.0, 60.0, 80.0, 150.0]
    for rule in FACTOR_RULES:
        scores = [score_factor(rule, v).score for v in values]
        assert scores == sorted(scores), rule.key


@pytest.mark.parametrize(
    ("score", "grade", "status"),
    [
        (100, "A", "Ready"),
        (85, "A", "Ready"),
        (84, "B", "Almost Ready"),
        (70, "B", "Almost Ready"),
        (55, "C", "Almost Ready"),
        (40, "D", "Not Yet"),
        (39, "F", "Not Yet"),
        (20, "F", "Not Yet"),
    ],
)
def test_grade_mapping(score: int, grade: str, status: str) -> None:
    assert grade_for_score(score) == (grade, status)


def test_assess_expansion_readiness_all_good() -> None:
    readiness = assess_expansion_readiness(
        profit_consistency=100.0,
        gross_margin=60.0,
        average_revenue_growth=8.0,
        lowest_margin=35.0,
    )

    assert readiness.score == 100
    assert readiness.grade == "A"
    assert readiness.status == "Ready"
    assert [f.key for f in readiness.factors] == [
        "profit_consistency",
        "gross_margin",
        "revenue_growth",
        "margin_stability",
    ]


def test_assess_expansion_readiness_mixed() -> None:
    readiness = assess_expansion_readiness(
        profit_consistency=80.0,  # good 25
        gross_margin=40.0,  # okay 15
        average_revenue_growth=-3.0,  # poor 5
        lowest_margin=12.0,  # okay 15
    )

    assert readiness.score == 60
    assert readiness.grade == "C"
    assert readiness.factor("revenue_growth").status == "poor"
    assert readiness.factor("gross_margin").value == 40.0
    with pytest.raises(KeyError):
        readiness.factor("unknown")


def test_minimum_score_is_twenty() -> None:
    readiness = assess_expansion_readiness(0.0, -10.0, -10.0, -10.0)
    assert readiness.score == 4 * POINTS["poor"] == 20
    assert readiness.grade == "F"
