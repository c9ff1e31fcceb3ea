# tests/test_money.py
# Деление сумм: точная сумма долей, остаток плательщику, ошибки ввода.

from __future__ import annotations

import random
from decimal import Decimal

import pytest

from src.utils.money import (
    EmptyParticipantSet,
    ExactAmountSumMismatch,
    InvalidSplitInput,
    PercentageSumMismatch,
    SplitError,
    ZeroTotalShares,
    allocate_split,
    split_by_amounts,
    split_by_percentages,
    split_by_shares,
    split_evenly,
)


# ── equal ──────────────────────────────────────────────────────────────────

def test_split_evenly_gives_remainder_to_payer():
    assert split_evenly(1000, ["a", "b", "c"], "a") == {"a": 334, "b": 333, "c": 333}


def test_split_evenly_remainder_goes_to_non_first_payer():
    assert split_evenly(1001, ["a", "b", "c"], "c") == {"a": 333, "b": 333, "c": 335}


def test_split_evenly_zero_total():
    assert split_evenly(0, ["a", "b"], "a") == {"a": 0, "b": 0}


def test_split_evenly_empty_participants():
    with pytest.raises(EmptyParticipantSet):
        split_evenly(1000, [], "a")


def test_split_evenly_payer_not_participant_keeps_sum():
    result = split_evenly(100, ["b", "c", "d"], "a")
    assert sum(result.values()) == 100
    assert result == {"b": 34, "c": 33, "d": 33}


def test_split_evenly_rejects_negative_total():
    with pytest.raises(InvalidSplitInput):
        split_evenly(-5, ["a"], "a")


def test_split_evenly_rejects_duplicates():
    with pytest.raises(InvalidSplitInput):
        split_evenly(100, ["a", "a"], "a")


def test_payer_share_is_never_smaller_in_equal_split():
    rng = random.Random(7)
    for _ in range(200):
        n = rng.randint(1, 9)
        ids = [f"u{i}" for i in range(n)]
        payer = rng.choice(ids)
        total = rng.randint(0, 100_000)
        result = split_evenly(total, ids, payer)
        assert sum(result.values()) == total
        assert all(result[payer] >= v for v in result.values())


# ── percentage ─────────────────────────────────────────────────────────────

def test_split_by_percentages_exact():
    result = split_by_percentages(10000, [("a", 50), ("b", 30), ("c", 20)], "a")
    assert result == {"a": 5000, "b": 3000, "c": 2000}


def test_split_by_percentages_thirds():
    third = Decimal("33.33")
    result = split_by_percentages(100, [("a", third), ("b", third), ("c", Decimal("33.34"))], "b")
    assert sum(result.values()) == 100
    assert result == {"a": 33, "b": 34, "c": 33}


def test_split_by_percentages_fractional_within_tolerance():
    result = split_by_percentages(999, [("a", "33.33"), ("b", "33.33"), ("c", "33.33")], "a")
    assert sum(result.values()) == 999


def test_split_by_percentages_overshoot_within_tolerance_keeps_sum():
    result = split_by_percentages(1_000_000, [("a", "50.01"), ("b", "50")], "a")
    assert sum(result.values()) == 1_000_000
    assert result["b"] == 500_000


def test_split_by_percentages_overshoot_taken_from_largest_when_payer_has_zero():
    result = split_by_percentages(1_000_000, [("a", 0), ("b", "50.01"), ("c", 50)], "a")
    assert result == {"a": 0, "b": 500_000, "c": 500_000}


def test_split_by_percentages_overshoot_with_zero_payer_keeps_sum():
    result = split_by_percentages(
        1_000_000, [("a", 0), ("b", "33.34"), ("c", "33.34"), ("d", "33.33")], "a"
    )
    assert sum(result.values()) == 1_000_000
    assert result["a"] == 0
    assert all(v >= 0 for v in result.values())


@pytest.mark.parametrize("bad", [float("nan"), float("inf"), Decimal("NaN"), "-Infinity"])
def test_split_by_percentages_rejects_non_finite(bad):
    with pytest.raises(InvalidSplitInput):
        split_by_percentages(100, [("a", bad), ("b", 100)], "a")


def test_split_by_percentages_mismatch_names_actual_sum():
    with pytest.raises(PercentageSumMismatch) as exc:
        split_by_percentages(1000, [("a", 50), ("b", 40)], "a")
    assert exc.value.actual_sum == 90
    assert "90" in str(exc.value)


def test_split_by_percentages_empty_is_mismatch():
    with pytest.raises(PercentageSumMismatch):
        split_by_percentages(1000, [], "a")


def test_split_by_percentages_out_of_range():
    with pytest.raises(InvalidSplitInput):
        split_by_percentages(1000, [("a", 150), ("b", -50)], "a")


# ── shares ─────────────────────────────────────────────────────────────────

def test_split_by_shares_two_to_one():
    assert split_by_shares(10000, [("a", 2), ("b", 1)], "a") == {"a": 6667, "b": 3333}


def test_split_by_shares_zero_weight_participant():
    assert split_by_shares(900, [("a", 1), ("b", 0), ("c", 2)], "a") == {"a": 300, "b": 0, "c": 600}


def test_split_by_shares_zero_total_weight():
    with pytest.raises(ZeroTotalShares):
        split_by_shares(1000, [("a", 0), ("b", 0)], "a")


def test_split_by_shares_empty():
    with pytest.raises(ZeroTotalShares):
        split_by_shares(1000, [], "a")


def test_split_by_shares_sum_invariant():
    rng = random.Random(11)
    for _ in range(200):
        n = rng.randint(1, 6)
        entries = [(i, rng.randint(1, 10)) for i in range(n)]
        total = rng.randint(0, 1_000_000)
        result = split_by_shares(total, entries, rng.randrange(n))
        assert sum(result.values()) == total


# ── exact ──────────────────────────────────────────────────────────────────

def test_split_by_amounts_passthrough():
    assert split_by_amounts(10000, [("a", 6000), ("b", 4000)]) == {"a": 6000, "b": 4000}


def test_split_by_amounts_mismatch_names_both_sums():
    with pytest.raises(ExactAmountSumMismatch) as exc:
        split_by_amounts(10000, [("a", 6000), ("b", 3000)])
    assert exc.value.actual_sum == 9000
    assert exc.value.expected_total == 10000
    assert "9000" in str(exc.value) and "10000" in str(exc.value)


def test_split_by_amounts_rejects_non_integer():
    with pytest.raises(InvalidSplitInput):
        split_by_amounts(100, [("a", 50.5), ("b", 49.5)])


# ── dispatcher ─────────────────────────────────────────────────────────────

@pytest.mark.parametrize(
    "split_type,entries,expected",
    [
        ("equal", [(1, None), (2, None), (3, None)], {1: 334, 2: 333, 3: 333}),
        ("percentage", [(1, 25), (2, 75)], {1: 250, 2: 750}),
        ("shares", [(1, 1), (2, 3)], {1: 250, 2: 750}),
        ("exact", [(1, 400), (2, 600)], {1: 400, 2: 600}),
    ],
)
def test_allocate_split_dispatch(split_type, entries, expected):
    assert allocate_split(split_type, 1000, entries, 1) == expected


def test_allocate_split_unknown_type():
    with pytest.raises(InvalidSplitInput):
        allocate_split("random", 1000, [(1, None)], 1)


def test_all_split_errors_are_value_errors():
    for exc_type in (EmptyParticipantSet, ZeroTotalShares, InvalidSplitInput):
        assert issubclass(exc_type, SplitError)
        assert issubclass(exc_type, ValueError)


def test_split_is_deterministic():
    entries = [("x", "12.5"), ("y", "37.5"), ("z", 50)]
    first = split_by_percentages(12345, entries, "y")
    second = split_by_percentages(12345, entries, "y")
    assert first == second
    assert list(first) == ["x", "y", "z"]
