"""Tests for level-up stat allocation and its fallbacks."""

import logging
import random

import pytest

from oracle.allocator import StatAllocator, normalize_split, random_split
from oracle.client import OracleError
from oracle.models import StatSplit


class FakeOracle:
    def __init__(self, reply: StatSplit | None = None, error: Exception | None = None):
        self.reply = reply
        self.error = error
        self.calls: list[tuple[list[str], int, int]] = []

    def propose(self, habit_names: list[str], level: int, budget: int) -> StatSplit:
        self.calls.append((habit_names, level, budget))
        if self.error:
            raise self.error
        return self.reply


def _valid(split: StatSplit, budget: int = 4) -> bool:
    return all(v >= 0 for v in split.as_list()) and split.total == budget


def test_valid_reply_used_as_is():
    oracle = FakeOracle(StatSplit(2, 0, 1, 1))
    allocator = StatAllocator(oracle)
    assert allocator.allocate(["Gym", "Read"], 3) == StatSplit(2, 0, 1, 1)
    assert oracle.calls == [(["Gym", "Read"], 3, 4)]


def test_oracle_error_falls_back_to_random():
    allocator = StatAllocator(FakeOracle(error=OracleError("timeout")), rng=random.Random(7))
    assert _valid(allocator.allocate(["Gym"], 2))


def test_unexpected_exception_falls_back_to_random(caplog):
    allocator = StatAllocator(FakeOracle(error=RuntimeError("SDK bug")), rng=random.Random(7))
    with caplog.at_level(logging.WARNING, logger="oracle.allocator"):
        assert _valid(allocator.allocate(["Gym"], 2))
    assert any(r.levelno == logging.WARNING for r in caplog.records)


def test_non_split_reply_falls_back_to_random():
    allocator = StatAllocator(FakeOracle(reply=None), rng=random.Random(5))
    assert _valid(allocator.allocate(["Gym"], 2))


def test_no_oracle_uses_random():
    allocator = StatAllocator(None, rng=random.Random(3))
    assert _valid(allocator.allocate([], 2))


@pytest.mark.parametrize(
    "reply",
    [
        StatSplit(8, 0, 0, 0),
        StatSplit(1, 1, 1, 1 + 6),
        StatSplit(1, 0, 0, 0),
        StatSplit(3, 3, 3, 0),
        StatSplit(-2, 5, 0, 0),
        StatSplit(0, 0, 0, 0),
        StatSplit(-1, -1, -1, -1),
        StatSplit(100, 1, 1, 1),
    ],
)
def test_any_reply_yields_valid_split(reply):
    allocator = StatAllocator(FakeOracle(reply), rng=random.Random(11))
    assert _valid(allocator.allocate(["Run"], 5))


def test_normalize_rescales_proportionally():
    assert normalize_split(StatSplit(4, 4, 0, 0), 4) == StatSplit(2, 2, 0, 0)
    assert normalize_split(StatSplit(0, 0, 0, 8), 4) == StatSplit(0, 0, 0, 4)


def test_normalize_residue_goes_to_strength():
    # 3 * 4 // 9 == 1 each, residue 1 to strength
    assert normalize_split(StatSplit(3, 3, 3, 0), 4) == StatSplit(2, 1, 1, 0)
    assert normalize_split(StatSplit(1, 0, 0, 0), 4) == StatSplit(4, 0, 0, 0)


def test_random_split_covers_budget():
    rng = random.Random(42)
    seen = set()
    for _ in range(500):
        split = random_split(4, rng)
        assert _valid(split)
        seen.add(tuple(split.as_list()))
    # 35 compositions of 4 into 4 parts
    assert len(seen) == 35
