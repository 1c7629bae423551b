"""Level-up stat allocation with a total fallback.

Whatever the oracle does, ``allocate`` returns four non-negative integers
that sum to exactly the budget.
"""

from __future__ import annotations

import logging
import random

from daily.progression import STAT_POINTS_PER_LEVEL

from .client import OracleError, StatOracle
from .models import StatSplit

logger = logging.getLogger(__name__)


def random_split(budget: int, rng: random.Random | None = None) -> StatSplit:
    """Uniform draw over all 4-way non-negative splits of ``budget``."""
    rng = rng or random.Random()
    bars = sorted(rng.sample(range(budget + 3), 3))
    values = [bars[0], bars[1] - bars[0] - 1, bars[2] - bars[1] - 1, budget + 2 - bars[2]]
    return StatSplit.from_list(values)


def normalize_split(split: StatSplit, budget: int, rng: random.Random | None = None) -> StatSplit:
    """Rescale a bad split onto ``budget``; residue goes STR, VIT, AGI, INT."""
    values = [max(0, v) for v in split.as_list()]
    total = sum(values)
    if total == 0:
        return random_split(budget, rng)

    scaled = [v * budget // total for v in values]
    diff = budget - sum(scaled)
    if diff > 0:
        scaled[0] += diff
    else:
        excess = -diff
        for i in range(len(scaled)):
            if not excess:
                break
            taken = min(scaled[i], excess)
            scaled[i] -= taken
            excess -= taken
    return StatSplit.from_list(scaled)


class StatAllocator:
    """Turn a level-up into stat points via the oracle, or locally on failure."""

    def __init__(
        self,
        oracle: StatOracle | None = None,
        budget: int = STAT_POINTS_PER_LEVEL,
        rng: random.Random | None = None,
    ):
        self._oracle = oracle
        self._budget = budget
        self._rng = rng or random.Random()

    def allocate(self, habit_names: list[str], new_level: int) -> StatSplit:
        if self._oracle is None:
            return random_split(self._budget, self._rng)

        try:
            proposed = self._oracle.propose(list(habit_names), new_level, self._budget)
        except OracleError as e:
            logger.warning("Stat oracle failed for level %d, using random split: %s", new_level, e)
            return random_split(self._budget, self._rng)
        except Exception as e:
            logger.warning("Stat oracle crashed for level %d, using random split: %r", new_level, e, exc_info=True)
            return random_split(self._budget, self._rng)

        if not isinstance(proposed, StatSplit):
            logger.warning("Stat oracle returned %r; using random split", proposed)
            return random_split(self._budget, self._rng)

        if proposed.is_valid(self._budget):
            return proposed
        logger.warning("Stat oracle returned %s for a budget of %d; rescaling", proposed.as_list(), self._budget)
        return normalize_split(proposed, self._budget, self._rng)
