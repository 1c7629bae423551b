"""Experience and level rules for quest completion toggles.

These helpers mutate an account in place and assume the caller already holds
the account lock (see ``hunter.account.Account``).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any

from hunter.errors import ValidationError

from .calendar import day_key

if TYPE_CHECKING:
    from hunter.account import Account


EXP_PER_QUEST = 10
EXP_PER_LEVEL = 100
STAT_POINTS_PER_LEVEL = 4


@dataclass
class ToggleResult:
    """Outcome of a single completion flip."""

    quest_id: str
    completed: bool  # ledger value after the flip
    gained_exp: bool
    leveled_up: bool = False
    new_levels: list[int] = field(default_factory=list)  # one per level-up event
    stat_gains: list[Any] = field(default_factory=list)  # StatSplit per awarded level


def exp_for_next_level(level: int) -> int:
    return level * EXP_PER_LEVEL


def exp_in_current_level(level: int, experience: int) -> int:
    return experience - (level - 1) * EXP_PER_LEVEL


def gain_exp(account: Account, amount: int) -> list[int]:
    """Add experience and return every level reached on the way up."""
    account.experience += amount
    reached: list[int] = []
    while account.experience >= exp_for_next_level(account.level):
        account.level += 1
        reached.append(account.level)
    return reached


def lose_exp(account: Account, amount: int) -> None:
    account.experience = max(0, account.experience - amount)
    while account.level > 1 and account.experience < (account.level - 1) * EXP_PER_LEVEL:
        account.level -= 1


def apply_toggle(account: Account, quest_id: str, now: datetime | None = None) -> ToggleResult:
    """Flip today's completion for ``quest_id`` and settle experience/level."""
    if not any(q.id == quest_id for q in account.quests):
        raise ValidationError(f"unknown quest id: {quest_id}")

    today = day_key(now, account.reset_hour)
    row = account.ledger.setdefault(today, {})
    was = row.get(quest_id, False)
    row[quest_id] = not was

    if not was:
        new_levels = gain_exp(account, EXP_PER_QUEST)
        return ToggleResult(
            quest_id=quest_id,
            completed=True,
            gained_exp=True,
            leveled_up=bool(new_levels),
            new_levels=new_levels,
        )

    lose_exp(account, EXP_PER_QUEST)
    return ToggleResult(quest_id=quest_id, completed=False, gained_exp=False)
