"""Consecutive-day streak bookkeeping.

The streak is derived from today's ledger row plus the persisted counters,
so a refresh never scans the full ledger.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import TYPE_CHECKING

from .calendar import day_key, previous_day_key

if TYPE_CHECKING:
    from hunter.account import Account

logger = logging.getLogger(__name__)


def all_complete(account: Account, key: str) -> bool:
    if not account.quests:
        return False
    row = account.ledger.get(key, {})
    return all(row.get(q.id, False) for q in account.quests)


def refresh_streak(account: Account, now: datetime | None = None) -> None:
    """Credit or revoke today's streak day after a ledger change."""
    today = day_key(now, account.reset_hour)

    if not all_complete(account, today):
        if account.last_complete_day == today:
            # Today was credited, then a quest got unchecked.
            account.current_streak = max(0, account.current_streak - 1)
            account.last_complete_day = ""
        return

    if account.last_complete_day == today:
        return

    if account.last_complete_day == previous_day_key(today):
        account.current_streak += 1
    else:
        account.current_streak = 1
    account.last_complete_day = today
    account.longest_streak = max(account.longest_streak, account.current_streak)
    logger.debug("%s streak now %d (best %d)", account.username, account.current_streak, account.longest_streak)


def active_streak(account: Account, now: datetime | None = None) -> int:
    """Streak as it stands today: 0 once a full day has been missed."""
    if not account.last_complete_day:
        return 0
    today = day_key(now, account.reset_hour)
    if account.last_complete_day in (today, previous_day_key(today)):
        return account.current_streak
    return 0
