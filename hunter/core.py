"""Caller-facing facade: each mutating call persists the account afterwards.

The session or UI layer holds one loaded ``Account`` per login and routes every
action through here.
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path

from daily.progression import EXP_PER_QUEST, ToggleResult
from oracle.allocator import StatAllocator
from oracle.client import build_oracle

from .account import Account, AccountStatus, Quest
from .config import load_config
from .errors import ValidationError
from .store import AccountStore

logger = logging.getLogger(__name__)


class HunterSystem:
    """Wire config, store and stat allocator together."""

    def __init__(
        self,
        config: dict | None = None,
        store: AccountStore | None = None,
        allocator: StatAllocator | None = None,
    ):
        self._cfg = config if config is not None else load_config()

        root = Path(__file__).resolve().parent.parent
        storage = self._cfg.get("storage", {})
        self.store = store or AccountStore(root / storage.get("data_dir", "data"))
        self.allocator = allocator or StatAllocator(build_oracle(self._cfg))

    # ── Sessions ────────────────────────────────────────────────

    def register(self, username: str, password: str) -> Account:
        return self.store.register(username, password)

    def login(self, username: str, password: str) -> Account:
        return self.store.authenticate(username, password)

    def save(self, account: Account) -> None:
        self.store.save(account)

    # ── Actions ─────────────────────────────────────────────────

    def add_quest(self, account: Account, name: str) -> Quest:
        quest = account.add_quest(name)
        self.save(account)
        return quest

    def remove_quest(self, account: Account, index: int) -> bool:
        removed = account.remove_quest(index)
        if removed:
            self.save(account)
        return removed

    def toggle_quest(self, account: Account, index: int, now: datetime | None = None) -> ToggleResult:
        quest = account.quest_by_index(index)
        if quest is None:
            raise ValidationError(f"no quest at position {index + 1}")
        result = account.toggle_completion(quest.id, allocator=self.allocator, now=now)
        self.save(account)
        logger.debug("%s toggled %s -> %s", account.username, quest.id, result.completed)
        return result

    def set_reset_hour(self, account: Account, hour: int) -> None:
        account.update_reset_hour(hour)
        self.save(account)

    def status(self, account: Account, now: datetime | None = None) -> AccountStatus:
        return account.status(now)


def toast(result: ToggleResult) -> str:
    """One-line feedback for a completion flip."""
    if not result.completed:
        return ""
    if result.leveled_up:
        msg = "DING! You have leveled up."
        for split in result.stat_gains:
            msg += (
                f" STR +{split.strength} VIT +{split.vitality}"
                f" AGI +{split.agility} INT +{split.intelligence}"
            )
        return msg
    return f"The conditions have been met. +{EXP_PER_QUEST} EXP"
