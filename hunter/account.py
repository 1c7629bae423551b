"""In-memory account: quests, progression, streaks, and the lock guarding them.

Every public method takes the account's lock for its whole critical section.
The ``daily`` helpers it calls assume that lock is held.
"""

from __future__ import annotations

import logging
import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any

from daily import calendar, progression, streak
from daily.progression import ToggleResult
from oracle.allocator import StatAllocator
from oracle.models import StatSplit

from .errors import ValidationError

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 2
DEFAULT_LEVEL = 1
DEFAULT_RESET_HOUR = 4
BASE_STAT = 10


def default_stat(level: int) -> int:
    return BASE_STAT + level


def new_quest_id() -> str:
    return f"q_{uuid.uuid4().hex}"


def _int_field(raw: dict[str, Any], key: str, default: int, filled: list[str]) -> int:
    """Stored int, or ``default`` when the key is absent or not an int."""
    value = raw.get(key)
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if key in raw:
        filled.append(key)
    return default


@dataclass
class Quest:
    id: str
    name: str


@dataclass
class Stats:
    strength: int = BASE_STAT + DEFAULT_LEVEL
    vitality: int = BASE_STAT + DEFAULT_LEVEL
    agility: int = BASE_STAT + DEFAULT_LEVEL
    intelligence: int = BASE_STAT + DEFAULT_LEVEL

    def add(self, split: StatSplit) -> None:
        self.strength += split.strength
        self.vitality += split.vitality
        self.agility += split.agility
        self.intelligence += split.intelligence

    def to_record(self) -> dict[str, int]:
        return {"str": self.strength, "vit": self.vitality, "agi": self.agility, "int": self.intelligence}


@dataclass
class QuestStatus:
    index: int
    id: str
    name: str
    done: bool


@dataclass
class AccountStatus:
    """Read-only snapshot for display."""

    username: str
    level: int
    experience: int
    exp_in_level: int
    exp_for_next_level: int
    stats: Stats
    current_streak: int
    longest_streak: int
    reset_hour: int
    time_until_reset: timedelta
    all_complete_today: bool
    quests: list[QuestStatus] = field(default_factory=list)


@dataclass
class Account:
    username: str
    password_hash: str
    quests: list[Quest] = field(default_factory=list)
    level: int = DEFAULT_LEVEL
    experience: int = 0
    stats: Stats = field(default_factory=Stats)
    current_streak: int = 0
    longest_streak: int = 0
    last_complete_day: str = ""
    highest_level: int = DEFAULT_LEVEL
    ledger: dict[str, dict[str, bool]] = field(default_factory=dict)
    reset_hour: int = DEFAULT_RESET_HOUR
    _lock: Any = field(default_factory=threading.RLock, repr=False, compare=False)

    # ── Completion / progression ────────────────────────────────

    def toggle_completion(
        self,
        quest_id: str,
        allocator: StatAllocator | None = None,
        now: datetime | None = None,
    ) -> ToggleResult:
        """Flip today's completion, award level-up stats, refresh the streak."""
        with self._lock:
            result = progression.apply_toggle(self, quest_id, now)
            if result.new_levels:
                allocator = allocator or StatAllocator()
                names = [q.name for q in self.quests]
                for level in result.new_levels:
                    if level <= self.highest_level:
                        continue
                    split = allocator.allocate(names, level)
                    self.stats.add(split)
                    self.highest_level = level
                    result.stat_gains.append(split)
                    logger.info("%s reached level %d: +%s", self.username, level, split.as_list())
            streak.refresh_streak(self, now)
            return result

    def completed_today(self, quest_id: str, now: datetime | None = None) -> bool:
        with self._lock:
            today = calendar.day_key(now, self.reset_hour)
            return self.ledger.get(today, {}).get(quest_id, False)

    def exp_for_next_level(self) -> int:
        with self._lock:
            return progression.exp_for_next_level(self.level)

    def exp_in_current_level(self) -> int:
        with self._lock:
            return progression.exp_in_current_level(self.level, self.experience)

    def streak_values(self, now: datetime | None = None) -> tuple[int, int]:
        """(active streak, longest streak)."""
        with self._lock:
            return streak.active_streak(self, now), self.longest_streak

    # ── Quests ──────────────────────────────────────────────────

    def add_quest(self, name: str) -> Quest:
        name = (name or "").strip()
        if not name:
            raise ValidationError("quest name required")
        with self._lock:
            quest = Quest(id=new_quest_id(), name=name)
            self.quests.append(quest)
            return quest

    def remove_quest(self, index: int) -> bool:
        """Drop the quest at ``index``. Ledger history is left in place."""
        with self._lock:
            if index < 0 or index >= len(self.quests):
                return False
            del self.quests[index]
            return True

    def quest_by_index(self, index: int) -> Quest | None:
        with self._lock:
            if index < 0 or index >= len(self.quests):
                return None
            return self.quests[index]

    # ── Settings ────────────────────────────────────────────────

    def update_reset_hour(self, hour: int) -> None:
        if not isinstance(hour, int) or isinstance(hour, bool) or not 0 <= hour <= 23:
            raise ValidationError("reset hour must be between 0 and 23")
        with self._lock:
            self.reset_hour = hour

    def next_reset(self, now: datetime | None = None) -> datetime:
        with self._lock:
            return calendar.next_reset(now, self.reset_hour)

    def time_until_reset(self, now: datetime | None = None) -> timedelta:
        with self._lock:
            return calendar.time_until_reset(now, self.reset_hour)

    def status(self, now: datetime | None = None) -> AccountStatus:
        with self._lock:
            today = calendar.day_key(now, self.reset_hour)
            row = self.ledger.get(today, {})
            return AccountStatus(
                username=self.username,
                level=self.level,
                experience=self.experience,
                exp_in_level=progression.exp_in_current_level(self.level, self.experience),
                exp_for_next_level=progression.exp_for_next_level(self.level),
                stats=Stats(**vars(self.stats)),
                current_streak=streak.active_streak(self, now),
                longest_streak=self.longest_streak,
                reset_hour=self.reset_hour,
                time_until_reset=calendar.time_until_reset(now, self.reset_hour),
                all_complete_today=streak.all_complete(self, today),
                quests=[
                    QuestStatus(index=i, id=q.id, name=q.name, done=row.get(q.id, False))
                    for i, q in enumerate(self.quests)
                ],
            )

    # ── Persistence ─────────────────────────────────────────────

    def to_record(self) -> dict[str, Any]:
        """Snapshot the full record for storage."""
        with self._lock:
            return {
                "schema_version": SCHEMA_VERSION,
                "username": self.username,
                "password_hash": self.password_hash,
                "habits": [{"id": q.id, "name": q.name} for q in self.quests],
                "level": self.level,
                "exp": self.experience,
                "stats": self.stats.to_record(),
                "current_streak": self.current_streak,
                "longest_streak": self.longest_streak,
                "last_complete_day": self.last_complete_day,
                "highest_level": self.highest_level,
                "daily_completions": {day: dict(row) for day, row in self.ledger.items()},
                "day_reset_hour": self.reset_hour,
            }

    @classmethod
    def from_record(cls, raw: dict[str, Any]) -> Account:
        """Build from a stored record, filling only fields absent from it."""
        filled: list[str] = []

        level = raw.get("level", DEFAULT_LEVEL)
        if not isinstance(level, int) or level < 1:
            level = DEFAULT_LEVEL
            filled.append("level")

        raw_stats = raw.get("stats")
        if not isinstance(raw_stats, dict):
            raw_stats = {}
            filled.append("stats")
        stat_values = {}
        for key, attr in (("str", "strength"), ("vit", "vitality"), ("agi", "agility"), ("int", "intelligence")):
            if key in raw_stats and isinstance(raw_stats[key], int):
                stat_values[attr] = max(0, raw_stats[key])
            else:
                stat_values[attr] = default_stat(level)

        reset_hour = raw.get("day_reset_hour")
        if not isinstance(reset_hour, int) or isinstance(reset_hour, bool) or not 0 <= reset_hour <= 23:
            reset_hour = DEFAULT_RESET_HOUR
            filled.append("day_reset_hour")

        ledger = raw.get("daily_completions")
        if not isinstance(ledger, dict):
            ledger = {}
            filled.append("daily_completions")

        current = max(0, _int_field(raw, "current_streak", 0, filled))
        longest = max(current, _int_field(raw, "longest_streak", 0, filled))

        account = cls(
            username=str(raw.get("username", "")),
            password_hash=str(raw.get("password_hash", "")),
            quests=[Quest(id=str(h.get("id", "")), name=str(h.get("name", ""))) for h in raw.get("habits") or [] if isinstance(h, dict)],
            level=level,
            experience=max(0, _int_field(raw, "exp", 0, filled)),
            stats=Stats(**stat_values),
            current_streak=current,
            longest_streak=longest,
            last_complete_day=str(raw.get("last_complete_day") or ""),
            highest_level=_int_field(raw, "highest_level", level, filled),
            ledger={str(day): {str(k): bool(v) for k, v in (row or {}).items()} for day, row in ledger.items() if isinstance(row, dict) or row is None},
            reset_hour=reset_hour,
        )
        if filled:
            logger.warning("Upgraded record for %s: defaulted %s", account.username, ", ".join(filled))
        return account
