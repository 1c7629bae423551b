"""Tests for streak bookkeeping across logical days."""

from datetime import datetime, timedelta, timezone

from daily.progression import apply_toggle
from daily.streak import active_streak, all_complete, refresh_streak
from hunter.account import Account, Quest

DAY_D = datetime(2026, 3, 10, 9, 0, tzinfo=timezone.utc)


def _account(*names: str) -> Account:
    acct = Account(username="bob", password_hash="x", reset_hour=4)
    for i, name in enumerate(names):
        acct.quests.append(Quest(id=f"q_{i}", name=name))
    return acct


def _complete_all(acct: Account, now: datetime) -> None:
    for q in acct.quests:
        apply_toggle(acct, q.id, now)
    refresh_streak(acct, now)


def test_streak_scenario_with_skipped_day():
    acct = _account("Run")

    _complete_all(acct, DAY_D)
    assert acct.current_streak == 1
    assert acct.last_complete_day == "2026-03-10"

    _complete_all(acct, DAY_D + timedelta(days=1))
    assert acct.current_streak == 2

    _complete_all(acct, DAY_D + timedelta(days=3))
    assert acct.current_streak == 1
    assert acct.longest_streak == 2


def test_completion_before_reset_hour_counts_for_previous_day():
    acct = _account("Run")
    _complete_all(acct, DAY_D)
    # 02:00 on D+2 is still logical day D+1.
    _complete_all(acct, datetime(2026, 3, 12, 2, 0, tzinfo=timezone.utc))
    assert acct.current_streak == 2
    assert acct.last_complete_day == "2026-03-11"


def test_uncheck_revokes_todays_credit():
    acct = _account("Run", "Read")
    _complete_all(acct, DAY_D)
    assert acct.current_streak == 1

    apply_toggle(acct, "q_1", DAY_D)
    refresh_streak(acct, DAY_D)
    assert acct.current_streak == 0
    assert acct.last_complete_day == ""
    assert acct.longest_streak >= acct.current_streak

    apply_toggle(acct, "q_1", DAY_D)
    refresh_streak(acct, DAY_D)
    assert acct.current_streak == 1


def test_partial_completion_does_not_credit():
    acct = _account("Run", "Read")
    apply_toggle(acct, "q_0", DAY_D)
    refresh_streak(acct, DAY_D)
    assert acct.current_streak == 0
    assert acct.last_complete_day == ""


def test_no_quests_never_complete():
    acct = _account()
    refresh_streak(acct, DAY_D)
    assert all_complete(acct, "2026-03-10") is False
    assert acct.current_streak == 0


def test_refresh_is_idempotent_within_a_day():
    acct = _account("Run")
    _complete_all(acct, DAY_D)
    refresh_streak(acct, DAY_D)
    refresh_streak(acct, DAY_D + timedelta(hours=5))
    assert acct.current_streak == 1


def test_active_streak_drops_to_zero_after_missed_day():
    acct = _account("Run")
    _complete_all(acct, DAY_D)
    assert active_streak(acct, DAY_D) == 1
    assert active_streak(acct, DAY_D + timedelta(days=1)) == 1
    assert active_streak(acct, DAY_D + timedelta(days=2)) == 0
    assert acct.current_streak == 1


def test_longest_never_below_current():
    acct = _account("Run")
    now = DAY_D
    for step in range(10):
        _complete_all(acct, now)
        assert acct.longest_streak >= acct.current_streak >= 0
        now += timedelta(days=1 if step % 3 else 2)
