"""
Daily battle lock tests.
"""

from datetime import date, datetime

from gymling.game.cooldown import BATTLE_LOCK_KEY, BattleLockGate, today_key


class TestTodayKey:
    def test_formats(self):
        assert today_key(datetime(2025, 4, 9, 23, 59)) == "2025-04-09"
        assert today_key(date(2025, 4, 9)) == "2025-04-09"
        assert today_key("2025-04-09T08:00:00.000Z") == "2025-04-09"

    def test_defaults_to_local_today(self):
        assert today_key() == date.today().isoformat()


class TestBattleLockGate:
    def test_unlocked_when_nothing_stored(self, kv):
        gate = BattleLockGate(kv)
        assert gate.locked_until() is None
        assert gate.is_locked("2025-04-09") is False

    def test_loss_locks_for_the_day(self, kv):
        gate = BattleLockGate(kv)
        gate.record_result(did_win=False, today="2025-04-09")

        assert kv.get(BATTLE_LOCK_KEY) == {"lockedUntil": "2025-04-09"}
        assert gate.is_locked("2025-04-09") is True
        assert gate.is_locked("2025-04-10") is False

    def test_win_clears(self, kv):
        gate = BattleLockGate(kv)
        gate.record_result(did_win=False, today="2025-04-09")
        gate.record_result(did_win=True, today="2025-04-09")

        assert kv.get(BATTLE_LOCK_KEY) is None
        assert gate.is_locked("2025-04-09") is False

    def test_clear(self, kv):
        gate = BattleLockGate(kv)
        gate.record_result(did_win=False, today="2025-04-09")
        gate.clear()
        assert gate.is_locked("2025-04-09") is False

    def test_malformed_lock_is_ignored(self, kv):
        kv.set(BATTLE_LOCK_KEY, "2025-04-09")
        assert BattleLockGate(kv).is_locked("2025-04-09") is False
