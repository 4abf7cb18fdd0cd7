# gymling/game/cooldown.py
from datetime import date, datetime
from typing import Optional, Union

BATTLE_LOCK_KEY = "battleLock"

LOCKED_MESSAGE = "Your creature must recover. Log a workout to reset the cooldown."


def today_key(when: Union[date, datetime, str, None] = None) -> str:
    """YYYY-MM-DD for the given moment (local calendar day by default)."""
    if when is None:
        return date.today().isoformat()
    if isinstance(when, str):
        return when[:10]
    if isinstance(when, datetime):
        return when.date().isoformat()
    return when.isoformat()


class BattleLockGate:
    """
    Daily battle lock persisted under "battleLock".

    A loss locks the arena for the rest of the day; a win or any logged
    workout clears it.
    """

    def __init__(self, store):
        self.store = store

    def locked_until(self) -> Optional[str]:
        lock = self.store.get(BATTLE_LOCK_KEY)
        if isinstance(lock, dict):
            return lock.get("lockedUntil") or None
        return None

    def is_locked(self, today: Optional[str] = None) -> bool:
        until = self.locked_until()
        return bool(until) and until == today_key(today)

    def record_result(self, did_win: bool, today: Optional[str] = None) -> None:
        if did_win:
            self.clear()
        else:
            self.store.set(BATTLE_LOCK_KEY, {"lockedUntil": today_key(today)})

    def clear(self) -> None:
        self.store.set(BATTLE_LOCK_KEY, None)
