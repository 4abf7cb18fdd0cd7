# gymling/game/store.py
"""
State holders over a key-value store.

Any object with get(key) -> value-or-None and set(key, value) works as
the backing store; values are plain JSON-compatible data. In the web app
that is SqlKeyValueStore (one row per user + key).
"""
import logging
import math
from typing import Any, Callable, Dict, Optional, Set

from .progression import (
    DEFAULT_XP_TO_NEXT,
    BagItem,
    Creature,
    PlayerStats,
    Stats,
)

logger = logging.getLogger(__name__)

CREATURE_KEY = "creature"
PLAYER_STATS_KEY = "playerStats"
WORKOUT_LOG_KEY = "workoutLog"
PERSONAL_RECORDS_KEY = "personalRecords"
WORKOUT_TEMPLATES_KEY = "workoutTemplates"


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def normalize_creature(data: Optional[Dict[str, Any]]) -> Creature:
    """
    Fill whatever is missing from the defaults. Partial stats are merged
    key by key; a non-finite xp or a non-positive xpToNext falls back to
    the default value.
    """
    base = Creature.default()
    data = data or {}

    xp = data.get("xp")
    xp_to_next = data.get("xpToNext")
    bag = data.get("bag")

    return Creature(
        name=data.get("name") if isinstance(data.get("name"), str) else base.name,
        level=int(data["level"]) if _is_number(data.get("level")) and data["level"] >= 1 else base.level,
        evolution_stage=(
            int(data["evolutionStage"])
            if _is_number(data.get("evolutionStage"))
            else base.evolution_stage
        ),
        xp=xp if _is_number(xp) and math.isfinite(xp) else base.xp,
        xp_to_next=(
            xp_to_next if _is_number(xp_to_next) and xp_to_next > 0 else DEFAULT_XP_TO_NEXT
        ),
        image_url=data.get("imageUrl", base.image_url),
        stats=Stats.from_dict(data.get("stats"), base=base.stats),
        bag=(
            [BagItem.from_dict(item) for item in bag if isinstance(item, dict)]
            if isinstance(bag, list)
            else base.bag
        ),
    )


class CreatureStore:
    """
    Owns the cached Creature for one key-value store.

    hydrate() loads (or seeds) the creature, update() applies a pure
    updater and persists the result, subscribe() registers a callback
    fired after every change.
    """

    def __init__(self, kv):
        self.kv = kv
        self._value: Optional[Creature] = None
        self._listeners: Set[Callable[[Creature], None]] = set()

    @property
    def value(self) -> Optional[Creature]:
        return self._value

    @property
    def is_loaded(self) -> bool:
        return self._value is not None

    def subscribe(self, listener: Callable[[Creature], None]) -> Callable[[], None]:
        self._listeners.add(listener)

        def unsubscribe() -> None:
            self._listeners.discard(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self._value)

    def hydrate(self) -> Creature:
        stored = self.kv.get(CREATURE_KEY)
        if stored:
            self._value = normalize_creature(stored)
        else:
            logger.debug("no stored creature, seeding defaults")
            self._value = normalize_creature(Creature.default().to_dict())
            self.kv.set(CREATURE_KEY, self._value.to_dict())
        self._notify()
        return self._value

    def update(self, updater: Callable[[Creature], Creature]) -> Creature:
        base = self._value or Creature.default()
        self._value = normalize_creature(updater(base).to_dict())
        self._notify()
        self.kv.set(CREATURE_KEY, self._value.to_dict())
        return self._value

    def reset(self) -> Creature:
        return self.update(lambda _current: Creature.default())


# -----------------------------
# Player stats
# -----------------------------
def load_player_stats(kv) -> PlayerStats:
    stored = kv.get(PLAYER_STATS_KEY)
    if stored:
        return PlayerStats.from_dict(stored)
    stats = PlayerStats.default()
    kv.set(PLAYER_STATS_KEY, stats.to_dict())
    return stats


def save_player_stats(kv, stats: PlayerStats) -> PlayerStats:
    kv.set(PLAYER_STATS_KEY, stats.to_dict())
    return stats
