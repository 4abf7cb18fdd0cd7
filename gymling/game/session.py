# gymling/game/session.py
"""
Read-modify-write flows for one player.

Every "you can't do that right now" case comes back as a report with a
status other than "resolved"/"saved"; nothing here raises for gameplay.
Store errors are not caught and reach the caller.
"""
import logging
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Dict, List, Optional

from .battle import BattleConfig, BattleOutcome, PreparationState, simulate_battle
from .cooldown import LOCKED_MESSAGE, BattleLockGate, today_key
from .monsters import Monster, available_monsters, find_monster
from .progression import (
    BATTLE_ENERGY_COST,
    Creature,
    PlayerStats,
    Stats,
    add_player_xp,
    clamp_energy_to_level,
    get_max_energy_for_level,
    refill_energy,
    spend_energy,
)
from .records import (
    PRAchievement,
    Workout,
    evaluate_personal_records,
    records_from_dict,
    records_to_dict,
)
from .rewards import (
    apply_xp_gain,
    calculate_workout_metrics,
    compute_stat_boosts,
    compute_workout_xp,
    compute_xp_gain,
)
from .store import (
    PERSONAL_RECORDS_KEY,
    WORKOUT_LOG_KEY,
    WORKOUT_TEMPLATES_KEY,
    CreatureStore,
    load_player_stats,
    save_player_stats,
)

logger = logging.getLogger(__name__)

NO_ENERGY_MESSAGE = "Not enough energy for another battle."
EMPTY_WORKOUT_MESSAGE = "Log at least one exercise with a set."


def _new_id() -> str:
    return uuid.uuid4().hex


@dataclass
class BattleReport:
    status: str  # resolved | unknown_monster | locked | no_energy
    message: str = ""
    monster: Optional[Monster] = None
    outcome: Optional[BattleOutcome] = None
    xp_gain: int = 0
    creature: Optional[Creature] = None
    player_stats: Optional[PlayerStats] = None

    @property
    def resolved(self) -> bool:
        return self.status == "resolved"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status,
            "message": self.message,
            "monster": self.monster.to_dict() if self.monster else None,
            "outcome": self.outcome.to_dict() if self.outcome else None,
            "xp_gain": self.xp_gain,
            "creature": self.creature.to_dict() if self.creature else None,
            "player_stats": self.player_stats.to_dict() if self.player_stats else None,
        }


@dataclass
class WorkoutReport:
    status: str  # saved | empty_workout
    message: str = ""
    workout: Optional[Workout] = None
    achievements: List[PRAchievement] = field(default_factory=list)
    stat_boost: Optional[Stats] = None
    creature: Optional[Creature] = None
    player_stats: Optional[PlayerStats] = None

    @property
    def saved(self) -> bool:
        return self.status == "saved"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status,
            "message": self.message,
            "workout": self.workout.to_dict() if self.workout else None,
            "pr_achievements": [a.to_dict() for a in self.achievements],
            "stat_boost": self.stat_boost.to_dict() if self.stat_boost else None,
            "creature": self.creature.to_dict() if self.creature else None,
            "player_stats": self.player_stats.to_dict() if self.player_stats else None,
        }


class GameSession:
    def __init__(
        self,
        kv,
        battle_config: Optional[BattleConfig] = None,
        energy_cost: int = BATTLE_ENERGY_COST,
    ):
        self.kv = kv
        self.battle_config = battle_config or BattleConfig()
        self.energy_cost = energy_cost
        self.creatures = CreatureStore(kv)
        self.lock = BattleLockGate(kv)

    # ------------------------------
    # Reads
    # ------------------------------
    def creature(self) -> Creature:
        if not self.creatures.is_loaded:
            self.creatures.hydrate()
        return self.creatures.value

    def player_stats(self) -> PlayerStats:
        return load_player_stats(self.kv)

    def status(self, today: Optional[str] = None) -> Dict[str, Any]:
        creature = self.creature()
        stats = self.player_stats()
        max_energy = get_max_energy_for_level(creature.level)
        return {
            "creature": creature.to_dict(),
            "player_stats": stats.to_dict(),
            "energy": clamp_energy_to_level(stats.energy, creature.level),
            "max_energy": max_energy,
            "energy_cost": self.energy_cost,
            "locked": self.lock.is_locked(today_key(today)),
            "locked_until": self.lock.locked_until(),
            "monsters": [m.to_dict() for m in available_monsters(creature)],
        }

    def workout_log(self) -> List[Workout]:
        log = self.kv.get(WORKOUT_LOG_KEY) or {}
        return [Workout.from_dict(w) for w in (log.get("workouts") or [])]

    def personal_records(self):
        return records_from_dict(self.kv.get(PERSONAL_RECORDS_KEY))

    # ------------------------------
    # Battle
    # ------------------------------
    def battle(
        self,
        monster_id: str,
        prep: Optional[PreparationState] = None,
        rng: Any = None,
        today: Optional[str] = None,
    ) -> BattleReport:
        prep = prep or PreparationState()
        today = today_key(today)

        creature = self.creature()

        monster = find_monster(monster_id, creature)
        if monster is None:
            return BattleReport(status="unknown_monster", message=f"Unknown monster '{monster_id}'.")

        if self.lock.is_locked(today):
            return BattleReport(status="locked", message=LOCKED_MESSAGE, monster=monster)

        stats = self.player_stats()
        stats = replace(stats, energy=clamp_energy_to_level(stats.energy, creature.level))
        if stats.energy < self.energy_cost:
            return BattleReport(
                status="no_energy",
                message=NO_ENERGY_MESSAGE,
                monster=monster,
                player_stats=stats,
            )

        outcome = simulate_battle(creature, monster, prep, rng=rng, config=self.battle_config)
        xp_gain = compute_xp_gain(monster.xp_reward, prep, outcome.did_win)

        stats = add_player_xp(spend_energy(stats, self.energy_cost), xp_gain)
        save_player_stats(self.kv, stats)
        creature = self.creatures.update(lambda current: apply_xp_gain(current, xp_gain))
        self.lock.record_result(outcome.did_win, today)

        logger.debug(
            "battle vs %s: win=%s xp=%s energy=%s", monster.id, outcome.did_win, xp_gain, stats.energy
        )
        return BattleReport(
            status="resolved",
            message=f"Victory! +{xp_gain} XP" if outcome.did_win else f"Defeat. Consolation +{xp_gain} XP",
            monster=monster,
            outcome=outcome,
            xp_gain=xp_gain,
            creature=creature,
            player_stats=stats,
        )

    # ------------------------------
    # Workouts
    # ------------------------------
    def log_workout(self, payload: Dict[str, Any], now: Optional[datetime] = None) -> WorkoutReport:
        now = now or datetime.now()
        draft = Workout.from_dict(payload or {})
        if not draft.has_logged_sets():
            return WorkoutReport(status="empty_workout", message=EMPTY_WORKOUT_MESSAGE)

        self.creature()
        workout_id = _new_id()
        saved_at = now.isoformat()

        metrics = calculate_workout_metrics(draft)
        records, achievements = evaluate_personal_records(
            draft.exercises, self.personal_records(), workout_id, saved_at
        )
        xp_earned = compute_workout_xp(metrics.xp_preview, achievements)
        boost = compute_stat_boosts(draft, metrics.total_volume, metrics.total_sets, achievements)

        workout = replace(
            draft,
            id=workout_id,
            date=saved_at,
            total_volume=metrics.total_volume,
            xp_earned=xp_earned,
            pr_achievements=achievements,
        )

        log = self.kv.get(WORKOUT_LOG_KEY) or {}
        self.kv.set(
            WORKOUT_LOG_KEY, {"workouts": [workout.to_dict()] + list(log.get("workouts") or [])}
        )
        self.kv.set(PERSONAL_RECORDS_KEY, records_to_dict(records))

        creature = self.creatures.update(lambda current: apply_xp_gain(current, xp_earned, boost))
        stats = refill_energy(add_player_xp(self.player_stats(), xp_earned), creature.level)
        save_player_stats(self.kv, stats)
        # exercising resets the battle cooldown
        self.lock.clear()

        return WorkoutReport(
            status="saved",
            message=f"Workout saved! {creature.display_name} gained +{xp_earned} XP.",
            workout=workout,
            achievements=achievements,
            stat_boost=boost,
            creature=creature,
            player_stats=stats,
        )

    # ------------------------------
    # Templates
    # ------------------------------
    def list_templates(self) -> List[Dict[str, Any]]:
        return list(self.kv.get(WORKOUT_TEMPLATES_KEY) or [])

    def save_template(self, name: str, payload: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        name = (name or "").strip()
        workout = Workout.from_dict(payload or {})
        if not name or not workout.has_logged_sets():
            return None

        template = {
            "id": _new_id(),
            "name": name,
            "workout": workout.to_dict(),
        }
        self.kv.set(WORKOUT_TEMPLATES_KEY, self.list_templates() + [template])
        return template

    def delete_template(self, template_id: str) -> bool:
        templates = self.list_templates()
        remaining = [t for t in templates if str(t.get("id")) != str(template_id)]
        if len(remaining) == len(templates):
            return False
        self.kv.set(WORKOUT_TEMPLATES_KEY, remaining)
        return True

    def apply_template(self, template_id: str, now: Optional[datetime] = None) -> Optional[Workout]:
        now = now or datetime.now()
        for template in self.list_templates():
            if str(template.get("id")) == str(template_id):
                source = Workout.from_dict(template.get("workout") or {})
                return Workout(
                    id=_new_id(),
                    title=source.title,
                    date=now.isoformat(),
                    notes=source.notes,
                    exercises=source.exercises,
                )
        return None

    # ------------------------------
    # Profile / reset
    # ------------------------------
    def update_profile(self, name: Optional[str], image_url: Optional[str] = None) -> Optional[Creature]:
        name = (name or "").strip()
        if not name:
            return None
        self.creature()

        def _apply(current: Creature) -> Creature:
            changes: Dict[str, Any] = {"name": name}
            if image_url is not None:
                changes["image_url"] = image_url
            return replace(current, **changes)

        return self.creatures.update(_apply)

    def reset(self) -> Creature:
        creature = self.creatures.reset()
        save_player_stats(self.kv, PlayerStats.default())
        self.kv.set(WORKOUT_LOG_KEY, {"workouts": []})
        self.kv.set(PERSONAL_RECORDS_KEY, {})
        self.lock.clear()
        return creature
