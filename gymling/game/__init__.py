"""
Creature progression and arena engine.

Pure game rules (no Flask, no SQL). State lives behind any object with
get(key) / set(key, value); see store.py.
"""
from .battle import (
    BattleConfig,
    BattleEvent,
    BattleOutcome,
    PreparationState,
    simulate_battle,
)
from .cooldown import BattleLockGate, today_key
from .monsters import Element, Monster, MONSTERS, available_monsters, create_ai_rival, find_monster
from .progression import (
    Creature,
    PlayerStats,
    Stats,
    check_evolution,
    clamp_energy_to_level,
    get_max_energy_for_level,
)
from .records import PersonalRecord, PRAchievement, Workout, evaluate_personal_records
from .rewards import apply_xp_gain, compute_stat_boosts, compute_xp_gain
from .session import BattleReport, GameSession, WorkoutReport
from .store import CreatureStore, normalize_creature

__all__ = [
    "BattleConfig",
    "BattleEvent",
    "BattleLockGate",
    "BattleOutcome",
    "BattleReport",
    "Creature",
    "CreatureStore",
    "Element",
    "GameSession",
    "MONSTERS",
    "Monster",
    "PersonalRecord",
    "PlayerStats",
    "PRAchievement",
    "PreparationState",
    "Stats",
    "Workout",
    "WorkoutReport",
    "apply_xp_gain",
    "available_monsters",
    "check_evolution",
    "clamp_energy_to_level",
    "compute_stat_boosts",
    "compute_xp_gain",
    "create_ai_rival",
    "evaluate_personal_records",
    "find_monster",
    "get_max_energy_for_level",
    "normalize_creature",
    "simulate_battle",
    "today_key",
]
