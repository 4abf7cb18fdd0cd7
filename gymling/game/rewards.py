# gymling/game/rewards.py
import math
from dataclasses import dataclass, replace
from typing import List, Optional

from .battle import PreparationState
from .progression import XP_TO_NEXT_GROWTH, Creature, Stats, check_evolution, round_half_up
from .records import METRIC_MAX_WEIGHT, METRIC_TOTAL_VOLUME, PRAchievement, Workout

COOP_XP_MULTIPLIER = 1.15
MIN_WORKOUT_XP = 20


def get_xp_multiplier(prep: PreparationState) -> float:
    return COOP_XP_MULTIPLIER if prep.coop else 1


def compute_xp_gain(base_reward: int, prep: PreparationState, did_win: bool) -> int:
    """
    Full reward on a win, a quarter (floored) on a loss. The coop
    multiplier applies either way.
    """
    base = base_reward if did_win else math.floor(base_reward / 4)
    return round_half_up(base * get_xp_multiplier(prep))


# -----------------------------
# Workout XP / stat boosts
# -----------------------------
@dataclass(frozen=True)
class WorkoutMetrics:
    total_volume: float
    total_sets: int
    xp_preview: int


def calculate_workout_metrics(workout: Workout) -> WorkoutMetrics:
    total_volume = 0
    total_sets = 0
    for exercise in workout.exercises:
        for s in exercise.sets:
            total_volume += (s.weight or 0) * (s.reps or 0)
            total_sets += 1

    xp_preview = max(MIN_WORKOUT_XP, round_half_up(total_volume / 15) + total_sets * 4)
    return WorkoutMetrics(total_volume=total_volume, total_sets=total_sets, xp_preview=xp_preview)


def compute_workout_xp(xp_preview: int, achievements: List[PRAchievement]) -> int:
    return xp_preview + sum(a.xp_bonus for a in achievements)


def compute_stat_boosts(
    workout: Workout,
    total_volume: float,
    total_sets: int,
    achievements: List[PRAchievement],
) -> Stats:
    max_weight_prs = sum(1 for a in achievements if a.metric == METRIC_MAX_WEIGHT)
    volume_prs = sum(1 for a in achievements if a.metric == METRIC_TOTAL_VOLUME)
    has_notes = 1 if (workout.notes or "").strip() else 0

    return Stats(
        strength=max(0, math.floor(total_volume / 800)) + max_weight_prs,
        agility=math.floor(len(workout.exercises) / 3),
        stamina=max(0, math.floor(total_sets / 6)),
        intellect=has_notes + volume_prs,
    )


# -----------------------------
# Level-up cascade
# -----------------------------
def apply_xp_gain(
    creature: Creature, xp_gain: float, stat_boost: Optional[Stats] = None
) -> Creature:
    """
    Add XP and resolve every level-up it pays for. Each level grows
    xp_to_next by 15% and adds +1 to all four stats; the workout
    stat_boost lands once afterwards, then evolution is checked.
    """
    if creature.xp_to_next <= 0:
        raise ValueError("xp_to_next must be positive")

    xp = creature.xp + max(xp_gain, 0)
    xp_to_next = creature.xp_to_next
    level = creature.level
    stats = creature.stats

    while xp >= xp_to_next:
        xp -= xp_to_next
        level += 1
        xp_to_next = round_half_up(xp_to_next * XP_TO_NEXT_GROWTH)
        stats = stats.plus_flat(1)

    if stat_boost is not None:
        stats = stats.plus(stat_boost)

    return check_evolution(
        replace(creature, xp=xp, xp_to_next=xp_to_next, level=level, stats=stats)
    )
