# gymling/game/records.py
import math
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Tuple

PR_XP_BONUS = 35

METRIC_MAX_WEIGHT = "maxWeight"
METRIC_TOTAL_VOLUME = "totalVolume"


def _num(value: Any) -> float:
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0
    return number if math.isfinite(number) else 0


def _amount(value: Any) -> float:
    # reps, weights and cardio figures are never negative
    return max(0, _num(value))


# -----------------------------
# Workout payload
# -----------------------------
@dataclass
class WorkoutSet:
    reps: float = 0
    weight: float = 0

    def to_dict(self) -> Dict[str, float]:
        return {"reps": self.reps, "weight": self.weight}


@dataclass
class CardioSegment:
    duration: float = 0
    distance: float = 0

    def to_dict(self) -> Dict[str, float]:
        return {"duration": self.duration, "distance": self.distance}


@dataclass
class Exercise:
    name: str
    sets: List[WorkoutSet] = field(default_factory=list)
    cardio: List[CardioSegment] = field(default_factory=list)

    def max_weight(self) -> float:
        return max((s.weight or 0 for s in self.sets), default=0)

    def total_volume(self) -> float:
        return sum((s.weight or 0) * (s.reps or 0) for s in self.sets)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "name": self.name,
            "sets": [s.to_dict() for s in self.sets],
        }
        if self.cardio:
            data["cardio"] = [c.to_dict() for c in self.cardio]
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Exercise":
        return cls(
            name=str(data.get("name") or ""),
            sets=[
                WorkoutSet(reps=_amount(s.get("reps")), weight=_amount(s.get("weight")))
                for s in (data.get("sets") or [])
                if isinstance(s, dict)
            ],
            cardio=[
                CardioSegment(duration=_amount(c.get("duration")), distance=_amount(c.get("distance")))
                for c in (data.get("cardio") or [])
                if isinstance(c, dict)
            ],
        )


@dataclass(frozen=True)
class PRAchievement:
    exercise: str
    metric: str  # "maxWeight" | "totalVolume"
    new_value: float
    date: str
    previous_value: Optional[float] = None
    xp_bonus: int = PR_XP_BONUS

    def to_dict(self) -> Dict[str, Any]:
        return {
            "exercise": self.exercise,
            "metric": self.metric,
            "previousValue": self.previous_value,
            "newValue": self.new_value,
            "xpBonus": self.xp_bonus,
            "date": self.date,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PRAchievement":
        return cls(
            exercise=data.get("exercise") or "",
            metric=data.get("metric") or METRIC_MAX_WEIGHT,
            new_value=_num(data.get("newValue")),
            date=data.get("date") or "",
            previous_value=data.get("previousValue"),
            xp_bonus=int(data.get("xpBonus") or PR_XP_BONUS),
        )


@dataclass
class Workout:
    id: str
    title: str = ""
    date: str = ""
    notes: str = ""
    exercises: List[Exercise] = field(default_factory=list)
    total_volume: Optional[float] = None
    xp_earned: Optional[int] = None
    pr_achievements: List[PRAchievement] = field(default_factory=list)

    def has_logged_sets(self) -> bool:
        """At least one named exercise with a set that has reps."""
        return any(
            ex.name.strip() and any((s.reps or 0) > 0 and (s.weight or 0) >= 0 for s in ex.sets)
            for ex in self.exercises
        )

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "date": self.date,
            "notes": self.notes,
            "exercises": [ex.to_dict() for ex in self.exercises],
        }
        if self.total_volume is not None:
            data["totalVolume"] = self.total_volume
        if self.xp_earned is not None:
            data["xpEarned"] = self.xp_earned
        if self.pr_achievements:
            data["prAchievements"] = [a.to_dict() for a in self.pr_achievements]
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Workout":
        return cls(
            id=str(data.get("id") or ""),
            title=str(data.get("title") or ""),
            date=str(data.get("date") or ""),
            notes=str(data.get("notes") or ""),
            exercises=[
                Exercise.from_dict(ex) for ex in (data.get("exercises") or []) if isinstance(ex, dict)
            ],
            total_volume=data.get("totalVolume"),
            xp_earned=data.get("xpEarned"),
            pr_achievements=[
                PRAchievement.from_dict(a) for a in (data.get("prAchievements") or [])
            ],
        )


# -----------------------------
# Personal records
# -----------------------------
@dataclass(frozen=True)
class PersonalRecord:
    id: str
    exercise: str
    max_weight: float
    total_volume: float
    updated_at: str
    workout_id: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "exercise": self.exercise,
            "maxWeight": self.max_weight,
            "totalVolume": self.total_volume,
            "updatedAt": self.updated_at,
            "workoutId": self.workout_id,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PersonalRecord":
        return cls(
            id=str(data.get("id") or ""),
            exercise=str(data.get("exercise") or ""),
            max_weight=_num(data.get("maxWeight")),
            total_volume=_num(data.get("totalVolume")),
            updated_at=str(data.get("updatedAt") or ""),
            workout_id=str(data.get("workoutId") or ""),
        )


PersonalRecordMap = Dict[str, PersonalRecord]


def normalize_exercise_name(name: str) -> str:
    return (name or "").strip().lower()


def records_from_dict(data: Optional[Dict[str, Any]]) -> PersonalRecordMap:
    return {
        key: PersonalRecord.from_dict(value)
        for key, value in (data or {}).items()
        if isinstance(value, dict)
    }


def records_to_dict(records: PersonalRecordMap) -> Dict[str, Any]:
    return {key: record.to_dict() for key, record in records.items()}


def evaluate_personal_records(
    exercises: List[Exercise],
    existing_records: PersonalRecordMap,
    workout_id: str,
    date: str,
) -> Tuple[PersonalRecordMap, List[PRAchievement]]:
    """
    Compare this session against the stored ledger.

    maxWeight and totalVolume ratchet independently, but only one
    achievement is reported per exercise and maxWeight wins when both
    improve. A first-ever session for an exercise counts as a PR for
    any metric above zero.
    """
    updated: PersonalRecordMap = dict(existing_records)
    achievements: List[PRAchievement] = []

    for exercise in exercises:
        display_name = exercise.name.strip()
        if not display_name:
            continue
        key = normalize_exercise_name(display_name)
        session_max = exercise.max_weight()
        session_volume = exercise.total_volume()

        previous = updated.get(key)
        prev_max = previous.max_weight if previous else 0
        prev_volume = previous.total_volume if previous else 0

        improved_max = session_max > prev_max
        improved_volume = session_volume > prev_volume
        if not improved_max and not improved_volume:
            continue

        updated[key] = PersonalRecord(
            id=previous.id if previous else key,
            exercise=display_name,
            max_weight=session_max if improved_max else prev_max,
            total_volume=session_volume if improved_volume else prev_volume,
            updated_at=date,
            workout_id=workout_id,
        )

        if improved_max:
            achievements.append(
                PRAchievement(
                    exercise=display_name,
                    metric=METRIC_MAX_WEIGHT,
                    previous_value=previous.max_weight if previous else None,
                    new_value=session_max,
                    date=date,
                )
            )
        else:
            achievements.append(
                PRAchievement(
                    exercise=display_name,
                    metric=METRIC_TOTAL_VOLUME,
                    previous_value=previous.total_volume if previous else None,
                    new_value=session_volume,
                    date=date,
                )
            )

    return updated, achievements
