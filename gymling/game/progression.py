# gymling/game/progression.py
import math
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional

STAT_KEYS = ("str", "agi", "sta", "int")

BASE_MAX_ENERGY = 30
ENERGY_PER_LEVEL = 5
BATTLE_ENERGY_COST = 10

EVOLUTION_LEVEL = 5
EVOLVED_NAME = "Gymbrute"
EVOLUTION_STAT_BONUS = 5

XP_TO_NEXT_GROWTH = 1.15
DEFAULT_XP_TO_NEXT = 100
DEFAULT_IMAGE_URL = (
    "https://images.unsplash.com/photo-1517836357463-d25dfeac3438?w=300&h=300&fit=crop"
)


def round_half_up(value: float) -> int:
    """Round .5 towards +infinity (the game's rounding everywhere)."""
    return int(math.floor(value + 0.5))


# -----------------------------
# Stats / bag
# -----------------------------
@dataclass
class Stats:
    """STR / AGI / STA / INT. Serialized with the short keys."""

    strength: float = 1
    agility: float = 1
    stamina: float = 1
    intellect: float = 1

    def plus(self, other: "Stats") -> "Stats":
        return Stats(
            strength=self.strength + other.strength,
            agility=self.agility + other.agility,
            stamina=self.stamina + other.stamina,
            intellect=self.intellect + other.intellect,
        )

    def plus_flat(self, amount: float) -> "Stats":
        return self.plus(Stats(amount, amount, amount, amount))

    def total(self) -> float:
        return self.strength + self.agility + self.stamina + self.intellect

    def get(self, key: str) -> float:
        return self.to_dict()[key]

    def to_dict(self) -> Dict[str, float]:
        return {
            "str": self.strength,
            "agi": self.agility,
            "sta": self.stamina,
            "int": self.intellect,
        }

    @classmethod
    def zero(cls) -> "Stats":
        return cls(0, 0, 0, 0)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]], base: Optional["Stats"] = None) -> "Stats":
        merged = (base or cls()).to_dict()
        for key in STAT_KEYS:
            value = (data or {}).get(key)
            if isinstance(value, (int, float)) and not isinstance(value, bool):
                merged[key] = value
        return cls(
            strength=merged["str"],
            agility=merged["agi"],
            stamina=merged["sta"],
            intellect=merged["int"],
        )


@dataclass(frozen=True)
class BagItem:
    id: str
    name: str
    description: str = ""
    icon: str = ""

    def to_dict(self) -> Dict[str, str]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "icon": self.icon,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BagItem":
        return cls(
            id=str(data.get("id") or ""),
            name=str(data.get("name") or ""),
            description=str(data.get("description") or ""),
            icon=str(data.get("icon") or ""),
        )


def default_bag() -> List[BagItem]:
    return [
        BagItem("potion-small", "Small Potion", "Restores 30 HP during a battle.", "\U0001f9ea"),
        BagItem("charm-spark", "Spark Charm", "Reduces lightning damage for one fight.", "⚡"),
        BagItem("snack", "Protein Snack", "Feed before battle to gain stamina.", "\U0001f356"),
    ]


# -----------------------------
# Creature
# -----------------------------
@dataclass
class Creature:
    name: str = ""
    level: int = 1
    evolution_stage: int = 1
    xp: float = 0
    xp_to_next: float = DEFAULT_XP_TO_NEXT
    image_url: Optional[str] = DEFAULT_IMAGE_URL
    stats: Stats = field(default_factory=Stats)
    bag: List[BagItem] = field(default_factory=default_bag)

    @classmethod
    def default(cls) -> "Creature":
        return cls()

    def has_item(self, item_id: str) -> bool:
        return any(item.id == item_id for item in self.bag)

    @property
    def display_name(self) -> str:
        return self.name if self.name and self.name.strip() else "Your creature"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "level": self.level,
            "evolutionStage": self.evolution_stage,
            "xp": self.xp,
            "xpToNext": self.xp_to_next,
            "imageUrl": self.image_url,
            "stats": self.stats.to_dict(),
            "bag": [item.to_dict() for item in self.bag],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Creature":
        """Strict-ish decode; see store.normalize_creature for the lenient path."""
        return cls(
            name=data.get("name") or "",
            level=int(data.get("level") or 1),
            evolution_stage=int(data.get("evolutionStage") or 1),
            xp=data.get("xp") or 0,
            xp_to_next=data.get("xpToNext") or DEFAULT_XP_TO_NEXT,
            image_url=data.get("imageUrl"),
            stats=Stats.from_dict(data.get("stats")),
            bag=[BagItem.from_dict(item) for item in (data.get("bag") or [])],
        )


# -----------------------------
# Player stats / energy
# -----------------------------
@dataclass
class PlayerStats:
    energy: int = BASE_MAX_ENERGY
    xp: int = 0

    @classmethod
    def default(cls) -> "PlayerStats":
        return cls()

    def to_dict(self) -> Dict[str, int]:
        return {"energy": self.energy, "xp": self.xp}

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "PlayerStats":
        data = data or {}
        energy = data.get("energy")
        xp = data.get("xp")
        return cls(
            energy=int(energy) if isinstance(energy, (int, float)) else BASE_MAX_ENERGY,
            xp=int(xp) if isinstance(xp, (int, float)) else 0,
        )


def get_max_energy_for_level(level: int) -> int:
    return BASE_MAX_ENERGY + max(level - 1, 0) * ENERGY_PER_LEVEL


def clamp_energy_to_level(energy: int, level: int) -> int:
    return max(0, min(energy, get_max_energy_for_level(level)))


def spend_energy(stats: PlayerStats, cost: int = BATTLE_ENERGY_COST) -> PlayerStats:
    return replace(stats, energy=max(0, stats.energy - cost))


def refill_energy(stats: PlayerStats, level: int) -> PlayerStats:
    return replace(stats, energy=get_max_energy_for_level(level))


def add_player_xp(stats: PlayerStats, amount: int) -> PlayerStats:
    return replace(stats, xp=stats.xp + max(0, amount))


# -----------------------------
# Evolution
# -----------------------------
def check_evolution(creature: Creature) -> Creature:
    """Stage 1 -> 2 once the creature reaches EVOLUTION_LEVEL. One-time."""
    if creature.level >= EVOLUTION_LEVEL and creature.evolution_stage == 1:
        return replace(
            creature,
            name=EVOLVED_NAME,
            evolution_stage=2,
            stats=creature.stats.plus_flat(EVOLUTION_STAT_BONUS),
        )
    return creature
