# gymling/game/monsters.py
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

from .progression import STAT_KEYS, Creature, Stats, round_half_up


class Element(str, Enum):
    FIRE = "Fire"
    WATER = "Water"
    EARTH = "Earth"
    AIR = "Air"
    LIGHTNING = "Lightning"
    SHADOW = "Shadow"
    LIGHT = "Light"


STAT_ELEMENT_AFFINITY = {
    "str": Element.FIRE,
    "agi": Element.AIR,
    "sta": Element.EARTH,
    "int": Element.LIGHTNING,
}

ELEMENT_OPPOSITES = {
    Element.FIRE: Element.WATER,
    Element.WATER: Element.FIRE,
    Element.EARTH: Element.AIR,
    Element.AIR: Element.EARTH,
    Element.LIGHTNING: Element.SHADOW,
    Element.SHADOW: Element.LIGHT,
    Element.LIGHT: Element.SHADOW,
}

AI_RIVAL_ID = "ai-rival"
MATCHUP_LEVEL_WINDOW = 10


@dataclass(frozen=True)
class Monster:
    id: str
    name: str
    level: int
    element: Element
    health: int
    attack: int
    defense: int
    recommended_str: int
    description: str
    xp_reward: int
    featured_loot: str
    icon: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "level": self.level,
            "element": self.element.value,
            "health": self.health,
            "attack": self.attack,
            "defense": self.defense,
            "recommendedStr": self.recommended_str,
            "description": self.description,
            "xpReward": self.xp_reward,
            "featuredLoot": self.featured_loot,
            "icon": self.icon,
        }


def _img(photo: str) -> str:
    return f"https://images.unsplash.com/{photo}?w=96&h=96&fit=crop"


MONSTERS: List[Monster] = [
    Monster(
        "hydra-prime", "Hydra Prime", 18, Element.WATER, 260, 34, 22, 16,
        "A regenerative serpent that splits into new heads when struck. "
        "Target the core crystal to stop the regen.",
        120, "Phoenix Feather", _img("photo-1508674861872-a51e06c50c9b"),
    ),
    Monster(
        "storm-wyrm", "Storm Wyrm", 14, Element.LIGHTNING, 210, 30, 16, 14,
        "Sweeps the arena with charged winds that punish low agility.",
        100, "Tempest Scale", _img("photo-1500530855697-b586d89ba3ee"),
    ),
    Monster(
        "iron-golem", "Iron Golem", 12, Element.EARTH, 240, 24, 28, 15,
        "Slow but unyielding guardian forged from haunted steel.",
        90, "Shard of Fortitude", _img("photo-1489515217757-5fd1be406fef"),
    ),
    Monster(
        "night-geist", "Night Geist", 16, Element.SHADOW, 200, 32, 18, 13,
        "Phases in and out of reality to siphon stamina.",
        110, "Void Cloak", _img("photo-1500534314209-a25ddb2bd429"),
    ),
    Monster(
        "ember-rat", "Ember Rat", 5, Element.FIRE, 120, 16, 8, 8,
        "A fiery scavenger that ignites the ground with each scurry.",
        60, "Cinder Tail", _img("photo-1474511320723-9a56873867b5"),
    ),
    Monster(
        "sapling-guardian", "Sapling Guardian", 2, Element.EARTH, 90, 10, 6, 4,
        "A tiny treant that defends the forest with thorny vines.",
        35, "Verdant Twig", _img("photo-1469474968028-56623f02e42e"),
    ),
    Monster(
        "tidal-sprite", "Tidal Sprite", 3, Element.WATER, 100, 12, 7, 5,
        "Splashes attackers with bursts of pressurized surf.",
        40, "Bubble Pearl", _img("photo-1507525428034-b723cf961d3e"),
    ),
    Monster(
        "gale-fox", "Gale Fox", 4, Element.AIR, 110, 14, 8, 6,
        "Dashes around opponents, slicing with wind-forged tails.",
        50, "Wind Tail", _img("photo-1518791841217-8f162f1e1131"),
    ),
    Monster(
        "dune-scorpion", "Dune Scorpion", 7, Element.EARTH, 150, 18, 12, 9,
        "Ambushes foes beneath the sand with venom-tipped claws.",
        70, "Sting Barbs", _img("photo-1500534310680-81a9a0c3c061"),
    ),
    Monster(
        "glacier-owl", "Glacier Owl", 9, Element.AIR, 170, 20, 14, 10,
        "Freezes prey mid-flight with glacial winds.",
        80, "Frost Feather", _img("photo-1501706362039-c6e08e4b7b9f"),
    ),
    Monster(
        "pyro-colossus", "Pyro Colossus", 22, Element.FIRE, 320, 40, 26, 20,
        "An ancient molten sentinel that erupts with magma fists.",
        150, "Inferno Core", _img("photo-1500530855697-b586d89ba3ee"),
    ),
    Monster(
        "void-singer", "Void Singer", 27, Element.SHADOW, 360, 44, 30, 23,
        "Channels cosmic echoes to shatter defenses.",
        180, "Echo Shard", _img("photo-1500534310680-81a9a0c3c061"),
    ),
    Monster(
        "terra-leviathan", "Terra Leviathan", 32, Element.EARTH, 420, 48, 38, 28,
        "A slumbering behemoth that crushes foes with tectonic waves.",
        210, "Gaia Scale", _img("photo-1441974231531-c6227db76b6e"),
    ),
    Monster(
        "astral-phoenix", "Astral Phoenix", 40, Element.AIR, 480, 56, 34, 32,
        "Reborn from stardust, bathes the arena in celestial fire.",
        260, "Stellar Plume", _img("photo-1441974231531-c6227db76b6e"),
    ),
]


# -----------------------------
# AI rival
# -----------------------------
def dominant_element(creature: Optional[Creature]) -> Element:
    if creature is None:
        return Element.SHADOW
    stats = creature.stats.to_dict()
    # max() keeps the first key on ties
    top_key = max(STAT_KEYS, key=lambda k: stats[k])
    return STAT_ELEMENT_AFFINITY.get(top_key, Element.SHADOW)


def opposite_element(element: Element) -> Element:
    return ELEMENT_OPPOSITES.get(element, Element.SHADOW)


def create_ai_rival(creature: Optional[Creature]) -> Monster:
    """
    Procedural sparring partner built from the creature's own stats.
    It fights with the element opposite the creature's dominant stat
    and always sits one level above it (minimum level 2).
    """
    stats = creature.stats if creature is not None else Stats()
    player_element = dominant_element(creature)
    rival_element = opposite_element(player_element)
    rival_level = max(2, (creature.level if creature is not None else 1) + 1)
    total_stats = stats.total()

    return Monster(
        id=AI_RIVAL_ID,
        name="Trainer 9000",
        level=rival_level,
        element=rival_element,
        health=round_half_up((stats.stamina + rival_level) * 22 + total_stats * 1.6),
        attack=round_half_up(stats.strength * 1.4 + stats.agility * 1.1 + rival_level * 2.5),
        defense=round_half_up(stats.stamina * 0.9 + stats.intellect * 1.2 + rival_level * 1.5),
        recommended_str=max(stats.strength + 2, round_half_up(rival_level * 0.8) + 5),
        description=(
            f"An adaptive construct that inverts your {player_element.value.lower()} style "
            f"into {rival_element.value.lower()} counters. Always arrives one step ahead."
        ),
        xp_reward=max(60, rival_level * 12),
        featured_loot="Mirror Core",
        icon=MONSTERS[0].icon,
    )


# -----------------------------
# Roster / matchups
# -----------------------------
def full_roster(creature: Optional[Creature]) -> List[Monster]:
    return [create_ai_rival(creature)] + list(MONSTERS)


def available_monsters(creature: Optional[Creature], limit: int = 3) -> List[Monster]:
    roster = full_roster(creature)
    if creature is None:
        return roster[:limit]

    in_range = [
        m for m in roster if abs(m.level - creature.level) <= MATCHUP_LEVEL_WINDOW
    ]
    in_range.sort(key=lambda m: abs(m.level - creature.level))
    pool = in_range or roster
    return pool[:limit]


def find_monster(monster_id: str, creature: Optional[Creature] = None) -> Optional[Monster]:
    for monster in full_roster(creature):
        if monster.id == monster_id:
            return monster
    return None
