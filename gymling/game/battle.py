# gymling/game/battle.py
"""
Turn-based battle engine.

simulate_battle() is the only combat implementation in the project.
Differences between callers (e.g. whether bag items grant bonuses) are
expressed through BattleConfig, and the random source is injected so a
battle can be replayed exactly.
"""
import random
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from .monsters import Element, Monster
from .progression import Creature, round_half_up

SNACK_ITEM = "snack"
SPARK_CHARM_ITEM = "charm-spark"
SMALL_POTION_ITEM = "potion-small"

MAX_ROUNDS = 6
POTION_THRESHOLD = 0.4

PREP_KEYS = ("fed", "charm", "potion", "coop")


def _flag(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    if isinstance(value, (bool, int, float)):
        return bool(value)
    return False


@dataclass(frozen=True)
class PreparationState:
    fed: bool = False
    charm: bool = False
    potion: bool = False
    coop: bool = False

    def to_dict(self) -> Dict[str, bool]:
        return {k: getattr(self, k) for k in PREP_KEYS}

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "PreparationState":
        data = data if isinstance(data, dict) else {}
        return cls(**{k: _flag(data.get(k)) for k in PREP_KEYS})


PREP_OPTIONS = [
    {"key": "fed", "title": "Feed creature", "description": "Gain +2 STA before battle."},
    {
        "key": "charm",
        "title": "Equip charm",
        "description": "Reduces incoming damage from the enemy element.",
    },
    {"key": "potion", "title": "Queue potion", "description": "Auto-heal once when HP is low."},
    {"key": "coop", "title": "Invite friend", "description": "Adds ally strikes and +15% XP."},
]


@dataclass(frozen=True)
class BattleConfig:
    use_bag_items: bool = True
    max_rounds: int = MAX_ROUNDS


@dataclass(frozen=True)
class BattleEvent:
    round: int
    attacker: str  # "creature" | "monster"
    damage: int
    message: str
    creature_hp: int
    monster_hp: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "round": self.round,
            "attacker": self.attacker,
            "damage": self.damage,
            "message": self.message,
            "creatureHP": self.creature_hp,
            "monsterHP": self.monster_hp,
        }


@dataclass(frozen=True)
class BattleOutcome:
    did_win: bool
    log: Tuple[str, ...]
    events: Tuple[BattleEvent, ...]
    initial_creature_hp: int
    initial_monster_hp: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "didWin": self.did_win,
            "log": list(self.log),
            "events": [e.to_dict() for e in self.events],
            "initialCreatureHP": self.initial_creature_hp,
            "initialMonsterHP": self.initial_monster_hp,
        }


MISSING_CREATURE_OUTCOME = BattleOutcome(
    did_win=False,
    log=("Missing creature data.",),
    events=(),
    initial_creature_hp=0,
    initial_monster_hp=0,
)


@dataclass
class _Loadout:
    """Everything derived from creature + monster + prep before round 1."""

    sta_bonus: int = 0
    defense_bonus: int = 0
    snack: bool = False
    spark_charm: bool = False
    bag_potion: bool = False
    potion_available: bool = False
    notes: List[str] = field(default_factory=list)


def _build_loadout(
    creature: Creature, monster: Monster, prep: PreparationState, config: BattleConfig
) -> _Loadout:
    use_bag = config.use_bag_items
    snack = use_bag and creature.has_item(SNACK_ITEM)
    # the spark charm only works against lightning
    spark_charm = (
        use_bag
        and creature.has_item(SPARK_CHARM_ITEM)
        and monster.element == Element.LIGHTNING
    )
    bag_potion = use_bag and creature.has_item(SMALL_POTION_ITEM)

    return _Loadout(
        sta_bonus=(2 if prep.fed else 0) + (1 if snack else 0),
        defense_bonus=(5 if prep.charm else 0) + (3 if spark_charm else 0),
        snack=snack,
        spark_charm=spark_charm,
        bag_potion=bag_potion,
        potion_available=prep.potion or bag_potion,
    )


def initial_creature_hp(creature: Creature, sta_bonus: int = 0) -> int:
    return int((creature.stats.stamina + sta_bonus) * 20 + creature.level * 10 + 60)


def creature_attack(creature: Creature, snack: bool = False) -> float:
    s = creature.stats
    attack = s.strength * 1.4 + s.agility * 0.8 + s.intellect * 0.5 + creature.level * 1.8
    return attack * 1.05 if snack else attack


def creature_defense(creature: Creature, defense_bonus: int = 0) -> float:
    s = creature.stats
    return s.stamina * 0.7 + s.intellect * 0.3 + defense_bonus


def coop_strike_damage(creature: Creature) -> int:
    s = creature.stats
    return max(8, round_half_up((s.strength + s.agility) * 0.4))


def simulate_battle(
    creature: Optional[Creature],
    monster: Monster,
    prep: Optional[PreparationState] = None,
    rng: Any = None,
    config: Optional[BattleConfig] = None,
) -> BattleOutcome:
    """
    Run up to config.max_rounds rounds. Each round:
      1. creature hits (ends the battle if the monster drops)
      2. ally strike when coop is on (same check)
      3. monster counters, reduced by the spark charm against lightning
      4. one-time potion heal if creature HP fell to 40% or below

    A double knockout is a loss. A missing creature returns
    MISSING_CREATURE_OUTCOME instead of raising.
    """
    if creature is None:
        return MISSING_CREATURE_OUTCOME

    prep = prep or PreparationState()
    config = config or BattleConfig()
    rng = rng if rng is not None else random.Random()

    loadout = _build_loadout(creature, monster, prep, config)
    name = creature.display_name

    start_creature_hp = initial_creature_hp(creature, loadout.sta_bonus)
    start_monster_hp = monster.health
    player_hp = start_creature_hp
    monster_hp = start_monster_hp

    player_attack = creature_attack(creature, loadout.snack)
    player_defense = creature_defense(creature, loadout.defense_bonus)
    coop_strike = coop_strike_damage(creature) if prep.coop else 0
    potion_heal = round_half_up(start_creature_hp * (0.35 if loadout.bag_potion else 0.3))
    potion_available = loadout.potion_available

    log: List[str] = []
    events: List[BattleEvent] = []

    def record(round_no: int, attacker: str, damage: int, message: str) -> None:
        log.append(message)
        events.append(
            BattleEvent(
                round=round_no,
                attacker=attacker,
                damage=max(damage, 0),
                message=message,
                creature_hp=max(player_hp, 0),
                monster_hp=max(monster_hp, 0),
            )
        )

    round_no = 1
    while round_no <= config.max_rounds and player_hp > 0 and monster_hp > 0:
        # 1) creature attack
        player_damage = max(
            8, round_half_up(player_attack * (0.85 + rng.random() * 0.4) - monster.defense)
        )
        monster_hp -= player_damage
        record(
            round_no,
            "creature",
            player_damage,
            f"Round {round_no}: {name} hits {monster.name} for {max(player_damage, 0)} dmg.",
        )
        if monster_hp <= 0:
            monster_hp = 0
            break

        # 2) ally strike
        if coop_strike:
            monster_hp -= coop_strike
            record(
                round_no,
                "creature",
                coop_strike,
                f"Round {round_no}: Ally strike deals {coop_strike} dmg.",
            )
            if monster_hp <= 0:
                monster_hp = 0
                break

        # 3) monster counter
        monster_damage = max(
            6, round_half_up(monster.attack * (0.9 + rng.random() * 0.3) - player_defense)
        )
        mitigation_note = ""
        if loadout.spark_charm:
            mitigated = round_half_up(monster_damage * 0.85)
            if mitigated < monster_damage:
                monster_damage = mitigated
                mitigation_note = " Spark charm absorbs part of the strike."
        player_hp -= monster_damage
        record(
            round_no,
            "monster",
            monster_damage,
            f"Round {round_no}: {monster.name} counters for "
            f"{max(monster_damage, 0)} dmg.{mitigation_note}",
        )

        # 4) potion
        if (
            potion_available
            and player_hp > 0
            and player_hp <= start_creature_hp * POTION_THRESHOLD
        ):
            potion_available = False
            player_hp = min(player_hp + potion_heal, start_creature_hp)
            record(round_no, "creature", 0, f"Healing potion restores {potion_heal} HP!")

        round_no += 1

    did_win = monster_hp <= 0 and player_hp > 0
    log.append(
        f"{name} prevails!"
        if did_win
        else f"{monster.name} overwhelms {name}. Retreat and regroup."
    )

    return BattleOutcome(
        did_win=did_win,
        log=tuple(log),
        events=tuple(events),
        initial_creature_hp=start_creature_hp,
        initial_monster_hp=start_monster_hp,
    )
