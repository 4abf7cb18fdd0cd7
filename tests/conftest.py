"""
Shared pytest fixtures for the Gymling test suite.

This module provides reusable fixtures for:
- Deterministic random sources for the battle engine
- Creatures and monsters with hand-computable numbers
- An in-memory key-value store
- A Flask app / client with an authenticated user
"""

import pytest

from config import TestingConfig
from gymling import create_app
from gymling.game.monsters import Element, Monster
from gymling.game.progression import BagItem, Creature, Stats


# =============================================================================
# Random sources
# =============================================================================


class ConstantRandom:
    """random() always returns the same value."""

    def __init__(self, value: float = 0.5):
        self.value = value
        self.calls = 0

    def random(self) -> float:
        self.calls += 1
        return self.value


@pytest.fixture
def mid_roll():
    """Every roll 0.5: both damage multipliers become exactly 1.05."""
    return ConstantRandom(0.5)


# =============================================================================
# Key-value store
# =============================================================================


class MemoryStore:
    def __init__(self, initial=None):
        self.data = dict(initial or {})
        self.writes = []

    def get(self, key):
        return self.data.get(key)

    def set(self, key, value):
        self.writes.append(key)
        self.data[key] = value


@pytest.fixture
def kv():
    return MemoryStore()


# =============================================================================
# Creatures / monsters
# =============================================================================


def make_creature(level=1, bag=(), **stats) -> Creature:
    base = {"strength": 1, "agility": 1, "stamina": 1, "intellect": 1}
    base.update(stats)
    return Creature(name="Sparky", level=level, stats=Stats(**base), bag=list(bag))


def make_monster(
    health=10000, attack=0, defense=0, element=Element.FIRE, xp_reward=100, monster_id="dummy"
) -> Monster:
    return Monster(
        id=monster_id,
        name="Dummy",
        level=1,
        element=element,
        health=health,
        attack=attack,
        defense=defense,
        recommended_str=1,
        description="Training dummy.",
        xp_reward=xp_reward,
        featured_loot="Straw",
    )


SNACK = BagItem("snack", "Protein Snack")
SPARK_CHARM = BagItem("charm-spark", "Spark Charm")
SMALL_POTION = BagItem("potion-small", "Small Potion")


@pytest.fixture
def plain_creature():
    """All stats 1, level 1, empty bag: 90 HP, attack 4.5, defense 1.0."""
    return make_creature()


@pytest.fixture
def training_dummy():
    """Huge HP, no attack, no defense."""
    return make_monster()


# =============================================================================
# Flask
# =============================================================================


@pytest.fixture
def app():
    app = create_app(TestingConfig)
    yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_headers(client):
    resp = client.post(
        "/api/auth/register",
        json={"email": "ash@example.com", "username": "ash", "password": "pikachu"},
    )
    assert resp.status_code == 201
    token = resp.get_json()["token"]
    return {"Authorization": f"Bearer {token}"}
