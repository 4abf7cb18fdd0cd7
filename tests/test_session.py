"""
GameSession flow tests: battle entry gates, rewards, workouts, templates.
"""

from datetime import datetime

import pytest

from conftest import ConstantRandom, MemoryStore
from gymling.game.battle import BattleConfig, PreparationState
from gymling.game.cooldown import BATTLE_LOCK_KEY
from gymling.game.session import GameSession
from gymling.game.store import (
    CREATURE_KEY,
    PERSONAL_RECORDS_KEY,
    PLAYER_STATS_KEY,
    WORKOUT_LOG_KEY,
)

TODAY = "2025-05-20"
NOW = datetime(2025, 5, 20, 18, 30)

# Stalemate or worse for a fresh creature: 8 dmg max per hit vs 320 HP
HOPELESS_FIGHT = "pyro-colossus"


def _bench_day(weight=60, reps=5, sets=3, notes=""):
    return {
        "title": "Bench day",
        "notes": notes,
        "exercises": [
            {"name": "Bench Press", "sets": [{"reps": reps, "weight": weight}] * sets},
        ],
    }


@pytest.fixture
def session(kv):
    return GameSession(kv)


# =============================================================================
# Battle gates
# =============================================================================


class TestBattleGates:
    def test_unknown_monster(self, session, kv):
        report = session.battle("missingno", today=TODAY)
        assert report.status == "unknown_monster"
        assert kv.get(PLAYER_STATS_KEY) is None

    def test_locked_refuses_without_spending(self, session, kv):
        kv.set(BATTLE_LOCK_KEY, {"lockedUntil": TODAY})

        report = session.battle("ember-rat", today=TODAY)

        assert report.status == "locked"
        assert "recover" in report.message
        assert session.player_stats().energy == 30

    def test_yesterdays_lock_does_not_apply(self, session, kv):
        kv.set(BATTLE_LOCK_KEY, {"lockedUntil": "2025-05-19"})
        report = session.battle("ember-rat", rng=ConstantRandom(), today=TODAY)
        assert report.resolved

    def test_not_enough_energy(self, kv):
        kv.set(PLAYER_STATS_KEY, {"energy": 9, "xp": 0})
        session = GameSession(kv)

        report = session.battle("ember-rat", today=TODAY)

        assert report.status == "no_energy"
        assert report.message == "Not enough energy for another battle."
        assert kv.get(PLAYER_STATS_KEY) == {"energy": 9, "xp": 0}

    def test_stored_energy_above_cap_is_clamped(self, kv):
        kv.set(PLAYER_STATS_KEY, {"energy": 100, "xp": 0})
        session = GameSession(kv)

        report = session.battle(HOPELESS_FIGHT, rng=ConstantRandom(), today=TODAY)

        # level 1 cap is 30, so one battle leaves 20
        assert report.player_stats.energy == 20
        assert kv.get(PLAYER_STATS_KEY)["energy"] == 20
        assert session.status(today="2025-05-21")["energy"] == 20

    def test_energy_cost_is_configurable(self, kv):
        kv.set(PLAYER_STATS_KEY, {"energy": 9, "xp": 0})
        report = GameSession(kv, energy_cost=5).battle("ember-rat", rng=ConstantRandom(), today=TODAY)
        assert report.resolved
        assert report.player_stats.energy == 4


# =============================================================================
# Battle resolution
# =============================================================================


class TestBattleResolution:
    def test_loss_debits_energy_awards_consolation_and_locks(self, session, kv):
        report = session.battle(HOPELESS_FIGHT, rng=ConstantRandom(), today=TODAY)

        assert report.resolved
        assert report.outcome.did_win is False
        # floor(150 / 4)
        assert report.xp_gain == 37
        assert report.message == "Defeat. Consolation +37 XP"
        assert kv.get(PLAYER_STATS_KEY) == {"energy": 20, "xp": 37}
        assert kv.get(CREATURE_KEY)["xp"] == 37
        assert kv.get(BATTLE_LOCK_KEY) == {"lockedUntil": TODAY}

    def test_coop_boosts_consolation(self, session):
        report = session.battle(HOPELESS_FIGHT, PreparationState(coop=True), rng=ConstantRandom(), today=TODAY)
        # round(37 * 1.15) = round(42.55)
        assert report.xp_gain == 43

    def test_win_clears_lock_and_pays_full(self, kv):
        kv.set(CREATURE_KEY, {"name": "Rex", "level": 3, "stats": {"str": 60, "agi": 5, "sta": 10, "int": 5}})
        kv.set(BATTLE_LOCK_KEY, {"lockedUntil": "2025-05-19"})
        session = GameSession(kv)

        report = session.battle("ember-rat", rng=ConstantRandom(), today=TODAY)

        assert report.outcome.did_win is True
        assert report.xp_gain == 60
        assert report.message == "Victory! +60 XP"
        assert kv.get(BATTLE_LOCK_KEY) is None

    def test_battle_xp_levels_the_creature(self, kv):
        kv.set(CREATURE_KEY, {"level": 3, "xp": 90, "xpToNext": 100, "stats": {"str": 60}})
        session = GameSession(kv)

        report = session.battle("ember-rat", rng=ConstantRandom(), today=TODAY)

        assert report.creature.level == 4
        assert report.creature.xp == 50

    def test_second_battle_after_loss_is_refused(self, session):
        session.battle(HOPELESS_FIGHT, rng=ConstantRandom(), today=TODAY)
        report = session.battle("ember-rat", rng=ConstantRandom(), today=TODAY)
        assert report.status == "locked"

    def test_bag_items_can_be_disabled(self, kv):
        with_bag = GameSession(MemoryStore()).battle(HOPELESS_FIGHT, rng=ConstantRandom(), today=TODAY)
        without_bag = GameSession(MemoryStore(), battle_config=BattleConfig(use_bag_items=False)).battle(
            HOPELESS_FIGHT, rng=ConstantRandom(), today=TODAY
        )
        # default bag carries a snack: +1 STA -> +20 HP
        assert with_bag.outcome.initial_creature_hp == without_bag.outcome.initial_creature_hp + 20


# =============================================================================
# Workouts
# =============================================================================


class TestLogWorkout:
    def test_empty_workout_is_refused(self, session, kv):
        report = session.log_workout({"exercises": [{"name": "Bench", "sets": [{"reps": 0, "weight": 50}]}]})
        assert report.status == "empty_workout"
        assert kv.get(WORKOUT_LOG_KEY) is None

    def test_first_workout(self, session, kv):
        report = session.log_workout(_bench_day(), now=NOW)

        assert report.saved
        # volume 900, 3 sets: round(900 / 15) + 12 = 72, plus one PR
        assert report.workout.total_volume == 900
        assert report.workout.xp_earned == 72 + 35
        assert [a.metric for a in report.achievements] == ["maxWeight"]
        assert report.workout.date == NOW.isoformat()

        log = kv.get(WORKOUT_LOG_KEY)["workouts"]
        assert len(log) == 1
        assert log[0]["xpEarned"] == 107
        assert log[0]["prAchievements"][0]["xpBonus"] == 35
        assert "bench press" in kv.get(PERSONAL_RECORDS_KEY)

    def test_xp_and_boosts_reach_the_creature(self, session):
        report = session.log_workout(_bench_day(notes="new belt"), now=NOW)

        creature = report.creature
        # 107 XP: one level (+1 all), then str +1 (volume) +1 (PR), int +1 (notes)
        assert creature.level == 2
        assert creature.xp == 7
        assert creature.stats.to_dict() == {"str": 4, "agi": 2, "sta": 2, "int": 3}
        assert report.player_stats.xp == 107

    def test_second_workout_prepends_and_detects_volume_pr(self, session):
        session.log_workout(_bench_day(weight=60, sets=3), now=NOW)
        report = session.log_workout(_bench_day(weight=60, sets=4), now=NOW)

        assert [a.metric for a in report.achievements] == ["totalVolume"]
        log = session.workout_log()
        assert len(log) == 2
        assert log[0].id == report.workout.id
        assert session.personal_records()["bench press"].total_volume == 1200

    def test_no_repeat_pr(self, session):
        session.log_workout(_bench_day(), now=NOW)
        report = session.log_workout(_bench_day(), now=NOW)
        assert report.achievements == []

    def test_negative_set_values_never_lower_stats(self, session):
        payload = {
            "exercises": [
                {"name": "Bench", "sets": [{"reps": 5, "weight": 20}, {"reps": 100, "weight": -100}]},
            ],
        }
        report = session.log_workout(payload, now=NOW)

        assert report.saved
        assert report.workout.exercises[0].sets[1].weight == 0
        assert report.workout.total_volume == 100
        assert report.stat_boost.strength >= 0
        assert report.creature.stats.strength >= 1

    def test_non_finite_weight_is_treated_as_zero(self, session):
        payload = {"exercises": [{"name": "Bench", "sets": [{"reps": 5, "weight": "nan"}, {"reps": 5, "weight": "inf"}]}]}
        report = session.log_workout(payload, now=NOW)

        assert report.saved
        assert report.workout.total_volume == 0
        # minimum workout XP, no volume to speak of
        assert report.workout.xp_earned >= 20

    def test_workout_refills_energy(self, session, kv):
        kv.set(PLAYER_STATS_KEY, {"energy": 0, "xp": 0})
        report = session.log_workout(_bench_day(), now=NOW)
        # level 2 after the workout
        assert report.player_stats.energy == 35


class TestCooldownResetByExercise:
    def test_lose_then_workout_clears_lock(self, session, kv):
        report = session.battle(HOPELESS_FIGHT, rng=ConstantRandom(), today=TODAY)
        assert report.outcome.did_win is False
        assert kv.get(BATTLE_LOCK_KEY) == {"lockedUntil": TODAY}

        session.log_workout(_bench_day(), now=NOW)

        assert kv.get(BATTLE_LOCK_KEY) is None
        assert session.battle("ember-rat", rng=ConstantRandom(), today=TODAY).resolved


# =============================================================================
# Templates / profile / reset
# =============================================================================


class TestTemplates:
    def test_save_list_apply_delete(self, session):
        template = session.save_template("  Push ", _bench_day())
        assert template["name"] == "Push"
        assert [t["id"] for t in session.list_templates()] == [template["id"]]

        workout = session.apply_template(template["id"], now=NOW)
        assert workout.id != template["id"]
        assert workout.date == NOW.isoformat()
        assert workout.exercises[0].name == "Bench Press"

        assert session.delete_template(template["id"]) is True
        assert session.list_templates() == []
        assert session.delete_template(template["id"]) is False

    def test_template_needs_name_and_sets(self, session):
        assert session.save_template("", _bench_day()) is None
        assert session.save_template("Empty", {"exercises": []}) is None

    def test_apply_unknown_template(self, session):
        assert session.apply_template("nope") is None


class TestProfileAndReset:
    def test_rename(self, session, kv):
        creature = session.update_profile("  Rex ", "https://example.com/rex.png")
        assert creature.name == "Rex"
        assert kv.get(CREATURE_KEY)["imageUrl"] == "https://example.com/rex.png"

    def test_blank_name_refused(self, session):
        assert session.update_profile("   ") is None

    def test_reset(self, session, kv):
        session.log_workout(_bench_day(), now=NOW)
        session.battle(HOPELESS_FIGHT, rng=ConstantRandom(), today=TODAY)

        creature = session.reset()

        assert creature.level == 1
        assert kv.get(PLAYER_STATS_KEY) == {"energy": 30, "xp": 0}
        assert kv.get(WORKOUT_LOG_KEY) == {"workouts": []}
        assert kv.get(PERSONAL_RECORDS_KEY) == {}
        assert kv.get(BATTLE_LOCK_KEY) is None


def test_status(session):
    status = session.status(today=TODAY)
    assert status["max_energy"] == 30
    assert status["energy"] == 30
    assert status["locked"] is False
    assert len(status["monsters"]) == 3
