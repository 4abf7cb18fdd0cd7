# gymling/routes/common.py
from typing import Any

from flask import current_app
from flask_jwt_extended import get_jwt_identity

from ..game.battle import BattleConfig
from ..game.session import GameSession
from ..models.kv_entry import SqlKeyValueStore
from ..models.user import User


def _safe_int(v: Any, default: int = 0) -> int:
    try:
        return int(v)
    except Exception:
        return default


def current_user_id() -> int:
    return _safe_int(get_jwt_identity())


def current_user():
    return User.query.get(current_user_id())


def game_session_for(user_id: int) -> GameSession:
    """GameSession over the user's key-value rows, tuned from app config."""
    cfg = current_app.config
    return GameSession(
        SqlKeyValueStore(user_id),
        battle_config=BattleConfig(use_bag_items=bool(cfg.get("BATTLE_USE_BAG_ITEMS", True))),
        energy_cost=_safe_int(cfg.get("BATTLE_ENERGY_COST"), 10),
    )
