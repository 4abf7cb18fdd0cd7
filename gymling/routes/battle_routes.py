# gymling/routes/battle_routes.py
from flask import Blueprint, current_app, jsonify, request
from flask_jwt_extended import jwt_required

from .. import db
from ..game.battle import PREP_OPTIONS, PreparationState
from .common import current_user_id, game_session_for

battle_bp = Blueprint("battle", __name__)

# refusal status -> HTTP code
REFUSAL_CODES = {
    "unknown_monster": 404,
    "locked": 409,
    "no_energy": 409,
}


@battle_bp.route("/status", methods=["GET"])
@jwt_required()
def battle_status():
    """
    Returns energy, cooldown lock and the (up to 3) monsters closest to
    the creature's level, the AI rival included.
    """
    session = game_session_for(current_user_id())
    try:
        status = session.status()
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        current_app.logger.exception(f"[battle/status] failed: {e}")
        return jsonify({"message": "Failed to load arena status"}), 500

    status["prep_options"] = PREP_OPTIONS
    return jsonify(status), 200


@battle_bp.route("/fight", methods=["POST"])
@jwt_required()
def fight():
    """
    Body:
    {
      "monster_id": "ember-rat",
      "prep": { "fed": true, "charm": false, "potion": true, "coop": false }
    }
    """
    data = request.get_json(silent=True) or {}
    monster_id = data.get("monster_id") or data.get("monsterId") or ""
    monster_id = monster_id.strip() if isinstance(monster_id, str) else ""
    if not monster_id:
        return jsonify({"message": "monster_id is required and must be a string"}), 400

    prep = PreparationState.from_dict(data.get("prep"))
    user_id = current_user_id()
    session = game_session_for(user_id)

    try:
        report = session.battle(monster_id, prep)
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        current_app.logger.exception(f"[battle/fight] failed: {e}")
        return jsonify({"message": "Failed to resolve battle"}), 500

    if not report.resolved:
        return jsonify(report.to_dict()), REFUSAL_CODES.get(report.status, 400)

    current_app.logger.info(
        f"[battle/fight] user_id={user_id} monster={monster_id} "
        f"win={report.outcome.did_win} xp={report.xp_gain}"
    )
    return jsonify(report.to_dict()), 200
